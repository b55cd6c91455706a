"""Centralized configuration for cosmosdb-repository using Pydantic Settings."""

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Minimum provisioned throughput Cosmos accepts for a container
MIN_OFFER_THROUGHPUT = 400


class CosmosSettings(BaseSettings):
    """Strictly typed configuration loaded from ``COSMOSDB_*`` environment variables.

    Credentials come from either a connection string or an endpoint; the key
    is optional with an endpoint, in which case the ambient Azure identity is
    used instead.
    """

    model_config = SettingsConfigDict(
        env_prefix="COSMOSDB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Account
    endpoint: str = Field(default="", description="Cosmos account endpoint, e.g. https://acct.documents.azure.com:443/")
    key: str | None = Field(default=None, description="Account key; managed identity is used when unset")
    connection_string: str | None = Field(default=None, description="Full account connection string")

    # Target
    database_id: str = Field(default="", description="Database holding the collection")
    collection_id: str = Field(default="", description="Collection (container) the unit of work binds")
    offer_throughput: int = Field(
        default=MIN_OFFER_THROUGHPUT,
        ge=MIN_OFFER_THROUGHPUT,
        description="Request units provisioned when a collection has to be created",
    )
    partition_key_path: str = Field(default="/id", pattern=r"^/", description="Partition key path for new collections")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    # Tracing
    tracing_enabled: bool = Field(default=False, description="Export OpenTelemetry spans over OTLP/HTTP")
    otlp_endpoint: str = Field(default="", description="OTLP/HTTP traces endpoint")
    service_name: str = Field(default="cosmosdb-repository", description="service.name resource attribute")

    @field_validator("endpoint")
    @classmethod
    def _check_endpoint_scheme(cls, value: str) -> str:
        value = value.strip()
        if value and not value.startswith(("https://", "http://")):
            raise ValueError("COSMOSDB_ENDPOINT must be an http(s) URL")
        return value

    @model_validator(mode="after")
    def _check_tracing(self) -> "CosmosSettings":
        if self.tracing_enabled and not self.otlp_endpoint:
            raise ValueError("COSMOSDB_OTLP_ENDPOINT must be set when COSMOSDB_TRACING_ENABLED is true")
        return self

    def has_credentials(self) -> bool:
        """Check whether enough is configured to build a service client."""
        return bool(self.connection_string or self.endpoint)
