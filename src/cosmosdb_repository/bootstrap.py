"""Wire settings, logging, tracing and the document client together."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import logging

from cosmosdb_repository.adapters.document_client import AbstractDocumentClient, CosmosDocumentClient
from cosmosdb_repository.config import CosmosSettings
from cosmosdb_repository.observability.logging import configure_logging
from cosmosdb_repository.observability.tracing import configure_trace_exporter
from cosmosdb_repository.service_layer.cosmosdb_unit_of_work import CosmosDBUnitOfWork


logger = logging.getLogger(__name__)


def configure_observability(settings: CosmosSettings) -> None:
    """Apply logging and tracing settings process-wide."""
    configure_logging(settings.log_level, settings.log_json)
    configure_trace_exporter(settings)


@asynccontextmanager
async def open_unit_of_work(
    settings: CosmosSettings | None = None,
    client: AbstractDocumentClient | None = None,
) -> AsyncIterator[CosmosDBUnitOfWork]:
    """Yield an initialized unit of work for the configured database/collection.

    A client built here from settings is closed on exit; a client passed in
    stays open and remains the caller's to close.
    """
    settings = settings or CosmosSettings()
    owns_client = client is None
    if client is None:
        client = CosmosDocumentClient.from_settings(settings)

    try:
        async with CosmosDBUnitOfWork.from_settings(client, settings) as uow:
            yield uow
    finally:
        if owns_client:
            await client.close()
            logger.debug("Closed document client for %s", settings.database_id)
