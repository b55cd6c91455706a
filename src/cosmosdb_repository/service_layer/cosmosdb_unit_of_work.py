"""Unit of Work for Cosmos DB."""

from abc import ABC, abstractmethod
import logging
from typing import Self, TypeVar

from cosmosdb_repository.adapters.cosmosdb_repository import AbstractRepository, CosmosDBRepository
from cosmosdb_repository.adapters.document_client import (
    DEFAULT_OFFER_THROUGHPUT,
    DEFAULT_PARTITION_KEY_PATH,
    AbstractDocumentClient,
)
from cosmosdb_repository.adapters.provisioning import ensure_store
from cosmosdb_repository.config import CosmosSettings
from cosmosdb_repository.domain import requires
from cosmosdb_repository.domain.model import Entity


logger = logging.getLogger(__name__)

TEntity = TypeVar("TEntity", bound=Entity)


class AbstractUnitOfWork(ABC):
    """Abstract Unit of Work handing out entity repositories."""

    async def __aenter__(self) -> Self:
        """Enter the unit-of-work scope."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the scope - rollback when the block raised."""
        if exc_type is not None:
            await self.rollback()

    @abstractmethod
    def get_repository(self, model: type[TEntity]) -> AbstractRepository[TEntity]:
        """Return a repository for model bound to this unit of work."""
        raise NotImplementedError

    @abstractmethod
    async def commit(self):
        """Commit the transaction."""
        raise NotImplementedError

    @abstractmethod
    async def rollback(self):
        """Rollback the transaction."""
        raise NotImplementedError


class CosmosDBUnitOfWork(AbstractUnitOfWork):
    """Unit of Work bound to one Cosmos database/collection pair.

    Cosmos has no cross-document transaction here: every repository write is
    visible as soon as it returns, so ``commit`` and ``rollback`` do nothing.
    ``initialize()`` ensures the database and collection exist and is run on
    ``async with`` entry. The client handle belongs to the caller and is not
    closed on exit.
    """

    def __init__(
        self,
        client: AbstractDocumentClient,
        database_id: str,
        collection_id: str,
        *,
        offer_throughput: int = DEFAULT_OFFER_THROUGHPUT,
        partition_key_path: str = DEFAULT_PARTITION_KEY_PATH,
    ):
        requires.not_none("client", client)
        requires.not_null_or_empty("database_id", database_id)
        requires.not_null_or_empty("collection_id", collection_id)

        self.client = client
        self.database_id = database_id
        self.collection_id = collection_id
        self.offer_throughput = offer_throughput
        self.partition_key_path = partition_key_path
        self._initialized = False

    @classmethod
    def from_settings(cls, client: AbstractDocumentClient, settings: CosmosSettings) -> Self:
        """Bind a unit of work to the database/collection named in settings."""
        return cls(
            client,
            settings.database_id,
            settings.collection_id,
            offer_throughput=settings.offer_throughput,
            partition_key_path=settings.partition_key_path,
        )

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Ensure the database and collection exist; later calls do nothing."""
        if self._initialized:
            return
        await ensure_store(
            self.client,
            self.database_id,
            self.collection_id,
            offer_throughput=self.offer_throughput,
            partition_key_path=self.partition_key_path,
        )
        self._initialized = True
        logger.debug("Unit of work bound to %s/%s", self.database_id, self.collection_id)

    async def __aenter__(self) -> Self:
        await self.initialize()
        return self

    def get_repository(self, model: type[TEntity]) -> CosmosDBRepository[TEntity]:
        """Return a new repository for model sharing this client and binding."""
        return CosmosDBRepository(
            model,
            self.client,
            self.database_id,
            self.collection_id,
            offer_throughput=self.offer_throughput,
            partition_key_path=self.partition_key_path,
            initialized=self._initialized,
        )

    async def commit(self):
        """Writes are already durable; nothing to flush."""

    async def rollback(self):
        """Writes cannot be undone; nothing to discard."""
