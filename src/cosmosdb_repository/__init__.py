"""Repository and unit-of-work façades over Azure Cosmos DB."""

from cosmosdb_repository.adapters import (
    AbstractDocumentClient,
    AbstractRepository,
    CosmosDBRepository,
    CosmosDocumentClient,
    InMemoryDocumentClient,
)
from cosmosdb_repository.config import CosmosSettings
from cosmosdb_repository.domain import ArgumentError, ArgumentNullError, Entity, PagedList, in_pages_of
from cosmosdb_repository.service_layer import (
    AbstractUnitOfWork,
    BlockingRepository,
    BlockingUnitOfWork,
    CosmosDBUnitOfWork,
    open_blocking_unit_of_work,
)


__all__ = [
    "AbstractDocumentClient",
    "AbstractRepository",
    "AbstractUnitOfWork",
    "ArgumentError",
    "ArgumentNullError",
    "BlockingRepository",
    "BlockingUnitOfWork",
    "CosmosDBRepository",
    "CosmosDBUnitOfWork",
    "CosmosDocumentClient",
    "CosmosSettings",
    "Entity",
    "InMemoryDocumentClient",
    "PagedList",
    "in_pages_of",
    "open_blocking_unit_of_work",
]
