"""Adapters layer - document clients and the repository façade.

Following Cosmic Python Chapter 2: Repository Pattern
Abstracts document storage behind an entity-typed repository.
"""

from .cosmosdb_repository import AbstractRepository, CosmosDBRepository
from .document_client import (
    AbstractDocumentClient,
    CosmosDocumentClient,
    InMemoryDocumentClient,
)
from .provisioning import (
    create_collection_if_not_exists,
    create_database_if_not_exists,
    ensure_store,
)


__all__ = [
    "AbstractDocumentClient",
    "AbstractRepository",
    "CosmosDBRepository",
    "CosmosDocumentClient",
    "InMemoryDocumentClient",
    "create_collection_if_not_exists",
    "create_database_if_not_exists",
    "ensure_store",
]
