"""Service layer - unit of work and blocking adapters.

Following Cosmic Python Chapter 6:
- Unit of Work binds repositories to a shared store context
- Callers that cannot await use the portal-backed blocking adapters
"""

from .blocking import BlockingRepository, BlockingUnitOfWork, open_blocking_unit_of_work
from .cosmosdb_unit_of_work import AbstractUnitOfWork, CosmosDBUnitOfWork


__all__ = [
    "AbstractUnitOfWork",
    "BlockingRepository",
    "BlockingUnitOfWork",
    "CosmosDBUnitOfWork",
    "open_blocking_unit_of_work",
]
