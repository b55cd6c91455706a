"""Synchronous adapters over the async repository contract.

Blocking callers get the same operations as the async façade; each call is
run to completion on an anyio blocking portal (an event loop in a worker
thread). The portal must outlive every adapter created from it.
"""

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Generic, TypeVar

from anyio.from_thread import BlockingPortal, start_blocking_portal

from cosmosdb_repository.adapters.cosmosdb_repository import AbstractRepository, Predicate
from cosmosdb_repository.adapters.document_client import (
    DEFAULT_OFFER_THROUGHPUT,
    DEFAULT_PARTITION_KEY_PATH,
    AbstractDocumentClient,
)
from cosmosdb_repository.domain.model import Entity
from cosmosdb_repository.domain.paging import PagedList
from cosmosdb_repository.service_layer.cosmosdb_unit_of_work import CosmosDBUnitOfWork


TEntity = TypeVar("TEntity", bound=Entity)


class BlockingRepository(Generic[TEntity]):
    """Blocking view of an async repository."""

    def __init__(self, repository: AbstractRepository[TEntity], portal: BlockingPortal):
        self.repository = repository
        self.portal = portal

    @property
    def supports_aggregates(self) -> bool:
        return self.repository.supports_aggregates

    def add(self, item: TEntity) -> None:
        self.portal.call(self.repository.add, item)

    def add_many(self, items: Iterable[TEntity]) -> None:
        self.portal.call(self.repository.add_many, items)

    def any(self, unique_id: str) -> bool:
        return self.portal.call(self.repository.any, unique_id)

    def delete(self, item: TEntity) -> None:
        self.portal.call(self.repository.delete, item)

    def delete_by_id(self, unique_id: str) -> None:
        self.portal.call(self.repository.delete_by_id, unique_id)

    def find(self, predicate: Predicate) -> list[TEntity]:
        return self.portal.call(self.repository.find, predicate)

    def find_page(self, page_index: int, page_size: int, predicate: Predicate) -> PagedList[TEntity]:
        return self.portal.call(self.repository.find_page, page_index, page_size, predicate)

    def get_all(self) -> list[TEntity]:
        return self.portal.call(self.repository.get_all)

    def get(self, unique_id: str) -> TEntity | None:
        return self.portal.call(self.repository.get, unique_id)

    def get_many(self, unique_ids: Iterable[str]) -> list[TEntity]:
        return self.portal.call(self.repository.get_many, unique_ids)

    def get_page(self, page_index: int, page_size: int) -> PagedList[TEntity]:
        return self.portal.call(self.repository.get_page, page_index, page_size)

    def update(self, item: TEntity) -> None:
        self.portal.call(self.repository.update, item)


class BlockingUnitOfWork:
    """Blocking view of a CosmosDBUnitOfWork."""

    def __init__(self, unit_of_work: CosmosDBUnitOfWork, portal: BlockingPortal):
        self.unit_of_work = unit_of_work
        self.portal = portal

    def get_repository(self, model: type[TEntity]) -> BlockingRepository[TEntity]:
        return BlockingRepository(self.unit_of_work.get_repository(model), self.portal)

    def commit(self) -> None:
        self.portal.call(self.unit_of_work.commit)

    def rollback(self) -> None:
        self.portal.call(self.unit_of_work.rollback)


@contextmanager
def open_blocking_unit_of_work(
    client: AbstractDocumentClient,
    database_id: str,
    collection_id: str,
    *,
    offer_throughput: int = DEFAULT_OFFER_THROUGHPUT,
    partition_key_path: str = DEFAULT_PARTITION_KEY_PATH,
) -> Iterator[BlockingUnitOfWork]:
    """Start a portal, initialize a unit of work on it, and yield its blocking view.

    Arguments are validated before the portal starts, so invalid input fails
    without spinning up a worker thread.
    """
    unit_of_work = CosmosDBUnitOfWork(
        client,
        database_id,
        collection_id,
        offer_throughput=offer_throughput,
        partition_key_path=partition_key_path,
    )
    with start_blocking_portal() as portal:
        portal.call(unit_of_work.initialize)
        yield BlockingUnitOfWork(unit_of_work, portal)
