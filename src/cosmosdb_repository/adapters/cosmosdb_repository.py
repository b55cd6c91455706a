"""Repository façade over a Cosmos DB collection."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
import logging
from typing import Any, Generic, Self, TypeVar

from opentelemetry.trace import SpanKind

from cosmosdb_repository.adapters.document_client import (
    DEFAULT_OFFER_THROUGHPUT,
    DEFAULT_PARTITION_KEY_PATH,
    IN_OPERATOR,
    AbstractDocumentClient,
    collection_link,
    conflict_error,
    database_link,
    document_link,
    not_found_error,
    partition_key_value,
)
from cosmosdb_repository.adapters.provisioning import ensure_store
from cosmosdb_repository.domain import requires
from cosmosdb_repository.domain.mapping import ENTITY_TYPE_FIELD, ID_FIELD, from_data_model, to_data_model
from cosmosdb_repository.domain.model import Entity
from cosmosdb_repository.domain.paging import PagedList, in_pages_of
from cosmosdb_repository.observability.context import store_binding
from cosmosdb_repository.observability.tracing import create_span, store_span_attributes


logger = logging.getLogger(__name__)

TEntity = TypeVar("TEntity", bound=Entity)

Predicate = Callable[[TEntity], bool]


class AbstractRepository(ABC, Generic[TEntity]):
    """Abstract repository for one entity type.

    Capability contract: create, read, update, delete, query, exists.
    """

    model: type[TEntity]

    @property
    def supports_aggregates(self) -> bool:
        """Whether the store evaluates aggregates (counts) server-side."""
        return False

    @abstractmethod
    async def add(self, item: TEntity) -> None:
        """Insert an item as a new document."""
        raise NotImplementedError

    async def add_many(self, items: Iterable[TEntity]) -> None:
        """Insert items one at a time, in order.

        The first failure aborts the batch; items before it stay written.
        """
        requires.not_none("items", items)
        for item in items:
            await self.add(item)

    @abstractmethod
    async def any(self, unique_id: str) -> bool:
        """Check whether an item with this id exists."""
        raise NotImplementedError

    async def delete(self, item: TEntity) -> None:
        """Delete an item by its identity."""
        requires.not_none("item", item)
        await self.delete_by_id(item.unique_id)

    @abstractmethod
    async def delete_by_id(self, unique_id: str) -> None:
        """Delete the item with this id."""
        raise NotImplementedError

    async def find(self, predicate: Predicate) -> list[TEntity]:
        """Return items matching predicate, evaluated client-side."""
        requires.not_none("predicate", predicate)
        return [item for item in await self.get_all() if predicate(item)]

    async def find_page(self, page_index: int, page_size: int, predicate: Predicate) -> PagedList[TEntity]:
        """Return one page of the items matching predicate."""
        return in_pages_of(await self.find(predicate), page_size).get_page(page_index)

    @abstractmethod
    async def get_all(self) -> list[TEntity]:
        """Return every item."""
        raise NotImplementedError

    @abstractmethod
    async def get(self, unique_id: str) -> TEntity | None:
        """Return the item with this id, or None."""
        raise NotImplementedError

    @abstractmethod
    async def get_many(self, unique_ids: Iterable[str]) -> list[TEntity]:
        """Return the items whose id is in unique_ids."""
        raise NotImplementedError

    async def get_page(self, page_index: int, page_size: int) -> PagedList[TEntity]:
        """Return one page of all items."""
        return in_pages_of(await self.get_all(), page_size).get_page(page_index)

    @abstractmethod
    async def update(self, item: TEntity) -> None:
        """Insert or replace an item (upsert)."""
        raise NotImplementedError


class CosmosDBRepository(AbstractRepository[TEntity]):
    """Repository for one entity type in one Cosmos collection.

    Construction only validates and binds; ``initialize()`` (or ``create()``,
    or ``async with``) ensures the database and collection exist. Documents
    carry an ``entityType`` discriminator so several entity types can share a
    collection; every query is scoped to this repository's type.

    Ids are unique across the whole collection. Deleting an id held by another
    entity type raises not-found; updating one raises a conflict, as adding
    one already does.

    Store failures (not found, conflict, throttling) propagate unmodified.
    """

    def __init__(
        self,
        model: type[TEntity],
        client: AbstractDocumentClient,
        database_id: str,
        collection_id: str | None = None,
        *,
        offer_throughput: int = DEFAULT_OFFER_THROUGHPUT,
        partition_key_path: str = DEFAULT_PARTITION_KEY_PATH,
        initialized: bool = False,
    ):
        requires.not_none("model", model)
        requires.not_none("client", client)
        requires.not_null_or_empty("database_id", database_id)
        if collection_id is None:
            collection_id = model.__name__
        requires.not_null_or_empty("collection_id", collection_id)

        self.model = model
        self.client = client
        self.database_id = database_id
        self.collection_id = collection_id
        self.database_link = database_link(database_id)
        self.collection_link = collection_link(database_id, collection_id)
        self.offer_throughput = offer_throughput
        self.partition_key_path = partition_key_path
        self._initialized = initialized

    @classmethod
    async def create(
        cls,
        model: type[TEntity],
        client: AbstractDocumentClient,
        database_id: str,
        collection_id: str | None = None,
        **kwargs: Any,
    ) -> Self:
        """Construct a repository and ensure its database and collection exist."""
        repository = cls(model, client, database_id, collection_id, **kwargs)
        await repository.initialize()
        return repository

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def supports_aggregates(self) -> bool:
        return True

    async def initialize(self) -> None:
        """Ensure the database and collection exist; later calls do nothing."""
        if self._initialized:
            return
        with self._operation("ensure_store"):
            await ensure_store(
                self.client,
                self.database_id,
                self.collection_id,
                offer_throughput=self.offer_throughput,
                partition_key_path=self.partition_key_path,
            )
        self._initialized = True

    async def __aenter__(self) -> Self:
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        # The client handle belongs to the caller
        return None

    @contextmanager
    def _operation(self, name: str) -> Iterator[None]:
        attributes = store_span_attributes(self.database_id, self.collection_id, self.model.entity_type())
        with store_binding(self.database_id, self.collection_id):
            with create_span(f"cosmosdb.{name}", kind=SpanKind.CLIENT, attributes=attributes):
                logger.debug("cosmosdb.%s on %s", name, self.collection_link)
                yield

    def _scope(self, **filters: Any) -> dict[str, Any]:
        return {ENTITY_TYPE_FIELD: self.model.entity_type(), **filters}

    async def add(self, item: TEntity) -> None:
        requires.not_none("item", item)
        with self._operation("create_document"):
            await self.client.create_document(self.database_id, self.collection_id, to_data_model(item))

    async def any(self, unique_id: str) -> bool:
        requires.not_null_or_empty("unique_id", unique_id)
        with self._operation("count_documents"):
            count = await self.client.count_documents(
                self.database_id, self.collection_id, self._scope(**{ID_FIELD: unique_id})
            )
        return count > 0

    async def delete_by_id(self, unique_id: str) -> None:
        requires.not_null_or_empty("unique_id", unique_id)
        with self._operation("delete_document"):
            documents = await self.client.query_documents(
                self.database_id, self.collection_id, self._scope(**{ID_FIELD: unique_id})
            )
            # A document owned by another entity type counts as missing
            if not documents:
                raise not_found_error(document_link(self.database_id, self.collection_id, unique_id))
            await self.client.delete_document(
                self.database_id,
                self.collection_id,
                unique_id,
                partition_key=partition_key_value(documents[0], self.partition_key_path),
            )

    async def get_all(self) -> list[TEntity]:
        with self._operation("query_documents"):
            documents = await self.client.query_documents(self.database_id, self.collection_id, self._scope())
        return [from_data_model(self.model, document) for document in documents]

    async def get(self, unique_id: str) -> TEntity | None:
        requires.not_null_or_empty("unique_id", unique_id)
        with self._operation("query_documents"):
            documents = await self.client.query_documents(
                self.database_id, self.collection_id, self._scope(**{ID_FIELD: unique_id})
            )
        if not documents:
            return None
        return from_data_model(self.model, documents[0])

    async def get_many(self, unique_ids: Iterable[str]) -> list[TEntity]:
        requires.not_none("unique_ids", unique_ids)
        candidates = list(unique_ids)
        if not candidates:
            return []
        with self._operation("query_documents"):
            documents = await self.client.query_documents(
                self.database_id, self.collection_id, self._scope(**{ID_FIELD: {IN_OPERATOR: candidates}})
            )
        return [from_data_model(self.model, document) for document in documents]

    async def update(self, item: TEntity) -> None:
        requires.not_none("item", item)
        document = to_data_model(item)
        with self._operation("upsert_document"):
            existing = await self.client.query_documents(
                self.database_id, self.collection_id, {ID_FIELD: item.unique_id}
            )
            if any(other.get(ENTITY_TYPE_FIELD) != document[ENTITY_TYPE_FIELD] for other in existing):
                raise conflict_error(document_link(self.database_id, self.collection_id, item.unique_id))
            await self.client.upsert_document(self.database_id, self.collection_id, document)
