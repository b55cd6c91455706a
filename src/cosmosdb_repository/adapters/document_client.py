"""Document client port and its implementations.

The repository façade only ever talks to ``AbstractDocumentClient``. Two
implementations ship here:

- ``CosmosDocumentClient`` delegates to ``azure.cosmos.aio.CosmosClient``
- ``InMemoryDocumentClient`` keeps documents in dicts for tests and local runs

Both raise ``azure.cosmos.exceptions`` errors, so callers see the same
failure types whichever client is behind the façade.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
import copy
import logging
import re
import time
from typing import TYPE_CHECKING, Any
import uuid

from azure.cosmos import PartitionKey, exceptions
from azure.cosmos.aio import CosmosClient


if TYPE_CHECKING:
    from azure.core.credentials_async import AsyncTokenCredential

    from cosmosdb_repository.config import CosmosSettings


logger = logging.getLogger(__name__)

DEFAULT_OFFER_THROUGHPUT = 400
DEFAULT_PARTITION_KEY_PATH = "/id"

IN_OPERATOR = "$in"

_FIELD_NAME_RE = re.compile(r"^[A-Za-z0-9_]+(\.[A-Za-z0-9_]+)*$")

Filters = Mapping[str, Any]


def database_link(database_id: str) -> str:
    """Resource link for a database."""
    return f"dbs/{database_id}"


def collection_link(database_id: str, collection_id: str) -> str:
    """Resource link for a collection."""
    return f"{database_link(database_id)}/colls/{collection_id}"


def document_link(database_id: str, collection_id: str, document_id: str) -> str:
    """Resource link for a document."""
    return f"{collection_link(database_id, collection_id)}/docs/{document_id}"


def validate_field_name(field_name: str) -> str:
    """Reject field names that could not be safely embedded in SQL."""
    if not _FIELD_NAME_RE.match(field_name):
        raise ValueError(f"Invalid filter field name '{field_name}'")
    return field_name


def build_query(filters: Filters, select: str = "*") -> tuple[str, list[dict[str, Any]]]:
    """Translate equality / ``$in`` filters into parameterized Cosmos SQL.

    Returns:
        The query text and its parameter list. An empty ``$in`` list yields a
        query with a ``false`` predicate so no documents match.
    """
    clauses: list[str] = []
    parameters: list[dict[str, Any]] = []

    for key, value in filters.items():
        validate_field_name(key)

        if isinstance(value, Mapping):
            unsupported = set(value) - {IN_OPERATOR}
            if unsupported:
                raise ValueError(f"Unsupported filter operators for '{key}': {sorted(unsupported)}")

            candidates = list(value[IN_OPERATOR])
            if not candidates:
                clauses.append("false")
                continue

            names = []
            for candidate in candidates:
                name = f"@p{len(parameters)}"
                names.append(name)
                parameters.append({"name": name, "value": candidate})
            clauses.append(f"c.{key} IN ({', '.join(names)})")
        else:
            name = f"@p{len(parameters)}"
            parameters.append({"name": name, "value": value})
            clauses.append(f"c.{key} = {name}")

    query = f"SELECT {select} FROM c"
    if clauses:
        query += " WHERE " + " AND ".join(clauses)
    return query, parameters


class AbstractDocumentClient(ABC):
    """Async document-store operations addressed by database and collection ids."""

    @abstractmethod
    async def read_database(self, database_id: str) -> dict[str, Any]:
        """Read database properties; raises CosmosResourceNotFoundError when missing."""
        raise NotImplementedError

    @abstractmethod
    async def create_database(self, database_id: str) -> None:
        """Create a database; raises CosmosResourceExistsError when it exists."""
        raise NotImplementedError

    @abstractmethod
    async def read_collection(self, database_id: str, collection_id: str) -> dict[str, Any]:
        """Read collection properties; raises CosmosResourceNotFoundError when missing."""
        raise NotImplementedError

    @abstractmethod
    async def create_collection(
        self,
        database_id: str,
        collection_id: str,
        *,
        offer_throughput: int = DEFAULT_OFFER_THROUGHPUT,
        partition_key_path: str = DEFAULT_PARTITION_KEY_PATH,
    ) -> None:
        """Create a collection with a provisioned throughput offer."""
        raise NotImplementedError

    @abstractmethod
    async def create_document(self, database_id: str, collection_id: str, document: dict[str, Any]) -> dict[str, Any]:
        """Insert a new document; raises CosmosResourceExistsError on duplicate id."""
        raise NotImplementedError

    @abstractmethod
    async def upsert_document(self, database_id: str, collection_id: str, document: dict[str, Any]) -> dict[str, Any]:
        """Insert or replace a document keyed by its id."""
        raise NotImplementedError

    @abstractmethod
    async def delete_document(
        self, database_id: str, collection_id: str, document_id: str, partition_key: Any = None
    ) -> None:
        """Delete a document; raises CosmosResourceNotFoundError when missing.

        partition_key is the document's partition key value; None means the
        collection is partitioned on the id.
        """
        raise NotImplementedError

    @abstractmethod
    async def query_documents(self, database_id: str, collection_id: str, filters: Filters) -> list[dict[str, Any]]:
        """Return every document matching the filters."""
        raise NotImplementedError

    @abstractmethod
    async def count_documents(self, database_id: str, collection_id: str, filters: Filters) -> int:
        """Count documents matching the filters."""
        raise NotImplementedError

    async def close(self) -> None:
        """Release client resources."""
        return


class CosmosDocumentClient(AbstractDocumentClient):
    """Document client backed by the Azure Cosmos DB async SDK (Core/SQL API).

    Every call is a direct delegation; SDK exceptions propagate unmodified.
    """

    def __init__(self, client: CosmosClient, credential: AsyncTokenCredential | None = None):
        self.client = client
        # Token credential built by from_settings; closed together with the client
        self.credential = credential

    @classmethod
    def from_settings(cls, settings: CosmosSettings) -> CosmosDocumentClient:
        """Build the SDK client from a connection string, a key, or the ambient Azure identity."""
        if settings.connection_string:
            logger.info("Using connection string authentication")
            return cls(CosmosClient.from_connection_string(settings.connection_string))

        if not settings.endpoint:
            raise ValueError("COSMOSDB_ENDPOINT or COSMOSDB_CONNECTION_STRING must be set")

        if settings.key:
            logger.info("Using key-based authentication for %s", settings.endpoint)
            return cls(CosmosClient(settings.endpoint, credential=settings.key))

        from azure.identity.aio import DefaultAzureCredential

        logger.info("Using managed identity authentication for %s", settings.endpoint)
        credential = DefaultAzureCredential()
        return cls(CosmosClient(settings.endpoint, credential=credential), credential=credential)

    def _container(self, database_id: str, collection_id: str):
        return self.client.get_database_client(database_id).get_container_client(collection_id)

    async def read_database(self, database_id: str) -> dict[str, Any]:
        return await self.client.get_database_client(database_id).read()

    async def create_database(self, database_id: str) -> None:
        await self.client.create_database(id=database_id)

    async def read_collection(self, database_id: str, collection_id: str) -> dict[str, Any]:
        return await self._container(database_id, collection_id).read()

    async def create_collection(
        self,
        database_id: str,
        collection_id: str,
        *,
        offer_throughput: int = DEFAULT_OFFER_THROUGHPUT,
        partition_key_path: str = DEFAULT_PARTITION_KEY_PATH,
    ) -> None:
        database = self.client.get_database_client(database_id)
        await database.create_container(
            id=collection_id,
            partition_key=PartitionKey(path=partition_key_path),
            offer_throughput=offer_throughput,
        )

    async def create_document(self, database_id: str, collection_id: str, document: dict[str, Any]) -> dict[str, Any]:
        return await self._container(database_id, collection_id).create_item(body=document)

    async def upsert_document(self, database_id: str, collection_id: str, document: dict[str, Any]) -> dict[str, Any]:
        return await self._container(database_id, collection_id).upsert_item(body=document)

    async def delete_document(
        self, database_id: str, collection_id: str, document_id: str, partition_key: Any = None
    ) -> None:
        if partition_key is None:
            partition_key = document_id
        await self._container(database_id, collection_id).delete_item(item=document_id, partition_key=partition_key)

    async def query_documents(self, database_id: str, collection_id: str, filters: Filters) -> list[dict[str, Any]]:
        query, parameters = build_query(filters)
        container = self._container(database_id, collection_id)
        return [item async for item in container.query_items(query=query, parameters=parameters)]

    async def count_documents(self, database_id: str, collection_id: str, filters: Filters) -> int:
        query, parameters = build_query(filters, select="VALUE COUNT(1)")
        container = self._container(database_id, collection_id)
        # Cross-partition aggregates come back as one partial count per partition
        return sum([value async for value in container.query_items(query=query, parameters=parameters)])

    async def close(self) -> None:
        await self.client.close()
        if self.credential is not None:
            await self.credential.close()


def _lookup(document: Mapping[str, Any], dotted: str) -> tuple[bool, Any]:
    current: Any = document
    for part in dotted.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return False, None
        current = current[part]
    return True, current


def partition_key_value(document: Mapping[str, Any], partition_key_path: str) -> Any:
    """Read the partition key value at partition_key_path (e.g. ``/address/city``) from a document."""
    found, value = _lookup(document, ".".join(partition_key_path.strip("/").split("/")))
    if not found:
        raise ValueError(f"Document has no value at partition key path '{partition_key_path}'")
    return value


def matches_filters(document: Mapping[str, Any], filters: Filters) -> bool:
    """Evaluate equality / ``$in`` filters against a document in memory."""
    for key, expected in filters.items():
        validate_field_name(key)
        found, actual = _lookup(document, key)
        if isinstance(expected, Mapping):
            unsupported = set(expected) - {IN_OPERATOR}
            if unsupported:
                raise ValueError(f"Unsupported filter operators for '{key}': {sorted(unsupported)}")
            if not found or actual not in list(expected[IN_OPERATOR]):
                return False
        elif not found or actual != expected:
            return False
    return True


def not_found_error(link: str) -> exceptions.CosmosResourceNotFoundError:
    return exceptions.CosmosResourceNotFoundError(status_code=404, message=f"Resource Not Found: {link}")


def conflict_error(link: str) -> exceptions.CosmosResourceExistsError:
    return exceptions.CosmosResourceExistsError(
        status_code=409, message=f"Entity with the specified id already exists in the system: {link}"
    )


class InMemoryDocumentClient(AbstractDocumentClient):
    """In-memory document client for testing.

    Mirrors the service's observable behaviour closely enough for the
    façades: not-found and conflict errors, id-keyed upserts, and the
    ``_ts``/``_etag`` system properties on stored documents.
    """

    def __init__(self):
        self._databases: dict[str, dict[str, dict[str, dict[str, Any]]]] = {}
        self._collection_properties: dict[tuple[str, str], dict[str, Any]] = {}

    def _collection(self, database_id: str, collection_id: str) -> dict[str, dict[str, Any]]:
        database = self._databases.get(database_id)
        if database is None:
            raise not_found_error(database_link(database_id))
        collection = database.get(collection_id)
        if collection is None:
            raise not_found_error(collection_link(database_id, collection_id))
        return collection

    def offer_throughput(self, database_id: str, collection_id: str) -> int:
        """Throughput the collection was created with (test helper)."""
        self._collection(database_id, collection_id)
        return self._collection_properties[(database_id, collection_id)]["offer_throughput"]

    async def read_database(self, database_id: str) -> dict[str, Any]:
        if database_id not in self._databases:
            raise not_found_error(database_link(database_id))
        return {"id": database_id, "_self": database_link(database_id)}

    async def create_database(self, database_id: str) -> None:
        if database_id in self._databases:
            raise conflict_error(database_link(database_id))
        self._databases[database_id] = {}

    async def read_collection(self, database_id: str, collection_id: str) -> dict[str, Any]:
        self._collection(database_id, collection_id)
        return dict(self._collection_properties[(database_id, collection_id)])

    async def create_collection(
        self,
        database_id: str,
        collection_id: str,
        *,
        offer_throughput: int = DEFAULT_OFFER_THROUGHPUT,
        partition_key_path: str = DEFAULT_PARTITION_KEY_PATH,
    ) -> None:
        database = self._databases.get(database_id)
        if database is None:
            raise not_found_error(database_link(database_id))
        if collection_id in database:
            raise conflict_error(collection_link(database_id, collection_id))

        database[collection_id] = {}
        properties = {
            "id": collection_id,
            "_self": collection_link(database_id, collection_id),
            "partitionKey": {"paths": [partition_key_path], "kind": "Hash"},
            "offer_throughput": offer_throughput,
        }
        self._collection_properties[(database_id, collection_id)] = properties

    def _stamp(self, database_id: str, collection_id: str, document: dict[str, Any]) -> dict[str, Any]:
        stored = copy.deepcopy(document)
        stored["_self"] = document_link(database_id, collection_id, stored["id"])
        stored["_etag"] = f'"{uuid.uuid4()}"'
        stored["_ts"] = int(time.time())
        return stored

    async def create_document(self, database_id: str, collection_id: str, document: dict[str, Any]) -> dict[str, Any]:
        collection = self._collection(database_id, collection_id)
        document_id = document["id"]
        if document_id in collection:
            raise conflict_error(document_link(database_id, collection_id, document_id))
        collection[document_id] = self._stamp(database_id, collection_id, document)
        return copy.deepcopy(collection[document_id])

    async def upsert_document(self, database_id: str, collection_id: str, document: dict[str, Any]) -> dict[str, Any]:
        collection = self._collection(database_id, collection_id)
        document_id = document["id"]
        collection[document_id] = self._stamp(database_id, collection_id, document)
        return copy.deepcopy(collection[document_id])

    async def delete_document(
        self, database_id: str, collection_id: str, document_id: str, partition_key: Any = None
    ) -> None:
        # Documents are keyed by id alone, so the partition key is not needed to find them
        collection = self._collection(database_id, collection_id)
        if document_id not in collection:
            raise not_found_error(document_link(database_id, collection_id, document_id))
        del collection[document_id]

    async def query_documents(self, database_id: str, collection_id: str, filters: Filters) -> list[dict[str, Any]]:
        collection = self._collection(database_id, collection_id)
        return [copy.deepcopy(doc) for doc in collection.values() if matches_filters(doc, filters)]

    async def count_documents(self, database_id: str, collection_id: str, filters: Filters) -> int:
        collection = self._collection(database_id, collection_id)
        return sum(1 for doc in collection.values() if matches_filters(doc, filters))

    def clear(self) -> None:
        """Drop every database (for test isolation)."""
        self._databases.clear()
        self._collection_properties.clear()
