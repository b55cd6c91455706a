"""Unit tests for create-if-missing provisioning."""

from unittest.mock import AsyncMock

from azure.cosmos import exceptions
import pytest

from cosmosdb_repository.adapters.document_client import AbstractDocumentClient, InMemoryDocumentClient
from cosmosdb_repository.adapters.provisioning import (
    create_collection_if_not_exists,
    create_database_if_not_exists,
    ensure_store,
)


pytestmark = pytest.mark.unit


def _not_found() -> exceptions.CosmosResourceNotFoundError:
    return exceptions.CosmosResourceNotFoundError(status_code=404, message="missing")


@pytest.mark.asyncio
async def test_existing_database_is_not_recreated():
    client = AsyncMock(spec=AbstractDocumentClient)

    created = await create_database_if_not_exists(client, "db")

    assert created is False
    client.read_database.assert_awaited_once_with("db")
    client.create_database.assert_not_awaited()


@pytest.mark.asyncio
async def test_missing_database_is_created():
    client = AsyncMock(spec=AbstractDocumentClient)
    client.read_database.side_effect = _not_found()

    created = await create_database_if_not_exists(client, "db")

    assert created is True
    client.create_database.assert_awaited_once_with("db")


@pytest.mark.asyncio
async def test_missing_collection_is_created_with_offer():
    client = AsyncMock(spec=AbstractDocumentClient)
    client.read_collection.side_effect = _not_found()

    created = await create_collection_if_not_exists(client, "db", "coll")

    assert created is True
    client.create_collection.assert_awaited_once_with("db", "coll", offer_throughput=400, partition_key_path="/id")


@pytest.mark.asyncio
async def test_other_read_failures_propagate():
    client = AsyncMock(spec=AbstractDocumentClient)
    client.read_collection.side_effect = exceptions.CosmosHttpResponseError(status_code=403, message="forbidden")

    with pytest.raises(exceptions.CosmosHttpResponseError) as exc_info:
        await create_collection_if_not_exists(client, "db", "coll")

    assert exc_info.value.status_code == 403
    client.create_collection.assert_not_awaited()


@pytest.mark.asyncio
async def test_ensure_store_provisions_in_memory_client(caplog):
    client = InMemoryDocumentClient()

    with caplog.at_level("INFO", logger="cosmosdb_repository.adapters.provisioning"):
        await ensure_store(client, "db", "coll", offer_throughput=800)

    assert (await client.read_collection("db", "coll"))["id"] == "coll"
    assert client.offer_throughput("db", "coll") == 800
    assert "Created database 'db'" in caplog.text
    assert "800 RU/s" in caplog.text


@pytest.mark.asyncio
async def test_ensure_store_is_repeatable():
    client = InMemoryDocumentClient()

    await ensure_store(client, "db", "coll")
    await ensure_store(client, "db", "coll")

    assert client.offer_throughput("db", "coll") == 400
