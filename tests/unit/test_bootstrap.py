"""Unit tests for bootstrap wiring."""

import logging
from unittest.mock import AsyncMock

import pytest

from cosmosdb_repository import bootstrap
from cosmosdb_repository.adapters.document_client import CosmosDocumentClient, InMemoryDocumentClient
from cosmosdb_repository.config import CosmosSettings
from cosmosdb_repository.observability.logging import JsonFormatter
from cosmosdb_repository.service_layer.cosmosdb_unit_of_work import CosmosDBUnitOfWork
from tests.fixtures.entities import Individual, make_individual


pytestmark = pytest.mark.unit


@pytest.fixture
def settings() -> CosmosSettings:
    return CosmosSettings(
        endpoint="https://acct.documents.azure.com:443/",
        key="secret",
        database_id="familytree",
        collection_id="records",
    )


class TestOpenUnitOfWork:
    @pytest.mark.asyncio
    async def test_injected_client_is_left_open(self, settings):
        client = InMemoryDocumentClient()
        client.close = AsyncMock()

        async with bootstrap.open_unit_of_work(settings, client) as uow:
            assert isinstance(uow, CosmosDBUnitOfWork)
            assert uow.initialized
            await uow.get_repository(Individual).add(make_individual("Ada"))

        client.close.assert_not_awaited()
        assert await client.count_documents("familytree", "records", {}) == 1

    @pytest.mark.asyncio
    async def test_built_client_is_closed(self, settings, monkeypatch):
        built = InMemoryDocumentClient()
        built.close = AsyncMock()
        monkeypatch.setattr(CosmosDocumentClient, "from_settings", lambda s: built)

        async with bootstrap.open_unit_of_work(settings) as uow:
            assert uow.client is built

        built.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_built_client_is_closed_on_error(self, settings, monkeypatch):
        built = InMemoryDocumentClient()
        built.close = AsyncMock()
        monkeypatch.setattr(CosmosDocumentClient, "from_settings", lambda s: built)

        with pytest.raises(RuntimeError):
            async with bootstrap.open_unit_of_work(settings):
                raise RuntimeError("boom")

        built.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_credentials_fail_before_any_io(self):
        with pytest.raises(ValueError, match="COSMOSDB_ENDPOINT"):
            async with bootstrap.open_unit_of_work(CosmosSettings(database_id="db", collection_id="c")):
                pass


class TestConfigureObservability:
    def test_applies_logging_settings(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        try:
            bootstrap.configure_observability(CosmosSettings(log_level="warning", log_json=True))

            assert root.level == logging.WARNING
            assert isinstance(root.handlers[0].formatter, JsonFormatter)
        finally:
            root.handlers[:] = handlers
            root.setLevel(level)
