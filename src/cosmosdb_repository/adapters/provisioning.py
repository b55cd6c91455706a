"""Create-if-missing helpers for databases and collections."""

import logging

from azure.cosmos.exceptions import CosmosResourceNotFoundError

from cosmosdb_repository.adapters.document_client import (
    DEFAULT_OFFER_THROUGHPUT,
    DEFAULT_PARTITION_KEY_PATH,
    AbstractDocumentClient,
)


logger = logging.getLogger(__name__)


async def create_database_if_not_exists(client: AbstractDocumentClient, database_id: str) -> bool:
    """Read the database and create it only when the read reports it missing.

    Returns:
        True if the database was created, False if it already existed
    """
    try:
        await client.read_database(database_id)
        return False
    except CosmosResourceNotFoundError:
        await client.create_database(database_id)
        logger.info("Created database '%s'", database_id)
        return True


async def create_collection_if_not_exists(
    client: AbstractDocumentClient,
    database_id: str,
    collection_id: str,
    *,
    offer_throughput: int = DEFAULT_OFFER_THROUGHPUT,
    partition_key_path: str = DEFAULT_PARTITION_KEY_PATH,
) -> bool:
    """Read the collection and create it only when the read reports it missing.

    Returns:
        True if the collection was created, False if it already existed
    """
    try:
        await client.read_collection(database_id, collection_id)
        return False
    except CosmosResourceNotFoundError:
        await client.create_collection(
            database_id,
            collection_id,
            offer_throughput=offer_throughput,
            partition_key_path=partition_key_path,
        )
        logger.info(
            "Created collection '%s' in database '%s' with %d RU/s",
            collection_id,
            database_id,
            offer_throughput,
        )
        return True


async def ensure_store(
    client: AbstractDocumentClient,
    database_id: str,
    collection_id: str,
    *,
    offer_throughput: int = DEFAULT_OFFER_THROUGHPUT,
    partition_key_path: str = DEFAULT_PARTITION_KEY_PATH,
) -> None:
    """Ensure the database, then the collection, exist."""
    await create_database_if_not_exists(client, database_id)
    await create_collection_if_not_exists(
        client,
        database_id,
        collection_id,
        offer_throughput=offer_throughput,
        partition_key_path=partition_key_path,
    )
