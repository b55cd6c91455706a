"""Mapping between entities and Cosmos documents."""

from collections.abc import Mapping
from typing import Any, TypeVar

from cosmosdb_repository.domain.model import Entity
from cosmosdb_repository.domain.requires import not_none


TEntity = TypeVar("TEntity", bound=Entity)

# Cosmos document key and the discriminator shared by all entity types
ID_FIELD = "id"
ENTITY_TYPE_FIELD = "entityType"

# Properties the service adds to every stored document
SYSTEM_PROPERTIES = frozenset({"_rid", "_self", "_etag", "_attachments", "_ts"})


def to_data_model(entity: Entity) -> dict[str, Any]:
    """Convert an entity into the document written to the store."""
    not_none("entity", entity)

    document = entity.model_dump(mode="json")
    unique_id = document.pop("unique_id")
    document[ID_FIELD] = unique_id
    document[ENTITY_TYPE_FIELD] = entity.entity_type()
    return document


def from_data_model(model: type[TEntity], document: Mapping[str, Any]) -> TEntity:
    """Hydrate an entity from a stored document."""
    payload = {
        key: value
        for key, value in document.items()
        if key not in SYSTEM_PROPERTIES and key != ENTITY_TYPE_FIELD
    }
    if ID_FIELD in payload:
        payload["unique_id"] = payload.pop(ID_FIELD)
    return model.model_validate(payload)
