"""Domain layer - entities, entity/document mapping, paging and guard clauses.

Nothing here talks to the document store:
- Entities: objects with a string identity (``Entity``)
- Mapping: entity <-> Cosmos document conversion
- Paging: fixed-size page views over result sets
- Guards: invalid-argument checks raised at call entry
"""

from cosmosdb_repository.domain.errors import ArgumentError, ArgumentNullError
from cosmosdb_repository.domain.mapping import (
    ENTITY_TYPE_FIELD,
    ID_FIELD,
    SYSTEM_PROPERTIES,
    from_data_model,
    to_data_model,
)
from cosmosdb_repository.domain.model import Entity, new_unique_id
from cosmosdb_repository.domain.paging import PagedList, Pager, in_pages_of


__all__ = [
    "ENTITY_TYPE_FIELD",
    "ID_FIELD",
    "SYSTEM_PROPERTIES",
    "ArgumentError",
    "ArgumentNullError",
    "Entity",
    "PagedList",
    "Pager",
    "from_data_model",
    "in_pages_of",
    "new_unique_id",
    "to_data_model",
]
