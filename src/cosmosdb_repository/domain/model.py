"""Domain model - entities stored through the repository façade.

Entities carry a string identity (``unique_id``) and nothing else is
required of them. The identity becomes the Cosmos document key; uniqueness
and consistency are enforced by the store, not here.

Uses Pydantic models so any subclass can be dumped to and validated from
the JSON documents the store returns.
"""

from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def new_unique_id() -> str:
    """Generate a fresh entity identity."""
    return str(uuid4())


class Entity(BaseModel):
    """Base class for anything stored in a collection.

    Equality follows identity: two entities of the same type with the same
    ``unique_id`` are equal regardless of their other fields.
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    unique_id: str = Field(default_factory=new_unique_id, min_length=1)

    @classmethod
    def entity_type(cls) -> str:
        """Discriminator written to every document of this type."""
        return cls.__name__

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return False
        return type(self) is type(other) and self.unique_id == other.unique_id

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.unique_id))
