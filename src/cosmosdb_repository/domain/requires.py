"""Guard clauses for required arguments."""

from typing import TypeVar

from cosmosdb_repository.domain.errors import ArgumentError, ArgumentNullError


T = TypeVar("T")


def not_none(name: str, value: T | None) -> T:
    """Return value, raising ArgumentNullError when it is None."""
    if value is None:
        raise ArgumentNullError(name)
    return value


def not_null_or_empty(name: str, value: str | None) -> str:
    """Return value, raising ArgumentError when it is None or an empty string.

    None raises the base ArgumentError rather than ArgumentNullError so that
    identifiers report a single failure type for both cases.
    """
    if value is None or value == "":
        raise ArgumentError(name)
    return value
