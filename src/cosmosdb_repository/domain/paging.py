"""Paging helpers for repository results.

A ``Pager`` splits a materialized sequence into fixed-size pages; each page
is returned as a ``PagedList`` that knows where it sits in the whole.
Page indexes are 0-based.
"""

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
import math
from typing import Generic, TypeVar


T = TypeVar("T")


@dataclass(frozen=True)
class PagedList(Sequence[T], Generic[T]):
    """One page of items plus its position in the full result set."""

    items: tuple[T, ...]
    page_index: int
    page_size: int
    total_count: int
    page_count: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "page_count", math.ceil(self.total_count / self.page_size))

    def __getitem__(self, index):
        return self.items[index]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    @property
    def has_previous_page(self) -> bool:
        return self.page_index > 0

    @property
    def has_next_page(self) -> bool:
        return self.page_index + 1 < self.page_count

    @property
    def is_first_page(self) -> bool:
        return self.page_index == 0

    @property
    def is_last_page(self) -> bool:
        return self.page_index >= self.page_count - 1


class Pager(Generic[T]):
    """Fixed-size page view over a sequence."""

    def __init__(self, items: Iterable[T], page_size: int):
        if page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {page_size}")
        self._items = tuple(items)
        self.page_size = page_size

    @property
    def total_count(self) -> int:
        return len(self._items)

    @property
    def page_count(self) -> int:
        return math.ceil(len(self._items) / self.page_size)

    def get_page(self, page_index: int) -> PagedList[T]:
        """Return the page at page_index; past the last page the page is empty."""
        if page_index < 0:
            raise ValueError(f"page_index must not be negative, got {page_index}")

        start = page_index * self.page_size
        return PagedList(
            items=self._items[start : start + self.page_size],
            page_index=page_index,
            page_size=self.page_size,
            total_count=len(self._items),
        )

    def __iter__(self) -> Iterator[PagedList[T]]:
        for page_index in range(self.page_count):
            yield self.get_page(page_index)


def in_pages_of(items: Iterable[T], page_size: int) -> Pager[T]:
    """Split items into pages of page_size."""
    return Pager(items, page_size)
