"""Generic in-memory pagination over a snapshot of a collection."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, Sequence, TypeVar

from .results import ErrorKind

T = TypeVar("T")

SortKey = Callable[[T], Any]


class InvalidPageSize(ValueError):
    """Raised when a page size below one is requested."""

    kind = ErrorKind.invalid_argument

    def __init__(self, page_size: int) -> None:
        super().__init__(f"page size must be at least 1, got {page_size}")
        self.page_size = page_size


@dataclass(slots=True)
class Page(Generic[T]):
    data: list[T] = field(default_factory=list)
    current_page: int = 1
    per_page: int = 1
    total_count: int = 0
    total_page_count: int = 0


def _nulls_first(value: Any) -> tuple[bool, Any]:
    return (value is not None, value)


def paginate(
    source: Iterable[T],
    page_size: int,
    page_number: int,
    sort_keys: Sequence[SortKey[T]] = (),
) -> Page[T]:
    """Sort ``source`` by ``sort_keys`` and return the requested page.

    The sort is ascending and stable: keys are compared as a tuple in the order
    given, and items with equal keys keep their source order. A key that
    returns ``None`` sorts before every other value of that key. A page number
    outside ``1..total_page_count`` yields an empty ``data`` list with the totals
    still populated.

    Raises
    ------
    InvalidPageSize
        When ``page_size`` is zero or negative.
    """
    if page_size < 1:
        raise InvalidPageSize(page_size)

    items = list(source)
    if sort_keys:
        items.sort(key=lambda item: tuple(_nulls_first(key(item)) for key in sort_keys))

    total_count = len(items)
    data: list[T] = []
    if page_number >= 1:
        start = (page_number - 1) * page_size
        data = items[start : start + page_size]

    return Page(
        data=data,
        current_page=page_number,
        per_page=page_size,
        total_count=total_count,
        total_page_count=math.ceil(total_count / page_size),
    )
