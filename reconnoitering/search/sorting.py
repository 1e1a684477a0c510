from __future__ import annotations

from typing import Literal

from ..store.filters import TEXT_SCORE

SortOption = Literal[
    "startDate",
    "-startDate",
    "popularity",
    "-popularity",
    "title",
    "-title",
    "addedDate",
    "-addedDate",
]

DEFAULT_SORT = "-addedDate"
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def parse_sort(sort: str) -> tuple[str, int]:
    """``"-popularity"`` -> ``("popularity", -1)``."""
    if sort.startswith("-"):
        return sort[1:], -1
    return sort, 1


def sort_spec(sort: str = DEFAULT_SORT, text_active: bool = False) -> list[tuple[str, int]]:
    """Build the store sort keys.

    With an active text search, relevance leads and the requested field
    breaks ties.
    """
    field, direction = parse_sort(sort or DEFAULT_SORT)
    if text_active:
        return [(TEXT_SCORE, -1), (field, direction)]
    return [(field, direction)]
