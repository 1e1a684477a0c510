"""
Filter expressions shared by every store backend.

A query is a sequence of filters combined with AND. Each variant names one
kind of predicate; backends translate them into their own query form
(``to_mongo`` below, boolean masks in ``memory``).
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Sequence, Union

# Sort key meaning "text relevance of the active Text filter".
TEXT_SCORE = "$textScore"


@dataclass(frozen=True)
class Text:
    """Full-text search against the collection's text index."""

    query: str


@dataclass(frozen=True)
class Range:
    """Inclusive bounds on a scalar field; a ``None`` bound is open."""

    field: str
    gte: Any = None
    lte: Any = None


@dataclass(frozen=True)
class Contains:
    """Case-insensitive substring match; list fields match on any element.

    ``exact`` anchors the match to the whole value.
    """

    field: str
    value: str
    exact: bool = False

    @property
    def pattern(self) -> str:
        escaped = re.escape(self.value)
        return f"^{escaped}$" if self.exact else escaped


@dataclass(frozen=True)
class Equals:
    field: str
    value: Any


@dataclass(frozen=True)
class AnyOf:
    field: str
    values: Sequence[Any]

    def __post_init__(self):
        object.__setattr__(self, "values", tuple(self.values))


@dataclass(frozen=True)
class Exists:
    """Field is present and not null."""

    field: str


Filter = Union[Text, Range, Contains, Equals, AnyOf, Exists]


def has_text(filters: Sequence[Filter]) -> bool:
    return any(isinstance(f, Text) for f in filters)


def without(filters: Sequence[Filter], field: str) -> list[Filter]:
    """Return *filters* minus every predicate on *field*."""
    return [f for f in filters if isinstance(f, Text) or f.field != field]


def _clause(flt: Filter, convert) -> tuple[str, Any]:
    if isinstance(flt, Text):
        return "$text", {"$search": flt.query}
    field, value = convert(flt.field, None)
    if isinstance(flt, Range):
        cond: dict[str, Any] = {}
        if flt.gte is not None:
            cond["$gte"] = flt.gte
        if flt.lte is not None:
            cond["$lte"] = flt.lte
        return field, cond
    if isinstance(flt, Contains):
        return field, {"$regex": flt.pattern, "$options": "i"}
    if isinstance(flt, Equals):
        return field, convert(flt.field, flt.value)[1]
    if isinstance(flt, AnyOf):
        return field, {"$in": [convert(flt.field, v)[1] for v in flt.values]}
    if isinstance(flt, Exists):
        return field, {"$exists": True, "$ne": None}
    raise TypeError(f"Unknown filter: {flt!r}")


def _is_operator_doc(value: Any) -> bool:
    return isinstance(value, dict) and bool(value) and all(k.startswith("$") for k in value)


def to_mongo(filters: Sequence[Filter], convert=None) -> dict[str, Any]:
    """Translate *filters* into a MongoDB query document.

    *convert* maps ``(field, value)`` to the stored field name and value
    (e.g. ``id`` -> ``_id`` with an ObjectId); identity by default.
    """
    convert = convert or (lambda field, value: (field, value))
    query: dict[str, Any] = {}
    extra: list[dict[str, Any]] = []
    for flt in filters:
        key, cond = _clause(flt, convert)
        if key not in query:
            query[key] = cond
            continue
        current = query[key]
        if _is_operator_doc(current) and _is_operator_doc(cond) and not set(current) & set(cond):
            query[key] = {**current, **cond}
        else:
            extra.append({key: cond})
    if extra:
        query["$and"] = extra
    return query
