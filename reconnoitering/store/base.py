from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol, Sequence

from bson import ObjectId

from .filters import Filter

SortSpec = Sequence[tuple[str, int]]

_MISSING = object()


class Collection(Protocol):
    name: str

    def find(
        self,
        filters: Sequence[Filter] = (),
        sort: SortSpec = (),
        skip: int = 0,
        limit: int = 0,
    ) -> list[dict[str, Any]]: ...

    def count(self, filters: Sequence[Filter] = ()) -> int: ...

    def distinct(self, field: str, filters: Sequence[Filter] = ()) -> list[Any]: ...

    def find_one(self, filters: Sequence[Filter]) -> dict[str, Any] | None: ...

    def get(self, doc_id: str) -> dict[str, Any] | None: ...

    def insert(self, doc: dict[str, Any]) -> dict[str, Any]: ...

    def update(self, doc_id: str, changes: dict[str, Any]) -> dict[str, Any] | None: ...

    def delete(self, doc_id: str) -> bool: ...

    def add_to_set(self, doc_id: str, field: str, value: Any) -> dict[str, Any] | None: ...

    def pull(self, doc_id: str, field: str, value: Any) -> dict[str, Any] | None: ...


@dataclass
class Database:
    """All collections the application uses, plus the backend's close hook."""

    exhibitions: Collection
    venues: Collection
    users: Collection
    tags: Collection
    artists: Collection
    newsletter: Collection
    contacts: Collection
    pageviews: Collection
    events: Collection
    backend: str = "memory"
    on_close: Callable[[], None] | None = None

    def close(self) -> None:
        if self.on_close is not None:
            self.on_close()


def new_id() -> str:
    return str(ObjectId())


def lookup(doc: dict[str, Any], path: str, default: Any = None) -> Any:
    """Read a dotted path such as ``location.city`` from a nested document."""
    current: Any = doc
    for part in path.split("."):
        if not isinstance(current, dict):
            return default
        current = current.get(part, _MISSING)
        if current is _MISSING:
            return default
    return current


def assign(doc: dict[str, Any], path: str, value: Any) -> None:
    """Write *value* at a dotted path, creating intermediate documents."""
    parts = path.split(".")
    current = doc
    for part in parts[:-1]:
        nxt = current.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            current[part] = nxt
        current = nxt
    current[parts[-1]] = value
