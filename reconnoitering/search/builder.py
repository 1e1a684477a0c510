from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date

from fastapi import HTTPException

from ..dates import end_of_day, start_of_day
from ..store.filters import Contains, Filter, Range, Text

# query parameter -> document field it filters
FACET_FIELDS = {
    "city": "location.city",
    "country": "location.country",
    "category": "category",
    "artist": "artists",
    "tag": "tags",
}


@dataclass(frozen=True)
class ExhibitionQuery:
    city: str | None = None
    country: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    category: str | None = None
    artist: str | None = None
    tag: str | None = None
    search: str | None = None

    def without(self, name: str) -> "ExhibitionQuery":
        return replace(self, **{name: None})


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def date_window(start: date | None, end: date | None) -> list[Filter]:
    """Interval-overlap predicates for a requested ``[start, end]`` window.

    An exhibition overlaps when it ends on/after the window start and starts
    on/before the end of the window's last day.
    """
    if start is not None and end is not None and start > end:
        raise HTTPException(status_code=400, detail="startDate must not be after endDate")
    filters: list[Filter] = []
    if start is not None:
        filters.append(Range("endDate", gte=start_of_day(start)))
    if end is not None:
        filters.append(Range("startDate", lte=end_of_day(end)))
    return filters


def build_filters(query: ExhibitionQuery) -> list[Filter]:
    """Translate request parameters into store filters; absent ones are skipped."""
    filters: list[Filter] = []

    search = _clean(query.search)
    if search:
        filters.append(Text(search))

    for name, field in FACET_FIELDS.items():
        value = _clean(getattr(query, name))
        if value:
            filters.append(Contains(field, value))

    filters.extend(date_window(query.start_date, query.end_date))
    return filters
