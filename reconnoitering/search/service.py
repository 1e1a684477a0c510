from __future__ import annotations

import logging
from datetime import date
from typing import Any

from fastapi import HTTPException

from ..dates import utcnow, weekday_name
from ..errors import require_valid_id
from ..store.base import Database
from ..store.filters import AnyOf, Contains, Equals, Exists, Filter, Range, has_text
from .builder import ExhibitionQuery, build_filters, date_window
from .facets import attach_distances, bounding_box, filter_options, has_preferences, rank_recommendations
from .sorting import DEFAULT_LIMIT, DEFAULT_SORT, sort_spec

logger = logging.getLogger(__name__)

VENUE_SUMMARY_FIELDS = ("id", "name", "address", "city", "country", "coordinates", "websiteUrl")


def envelope(data: Any, **meta: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True, "data": data}
    if meta:
        body["meta"] = meta
    return body


def populate_venues(db: Database, docs: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Attach a ``venue`` summary to each exhibition that references one."""
    ids = sorted({d["venueId"] for d in docs if d.get("venueId")})
    venues: dict[str, dict[str, Any]] = {}
    if ids:
        for venue in db.venues.find([AnyOf("id", ids)]):
            venues[venue["id"]] = {k: venue.get(k) for k in VENUE_SUMMARY_FIELDS}
    for doc in docs:
        doc["venue"] = venues.get(doc.get("venueId")) if doc.get("venueId") else None
    return docs


def get_exhibition(db: Database, exhibition_id: str) -> dict[str, Any]:
    require_valid_id(exhibition_id, "exhibition")
    doc = db.exhibitions.get(exhibition_id)
    if doc is None:
        raise HTTPException(status_code=404, detail="Exhibition not found")
    return populate_venues(db, [doc])[0]


def search_exhibitions(
    db: Database,
    query: ExhibitionQuery,
    sort: str = DEFAULT_SORT,
    limit: int = DEFAULT_LIMIT,
    skip: int = 0,
) -> dict[str, Any]:
    filters = build_filters(query)
    order = sort_spec(sort, text_active=has_text(filters))

    docs = db.exhibitions.find(filters, sort=order, skip=skip, limit=limit)
    total = db.exhibitions.count(filters)
    options = filter_options(db.exhibitions, query)

    return envelope(
        populate_venues(db, docs),
        total=total,
        limit=limit,
        skip=skip,
        sort=sort,
        filter_options=options,
    )


def exhibitions_on_date(
    db: Database,
    day: date,
    city: str | None = None,
    category: str | None = None,
    closed_day: str | None = None,
) -> dict[str, Any]:
    """Exhibitions running on *day*, flagged when closed that weekday."""
    filters: list[Filter] = date_window(day, day)
    if city and city.strip():
        filters.append(Contains("location.city", city.strip()))
    if category and category.strip():
        filters.append(Contains("category", category.strip()))
    if closed_day:
        filters.append(Equals("closedDay", None if closed_day == "none" else closed_day))

    docs = db.exhibitions.find(filters, sort=[("startDate", 1)])
    day_name = weekday_name(day)
    for doc in docs:
        doc["isClosedOnSearchDate"] = doc.get("closedDay") == day_name

    options = filter_options(db.exhibitions, ExhibitionQuery())
    return envelope(
        populate_venues(db, docs),
        date=day.isoformat(),
        dayOfWeek=day_name,
        total=len(docs),
        filter_options={"cities": options["cities"], "categories": options["categories"]},
    )


def nearby_exhibitions(
    db: Database,
    lat: float,
    lng: float,
    radius_km: float = 10.0,
    limit: int = 50,
) -> dict[str, Any]:
    """Exhibitions within *radius_km* of ``(lat, lng)``, nearest first.

    A bounding box narrows the candidates in the store; the exact Haversine
    distance decides membership.
    """
    min_lat, max_lat, min_lng, max_lng = bounding_box(lat, lng, radius_km)
    filters: list[Filter] = [
        Exists("location.coordinates.lat"),
        Exists("location.coordinates.lng"),
        Range("location.coordinates.lat", gte=min_lat, lte=max_lat),
    ]
    if min_lng is not None:
        filters.append(Range("location.coordinates.lng", gte=min_lng, lte=max_lng))

    candidates = db.exhibitions.find(filters)
    nearby = attach_distances(candidates, lat, lng, radius_km)
    logger.debug("Nearby (%s, %s) r=%skm: %d of %d candidates", lat, lng, radius_km, len(nearby), len(candidates))

    return envelope(
        populate_venues(db, nearby[:limit]),
        userLocation={"lat": lat, "lng": lng},
        radius=radius_km,
        total=len(nearby),
    )


def recommend_exhibitions(db: Database, user_id: str, limit: int = 6) -> dict[str, Any]:
    """Current and upcoming exhibitions ranked for the user's preferences."""
    user = db.users.get(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    preferences = user.get("preferences") or {}

    eligible = db.exhibitions.find([Range("endDate", gte=utcnow())])
    ranked = rank_recommendations(eligible, preferences, limit)
    return envelope(
        populate_venues(db, ranked),
        total=len(eligible),
        hasPreferences=has_preferences(preferences),
    )
