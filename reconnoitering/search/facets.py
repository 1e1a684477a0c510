from __future__ import annotations

import math
from collections import Counter
from typing import Any, Iterable

import numpy as np
import pandas as pd

from ..store.base import Collection, lookup
from .builder import FACET_FIELDS, ExhibitionQuery, build_filters

EARTH_RADIUS_KM = 6371.0

# facet name in the response -> query parameter it is computed without
_OPTION_PARAMS = {
    "cities": "city",
    "countries": "country",
    "categories": "category",
    "artists": "artist",
    "tags": "tag",
}


# ── Filter options ───────────────────────────────────────────────────────


def flatten_values(values: Iterable[Any]) -> list[Any]:
    """Flatten nested lists, drop empties and duplicates, and sort.

    ``[["A", "B"], ["C"], "B"]`` -> ``["A", "B", "C"]``.
    """
    flat: set[Any] = set()

    def _walk(value: Any) -> None:
        if isinstance(value, (list, tuple)):
            for item in value:
                _walk(item)
        elif value is not None and value != "":
            flat.add(value)

    _walk(list(values))
    return sorted(flat, key=str)


def filter_options(collection: Collection, query: ExhibitionQuery) -> dict[str, list[Any]]:
    """Distinct values for each filter control.

    Every facet is computed under the current query minus its own parameter,
    so picking a city still lists the other cities that fit the rest of the
    query.
    """
    options: dict[str, list[Any]] = {}
    for facet, param in _OPTION_PARAMS.items():
        filters = build_filters(query.without(param))
        options[facet] = flatten_values(collection.distinct(FACET_FIELDS[param], filters))
    return options


def tag_counts(collection: Collection) -> list[dict[str, Any]]:
    counter: Counter[str] = Counter()
    for doc in collection.find():
        for tag in set(flatten_values(doc.get("tags") or [])):
            counter[tag] += 1
    ranked = sorted(counter.items(), key=lambda item: (-item[1], item[0]))
    return [{"name": name, "count": count} for name, count in ranked]


# ── Geography ────────────────────────────────────────────────────────────


def haversine_km(lat1, lng1, lat2, lng2):
    """Great-circle distance in km. Accepts scalars or numpy arrays."""
    lat1, lng1, lat2, lng2 = map(np.radians, (lat1, lng1, lat2, lng2))
    dlat = lat2 - lat1
    dlng = lng2 - lng1
    a = np.sin(dlat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlng / 2) ** 2
    return EARTH_RADIUS_KM * 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))


def bounding_box(lat: float, lng: float, radius_km: float) -> tuple[float, float, float | None, float | None]:
    """Return ``(min_lat, max_lat, min_lng, max_lng)`` enclosing the radius.

    Longitude bounds are ``None`` when the circle reaches a pole or wraps the
    antimeridian; callers then skip the longitude predicate.
    """
    angular = radius_km / EARTH_RADIUS_KM
    dlat = math.degrees(angular)
    min_lat, max_lat = lat - dlat, lat + dlat
    if min_lat <= -90 or max_lat >= 90:
        return max(min_lat, -90.0), min(max_lat, 90.0), None, None

    ratio = math.sin(angular) / math.cos(math.radians(lat))
    if ratio >= 1:
        return min_lat, max_lat, None, None
    dlng = math.degrees(math.asin(ratio))
    min_lng, max_lng = lng - dlng, lng + dlng
    if min_lng < -180 or max_lng > 180:
        return min_lat, max_lat, None, None
    return min_lat, max_lat, min_lng, max_lng


def attach_distances(
    docs: list[dict[str, Any]],
    lat: float,
    lng: float,
    radius_km: float,
) -> list[dict[str, Any]]:
    """Keep docs within *radius_km* of the point, nearest first.

    Each kept doc gets ``distance`` (km, one decimal). Ordering uses the
    unrounded distance.
    """
    located = [
        d for d in docs
        if lookup(d, "location.coordinates.lat") is not None
        and lookup(d, "location.coordinates.lng") is not None
    ]
    if not located:
        return []
    lats = np.array([float(lookup(d, "location.coordinates.lat")) for d in located])
    lngs = np.array([float(lookup(d, "location.coordinates.lng")) for d in located])
    distances = haversine_km(lat, lng, lats, lngs)

    order = np.argsort(distances, kind="stable")
    results = []
    for idx in order:
        if distances[idx] > radius_km:
            continue
        doc = located[idx]
        doc["distance"] = round(float(distances[idx]), 1)
        results.append(doc)
    return results


# ── Recommendations ──────────────────────────────────────────────────────


def _lowered(values: Iterable[Any] | None) -> set[str]:
    return {str(v).strip().lower() for v in (values or []) if str(v).strip()}


def has_preferences(preferences: dict[str, Any] | None) -> bool:
    preferences = preferences or {}
    return any(
        preferences.get(key)
        for key in ("preferredTags", "preferredArtists", "preferredLocations")
    )


def recommendation_score(doc: dict[str, Any], preferences: dict[str, Any]) -> int:
    """``2 * shared tags + shared artists + 1 if the city is preferred``."""
    tags = _lowered(doc.get("tags"))
    artists = _lowered(doc.get("artists"))
    city = str(lookup(doc, "location.city") or "").strip().lower()

    score = 2 * len(tags & _lowered(preferences.get("preferredTags")))
    score += len(artists & _lowered(preferences.get("preferredArtists")))
    if city and city in _lowered(preferences.get("preferredLocations")):
        score += 1
    return score


def rank_recommendations(
    docs: list[dict[str, Any]],
    preferences: dict[str, Any] | None,
    limit: int,
) -> list[dict[str, Any]]:
    """Order eligible exhibitions for a user.

    With preferences: score descending, then start date ascending. Without:
    popularity descending, then start date ascending.
    """
    if not docs:
        return []
    frame = pd.DataFrame({
        "pos": range(len(docs)),
        "startDate": pd.to_datetime([d.get("startDate") for d in docs], utc=True),
        "popularity": [d.get("popularity") or 0 for d in docs],
    })
    if has_preferences(preferences):
        frame["score"] = [recommendation_score(d, preferences) for d in docs]
        frame = frame.sort_values(["score", "startDate"], ascending=[False, True], kind="mergesort")
    else:
        frame = frame.sort_values(["popularity", "startDate"], ascending=[False, True], kind="mergesort")

    ranked = []
    for row in frame.head(limit).itertuples():
        doc = docs[row.pos]
        if "score" in frame.columns:
            doc["recommendationScore"] = int(row.score)
        ranked.append(doc)
    return ranked
