from __future__ import annotations

import pytest

from conftest import utc
from reconnoitering.search.facets import (
    attach_distances,
    bounding_box,
    flatten_values,
    has_preferences,
    haversine_km,
    rank_recommendations,
    recommendation_score,
    tag_counts,
)
from reconnoitering.store.memory import MemoryCollection


def _doc(title, lat=None, lng=None, **fields):
    doc = {"title": title, **fields}
    if lat is not None:
        doc["location"] = {"city": fields.get("city", ""), "coordinates": {"lat": lat, "lng": lng}}
    return doc


# ── Filter options ───────────────────────────────────────────────────────


def test_flatten_values_nested_lists():
    assert flatten_values([["A", "B"], ["C"], "B"]) == ["A", "B", "C"]


def test_flatten_values_drops_empty_entries():
    assert flatten_values([None, "", ["x", None], []]) == ["x"]


def test_tag_counts_sorted_by_count_then_name():
    coll = MemoryCollection("exhibitions")
    coll.insert({"tags": ["b", "a"]})
    coll.insert({"tags": ["a", "a"]})
    coll.insert({"tags": ["c"]})
    assert tag_counts(coll) == [
        {"name": "a", "count": 2},
        {"name": "b", "count": 1},
        {"name": "c", "count": 1},
    ]


# ── Geography ────────────────────────────────────────────────────────────


def test_haversine_known_distance():
    # London to Paris is roughly 344 km
    assert haversine_km(51.5074, -0.1278, 48.8566, 2.3522) == pytest.approx(343.5, abs=1.0)


def test_haversine_short_distance():
    assert haversine_km(51.5074, -0.1278, 51.5069, -0.1276) == pytest.approx(0.057, abs=0.005)


def test_bounding_box_contains_radius():
    min_lat, max_lat, min_lng, max_lng = bounding_box(59.9, 10.7, 10)
    assert min_lat < 59.9 < max_lat
    assert min_lng < 10.7 < max_lng
    assert haversine_km(59.9, 10.7, max_lat, 10.7) == pytest.approx(10, abs=0.01)


def test_bounding_box_drops_longitude_near_pole_and_antimeridian():
    assert bounding_box(89.99, 0, 10)[2:] == (None, None)
    assert bounding_box(0, 179.99, 10)[2:] == (None, None)


def test_attach_distances_filters_and_orders():
    docs = [
        _doc("far", 48.8566, 2.3522),
        _doc("near", 59.9127, 10.7461),
        _doc("here", 59.9139, 10.7522),
        _doc("nowhere"),
    ]
    result = attach_distances(docs, 59.9139, 10.7522, 10)
    assert [d["title"] for d in result] == ["here", "near"]
    assert result[0]["distance"] == 0.0


def test_attach_distances_orders_by_exact_distance():
    # both round to 0.1 km; the closer one must still come first
    docs = [_doc("b", 0.0012, 0.0), _doc("a", 0.0006, 0.0)]
    result = attach_distances(docs, 0.0, 0.0, 1)
    assert [d["title"] for d in result] == ["a", "b"]
    assert [d["distance"] for d in result] == [0.1, 0.1]


# ── Recommendation score ─────────────────────────────────────────────────


def test_score_counts_tags_twice():
    doc = {"tags": ["impressionism", "dutch"], "artists": [], "location": {"city": "London"}}
    assert recommendation_score(doc, {"preferredTags": ["dutch"]}) == 2


def test_score_adds_artist_and_city_case_insensitively():
    doc = {
        "tags": ["Dutch"],
        "artists": ["Vincent van Gogh"],
        "location": {"city": "London"},
    }
    prefs = {
        "preferredTags": ["dutch"],
        "preferredArtists": ["vincent van gogh"],
        "preferredLocations": ["london"],
    }
    assert recommendation_score(doc, prefs) == 4


def test_score_is_zero_without_overlap():
    assert recommendation_score({"tags": ["x"]}, {"preferredTags": ["y"]}) == 0


def test_has_preferences():
    assert has_preferences({"preferredTags": ["x"]})
    assert not has_preferences({"preferredTags": [], "notificationFrequency": "weekly"})
    assert not has_preferences(None)


def test_rank_by_score_then_start_date():
    docs = [
        {"title": "later", "tags": ["dutch"], "startDate": utc(2026, 5, 1)},
        {"title": "none", "tags": [], "startDate": utc(2026, 1, 1)},
        {"title": "sooner", "tags": ["dutch"], "startDate": utc(2026, 3, 1)},
    ]
    ranked = rank_recommendations(docs, {"preferredTags": ["dutch"]}, limit=6)
    assert [d["title"] for d in ranked] == ["sooner", "later", "none"]
    assert [d["recommendationScore"] for d in ranked] == [2, 2, 0]


def test_rank_without_preferences_uses_popularity():
    docs = [
        {"title": "b", "popularity": 88, "startDate": utc(2026, 1, 1)},
        {"title": "a", "popularity": 95, "startDate": utc(2026, 2, 1)},
        {"title": "c", "popularity": 88, "startDate": utc(2025, 12, 1)},
    ]
    ranked = rank_recommendations(docs, {}, limit=2)
    assert [d["title"] for d in ranked] == ["a", "c"]
    assert "recommendationScore" not in ranked[0]


def test_rank_empty():
    assert rank_recommendations([], {"preferredTags": ["x"]}, limit=6) == []
