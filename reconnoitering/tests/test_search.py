from __future__ import annotations

from conftest import make_exhibition, utc
from reconnoitering.store.filters import Equals


def _titles(resp):
    return [item["title"] for item in resp.json()["data"]]


# ── Search endpoint ──────────────────────────────────────────────────────


def test_search_returns_envelope(client, catalogue):
    resp = client.get("/exhibitions")
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["meta"]["total"] == 4
    assert body["meta"]["limit"] == 20
    assert body["meta"]["skip"] == 0


def test_default_sort_is_newest_added_first(client, catalogue):
    resp = client.get("/exhibitions")
    assert _titles(resp) == ["Bergen Drawings", "Paris Photo", "Sculpture Now", "Monet in Oslo"]


def test_sort_by_popularity_descending(client, catalogue):
    resp = client.get("/exhibitions", params={"sort": "-popularity"})
    assert _titles(resp) == ["Sculpture Now", "Monet in Oslo", "Paris Photo", "Bergen Drawings"]


def test_city_filter_is_case_insensitive(client, catalogue):
    resp = client.get("/exhibitions", params={"city": "oslo"})
    assert sorted(_titles(resp)) == ["Monet in Oslo", "Sculpture Now"]
    assert resp.json()["meta"]["total"] == 2


def test_filter_options_ignore_own_parameter(client, catalogue):
    options = client.get("/exhibitions", params={"city": "oslo"}).json()["meta"]["filter_options"]
    # every city stays selectable, the other facets narrow to Oslo
    assert options["cities"] == ["Bergen", "Oslo", "Paris"]
    assert options["countries"] == ["Norway"]
    assert options["categories"] == ["Painting", "Sculpture"]
    assert options["artists"] == ["Claude Monet", "Louise Bourgeois"]
    assert options["tags"] == ["contemporary", "impressionism"]


def test_categories_are_flattened(client, catalogue):
    options = client.get("/exhibitions").json()["meta"]["filter_options"]
    assert options["categories"] == ["Drawing", "Painting", "Photography", "Sculpture"]


def test_category_artist_and_tag_filters(client, catalogue):
    assert sorted(_titles(client.get("/exhibitions", params={"category": "paint"}))) == [
        "Monet in Oslo",
        "Paris Photo",
    ]
    assert _titles(client.get("/exhibitions", params={"artist": "monet"})) == ["Monet in Oslo"]
    assert sorted(_titles(client.get("/exhibitions", params={"tag": "contemp"}))) == [
        "Paris Photo",
        "Sculpture Now",
    ]


def test_country_filter(client, catalogue):
    assert _titles(client.get("/exhibitions", params={"country": "france"})) == ["Paris Photo"]


def test_date_range_overlap(client, catalogue):
    resp = client.get("/exhibitions", params={"startDate": "2025-02-15", "endDate": "2025-02-20"})
    assert sorted(_titles(resp)) == ["Bergen Drawings", "Monet in Oslo", "Sculpture Now"]


def test_start_bound_only_includes_exhibition_ending_that_day(client, catalogue):
    resp = client.get("/exhibitions", params={"startDate": "2025-03-01"})
    assert sorted(_titles(resp)) == ["Bergen Drawings", "Monet in Oslo", "Paris Photo"]


def test_end_bound_covers_whole_day(client, catalogue):
    resp = client.get("/exhibitions", params={"endDate": "2025-03-05"})
    assert "Paris Photo" in _titles(resp)


def test_reversed_date_range_is_rejected(client, catalogue):
    resp = client.get("/exhibitions", params={"startDate": "2025-06-01", "endDate": "2025-05-01"})
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_malformed_date_is_rejected(client, catalogue):
    resp = client.get("/exhibitions", params={"startDate": "next tuesday"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert "startDate" in body["error"]


def test_text_search(client, catalogue):
    assert _titles(client.get("/exhibitions", params={"search": "sculpture"})) == ["Sculpture Now"]
    assert sorted(_titles(client.get("/exhibitions", params={"search": "contemporary"}))) == [
        "Paris Photo",
        "Sculpture Now",
    ]


def test_text_search_combines_with_filters(client, catalogue):
    resp = client.get("/exhibitions", params={"search": "contemporary", "city": "paris"})
    assert _titles(resp) == ["Paris Photo"]


def test_limit_and_skip(client, catalogue):
    resp = client.get("/exhibitions", params={"sort": "title", "limit": 2, "skip": 1})
    assert _titles(resp) == ["Monet in Oslo", "Paris Photo"]
    assert resp.json()["meta"]["total"] == 4


def test_limit_out_of_range(client, catalogue):
    assert client.get("/exhibitions", params={"limit": 101}).status_code == 400
    assert client.get("/exhibitions", params={"limit": 0}).status_code == 400


def test_unknown_sort_is_rejected(client, catalogue):
    resp = client.get("/exhibitions", params={"sort": "price"})
    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "sort"


def test_regex_characters_are_literal(client, catalogue):
    resp = client.get("/exhibitions", params={"city": "(.*"})
    assert resp.status_code == 200
    assert resp.json()["data"] == []


def test_venue_is_populated(client, catalogue):
    data = {item["title"]: item for item in client.get("/exhibitions").json()["data"]}
    assert data["Monet in Oslo"]["venue"]["name"] == "Nasjonalmuseet"
    assert data["Paris Photo"]["venue"] is None


def test_search_is_recorded(client, db, catalogue):
    client.get("/exhibitions", params={"city": "Oslo", "sort": "title"})
    events = db.events.find([Equals("eventType", "search")])
    assert len(events) == 1
    assert events[0]["metadata"]["filters"] == {"city": "Oslo"}
    assert events[0]["eventValue"] == 2
    assert events[0]["metadata"]["response_time_ms"] >= 0


# ── Detail endpoint ──────────────────────────────────────────────────────


def test_exhibition_detail(client, catalogue):
    resp = client.get(f"/exhibitions/{catalogue['monet']['id']}")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["title"] == "Monet in Oslo"
    assert data["venue"]["city"] == "Oslo"
    assert data["startDate"].startswith("2025-01-10")


def test_exhibition_detail_not_found(client, catalogue):
    resp = client.get("/exhibitions/" + "a" * 24)
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Exhibition not found"}


def test_exhibition_detail_invalid_id(client):
    assert client.get("/exhibitions/not-an-id").status_code == 400


# ── Date endpoint ────────────────────────────────────────────────────────


def test_date_search_flags_closed_day(client, catalogue):
    # 2025-02-17 is a Monday
    resp = client.get("/exhibitions/date", params={"date": "2025-02-17"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["meta"]["date"] == "2025-02-17"
    assert body["meta"]["dayOfWeek"] == "Monday"
    assert body["meta"]["total"] == 3
    flags = {item["title"]: item["isClosedOnSearchDate"] for item in body["data"]}
    assert flags == {"Bergen Drawings": False, "Monet in Oslo": True, "Sculpture Now": False}
    assert [item["title"] for item in body["data"]] == ["Bergen Drawings", "Monet in Oslo", "Sculpture Now"]


def test_date_search_inclusion_window(client, db):
    make_exhibition(db, "Summer Show", startDate=utc(2025, 4, 15), endDate=utc(2025, 8, 20))
    inside = client.get("/exhibitions/date", params={"date": "2025-05-01"}).json()
    outside = client.get("/exhibitions/date", params={"date": "2025-09-01"}).json()
    assert [item["title"] for item in inside["data"]] == ["Summer Show"]
    assert outside["data"] == []
    assert outside["meta"]["total"] == 0


def test_date_search_includes_first_and_last_day(client, catalogue):
    first = client.get("/exhibitions/date", params={"date": "2025-03-05", "city": "paris"}).json()
    last = client.get("/exhibitions/date", params={"date": "2025-04-10", "city": "paris"}).json()
    assert first["meta"]["total"] == 1
    assert last["meta"]["total"] == 1


def test_date_search_filters(client, catalogue):
    params = {"date": "2025-02-17"}
    oslo = client.get("/exhibitions/date", params={**params, "city": "OSLO"}).json()
    assert sorted(i["title"] for i in oslo["data"]) == ["Monet in Oslo", "Sculpture Now"]

    open_all_week = client.get("/exhibitions/date", params={**params, "closedDay": "none"}).json()
    assert "Monet in Oslo" not in [i["title"] for i in open_all_week["data"]]

    mondays = client.get("/exhibitions/date", params={**params, "closedDay": "Monday"}).json()
    assert [i["title"] for i in mondays["data"]] == ["Monet in Oslo"]


def test_date_search_filter_options(client, catalogue):
    options = client.get("/exhibitions/date", params={"date": "2025-02-17"}).json()["meta"]["filter_options"]
    assert options["cities"] == ["Bergen", "Oslo", "Paris"]
    assert "Photography" in options["categories"]


def test_date_search_requires_valid_date(client):
    missing = client.get("/exhibitions/date")
    assert missing.status_code == 400
    assert missing.json()["errors"][0]["field"] == "date"
    assert client.get("/exhibitions/date", params={"date": "2025-13-45"}).status_code == 400
