from __future__ import annotations

import pytest

from reconnoitering.catalogue.service import slugify


@pytest.fixture
def venues(db):
    rows = [
        ("Tate Modern", "London", "United Kingdom", (51.5076, -0.0994), True),
        ("National Gallery", "London", "United Kingdom", (51.5089, -0.1283), True),
        ("Louvre", "Paris", "France", (48.8606, 2.3376), True),
        ("Closed Hall", "Paris", "France", (48.85, 2.35), False),
        ("Unmapped", "Oslo", "Norway", None, True),
    ]
    created = {}
    for name, city, country, coords, active in rows:
        created[name] = db.venues.insert({
            "name": name,
            "address": "",
            "city": city,
            "country": country,
            "coordinates": {"lat": coords[0], "lng": coords[1]} if coords else None,
            "isActive": active,
            "notes": "Impressionist wing" if name == "Louvre" else "",
        })
    return created


def test_slugify():
    assert slugify("Street Art & Murals") == "street-art-murals"
    assert slugify("Art Déco") == "art-deco"
    assert slugify("  ") == ""


# ── /venues ──────────────────────────────────────────────────────────────


def test_public_venues_only_active_with_coordinates(client, venues):
    body = client.get("/venues").json()
    assert [v["name"] for v in body["data"]] == ["Louvre", "National Gallery", "Tate Modern"]
    assert body["meta"]["total"] == 3
    assert set(body["data"][0]) == {"id", "name", "city", "country", "coordinates"}


def test_public_venue_filter_options(client, venues):
    options = client.get("/venues").json()["meta"]["filter_options"]
    assert options["countries"] == ["France", "Norway", "United Kingdom"]
    assert options["cities"] == ["London", "Oslo", "Paris"]


def test_public_venues_filter_by_city_exactly(client, venues):
    names = [v["name"] for v in client.get("/venues", params={"city": "london"}).json()["data"]]
    assert names == ["National Gallery", "Tate Modern"]
    assert client.get("/venues", params={"city": "Lond"}).json()["data"] == []


def test_public_venues_sort_and_page(client, venues):
    body = client.get("/venues", params={"sort": "-name", "limit": 2, "skip": 1}).json()
    assert [v["name"] for v in body["data"]] == ["National Gallery", "Louvre"]
    assert body["meta"]["total"] == 3


def test_public_venues_text_search(client, venues):
    names = [v["name"] for v in client.get("/venues", params={"q": "impressionist"}).json()["data"]]
    assert names == ["Louvre"]


def test_public_venues_bad_sort(client):
    assert client.get("/venues", params={"sort": "popularity"}).status_code == 400


# ── /venues/{id} ─────────────────────────────────────────────────────────


def test_venue_detail_lists_exhibitions(client, catalogue):
    venue = catalogue["venue"]
    data = client.get(f"/venues/{venue['id']}").json()["data"]
    assert data["name"] == "Nasjonalmuseet"
    assert [e["title"] for e in data["exhibitions"]] == ["Monet in Oslo"]


def test_venue_detail_errors(client, venues):
    assert client.get("/venues/nope").status_code == 400
    assert client.get("/venues/" + "e" * 24).status_code == 404
    assert client.get(f"/venues/{venues['Closed Hall']['id']}").status_code == 404


# ── /tags ────────────────────────────────────────────────────────────────


def test_tags_counted_across_exhibitions(client, catalogue):
    body = client.get("/tags").json()
    assert body["data"][0] == {"name": "contemporary", "count": 2}
    assert {"name": "drawing", "count": 1} in body["data"]
    assert body["meta"]["total"] == 4


def test_tags_empty_catalogue(client):
    assert client.get("/tags").json()["data"] == []
