from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from reconnoitering.app import create_app
from reconnoitering.auth.users import create_user
from reconnoitering.config import Settings
from reconnoitering.mailer import clear_outbox
from reconnoitering.store import open_database

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "AdminPass1"
USER_EMAIL = "user@example.com"
USER_PASSWORD = "UserPass1"


def utc(year, month, day, hour=0, minute=0):
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def make_exhibition(db, title, city="Oslo", country="Norway", coords=None, **fields):
    """Insert an exhibition with sensible defaults and return it."""
    doc = {
        "title": title,
        "description": "",
        "startDate": utc(2025, 1, 1),
        "endDate": utc(2025, 12, 31),
        "location": {
            "name": f"{title} venue",
            "address": "",
            "city": city,
            "country": country,
            "coordinates": {"lat": coords[0], "lng": coords[1]} if coords else None,
        },
        "category": [],
        "artists": [],
        "tags": [],
        "popularity": 0,
        "featured": False,
        "closedDay": None,
        "addedDate": utc(2025, 1, 1),
        "lastUpdated": utc(2025, 1, 1),
    }
    doc.update(fields)
    return db.exhibitions.insert(doc)


@pytest.fixture
def settings():
    return Settings(
        store_backend="memory",
        seed_path=None,
        session_secret="test-secret",
        bcrypt_rounds=4,
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
        public_base_url="http://testserver",
        log_level="WARNING",
    )


@pytest.fixture
def db(settings):
    return open_database(settings)


@pytest.fixture
def user(db):
    return create_user(db, USER_EMAIL, USER_PASSWORD, "Test User", rounds=4)


@pytest.fixture
def client(settings, db):
    return TestClient(create_app(settings, db))


@pytest.fixture(autouse=True)
def _empty_outbox():
    clear_outbox()
    yield
    clear_outbox()


def login(client, email=USER_EMAIL, password=USER_PASSWORD):
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


def login_admin(client):
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def catalogue(db):
    """Four exhibitions: two in central Oslo, one in Paris, one without coordinates."""
    venue = db.venues.insert({
        "name": "Nasjonalmuseet",
        "address": "Brynjulf Bulls plass 3",
        "city": "Oslo",
        "country": "Norway",
        "coordinates": {"lat": 59.9139, "lng": 10.7522},
        "isActive": True,
    })
    monet = make_exhibition(
        db, "Monet in Oslo",
        coords=(59.9139, 10.7522),
        description="Water lilies and haystacks",
        startDate=utc(2025, 1, 10),
        endDate=utc(2025, 3, 1),
        category=["Painting"],
        artists=["Claude Monet"],
        tags=["impressionism"],
        popularity=50,
        closedDay="Monday",
        addedDate=utc(2025, 1, 1),
        venueId=venue["id"],
    )
    sculpture = make_exhibition(
        db, "Sculpture Now",
        coords=(59.9127, 10.7461),
        startDate=utc(2025, 2, 1),
        endDate=utc(2025, 2, 28),
        category=["Sculpture"],
        artists=["Louise Bourgeois"],
        tags=["contemporary"],
        popularity=80,
        addedDate=utc(2025, 1, 2),
    )
    paris = make_exhibition(
        db, "Paris Photo",
        city="Paris",
        country="France",
        coords=(48.8566, 2.3522),
        startDate=utc(2025, 3, 5),
        endDate=utc(2025, 4, 10),
        category=["Photography", "Painting"],
        artists=["Cindy Sherman"],
        tags=["photography", "contemporary"],
        popularity=30,
        addedDate=utc(2025, 1, 3),
    )
    bergen = make_exhibition(
        db, "Bergen Drawings",
        city="Bergen",
        startDate=utc(2025, 1, 1),
        endDate=utc(2025, 12, 31),
        category=["Drawing"],
        tags=["drawing"],
        popularity=10,
        addedDate=utc(2025, 1, 4),
    )
    return {"venue": venue, "monet": monet, "sculpture": sculpture, "paris": paris, "bergen": bergen}
