"""
Document store layer.

Responsibilities:
- Define the filter expressions the query layer is written against.
- Provide two interchangeable backends: MongoDB (pymongo) and an in-process
  pandas-backed store for development and tests.
- Build the application's ``Database`` once, at start-up.
"""
from __future__ import annotations

import logging

from ..config import Settings
from .base import Database
from .memory import MemoryCollection

logger = logging.getLogger(__name__)

COLLECTIONS = ["exhibitions", "venues", "users", "tags", "artists", "newsletter", "contacts", "pageviews", "events"]

TEXT_FIELDS = {
    "exhibitions": (
        "title",
        "description",
        "location.name",
        "location.city",
        "location.country",
        "artists",
        "category",
        "tags",
    ),
    "venues": ("name", "address", "city", "country", "notes"),
    "artists": ("name", "bio"),
}


def memory_database() -> Database:
    """Return an empty in-process database."""
    collections = {name: MemoryCollection(name, TEXT_FIELDS.get(name, ())) for name in COLLECTIONS}
    return Database(**collections, backend="memory")


def mongo_database(uri: str, db_name: str) -> Database:
    from .mongo import MongoCollection, connect

    client, db = connect(uri, db_name)
    collections = {name: MongoCollection(db[name]) for name in COLLECTIONS}
    return Database(**collections, backend="mongo", on_close=client.close)


def open_database(settings: Settings) -> Database:
    """Build the database selected by ``settings.store_backend``.

    The memory backend is loaded from ``settings.seed_path`` when the file
    exists; both backends get the configured admin account.
    """
    from .seed import ensure_admin, load_seed

    backend = settings.store_backend.lower()
    if backend == "mongo":
        database = mongo_database(settings.mongodb_uri, settings.mongodb_db)
    elif backend == "memory":
        database = memory_database()
        if settings.seed_path is not None and settings.seed_path.is_file():
            load_seed(database, settings.seed_path)
    else:
        raise ValueError(f"Unknown STORE_BACKEND: {settings.store_backend!r}")

    ensure_admin(database, settings)
    logger.info("Opened %s store", database.backend)
    return database
