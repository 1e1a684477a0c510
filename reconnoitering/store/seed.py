"""
Load the bundled catalogue into a store and make sure an admin exists.

Usage:
    python -m reconnoitering.store.seed
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ..config import DEFAULT_SETTINGS, Settings
from ..dates import parse_datetime, utcnow
from .base import Database
from .filters import Equals

logger = logging.getLogger(__name__)

_DATE_FIELDS = ("startDate", "endDate", "addedDate", "lastUpdated")


def _with_dates(doc: dict[str, Any]) -> dict[str, Any]:
    out = dict(doc)
    for field in _DATE_FIELDS:
        if field in out:
            out[field] = parse_datetime(out[field])
    now = utcnow()
    out.setdefault("addedDate", now)
    out.setdefault("lastUpdated", now)
    return out


def load_seed(database: Database, path: Path) -> dict[str, int]:
    """Insert venues, exhibitions and tags from a JSON seed file.

    Documents whose id already exists are skipped, so loading twice is safe.
    """
    with open(path, encoding="utf-8") as fh:
        payload = json.load(fh)

    counts: dict[str, int] = {}
    for name in ("venues", "exhibitions", "tags"):
        collection = getattr(database, name)
        inserted = 0
        for raw in payload.get(name, []):
            if raw.get("id") and collection.get(raw["id"]) is not None:
                continue
            collection.insert(_with_dates(raw))
            inserted += 1
        counts[name] = inserted
    logger.info("Seeded %s from %s", counts, path)
    return counts


def ensure_admin(database: Database, settings: Settings) -> dict[str, Any] | None:
    """Create the configured admin account if it does not exist yet."""
    if not settings.admin_email or not settings.admin_password:
        return None
    from ..auth.users import create_user

    email = settings.admin_email.strip().lower()
    existing = database.users.find_one([Equals("email", email)])
    if existing is not None:
        return existing
    logger.info("Creating admin account %s", email)
    return create_user(
        database,
        email=email,
        password=settings.admin_password,
        name="Administrator",
        role="admin",
        rounds=settings.bcrypt_rounds,
        check_policy=False,
    )


if __name__ == "__main__":
    from . import open_database

    settings = DEFAULT_SETTINGS
    db = open_database(settings)
    if db.backend != "memory" and settings.seed_path is not None:
        result = load_seed(db, settings.seed_path)
        print(f"Seed complete: {result}")
    db.close()
