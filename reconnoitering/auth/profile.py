from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException

from ..errors import require_valid_id
from ..search.service import populate_venues
from ..store.base import Database
from ..store.filters import AnyOf
from .models import PreferencesUpdate, ProfileUpdate
from .users import DEFAULT_PREFERENCES, public_user

logger = logging.getLogger(__name__)


def _load(db: Database, user_id: str) -> dict[str, Any]:
    user = db.users.get(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def get_profile(db: Database, user_id: str) -> dict[str, Any]:
    user = _load(db, user_id)
    return {
        **public_user(user),
        "createdAt": user.get("createdAt"),
        "favoriteCount": len(user.get("favoriteExhibitions") or []),
    }


def update_profile(db: Database, user_id: str, body: ProfileUpdate) -> dict[str, Any]:
    changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    if not changes:
        return get_profile(db, user_id)
    if db.users.update(user_id, changes) is None:
        raise HTTPException(status_code=404, detail="User not found")
    return get_profile(db, user_id)


def get_preferences(db: Database, user_id: str) -> dict[str, Any]:
    user = _load(db, user_id)
    return {**DEFAULT_PREFERENCES, **(user.get("preferences") or {})}


def _clean_list(values: list[str]) -> list[str]:
    seen: list[str] = []
    for value in values:
        value = value.strip()
        if value and value not in seen:
            seen.append(value)
    return seen


def update_preferences(db: Database, user_id: str, body: PreferencesUpdate) -> dict[str, Any]:
    changes: dict[str, Any] = {}
    for key, value in body.model_dump(by_alias=True, exclude_unset=True).items():
        if value is None:
            continue
        changes[f"preferences.{key}"] = _clean_list(value) if isinstance(value, list) else value
    if changes and db.users.update(user_id, changes) is None:
        raise HTTPException(status_code=404, detail="User not found")
    return get_preferences(db, user_id)


# ── Favorites ────────────────────────────────────────────────────────────


def list_favorites(db: Database, user_id: str) -> list[dict[str, Any]]:
    """The user's favorite exhibitions that still exist, in saved order."""
    ids = _load(db, user_id).get("favoriteExhibitions") or []
    if not ids:
        return []
    found = {doc["id"]: doc for doc in db.exhibitions.find([AnyOf("id", ids)])}
    return populate_venues(db, [found[i] for i in ids if i in found])


def add_favorite(db: Database, user_id: str, exhibition_id: str) -> list[str]:
    require_valid_id(exhibition_id, "exhibition")
    if db.exhibitions.get(exhibition_id) is None:
        raise HTTPException(status_code=404, detail="Exhibition not found")
    user = db.users.add_to_set(user_id, "favoriteExhibitions", exhibition_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user.get("favoriteExhibitions", [])


def remove_favorite(db: Database, user_id: str, exhibition_id: str) -> list[str]:
    require_valid_id(exhibition_id, "exhibition")
    user = db.users.pull(user_id, "favoriteExhibitions", exhibition_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user.get("favoriteExhibitions", [])
