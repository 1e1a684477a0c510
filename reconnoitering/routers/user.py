from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..auth.dependencies import get_db, get_settings, require_user
from ..auth.models import ChangePasswordRequest, PreferencesUpdate, ProfileUpdate
from ..auth.profile import (
    add_favorite,
    get_preferences,
    get_profile,
    list_favorites,
    remove_favorite,
    update_preferences,
    update_profile,
)
from ..auth.users import change_password
from ..config import Settings
from ..search.service import envelope
from ..store.base import Database

router = APIRouter(prefix="/user", tags=["user"])


@router.get("/profile")
def profile(user: dict = Depends(require_user), db: Database = Depends(get_db)) -> dict:
    return envelope(get_profile(db, user["id"]))


@router.put("/profile")
def edit_profile(
    body: ProfileUpdate,
    request: Request,
    user: dict = Depends(require_user),
    db: Database = Depends(get_db),
) -> dict:
    updated = update_profile(db, user["id"], body)
    # keep the session copy in step with the stored name/image
    request.session["user"] = {**user, "name": updated["name"], "image": updated["image"]}
    return envelope(updated)


@router.put("/password")
def password(
    body: ChangePasswordRequest,
    user: dict = Depends(require_user),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    change_password(db, user["id"], body.current_password, body.new_password, rounds=settings.bcrypt_rounds)
    return {"success": True, "message": "Password updated"}


@router.get("/preferences")
def preferences(user: dict = Depends(require_user), db: Database = Depends(get_db)) -> dict:
    return envelope(get_preferences(db, user["id"]))


@router.put("/preferences")
def edit_preferences(
    body: PreferencesUpdate,
    user: dict = Depends(require_user),
    db: Database = Depends(get_db),
) -> dict:
    return envelope(update_preferences(db, user["id"], body))


@router.get("/favorites")
def favorites(user: dict = Depends(require_user), db: Database = Depends(get_db)) -> dict:
    items = list_favorites(db, user["id"])
    return envelope(items, total=len(items))


@router.post("/favorites/{exhibition_id}")
def favorite(exhibition_id: str, user: dict = Depends(require_user), db: Database = Depends(get_db)) -> dict:
    ids = add_favorite(db, user["id"], exhibition_id)
    return envelope({"favoriteExhibitions": ids, "isFavorite": True})


@router.delete("/favorites/{exhibition_id}")
def unfavorite(exhibition_id: str, user: dict = Depends(require_user), db: Database = Depends(get_db)) -> dict:
    ids = remove_favorite(db, user["id"], exhibition_id)
    return envelope({"favoriteExhibitions": ids, "isFavorite": False})
