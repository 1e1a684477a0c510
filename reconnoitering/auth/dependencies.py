from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from ..config import Settings
from ..store.base import Database


def get_db(request: Request) -> Database:
    """The database opened by ``create_app``."""
    return request.app.state.db


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_current_user(request: Request) -> dict | None:
    """Session copy of the logged-in user (id, email, name, role, image)."""
    return request.session.get("user") or None


def require_user(user: dict | None = Depends(get_current_user)) -> dict:
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_admin(user: dict = Depends(require_user)) -> dict:
    # 401 comes from require_user; a logged-in non-admin gets 403
    if user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
