from __future__ import annotations

import hashlib
import logging
import secrets
from datetime import timedelta
from typing import Any

from fastapi import HTTPException

from ..dates import utcnow
from ..mailer import send_message
from ..store.base import Database
from ..store.filters import Equals, Range
from .users import find_by_email, hash_password

logger = logging.getLogger(__name__)


def _digest(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def request_reset(db: Database, email: str, base_url: str, ttl_hours: int = 24) -> None:
    """Issue a reset token for *email* if the account exists.

    Unknown addresses are ignored silently so callers cannot discover
    registered emails.
    """
    user = find_by_email(db, email)
    if user is None:
        logger.info("Password reset requested for unknown address")
        return

    token = secrets.token_hex(32)
    db.users.update(user["id"], {
        "resetPasswordToken": _digest(token),
        "resetPasswordTokenExpires": utcnow() + timedelta(hours=ttl_hours),
    })
    reset_url = f"{base_url.rstrip('/')}/auth/reset-password?token={token}"
    send_message(
        user["email"],
        "Password reset request",
        f"Hi {user.get('name', '')}, use this link to choose a new password: {reset_url}\n"
        f"The link expires in {ttl_hours} hours.",
        token=token,
    )


def _user_for_token(db: Database, token: str) -> dict[str, Any] | None:
    return db.users.find_one([
        Equals("resetPasswordToken", _digest(token)),
        Range("resetPasswordTokenExpires", gte=utcnow()),
    ])


def token_is_valid(db: Database, token: str) -> bool:
    return _user_for_token(db, token) is not None


def reset_password(db: Database, token: str, password: str, rounds: int = 12) -> None:
    user = _user_for_token(db, token)
    if user is None:
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")
    db.users.update(user["id"], {
        "password": hash_password(password, rounds),
        "resetPasswordToken": None,
        "resetPasswordTokenExpires": None,
    })
    logger.info("Password reset completed for user %s", user["id"])
