from __future__ import annotations

import re
from typing import Any

import bcrypt
from fastapi import HTTPException

from ..dates import utcnow
from ..store.base import Database
from ..store.filters import Equals

DEFAULT_PREFERENCES: dict[str, Any] = {
    "preferredTags": [],
    "preferredArtists": [],
    "preferredLocations": [],
    "notificationFrequency": "weekly",
}


def _hash_password(plain: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode(), hashed.encode())
    except ValueError:
        return False


def password_problems(password: str) -> list[str]:
    """Return the policy rules *password* breaks (empty when acceptable)."""
    problems = []
    if len(password) < 8:
        problems.append("Password must be at least 8 characters long")
    if len(password) > 128:
        problems.append("Password must not exceed 128 characters")
    if not re.search(r"[A-Z]", password):
        problems.append("Password must include an uppercase letter")
    if not re.search(r"[a-z]", password):
        problems.append("Password must include a lowercase letter")
    if not re.search(r"[0-9]", password):
        problems.append("Password must include a number")
    return problems


def check_password_policy(password: str) -> None:
    problems = password_problems(password)
    if problems:
        raise HTTPException(status_code=400, detail="; ".join(problems))


def hash_password(password: str, rounds: int = 12) -> str:
    check_password_policy(password)
    return _hash_password(password, rounds)


def public_user(user: dict[str, Any]) -> dict[str, Any]:
    """Strip secrets from a stored user document."""
    return {
        "id": user["id"],
        "email": user["email"],
        "name": user.get("name", ""),
        "role": user.get("role", "user"),
        "image": user.get("image", ""),
    }


def find_by_email(db: Database, email: str) -> dict[str, Any] | None:
    return db.users.find_one([Equals("email", email.strip().lower())])


def create_user(
    db: Database,
    email: str,
    password: str,
    name: str,
    role: str = "user",
    rounds: int = 12,
    check_policy: bool = True,
) -> dict[str, Any]:
    """Register a new account. Raises 409 if the email is taken."""
    email = email.strip().lower()
    if find_by_email(db, email) is not None:
        raise HTTPException(status_code=409, detail="User with this email already exists")
    password_hash = hash_password(password, rounds) if check_policy else _hash_password(password, rounds)
    return db.users.insert({
        "email": email,
        "password": password_hash,
        "name": name.strip(),
        "role": role,
        "image": "",
        "favoriteExhibitions": [],
        "preferences": dict(DEFAULT_PREFERENCES),
        "createdAt": utcnow(),
    })


def authenticate(db: Database, email: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns the public user dict or ``None``."""
    record = find_by_email(db, email)
    if record and _verify_password(password, record.get("password", "")):
        return public_user(record)
    return None


def change_password(db: Database, user_id: str, current: str, new: str, rounds: int = 12) -> None:
    record = db.users.get(user_id)
    if record is None:
        raise HTTPException(status_code=404, detail="User not found")
    if not _verify_password(current, record.get("password", "")):
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    db.users.update(user_id, {"password": hash_password(new, rounds)})
