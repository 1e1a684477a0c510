from __future__ import annotations

import logging
import secrets
from typing import Any

from fastapi import HTTPException

from ..dates import utcnow
from ..mailer import send_message
from ..store.base import Database
from ..store.filters import Equals

logger = logging.getLogger(__name__)


def _confirm_link(base_url: str, token: str) -> str:
    return f"{base_url.rstrip('/')}/newsletter/confirm?token={token}"


def subscribe(db: Database, email: str, source: str, base_url: str) -> dict[str, Any]:
    """Start (or restart) a double opt-in subscription.

    A new or previously unsubscribed address becomes ``pending`` and is sent
    a confirmation link. Raises 409 when already subscribed.
    """
    email = email.strip().lower()
    existing = db.newsletter.find_one([Equals("email", email)])
    now = utcnow()

    if existing is not None and existing.get("status") == "subscribed":
        raise HTTPException(status_code=409, detail="This email is already subscribed to our newsletter")

    if existing is None:
        record = db.newsletter.insert({
            "email": email,
            "status": "pending",
            "token": secrets.token_hex(32),
            "source": source,
            "subscriptionDate": now,
            "unsubscribeDate": None,
            "createdAt": now,
        })
    else:
        record = db.newsletter.update(existing["id"], {"status": "pending", "subscriptionDate": now})

    send_message(
        email,
        "Confirm your Reconnoitering newsletter subscription",
        f"Please confirm your subscription: {_confirm_link(base_url, record['token'])}",
        token=record["token"],
    )
    return record


def confirm(db: Database, token: str) -> dict[str, Any]:
    record = db.newsletter.find_one([Equals("token", token), Equals("status", "pending")])
    if record is None:
        raise HTTPException(status_code=400, detail="Invalid or expired confirmation token")
    record = db.newsletter.update(record["id"], {"status": "subscribed", "subscriptionDate": utcnow()})
    send_message(record["email"], "Welcome to the Reconnoitering newsletter!", "Your subscription is confirmed.")
    logger.info("Newsletter subscription confirmed for %s", record["email"])
    return record


def unsubscribe(db: Database, token: str) -> dict[str, Any]:
    record = db.newsletter.find_one([Equals("token", token), Equals("status", "subscribed")])
    if record is None:
        raise HTTPException(status_code=400, detail="Invalid unsubscribe token or already unsubscribed")
    return db.newsletter.update(record["id"], {"status": "unsubscribed", "unsubscribeDate": utcnow()})
