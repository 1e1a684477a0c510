from __future__ import annotations

import logging
from typing import Any

from ..dates import utcnow
from ..mailer import send_message
from ..store.base import Database
from ..store.filters import Equals
from .models import ContactRequest

logger = logging.getLogger(__name__)

SPAM_KEYWORDS = (
    "viagra",
    "cialis",
    "casino",
    "lottery",
    "prince",
    "inheritance",
    "click here",
    "buy now",
    "limited time",
    "act now",
)


def contains_spam(text: str) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in SPAM_KEYWORDS)


def submit_message(
    db: Database,
    body: ContactRequest,
    admin_email: str,
    source: str = "direct",
) -> dict[str, Any] | None:
    """Store a contact message and notify the admin.

    Returns ``None`` for submissions dropped as spam; the caller answers them
    exactly like accepted ones.
    """
    if body.website:
        logger.info("Contact honeypot triggered")
        return None
    if contains_spam(body.subject) or contains_spam(body.message):
        logger.info("Contact message rejected as spam")
        return None

    contact = db.contacts.insert({
        "name": body.name.strip(),
        "email": str(body.email).strip().lower(),
        "subject": body.subject.strip(),
        "message": body.message.strip(),
        "status": "new",
        "source": source,
        "createdAt": utcnow(),
    })
    if admin_email:
        send_message(
            admin_email,
            f"New Contact Form Submission: {contact['subject']}",
            f"From {contact['name']} <{contact['email']}>:\n\n{contact['message']}",
            contactId=contact["id"],
        )
    send_message(
        contact["email"],
        "Thank you for contacting Reconnoitering",
        f"Hi {contact['name']}, we have received your message and will get back to you soon.",
    )
    return contact


def list_messages(
    db: Database,
    status: str | None = None,
    limit: int = 20,
    skip: int = 0,
) -> tuple[list[dict[str, Any]], int]:
    filters = [Equals("status", status)] if status else []
    messages = db.contacts.find(filters, sort=[("createdAt", -1)], skip=skip, limit=limit)
    return messages, db.contacts.count(filters)
