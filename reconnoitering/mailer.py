"""Outgoing mail.

Nothing is delivered: each message is logged and the most recent
``OUTBOX_SIZE`` are kept in memory so tests and local runs can read links
and tokens back. Older messages, tokens included, are dropped.
"""
from __future__ import annotations

import logging
import time
from collections import deque
from typing import Any

logger = logging.getLogger(__name__)

OUTBOX_SIZE = 100

_outbox: deque[dict[str, Any]] = deque(maxlen=OUTBOX_SIZE)


def send_message(to: str, subject: str, body: str, **data: Any) -> None:
    """Log a message and keep it in the outbox."""
    _outbox.append({
        "to": to,
        "subject": subject,
        "body": body,
        "timestamp": time.time(),
        **data,
    })
    logger.info("Queued message to %s: %s", to, subject)


def get_outbox() -> list[dict[str, Any]]:
    """Kept messages, oldest first."""
    return list(_outbox)


def clear_outbox() -> None:
    _outbox.clear()
