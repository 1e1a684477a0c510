from __future__ import annotations

import secrets
from typing import Any

from ..dates import utcnow
from ..store.base import Database
from ..store.filters import Equals
from .models import PageMetricsRequest, TrackRequest

# query parameters whose presence counts as using that filter
SEARCH_FILTERS = ("city", "country", "startDate", "endDate", "category", "artist", "tag", "search")


def new_session_id() -> str:
    return secrets.token_hex(16)


def track(db: Database, body: TrackRequest, user_id: str | None = None) -> str:
    """Store a page view or event and return the visitor session id."""
    session_id = body.session_id or new_session_id()
    if body.type == "pageview":
        db.pageviews.insert({
            "page": body.page,
            "path": body.path,
            "referrer": body.referrer,
            "sessionId": session_id,
            "userId": user_id,
            "exhibitionId": body.exhibition_id,
            "duration": None,
            "scrollDepth": None,
            "clicks": None,
            "createdAt": utcnow(),
        })
    else:
        record_event(
            db,
            body.event_type or "click",
            body.event_name or "",
            value=body.event_value,
            page=body.page,
            user_id=user_id,
            session_id=session_id,
            metadata=body.metadata,
        )
    return session_id


def update_page_metrics(db: Database, body: PageMetricsRequest) -> bool:
    """Attach engagement numbers to the latest view of a page in a session."""
    latest = db.pageviews.find(
        [Equals("sessionId", body.session_id), Equals("page", body.page)],
        sort=[("createdAt", -1)],
        limit=1,
    )
    if not latest:
        return False
    changes = body.model_dump(by_alias=True, exclude_none=True, exclude={"session_id", "page"})
    if changes:
        db.pageviews.update(latest[0]["id"], changes)
    return True


def record_event(
    db: Database,
    event_type: str,
    name: str,
    value: Any = None,
    page: str = "",
    user_id: str | None = None,
    session_id: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> None:
    db.events.insert({
        "eventType": event_type,
        "eventName": name,
        "eventValue": value,
        "page": page,
        "userId": user_id,
        "sessionId": session_id,
        "metadata": metadata or {},
        "createdAt": utcnow(),
    })


def record_search(
    db: Database,
    params: dict[str, Any],
    results_count: int,
    response_time_ms: float,
    user_id: str | None = None,
) -> None:
    used = {k: str(v) for k, v in params.items() if k in SEARCH_FILTERS and v not in (None, "")}
    record_event(
        db,
        "search",
        "exhibition_search",
        value=results_count,
        page="/exhibitions",
        user_id=user_id,
        metadata={"filters": used, "response_time_ms": response_time_ms},
    )
