from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..analytics.models import PageMetricsRequest, TrackRequest
from ..analytics.store import track, update_page_metrics
from ..auth.dependencies import get_current_user, get_db, get_settings
from ..config import Settings
from ..outreach.contact import submit_message
from ..outreach.models import ContactRequest, SubscribeRequest
from ..outreach.newsletter import confirm, subscribe, unsubscribe
from ..store.base import Database

router = APIRouter(tags=["outreach"])

CONTACT_THANKS = "Thank you for your message. We will get back to you soon."


# ── Newsletter ───────────────────────────────────────────────────────────


@router.post("/newsletter/subscribe")
def newsletter_subscribe(
    body: SubscribeRequest,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    subscribe(db, str(body.email), body.source, settings.public_base_url)
    return {
        "success": True,
        "message": "Thank you for subscribing! Please check your email to confirm your subscription.",
        "requiresConfirmation": True,
    }


@router.get("/newsletter/confirm")
def newsletter_confirm(token: str, db: Database = Depends(get_db)) -> dict:
    record = confirm(db, token)
    return {"success": True, "data": {"email": record["email"], "status": record["status"]}}


@router.get("/newsletter/unsubscribe")
def newsletter_unsubscribe(token: str, db: Database = Depends(get_db)) -> dict:
    record = unsubscribe(db, token)
    return {"success": True, "data": {"email": record["email"], "status": record["status"]}}


# ── Contact ──────────────────────────────────────────────────────────────


@router.post("/contact")
def contact(
    body: ContactRequest,
    request: Request,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    source = request.headers.get("referer", "direct")
    message = submit_message(db, body, settings.admin_email, source=source)
    response = {"success": True, "message": CONTACT_THANKS}
    if message is not None:
        response["contactId"] = message["id"]
    return response


# ── Analytics tracking ───────────────────────────────────────────────────


@router.post("/analytics/track")
def analytics_track(
    body: TrackRequest,
    db: Database = Depends(get_db),
    user: dict | None = Depends(get_current_user),
) -> dict:
    session_id = track(db, body, user_id=user["id"] if user else None)
    return {"success": True, "sessionId": session_id}


@router.put("/analytics/track")
def analytics_update(body: PageMetricsRequest, db: Database = Depends(get_db)) -> dict:
    return {"success": True, "updated": update_page_metrics(db, body)}
