from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query

from ..analytics.aggregator import compute_analytics
from ..auth.dependencies import get_db, require_admin
from ..catalogue import service as catalogue
from ..catalogue.models import (
    ArtistIn,
    ArtistUpdate,
    ExhibitionIn,
    ExhibitionUpdate,
    TagIn,
    TagUpdate,
    VenueIn,
    VenueUpdate,
)
from ..outreach.contact import list_messages
from ..search.service import envelope
from ..store.base import Database

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


# ── Exhibitions ──────────────────────────────────────────────────────────


@router.get("/exhibitions")
def admin_exhibitions(db: Database = Depends(get_db)) -> dict:
    items = catalogue.list_exhibitions(db)
    return envelope(items, total=len(items))


@router.post("/exhibitions", status_code=201)
def admin_create_exhibition(body: ExhibitionIn, db: Database = Depends(get_db)) -> dict:
    return envelope(catalogue.create_exhibition(db, body))


@router.put("/exhibitions/{exhibition_id}")
def admin_update_exhibition(exhibition_id: str, body: ExhibitionUpdate, db: Database = Depends(get_db)) -> dict:
    return envelope(catalogue.update_exhibition(db, exhibition_id, body))


@router.delete("/exhibitions/{exhibition_id}")
def admin_delete_exhibition(exhibition_id: str, db: Database = Depends(get_db)) -> dict:
    catalogue.delete_exhibition(db, exhibition_id)
    return {"success": True}


# ── Venues ───────────────────────────────────────────────────────────────


@router.get("/venues")
def admin_venues(db: Database = Depends(get_db)) -> dict:
    items = catalogue.list_venues(db)
    return envelope(items, total=len(items))


@router.post("/venues", status_code=201)
def admin_create_venue(body: VenueIn, db: Database = Depends(get_db)) -> dict:
    return envelope(catalogue.create_venue(db, body))


@router.put("/venues/{venue_id}")
def admin_update_venue(venue_id: str, body: VenueUpdate, db: Database = Depends(get_db)) -> dict:
    return envelope(catalogue.update_venue(db, venue_id, body))


@router.delete("/venues/{venue_id}")
def admin_delete_venue(venue_id: str, db: Database = Depends(get_db)) -> dict:
    return envelope(catalogue.deactivate_venue(db, venue_id))


# ── Tags ─────────────────────────────────────────────────────────────────


@router.get("/tags")
def admin_tags(db: Database = Depends(get_db)) -> dict:
    items = catalogue.list_tags(db)
    return envelope(items, total=len(items))


@router.post("/tags", status_code=201)
def admin_create_tag(body: TagIn, db: Database = Depends(get_db)) -> dict:
    return envelope(catalogue.create_tag(db, body))


@router.put("/tags/{tag_id}")
def admin_update_tag(tag_id: str, body: TagUpdate, db: Database = Depends(get_db)) -> dict:
    return envelope(catalogue.update_tag(db, tag_id, body))


@router.delete("/tags/{tag_id}")
def admin_delete_tag(tag_id: str, db: Database = Depends(get_db)) -> dict:
    catalogue.delete_tag(db, tag_id)
    return {"success": True}


# ── Artists ──────────────────────────────────────────────────────────────


@router.get("/artists")
def admin_artists(db: Database = Depends(get_db)) -> dict:
    items = catalogue.list_artists(db)
    return envelope(items, total=len(items))


@router.post("/artists", status_code=201)
def admin_create_artist(body: ArtistIn, db: Database = Depends(get_db)) -> dict:
    return envelope(catalogue.create_artist(db, body))


@router.put("/artists/{artist_id}")
def admin_update_artist(artist_id: str, body: ArtistUpdate, db: Database = Depends(get_db)) -> dict:
    return envelope(catalogue.update_artist(db, artist_id, body))


@router.delete("/artists/{artist_id}")
def admin_delete_artist(artist_id: str, db: Database = Depends(get_db)) -> dict:
    catalogue.delete_artist(db, artist_id)
    return {"success": True}


# ── Dashboard, contacts & analytics ──────────────────────────────────────


@router.get("/dashboard/stats")
def admin_dashboard(db: Database = Depends(get_db)) -> dict:
    return envelope(catalogue.dashboard_stats(db))


@router.get("/contacts")
def admin_contacts(
    status: Literal["new", "read", "responded", "archived"] | None = None,
    limit: int = Query(default=20, ge=1, le=100),
    skip: int = Query(default=0, ge=0),
    db: Database = Depends(get_db),
) -> dict:
    messages, total = list_messages(db, status=status, limit=limit, skip=skip)
    return envelope(messages, total=total, limit=limit, skip=skip)


@router.get("/analytics")
def admin_analytics(
    time_range: Literal["day", "week", "month", "year"] = Query(default="week", alias="timeRange"),
    db: Database = Depends(get_db),
) -> dict:
    return envelope(compute_analytics(db, time_range))
