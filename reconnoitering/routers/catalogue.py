from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query

from ..auth.dependencies import get_db
from ..catalogue.service import popular_tags, public_venues, venue_detail
from ..search.service import envelope
from ..store.base import Database

router = APIRouter(tags=["catalogue"])


@router.get("/venues")
def venues(
    q: str | None = None,
    city: str | None = None,
    country: str | None = None,
    sort: Literal["name", "-name", "city", "-city", "country", "-country"] = "name",
    limit: int = Query(default=200, ge=1, le=500),
    skip: int = Query(default=0, ge=0),
    db: Database = Depends(get_db),
) -> dict:
    return public_venues(db, q=q, city=city, country=country, sort=sort, limit=limit, skip=skip)


@router.get("/venues/{venue_id}")
def venue(venue_id: str, db: Database = Depends(get_db)) -> dict:
    return envelope(venue_detail(db, venue_id))


@router.get("/tags")
def tags(db: Database = Depends(get_db)) -> dict:
    counts = popular_tags(db)
    return envelope(counts, total=len(counts))
