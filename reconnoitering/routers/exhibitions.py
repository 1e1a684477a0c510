from __future__ import annotations

import time
from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query

from ..analytics.store import record_search
from ..auth.dependencies import get_current_user, get_db, require_user
from ..search.builder import ExhibitionQuery
from ..search.service import (
    envelope,
    exhibitions_on_date,
    get_exhibition,
    nearby_exhibitions,
    recommend_exhibitions,
    search_exhibitions,
)
from ..search.sorting import DEFAULT_LIMIT, DEFAULT_SORT, MAX_LIMIT, SortOption
from ..store.base import Database

router = APIRouter(tags=["exhibitions"])

ClosedDay = Literal[
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday", "none"
]


@router.get("/exhibitions")
def list_exhibitions(
    city: str | None = None,
    country: str | None = None,
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    category: str | None = None,
    artist: str | None = None,
    tag: str | None = None,
    search: str | None = None,
    sort: SortOption = DEFAULT_SORT,
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    skip: int = Query(default=0, ge=0),
    db: Database = Depends(get_db),
    user: dict | None = Depends(get_current_user),
) -> dict:
    start = time.time()
    query = ExhibitionQuery(
        city=city,
        country=country,
        start_date=start_date,
        end_date=end_date,
        category=category,
        artist=artist,
        tag=tag,
        search=search,
    )
    response = search_exhibitions(db, query, sort=sort, limit=limit, skip=skip)

    elapsed_ms = round((time.time() - start) * 1000, 1)
    record_search(
        db,
        {
            "city": city,
            "country": country,
            "startDate": start_date,
            "endDate": end_date,
            "category": category,
            "artist": artist,
            "tag": tag,
            "search": search,
        },
        response["meta"]["total"],
        elapsed_ms,
        user_id=user["id"] if user else None,
    )
    return response


@router.get("/exhibitions/date")
def exhibitions_by_date(
    day: date = Query(..., alias="date"),
    city: str | None = None,
    category: str | None = None,
    closed_day: ClosedDay | None = Query(default=None, alias="closedDay"),
    db: Database = Depends(get_db),
) -> dict:
    return exhibitions_on_date(db, day, city=city, category=category, closed_day=closed_day)


@router.get("/exhibitions/{exhibition_id}")
def exhibition_detail(exhibition_id: str, db: Database = Depends(get_db)) -> dict:
    return envelope(get_exhibition(db, exhibition_id))


@router.get("/nearby")
def nearby(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lng: float = Query(..., ge=-180.0, le=180.0),
    radius: float = Query(default=10.0, gt=0, le=20000),
    limit: int = Query(default=50, ge=1, le=200),
    db: Database = Depends(get_db),
) -> dict:
    if lat == 0 or lng == 0:
        raise HTTPException(status_code=400, detail="Valid latitude and longitude are required")
    return nearby_exhibitions(db, lat, lng, radius_km=radius, limit=limit)


@router.get("/recommendation")
def recommendation(
    limit: int = Query(default=6, ge=1, le=50),
    user: dict = Depends(require_user),
    db: Database = Depends(get_db),
) -> dict:
    return recommend_exhibitions(db, user["id"], limit=limit)
