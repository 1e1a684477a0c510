from __future__ import annotations

import logging
import re
import unicodedata
from typing import Any

from fastapi import HTTPException

from ..dates import to_utc, utcnow
from ..errors import require_valid_id
from ..search.facets import flatten_values, tag_counts
from ..search.service import envelope, populate_venues
from ..store.base import Collection, Database
from ..store.filters import TEXT_SCORE, Contains, Equals, Exists, Filter, Range, Text
from .models import (
    ArtistIn,
    ArtistUpdate,
    ExhibitionIn,
    ExhibitionUpdate,
    TagIn,
    TagUpdate,
    VenueIn,
    VenueUpdate,
)

logger = logging.getLogger(__name__)

VENUE_SORTS = {"name", "-name", "city", "-city", "country", "-country"}
PUBLIC_VENUE_FIELDS = ("id", "name", "city", "country", "coordinates")
# venue fields copied into an exhibition's location
LOCATION_FIELDS = {"name", "address", "city", "country", "coordinates"}


def slugify(name: str) -> str:
    """``"Street Art & Murals"`` -> ``"street-art-murals"``."""
    text = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode()
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def _dates_in_order(doc: dict[str, Any]) -> None:
    start, end = doc.get("startDate"), doc.get("endDate")
    if start is not None and end is not None and end < start:
        raise HTTPException(status_code=400, detail="endDate must be on or after startDate")


def _location_of(venue: dict[str, Any]) -> dict[str, Any]:
    return {
        "name": venue.get("name", ""),
        "address": venue.get("address", ""),
        "city": venue.get("city", ""),
        "country": venue.get("country", ""),
        "coordinates": venue.get("coordinates"),
    }


def _venue_location(db: Database, venue_id: str) -> dict[str, Any]:
    require_valid_id(venue_id, "venue")
    venue = db.venues.get(venue_id)
    if venue is None:
        raise HTTPException(status_code=400, detail="Venue does not exist")
    return _location_of(venue)


def _sync_exhibition_locations(db: Database, venue: dict[str, Any]) -> int:
    """Copy the venue's address and coordinates onto every exhibition held there."""
    location = _location_of(venue)
    linked = db.exhibitions.find([Equals("venueId", venue["id"])])
    now = utcnow()
    for exhibition in linked:
        db.exhibitions.update(exhibition["id"], {"location": location, "lastUpdated": now})
    return len(linked)


def _normalise_dates(doc: dict[str, Any]) -> dict[str, Any]:
    for field in ("startDate", "endDate"):
        if doc.get(field) is not None:
            doc[field] = to_utc(doc[field])
    return doc


# ── Exhibitions ──────────────────────────────────────────────────────────


def list_exhibitions(db: Database) -> list[dict[str, Any]]:
    return populate_venues(db, db.exhibitions.find(sort=[("addedDate", -1)]))


def create_exhibition(db: Database, body: ExhibitionIn) -> dict[str, Any]:
    doc = _normalise_dates(body.model_dump(by_alias=True))
    _dates_in_order(doc)
    if doc.get("venueId"):
        doc["location"] = _venue_location(db, doc["venueId"])
    now = utcnow()
    doc["addedDate"] = now
    doc["lastUpdated"] = now
    created = db.exhibitions.insert(doc)
    logger.info("Created exhibition %s (%s)", created["id"], created["title"])
    return populate_venues(db, [created])[0]


def update_exhibition(db: Database, exhibition_id: str, body: ExhibitionUpdate) -> dict[str, Any]:
    require_valid_id(exhibition_id, "exhibition")
    current = db.exhibitions.get(exhibition_id)
    if current is None:
        raise HTTPException(status_code=404, detail="Exhibition not found")

    changes = _normalise_dates(body.model_dump(by_alias=True, exclude_unset=True))
    _dates_in_order({**current, **changes})
    if changes.get("venueId"):
        changes["location"] = _venue_location(db, changes["venueId"])
    changes["lastUpdated"] = utcnow()

    updated = db.exhibitions.update(exhibition_id, changes)
    if updated is None:
        raise HTTPException(status_code=404, detail="Exhibition not found")
    return populate_venues(db, [updated])[0]


def delete_exhibition(db: Database, exhibition_id: str) -> None:
    require_valid_id(exhibition_id, "exhibition")
    if not db.exhibitions.delete(exhibition_id):
        raise HTTPException(status_code=404, detail="Exhibition not found")
    logger.info("Deleted exhibition %s", exhibition_id)


# ── Venues ───────────────────────────────────────────────────────────────


def list_venues(db: Database) -> list[dict[str, Any]]:
    return db.venues.find(sort=[("name", 1)])


def create_venue(db: Database, body: VenueIn) -> dict[str, Any]:
    doc = body.model_dump(by_alias=True)
    now = utcnow()
    doc["addedDate"] = now
    doc["lastUpdated"] = now
    return db.venues.insert(doc)


def update_venue(db: Database, venue_id: str, body: VenueUpdate) -> dict[str, Any]:
    require_valid_id(venue_id, "venue")
    changes = body.model_dump(by_alias=True, exclude_unset=True)
    changes["lastUpdated"] = utcnow()
    updated = db.venues.update(venue_id, changes)
    if updated is None:
        raise HTTPException(status_code=404, detail="Venue not found")
    if LOCATION_FIELDS & changes.keys():
        moved = _sync_exhibition_locations(db, updated)
        logger.info("Venue %s changed; relocated %d exhibitions", venue_id, moved)
    return updated


def deactivate_venue(db: Database, venue_id: str) -> dict[str, Any]:
    """Venues are never removed; they are hidden from the public listing."""
    require_valid_id(venue_id, "venue")
    updated = db.venues.update(venue_id, {"isActive": False, "lastUpdated": utcnow()})
    if updated is None:
        raise HTTPException(status_code=404, detail="Venue not found")
    logger.info("Deactivated venue %s", venue_id)
    return updated


def public_venues(
    db: Database,
    q: str | None = None,
    city: str | None = None,
    country: str | None = None,
    sort: str = "name",
    limit: int = 200,
    skip: int = 0,
) -> dict[str, Any]:
    """Active venues that can be placed on a map."""
    if sort not in VENUE_SORTS:
        raise HTTPException(status_code=400, detail=f"Unsupported sort: {sort}")
    active = [Equals("isActive", True)]
    filters: list[Filter] = [*active, Exists("coordinates.lat"), Exists("coordinates.lng")]
    if q and q.strip():
        filters.append(Text(q.strip()))
    if city and city.strip():
        filters.append(Contains("city", city.strip(), exact=True))
    if country and country.strip():
        filters.append(Contains("country", country.strip(), exact=True))

    field = sort.lstrip("-")
    order = [(field, -1 if sort.startswith("-") else 1)]
    if q and q.strip():
        order.insert(0, (TEXT_SCORE, -1))

    venues = db.venues.find(filters, sort=order, skip=skip, limit=limit)
    return envelope(
        [{k: v.get(k) for k in PUBLIC_VENUE_FIELDS} for v in venues],
        total=db.venues.count(filters),
        filter_options={
            "countries": flatten_values(db.venues.distinct("country", active)),
            "cities": flatten_values(db.venues.distinct("city", active)),
        },
    )


def venue_detail(db: Database, venue_id: str) -> dict[str, Any]:
    require_valid_id(venue_id, "venue")
    venue = db.venues.get(venue_id)
    if venue is None or not venue.get("isActive", True):
        raise HTTPException(status_code=404, detail="Venue not found")
    exhibitions = db.exhibitions.find([Equals("venueId", venue_id)], sort=[("startDate", -1)])
    return {**venue, "exhibitions": exhibitions}


# ── Tags & artists ───────────────────────────────────────────────────────


def _checked_name(collection: Collection, name: str, what: str, exclude_id: str | None = None) -> str:
    """Strip *name* and make sure no other record shares its slug.

    Names that differ only in case or punctuation share a slug, so they count
    as duplicates.
    """
    name = name.strip()
    slug = slugify(name)
    if not slug:
        raise HTTPException(status_code=400, detail=f"{what} name must contain letters or digits")
    clashes = collection.find([Equals("slug", slug)])
    if any(record["id"] != exclude_id for record in clashes):
        raise HTTPException(status_code=409, detail=f"{what} with this name already exists")
    return name


def list_tags(db: Database) -> list[dict[str, Any]]:
    return db.tags.find(sort=[("name", 1)])


def popular_tags(db: Database) -> list[dict[str, Any]]:
    return tag_counts(db.exhibitions)


def create_tag(db: Database, body: TagIn) -> dict[str, Any]:
    name = _checked_name(db.tags, body.name, "Tag")
    now = utcnow()
    return db.tags.insert({
        "name": name,
        "slug": slugify(name),
        "description": body.description.strip(),
        "addedDate": now,
        "lastUpdated": now,
    })


def update_tag(db: Database, tag_id: str, body: TagUpdate) -> dict[str, Any]:
    require_valid_id(tag_id, "tag")
    if db.tags.get(tag_id) is None:
        raise HTTPException(status_code=404, detail="Tag not found")
    changes: dict[str, Any] = {"lastUpdated": utcnow()}
    if body.name is not None:
        changes["name"] = _checked_name(db.tags, body.name, "Tag", exclude_id=tag_id)
        changes["slug"] = slugify(changes["name"])
    if body.description is not None:
        changes["description"] = body.description.strip()
    return db.tags.update(tag_id, changes)


def delete_tag(db: Database, tag_id: str) -> None:
    require_valid_id(tag_id, "tag")
    if not db.tags.delete(tag_id):
        raise HTTPException(status_code=404, detail="Tag not found")


def list_artists(db: Database) -> list[dict[str, Any]]:
    return db.artists.find(sort=[("name", 1)])


def create_artist(db: Database, body: ArtistIn) -> dict[str, Any]:
    doc = body.model_dump(by_alias=True)
    doc["name"] = _checked_name(db.artists, body.name, "Artist")
    doc["slug"] = slugify(doc["name"])
    now = utcnow()
    doc["addedDate"] = now
    doc["lastUpdated"] = now
    created = db.artists.insert(doc)
    logger.info("Created artist %s (%s)", created["id"], created["name"])
    return created


def update_artist(db: Database, artist_id: str, body: ArtistUpdate) -> dict[str, Any]:
    require_valid_id(artist_id, "artist")
    if db.artists.get(artist_id) is None:
        raise HTTPException(status_code=404, detail="Artist not found")
    changes = {k: v for k, v in body.model_dump(by_alias=True, exclude_unset=True).items() if v is not None}
    if "name" in changes:
        changes["name"] = _checked_name(db.artists, changes["name"], "Artist", exclude_id=artist_id)
        changes["slug"] = slugify(changes["name"])
    changes["lastUpdated"] = utcnow()
    return db.artists.update(artist_id, changes)


def delete_artist(db: Database, artist_id: str) -> None:
    require_valid_id(artist_id, "artist")
    if not db.artists.delete(artist_id):
        raise HTTPException(status_code=404, detail="Artist not found")


# ── Dashboard ────────────────────────────────────────────────────────────


def dashboard_stats(db: Database) -> dict[str, Any]:
    """Catalogue totals and the five most recently added exhibitions."""
    now = utcnow()
    exhibitions = db.exhibitions
    recent = populate_venues(db, exhibitions.find(sort=[("addedDate", -1)], limit=5))
    return {
        "stats": {
            "exhibitions": {
                "total": exhibitions.count(),
                "active": exhibitions.count([Range("startDate", lte=now), Range("endDate", gte=now)]),
                "upcoming": exhibitions.count([Range("startDate", gte=now)]),
                "past": exhibitions.count([Range("endDate", lte=now)]),
            },
            "venues": db.venues.count(),
            "artists": db.artists.count(),
        },
        "recentExhibitions": [
            {k: doc.get(k) for k in ("id", "title", "startDate", "endDate", "venue")}
            for doc in recent
        ],
    }
