from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Weekday = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)


class Location(BaseModel):
    name: str = ""
    address: str = ""
    city: str = ""
    country: str = ""
    coordinates: Coordinates | None = None


class ExhibitionIn(BaseModel):
    """Admin payload for creating an exhibition.

    Field names follow the stored camelCase documents; snake_case is also
    accepted. A ``venueId`` overrides ``location`` with the venue's address.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=300)
    description: str = ""
    cover_image: str = Field(default="", alias="coverImage")
    images: list[str] = Field(default_factory=list)
    start_date: datetime = Field(..., alias="startDate")
    end_date: datetime = Field(..., alias="endDate")
    venue_id: str | None = Field(default=None, alias="venueId")
    location: Location = Field(default_factory=Location)
    category: list[str] = Field(default_factory=list)
    artists: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    ticket_price: str = Field(default="", alias="ticketPrice")
    ticket_url: str = Field(default="", alias="ticketUrl")
    website_url: str = Field(default="", alias="websiteUrl")
    popularity: int = Field(default=0, ge=0)
    featured: bool = False
    closed_day: Weekday | None = Field(default=None, alias="closedDay")


class ExhibitionUpdate(BaseModel):
    """Partial update; only the fields sent are changed."""

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = None
    cover_image: str | None = Field(default=None, alias="coverImage")
    images: list[str] | None = None
    start_date: datetime | None = Field(default=None, alias="startDate")
    end_date: datetime | None = Field(default=None, alias="endDate")
    venue_id: str | None = Field(default=None, alias="venueId")
    location: Location | None = None
    category: list[str] | None = None
    artists: list[str] | None = None
    tags: list[str] | None = None
    ticket_price: str | None = Field(default=None, alias="ticketPrice")
    ticket_url: str | None = Field(default=None, alias="ticketUrl")
    website_url: str | None = Field(default=None, alias="websiteUrl")
    popularity: int | None = Field(default=None, ge=0)
    featured: bool | None = None
    closed_day: Weekday | None = Field(default=None, alias="closedDay")


class VenueIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=200)
    address: str = ""
    city: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    postal_code: str = Field(default="", alias="postalCode")
    coordinates: Coordinates | None = None
    default_closed_days: list[Weekday] = Field(default_factory=list, alias="defaultClosedDays")
    website_url: str = Field(default="", alias="websiteUrl")
    notes: str = ""
    is_active: bool = Field(default=True, alias="isActive")


class VenueUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, min_length=1, max_length=200)
    address: str | None = None
    city: str | None = Field(default=None, min_length=1)
    country: str | None = Field(default=None, min_length=1)
    postal_code: str | None = Field(default=None, alias="postalCode")
    coordinates: Coordinates | None = None
    default_closed_days: list[Weekday] | None = Field(default=None, alias="defaultClosedDays")
    website_url: str | None = Field(default=None, alias="websiteUrl")
    notes: str | None = None
    is_active: bool | None = Field(default=None, alias="isActive")


class TagIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=60)
    description: str = ""


class TagUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=60)
    description: str | None = None


class ArtistIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=100)
    bio: str = ""
    image_url: str = Field(default="", alias="imageUrl")
    website_url: str = Field(default="", alias="websiteUrl")


class ArtistUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, min_length=1, max_length=100)
    bio: str | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")
    website_url: str | None = Field(default=None, alias="websiteUrl")
