from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class TrackRequest(BaseModel):
    """A page view or an interaction event sent by the browser."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["pageview", "event"]
    page: str = Field(default="", max_length=200)
    path: str = Field(default="", max_length=500)
    referrer: str = ""
    session_id: str | None = Field(default=None, alias="sessionId", max_length=100)
    exhibition_id: str | None = Field(default=None, alias="exhibitionId")
    event_type: Literal[
        "click", "search", "filter", "share", "favorite", "download", "signup", "login"
    ] | None = Field(default=None, alias="eventType")
    event_name: str | None = Field(default=None, alias="eventName", max_length=100)
    event_value: Any = Field(default=None, alias="eventValue")
    metadata: dict[str, Any] = Field(default_factory=dict)


class PageMetricsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId", min_length=1)
    page: str = Field(..., min_length=1)
    duration: float | None = Field(default=None, ge=0)
    scroll_depth: float | None = Field(default=None, alias="scrollDepth", ge=0, le=100)
    clicks: int | None = Field(default=None, ge=0)
