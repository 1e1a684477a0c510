from __future__ import annotations

from collections import Counter, defaultdict
from datetime import timedelta
from typing import Any
from urllib.parse import urlparse

from fastapi import HTTPException

from ..dates import start_of_day, utcnow
from ..store.base import Database
from ..store.filters import Range
from .store import SEARCH_FILTERS


def range_start(time_range: str):
    now = utcnow()
    if time_range == "day":
        return start_of_day(now.date())
    if time_range == "week":
        return now - timedelta(days=7)
    if time_range == "month":
        return now - timedelta(days=30)
    if time_range == "year":
        return now - timedelta(days=365)
    raise HTTPException(status_code=400, detail=f"Unsupported timeRange: {time_range}")


def _referrer_domain(referrer: str | None) -> str:
    if not referrer:
        return "direct"
    return urlparse(referrer).hostname or referrer


def _rate(part: int, total: int) -> float:
    return round(part / total * 100, 1) if total else 0.0


def compute_analytics(db: Database, time_range: str = "week") -> dict[str, Any]:
    since = range_start(time_range)
    views = db.pageviews.find([Range("createdAt", gte=since)], sort=[("createdAt", -1)])
    events = db.events.find([Range("createdAt", gte=since)])
    today = start_of_day(utcnow().date())

    # Page views
    durations = [v["duration"] for v in views if v.get("duration") is not None]
    avg_duration = round(sum(durations) / len(durations), 1) if durations else 0.0
    today_views = [v for v in views if v["createdAt"] >= today]

    pages: dict[str, dict[str, Any]] = defaultdict(lambda: {"views": 0, "duration": 0.0})
    for v in views:
        pages[v.get("page") or "unknown"]["views"] += 1
        pages[v.get("page") or "unknown"]["duration"] += v.get("duration") or 0
    top_pages = [
        {"page": page, "views": d["views"], "avgDuration": round(d["duration"] / d["views"], 1)}
        for page, d in sorted(pages.items(), key=lambda item: -item[1]["views"])[:5]
    ]

    referrers = Counter(_referrer_domain(v.get("referrer")) for v in views)
    top_referrers = [{"referrer": r, "visits": c} for r, c in referrers.most_common(5)]

    # Events
    by_type = Counter(e.get("eventType", "unknown") for e in events)
    searches = [e for e in events if e.get("eventType") == "search"]
    total_searches = len(searches)

    times = [
        s["metadata"]["response_time_ms"]
        for s in searches
        if "response_time_ms" in (s.get("metadata") or {})
    ]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    filter_counts = {name: 0 for name in SEARCH_FILTERS}
    city_counter: Counter[str] = Counter()
    term_counter: Counter[str] = Counter()
    for s in searches:
        used = (s.get("metadata") or {}).get("filters") or {}
        for name in used:
            if name in filter_counts:
                filter_counts[name] += 1
        if used.get("city"):
            city_counter[used["city"].strip().lower()] += 1
        if used.get("search"):
            term_counter[used["search"].strip().lower()] += 1

    return {
        "time_range": time_range,
        "total_pageviews": len(views),
        "pageviews_today": len(today_views),
        "unique_visitors": len({v.get("sessionId") for v in views}),
        "unique_visitors_today": len({v.get("sessionId") for v in today_views}),
        "avg_duration": avg_duration,
        "top_pages": top_pages,
        "top_referrers": top_referrers,
        "events_by_type": dict(by_type),
        "total_searches": total_searches,
        "avg_response_time_ms": avg_time,
        "top_cities": [{"name": n, "count": c} for n, c in city_counter.most_common(10)],
        "top_search_terms": [{"name": n, "count": c} for n, c in term_counter.most_common(10)],
        "filter_usage": {k: _rate(v, total_searches) for k, v in filter_counts.items()},
    }
