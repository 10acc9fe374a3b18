from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.link_rules import utcnow
from ..models import Link
from . import link_store

DIRECT = "Direct"

DASHBOARD_RECENT_CLICKS = 50
DASHBOARD_TOP_REFERRERS = 10
LINK_RECENT_CLICKS = 20
LINK_WINDOW_DAYS = 30

# First match wins; chrome UAs also mention safari, edge UAs mention chrome
BROWSER_RULES = (
    ("chrome", "Chrome"),
    ("firefox", "Firefox"),
    ("safari", "Safari"),
    ("edge", "Edge"),
)


def normalize_referrer(referrer: Optional[str]) -> str:
    return referrer if referrer else DIRECT


def classify_browser(user_agent: Optional[str]) -> str:
    ua = (user_agent or "").lower()
    for needle, browser in BROWSER_RULES:
        if needle in ua:
            return browser
    return "Other"


def _ranked(counts: Dict[str, int], key: str, limit: Optional[int] = None) -> List[dict]:
    # sorted() is stable, so equal counts keep first-seen order
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    if limit is not None:
        ranked = ranked[:limit]
    return [{key: name, "count": count} for name, count in ranked]


def count_referrers(clicks: Iterable, limit: Optional[int] = None) -> List[dict]:
    """Group clicks by referrer (empty -> "Direct"), most frequent first."""
    counts: Dict[str, int] = {}
    for click in clicks:
        referrer = normalize_referrer(click.referrer)
        counts[referrer] = counts.get(referrer, 0) + 1
    return _ranked(counts, "referrer", limit)


def count_browsers(clicks: Iterable) -> List[dict]:
    counts: Dict[str, int] = {}
    for click in clicks:
        browser = classify_browser(click.user_agent)
        counts[browser] = counts.get(browser, 0) + 1
    return [{"browser": name, "count": count} for name, count in counts.items()]


def daily_series(clicks: Iterable, now: datetime, days: int = LINK_WINDOW_DAYS) -> List[dict]:
    """
    Dense per-day click counts, oldest first, ending today.

    Always exactly ``days`` entries; days without clicks report 0.
    """
    today = now.date()
    buckets: Dict[date, int] = {
        today - timedelta(days=offset): 0 for offset in range(days - 1, -1, -1)
    }

    for click in clicks:
        day = click.clicked_at.date()
        if day in buckets:
            buckets[day] += 1

    return [{"date": day.isoformat(), "count": count} for day, count in buckets.items()]


def serialize_click(click, link_id: Optional[int] = None) -> dict:
    data = {
        "timestamp": click.clicked_at,
        "ip": click.ip_address,
        "user_agent": click.user_agent,
        "referrer": click.referrer,
    }
    if link_id is not None:
        data["link_id"] = link_id
    return data


def build_dashboard(links: Sequence, now: Optional[datetime] = None) -> dict:
    """
    Dashboard report over every link an owner has.

    Reads all click logs into memory and aggregates in one pass.
    """
    now = now or utcnow()
    today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    week_start = now - timedelta(days=7)
    month_start = today_start.replace(day=1)

    clicks_today = 0
    clicks_this_week = 0
    clicks_this_month = 0
    recent: List[dict] = []
    referrers: Dict[str, int] = {}

    for link in links:
        for click in link.clicks:
            if click.clicked_at >= today_start:
                clicks_today += 1
            if click.clicked_at >= week_start:
                clicks_this_week += 1
            if click.clicked_at >= month_start:
                clicks_this_month += 1

            recent.append(serialize_click(click, link_id=link.id))

            referrer = normalize_referrer(click.referrer)
            referrers[referrer] = referrers.get(referrer, 0) + 1

    recent.sort(key=lambda item: item["timestamp"], reverse=True)

    return {
        "total_urls": len(links),
        "total_clicks": sum(link.clicks_count for link in links),
        "clicks_today": clicks_today,
        "clicks_this_week": clicks_this_week,
        "clicks_this_month": clicks_this_month,
        "recent_clicks": recent[:DASHBOARD_RECENT_CLICKS],
        "top_referrers": _ranked(referrers, "referrer", DASHBOARD_TOP_REFERRERS),
    }


def build_link_report(link, now: Optional[datetime] = None) -> dict:
    """Per-link report over the trailing 30 days."""
    now = now or utcnow()
    window_start = now - timedelta(days=LINK_WINDOW_DAYS)

    clicks = list(link.clicks)
    window = [click for click in clicks if click.clicked_at >= window_start]

    return {
        "clicks_last_30_days": len(window),
        "daily_clicks": daily_series(window, now),
        "browser_stats": count_browsers(window),
        "referrer_stats": count_referrers(window),
        "recent_clicks": [serialize_click(click) for click in reversed(clicks[-LINK_RECENT_CLICKS:])],
    }


def get_dashboard_analytics(db: Session, owner_id: int, now: Optional[datetime] = None) -> dict:
    links = link_store.load_owner_links_with_clicks(db, owner_id)
    return build_dashboard(links, now)


def get_link_analytics(db: Session, link_id: int, owner_id: int, now: Optional[datetime] = None) -> dict:
    link: Link = link_store.find_by_id(db, link_id, owner_id)

    return {
        "link": {
            "id": link.id,
            "original_url": link.original_url,
            "short_code": link.short_code,
            "custom_slug": link.custom_slug,
            "total_clicks": link.clicks_count,
            "created_at": link.created_at,
        },
        "analytics": build_link_report(link, now),
    }
