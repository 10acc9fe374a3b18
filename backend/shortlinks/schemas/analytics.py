from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel

from .link import ClickResponse


class RecentClick(ClickResponse):
    """Click annotated with the link it belongs to"""
    link_id: int


class ReferrerStats(BaseModel):
    """Clicks per referrer; empty referrers count as "Direct" """
    referrer: str
    count: int


class BrowserStats(BaseModel):
    browser: str
    count: int


class DailyClicks(BaseModel):
    """Single day in the 30 day series"""
    date: str  # ISO date
    count: int


class DashboardAnalytics(BaseModel):
    """Totals and breakdowns across all of a user's links"""
    total_urls: int
    total_clicks: int
    clicks_today: int
    clicks_this_week: int
    clicks_this_month: int
    recent_clicks: List[RecentClick]
    top_referrers: List[ReferrerStats]


class LinkSummary(BaseModel):
    id: int
    original_url: str
    short_code: str
    custom_slug: Optional[str] = None
    total_clicks: int
    created_at: datetime


class LinkAnalyticsData(BaseModel):
    clicks_last_30_days: int
    daily_clicks: List[DailyClicks]
    browser_stats: List[BrowserStats]
    referrer_stats: List[ReferrerStats]
    recent_clicks: List[ClickResponse]


class LinkAnalytics(BaseModel):
    """Complete analytics for a link"""
    link: LinkSummary
    analytics: LinkAnalyticsData
