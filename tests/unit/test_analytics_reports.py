from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from shortlinks.services.analytics import (
    build_dashboard,
    build_link_report,
    classify_browser,
    count_referrers,
    daily_series,
)

NOW = datetime(2024, 3, 15, 12, 0, 0)

CHROME_UA = "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 Chrome/120.0 Safari/537.36"
FIREFOX_UA = "Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0"
SAFARI_UA = "Mozilla/5.0 (Macintosh) AppleWebKit/605.1.15 Version/17.0 Safari/605.1.15"


def click(at, referrer="", user_agent="unknown", ip="1.2.3.4"):
    return SimpleNamespace(clicked_at=at, referrer=referrer, user_agent=user_agent, ip_address=ip)


def link(link_id, clicks, clicks_count=None):
    return SimpleNamespace(
        id=link_id,
        clicks=clicks,
        clicks_count=len(clicks) if clicks_count is None else clicks_count,
    )


def test_referrers_group_empty_as_direct():
    clicks = [click(NOW, ""), click(NOW, "x.com"), click(NOW, "")]
    assert count_referrers(clicks) == [
        {"referrer": "Direct", "count": 2},
        {"referrer": "x.com", "count": 1},
    ]


def test_referrers_none_counts_as_direct():
    assert count_referrers([click(NOW, None)]) == [{"referrer": "Direct", "count": 1}]


def test_referrer_ties_keep_first_seen_order():
    clicks = [click(NOW, "b.com"), click(NOW, "a.com"), click(NOW, "c.com"), click(NOW, "c.com")]
    assert [row["referrer"] for row in count_referrers(clicks)] == ["c.com", "b.com", "a.com"]


@pytest.mark.parametrize(
    "user_agent, browser",
    [
        (CHROME_UA, "Chrome"),
        (FIREFOX_UA, "Firefox"),
        (SAFARI_UA, "Safari"),
        ("Mozilla/5.0 (Windows NT 10.0) Edge/18.17763", "Edge"),
        ("curl/8.4.0", "Other"),
        ("unknown", "Other"),
        ("", "Other"),
    ],
)
def test_classify_browser_first_match_wins(user_agent, browser):
    assert classify_browser(user_agent) == browser


def test_daily_series_is_dense_without_clicks():
    series = daily_series([], NOW)
    assert len(series) == 30
    assert all(day["count"] == 0 for day in series)
    assert series[0]["date"] == "2024-02-15"
    assert series[-1]["date"] == "2024-03-15"


def test_daily_series_counts_per_day():
    clicks = [
        click(NOW - timedelta(hours=1)),
        click(NOW - timedelta(hours=2)),
        click(NOW - timedelta(days=3)),
    ]
    series = {day["date"]: day["count"] for day in daily_series(clicks, NOW)}
    assert series["2024-03-15"] == 2
    assert series["2024-03-12"] == 1
    assert sum(series.values()) == 3


def test_dashboard_time_windows():
    clicks = [
        click(datetime(2024, 3, 15, 8, 0)),   # today
        click(datetime(2024, 3, 14, 20, 0)),  # this week
        click(datetime(2024, 3, 9, 13, 0)),   # this week
        click(datetime(2024, 3, 2, 9, 0)),    # this month
        click(datetime(2024, 2, 28, 9, 0)),   # older
    ]
    report = build_dashboard([link(1, clicks)], NOW)

    assert report["total_urls"] == 1
    assert report["total_clicks"] == 5
    assert report["clicks_today"] == 1
    assert report["clicks_this_week"] == 3
    assert report["clicks_this_month"] == 4


def test_dashboard_recent_clicks_across_links_newest_first():
    first = link(1, [click(NOW - timedelta(minutes=m)) for m in (30, 10)])
    second = link(2, [click(NOW - timedelta(minutes=m)) for m in (20, 5)])

    recent = build_dashboard([first, second], NOW)["recent_clicks"]

    assert [row["link_id"] for row in recent] == [2, 1, 2, 1]
    assert recent[0]["timestamp"] == NOW - timedelta(minutes=5)


def test_dashboard_caps_recent_and_referrers():
    clicks = [click(NOW - timedelta(seconds=i), referrer=f"r{i % 12}.com") for i in range(60)]
    report = build_dashboard([link(1, clicks)], NOW)

    assert len(report["recent_clicks"]) == 50
    assert len(report["top_referrers"]) == 10


def test_dashboard_empty():
    report = build_dashboard([], NOW)
    assert report["total_urls"] == 0
    assert report["total_clicks"] == 0
    assert report["recent_clicks"] == []
    assert report["top_referrers"] == []


def test_link_report_limits_to_30_day_window():
    clicks = [
        click(NOW - timedelta(days=40), referrer="old.com", user_agent=FIREFOX_UA),
        click(NOW - timedelta(days=2), referrer="", user_agent=CHROME_UA),
        click(NOW - timedelta(hours=1), referrer="x.com", user_agent=SAFARI_UA),
        click(NOW - timedelta(minutes=1), referrer="", user_agent=CHROME_UA),
    ]
    report = build_link_report(link(7, clicks), NOW)

    assert report["clicks_last_30_days"] == 3
    assert len(report["daily_clicks"]) == 30
    assert sum(day["count"] for day in report["daily_clicks"]) == 3
    assert report["browser_stats"] == [
        {"browser": "Chrome", "count": 2},
        {"browser": "Safari", "count": 1},
    ]
    assert report["referrer_stats"] == [
        {"referrer": "Direct", "count": 2},
        {"referrer": "x.com", "count": 1},
    ]


def test_link_report_recent_clicks_are_last_20_newest_first():
    clicks = [click(NOW - timedelta(minutes=100 - i), ip=f"10.0.0.{i}") for i in range(25)]
    recent = build_link_report(link(1, clicks), NOW)["recent_clicks"]

    assert len(recent) == 20
    assert recent[0]["ip"] == "10.0.0.24"
    assert recent[-1]["ip"] == "10.0.0.5"
