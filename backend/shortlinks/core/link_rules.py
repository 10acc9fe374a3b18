from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    # Naive UTC, matching what the database hands back
    return datetime.now(timezone.utc).replace(tzinfo=None)


def default_expiry(created_at: datetime, ttl_days: int) -> datetime:
    return created_at + timedelta(days=ttl_days)


def is_expired(expires_at: Optional[datetime], now: datetime) -> bool:
    return expires_at is not None and now >= expires_at
