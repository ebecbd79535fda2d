"""UTC datetime utilities and leaderboard week boundaries."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

WEEK = timedelta(days=7)


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def week_bounds(at: datetime, tz_name: str) -> tuple[datetime, datetime]:
    """Monday 00:00 to next Monday 00:00 in `tz_name` containing `at`, returned in UTC."""
    local = at.astimezone(ZoneInfo(tz_name))
    monday = (local - timedelta(days=local.weekday())).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    start = monday.astimezone(timezone.utc)
    return start, start + WEEK


def previous_week_bounds(at: datetime, tz_name: str) -> tuple[datetime, datetime]:
    """The week that ended at or before `at`: the one the weekly job publishes."""
    start, _ = week_bounds(at, tz_name)
    return start - WEEK, start
