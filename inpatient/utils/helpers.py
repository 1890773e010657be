"""
Shared helper functions.
"""
from typing import Any, Dict, Optional, Tuple
from datetime import datetime, date, timedelta, timezone
from zoneinfo import ZoneInfo
import math

from inpatient.config import settings


def utcnow() -> datetime:
    """Current instant as an aware UTC datetime, the storage convention."""
    return datetime.now(timezone.utc)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalizes a datetime to aware UTC.

    Naive values are assumed to be UTC already.
    """
    if value is None:
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_day_bounds(
    day: Optional[date] = None,
    tz_name: Optional[str] = None
) -> Tuple[datetime, datetime]:
    """
    Returns the [start, end) bounds of a calendar day in the deployment
    timezone, expressed as aware UTC datetimes.

    Args:
        day: Local calendar day (defaults to today in that timezone)
        tz_name: IANA timezone name (defaults to settings.TIMEZONE)

    Returns:
        Tuple (start, end) ready to compare against stored timestamps
    """
    tz = ZoneInfo(tz_name or settings.TIMEZONE)
    if day is None:
        day = datetime.now(tz).date()

    start_local = datetime(day.year, day.month, day.day, tzinfo=tz)
    end_local = datetime.combine(day + timedelta(days=1), datetime.min.time(), tzinfo=tz)

    return to_utc(start_local), to_utc(end_local)


def percentage(part: int, whole: int) -> float:
    """part/whole as a percentage rounded to 2 decimals, 0 when whole is 0."""
    if not whole:
        return 0.0
    return round(part / whole * 100, 2)


def pagination_info(page: int, limit: int, total: int) -> Dict[str, Any]:
    """
    Builds the pagination block returned by list endpoints.

    Args:
        page: Current page (1-based)
        limit: Items per page
        total: Total matching items

    Returns:
        Dictionary with pagination data
    """
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "current_page": page,
        "total_pages": total_pages,
        "total_items": total,
        "items_per_page": limit,
        "has_next_page": page < total_pages,
        "has_prev_page": page > 1,
    }
