"""Time helpers. Every instant handled by the services is a naive UTC datetime."""
from datetime import datetime, time, timezone
from typing import Optional

from dateutil import tz


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: datetime) -> datetime:
    """Normalize an incoming datetime. Naive values are taken to already be UTC."""

    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_day_time(value: str) -> time:
    """Parse a shared space bound such as ``8:00`` or ``23:00``."""

    hours, _, minutes = value.strip().partition(":")
    return time(hour=int(hours), minute=int(minutes or 0))


def to_local_display(value: datetime, timezone_name: str) -> Optional[str]:
    zone = tz.gettz(timezone_name)
    if zone is None:
        return None
    return value.replace(tzinfo=timezone.utc).astimezone(zone).strftime("%Y-%m-%d %H:%M:%S")
