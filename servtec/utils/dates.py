"""
Local-calendar helpers

Timestamps are stored in UTC; "today" is the calendar day in the configured
business timezone.
"""
from datetime import datetime, timezone, tzinfo
from typing import Union

from dateutil import tz


def resolve_tz(name: Union[str, tzinfo, None]) -> tzinfo:
    """IANA name -> tzinfo, UTC when unknown or empty"""
    if isinstance(name, tzinfo):
        return name
    return tz.gettz(name) if name and tz.gettz(name) else tz.UTC


def local_midnight(now: datetime, zone: Union[str, tzinfo, None]) -> datetime:
    """Start of the local calendar day containing `now`, as aware UTC"""
    local = now.astimezone(resolve_tz(zone))
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight.astimezone(timezone.utc)


def whole_hours(now: datetime, then: datetime) -> int:
    return int((now - then).total_seconds() // 3600)
