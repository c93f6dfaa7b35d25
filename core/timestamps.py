"""
Timestamp rendering for comment records.

A comment carries its creation instant twice: `date` for machines (ISO-8601,
UTC, millisecond precision, `Z` suffix) and `displayDate` for people, in the
zh-CN numeric style `YYYY/MM/DD HH:MM:SS` using the server's local time zone.
"""

from datetime import datetime, timezone, tzinfo
from typing import Optional, Tuple

DISPLAY_FORMAT = "%Y/%m/%d %H:%M:%S"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso_utc(moment: datetime) -> str:
    """Render an aware datetime as `2024-01-05T06:03:09.123Z`"""
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_display(moment: datetime, tz: Optional[tzinfo] = None) -> str:
    """Render an aware datetime as `2024/01/05 14:03:09` in `tz` (local if None)"""
    return moment.astimezone(tz).strftime(DISPLAY_FORMAT)


def comment_timestamps(
    moment: Optional[datetime] = None, tz: Optional[tzinfo] = None
) -> Tuple[str, str]:
    """Return `(date, displayDate)` for one instant"""
    moment = moment or utc_now()
    return to_iso_utc(moment), to_display(moment, tz)
