"""
Centralized datetime utilities.

Everything is stored and bucketed in UTC. Naive datetimes coming from the
database or from clients are treated as UTC.
"""

from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Tuple, Union
import pytz


def utc_now() -> datetime:
    """Get current time as a timezone-aware UTC datetime."""
    return datetime.now(pytz.UTC)


def to_aware_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Convert any datetime to timezone-aware UTC.

    Args:
        dt: Datetime to convert (naive values are assumed to be UTC)

    Returns:
        Timezone-aware datetime in UTC, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is not None:
        return dt.astimezone(pytz.UTC)

    return pytz.UTC.localize(dt)


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp (or pass through a datetime) as aware UTC.

    Handles the 'Z' suffix emitted by JavaScript clients.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_aware_utc(value)

    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    return to_aware_utc(datetime.fromisoformat(text))


def utc_date(value: Union[str, datetime]) -> date:
    """Calendar date of a timestamp in UTC."""
    return parse_timestamp(value).date()


def year_bounds(year: int) -> Tuple[datetime, datetime]:
    """Half-open UTC range [year-01-01, (year+1)-01-01)."""
    start = datetime(year, 1, 1, tzinfo=pytz.UTC)
    end = datetime(year + 1, 1, 1, tzinfo=pytz.UTC)
    return start, end


def iter_year_days(year: int) -> Iterator[date]:
    """Every calendar day of a year, in order."""
    day = date(year, 1, 1)
    end = date(year + 1, 1, 1)
    while day < end:
        yield day
        day += timedelta(days=1)


def isoformat_utc(dt: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime as ISO-8601 UTC, or None."""
    if dt is None:
        return None
    return to_aware_utc(dt).isoformat()
