"""Helpers for the ISO-8601 date strings stored on records."""

import calendar
from datetime import date, datetime, time, timezone
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from components.core.errors import ValidationError

DateLike = Union[str, date, datetime]

LEGACY_DATE_FORMAT = "%d/%m/%Y"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: DateLike) -> str:
    """Render a date or datetime the way records store it: ``2024-01-15T00:00:00.000Z``."""
    dt = as_datetime(value)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str) -> datetime:
    """Parse a stored ISO string. Naive values are taken as UTC.

    Raises ValueError when the string is not ISO-8601.
    """
    dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def as_datetime(value: DateLike) -> datetime:
    if isinstance(value, str):
        return parse_iso(value)
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def as_date(value: DateLike) -> date:
    """Calendar day of a stored value, time of day dropped."""
    if isinstance(value, datetime):
        return as_datetime(value).astimezone(timezone.utc).date()
    if isinstance(value, date):
        return value
    return parse_iso(value).astimezone(timezone.utc).date()


def add_months(value: DateLike, months: int) -> datetime:
    return as_datetime(value) + relativedelta(months=months)


def is_iso(value: object) -> bool:
    """Heuristic used on legacy records: ISO strings carry a ``T`` separator."""
    return isinstance(value, str) and "T" in value


def parse_legacy_date(value: str) -> Optional[datetime]:
    """Parse a legacy ``dd/mm/yyyy`` string, or None when it is not one."""
    try:
        parsed = datetime.strptime(value.strip(), LEGACY_DATE_FORMAT)
    except ValueError:
        return None
    return parsed.replace(tzinfo=timezone.utc)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month."""
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month: {month}")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def move_to_period(value: DateLike, year: int, month: int) -> datetime:
    """Keep the day and time of ``value`` but place it in the given month, clamping the day."""
    dt = as_datetime(value)
    last_day = calendar.monthrange(year, month)[1]
    return dt.replace(year=year, month=month, day=min(dt.day, last_day))
