from __future__ import annotations

import calendar
from datetime import date, datetime

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp. A trailing 'Z' is accepted."""
    if not isinstance(value, str):
        raise ValidationError(f"Invalid timestamp: {value!r}")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"Invalid timestamp: {value!r}")
    # Stored timestamps are naive local time.
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def days_in_month(month: int, year: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_bounds(month: int, year: int) -> tuple[date, date]:
    """First and last calendar day of a month, both inclusive."""
    return date(year, month, 1), date(year, month, days_in_month(month, year))


def year_bounds(year: int) -> tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """Inclusive overlap test: the ranges share at least one calendar day."""
    return start_a <= end_b and end_a >= start_b
