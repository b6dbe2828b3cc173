from __future__ import annotations

from datetime import date, datetime, timedelta

_MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def column_identifier(value: date) -> str:
    """Sheet header label for a lesson date, e.g. 2025-09-07 -> 'Sep/07'.

    Month names are fixed English abbreviations so the label does not depend
    on the server locale.
    """
    return f"{_MONTH_ABBREVIATIONS[value.month - 1]}/{value.day:02d}"


def months_before(value: date, months: int) -> date:
    """Same day `months` calendar months earlier, clamped to the month end."""
    month_index = value.year * 12 + (value.month - 1) - int(months)
    year, month = divmod(month_index, 12)
    month += 1
    day = value.day
    while day > 28:
        try:
            return date(year, month, day)
        except ValueError:
            day -= 1
    return date(year, month, day)


def nearest_sunday(value: date) -> date:
    """Sunday on or before `value`; lessons are logged on Sundays."""
    return value - timedelta(days=(value.weekday() + 1) % 7)
