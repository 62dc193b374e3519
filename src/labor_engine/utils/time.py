"""Calendar and wall-clock helpers.

All times are local wall-clock values in the organization's timezone; no
conversion is applied when comparing entry times against rule windows.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from zoneinfo import ZoneInfo

SUNDAY = 6  # date.weekday() value

# Default school year bounds (month, day), used only to pre-fill the
# school-day flag of a new entry.
SCHOOL_YEAR_START = (8, 28)
SCHOOL_YEAR_END = (6, 20)

SUMMER_START = (6, 1)


def time_to_minutes(value: str | time) -> int:
    """Minutes since midnight for "HH:MM" (seconds ignored) or a time."""
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    parts = value.split(":")
    if len(parts) < 2:
        raise ValueError(f"Invalid time value: {value!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f"Invalid time value: {value!r}")
    return hours * 60 + minutes


def parse_time(value: str) -> time:
    """Parse "HH:MM" or "HH:MM:SS" into a time."""
    minutes = time_to_minutes(value)
    return time(minutes // 60, minutes % 60)


def calculate_hours(start: time, end: time) -> Decimal:
    """Duration between two wall-clock times in hours, rounded to 2 places.

    Raises:
        ValueError: If end is not after start
    """
    start_minutes = time_to_minutes(start)
    end_minutes = time_to_minutes(end)
    if end_minutes <= start_minutes:
        raise ValueError("End time must be after start time")
    hours = Decimal(end_minutes - start_minutes) / Decimal(60)
    return hours.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def labor_day(year: int) -> date:
    """First Monday of September."""
    first = date(year, 9, 1)
    return first + timedelta(days=(7 - first.weekday()) % 7)


def is_summer_period(on_date: date) -> bool:
    """June 1 through the day before Labor Day."""
    start = date(on_date.year, *SUMMER_START)
    return start <= on_date < labor_day(on_date.year)


def is_in_default_school_year(on_date: date) -> bool:
    """Aug 28 through Jun 20 of the following year."""
    month_day = (on_date.month, on_date.day)
    return month_day >= SCHOOL_YEAR_START or month_day <= SCHOOL_YEAR_END


def is_default_school_day(on_date: date) -> bool:
    """Weekday falling within the default school year."""
    return on_date.weekday() < 5 and is_in_default_school_year(on_date)


def is_sunday(on_date: date) -> bool:
    return on_date.weekday() == SUNDAY


def week_start_for(on_date: date) -> date:
    """Sunday on or before the given date."""
    return on_date - timedelta(days=(on_date.weekday() + 1) % 7)


def week_dates(week_start: date) -> list[date]:
    """Seven consecutive dates of a Sunday-aligned week.

    Raises:
        ValueError: If week_start is not a Sunday
    """
    if not is_sunday(week_start):
        raise ValueError(f"Week start {week_start.isoformat()} is not a Sunday")
    return [week_start + timedelta(days=offset) for offset in range(7)]


def week_end_for(week_start: date) -> date:
    """Saturday ending the week that starts on week_start."""
    return week_start + timedelta(days=6)


def today_in_timezone(tz_name: str) -> date:
    """Current calendar date in the given IANA timezone."""
    return datetime.now(ZoneInfo(tz_name)).date()
