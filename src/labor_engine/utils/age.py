"""Age and age-band classification.

Ages are always derived from date of birth for a specific date; a single
work week can span a birthday, so callers ask for the age of every day
they care about rather than once per week.
"""

from __future__ import annotations

from datetime import date, timedelta
from enum import Enum

MINIMUM_WORKING_AGE = 12


class AgeBand(str, Enum):
    """Statutory age buckets that determine which rules apply."""

    AGES_12_13 = "12-13"
    AGES_14_15 = "14-15"
    AGES_16_17 = "16-17"
    ADULT = "18+"

    @property
    def is_minor(self) -> bool:
        return self is not AgeBand.ADULT


MINOR_BANDS = frozenset({AgeBand.AGES_12_13, AgeBand.AGES_14_15, AgeBand.AGES_16_17})


def age_on_date(date_of_birth: date, on_date: date) -> int:
    """Whole years elapsed between date_of_birth and on_date."""
    age = on_date.year - date_of_birth.year
    if (on_date.month, on_date.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def age_band(age: int) -> AgeBand:
    """Map an age to its band.

    Raises:
        ValueError: If age is below the minimum working age of 12
    """
    if age < MINIMUM_WORKING_AGE:
        raise ValueError(f"Age {age} is below minimum working age of {MINIMUM_WORKING_AGE}")
    if age < 14:
        return AgeBand.AGES_12_13
    if age < 16:
        return AgeBand.AGES_14_15
    if age < 18:
        return AgeBand.AGES_16_17
    return AgeBand.ADULT


def band_for_date(date_of_birth: date, on_date: date) -> AgeBand:
    """Age band on a date, treating anyone under 12 as the youngest band."""
    age = age_on_date(date_of_birth, on_date)
    if age < MINIMUM_WORKING_AGE:
        return AgeBand.AGES_12_13
    return age_band(age)


def weekly_ages(date_of_birth: date, week_start: date) -> dict[date, int]:
    """Age for each of the seven days beginning at week_start."""
    return {
        week_start + timedelta(days=offset): age_on_date(
            date_of_birth, week_start + timedelta(days=offset)
        )
        for offset in range(7)
    }


def birthday_in_week(date_of_birth: date, week_start: date) -> date | None:
    """Return the day in the week on which the employee has a birthday, if any."""
    ages = weekly_ages(date_of_birth, week_start)
    days = sorted(ages)
    for previous, current in zip(days, days[1:]):
        if ages[current] != ages[previous]:
            return current
    # Birthday on the first day of the week
    if days[0].month == date_of_birth.month and days[0].day == date_of_birth.day:
        return days[0]
    return None
