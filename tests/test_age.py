"""Tests for age and age band derivation."""

from datetime import date

import pytest

from labor_engine.utils.age import (
    AgeBand,
    age_band,
    age_on_date,
    band_for_date,
    birthday_in_week,
    weekly_ages,
)

WEEK_START = date(2024, 1, 14)


class TestAgeOnDate:
    """Test whole-year age calculation."""

    def test_day_before_birthday(self):
        assert age_on_date(date(2008, 1, 17), date(2024, 1, 16)) == 15

    def test_on_birthday(self):
        assert age_on_date(date(2008, 1, 17), date(2024, 1, 17)) == 16

    def test_leap_day_birthday(self):
        """A Feb 29 birthday ticks over on March 1 in non-leap years."""
        dob = date(2008, 2, 29)
        assert age_on_date(dob, date(2023, 2, 28)) == 14
        assert age_on_date(dob, date(2023, 3, 1)) == 15
        assert age_on_date(dob, date(2024, 2, 29)) == 16


class TestAgeBand:
    """Test band boundaries."""

    @pytest.mark.parametrize(
        "age,expected",
        [
            (12, AgeBand.AGES_12_13),
            (13, AgeBand.AGES_12_13),
            (14, AgeBand.AGES_14_15),
            (15, AgeBand.AGES_14_15),
            (16, AgeBand.AGES_16_17),
            (17, AgeBand.AGES_16_17),
            (18, AgeBand.ADULT),
            (45, AgeBand.ADULT),
        ],
    )
    def test_band_boundaries(self, age, expected):
        assert age_band(age) is expected

    def test_below_minimum_age_raises(self):
        with pytest.raises(ValueError, match="below minimum working age"):
            age_band(11)

    def test_band_for_date_treats_under_12_as_youngest_band(self):
        assert band_for_date(date(2013, 6, 1), WEEK_START) is AgeBand.AGES_12_13

    def test_only_adult_is_not_minor(self):
        assert AgeBand.ADULT.is_minor is False
        assert all(
            band.is_minor
            for band in (AgeBand.AGES_12_13, AgeBand.AGES_14_15, AgeBand.AGES_16_17)
        )


class TestWeeklyAges:
    """Test per-day ages across a week."""

    def test_covers_seven_days(self):
        ages = weekly_ages(date(2008, 6, 1), WEEK_START)
        assert len(ages) == 7
        assert set(ages.values()) == {15}

    def test_birthday_mid_week(self):
        ages = weekly_ages(date(2008, 1, 17), WEEK_START)
        assert ages[date(2024, 1, 16)] == 15
        assert ages[date(2024, 1, 17)] == 16
        assert birthday_in_week(date(2008, 1, 17), WEEK_START) == date(2024, 1, 17)

    def test_birthday_on_first_day(self):
        assert birthday_in_week(date(2008, 1, 14), WEEK_START) == WEEK_START

    def test_no_birthday(self):
        assert birthday_in_week(date(2008, 6, 1), WEEK_START) is None
