"""Tests for compliance context assembly."""

import random
from datetime import date
from decimal import Decimal

import pytest

from labor_engine.compliance import build_context
from labor_engine.utils.age import AgeBand

from .conftest import DOB_AGE_15, WEEK_START, make_context, make_entry


class TestBuildContext:
    """Test per-day aggregation."""

    def test_aggregates_hours_by_day(self):
        entries = [
            make_entry(date(2024, 1, 20), "08:00", "10:00"),
            make_entry(date(2024, 1, 20), "11:00", "12:30"),
            make_entry(date(2024, 1, 16), "16:00", "18:00", is_school_day=True),
        ]
        context = make_context(DOB_AGE_15, entries)

        assert context.daily_hours[date(2024, 1, 20)] == Decimal("3.50")
        assert context.daily_hours[date(2024, 1, 16)] == Decimal("2.00")
        assert context.daily_hours[date(2024, 1, 15)] == Decimal("0")
        assert context.weekly_total == Decimal("5.50")
        assert context.work_days == (date(2024, 1, 16), date(2024, 1, 20))

    def test_all_seven_days_present(self):
        context = make_context(DOB_AGE_15)

        assert len(context.daily_hours) == 7
        assert len(context.daily_entries) == 7
        assert context.week_end == date(2024, 1, 20)
        assert context.weekly_total == Decimal("0")

    def test_school_week_follows_entries(self):
        school = make_context(
            DOB_AGE_15, [make_entry(date(2024, 1, 16), "16:00", "18:00", is_school_day=True)]
        )
        no_school = make_context(
            DOB_AGE_15, [make_entry(date(2024, 1, 16), "16:00", "18:00", is_school_day=False)]
        )

        assert school.is_school_week is True
        assert school.school_days == (date(2024, 1, 16),)
        assert no_school.is_school_week is False
        assert no_school.school_days == ()

    def test_birthday_splits_bands(self):
        """Turning 16 on Wednesday puts Sun-Tue in 14-15 and Wed-Sat in 16-17."""
        context = make_context(date(2008, 1, 17))

        assert context.daily_ages[date(2024, 1, 16)] == 15
        assert context.daily_ages[date(2024, 1, 17)] == 16
        assert context.daily_age_bands[date(2024, 1, 16)] is AgeBand.AGES_14_15
        assert context.daily_age_bands[date(2024, 1, 17)] is AgeBand.AGES_16_17
        assert context.age_bands == frozenset({AgeBand.AGES_14_15, AgeBand.AGES_16_17})

    def test_deterministic_regardless_of_input_order(self):
        entries = [
            make_entry(date(2024, 1, 15), "16:00", "17:00", is_school_day=True),
            make_entry(date(2024, 1, 17), "15:30", "18:00", is_school_day=True),
            make_entry(date(2024, 1, 20), "09:00", "12:00"),
            make_entry(date(2024, 1, 20), "13:00", "15:00"),
        ]
        shuffled = list(entries)
        random.Random(7).shuffle(shuffled)

        first = make_context(DOB_AGE_15, entries)
        again = build_context(
            employee=first.employee,
            week_start=WEEK_START,
            entries=shuffled,
            documents=first.documents,
            check_date=first.check_date,
        )

        assert again == first
        assert [e.entry_id for e in again.entries] == [e.entry_id for e in entries]

    def test_mappings_are_read_only(self):
        context = make_context(DOB_AGE_15)
        with pytest.raises(TypeError):
            context.daily_hours[date(2024, 1, 15)] = Decimal("99")

    def test_entry_outside_week_rejected(self):
        with pytest.raises(ValueError, match="outside the week"):
            make_context(DOB_AGE_15, [make_entry(date(2024, 1, 21), "09:00", "10:00")])

    def test_week_must_start_on_sunday(self):
        with pytest.raises(ValueError, match="not a Sunday"):
            make_context(DOB_AGE_15, week_start=date(2024, 1, 15))
