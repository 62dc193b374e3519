"""Tests for school hours, work windows and school night rules."""

from datetime import date, timedelta

import pytest

from labor_engine.compliance import ResultType
from labor_engine.compliance.rules import get_rule, is_school_night, overlaps_school_hours

from .conftest import (
    DOB_AGE_13,
    DOB_AGE_15,
    DOB_AGE_17,
    SUMMER_WEEK_START,
    WEEK_START,
    make_context,
    make_entry,
)

SUNDAY = WEEK_START
MONDAY = WEEK_START + timedelta(days=1)
TUESDAY = WEEK_START + timedelta(days=2)
WEDNESDAY = WEEK_START + timedelta(days=3)
FRIDAY = WEEK_START + timedelta(days=5)
SATURDAY = WEEK_START + timedelta(days=6)

DOB_AGE_15_IN_SUMMER = date(2009, 1, 1)
SUMMER_TUESDAY = SUMMER_WEEK_START + timedelta(days=2)


def evaluate(rule_id, context):
    return get_rule(rule_id).evaluate(context)


class TestSchoolHours:
    """No work between 7:00 AM and 3:00 PM on school days for minors."""

    @pytest.mark.parametrize(
        "start,end,expected",
        [
            ("06:00", "07:00", False),
            ("15:00", "18:00", False),
            ("14:30", "15:30", True),
            ("06:30", "07:15", True),
            ("10:00", "11:00", True),
        ],
    )
    def test_overlap(self, start, end, expected):
        assert overlaps_school_hours(make_entry(MONDAY, start, end)) is expected

    @pytest.mark.parametrize(
        "rule_id,dob",
        [("RULE-004", DOB_AGE_13), ("RULE-010", DOB_AGE_15), ("RULE-034", DOB_AGE_17)],
    )
    def test_school_day_overlap_fails(self, rule_id, dob):
        context = make_context(dob, [make_entry(TUESDAY, "14:00", "17:00", is_school_day=True)])

        result = evaluate(rule_id, context)

        assert result.result is ResultType.FAIL
        assert result.details.affected_dates == [TUESDAY]
        assert "2:00 PM to 5:00 PM on Tuesday, January 16" in result.error_message
        assert result.details.threshold == {"start": "07:00", "end": "15:00"}

    def test_any_school_entry_makes_the_whole_day_a_school_day(self):
        context = make_context(
            DOB_AGE_13,
            [
                make_entry(MONDAY, "06:00", "06:30", is_school_day=True),
                make_entry(MONDAY, "10:00", "12:00"),
            ],
        )

        result = evaluate("RULE-004", context)

        assert result.result is ResultType.FAIL
        assert result.details.affected_dates == [MONDAY]
        assert "10:00 AM to 12:00 PM" in result.error_message

    def test_non_school_day_allowed(self):
        context = make_context(DOB_AGE_15, [make_entry(TUESDAY, "09:00", "12:00")])
        assert evaluate("RULE-010", context).result is ResultType.PASS


class TestYoungTeenWindow:
    """Ages 14-15: 7:00 AM to 7:00 PM, 9:00 PM in summer."""

    def test_evening_outside_window(self):
        context = make_context(
            DOB_AGE_15, [make_entry(TUESDAY, "17:00", "20:00", is_school_day=True)]
        )

        result = evaluate("RULE-011", context)

        assert result.result is ResultType.FAIL
        assert "between 7:00 AM and 7:00 PM" in result.error_message

    def test_early_start(self):
        context = make_context(DOB_AGE_15, [make_entry(SATURDAY, "06:30", "09:00")])
        assert evaluate("RULE-011", context).result is ResultType.FAIL

    def test_summer_extends_window(self):
        context = make_context(
            DOB_AGE_15_IN_SUMMER,
            [make_entry(SUMMER_TUESDAY, "17:00", "20:30")],
            week_start=SUMMER_WEEK_START,
        )
        assert evaluate("RULE-011", context).result is ResultType.PASS

    def test_summer_window_still_ends_at_nine(self):
        context = make_context(
            DOB_AGE_15_IN_SUMMER,
            [make_entry(SUMMER_TUESDAY, "18:00", "21:30")],
            week_start=SUMMER_WEEK_START,
        )

        result = evaluate("RULE-011", context)

        assert result.result is ResultType.FAIL
        assert "9:00 PM (summer hours)" in result.error_message


class TestOlderTeenWindows:
    """Ages 16-17: 6:00 AM to 11:30 PM, and 10:00 PM before school days."""

    def test_school_night_from_next_day_entries(self):
        entries = [
            make_entry(TUESDAY, "18:00", "22:30"),
            make_entry(WEDNESDAY, "16:00", "18:00", is_school_day=True),
        ]
        context = make_context(DOB_AGE_17, entries)

        assert is_school_night(context, TUESDAY) is True
        result = evaluate("RULE-016", context)
        assert result.result is ResultType.FAIL
        assert "10:30 PM on Tuesday, January 16" in result.error_message

    def test_next_day_non_school_entry_means_not_school_night(self):
        entries = [
            make_entry(SUNDAY, "18:00", "22:30"),
            make_entry(MONDAY, "10:00", "12:00", is_school_day=False),
            make_entry(TUESDAY, "16:00", "18:00", is_school_day=True),
        ]
        context = make_context(DOB_AGE_17, entries)

        assert is_school_night(context, SUNDAY) is False
        assert evaluate("RULE-016", context).result is ResultType.PASS

    def test_fallback_sunday_through_thursday_in_school_week(self):
        entries = [
            make_entry(SUNDAY, "18:00", "22:30"),
            make_entry(TUESDAY, "16:00", "18:00", is_school_day=True),
        ]
        context = make_context(DOB_AGE_17, entries)

        assert is_school_night(context, SUNDAY) is True
        assert evaluate("RULE-016", context).result is ResultType.FAIL

    def test_friday_is_not_a_school_night(self):
        entries = [
            make_entry(FRIDAY, "18:00", "22:30"),
            make_entry(TUESDAY, "16:00", "18:00", is_school_day=True),
        ]
        context = make_context(DOB_AGE_17, entries)

        assert is_school_night(context, FRIDAY) is False
        assert evaluate("RULE-016", context).result is ResultType.PASS

    def test_late_end_on_non_school_night(self):
        context = make_context(DOB_AGE_17, [make_entry(FRIDAY, "18:00", "23:45")])

        result = evaluate("RULE-017", context)

        assert result.result is ResultType.FAIL
        assert "between 6:00 AM and 11:30 PM" in result.error_message

    def test_end_at_window_close_allowed(self):
        context = make_context(DOB_AGE_17, [make_entry(FRIDAY, "18:00", "23:30")])
        assert evaluate("RULE-017", context).result is ResultType.PASS

    def test_early_start(self):
        context = make_context(DOB_AGE_17, [make_entry(SATURDAY, "05:30", "09:00")])
        assert evaluate("RULE-017", context).result is ResultType.FAIL
