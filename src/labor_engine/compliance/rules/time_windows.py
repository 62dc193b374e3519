"""Time-of-day restrictions: school hours, work windows and school nights."""

from __future__ import annotations

from abc import abstractmethod
from datetime import date, timedelta

from labor_engine.compliance import messages
from labor_engine.compliance.rules.base import ComplianceRule, entry_ids, unique_dates
from labor_engine.compliance.types import (
    ComplianceContext,
    EntrySnapshot,
    RuleCategory,
    RuleResult,
)
from labor_engine.utils.age import AgeBand
from labor_engine.utils.time import is_summer_period, time_to_minutes

SCHOOL_HOURS_START = 7 * 60
SCHOOL_HOURS_END = 15 * 60

# 14-15 work window
YOUNG_TEEN_WINDOW_START = 7 * 60
YOUNG_TEEN_WINDOW_END = 19 * 60
YOUNG_TEEN_SUMMER_WINDOW_END = 21 * 60

# 16-17 work window
OLDER_TEEN_WINDOW_START = 6 * 60
OLDER_TEEN_WINDOW_END = 23 * 60 + 30
SCHOOL_NIGHT_CUTOFF = 22 * 60

# date.weekday() values for Sunday through Thursday
SCHOOL_NIGHT_WEEKDAYS = frozenset({6, 0, 1, 2, 3})


def overlaps_school_hours(entry: EntrySnapshot) -> bool:
    """An entry overlaps 7:00-15:00 unless it ends by 7:00 or starts at 15:00 or later."""
    start = time_to_minutes(entry.start_time)
    end = time_to_minutes(entry.end_time)
    return not (end <= SCHOOL_HOURS_START or start >= SCHOOL_HOURS_END)


def is_school_night(context: ComplianceContext, day: date) -> bool:
    """True when the following day is a school day.

    Uses the next day's entries when there are any; otherwise falls back
    to Sunday through Thursday of a school week.
    """
    next_entries = context.entries_on(day + timedelta(days=1))
    if next_entries:
        return any(entry.is_school_day for entry in next_entries)
    return context.is_school_week and day.weekday() in SCHOOL_NIGHT_WEEKDAYS


class _TimeWindowRule(ComplianceRule):
    """Collects violating entries on the band's days and reports the first."""

    category = RuleCategory.TIME_WINDOW

    def __init__(self, rule_id: str, name: str, band: AgeBand, description: str):
        self.rule_id = rule_id
        self.name = name
        self.band = band
        self.age_bands = frozenset({band})
        self.description = description
        self.threshold: object = None

    @abstractmethod
    def violates(self, context: ComplianceContext, entry: EntrySnapshot) -> bool:
        """True if the entry breaks the rule."""

    @abstractmethod
    def message_for(self, context: ComplianceContext, entry: EntrySnapshot) -> tuple[str, str]:
        """Message and remediation for a violating entry."""

    def evaluate(self, context: ComplianceContext) -> RuleResult:
        checked = [
            entry
            for day in context.days_in_band(self.band)
            for entry in context.entries_on(day)
        ]
        violations = [entry for entry in checked if self.violates(context, entry)]

        if not violations:
            return self.passed(
                checked_values={"entriesChecked": len(checked)},
                threshold=self.threshold,
            )

        first = violations[0]
        message, remediation = self.message_for(context, first)
        return self.failed(
            message,
            remediation,
            checked_values={"entriesChecked": len(checked)},
            threshold=self.threshold,
            actual_value={
                "date": first.work_date,
                "startTime": first.start_time,
                "endTime": first.end_time,
            },
            affected_dates=unique_dates(violations),
            affected_entries=entry_ids(violations),
        )


class SchoolHoursRule(_TimeWindowRule):
    """No work during school hours on school days."""

    def __init__(self, rule_id: str, band: AgeBand):
        super().__init__(
            rule_id,
            f"School Hours Prohibition (Ages {band.value})",
            band,
            f"Ages {band.value} cannot work during school hours (7:00 AM - 3:00 PM) "
            "on school days",
        )
        self.threshold = {"start": "07:00", "end": "15:00"}

    def violates(self, context: ComplianceContext, entry: EntrySnapshot) -> bool:
        return entry.work_date in context.school_days and overlaps_school_hours(entry)

    def message_for(self, context: ComplianceContext, entry: EntrySnapshot) -> tuple[str, str]:
        return (
            messages.school_hours(
                self.band.value, entry.work_date, entry.start_time, entry.end_time
            ),
            messages.SCHOOL_HOURS_REMEDIATION,
        )


class YoungTeenWorkWindowRule(_TimeWindowRule):
    """Ages 14-15 work between 7:00 AM and 7:00 PM (9:00 PM in summer)."""

    def __init__(self):
        super().__init__(
            "RULE-011",
            "Work Window (Ages 14-15)",
            AgeBand.AGES_14_15,
            "Ages 14-15 may only work between 7:00 AM and 7:00 PM "
            "(9:00 PM from June 1 through Labor Day)",
        )

    @staticmethod
    def window_end(day: date) -> int:
        if is_summer_period(day):
            return YOUNG_TEEN_SUMMER_WINDOW_END
        return YOUNG_TEEN_WINDOW_END

    def violates(self, context: ComplianceContext, entry: EntrySnapshot) -> bool:
        start = time_to_minutes(entry.start_time)
        end = time_to_minutes(entry.end_time)
        return start < YOUNG_TEEN_WINDOW_START or end > self.window_end(entry.work_date)

    def message_for(self, context: ComplianceContext, entry: EntrySnapshot) -> tuple[str, str]:
        window_end = self.window_end(entry.work_date)
        return (
            messages.work_window(
                self.band.value,
                YOUNG_TEEN_WINDOW_START,
                window_end,
                entry.work_date,
                entry.start_time,
                entry.end_time,
                summer=is_summer_period(entry.work_date),
            ),
            messages.work_window_remediation(YOUNG_TEEN_WINDOW_START, window_end),
        )


class SchoolNightRule(_TimeWindowRule):
    """Ages 16-17 stop by 10:00 PM on nights before a school day."""

    def __init__(self):
        super().__init__(
            "RULE-016",
            "School Night Cutoff (Ages 16-17)",
            AgeBand.AGES_16_17,
            "Ages 16-17 cannot work past 10:00 PM on nights before school days",
        )

    def violates(self, context: ComplianceContext, entry: EntrySnapshot) -> bool:
        return (
            time_to_minutes(entry.end_time) > SCHOOL_NIGHT_CUTOFF
            and is_school_night(context, entry.work_date)
        )

    def message_for(self, context: ComplianceContext, entry: EntrySnapshot) -> tuple[str, str]:
        return (
            messages.school_night(entry.work_date, entry.end_time),
            messages.SCHOOL_NIGHT_REMEDIATION,
        )


class OlderTeenWorkWindowRule(_TimeWindowRule):
    """Ages 16-17 work between 6:00 AM and 11:30 PM."""

    def __init__(self):
        super().__init__(
            "RULE-017",
            "Work Window (Ages 16-17)",
            AgeBand.AGES_16_17,
            "Ages 16-17 may only work between 6:00 AM and 11:30 PM",
        )

    def violates(self, context: ComplianceContext, entry: EntrySnapshot) -> bool:
        start = time_to_minutes(entry.start_time)
        end = time_to_minutes(entry.end_time)
        if start < OLDER_TEEN_WINDOW_START:
            return True
        # School nights are covered by the earlier cutoff
        return end > OLDER_TEEN_WINDOW_END and not is_school_night(context, entry.work_date)

    def message_for(self, context: ComplianceContext, entry: EntrySnapshot) -> tuple[str, str]:
        return (
            messages.work_window(
                self.band.value,
                OLDER_TEEN_WINDOW_START,
                OLDER_TEEN_WINDOW_END,
                entry.work_date,
                entry.start_time,
                entry.end_time,
            ),
            messages.work_window_remediation(OLDER_TEEN_WINDOW_START, OLDER_TEEN_WINDOW_END),
        )


TIME_WINDOW_RULES: tuple[ComplianceRule, ...] = (
    SchoolHoursRule("RULE-004", AgeBand.AGES_12_13),
    SchoolHoursRule("RULE-010", AgeBand.AGES_14_15),
    YoungTeenWorkWindowRule(),
    SchoolNightRule(),
    OlderTeenWorkWindowRule(),
    SchoolHoursRule("RULE-034", AgeBand.AGES_16_17),
)
