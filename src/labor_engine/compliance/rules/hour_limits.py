"""Daily, weekly and day-count hour limits by age band.

Each rule only looks at days on which the employee is in the rule's band,
so a week spanning a birthday is checked against both bands' limits on
the matching days.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from labor_engine.compliance import messages
from labor_engine.compliance.rules.base import ComplianceRule, entry_ids
from labor_engine.compliance.types import ComplianceContext, RuleCategory, RuleResult
from labor_engine.utils.age import AgeBand


class DailyHourLimitRule(ComplianceRule):
    """Hours worked on any single day must not exceed the limit.

    ``school_day`` restricts the rule to school days (True), non-school
    days (False) or every day (None).
    """

    category = RuleCategory.HOURS

    def __init__(
        self,
        rule_id: str,
        name: str,
        band: AgeBand,
        limit: Decimal,
        school_day: bool | None = None,
    ):
        self.rule_id = rule_id
        self.name = name
        self.band = band
        self.limit = limit
        self.school_day = school_day
        self.age_bands = frozenset({band})
        self.description = (
            f"Ages {band.value} may work at most {limit} hours {self._day_kind}"
        )

    @property
    def _day_kind(self) -> str:
        if self.school_day is True:
            return "on school days"
        if self.school_day is False:
            return "on non-school days"
        return "per day"

    def _days(self, context: ComplianceContext) -> list[date]:
        days = context.days_in_band(self.band)
        if self.school_day is None:
            return days
        school = set(context.school_days)
        return [d for d in days if (d in school) == self.school_day]

    def evaluate(self, context: ComplianceContext) -> RuleResult:
        days = self._days(context)
        checked = {d: context.daily_hours[d] for d in days}
        violations = [d for d in days if checked[d] > self.limit]

        if not violations:
            return self.passed(
                checked_values=checked,
                threshold=self.limit,
                actual_value=max(checked.values(), default=Decimal("0")),
            )

        first = violations[0]
        affected = [e for d in violations for e in context.entries_on(d)]
        return self.failed(
            messages.daily_limit(
                self.band.value, self.limit, checked[first], first, self._day_kind
            ),
            messages.daily_limit_remediation(self.limit, self.school_day is True),
            checked_values=checked,
            threshold=self.limit,
            actual_value=checked[first],
            affected_dates=violations,
            affected_entries=entry_ids(affected),
        )


class WeeklyHourLimitRule(ComplianceRule):
    """Hours summed over the band's days must not exceed the weekly limit.

    ``school_week`` makes the rule not applicable unless the week's
    school-week status matches.
    """

    category = RuleCategory.HOURS

    def __init__(
        self,
        rule_id: str,
        name: str,
        band: AgeBand,
        limit: Decimal,
        school_week: bool | None = None,
    ):
        self.rule_id = rule_id
        self.name = name
        self.band = band
        self.limit = limit
        self.school_week = school_week
        self.age_bands = frozenset({band})
        self.description = (
            f"Ages {band.value} may work at most {limit} hours {self._week_kind}"
        )

    @property
    def _week_kind(self) -> str:
        if self.school_week is True:
            return "during school weeks"
        if self.school_week is False:
            return "during non-school weeks"
        return "per week"

    def evaluate(self, context: ComplianceContext) -> RuleResult:
        if self.school_week is not None and context.is_school_week != self.school_week:
            kind = "a school week" if self.school_week else "a non-school week"
            return self.not_applicable(
                f"Week is not {kind}",
                checked_values={"isSchoolWeek": context.is_school_week},
            )

        days = context.days_in_band(self.band)
        total = sum((context.daily_hours[d] for d in days), Decimal("0"))
        checked = {"weeklyTotal": total, "daysInBand": days}

        if total <= self.limit:
            return self.passed(
                checked_values=checked,
                threshold=self.limit,
                actual_value=total,
            )

        worked = [d for d in days if context.entries_on(d)]
        affected = [e for d in worked for e in context.entries_on(d)]
        return self.failed(
            messages.weekly_limit(self.band.value, self.limit, total, self._week_kind),
            messages.weekly_limit_remediation(self.limit),
            checked_values=checked,
            threshold=self.limit,
            actual_value=total,
            affected_dates=worked,
            affected_entries=entry_ids(affected),
        )


class WorkDayCountRule(ComplianceRule):
    """Number of distinct days worked in the band must not exceed the limit."""

    category = RuleCategory.HOURS

    def __init__(self, rule_id: str, name: str, band: AgeBand, limit: int):
        self.rule_id = rule_id
        self.name = name
        self.band = band
        self.limit = limit
        self.age_bands = frozenset({band})
        self.description = f"Ages {band.value} may work at most {limit} days per week"

    def evaluate(self, context: ComplianceContext) -> RuleResult:
        worked = [d for d in context.days_in_band(self.band) if context.entries_on(d)]

        if len(worked) <= self.limit:
            return self.passed(
                checked_values={"daysWorked": worked},
                threshold=self.limit,
                actual_value=len(worked),
            )

        affected = [e for d in worked for e in context.entries_on(d)]
        return self.failed(
            messages.day_count(self.band.value, self.limit, len(worked)),
            messages.day_count_remediation(self.limit),
            checked_values={"daysWorked": worked},
            threshold=self.limit,
            actual_value=len(worked),
            affected_dates=worked,
            affected_entries=entry_ids(affected),
        )


HOUR_LIMIT_RULES: tuple[ComplianceRule, ...] = (
    DailyHourLimitRule(
        "RULE-002", "Daily Hour Limit (Ages 12-13)", AgeBand.AGES_12_13, Decimal("4")
    ),
    WeeklyHourLimitRule(
        "RULE-003", "Weekly Hour Limit (Ages 12-13)", AgeBand.AGES_12_13, Decimal("24")
    ),
    DailyHourLimitRule(
        "RULE-008",
        "School Day Hour Limit (Ages 14-15)",
        AgeBand.AGES_14_15,
        Decimal("3"),
        school_day=True,
    ),
    WeeklyHourLimitRule(
        "RULE-009",
        "School Week Hour Limit (Ages 14-15)",
        AgeBand.AGES_14_15,
        Decimal("18"),
        school_week=True,
    ),
    DailyHourLimitRule(
        "RULE-032",
        "Non-School Day Hour Limit (Ages 14-15)",
        AgeBand.AGES_14_15,
        Decimal("8"),
        school_day=False,
    ),
    WeeklyHourLimitRule(
        "RULE-033",
        "Non-School Week Hour Limit (Ages 14-15)",
        AgeBand.AGES_14_15,
        Decimal("40"),
        school_week=False,
    ),
    DailyHourLimitRule(
        "RULE-014", "Daily Hour Limit (Ages 16-17)", AgeBand.AGES_16_17, Decimal("9")
    ),
    WeeklyHourLimitRule(
        "RULE-015", "Weekly Hour Limit (Ages 16-17)", AgeBand.AGES_16_17, Decimal("48")
    ),
    WorkDayCountRule("RULE-018", "Day Count Limit (Ages 16-17)", AgeBand.AGES_16_17, 6),
)
