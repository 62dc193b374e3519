"""Meal break requirement for minors."""

from __future__ import annotations

from decimal import Decimal

from labor_engine.compliance import messages
from labor_engine.compliance.rules.base import ComplianceRule, entry_ids
from labor_engine.compliance.types import ComplianceContext, RuleCategory, RuleResult
from labor_engine.utils.age import MINOR_BANDS

MEAL_BREAK_THRESHOLD = Decimal("6")


class MealBreakRule(ComplianceRule):
    """Minors working more than 6 hours in a day must confirm a meal break."""

    rule_id = "RULE-025"
    name = "Meal Break (Minors)"
    category = RuleCategory.BREAK
    description = "Workers under 18 need a 30-minute meal break when working over 6 hours"
    age_bands = MINOR_BANDS

    def evaluate(self, context: ComplianceContext) -> RuleResult:
        long_days = [
            d
            for d in context.week_dates
            if context.daily_age_bands[d].is_minor
            and context.daily_hours[d] > MEAL_BREAK_THRESHOLD
        ]
        violations = [
            d
            for d in long_days
            if not any(entry.meal_break_confirmed for entry in context.entries_on(d))
        ]
        checked = {"daysOverThreshold": long_days}

        if not violations:
            return self.passed(checked_values=checked, threshold=MEAL_BREAK_THRESHOLD)

        first = violations[0]
        affected = [e for d in violations for e in context.entries_on(d)]
        return self.failed(
            messages.meal_break(first, context.daily_hours[first]),
            messages.MEAL_BREAK_REMEDIATION,
            checked_values=checked,
            threshold=MEAL_BREAK_THRESHOLD,
            actual_value=context.daily_hours[first],
            affected_dates=violations,
            affected_entries=entry_ids(affected),
        )


BREAK_RULES: tuple[ComplianceRule, ...] = (MealBreakRule(),)
