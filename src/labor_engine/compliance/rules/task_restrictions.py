"""Restrictions on which tasks a worker may perform."""

from __future__ import annotations

from abc import abstractmethod
from typing import Callable

from labor_engine.compliance import messages
from labor_engine.compliance.rules.base import ComplianceRule, entry_ids, unique_dates
from labor_engine.compliance.types import (
    ComplianceContext,
    EntrySnapshot,
    RuleCategory,
    RuleResult,
    SupervisorRequirement,
    TaskSnapshot,
)
from labor_engine.utils.age import MINOR_BANDS, AgeBand


class _TaskRule(ComplianceRule):
    """Checks each entry's task against the worker's age on the work date."""

    category = RuleCategory.TASK

    @abstractmethod
    def violates(self, context: ComplianceContext, entry: EntrySnapshot) -> bool:
        """True if the entry breaks the rule."""

    @abstractmethod
    def message_for(self, context: ComplianceContext, entry: EntrySnapshot) -> tuple[str, str]:
        """Message and remediation for a violating entry."""

    def evaluate(self, context: ComplianceContext) -> RuleResult:
        checked = [entry for entry in context.entries if entry.task is not None]
        violations = [entry for entry in checked if self.violates(context, entry)]

        if not violations:
            return self.passed(checked_values={"entriesChecked": len(checked)})

        first = violations[0]
        message, remediation = self.message_for(context, first)
        return self.failed(
            message,
            remediation,
            checked_values={"entriesChecked": len(checked)},
            actual_value={"taskCode": first.task.code, "date": first.work_date},
            affected_dates=unique_dates(violations),
            affected_entries=entry_ids(violations),
        )


class TaskMinimumAgeRule(_TaskRule):
    """Worker must be at least the task's minimum age on the work date."""

    rule_id = "RULE-005"
    name = "Task Minimum Age"
    description = "Employee must meet the minimum age of every task performed"

    def violates(self, context: ComplianceContext, entry: EntrySnapshot) -> bool:
        return context.daily_ages[entry.work_date] < entry.task.min_age_allowed

    def message_for(self, context: ComplianceContext, entry: EntrySnapshot) -> tuple[str, str]:
        return (
            messages.task_min_age(
                entry.task.code,
                entry.task.name,
                entry.task.min_age_allowed,
                context.daily_ages[entry.work_date],
                entry.work_date,
            ),
            messages.TASK_REASSIGN_REMEDIATION,
        )


class MinorTaskProhibitionRule(_TaskRule):
    """Minors may not perform tasks carrying a given flag."""

    age_bands = MINOR_BANDS

    def __init__(
        self,
        rule_id: str,
        name: str,
        activity: str,
        flag: Callable[[TaskSnapshot], bool],
    ):
        self.rule_id = rule_id
        self.name = name
        self.activity = activity
        self.flag = flag
        self.description = f"Workers under 18 may not perform tasks involving {activity}"

    def violates(self, context: ComplianceContext, entry: EntrySnapshot) -> bool:
        return context.daily_age_bands[entry.work_date].is_minor and self.flag(entry.task)

    def message_for(self, context: ComplianceContext, entry: EntrySnapshot) -> tuple[str, str]:
        return (
            messages.minor_prohibited_task(entry.task.code, entry.task.name, self.activity),
            messages.minor_prohibited_remediation(self.activity),
        )


class SoloCashHandlingRule(_TaskRule):
    """Workers under 14 may not handle cash alone."""

    rule_id = "RULE-022"
    name = "Solo Cash Handling (Under 14)"
    description = "Workers under 14 may not perform solo cash handling"
    age_bands = frozenset({AgeBand.AGES_12_13})

    def violates(self, context: ComplianceContext, entry: EntrySnapshot) -> bool:
        return context.daily_ages[entry.work_date] < 14 and entry.task.solo_cash_handling

    def message_for(self, context: ComplianceContext, entry: EntrySnapshot) -> tuple[str, str]:
        return (
            messages.solo_cash_handling(
                entry.task.code, entry.task.name, context.daily_ages[entry.work_date]
            ),
            messages.SOLO_CASH_REMEDIATION,
        )


class SupervisorAttestationRule(_TaskRule):
    """Entries on supervised tasks must record who supervised."""

    rule_id = "RULE-029"
    name = "Supervisor Attestation"
    description = "Tasks requiring supervision must name the supervisor present"

    def violates(self, context: ComplianceContext, entry: EntrySnapshot) -> bool:
        requirement = entry.task.supervisor_required
        if requirement is SupervisorRequirement.ALWAYS:
            required = True
        elif requirement is SupervisorRequirement.FOR_MINORS:
            required = context.daily_age_bands[entry.work_date].is_minor
        else:
            required = False
        return required and not (entry.supervisor_present_name or "").strip()

    def message_for(self, context: ComplianceContext, entry: EntrySnapshot) -> tuple[str, str]:
        return (
            messages.supervisor_attestation(entry.task.code, entry.task.name, entry.work_date),
            messages.SUPERVISOR_ATTESTATION_REMEDIATION,
        )


TASK_RULES: tuple[ComplianceRule, ...] = (
    TaskMinimumAgeRule(),
    MinorTaskProhibitionRule(
        "RULE-020",
        "Power Machinery (Minors)",
        "power machinery",
        lambda task: task.power_machinery,
    ),
    MinorTaskProhibitionRule(
        "RULE-021",
        "Driving (Minors)",
        "driving",
        lambda task: task.driving_required,
    ),
    SoloCashHandlingRule(),
    MinorTaskProhibitionRule(
        "RULE-024",
        "Hazardous Tasks (Minors)",
        "hazardous work",
        lambda task: task.is_hazardous,
    ),
    SupervisorAttestationRule(),
)
