"""The ordered set of compliance rules.

Rules run in this order: documentation, hour limits, time windows, task
restrictions, breaks. Adding a rule means adding an instance here.
"""

from labor_engine.compliance.rules.base import ComplianceRule
from labor_engine.compliance.rules.breaks import BREAK_RULES, MealBreakRule
from labor_engine.compliance.rules.documentation import (
    DOCUMENTATION_RULES,
    ConsentNotRevokedRule,
    RequiredDocumentRule,
    WorkPermitExpiryRule,
    WorkPermitRule,
    document_status,
)
from labor_engine.compliance.rules.hour_limits import (
    HOUR_LIMIT_RULES,
    DailyHourLimitRule,
    WeeklyHourLimitRule,
    WorkDayCountRule,
)
from labor_engine.compliance.rules.task_restrictions import (
    TASK_RULES,
    MinorTaskProhibitionRule,
    SoloCashHandlingRule,
    SupervisorAttestationRule,
    TaskMinimumAgeRule,
)
from labor_engine.compliance.rules.time_windows import (
    TIME_WINDOW_RULES,
    OlderTeenWorkWindowRule,
    SchoolHoursRule,
    SchoolNightRule,
    YoungTeenWorkWindowRule,
    is_school_night,
    overlaps_school_hours,
)

ALL_RULES: tuple[ComplianceRule, ...] = (
    *DOCUMENTATION_RULES,
    *HOUR_LIMIT_RULES,
    *TIME_WINDOW_RULES,
    *TASK_RULES,
    *BREAK_RULES,
)

RULES_BY_ID: dict[str, ComplianceRule] = {rule.rule_id: rule for rule in ALL_RULES}


def get_rule(rule_id: str) -> ComplianceRule:
    """Look up a rule by its identifier (raises KeyError if unknown)."""
    return RULES_BY_ID[rule_id]


__all__ = [
    "ALL_RULES",
    "RULES_BY_ID",
    "BREAK_RULES",
    "DOCUMENTATION_RULES",
    "HOUR_LIMIT_RULES",
    "TASK_RULES",
    "TIME_WINDOW_RULES",
    "ComplianceRule",
    "ConsentNotRevokedRule",
    "DailyHourLimitRule",
    "MealBreakRule",
    "MinorTaskProhibitionRule",
    "OlderTeenWorkWindowRule",
    "RequiredDocumentRule",
    "SchoolHoursRule",
    "SchoolNightRule",
    "SoloCashHandlingRule",
    "SupervisorAttestationRule",
    "TaskMinimumAgeRule",
    "WeeklyHourLimitRule",
    "WorkDayCountRule",
    "WorkPermitExpiryRule",
    "WorkPermitRule",
    "YoungTeenWorkWindowRule",
    "document_status",
    "get_rule",
    "is_school_night",
    "overlaps_school_hours",
]
