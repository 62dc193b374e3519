"""Base class shared by all compliance rules."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Iterable

from labor_engine.compliance.types import (
    ComplianceContext,
    EntrySnapshot,
    ResultType,
    RuleCategory,
    RuleDetails,
    RuleResult,
)
from labor_engine.utils.age import AgeBand


class ComplianceRule(ABC):
    """A single statutory check evaluated against one week.

    Rules are pure: ``evaluate`` reads the context and returns a result; it
    never raises for a compliance failure.
    """

    rule_id: str
    name: str
    category: RuleCategory
    description: str
    # Empty means the rule applies to every age band
    age_bands: frozenset[AgeBand] = frozenset()

    def applies_to(self, bands: Iterable[AgeBand]) -> bool:
        """True if the rule covers any of the bands present this week."""
        if not self.age_bands:
            return True
        return bool(self.age_bands.intersection(bands))

    @abstractmethod
    def evaluate(self, context: ComplianceContext) -> RuleResult:
        """Evaluate the rule for one week."""

    def passed(self, **details: Any) -> RuleResult:
        return RuleResult(
            rule_id=self.rule_id,
            rule_name=self.name,
            result=ResultType.PASS,
            details=self._details(**details),
        )

    def failed(self, message: str, remediation: str, **details: Any) -> RuleResult:
        return RuleResult(
            rule_id=self.rule_id,
            rule_name=self.name,
            result=ResultType.FAIL,
            details=self._details(message=message, **details),
            error_message=message,
            remediation_guidance=remediation,
        )

    def not_applicable(self, message: str, **details: Any) -> RuleResult:
        return RuleResult(
            rule_id=self.rule_id,
            rule_name=self.name,
            result=ResultType.NOT_APPLICABLE,
            details=self._details(message=message, **details),
        )

    def _details(self, **details: Any) -> RuleDetails:
        return RuleDetails(rule_description=self.description, **details)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.rule_id}>"


def entry_ids(entries: Iterable[EntrySnapshot]) -> list[str]:
    return [entry.entry_id for entry in entries]


def unique_dates(entries: Iterable[EntrySnapshot]) -> list[date]:
    """Distinct work dates of the entries, in chronological order."""
    return sorted({entry.work_date for entry in entries})
