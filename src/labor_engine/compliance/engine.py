"""Compliance rule evaluation engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from labor_engine.compliance import messages
from labor_engine.compliance.rules import ALL_RULES, ComplianceRule
from labor_engine.compliance.types import (
    ComplianceContext,
    ResultType,
    RuleDetails,
    RuleResult,
    Violation,
)

logger = logging.getLogger(__name__)


@dataclass
class ComplianceReport:
    """Complete set of rule results for one week."""

    results: list[RuleResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        """True when no rule failed; the week may be submitted."""
        return not self.failures

    @property
    def failures(self) -> list[RuleResult]:
        return [r for r in self.results if r.result is ResultType.FAIL]

    @property
    def violations(self) -> list[Violation]:
        return [
            Violation(
                rule_id=r.rule_id,
                rule_name=r.rule_name,
                message=r.error_message or "",
                remediation=r.remediation_guidance or "",
                affected_dates=tuple(r.details.affected_dates),
                affected_entries=tuple(r.details.affected_entries),
            )
            for r in self.failures
        ]

    def count(self, result: ResultType) -> int:
        return sum(1 for r in self.results if r.result is result)

    def summary(self) -> dict[str, int]:
        return {
            "total": len(self.results),
            "passed": self.count(ResultType.PASS),
            "failed": self.count(ResultType.FAIL),
            "not_applicable": self.count(ResultType.NOT_APPLICABLE),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "summary": self.summary(),
            "results": [r.to_dict() for r in self.results],
            "violations": [v.to_dict() for v in self.violations],
        }


class ComplianceEngine:
    """Runs the applicable rule set against a week's compliance context.

    Evaluation pipeline:
    1. Select rules whose age bands intersect the bands present this week
    2. Evaluate every selected rule in order (no short-circuit by default)
    3. Convert a rule that raises into a ``fail`` result so the week cannot
       pass on a broken check
    4. Return the complete list of results
    """

    def __init__(
        self,
        rules: Sequence[ComplianceRule] | None = None,
        stop_on_first_failure: bool = False,
    ):
        self.rules: list[ComplianceRule] = list(ALL_RULES if rules is None else rules)
        self.stop_on_first_failure = stop_on_first_failure

    def applicable_rules(self, context: ComplianceContext) -> list[ComplianceRule]:
        """Rules covering at least one age band present during the week."""
        bands = context.age_bands
        return [rule for rule in self.rules if rule.applies_to(bands)]

    def evaluate_week(self, context: ComplianceContext) -> list[RuleResult]:
        """Evaluate all applicable rules for the week."""
        results: list[RuleResult] = []

        for rule in self.applicable_rules(context):
            result = self._evaluate_rule(rule, context)
            results.append(result)
            if self.stop_on_first_failure and result.failed:
                break

        return results

    def check(self, context: ComplianceContext) -> ComplianceReport:
        """Evaluate the week and wrap the results in a report."""
        report = ComplianceReport(results=self.evaluate_week(context))
        logger.info(
            "Compliance check for employee %s week %s: %s",
            context.employee.employee_id,
            context.week_start.isoformat(),
            report.summary(),
        )
        return report

    def _evaluate_rule(self, rule: ComplianceRule, context: ComplianceContext) -> RuleResult:
        try:
            return rule.evaluate(context)
        except Exception as exc:
            logger.exception(
                "Rule %s raised while checking employee %s week %s",
                rule.rule_id,
                context.employee.employee_id,
                context.week_start.isoformat(),
            )
            return RuleResult(
                rule_id=rule.rule_id,
                rule_name=rule.name,
                result=ResultType.FAIL,
                details=RuleDetails(
                    rule_description=rule.description,
                    checked_values={"error": str(exc)},
                    message=messages.GENERIC_ERROR_MESSAGE,
                ),
                error_message=messages.GENERIC_ERROR_MESSAGE,
                remediation_guidance=messages.GENERIC_ERROR_REMEDIATION,
            )
