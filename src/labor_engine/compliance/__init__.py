"""Labor compliance rule engine."""

from labor_engine.compliance.context import build_context
from labor_engine.compliance.engine import ComplianceEngine, ComplianceReport
from labor_engine.compliance.types import (
    ComplianceContext,
    DocumentSnapshot,
    DocumentType,
    EmployeeSnapshot,
    EntrySnapshot,
    ResultType,
    RuleCategory,
    RuleDetails,
    RuleResult,
    SupervisorRequirement,
    TaskSnapshot,
    Violation,
)

__all__ = [
    "ComplianceContext",
    "ComplianceEngine",
    "ComplianceReport",
    "DocumentSnapshot",
    "DocumentType",
    "EmployeeSnapshot",
    "EntrySnapshot",
    "ResultType",
    "RuleCategory",
    "RuleDetails",
    "RuleResult",
    "SupervisorRequirement",
    "TaskSnapshot",
    "Violation",
    "build_context",
]
