"""Type definitions for the compliance rule engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping
from uuid import UUID

from labor_engine.utils.age import AgeBand


class RuleCategory(str, Enum):
    """Rule categories."""

    HOURS = "hours"
    TIME_WINDOW = "time_window"
    DOCUMENTATION = "documentation"
    TASK = "task"
    BREAK = "break"


class ResultType(str, Enum):
    """Outcome of evaluating one rule against one week."""

    PASS = "pass"
    FAIL = "fail"
    NOT_APPLICABLE = "not_applicable"


class DocumentType(str, Enum):
    """Compliance document kinds."""

    PARENTAL_CONSENT = "parental_consent"
    WORK_PERMIT = "work_permit"
    SAFETY_TRAINING = "safety_training"


class SupervisorRequirement(str, Enum):
    """When a task needs a supervisor present."""

    NONE = "none"
    FOR_MINORS = "for_minors"
    ALWAYS = "always"


def _jsonable(value: Any) -> Any:
    """Convert decimals, dates and UUIDs to JSON-safe values."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime, time)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(v) for v in value]
    return value


@dataclass
class RuleDetails:
    """Structured diagnostic detail attached to every rule result."""

    rule_description: str
    checked_values: dict[str, Any] = field(default_factory=dict)
    threshold: Any = None
    actual_value: Any = None
    affected_dates: list[date] = field(default_factory=list)
    affected_entries: list[str] = field(default_factory=list)
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "ruleDescription": self.rule_description,
            "checkedValues": _jsonable(self.checked_values),
            "threshold": _jsonable(self.threshold),
            "actualValue": _jsonable(self.actual_value),
            "affectedDates": _jsonable(self.affected_dates),
            "affectedEntries": list(self.affected_entries),
            "message": self.message,
        }


@dataclass
class RuleResult:
    """One rule's outcome for a week."""

    rule_id: str
    rule_name: str
    result: ResultType
    details: RuleDetails
    error_message: str | None = None
    remediation_guidance: str | None = None

    @property
    def failed(self) -> bool:
        return self.result is ResultType.FAIL

    def to_dict(self) -> dict[str, Any]:
        """Persisted and API shape of a rule outcome."""
        return {
            "ruleId": self.rule_id,
            "ruleName": self.rule_name,
            "result": self.result.value,
            "errorMessage": self.error_message,
            "remediationGuidance": self.remediation_guidance,
            "affectedDates": _jsonable(self.details.affected_dates),
            "affectedEntries": list(self.details.affected_entries),
            "details": self.details.to_dict(),
        }


@dataclass(frozen=True)
class Violation:
    """Compact view of a failed rule for callers gating a transition."""

    rule_id: str
    rule_name: str
    message: str
    remediation: str
    affected_dates: tuple[date, ...] = ()
    affected_entries: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "ruleId": self.rule_id,
            "ruleName": self.rule_name,
            "message": self.message,
            "remediation": self.remediation,
            "affectedDates": _jsonable(self.affected_dates),
            "affectedEntries": list(self.affected_entries),
        }


# ============================================================================
# Context snapshots
# ============================================================================


@dataclass(frozen=True)
class EmployeeSnapshot:
    """Employee fields the rules read."""

    employee_id: UUID
    name: str
    date_of_birth: date
    is_supervisor: bool = False
    status: str = "active"


@dataclass(frozen=True)
class TaskSnapshot:
    """Task code fields the rules read."""

    task_code_id: UUID
    code: str
    name: str
    is_agricultural: bool = False
    is_hazardous: bool = False
    supervisor_required: SupervisorRequirement = SupervisorRequirement.NONE
    solo_cash_handling: bool = False
    driving_required: bool = False
    power_machinery: bool = False
    min_age_allowed: int = 12


@dataclass(frozen=True)
class EntrySnapshot:
    """A single shift as seen by the rules."""

    entry_id: str
    work_date: date
    start_time: time
    end_time: time
    hours: Decimal
    is_school_day: bool
    task: TaskSnapshot | None = None
    school_day_override_note: str | None = None
    supervisor_present_name: str | None = None
    meal_break_confirmed: bool | None = None


@dataclass(frozen=True)
class DocumentSnapshot:
    """A compliance document as seen by the rules."""

    document_id: str
    document_type: DocumentType
    uploaded_at: datetime | None = None
    expires_at: date | None = None
    invalidated_at: datetime | None = None

    @property
    def is_revoked(self) -> bool:
        return self.invalidated_at is not None

    def is_expired(self, on_date: date) -> bool:
        return self.expires_at is not None and self.expires_at < on_date


@dataclass(frozen=True)
class ComplianceContext:
    """Everything the rules need for one employee and one week.

    Per-day mappings cover all seven days of the week (days without entries
    have zero hours and no entries) and are read-only.
    """

    employee: EmployeeSnapshot
    week_start: date
    week_end: date
    check_date: date
    entries: tuple[EntrySnapshot, ...]
    documents: tuple[DocumentSnapshot, ...]
    daily_hours: Mapping[date, Decimal]
    daily_ages: Mapping[date, int]
    daily_age_bands: Mapping[date, AgeBand]
    daily_entries: Mapping[date, tuple[EntrySnapshot, ...]]
    school_days: tuple[date, ...]
    work_days: tuple[date, ...]
    weekly_total: Decimal
    is_school_week: bool

    @property
    def week_dates(self) -> list[date]:
        return sorted(self.daily_ages)

    @property
    def age_bands(self) -> frozenset[AgeBand]:
        """Distinct age bands present during the week."""
        return frozenset(self.daily_age_bands.values())

    @property
    def has_minor_days(self) -> bool:
        return any(band.is_minor for band in self.daily_age_bands.values())

    def days_in_band(self, band: AgeBand) -> list[date]:
        return [d for d in self.week_dates if self.daily_age_bands[d] is band]

    def entries_on(self, on_date: date) -> tuple[EntrySnapshot, ...]:
        return self.daily_entries.get(on_date, ())

    def documents_of_type(self, document_type: DocumentType) -> list[DocumentSnapshot]:
        return [doc for doc in self.documents if doc.document_type is document_type]


def frozen_mapping(data: dict) -> Mapping:
    """Read-only view over a dict built by the context builder."""
    return MappingProxyType(data)
