"""Timesheet state machine with transition validation."""

from __future__ import annotations

from enum import Enum

from labor_engine.errors import LaborEngineError


class TimesheetStatus(str, Enum):
    """Timesheet status values."""

    OPEN = "open"
    SUBMITTED = "submitted"
    APPROVED = "approved"


class InvalidTransitionError(LaborEngineError):
    """Raised when an invalid state transition is attempted."""

    code = "INVALID_TRANSITION"

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class TimesheetStateMachine:
    """State machine for timesheet status transitions.

    Allowed transitions:
    - open → submitted (all compliance rules passed)
    - submitted → approved (supervisor review)
    - submitted → open (rejected, returned for correction)
    """

    # Define valid transitions: {from_status: [allowed_to_statuses]}
    VALID_TRANSITIONS: dict[str, list[str]] = {
        TimesheetStatus.OPEN: [TimesheetStatus.SUBMITTED],
        TimesheetStatus.SUBMITTED: [TimesheetStatus.APPROVED, TimesheetStatus.OPEN],
        TimesheetStatus.APPROVED: [],  # Terminal state
    }

    # Statuses where entries can be added or removed
    ENTRIES_MUTABLE = {TimesheetStatus.OPEN}

    # Statuses where payroll can be calculated
    PAYROLL_ALLOWED = {TimesheetStatus.APPROVED}

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status)

    @classmethod
    def can_modify_entries(cls, status: str) -> bool:
        """Check if entries can be added or removed in this status."""
        return status in cls.ENTRIES_MUTABLE

    @classmethod
    def can_calculate_payroll(cls, status: str) -> bool:
        """Check if payroll may be calculated in this status."""
        return status in cls.PAYROLL_ALLOWED

    @classmethod
    def is_rejection(cls, from_status: str, to_status: str) -> bool:
        """Check if this transition returns a submitted week for correction."""
        return from_status == TimesheetStatus.SUBMITTED and to_status == TimesheetStatus.OPEN

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return cls.VALID_TRANSITIONS.get(current_status, [])
