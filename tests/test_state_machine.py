"""Tests for timesheet state machine."""

import pytest

from labor_engine.services.state_machine import (
    InvalidTransitionError,
    TimesheetStateMachine,
    TimesheetStatus,
)


class TestTimesheetStateMachine:
    """Test state machine transitions."""

    def test_valid_transitions(self):
        """Test that valid transitions are allowed."""
        # open → submitted
        assert TimesheetStateMachine.can_transition("open", "submitted") is True

        # submitted → approved
        assert TimesheetStateMachine.can_transition("submitted", "approved") is True

        # submitted → open (rejected)
        assert TimesheetStateMachine.can_transition("submitted", "open") is True

    def test_invalid_transitions(self):
        """Test that invalid transitions are blocked."""
        # Can't skip submission
        assert TimesheetStateMachine.can_transition("open", "approved") is False

        # Approved is terminal
        assert TimesheetStateMachine.can_transition("approved", "open") is False
        assert TimesheetStateMachine.can_transition("approved", "submitted") is False

        # Unknown status
        assert TimesheetStateMachine.can_transition("archived", "open") is False

    def test_validate_transition_raises(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            TimesheetStateMachine.validate_transition("approved", "open")

        assert exc_info.value.code == "INVALID_TRANSITION"
        assert exc_info.value.from_status == "approved"
        assert "Invalid transition from 'approved' to 'open'" in str(exc_info.value)

    def test_entries_mutable_only_when_open(self):
        assert TimesheetStateMachine.can_modify_entries("open") is True
        assert TimesheetStateMachine.can_modify_entries("submitted") is False
        assert TimesheetStateMachine.can_modify_entries("approved") is False

    def test_payroll_only_when_approved(self):
        assert TimesheetStateMachine.can_calculate_payroll("approved") is True
        assert TimesheetStateMachine.can_calculate_payroll("submitted") is False

    def test_rejection(self):
        assert TimesheetStateMachine.is_rejection("submitted", "open") is True
        assert TimesheetStateMachine.is_rejection("submitted", "approved") is False

    def test_next_statuses(self):
        assert TimesheetStateMachine.get_next_statuses(TimesheetStatus.SUBMITTED) == [
            TimesheetStatus.APPROVED,
            TimesheetStatus.OPEN,
        ]
        assert TimesheetStateMachine.get_next_statuses("approved") == []
