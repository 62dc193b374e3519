"""Timesheet lifecycle: entries, submission, review."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, time
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from labor_engine.compliance import ComplianceEngine, ComplianceReport
from labor_engine.config import get_settings
from labor_engine.errors import LaborEngineError
from labor_engine.models import Employee, PayrollRecord, TaskCode, Timesheet, TimesheetEntry, utcnow
from labor_engine.services.compliance_service import ComplianceService
from labor_engine.services.payroll_service import PayrollService
from labor_engine.services.state_machine import TimesheetStateMachine, TimesheetStatus
from labor_engine.utils.time import (
    calculate_hours,
    is_default_school_day,
    is_sunday,
    week_end_for,
)

logger = logging.getLogger(__name__)

MIN_REJECTION_NOTES_LENGTH = 10
PAYROLL_PENDING_MESSAGE = "Payroll calculation pending - manual recalculation required"


class TimesheetError(LaborEngineError):
    """Raised when a timesheet operation's preconditions are not met."""

    def __init__(self, code: str, message: str, timesheet_id: UUID | None = None):
        self.timesheet_id = timesheet_id
        super().__init__(message, code=code)


@dataclass
class SubmissionResult:
    """Outcome of a submission attempt."""

    timesheet: Timesheet
    report: ComplianceReport
    check_run_id: UUID

    @property
    def submitted(self) -> bool:
        return self.report.passed


@dataclass
class ApprovalResult:
    """Outcome of approving a timesheet.

    ``payroll_error`` is set when approval succeeded but payroll could not
    be calculated yet (for example, a task code has no rate in force).
    """

    timesheet: Timesheet
    payroll: PayrollRecord | None = None
    payroll_error: str | None = None
    payroll_error_code: str | None = None


class TimesheetService:
    """Service for recording work and moving timesheets through review.

    Handles:
    - Creating Sunday-aligned weeks (one per employee per week)
    - Adding and removing entries while the week is open
    - Submission gated by the full compliance rule set
    - Supervisor approval (which triggers payroll) and rejection
    """

    def __init__(self, session: AsyncSession, engine: ComplianceEngine | None = None):
        self.session = session
        self.compliance = ComplianceService(session, engine)

    # ------------------------------------------------------------------
    # Weeks and entries
    # ------------------------------------------------------------------

    async def get_timesheet(self, timesheet_id: UUID) -> Timesheet:
        """Load a timesheet with its entries, employee and documents.

        Raises:
            TimesheetError: TIMESHEET_NOT_FOUND
        """
        timesheet = await self.compliance.load_timesheet(timesheet_id)
        if timesheet is None:
            raise TimesheetError(
                "TIMESHEET_NOT_FOUND", f"Timesheet {timesheet_id} not found", timesheet_id
            )
        return timesheet

    async def get_or_create_timesheet(self, employee_id: UUID, week_start: date) -> Timesheet:
        """Return the employee's timesheet for the week, creating it if needed.

        Raises:
            TimesheetError: INVALID_WEEK_START, EMPLOYEE_NOT_FOUND or EMPLOYEE_ARCHIVED
        """
        if not is_sunday(week_start):
            raise TimesheetError(
                "INVALID_WEEK_START", f"Week start {week_start.isoformat()} is not a Sunday"
            )

        existing = await self._find_timesheet(employee_id, week_start)
        if existing is not None:
            return existing

        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            raise TimesheetError("EMPLOYEE_NOT_FOUND", f"Employee {employee_id} not found")
        if not employee.is_active:
            raise TimesheetError("EMPLOYEE_ARCHIVED", f"Employee {employee_id} is archived")

        timesheet = Timesheet(
            employee_id=employee_id,
            week_start_date=week_start,
            status=TimesheetStatus.OPEN.value,
            submitted_at=None,
            reviewed_by=None,
            reviewed_at=None,
            supervisor_notes=None,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(timesheet)
        except IntegrityError:
            existing = await self._find_timesheet(employee_id, week_start)
            if existing is None:
                raise
            logger.warning(
                "Timesheet for employee %s week %s was created concurrently; using existing",
                employee_id,
                week_start.isoformat(),
            )
            return existing

        return timesheet

    async def add_entry(
        self,
        timesheet_id: UUID,
        work_date: date,
        task_code_id: UUID,
        start_time: time,
        end_time: time,
        is_school_day: bool | None = None,
        school_day_override_note: str | None = None,
        supervisor_present_name: str | None = None,
        meal_break_confirmed: bool | None = None,
        notes: str | None = None,
    ) -> TimesheetEntry:
        """Record a shift on an open timesheet.

        When ``is_school_day`` is not given it defaults from the calendar
        (weekday within the default school year).

        Raises:
            TimesheetError: TIMESHEET_NOT_FOUND, TIMESHEET_NOT_EDITABLE,
                DATE_OUTSIDE_WEEK, INVALID_TIME_RANGE or TASK_CODE_NOT_FOUND
        """
        timesheet = await self._get_editable_timesheet(timesheet_id)

        week_end = week_end_for(timesheet.week_start_date)
        if not timesheet.week_start_date <= work_date <= week_end:
            raise TimesheetError(
                "DATE_OUTSIDE_WEEK",
                f"Work date {work_date.isoformat()} is outside the week "
                f"{timesheet.week_start_date.isoformat()} to {week_end.isoformat()}",
                timesheet_id,
            )

        try:
            hours = calculate_hours(start_time, end_time)
        except ValueError as exc:
            raise TimesheetError("INVALID_TIME_RANGE", str(exc), timesheet_id) from exc

        task_code = await self.session.get(TaskCode, task_code_id)
        if task_code is None or not task_code.is_active:
            raise TimesheetError(
                "TASK_CODE_NOT_FOUND", f"Task code {task_code_id} not found", timesheet_id
            )

        if is_school_day is None:
            is_school_day = is_default_school_day(work_date)

        entry = TimesheetEntry(
            timesheet_id=timesheet_id,
            work_date=work_date,
            task_code_id=task_code_id,
            start_time=start_time,
            end_time=end_time,
            hours=hours,
            is_school_day=is_school_day,
            school_day_override_note=school_day_override_note,
            supervisor_present_name=supervisor_present_name,
            meal_break_confirmed=meal_break_confirmed,
            notes=notes,
        )
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def remove_entry(self, timesheet_id: UUID, entry_id: UUID) -> None:
        """Delete an entry from an open timesheet.

        Raises:
            TimesheetError: TIMESHEET_NOT_FOUND, TIMESHEET_NOT_EDITABLE or ENTRY_NOT_FOUND
        """
        await self._get_editable_timesheet(timesheet_id)

        entry = await self.session.get(TimesheetEntry, entry_id)
        if entry is None or entry.timesheet_id != timesheet_id:
            raise TimesheetError("ENTRY_NOT_FOUND", f"Entry {entry_id} not found", timesheet_id)

        await self.session.delete(entry)
        await self.session.flush()

    # ------------------------------------------------------------------
    # Compliance and review
    # ------------------------------------------------------------------

    async def preview_compliance(
        self,
        timesheet_id: UUID,
        check_date: date | None = None,
    ) -> ComplianceReport:
        """Evaluate the rule set without recording results or changing state."""
        timesheet = await self.get_timesheet(timesheet_id)
        return self.compliance.evaluate(timesheet, check_date)

    async def submit_timesheet(
        self,
        timesheet_id: UUID,
        check_date: date | None = None,
    ) -> SubmissionResult:
        """Run compliance checks and submit if no rule fails.

        Results are logged either way. With any failure the timesheet stays
        open and the failures are returned for correction.

        Raises:
            TimesheetError: TIMESHEET_NOT_FOUND or TIMESHEET_NOT_EDITABLE
        """
        timesheet = await self.get_timesheet(timesheet_id)
        if not TimesheetStateMachine.can_modify_entries(timesheet.status):
            raise TimesheetError(
                "TIMESHEET_NOT_EDITABLE",
                f"Timesheet {timesheet_id} is '{timesheet.status}' and cannot be submitted",
                timesheet_id,
            )

        if check_date is None:
            check_date = get_settings().today()

        report = self.compliance.evaluate(timesheet, check_date)
        check_run_id = await self.compliance.record_results(timesheet, report, check_date)

        if report.passed:
            self._transition(timesheet, TimesheetStatus.SUBMITTED)
            timesheet.submitted_at = utcnow()
            await self.session.flush()
        else:
            logger.info(
                "Timesheet %s not submitted: %d rule(s) failed (%s)",
                timesheet_id,
                len(report.failures),
                ", ".join(r.rule_id for r in report.failures),
            )

        return SubmissionResult(timesheet=timesheet, report=report, check_run_id=check_run_id)

    async def approve_timesheet(
        self,
        timesheet_id: UUID,
        supervisor_id: UUID,
        notes: str | None = None,
    ) -> ApprovalResult:
        """Approve a submitted timesheet and calculate its payroll.

        A payroll precondition failure does not undo the approval; it is
        reported in ``payroll_error`` for manual recalculation.

        Raises:
            TimesheetError: TIMESHEET_NOT_FOUND, TIMESHEET_NOT_SUBMITTED or NOT_SUPERVISOR
        """
        await self._get_supervisor(supervisor_id)
        timesheet = await self._get_submitted_timesheet(timesheet_id)

        self._transition(timesheet, TimesheetStatus.APPROVED)
        timesheet.reviewed_by = supervisor_id
        timesheet.reviewed_at = utcnow()
        timesheet.supervisor_notes = notes
        await self.session.flush()

        result = ApprovalResult(timesheet=timesheet)
        payroll = PayrollService(self.session)
        try:
            async with self.session.begin_nested():
                result.payroll = await payroll.calculate_payroll(timesheet_id)
        except LaborEngineError as exc:
            result.payroll_error = PAYROLL_PENDING_MESSAGE
            result.payroll_error_code = exc.code
            await self.session.refresh(timesheet)
            logger.warning(
                "Timesheet %s approved but payroll failed (%s): %s",
                timesheet_id,
                exc.code,
                exc,
            )
        return result

    async def reject_timesheet(
        self,
        timesheet_id: UUID,
        supervisor_id: UUID,
        notes: str | None,
    ) -> Timesheet:
        """Return a submitted timesheet to the employee for correction.

        Raises:
            TimesheetError: NOTES_REQUIRED, NOTES_TOO_SHORT, TIMESHEET_NOT_FOUND,
                TIMESHEET_NOT_SUBMITTED or NOT_SUPERVISOR
        """
        cleaned = (notes or "").strip()
        if not cleaned:
            raise TimesheetError("NOTES_REQUIRED", "Rejection notes are required", timesheet_id)
        if len(cleaned) < MIN_REJECTION_NOTES_LENGTH:
            raise TimesheetError(
                "NOTES_TOO_SHORT",
                f"Rejection notes must be at least {MIN_REJECTION_NOTES_LENGTH} characters",
                timesheet_id,
            )

        await self._get_supervisor(supervisor_id)
        timesheet = await self._get_submitted_timesheet(timesheet_id)

        self._transition(timesheet, TimesheetStatus.OPEN)
        timesheet.reviewed_by = supervisor_id
        timesheet.reviewed_at = utcnow()
        timesheet.supervisor_notes = cleaned
        timesheet.submitted_at = None
        await self.session.flush()
        return timesheet

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _transition(self, timesheet: Timesheet, to_status: TimesheetStatus) -> None:
        from_status = timesheet.status
        TimesheetStateMachine.validate_transition(from_status, to_status)
        timesheet.status = to_status.value
        logger.info(
            "Timesheet %s: %s -> %s", timesheet.timesheet_id, from_status, to_status.value
        )

    async def _find_timesheet(self, employee_id: UUID, week_start: date) -> Timesheet | None:
        result = await self.session.execute(
            select(Timesheet).where(
                Timesheet.employee_id == employee_id,
                Timesheet.week_start_date == week_start,
            )
        )
        return result.scalar_one_or_none()

    async def _get_editable_timesheet(self, timesheet_id: UUID) -> Timesheet:
        timesheet = await self.session.get(Timesheet, timesheet_id)
        if timesheet is None:
            raise TimesheetError(
                "TIMESHEET_NOT_FOUND", f"Timesheet {timesheet_id} not found", timesheet_id
            )
        if not TimesheetStateMachine.can_modify_entries(timesheet.status):
            raise TimesheetError(
                "TIMESHEET_NOT_EDITABLE",
                f"Timesheet {timesheet_id} is '{timesheet.status}' and cannot be edited",
                timesheet_id,
            )
        return timesheet

    async def _get_submitted_timesheet(self, timesheet_id: UUID) -> Timesheet:
        timesheet = await self.session.get(Timesheet, timesheet_id)
        if timesheet is None:
            raise TimesheetError(
                "TIMESHEET_NOT_FOUND", f"Timesheet {timesheet_id} not found", timesheet_id
            )
        if timesheet.status != TimesheetStatus.SUBMITTED.value:
            raise TimesheetError(
                "TIMESHEET_NOT_SUBMITTED",
                f"Timesheet {timesheet_id} is '{timesheet.status}', not submitted",
                timesheet_id,
            )
        return timesheet

    async def _get_supervisor(self, supervisor_id: UUID) -> Employee:
        supervisor = await self.session.get(Employee, supervisor_id)
        if supervisor is None or not supervisor.is_supervisor or not supervisor.is_active:
            raise TimesheetError(
                "NOT_SUPERVISOR", f"Employee {supervisor_id} is not an active supervisor"
            )
        return supervisor
