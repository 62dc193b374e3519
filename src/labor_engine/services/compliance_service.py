"""Compliance checks for stored timesheets."""

from __future__ import annotations

import logging
from datetime import date
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from labor_engine.compliance import (
    ComplianceContext,
    ComplianceEngine,
    ComplianceReport,
    DocumentSnapshot,
    DocumentType,
    EmployeeSnapshot,
    EntrySnapshot,
    SupervisorRequirement,
    TaskSnapshot,
    build_context,
)
from labor_engine.config import get_settings
from labor_engine.models import (
    ComplianceCheckLog,
    ComplianceDocument,
    Employee,
    TaskCode,
    Timesheet,
    TimesheetEntry,
)
from labor_engine.utils.age import age_on_date

logger = logging.getLogger(__name__)


def employee_snapshot(employee: Employee) -> EmployeeSnapshot:
    return EmployeeSnapshot(
        employee_id=employee.employee_id,
        name=employee.name,
        date_of_birth=employee.date_of_birth,
        is_supervisor=employee.is_supervisor,
        status=employee.status,
    )


def task_snapshot(task_code: TaskCode) -> TaskSnapshot:
    return TaskSnapshot(
        task_code_id=task_code.task_code_id,
        code=task_code.code,
        name=task_code.name,
        is_agricultural=task_code.is_agricultural,
        is_hazardous=task_code.is_hazardous,
        supervisor_required=SupervisorRequirement(task_code.supervisor_required),
        solo_cash_handling=task_code.solo_cash_handling,
        driving_required=task_code.driving_required,
        power_machinery=task_code.power_machinery,
        min_age_allowed=task_code.min_age_allowed,
    )


def entry_snapshot(entry: TimesheetEntry) -> EntrySnapshot:
    return EntrySnapshot(
        entry_id=str(entry.timesheet_entry_id),
        work_date=entry.work_date,
        start_time=entry.start_time,
        end_time=entry.end_time,
        hours=entry.hours,
        is_school_day=entry.is_school_day,
        task=task_snapshot(entry.task_code) if entry.task_code is not None else None,
        school_day_override_note=entry.school_day_override_note,
        supervisor_present_name=entry.supervisor_present_name,
        meal_break_confirmed=entry.meal_break_confirmed,
    )


def document_snapshot(document: ComplianceDocument) -> DocumentSnapshot:
    return DocumentSnapshot(
        document_id=str(document.compliance_document_id),
        document_type=DocumentType(document.document_type),
        uploaded_at=document.uploaded_at,
        expires_at=document.expires_at,
        invalidated_at=document.invalidated_at,
    )


class ComplianceService:
    """Builds compliance contexts from stored data and records outcomes.

    The rule engine itself is pure; this service owns the loading and the
    check log writes around it.
    """

    def __init__(self, session: AsyncSession, engine: ComplianceEngine | None = None):
        self.session = session
        self.engine = engine or ComplianceEngine()

    async def load_timesheet(self, timesheet_id: UUID) -> Timesheet | None:
        """Load a timesheet with entries, task codes, employee and documents."""
        result = await self.session.execute(
            select(Timesheet)
            .where(Timesheet.timesheet_id == timesheet_id)
            .options(
                selectinload(Timesheet.entries).selectinload(TimesheetEntry.task_code),
                selectinload(Timesheet.employee).selectinload(Employee.documents),
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    def build_context(self, timesheet: Timesheet, check_date: date | None = None) -> ComplianceContext:
        """Snapshot a loaded timesheet into a compliance context."""
        if check_date is None:
            check_date = get_settings().today()
        employee = timesheet.employee
        return build_context(
            employee=employee_snapshot(employee),
            week_start=timesheet.week_start_date,
            entries=[entry_snapshot(e) for e in timesheet.entries],
            documents=[document_snapshot(d) for d in employee.documents],
            check_date=check_date,
        )

    def evaluate(self, timesheet: Timesheet, check_date: date | None = None) -> ComplianceReport:
        """Run the rule engine against a loaded timesheet."""
        return self.engine.check(self.build_context(timesheet, check_date))

    async def record_results(
        self,
        timesheet: Timesheet,
        report: ComplianceReport,
        check_date: date,
    ) -> UUID:
        """Persist one log row per evaluated rule; returns the check run ID."""
        check_run_id = uuid4()
        age = age_on_date(timesheet.employee.date_of_birth, check_date)
        for result in report.results:
            self.session.add(
                ComplianceCheckLog(
                    timesheet_id=timesheet.timesheet_id,
                    check_run_id=check_run_id,
                    rule_id=result.rule_id,
                    result=result.result.value,
                    details=result.to_dict(),
                    employee_age_on_date=age,
                )
            )
        await self.session.flush()
        logger.info(
            "Recorded %d compliance results for timesheet %s (run %s)",
            len(report.results),
            timesheet.timesheet_id,
            check_run_id,
        )
        return check_run_id

    async def get_check_logs(
        self,
        timesheet_id: UUID,
        check_run_id: UUID | None = None,
    ) -> list[ComplianceCheckLog]:
        """Check logs for a timesheet, optionally limited to one run."""
        query = select(ComplianceCheckLog).where(ComplianceCheckLog.timesheet_id == timesheet_id)
        if check_run_id is not None:
            query = query.where(ComplianceCheckLog.check_run_id == check_run_id)
        result = await self.session.execute(
            query.order_by(ComplianceCheckLog.checked_at, ComplianceCheckLog.rule_id)
        )
        return list(result.scalars().all())
