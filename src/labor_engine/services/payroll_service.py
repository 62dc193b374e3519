"""Payroll record creation, recalculation and export."""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from labor_engine.calculators import (
    PayableEntry,
    PayrollCalculator,
    PayrollTotals,
    RateResolver,
)
from labor_engine.errors import LaborEngineError
from labor_engine.models import (
    Employee,
    PayrollRecord,
    Timesheet,
    TimesheetEntry,
    format_decimal,
    utcnow,
)
from labor_engine.services.state_machine import TimesheetStateMachine, TimesheetStatus
from labor_engine.utils.age import AgeBand, band_for_date
from labor_engine.utils.time import week_end_for

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "Employee Name",
    "Employee ID",
    "Pay Period Start",
    "Pay Period End",
    "Agricultural Hours",
    "Agricultural Earnings",
    "Non-Agricultural Hours",
    "Non-Agricultural Earnings",
    "Overtime Hours",
    "Overtime Earnings",
    "Total Earnings",
    "Calculated At",
]


class PayrollError(LaborEngineError):
    """Raised when a payroll operation's preconditions are not met."""

    def __init__(self, code: str, message: str, timesheet_id: UUID | None = None):
        self.timesheet_id = timesheet_id
        super().__init__(message, code=code)


@dataclass
class RecalculationSummary:
    """Outcome of recalculating every approved timesheet."""

    succeeded: list[UUID] = field(default_factory=list)
    failed: dict[UUID, str] = field(default_factory=dict)


class PayrollService:
    """Creates and maintains one payroll record per approved timesheet.

    Key invariants:
    1. One payroll_record per timesheet (enforced by unique constraint)
    2. Calculation is idempotent: an existing record is returned unchanged
    3. A concurrent insert that loses the race re-fetches the winner's record
    4. Only approved timesheets are ever calculated or recalculated
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.calculator = PayrollCalculator()

    async def get_payroll_record(self, timesheet_id: UUID) -> PayrollRecord | None:
        result = await self.session.execute(
            select(PayrollRecord).where(PayrollRecord.timesheet_id == timesheet_id)
        )
        return result.scalar_one_or_none()

    async def calculate_payroll(self, timesheet_id: UUID) -> PayrollRecord:
        """Calculate and store payroll for an approved timesheet.

        Returns the existing record if one was already calculated.

        Raises:
            PayrollError: TIMESHEET_NOT_FOUND or TIMESHEET_NOT_APPROVED
            RateNotFoundError: If any entry has no rate in force on its work date
        """
        timesheet = await self._load_approved_timesheet(timesheet_id)

        existing = await self.get_payroll_record(timesheet_id)
        if existing is not None:
            return existing

        totals = await self.compute_totals(timesheet.entries)
        record = self._build_record(timesheet, totals)
        return await self._insert_or_fetch(record)

    async def recalculate_payroll(self, timesheet_id: UUID) -> PayrollRecord:
        """Discard the stored record and calculate again from current rates.

        Raises:
            PayrollError: TIMESHEET_NOT_FOUND or TIMESHEET_NOT_APPROVED
            RateNotFoundError: If any entry has no rate in force on its work date
        """
        await self._load_approved_timesheet(timesheet_id)

        existing = await self.get_payroll_record(timesheet_id)
        if existing is not None:
            await self.session.delete(existing)
            await self.session.flush()
            logger.info("Deleted payroll record for timesheet %s for recalculation", timesheet_id)

        return await self.calculate_payroll(timesheet_id)

    async def recalculate_all_approved(self) -> RecalculationSummary:
        """Recalculate every approved timesheet, collecting per-week failures.

        Each timesheet runs in its own savepoint so a failure leaves that
        week's previous record in place.
        """
        result = await self.session.execute(
            select(Timesheet.timesheet_id)
            .where(Timesheet.status == TimesheetStatus.APPROVED.value)
            .order_by(Timesheet.week_start_date)
        )
        summary = RecalculationSummary()

        for timesheet_id in result.scalars().all():
            try:
                async with self.session.begin_nested():
                    await self.recalculate_payroll(timesheet_id)
            except LaborEngineError as exc:
                summary.failed[timesheet_id] = exc.code
                logger.warning(
                    "Payroll recalculation failed for timesheet %s: %s", timesheet_id, exc
                )
            else:
                summary.succeeded.append(timesheet_id)

        logger.info(
            "Recalculated payroll: %d succeeded, %d failed",
            len(summary.succeeded),
            len(summary.failed),
        )
        return summary

    async def compute_totals(self, entries: Sequence[TimesheetEntry]) -> PayrollTotals:
        """Resolve each entry's rate and run the payroll arithmetic."""
        resolver = RateResolver(self.session)
        await resolver.preload([entry.task_code_id for entry in entries])

        payable = [
            PayableEntry(
                entry_id=entry.timesheet_entry_id,
                work_date=entry.work_date,
                hours=entry.hours,
                rate=resolver.cached_rate(entry.task_code_id, entry.work_date),
                is_agricultural=entry.task_code.is_agricultural,
                task_code=entry.task_code.code,
            )
            for entry in entries
        ]
        return self.calculator.calculate(payable)

    async def list_payroll_records(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
        employee_id: UUID | None = None,
        age_band: AgeBand | None = None,
    ) -> list[PayrollRecord]:
        """Records whose pay period overlaps the range, newest period first.

        The age band filter uses the employee's band on the period start.

        Raises:
            PayrollError: INVALID_DATE_RANGE if start_date is after end_date
        """
        if start_date and end_date and start_date > end_date:
            raise PayrollError(
                "INVALID_DATE_RANGE",
                f"Start date {start_date.isoformat()} is after end date {end_date.isoformat()}",
            )

        query = select(PayrollRecord).options(selectinload(PayrollRecord.employee))
        if start_date is not None:
            query = query.where(PayrollRecord.period_end >= start_date)
        if end_date is not None:
            query = query.where(PayrollRecord.period_start <= end_date)
        if employee_id is not None:
            query = query.where(PayrollRecord.employee_id == employee_id)

        result = await self.session.execute(
            query.order_by(PayrollRecord.period_start.desc(), PayrollRecord.calculated_at)
        )
        records = list(result.scalars().all())

        if age_band is not None:
            records = [
                r
                for r in records
                if band_for_date(r.employee.date_of_birth, r.period_start) is age_band
            ]
        return records

    async def mark_exported(self, payroll_record_ids: Iterable[UUID]) -> list[PayrollRecord]:
        """Stamp records with the export time.

        Raises:
            PayrollError: PAYROLL_NOT_FOUND if any ID does not exist
        """
        ids = list(payroll_record_ids)
        result = await self.session.execute(
            select(PayrollRecord).where(PayrollRecord.payroll_record_id.in_(ids))
        )
        records = list(result.scalars().all())
        missing = set(ids) - {r.payroll_record_id for r in records}
        if missing:
            raise PayrollError(
                "PAYROLL_NOT_FOUND",
                f"Payroll records not found: {', '.join(sorted(str(m) for m in missing))}",
            )

        exported_at = utcnow()
        for record in records:
            record.exported_at = exported_at
        await self.session.flush()
        logger.info("Marked %d payroll records exported", len(records))
        return records

    def export_payroll_csv(self, records: Iterable[PayrollRecord]) -> str:
        """Render records as CSV with two-place decimal amounts.

        Records must have ``employee`` loaded (``list_payroll_records`` does).
        """
        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\r\n")
        writer.writerow(CSV_HEADERS)

        for record in records:
            writer.writerow([
                record.employee.name,
                str(record.employee_id),
                record.period_start.strftime("%m/%d/%Y"),
                record.period_end.strftime("%m/%d/%Y"),
                *record.amounts().values(),
                record.calculated_at.isoformat(),
            ])

        return output.getvalue()

    async def _load_approved_timesheet(self, timesheet_id: UUID) -> Timesheet:
        result = await self.session.execute(
            select(Timesheet)
            .where(Timesheet.timesheet_id == timesheet_id)
            .options(selectinload(Timesheet.entries).selectinload(TimesheetEntry.task_code))
            .execution_options(populate_existing=True)
        )
        timesheet = result.scalar_one_or_none()
        if timesheet is None:
            raise PayrollError(
                "TIMESHEET_NOT_FOUND", f"Timesheet {timesheet_id} not found", timesheet_id
            )
        if not TimesheetStateMachine.can_calculate_payroll(timesheet.status):
            raise PayrollError(
                "TIMESHEET_NOT_APPROVED",
                f"Timesheet {timesheet_id} is '{timesheet.status}', not approved",
                timesheet_id,
            )
        return timesheet

    def _build_record(self, timesheet: Timesheet, totals: PayrollTotals) -> PayrollRecord:
        return PayrollRecord(
            timesheet_id=timesheet.timesheet_id,
            employee_id=timesheet.employee_id,
            period_start=timesheet.week_start_date,
            period_end=week_end_for(timesheet.week_start_date),
            **totals.rounded(),
            exported_at=None,
        )

    async def _insert_or_fetch(self, record: PayrollRecord) -> PayrollRecord:
        """Insert in a savepoint; on a unique violation return the stored record."""
        try:
            async with self.session.begin_nested():
                self.session.add(record)
        except IntegrityError:
            existing = await self.get_payroll_record(record.timesheet_id)
            if existing is None:
                raise
            logger.warning(
                "Payroll record for timesheet %s was created concurrently; using existing",
                record.timesheet_id,
            )
            return existing

        logger.info(
            "Created payroll record %s for timesheet %s: total %s",
            record.payroll_record_id,
            record.timesheet_id,
            format_decimal(record.total_earnings),
        )
        return record
