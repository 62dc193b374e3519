"""Payroll API endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, Response

from labor_engine.api.dependencies import DbSession
from labor_engine.api.schemas import (
    ErrorResponse,
    MarkExportedRequest,
    PayrollListResponse,
    PayrollRecordResponse,
    RecalculationResponse,
)
from labor_engine.services import PayrollError, PayrollService
from labor_engine.utils.age import AgeBand

router = APIRouter(tags=["payroll"])


@router.post(
    "/timesheets/{timesheet_id}/payroll",
    response_model=PayrollRecordResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def calculate_payroll(
    db: DbSession,
    timesheet_id: Annotated[UUID, Path()],
) -> PayrollRecordResponse:
    """Calculate payroll for an approved timesheet. Idempotent."""
    record = await PayrollService(db).calculate_payroll(timesheet_id)
    return PayrollRecordResponse.model_validate(record)


@router.post(
    "/timesheets/{timesheet_id}/payroll/recalculate",
    response_model=PayrollRecordResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def recalculate_payroll(
    db: DbSession,
    timesheet_id: Annotated[UUID, Path()],
) -> PayrollRecordResponse:
    """Discard and recalculate payroll for an approved timesheet."""
    record = await PayrollService(db).recalculate_payroll(timesheet_id)
    return PayrollRecordResponse.model_validate(record)


@router.get(
    "/timesheets/{timesheet_id}/payroll",
    response_model=PayrollRecordResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_payroll(
    db: DbSession,
    timesheet_id: Annotated[UUID, Path()],
) -> PayrollRecordResponse:
    """Get the payroll record for a timesheet."""
    record = await PayrollService(db).get_payroll_record(timesheet_id)
    if record is None:
        raise PayrollError(
            "PAYROLL_NOT_FOUND", f"No payroll record for timesheet {timesheet_id}", timesheet_id
        )
    return PayrollRecordResponse.model_validate(record)


@router.get(
    "/payroll",
    response_model=PayrollListResponse,
    responses={400: {"model": ErrorResponse}},
)
async def list_payroll(
    db: DbSession,
    start_date: Annotated[date | None, Query()] = None,
    end_date: Annotated[date | None, Query()] = None,
    employee_id: Annotated[UUID | None, Query()] = None,
    age_band: Annotated[AgeBand | None, Query()] = None,
) -> PayrollListResponse:
    """Payroll records whose period overlaps the date range."""
    records = await PayrollService(db).list_payroll_records(
        start_date, end_date, employee_id, age_band
    )
    return PayrollListResponse(
        items=[PayrollRecordResponse.model_validate(r) for r in records],
        total=len(records),
    )


@router.get("/payroll/export.csv", responses={400: {"model": ErrorResponse}})
async def export_payroll(
    db: DbSession,
    start_date: Annotated[date, Query()],
    end_date: Annotated[date, Query()],
    employee_id: Annotated[UUID | None, Query()] = None,
    age_band: Annotated[AgeBand | None, Query()] = None,
) -> Response:
    """Export payroll records as CSV and stamp them exported."""
    service = PayrollService(db)
    records = await service.list_payroll_records(start_date, end_date, employee_id, age_band)
    content = service.export_payroll_csv(records)
    if records:
        await service.mark_exported([r.payroll_record_id for r in records])

    filename = (
        f"payroll-export-{start_date:%Y%m%d}-to-{end_date:%Y%m%d}.csv"
    )
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post(
    "/payroll/mark-exported",
    response_model=PayrollListResponse,
    responses={404: {"model": ErrorResponse}},
)
async def mark_exported(db: DbSession, payload: MarkExportedRequest) -> PayrollListResponse:
    """Stamp payroll records as exported."""
    records = await PayrollService(db).mark_exported(payload.payroll_record_ids)
    return PayrollListResponse(
        items=[PayrollRecordResponse.model_validate(r) for r in records],
        total=len(records),
    )


@router.post("/payroll/recalculate", response_model=RecalculationResponse)
async def recalculate_all(db: DbSession) -> RecalculationResponse:
    """Recalculate payroll for every approved timesheet."""
    summary = await PayrollService(db).recalculate_all_approved()
    return RecalculationResponse(succeeded=summary.succeeded, failed=summary.failed)
