"""Timesheet API endpoints: entries, compliance, submission and review."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from labor_engine.api.dependencies import DbSession
from labor_engine.api.schemas import (
    ApprovalResponse,
    ComplianceReportResponse,
    EntryCreate,
    EntryResponse,
    ErrorResponse,
    PayrollRecordResponse,
    ReviewRequest,
    SubmissionResponse,
    SubmitRequest,
    TimesheetCreate,
    TimesheetResponse,
)
from labor_engine.services import TimesheetService

router = APIRouter(prefix="/timesheets", tags=["timesheets"])


@router.post(
    "",
    response_model=TimesheetResponse,
    status_code=status.HTTP_200_OK,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def open_timesheet(db: DbSession, payload: TimesheetCreate) -> TimesheetResponse:
    """Get or create the employee's timesheet for a Sunday-aligned week."""
    service = TimesheetService(db)
    timesheet = await service.get_or_create_timesheet(
        payload.employee_id, payload.week_start_date
    )
    return TimesheetResponse.model_validate(timesheet)


@router.get(
    "/{timesheet_id}",
    response_model=TimesheetResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_timesheet(
    db: DbSession,
    timesheet_id: Annotated[UUID, Path()],
) -> TimesheetResponse:
    """Get a timesheet by ID."""
    timesheet = await TimesheetService(db).get_timesheet(timesheet_id)
    return TimesheetResponse.model_validate(timesheet)


@router.post(
    "/{timesheet_id}/entries",
    response_model=EntryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def add_entry(
    db: DbSession,
    timesheet_id: Annotated[UUID, Path()],
    payload: EntryCreate,
) -> EntryResponse:
    """Record a shift on an open timesheet."""
    entry = await TimesheetService(db).add_entry(timesheet_id, **payload.model_dump())
    return EntryResponse.model_validate(entry)


@router.delete(
    "/{timesheet_id}/entries/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def remove_entry(
    db: DbSession,
    timesheet_id: Annotated[UUID, Path()],
    entry_id: Annotated[UUID, Path()],
) -> None:
    """Remove a shift from an open timesheet."""
    await TimesheetService(db).remove_entry(timesheet_id, entry_id)


@router.get(
    "/{timesheet_id}/compliance",
    response_model=ComplianceReportResponse,
    responses={404: {"model": ErrorResponse}},
)
async def preview_compliance(
    db: DbSession,
    timesheet_id: Annotated[UUID, Path()],
    check_date: Annotated[date | None, Query()] = None,
) -> ComplianceReportResponse:
    """Evaluate compliance without submitting. Nothing is recorded."""
    report = await TimesheetService(db).preview_compliance(timesheet_id, check_date)
    return ComplianceReportResponse(**report.to_dict())


@router.post(
    "/{timesheet_id}/submit",
    response_model=SubmissionResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def submit_timesheet(
    db: DbSession,
    timesheet_id: Annotated[UUID, Path()],
    payload: SubmitRequest | None = None,
) -> SubmissionResponse:
    """Submit a timesheet; stays open when any compliance rule fails."""
    check_date = payload.check_date if payload else None
    result = await TimesheetService(db).submit_timesheet(timesheet_id, check_date)
    return SubmissionResponse(
        submitted=result.submitted,
        timesheet=TimesheetResponse.model_validate(result.timesheet),
        check_run_id=result.check_run_id,
        compliance=ComplianceReportResponse(**result.report.to_dict()),
    )


@router.post(
    "/{timesheet_id}/approve",
    response_model=ApprovalResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def approve_timesheet(
    db: DbSession,
    timesheet_id: Annotated[UUID, Path()],
    payload: ReviewRequest,
) -> ApprovalResponse:
    """Approve a submitted timesheet and calculate its payroll."""
    result = await TimesheetService(db).approve_timesheet(
        timesheet_id, payload.supervisor_id, payload.notes
    )
    return ApprovalResponse(
        timesheet=TimesheetResponse.model_validate(result.timesheet),
        payroll=(
            PayrollRecordResponse.model_validate(result.payroll) if result.payroll else None
        ),
        payroll_error=result.payroll_error,
        payroll_error_code=result.payroll_error_code,
    )


@router.post(
    "/{timesheet_id}/reject",
    response_model=TimesheetResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def reject_timesheet(
    db: DbSession,
    timesheet_id: Annotated[UUID, Path()],
    payload: ReviewRequest,
) -> TimesheetResponse:
    """Return a submitted timesheet to the employee with notes."""
    timesheet = await TimesheetService(db).reject_timesheet(
        timesheet_id, payload.supervisor_id, payload.notes
    )
    return TimesheetResponse.model_validate(timesheet)
