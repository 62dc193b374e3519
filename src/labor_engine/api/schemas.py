"""Pydantic schemas for API request/response models."""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from labor_engine.compliance import SupervisorRequirement
from labor_engine.models import format_decimal


class ErrorResponse(BaseModel):
    """Error body for typed failures."""

    detail: str
    code: str


# ============================================================================
# Timesheet schemas
# ============================================================================


class TimesheetCreate(BaseModel):
    """Schema for opening an employee's week."""

    employee_id: UUID
    week_start_date: date


class EntryCreate(BaseModel):
    """Schema for recording a shift."""

    work_date: date
    task_code_id: UUID
    start_time: time
    end_time: time
    is_school_day: bool | None = None
    school_day_override_note: str | None = None
    supervisor_present_name: str | None = None
    meal_break_confirmed: bool | None = None
    notes: str | None = None


class EntryResponse(BaseModel):
    """Schema for entry response."""

    model_config = ConfigDict(from_attributes=True)

    timesheet_entry_id: UUID
    timesheet_id: UUID
    work_date: date
    task_code_id: UUID
    start_time: time
    end_time: time
    hours: Decimal
    is_school_day: bool
    school_day_override_note: str | None = None
    supervisor_present_name: str | None = None
    meal_break_confirmed: bool | None = None
    notes: str | None = None

    @field_serializer("hours")
    def serialize_hours(self, value: Decimal) -> str:
        return format_decimal(value)


class TimesheetResponse(BaseModel):
    """Schema for timesheet response."""

    model_config = ConfigDict(from_attributes=True)

    timesheet_id: UUID
    employee_id: UUID
    week_start_date: date
    status: str
    submitted_at: datetime | None = None
    reviewed_by: UUID | None = None
    reviewed_at: datetime | None = None
    supervisor_notes: str | None = None


class SubmitRequest(BaseModel):
    """Optional check date override (defaults to today)."""

    check_date: date | None = None


class ReviewRequest(BaseModel):
    """Supervisor review of a submitted timesheet."""

    supervisor_id: UUID
    notes: str | None = None


class ComplianceReportResponse(BaseModel):
    """Rule results for a week."""

    passed: bool
    summary: dict[str, int]
    results: list[dict[str, Any]]
    violations: list[dict[str, Any]]


class SubmissionResponse(BaseModel):
    """Outcome of a submission attempt."""

    submitted: bool
    timesheet: TimesheetResponse
    check_run_id: UUID
    compliance: ComplianceReportResponse


# ============================================================================
# Payroll schemas
# ============================================================================


class PayrollRecordResponse(BaseModel):
    """Payroll record; hours and money are two-place decimal strings."""

    model_config = ConfigDict(from_attributes=True)

    payroll_record_id: UUID
    timesheet_id: UUID
    employee_id: UUID
    period_start: date
    period_end: date
    agricultural_hours: Decimal
    agricultural_earnings: Decimal
    non_agricultural_hours: Decimal
    non_agricultural_earnings: Decimal
    overtime_hours: Decimal
    overtime_earnings: Decimal
    total_earnings: Decimal
    calculated_at: datetime
    exported_at: datetime | None = None

    @field_serializer(
        "agricultural_hours",
        "agricultural_earnings",
        "non_agricultural_hours",
        "non_agricultural_earnings",
        "overtime_hours",
        "overtime_earnings",
        "total_earnings",
    )
    def serialize_amount(self, value: Decimal) -> str:
        return format_decimal(value)


class ApprovalResponse(BaseModel):
    """Approved timesheet with its payroll outcome."""

    timesheet: TimesheetResponse
    payroll: PayrollRecordResponse | None = None
    payroll_error: str | None = None
    payroll_error_code: str | None = None


class PayrollListResponse(BaseModel):
    """Schema for listing payroll records."""

    items: list[PayrollRecordResponse]
    total: int


class MarkExportedRequest(BaseModel):
    """Records to stamp as exported."""

    payroll_record_ids: list[UUID] = Field(min_length=1)


class RecalculationResponse(BaseModel):
    """Outcome of recalculating all approved weeks."""

    succeeded: list[UUID]
    failed: dict[UUID, str]


# ============================================================================
# Task code schemas
# ============================================================================


class TaskCodeCreate(BaseModel):
    """Schema for creating a task code with its initial rate."""

    code: str = Field(min_length=1, max_length=10)
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    is_agricultural: bool
    is_hazardous: bool = False
    supervisor_required: SupervisorRequirement = SupervisorRequirement.NONE
    solo_cash_handling: bool = False
    driving_required: bool = False
    power_machinery: bool = False
    min_age_allowed: int = 12
    initial_rate: Decimal = Field(gt=0)
    rate_effective_date: date
    justification_notes: str | None = None


class TaskCodeResponse(BaseModel):
    """Schema for task code response."""

    model_config = ConfigDict(from_attributes=True)

    task_code_id: UUID
    code: str
    name: str
    description: str | None = None
    is_agricultural: bool
    is_hazardous: bool
    supervisor_required: str
    solo_cash_handling: bool
    driving_required: bool
    power_machinery: bool
    min_age_allowed: int
    is_active: bool


class RateCreate(BaseModel):
    """Schema for appending a rate."""

    hourly_rate: Decimal = Field(gt=0)
    effective_date: date
    justification_notes: str | None = None


class RateResponse(BaseModel):
    """Schema for rate response."""

    model_config = ConfigDict(from_attributes=True)

    task_code_rate_id: UUID
    task_code_id: UUID
    hourly_rate: Decimal
    effective_date: date
    justification_notes: str | None = None

    @field_serializer("hourly_rate")
    def serialize_rate(self, value: Decimal) -> str:
        return format_decimal(value)


class EffectiveRateResponse(BaseModel):
    """Rate in force for a task code on a date."""

    task_code_id: UUID
    as_of_date: date
    hourly_rate: str
