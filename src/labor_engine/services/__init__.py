"""Business services."""

from labor_engine.services.compliance_service import ComplianceService
from labor_engine.services.payroll_service import (
    PayrollError,
    PayrollService,
    RecalculationSummary,
)
from labor_engine.services.state_machine import (
    InvalidTransitionError,
    TimesheetStateMachine,
    TimesheetStatus,
)
from labor_engine.services.task_code_service import NewTaskCode, TaskCodeError, TaskCodeService
from labor_engine.services.timesheet_service import (
    ApprovalResult,
    SubmissionResult,
    TimesheetError,
    TimesheetService,
)

__all__ = [
    "ApprovalResult",
    "ComplianceService",
    "InvalidTransitionError",
    "NewTaskCode",
    "PayrollError",
    "PayrollService",
    "RecalculationSummary",
    "SubmissionResult",
    "TaskCodeError",
    "TaskCodeService",
    "TimesheetError",
    "TimesheetService",
    "TimesheetStateMachine",
    "TimesheetStatus",
]
