"""ORM models."""

from labor_engine.models.base import Base, TimestampMixin, UpdatedAtMixin, utcnow
from labor_engine.models.compliance import ComplianceCheckLog
from labor_engine.models.employee import ComplianceDocument, Employee
from labor_engine.models.payroll import PayrollRecord, format_decimal
from labor_engine.models.task_code import TaskCode, TaskCodeRate
from labor_engine.models.timesheet import Timesheet, TimesheetEntry

__all__ = [
    "Base",
    "ComplianceCheckLog",
    "ComplianceDocument",
    "Employee",
    "PayrollRecord",
    "TaskCode",
    "TaskCodeRate",
    "TimestampMixin",
    "Timesheet",
    "TimesheetEntry",
    "UpdatedAtMixin",
    "format_decimal",
    "utcnow",
]
