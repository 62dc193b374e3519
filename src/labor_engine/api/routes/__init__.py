"""API routes."""

from labor_engine.api.routes.health import router as health_router
from labor_engine.api.routes.payroll import router as payroll_router
from labor_engine.api.routes.task_codes import router as task_codes_router
from labor_engine.api.routes.timesheets import router as timesheets_router

__all__ = ["health_router", "payroll_router", "task_codes_router", "timesheets_router"]
