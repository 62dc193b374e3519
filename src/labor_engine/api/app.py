"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from labor_engine.api.routes import (
    health_router,
    payroll_router,
    task_codes_router,
    timesheets_router,
)
from labor_engine.config import settings
from labor_engine.database import dispose_db, init_db
from labor_engine.errors import LaborEngineError

logger = logging.getLogger(__name__)

# Error code -> HTTP status; anything unlisted is a 400
ERROR_STATUS: dict[str, int] = {
    "TIMESHEET_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "EMPLOYEE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "ENTRY_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "TASK_CODE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "PAYROLL_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "NO_RATE_FOUND": status.HTTP_404_NOT_FOUND,
    "NOT_SUPERVISOR": status.HTTP_403_FORBIDDEN,
    "TIMESHEET_NOT_EDITABLE": status.HTTP_409_CONFLICT,
    "TIMESHEET_NOT_SUBMITTED": status.HTTP_409_CONFLICT,
    "TIMESHEET_NOT_APPROVED": status.HTTP_409_CONFLICT,
    "INVALID_TRANSITION": status.HTTP_409_CONFLICT,
    "EMPLOYEE_ARCHIVED": status.HTTP_409_CONFLICT,
    "CODE_ALREADY_EXISTS": status.HTTP_409_CONFLICT,
    "RATE_DATE_CONFLICT": status.HTTP_409_CONFLICT,
    "CODE_IMMUTABLE": status.HTTP_409_CONFLICT,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    init_db()
    yield
    # Shutdown
    await dispose_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Labor Engine API",
        description="Child labor compliance checks and payroll for work timesheets",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(LaborEngineError)
    async def labor_engine_error_handler(
        request: Request, exc: LaborEngineError
    ) -> JSONResponse:
        """Map typed precondition failures to their HTTP status."""
        return JSONResponse(
            status_code=ERROR_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST),
            content={"detail": exc.message, "code": exc.code},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(timesheets_router, prefix="/api/v1")
    app.include_router(payroll_router, prefix="/api/v1")
    app.include_router(task_codes_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
