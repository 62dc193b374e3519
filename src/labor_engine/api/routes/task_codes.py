"""Task code and rate API endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from labor_engine.api.dependencies import DbSession
from labor_engine.api.schemas import (
    EffectiveRateResponse,
    ErrorResponse,
    RateCreate,
    RateResponse,
    TaskCodeCreate,
    TaskCodeResponse,
)
from labor_engine.models import format_decimal
from labor_engine.services import NewTaskCode, TaskCodeService

router = APIRouter(prefix="/task-codes", tags=["task-codes"])


@router.post(
    "",
    response_model=TaskCodeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_task_code(db: DbSession, payload: TaskCodeCreate) -> TaskCodeResponse:
    """Create a task code with its initial rate."""
    task_code = await TaskCodeService(db).create_task_code(NewTaskCode(**payload.model_dump()))
    return TaskCodeResponse.model_validate(task_code)


@router.get(
    "/{task_code_id}",
    response_model=TaskCodeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_task_code(
    db: DbSession,
    task_code_id: Annotated[UUID, Path()],
) -> TaskCodeResponse:
    """Get a task code by ID."""
    task_code = await TaskCodeService(db).get_task_code(task_code_id)
    return TaskCodeResponse.model_validate(task_code)


@router.post(
    "/{task_code_id}/rates",
    response_model=RateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def add_rate(
    db: DbSession,
    task_code_id: Annotated[UUID, Path()],
    payload: RateCreate,
) -> RateResponse:
    """Append a rate effective today or later."""
    rate = await TaskCodeService(db).add_rate(
        task_code_id,
        payload.hourly_rate,
        payload.effective_date,
        payload.justification_notes,
    )
    return RateResponse.model_validate(rate)


@router.get(
    "/{task_code_id}/rates",
    response_model=list[RateResponse],
    responses={404: {"model": ErrorResponse}},
)
async def get_rate_history(
    db: DbSession,
    task_code_id: Annotated[UUID, Path()],
) -> list[RateResponse]:
    """Full rate history, newest first."""
    rates = await TaskCodeService(db).get_rate_history(task_code_id)
    return [RateResponse.model_validate(r) for r in rates]


@router.get(
    "/{task_code_id}/effective-rate",
    response_model=EffectiveRateResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_effective_rate(
    db: DbSession,
    task_code_id: Annotated[UUID, Path()],
    as_of: Annotated[date, Query(alias="date")],
) -> EffectiveRateResponse:
    """Rate in force for the task code on a date."""
    rate = await TaskCodeService(db).effective_rate(task_code_id, as_of)
    return EffectiveRateResponse(
        task_code_id=task_code_id,
        as_of_date=as_of,
        hourly_rate=format_decimal(rate),
    )
