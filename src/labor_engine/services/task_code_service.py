"""Task code management and append-only rate history."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from labor_engine.calculators import RateResolver
from labor_engine.compliance import SupervisorRequirement
from labor_engine.config import get_settings
from labor_engine.errors import LaborEngineError
from labor_engine.models import TaskCode, TaskCodeRate
from labor_engine.utils.age import MINIMUM_WORKING_AGE

logger = logging.getLogger(__name__)

MAX_MIN_AGE = 18

UPDATABLE_FIELDS = frozenset({
    "name",
    "description",
    "is_agricultural",
    "is_hazardous",
    "supervisor_required",
    "solo_cash_handling",
    "driving_required",
    "power_machinery",
    "min_age_allowed",
    "is_active",
})


class TaskCodeError(LaborEngineError):
    """Raised when a task code operation's preconditions are not met."""

    def __init__(self, code: str, message: str, task_code_id: UUID | None = None):
        self.task_code_id = task_code_id
        super().__init__(message, code=code)


@dataclass
class NewTaskCode:
    """Attributes for creating a task code with its first rate."""

    code: str
    name: str
    is_agricultural: bool
    initial_rate: Decimal
    rate_effective_date: date
    description: str | None = None
    is_hazardous: bool = False
    supervisor_required: SupervisorRequirement = SupervisorRequirement.NONE
    solo_cash_handling: bool = False
    driving_required: bool = False
    power_machinery: bool = False
    min_age_allowed: int = MINIMUM_WORKING_AGE
    justification_notes: str | None = None


class TaskCodeService:
    """Creates task codes and appends to their rate history.

    Key invariants:
    1. ``code`` is unique (upper-cased) and never changes after creation
    2. Rates are append-only; a new rate's effective date is not in the past
    3. At most one rate per task code per effective date
    """

    def __init__(self, session: AsyncSession, today: date | None = None):
        self.session = session
        self._today = today

    @property
    def today(self) -> date:
        if self._today is not None:
            return self._today
        return get_settings().today()

    async def get_task_code(self, task_code_id: UUID) -> TaskCode:
        """Raises TaskCodeError (TASK_CODE_NOT_FOUND) if missing."""
        task_code = await self.session.get(TaskCode, task_code_id)
        if task_code is None:
            raise TaskCodeError(
                "TASK_CODE_NOT_FOUND", f"Task code {task_code_id} not found", task_code_id
            )
        return task_code

    async def get_task_code_by_code(self, code: str) -> TaskCode | None:
        result = await self.session.execute(
            select(TaskCode).where(TaskCode.code == code.strip().upper())
        )
        return result.scalar_one_or_none()

    async def create_task_code(self, data: NewTaskCode) -> TaskCode:
        """Create a task code and its initial rate.

        The initial rate may be effective on any date, so historical codes
        can be entered with their original rate. A code already on file is
        rejected; one inserted concurrently by another writer is returned.

        Raises:
            TaskCodeError: CODE_ALREADY_EXISTS, INVALID_MIN_AGE or INVALID_RATE
        """
        code = data.code.strip().upper()
        self._validate_min_age(data.min_age_allowed)
        self._validate_rate(data.initial_rate)

        existing = await self.get_task_code_by_code(code)
        if existing is not None:
            raise self._already_exists(existing)

        task_code = TaskCode(
            code=code,
            name=data.name,
            description=data.description,
            is_agricultural=data.is_agricultural,
            is_hazardous=data.is_hazardous,
            supervisor_required=SupervisorRequirement(data.supervisor_required).value,
            solo_cash_handling=data.solo_cash_handling,
            driving_required=data.driving_required,
            power_machinery=data.power_machinery,
            min_age_allowed=data.min_age_allowed,
            is_active=True,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(task_code)
                await self.session.flush()
                self.session.add(
                    TaskCodeRate(
                        task_code_id=task_code.task_code_id,
                        hourly_rate=data.initial_rate,
                        effective_date=data.rate_effective_date,
                        justification_notes=data.justification_notes or "Initial rate",
                    )
                )
        except IntegrityError:
            existing = await self.get_task_code_by_code(code)
            if existing is None:
                raise
            logger.warning("Task code %s was created concurrently; using existing", code)
            return existing

        logger.info("Created task code %s (%s)", code, task_code.task_code_id)
        return task_code

    async def update_task_code(self, task_code_id: UUID, changes: dict[str, Any]) -> TaskCode:
        """Apply attribute changes; ``code`` cannot be changed.

        Raises:
            TaskCodeError: TASK_CODE_NOT_FOUND, CODE_IMMUTABLE or INVALID_MIN_AGE
        """
        task_code = await self.get_task_code(task_code_id)

        if "code" in changes and (
            not isinstance(changes["code"], str)
            or changes["code"].strip().upper() != task_code.code
        ):
            raise TaskCodeError(
                "CODE_IMMUTABLE", "Task code cannot be changed after creation", task_code_id
            )

        for field_name, value in changes.items():
            if field_name == "code":
                continue
            if field_name not in UPDATABLE_FIELDS:
                raise ValueError(f"Unknown task code field: {field_name}")
            if field_name == "min_age_allowed":
                self._validate_min_age(value)
            if field_name == "supervisor_required":
                value = SupervisorRequirement(value).value
            setattr(task_code, field_name, value)

        await self.session.flush()
        return task_code

    async def add_rate(
        self,
        task_code_id: UUID,
        hourly_rate: Decimal,
        effective_date: date,
        justification_notes: str | None = None,
    ) -> TaskCodeRate:
        """Append a rate effective today or later.

        Raises:
            TaskCodeError: TASK_CODE_NOT_FOUND, INVALID_EFFECTIVE_DATE,
                INVALID_RATE or RATE_DATE_CONFLICT
        """
        await self.get_task_code(task_code_id)
        self._validate_rate(hourly_rate)

        if effective_date < self.today:
            raise TaskCodeError(
                "INVALID_EFFECTIVE_DATE",
                f"Effective date {effective_date.isoformat()} is in the past",
                task_code_id,
            )

        rate = TaskCodeRate(
            task_code_id=task_code_id,
            hourly_rate=hourly_rate,
            effective_date=effective_date,
            justification_notes=justification_notes,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(rate)
        except IntegrityError:
            raise TaskCodeError(
                "RATE_DATE_CONFLICT",
                f"A rate effective {effective_date.isoformat()} already exists",
                task_code_id,
            ) from None

        logger.info(
            "Added rate %s effective %s for task code %s",
            hourly_rate,
            effective_date.isoformat(),
            task_code_id,
        )
        return rate

    async def get_rate_history(self, task_code_id: UUID) -> list[TaskCodeRate]:
        """All rates for a task code, newest effective date first."""
        await self.get_task_code(task_code_id)
        result = await self.session.execute(
            select(TaskCodeRate)
            .where(TaskCodeRate.task_code_id == task_code_id)
            .order_by(TaskCodeRate.effective_date.desc())
        )
        return list(result.scalars().all())

    async def effective_rate(self, task_code_id: UUID, as_of_date: date) -> Decimal:
        """Rate in force on a date.

        Raises:
            TaskCodeError: TASK_CODE_NOT_FOUND
            RateNotFoundError: If no rate is effective on or before the date
        """
        await self.get_task_code(task_code_id)
        return await RateResolver(self.session).effective_rate(task_code_id, as_of_date)

    @staticmethod
    def _validate_min_age(min_age: int) -> None:
        if not MINIMUM_WORKING_AGE <= min_age <= MAX_MIN_AGE:
            raise TaskCodeError(
                "INVALID_MIN_AGE",
                f"Minimum age must be between {MINIMUM_WORKING_AGE} and {MAX_MIN_AGE}",
            )

    @staticmethod
    def _validate_rate(hourly_rate: Decimal) -> None:
        if hourly_rate <= 0:
            raise TaskCodeError("INVALID_RATE", "Hourly rate must be greater than zero")

    @staticmethod
    def _already_exists(existing: TaskCode) -> TaskCodeError:
        return TaskCodeError(
            "CODE_ALREADY_EXISTS",
            f"Task code {existing.code} already exists",
            existing.task_code_id,
        )
