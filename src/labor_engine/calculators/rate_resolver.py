"""Effective-dated task code rate resolution."""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from labor_engine.errors import LaborEngineError
from labor_engine.models import TaskCodeRate


class RateNotFoundError(LaborEngineError):
    """Raised when no rate is in force for a task code on a date."""

    code = "NO_RATE_FOUND"

    def __init__(self, task_code_id: UUID, as_of_date: date):
        self.task_code_id = task_code_id
        self.as_of_date = as_of_date
        super().__init__(
            f"No rate found for task code {task_code_id} effective on {as_of_date.isoformat()}"
        )


def select_effective_rate(
    rates: Iterable[TaskCodeRate],
    as_of_date: date,
) -> TaskCodeRate | None:
    """Pick the rate with the latest effective date on or before as_of_date."""
    best: TaskCodeRate | None = None
    for rate in rates:
        if rate.effective_date > as_of_date:
            continue
        if best is None or rate.effective_date > best.effective_date:
            best = rate
    return best


class RateResolver:
    """Resolves the hourly rate in force for a task code on a work date.

    A task code's rate history is append-only; the rate in force on a date
    is the one with the greatest ``effective_date`` that is not after it.
    A missing rate is a hard error: paying zero silently is never correct.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self._history: dict[UUID, list[TaskCodeRate]] = {}

    async def effective_rate(self, task_code_id: UUID, as_of_date: date) -> Decimal:
        """Resolve the hourly rate for a task code on a date.

        Raises:
            RateNotFoundError: If no rate is effective on or before the date
        """
        result = await self.session.execute(
            select(TaskCodeRate)
            .where(
                TaskCodeRate.task_code_id == task_code_id,
                TaskCodeRate.effective_date <= as_of_date,
            )
            .order_by(TaskCodeRate.effective_date.desc())
            .limit(1)
        )
        rate = result.scalar_one_or_none()
        if rate is None:
            raise RateNotFoundError(task_code_id, as_of_date)
        return rate.hourly_rate

    async def preload(self, task_code_ids: Sequence[UUID]) -> None:
        """Load full rate histories for several task codes in one query."""
        wanted = [tc_id for tc_id in set(task_code_ids) if tc_id not in self._history]
        if not wanted:
            return

        result = await self.session.execute(
            select(TaskCodeRate).where(TaskCodeRate.task_code_id.in_(wanted))
        )
        grouped: dict[UUID, list[TaskCodeRate]] = defaultdict(list)
        for rate in result.scalars().all():
            grouped[rate.task_code_id].append(rate)
        for tc_id in wanted:
            self._history[tc_id] = grouped.get(tc_id, [])

    def cached_rate(self, task_code_id: UUID, as_of_date: date) -> Decimal:
        """Resolve against histories loaded by ``preload``.

        Raises:
            RateNotFoundError: If no preloaded rate is effective on the date
        """
        rate = select_effective_rate(self._history.get(task_code_id, ()), as_of_date)
        if rate is None:
            raise RateNotFoundError(task_code_id, as_of_date)
        return rate.hourly_rate
