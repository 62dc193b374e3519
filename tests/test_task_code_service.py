"""Tests for task code management and rate history."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from labor_engine.calculators import RateNotFoundError
from labor_engine.compliance import SupervisorRequirement
from labor_engine.services import NewTaskCode, TaskCodeError, TaskCodeService

TODAY = date(2024, 3, 1)


def new_code(**overrides) -> NewTaskCode:
    values = dict(
        code="pk1",
        name="Packing Shed",
        is_agricultural=True,
        initial_rate=Decimal("11.50"),
        rate_effective_date=date(2024, 1, 1),
    )
    values.update(overrides)
    return NewTaskCode(**values)


@pytest.fixture
def service(session) -> TaskCodeService:
    return TaskCodeService(session, today=TODAY)


@pytest.fixture
async def packing(service):
    return await service.create_task_code(new_code())


class TestCreateTaskCode:
    """Test creation and validation."""

    async def test_creates_code_with_initial_rate(self, service, packing):
        assert packing.code == "PK1"
        assert packing.is_active is True
        assert packing.supervisor_required == SupervisorRequirement.NONE.value

        [rate] = await service.get_rate_history(packing.task_code_id)
        assert rate.hourly_rate == Decimal("11.50")
        assert rate.effective_date == date(2024, 1, 1)
        assert rate.justification_notes == "Initial rate"

    async def test_duplicate_code(self, service, packing):
        with pytest.raises(TaskCodeError) as exc_info:
            await service.create_task_code(new_code(code=" Pk1 "))

        assert exc_info.value.code == "CODE_ALREADY_EXISTS"
        assert exc_info.value.task_code_id == packing.task_code_id

    async def test_concurrent_create_returns_existing(self, service, packing, monkeypatch):
        """Losing the insert race returns the code that won."""
        real_find = service.get_task_code_by_code
        calls = []

        async def stale_find(code):
            calls.append(code)
            if len(calls) == 1:
                return None
            return await real_find(code)

        monkeypatch.setattr(service, "get_task_code_by_code", stale_find)

        result = await service.create_task_code(new_code(name="Packing Shed 2"))

        assert result.task_code_id == packing.task_code_id
        assert result.name == "Packing Shed"
        assert calls == ["PK1", "PK1"]

    @pytest.mark.parametrize("min_age", [11, 19])
    async def test_min_age_out_of_range(self, service, min_age):
        with pytest.raises(TaskCodeError) as exc_info:
            await service.create_task_code(new_code(min_age_allowed=min_age))
        assert exc_info.value.code == "INVALID_MIN_AGE"

    async def test_rate_must_be_positive(self, service):
        with pytest.raises(TaskCodeError) as exc_info:
            await service.create_task_code(new_code(initial_rate=Decimal("0")))
        assert exc_info.value.code == "INVALID_RATE"


class TestUpdateTaskCode:
    """Attributes change; the code itself does not."""

    async def test_update_attributes(self, service, packing):
        updated = await service.update_task_code(
            packing.task_code_id,
            {"name": "Packing Line", "supervisor_required": "for_minors", "min_age_allowed": 14},
        )

        assert updated.name == "Packing Line"
        assert updated.supervisor_required == "for_minors"
        assert updated.min_age_allowed == 14

    async def test_same_code_is_accepted(self, service, packing):
        updated = await service.update_task_code(packing.task_code_id, {"code": "pk1"})
        assert updated.code == "PK1"

    async def test_code_is_immutable(self, service, packing):
        with pytest.raises(TaskCodeError) as exc_info:
            await service.update_task_code(packing.task_code_id, {"code": "PK2"})
        assert exc_info.value.code == "CODE_IMMUTABLE"

    @pytest.mark.parametrize("code", [None, 42])
    async def test_code_must_be_a_string(self, service, packing, code):
        with pytest.raises(TaskCodeError) as exc_info:
            await service.update_task_code(packing.task_code_id, {"code": code})
        assert exc_info.value.code == "CODE_IMMUTABLE"

    async def test_unknown_field(self, service, packing):
        with pytest.raises(ValueError, match="Unknown task code field"):
            await service.update_task_code(packing.task_code_id, {"colour": "red"})

    async def test_missing_task_code(self, service):
        with pytest.raises(TaskCodeError) as exc_info:
            await service.update_task_code(uuid4(), {"name": "x"})
        assert exc_info.value.code == "TASK_CODE_NOT_FOUND"


class TestRateHistory:
    """Append-only, effective-dated rates."""

    async def test_add_future_rate(self, service, packing):
        await service.add_rate(packing.task_code_id, Decimal("12.00"), date(2024, 4, 1), "Spring")
        await service.add_rate(packing.task_code_id, Decimal("12.25"), TODAY)

        history = await service.get_rate_history(packing.task_code_id)

        assert [r.effective_date for r in history] == [
            date(2024, 4, 1),
            TODAY,
            date(2024, 1, 1),
        ]

    async def test_past_effective_date_rejected(self, service, packing):
        with pytest.raises(TaskCodeError) as exc_info:
            await service.add_rate(packing.task_code_id, Decimal("12.00"), date(2024, 2, 29))
        assert exc_info.value.code == "INVALID_EFFECTIVE_DATE"

    async def test_one_rate_per_date(self, service, packing):
        await service.add_rate(packing.task_code_id, Decimal("12.00"), date(2024, 4, 1))

        with pytest.raises(TaskCodeError) as exc_info:
            await service.add_rate(packing.task_code_id, Decimal("13.00"), date(2024, 4, 1))

        assert exc_info.value.code == "RATE_DATE_CONFLICT"
        history = await service.get_rate_history(packing.task_code_id)
        assert len(history) == 2

    async def test_effective_rate(self, service, packing):
        await service.add_rate(packing.task_code_id, Decimal("12.00"), date(2024, 4, 1))

        assert await service.effective_rate(packing.task_code_id, date(2024, 3, 31)) == Decimal("11.50")
        assert await service.effective_rate(packing.task_code_id, date(2024, 4, 1)) == Decimal("12.00")

        with pytest.raises(RateNotFoundError):
            await service.effective_rate(packing.task_code_id, date(2023, 12, 31))
