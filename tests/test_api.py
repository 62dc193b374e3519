"""API tests through the ASGI app."""

import csv
import io
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest_asyncio

from labor_engine.compliance.rules import ALL_RULES

from .conftest import (
    DOB_ADULT,
    DOB_AGE_15,
    build_documents,
    build_employee,
    build_task_code,
)

API = "/api/v1"


@pytest_asyncio.fixture
async def seeded(session_factory) -> dict[str, str]:
    """Committed employees and a task code, as string IDs for request bodies."""
    worker = build_employee("Jamie Rivera", DOB_AGE_15)
    adult = build_employee("Pat Adams", DOB_ADULT)
    supervisor = build_employee("Sam Ortiz", DOB_ADULT, is_supervisor=True)
    retail, rate = build_task_code("R01", "Retail Counter", False, Decimal("15.00"))

    async with session_factory() as session:
        session.add_all([worker, adult, supervisor, retail, rate])
        await session.flush()
        session.add_all(build_documents(worker))
        await session.commit()

    return {
        "worker": str(worker.employee_id),
        "adult": str(adult.employee_id),
        "supervisor": str(supervisor.employee_id),
        "retail": str(retail.task_code_id),
    }


async def open_week(client, employee_id: str, week_start: str = "2024-01-14") -> dict:
    response = await client.post(
        f"{API}/timesheets",
        json={"employee_id": employee_id, "week_start_date": week_start},
    )
    assert response.status_code == 200
    return response.json()


async def add_shift(
    client, timesheet_id: str, task_code_id: str, work_date: str, start: str, end: str
):
    return await client.post(
        f"{API}/timesheets/{timesheet_id}/entries",
        json={
            "work_date": work_date,
            "task_code_id": task_code_id,
            "start_time": start,
            "end_time": end,
        },
    )


async def submitted_week(client, seeded) -> str:
    timesheet = await open_week(client, seeded["worker"])
    timesheet_id = timesheet["timesheet_id"]
    await add_shift(client, timesheet_id, seeded["retail"], "2024-01-16", "16:00:00", "18:00:00")
    response = await client.post(
        f"{API}/timesheets/{timesheet_id}/submit", json={"check_date": "2024-01-20"}
    )
    assert response.json()["submitted"] is True
    return timesheet_id


class TestHealth:
    """Test health endpoints."""

    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "healthy"
        assert body["engine_version"]
        assert body["rules_loaded"] == len(ALL_RULES)

    async def test_probes(self, client):
        assert (await client.get("/ready")).json() == {"status": "ready"}
        assert (await client.get("/live")).json() == {"status": "alive"}


class TestTimesheetFlow:
    """Open, fill, submit, approve and export a week."""

    async def test_full_week(self, client, seeded):
        timesheet = await open_week(client, seeded["worker"])
        timesheet_id = timesheet["timesheet_id"]
        assert timesheet["status"] == "open"

        response = await add_shift(
            client, timesheet_id, seeded["retail"], "2024-01-16", "16:00:00", "18:00:00"
        )
        assert response.status_code == 201
        entry = response.json()
        assert entry["hours"] == "2.00"
        assert entry["is_school_day"] is True

        preview = await client.get(
            f"{API}/timesheets/{timesheet_id}/compliance", params={"check_date": "2024-01-20"}
        )
        assert preview.json()["passed"] is True

        response = await client.post(
            f"{API}/timesheets/{timesheet_id}/submit", json={"check_date": "2024-01-20"}
        )
        body = response.json()
        assert body["submitted"] is True
        assert body["timesheet"]["status"] == "submitted"
        assert body["compliance"]["violations"] == []

        response = await client.post(
            f"{API}/timesheets/{timesheet_id}/approve",
            json={"supervisor_id": seeded["supervisor"], "notes": "Looks right"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["timesheet"]["status"] == "approved"
        assert body["timesheet"]["reviewed_by"] == seeded["supervisor"]
        assert body["payroll"]["total_earnings"] == "30.00"
        assert body["payroll_error"] is None

        listing = await client.get(
            f"{API}/payroll", params={"start_date": "2024-01-14", "end_date": "2024-01-20"}
        )
        assert listing.json()["total"] == 1

        export = await client.get(
            f"{API}/payroll/export.csv",
            params={"start_date": "2024-01-14", "end_date": "2024-01-20"},
        )
        assert export.status_code == 200
        assert export.headers["content-type"].startswith("text/csv")
        rows = list(csv.reader(io.StringIO(export.text)))
        assert rows[0][0] == "Employee Name"
        assert rows[1][0] == "Jamie Rivera"
        assert rows[1][10] == "30.00"

        record = await client.get(f"{API}/timesheets/{timesheet_id}/payroll")
        assert record.json()["exported_at"] is not None

    async def test_failed_submission_stays_open(self, client, seeded):
        timesheet = await open_week(client, seeded["worker"])
        timesheet_id = timesheet["timesheet_id"]
        await add_shift(
            client, timesheet_id, seeded["retail"], "2024-01-16", "20:00:00", "22:00:00"
        )

        response = await client.post(
            f"{API}/timesheets/{timesheet_id}/submit", json={"check_date": "2024-01-20"}
        )

        body = response.json()
        assert body["submitted"] is False
        assert body["timesheet"]["status"] == "open"
        assert body["compliance"]["violations"]

    async def test_reject_returns_to_open(self, client, seeded):
        timesheet_id = await submitted_week(client, seeded)

        response = await client.post(
            f"{API}/timesheets/{timesheet_id}/reject",
            json={"supervisor_id": seeded["supervisor"], "notes": "Tuesday end time is wrong"},
        )

        assert response.status_code == 200
        assert response.json()["status"] == "open"
        assert response.json()["supervisor_notes"] == "Tuesday end time is wrong"

    async def test_remove_entry(self, client, seeded):
        timesheet = await open_week(client, seeded["worker"])
        timesheet_id = timesheet["timesheet_id"]
        entry = (
            await add_shift(
                client, timesheet_id, seeded["retail"], "2024-01-16", "16:00:00", "18:00:00"
            )
        ).json()

        response = await client.delete(
            f"{API}/timesheets/{timesheet_id}/entries/{entry['timesheet_entry_id']}"
        )

        assert response.status_code == 204


class TestErrorMapping:
    """Typed failures map to HTTP statuses with their code."""

    async def test_unknown_timesheet(self, client):
        response = await client.get(f"{API}/timesheets/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["code"] == "TIMESHEET_NOT_FOUND"

    async def test_week_must_start_on_sunday(self, client, seeded):
        response = await client.post(
            f"{API}/timesheets",
            json={"employee_id": seeded["worker"], "week_start_date": "2024-01-15"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_WEEK_START"

    async def test_approver_must_be_supervisor(self, client, seeded):
        timesheet_id = await submitted_week(client, seeded)

        response = await client.post(
            f"{API}/timesheets/{timesheet_id}/approve", json={"supervisor_id": seeded["adult"]}
        )

        assert response.status_code == 403
        assert response.json()["code"] == "NOT_SUPERVISOR"

    async def test_rejection_notes_too_short(self, client, seeded):
        timesheet_id = await submitted_week(client, seeded)

        response = await client.post(
            f"{API}/timesheets/{timesheet_id}/reject",
            json={"supervisor_id": seeded["supervisor"], "notes": "bad"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "NOTES_TOO_SHORT"

    async def test_entries_locked_after_submit(self, client, seeded):
        timesheet_id = await submitted_week(client, seeded)

        response = await add_shift(
            client, timesheet_id, seeded["retail"], "2024-01-17", "16:00:00", "17:00:00"
        )

        assert response.status_code == 409
        assert response.json()["code"] == "TIMESHEET_NOT_EDITABLE"

    async def test_payroll_before_approval(self, client, seeded):
        timesheet_id = await submitted_week(client, seeded)

        response = await client.post(f"{API}/timesheets/{timesheet_id}/payroll")

        assert response.status_code == 409
        assert response.json()["code"] == "TIMESHEET_NOT_APPROVED"

    async def test_invalid_payroll_range(self, client):
        response = await client.get(
            f"{API}/payroll", params={"start_date": "2024-02-01", "end_date": "2024-01-01"}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_DATE_RANGE"


class TestTaskCodes:
    """Task code and rate endpoints."""

    async def create_packing(self, client):
        return await client.post(
            f"{API}/task-codes",
            json={
                "code": "pk1",
                "name": "Packing Shed",
                "is_agricultural": True,
                "initial_rate": "11.50",
                "rate_effective_date": "2024-01-01",
            },
        )

    async def test_create_and_fetch(self, client):
        response = await self.create_packing(client)

        assert response.status_code == 201
        task_code = response.json()
        assert task_code["code"] == "PK1"

        fetched = await client.get(f"{API}/task-codes/{task_code['task_code_id']}")
        assert fetched.json()["name"] == "Packing Shed"

    async def test_duplicate_code(self, client):
        await self.create_packing(client)

        response = await self.create_packing(client)

        assert response.status_code == 409
        assert response.json()["code"] == "CODE_ALREADY_EXISTS"

    async def test_rates(self, client):
        task_code_id = (await self.create_packing(client)).json()["task_code_id"]

        past = await client.post(
            f"{API}/task-codes/{task_code_id}/rates",
            json={"hourly_rate": "12.00", "effective_date": "2020-01-01"},
        )
        assert past.status_code == 400
        assert past.json()["code"] == "INVALID_EFFECTIVE_DATE"

        future = await client.post(
            f"{API}/task-codes/{task_code_id}/rates",
            json={"hourly_rate": "12.00", "effective_date": "2099-01-01"},
        )
        assert future.status_code == 201
        assert future.json()["hourly_rate"] == "12.00"

        history = (await client.get(f"{API}/task-codes/{task_code_id}/rates")).json()
        assert [r["effective_date"] for r in history] == ["2099-01-01", "2024-01-01"]

        effective = await client.get(
            f"{API}/task-codes/{task_code_id}/effective-rate", params={"date": "2024-06-01"}
        )
        assert effective.json() == {
            "task_code_id": task_code_id,
            "as_of_date": "2024-06-01",
            "hourly_rate": "11.50",
        }

    async def test_no_rate_before_first_effective_date(self, client):
        task_code_id = (await self.create_packing(client)).json()["task_code_id"]

        response = await client.get(
            f"{API}/task-codes/{task_code_id}/effective-rate",
            params={"date": date(2023, 12, 31).isoformat()},
        )

        assert response.status_code == 404
        assert response.json()["code"] == "NO_RATE_FOUND"
