"""Pytest fixtures for labor engine tests."""

from __future__ import annotations

import itertools
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from labor_engine.api.app import create_app
from labor_engine.api.dependencies import get_db_session
from labor_engine.compliance import (
    ComplianceContext,
    DocumentSnapshot,
    DocumentType,
    EmployeeSnapshot,
    EntrySnapshot,
    SupervisorRequirement,
    TaskSnapshot,
    build_context,
)
from labor_engine.database import create_engine_for_url
from labor_engine.models import (
    Base,
    ComplianceDocument,
    Employee,
    TaskCode,
    TaskCodeRate,
)
from labor_engine.services import TimesheetService
from labor_engine.utils.time import calculate_hours, parse_time

# In-memory SQLite shared across sessions through a single static connection
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Sunday of a school week (January) and of a summer week (July)
WEEK_START = date(2024, 1, 14)
SUMMER_WEEK_START = date(2024, 7, 7)
CHECK_DATE = date(2024, 1, 20)

# Dates of birth giving the named age throughout the January week
DOB_AGE_13 = date(2010, 6, 1)
DOB_AGE_15 = date(2008, 6, 1)
DOB_AGE_17 = date(2006, 6, 1)
DOB_ADULT = date(1990, 3, 1)


# ============================================================================
# Pure context builders
# ============================================================================


def make_task(
    code: str = "R01",
    name: str = "Retail Counter",
    **kwargs,
) -> TaskSnapshot:
    """Task snapshot with safe defaults."""
    return TaskSnapshot(task_code_id=uuid4(), code=code, name=name, **kwargs)


RETAIL = make_task()

_entry_ids = itertools.count(1)


def make_entry(
    work_date: date,
    start: str,
    end: str,
    is_school_day: bool = False,
    task: TaskSnapshot | None = RETAIL,
    **kwargs,
) -> EntrySnapshot:
    """Entry snapshot with hours computed from start and end."""
    start_time = parse_time(start)
    end_time = parse_time(end)
    return EntrySnapshot(
        entry_id=f"entry-{next(_entry_ids)}",
        work_date=work_date,
        start_time=start_time,
        end_time=end_time,
        hours=calculate_hours(start_time, end_time),
        is_school_day=is_school_day,
        task=task,
        **kwargs,
    )


def make_document(
    document_type: DocumentType,
    expires_at: date | None = None,
    revoked: bool = False,
) -> DocumentSnapshot:
    return DocumentSnapshot(
        document_id=str(uuid4()),
        document_type=document_type,
        uploaded_at=datetime(2023, 9, 1, tzinfo=timezone.utc),
        expires_at=expires_at,
        invalidated_at=datetime(2023, 12, 1, tzinfo=timezone.utc) if revoked else None,
    )


def valid_documents() -> list[DocumentSnapshot]:
    """Consent, unexpired permit and training: everything a minor needs."""
    return [
        make_document(DocumentType.PARENTAL_CONSENT),
        make_document(DocumentType.WORK_PERMIT, expires_at=date(2025, 12, 31)),
        make_document(DocumentType.SAFETY_TRAINING),
    ]


def make_context(
    date_of_birth: date,
    entries: list[EntrySnapshot] = (),
    documents: list[DocumentSnapshot] | None = None,
    week_start: date = WEEK_START,
    check_date: date = CHECK_DATE,
) -> ComplianceContext:
    """Compliance context for a synthetic employee."""
    employee = EmployeeSnapshot(
        employee_id=uuid4(),
        name="Jamie Rivera",
        date_of_birth=date_of_birth,
    )
    return build_context(
        employee=employee,
        week_start=week_start,
        entries=list(entries),
        documents=valid_documents() if documents is None else documents,
        check_date=check_date,
    )


# ============================================================================
# Database
# ============================================================================


@pytest_asyncio.fixture
async def engine():
    """Create test database engine with all tables."""
    engine = create_engine_for_url(TEST_DATABASE_URL, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


def build_employee(
    name: str,
    date_of_birth: date,
    is_supervisor: bool = False,
    status: str = "active",
) -> Employee:
    return Employee(
        employee_id=uuid4(),
        name=name,
        email=f"{name.lower().replace(' ', '.')}.{uuid4().hex[:6]}@example.com",
        date_of_birth=date_of_birth,
        is_supervisor=is_supervisor,
        status=status,
    )


def build_documents(employee: Employee) -> list[ComplianceDocument]:
    """Valid consent, permit and training documents for an employee."""
    return [
        ComplianceDocument(
            employee_id=employee.employee_id,
            document_type=DocumentType.PARENTAL_CONSENT.value,
            file_path="consent.pdf",
        ),
        ComplianceDocument(
            employee_id=employee.employee_id,
            document_type=DocumentType.WORK_PERMIT.value,
            file_path="permit.pdf",
            expires_at=date(2025, 12, 31),
        ),
        ComplianceDocument(
            employee_id=employee.employee_id,
            document_type=DocumentType.SAFETY_TRAINING.value,
            file_path="training.pdf",
        ),
    ]


def build_task_code(
    code: str,
    name: str,
    is_agricultural: bool,
    rate: Decimal | None,
    effective_date: date = date(2023, 1, 1),
    **kwargs,
) -> list:
    """Task code plus (optionally) its first rate, ready to add to a session."""
    task_code = TaskCode(
        task_code_id=uuid4(),
        code=code,
        name=name,
        description=None,
        is_agricultural=is_agricultural,
        **kwargs,
    )
    rows: list = [task_code]
    if rate is not None:
        rows.append(
            TaskCodeRate(
                task_code_id=task_code.task_code_id,
                hourly_rate=rate,
                effective_date=effective_date,
                justification_notes="Initial rate",
            )
        )
    return rows


@pytest_asyncio.fixture
async def employees(session: AsyncSession) -> dict[str, Employee]:
    """Workers of several ages (with valid documents) and a supervisor."""
    people = {
        "age13": build_employee("Casey Young", DOB_AGE_13),
        "age15": build_employee("Jamie Rivera", DOB_AGE_15),
        "age17": build_employee("Morgan Lee", DOB_AGE_17),
        "adult": build_employee("Pat Adams", DOB_ADULT),
        "supervisor": build_employee("Sam Ortiz", DOB_ADULT, is_supervisor=True),
    }
    session.add_all(people.values())
    await session.flush()
    for key in ("age13", "age15", "age17"):
        session.add_all(build_documents(people[key]))
    await session.flush()
    return people


@pytest_asyncio.fixture
async def task_codes(session: AsyncSession) -> dict[str, TaskCode]:
    """Retail ($15.00), field harvest ($10.00, agricultural) and a tractor task."""
    rows = [
        *build_task_code("R01", "Retail Counter", False, Decimal("15.00")),
        *build_task_code("F01", "Field Harvest", True, Decimal("10.00")),
        *build_task_code(
            "TRK",
            "Tractor Operation",
            True,
            Decimal("18.00"),
            power_machinery=True,
            min_age_allowed=16,
            supervisor_required=SupervisorRequirement.ALWAYS.value,
        ),
    ]
    session.add_all(rows)
    await session.flush()
    return {row.code: row for row in rows if isinstance(row, TaskCode)}


# ============================================================================
# API
# ============================================================================


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, with sessions bound to the test engine."""
    app = create_app()

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def approve_week(
    session: AsyncSession,
    employee: Employee,
    supervisor: Employee,
    task_code: TaskCode,
    shifts: list[tuple[date, str, str]],
    week_start: date = WEEK_START,
):
    """Open, fill, submit and approve a week; returns the approval result."""
    service = TimesheetService(session)
    timesheet = await service.get_or_create_timesheet(employee.employee_id, week_start)
    for work_date, start, end in shifts:
        await service.add_entry(
            timesheet.timesheet_id,
            work_date,
            task_code.task_code_id,
            parse_time(start),
            parse_time(end),
        )

    submission = await service.submit_timesheet(timesheet.timesheet_id, CHECK_DATE)
    assert submission.submitted, [v.message for v in submission.report.violations]

    return await service.approve_timesheet(timesheet.timesheet_id, supervisor.employee_id)
