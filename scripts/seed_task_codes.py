"""Seed script for a starter set of task codes.

Run with:
    python scripts/seed_task_codes.py

Creates the tables if needed, then adds each task code below with its
initial rate. Codes that already exist are left untouched.
"""

from __future__ import annotations

import asyncio
from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from labor_engine.compliance import SupervisorRequirement
from labor_engine.database import create_all, get_session
from labor_engine.services import NewTaskCode, TaskCodeService

RATES_EFFECTIVE = date(2024, 1, 1)

STARTER_CODES = [
    NewTaskCode(
        code="F01",
        name="Field Harvest",
        is_agricultural=True,
        initial_rate=Decimal("10.00"),
        rate_effective_date=RATES_EFFECTIVE,
    ),
    NewTaskCode(
        code="F02",
        name="Tractor Operation",
        is_agricultural=True,
        initial_rate=Decimal("18.00"),
        rate_effective_date=RATES_EFFECTIVE,
        power_machinery=True,
        min_age_allowed=16,
        supervisor_required=SupervisorRequirement.ALWAYS,
    ),
    NewTaskCode(
        code="R01",
        name="Farm Stand Register",
        is_agricultural=False,
        initial_rate=Decimal("15.00"),
        rate_effective_date=RATES_EFFECTIVE,
        solo_cash_handling=True,
        supervisor_required=SupervisorRequirement.FOR_MINORS,
    ),
    NewTaskCode(
        code="D01",
        name="Farm Deliveries",
        is_agricultural=False,
        initial_rate=Decimal("17.50"),
        rate_effective_date=RATES_EFFECTIVE,
        driving_required=True,
        min_age_allowed=18,
    ),
]


async def seed_task_codes(session: AsyncSession) -> None:
    """Create any starter task code that does not exist yet."""
    service = TaskCodeService(session)
    for data in STARTER_CODES:
        if await service.get_task_code_by_code(data.code) is not None:
            print(f"Task code {data.code} already exists, skipping")
            continue
        await service.create_task_code(data)
        print(f"Created task code {data.code} ({data.name}) at ${data.initial_rate}")


async def main():
    """Run seed script."""
    print("Seeding task codes...")

    await create_all()
    async with get_session() as session:
        await seed_task_codes(session)

    print("\nDone! Task codes seeded successfully.")


if __name__ == "__main__":
    asyncio.run(main())
