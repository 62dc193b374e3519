"""Compliance context assembly.

The builder is a pure function of its inputs: it performs no I/O and
never mutates what it is given, so the same inputs always produce an
equal context.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable

from labor_engine.compliance.types import (
    ComplianceContext,
    DocumentSnapshot,
    EmployeeSnapshot,
    EntrySnapshot,
    frozen_mapping,
)
from labor_engine.utils.age import AgeBand, band_for_date, weekly_ages
from labor_engine.utils.time import week_dates, week_end_for


def _entry_sort_key(entry: EntrySnapshot) -> tuple:
    return (entry.work_date, entry.start_time, entry.end_time, entry.entry_id)


def build_context(
    employee: EmployeeSnapshot,
    week_start: date,
    entries: Iterable[EntrySnapshot],
    documents: Iterable[DocumentSnapshot],
    check_date: date,
) -> ComplianceContext:
    """Build the compliance context for one employee and one week.

    Args:
        employee: The employee whose week is being checked
        week_start: Sunday the week begins on
        entries: Work entries recorded for the week
        documents: All compliance documents on file for the employee
        check_date: Date the check is run (used for document expiry)

    Returns:
        ComplianceContext with per-day hours, ages, bands and entries

    Raises:
        ValueError: If week_start is not a Sunday or an entry falls outside the week
    """
    days = week_dates(week_start)
    day_set = set(days)

    ordered_entries = tuple(sorted(entries, key=_entry_sort_key))
    for entry in ordered_entries:
        if entry.work_date not in day_set:
            raise ValueError(
                f"Entry {entry.entry_id} on {entry.work_date.isoformat()} is outside "
                f"the week starting {week_start.isoformat()}"
            )

    grouped: dict[date, list[EntrySnapshot]] = defaultdict(list)
    for entry in ordered_entries:
        grouped[entry.work_date].append(entry)

    daily_entries: dict[date, tuple[EntrySnapshot, ...]] = {}
    daily_hours: dict[date, Decimal] = {}
    for day in days:
        day_entries = tuple(grouped.get(day, ()))
        daily_entries[day] = day_entries
        daily_hours[day] = sum((e.hours for e in day_entries), Decimal("0"))

    daily_ages = weekly_ages(employee.date_of_birth, week_start)
    daily_age_bands: dict[date, AgeBand] = {
        day: band_for_date(employee.date_of_birth, day) for day in days
    }

    school_days = tuple(
        day for day in days if any(e.is_school_day for e in daily_entries[day])
    )
    work_days = tuple(day for day in days if daily_entries[day])
    weekly_total = sum(daily_hours.values(), Decimal("0"))

    return ComplianceContext(
        employee=employee,
        week_start=week_start,
        week_end=week_end_for(week_start),
        check_date=check_date,
        entries=ordered_entries,
        documents=tuple(documents),
        daily_hours=frozen_mapping(daily_hours),
        daily_ages=frozen_mapping(dict(daily_ages)),
        daily_age_bands=frozen_mapping(daily_age_bands),
        daily_entries=frozen_mapping(daily_entries),
        school_days=school_days,
        work_days=work_days,
        weekly_total=weekly_total,
        is_school_week=bool(school_days),
    )
