"""Weekly earnings calculation with agricultural split and overtime premium."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable
from uuid import UUID

logger = logging.getLogger(__name__)

AGRICULTURAL_MINIMUM_WAGE = Decimal("8.00")
NON_AGRICULTURAL_MINIMUM_WAGE = Decimal("15.00")
OVERTIME_THRESHOLD_HOURS = Decimal("40")
OVERTIME_PREMIUM_FACTOR = Decimal("0.5")

CENTS = Decimal("0.01")
ZERO = Decimal("0")


def quantize(value: Decimal) -> Decimal:
    """Round to two places, half up."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PayableEntry:
    """An entry with its resolved rate."""

    entry_id: UUID | str
    work_date: date
    hours: Decimal
    rate: Decimal
    is_agricultural: bool
    task_code: str = ""

    @property
    def earnings(self) -> Decimal:
        return self.hours * self.rate


@dataclass
class PayrollTotals:
    """Unrounded bucket totals plus any minimum wage warnings."""

    agricultural_hours: Decimal = ZERO
    agricultural_earnings: Decimal = ZERO
    non_agricultural_hours: Decimal = ZERO
    non_agricultural_earnings: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    overtime_earnings: Decimal = ZERO
    warnings: list[str] = field(default_factory=list)

    @property
    def total_earnings(self) -> Decimal:
        return self.agricultural_earnings + self.non_agricultural_earnings + self.overtime_earnings

    def rounded(self) -> dict[str, Decimal]:
        """Output values, rounded to two places."""
        return {
            "agricultural_hours": quantize(self.agricultural_hours),
            "agricultural_earnings": quantize(self.agricultural_earnings),
            "non_agricultural_hours": quantize(self.non_agricultural_hours),
            "non_agricultural_earnings": quantize(self.non_agricultural_earnings),
            "overtime_hours": quantize(self.overtime_hours),
            "overtime_earnings": quantize(self.overtime_earnings),
            "total_earnings": quantize(self.total_earnings),
        }


def minimum_wage_warning(entry: PayableEntry) -> str | None:
    """Warning text when the entry's rate is below its bucket's floor."""
    if entry.is_agricultural:
        floor, kind = AGRICULTURAL_MINIMUM_WAGE, "agricultural"
    else:
        floor, kind = NON_AGRICULTURAL_MINIMUM_WAGE, "non-agricultural"
    if entry.rate < floor:
        return (
            f"Warning: Task {entry.task_code} rate ${entry.rate:.2f} is below "
            f"{kind} minimum wage ${floor:.2f}"
        )
    return None


class PayrollCalculator:
    """Computes one week's earnings from entries with resolved rates.

    Calculation pipeline:
    1) Entry earnings = hours x effective rate
    2) Accumulate hours and earnings into agricultural / non-agricultural buckets
    3) Flag rates below the bucket's minimum wage (warning only)
    4) Overtime hours = non-agricultural hours above 40
    5) Overtime premium = overtime hours x (non-ag earnings / non-ag hours) x 0.5
    6) Total = agricultural + non-agricultural + overtime premium

    Arithmetic is exact decimal; rounding happens only in ``rounded()``.
    """

    def calculate(self, entries: Iterable[PayableEntry]) -> PayrollTotals:
        totals = PayrollTotals()
        seen_warnings: set[str] = set()

        for entry in entries:
            if entry.is_agricultural:
                totals.agricultural_hours += entry.hours
                totals.agricultural_earnings += entry.earnings
            else:
                totals.non_agricultural_hours += entry.hours
                totals.non_agricultural_earnings += entry.earnings

            warning = minimum_wage_warning(entry)
            if warning and warning not in seen_warnings:
                seen_warnings.add(warning)
                totals.warnings.append(warning)
                logger.warning(warning)

        if totals.non_agricultural_hours > OVERTIME_THRESHOLD_HOURS:
            totals.overtime_hours = totals.non_agricultural_hours - OVERTIME_THRESHOLD_HOURS
            weighted_rate = totals.non_agricultural_earnings / totals.non_agricultural_hours
            totals.overtime_earnings = (
                totals.overtime_hours * weighted_rate * OVERTIME_PREMIUM_FACTOR
            )

        return totals
