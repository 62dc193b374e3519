"""Rate resolution and payroll arithmetic."""

from labor_engine.calculators.payroll import (
    AGRICULTURAL_MINIMUM_WAGE,
    NON_AGRICULTURAL_MINIMUM_WAGE,
    OVERTIME_THRESHOLD_HOURS,
    PayableEntry,
    PayrollCalculator,
    PayrollTotals,
)
from labor_engine.calculators.rate_resolver import (
    RateNotFoundError,
    RateResolver,
    select_effective_rate,
)

__all__ = [
    "AGRICULTURAL_MINIMUM_WAGE",
    "NON_AGRICULTURAL_MINIMUM_WAGE",
    "OVERTIME_THRESHOLD_HOURS",
    "PayableEntry",
    "PayrollCalculator",
    "PayrollTotals",
    "RateNotFoundError",
    "RateResolver",
    "select_effective_rate",
]
