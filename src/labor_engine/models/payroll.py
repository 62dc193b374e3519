"""Payroll record model."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Date, ForeignKey, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from labor_engine.models.base import Base, utcnow

if TYPE_CHECKING:
    from labor_engine.models.employee import Employee
    from labor_engine.models.timesheet import Timesheet


def format_decimal(value: Decimal) -> str:
    """Render a decimal as a fixed-point string with two fraction digits."""
    return f"{Decimal(value):.2f}"


class PayrollRecord(Base):
    """Earnings for one approved timesheet.

    At most one record exists per timesheet (unique ``timesheet_id``).
    """

    __tablename__ = "payroll_record"

    payroll_record_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    timesheet_id: Mapped[UUID] = mapped_column(
        ForeignKey("timesheet.timesheet_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    agricultural_hours: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    agricultural_earnings: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    non_agricultural_hours: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    non_agricultural_earnings: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    overtime_hours: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    overtime_earnings: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_earnings: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    calculated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    exported_at: Mapped[datetime | None] = mapped_column()

    # Relationships
    timesheet: Mapped[Timesheet] = relationship()
    employee: Mapped[Employee] = relationship()

    def amounts(self) -> dict[str, str]:
        """Hour and money fields as two-place decimal strings."""
        return {
            "agricultural_hours": format_decimal(self.agricultural_hours),
            "agricultural_earnings": format_decimal(self.agricultural_earnings),
            "non_agricultural_hours": format_decimal(self.non_agricultural_hours),
            "non_agricultural_earnings": format_decimal(self.non_agricultural_earnings),
            "overtime_hours": format_decimal(self.overtime_hours),
            "overtime_earnings": format_decimal(self.overtime_earnings),
            "total_earnings": format_decimal(self.total_earnings),
        }
