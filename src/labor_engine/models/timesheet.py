"""Timesheet (work week) and entry models."""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Numeric,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from labor_engine.models.base import Base, TimestampMixin, UpdatedAtMixin

if TYPE_CHECKING:
    from labor_engine.models.employee import Employee
    from labor_engine.models.task_code import TaskCode


class Timesheet(Base, TimestampMixin, UpdatedAtMixin):
    """One employee's Sunday-aligned work week."""

    __tablename__ = "timesheet"

    timesheet_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
    )
    week_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="open")
    submitted_at: Mapped[datetime | None] = mapped_column()
    reviewed_by: Mapped[UUID | None] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="SET NULL"),
    )
    reviewed_at: Mapped[datetime | None] = mapped_column()
    supervisor_notes: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (
        UniqueConstraint(
            "employee_id",
            "week_start_date",
            name="timesheet_employee_week_unique",
        ),
        CheckConstraint(
            "status IN ('open', 'submitted', 'approved')",
            name="timesheet_status_check",
        ),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(
        back_populates="timesheets",
        foreign_keys=[employee_id],
    )
    entries: Mapped[list[TimesheetEntry]] = relationship(
        back_populates="timesheet",
        order_by="[TimesheetEntry.work_date, TimesheetEntry.start_time]",
        cascade="all, delete-orphan",
    )


class TimesheetEntry(Base, TimestampMixin):
    """One contiguous shift within a timesheet."""

    __tablename__ = "timesheet_entry"

    timesheet_entry_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    timesheet_id: Mapped[UUID] = mapped_column(
        ForeignKey("timesheet.timesheet_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    task_code_id: Mapped[UUID] = mapped_column(
        ForeignKey("task_code.task_code_id"),
        nullable=False,
    )
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    hours: Mapped[Decimal] = mapped_column(Numeric(4, 2), nullable=False)
    is_school_day: Mapped[bool] = mapped_column(Boolean, nullable=False)
    school_day_override_note: Mapped[str | None] = mapped_column(Text)
    supervisor_present_name: Mapped[str | None] = mapped_column(String)
    meal_break_confirmed: Mapped[bool | None] = mapped_column(Boolean)
    notes: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="timesheet_entry_time_range_check"),
    )

    # Relationships
    timesheet: Mapped[Timesheet] = relationship(back_populates="entries")
    task_code: Mapped[TaskCode] = relationship()
