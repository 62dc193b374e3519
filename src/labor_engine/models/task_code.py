"""Task code and effective-dated rate models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from labor_engine.models.base import Base, TimestampMixin, UpdatedAtMixin


class TaskCode(Base, TimestampMixin, UpdatedAtMixin):
    """A labor classification; ``code`` is immutable once created."""

    __tablename__ = "task_code"

    task_code_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    code: Mapped[str] = mapped_column(String(10), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    is_agricultural: Mapped[bool] = mapped_column(Boolean, nullable=False)
    is_hazardous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    supervisor_required: Mapped[str] = mapped_column(String, nullable=False, default="none")
    solo_cash_handling: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    driving_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    power_machinery: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    min_age_allowed: Mapped[int] = mapped_column(Integer, nullable=False, default=12)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint(
            "supervisor_required IN ('none', 'for_minors', 'always')",
            name="task_code_supervisor_required_check",
        ),
        CheckConstraint(
            "min_age_allowed BETWEEN 12 AND 18",
            name="task_code_min_age_check",
        ),
    )

    # Relationships
    rates: Mapped[list[TaskCodeRate]] = relationship(
        back_populates="task_code",
        order_by="TaskCodeRate.effective_date.desc()",
    )


class TaskCodeRate(Base, TimestampMixin):
    """An hourly wage for a task code, in force from ``effective_date``.

    Rates are append-only: never edited or deleted.
    """

    __tablename__ = "task_code_rate"

    task_code_rate_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    task_code_id: Mapped[UUID] = mapped_column(
        ForeignKey("task_code.task_code_id", ondelete="CASCADE"),
        nullable=False,
    )
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    effective_date: Mapped[date] = mapped_column(Date, nullable=False)
    justification_notes: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (
        UniqueConstraint(
            "task_code_id",
            "effective_date",
            name="task_code_rate_code_date_unique",
        ),
        CheckConstraint("hourly_rate > 0", name="task_code_rate_positive_check"),
    )

    # Relationships
    task_code: Mapped[TaskCode] = relationship(back_populates="rates")
