"""Compliance check log model."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, CheckConstraint, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from labor_engine.models.base import Base, utcnow


class ComplianceCheckLog(Base):
    """One rule's outcome for one timesheet in one check run.

    Written once when a timesheet is submitted and never mutated. Rows from
    the same submission attempt share a ``check_run_id``.
    """

    __tablename__ = "compliance_check_log"

    compliance_check_log_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    timesheet_id: Mapped[UUID] = mapped_column(
        ForeignKey("timesheet.timesheet_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    check_run_id: Mapped[UUID] = mapped_column(nullable=False)
    rule_id: Mapped[str] = mapped_column(String(20), nullable=False)
    result: Mapped[str] = mapped_column(String, nullable=False)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    checked_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    employee_age_on_date: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "timesheet_id",
            "check_run_id",
            "rule_id",
            name="compliance_check_log_run_rule_unique",
        ),
        CheckConstraint(
            "result IN ('pass', 'fail', 'not_applicable')",
            name="compliance_check_log_result_check",
        ),
    )
