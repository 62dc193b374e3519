"""Employee and compliance document models."""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, Date, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from labor_engine.models.base import Base, TimestampMixin, UpdatedAtMixin, utcnow

if TYPE_CHECKING:
    from labor_engine.models.timesheet import Timesheet


class Employee(Base, TimestampMixin, UpdatedAtMixin):
    """A worker (minor or adult) or supervisor.

    Age is never stored; it is derived from ``date_of_birth`` for each
    date it is needed.
    """

    __tablename__ = "employee"

    employee_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    is_supervisor: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'archived')",
            name="employee_status_check",
        ),
    )

    # Relationships
    documents: Mapped[list[ComplianceDocument]] = relationship(
        back_populates="employee",
        foreign_keys="ComplianceDocument.employee_id",
        order_by="ComplianceDocument.uploaded_at",
    )
    timesheets: Mapped[list[Timesheet]] = relationship(
        back_populates="employee",
        foreign_keys="Timesheet.employee_id",
    )

    @property
    def is_active(self) -> bool:
        return self.status == "active"


class ComplianceDocument(Base):
    """Parental consent, work permit, or safety training record.

    Documents are soft-revoked through ``invalidated_at`` and never deleted.
    """

    __tablename__ = "compliance_document"

    compliance_document_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    document_type: Mapped[str] = mapped_column(String, nullable=False)
    file_path: Mapped[str | None] = mapped_column(String)
    uploaded_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    uploaded_by: Mapped[UUID | None] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="SET NULL"),
    )
    expires_at: Mapped[date | None] = mapped_column(Date)
    invalidated_at: Mapped[datetime | None] = mapped_column()

    __table_args__ = (
        CheckConstraint(
            "document_type IN ('parental_consent', 'work_permit', 'safety_training')",
            name="compliance_document_type_check",
        ),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(
        back_populates="documents",
        foreign_keys=[employee_id],
    )

    @property
    def is_revoked(self) -> bool:
        return self.invalidated_at is not None
