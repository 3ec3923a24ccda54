"""Payroll run and run item models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from backoffice_payroll.models.base import Base, TimestampMixin, utcnow

ZERO = Decimal("0")


class PayrollRun(Base, TimestampMixin):
    """Payroll run for one organization and period.

    The five monetary aggregates are written only by the aggregator and always
    mirror the sums over the run's items.
    """

    __tablename__ = "payroll_runs"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    organization_id: Mapped[UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    user_id: Mapped[UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="draft")

    gross_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    total_allowances: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    total_deductions: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    total_tax: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    net_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)

    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=True,
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'processing', 'completed', 'cancelled')",
            name="payroll_runs_status_check",
        ),
        Index("ix_payroll_runs_org_created", "organization_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<PayrollRun {self.id} {self.status} {self.period_start}..{self.period_end}>"


class PayrollRunItem(Base, TimestampMixin):
    """One employee's line on a payroll run. Created and deleted, never edited."""

    __tablename__ = "payroll_run_items"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    run_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("payroll_runs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    employee_id: Mapped[str] = mapped_column(String, nullable=False)
    employee_name: Mapped[str | None] = mapped_column(String, nullable=True)
    basic_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    allowances: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    deductions: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    tax: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)
    net_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=ZERO)

    def __repr__(self) -> str:
        return f"<PayrollRunItem {self.id} run={self.run_id} employee={self.employee_id}>"
