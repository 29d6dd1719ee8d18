"""Payroll record, check number counter, and audit models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    BigInteger,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from caregiver_payroll.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from caregiver_payroll.models.caregiver import Caregiver


class PayrollRecord(Base, TimestampMixin):
    """One caregiver's pay for one pay period.

    Created transient (status ``draft``) by a calculation and persisted only
    when approved. Never deleted.
    """

    __tablename__ = "payroll_record"

    payroll_record_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    caregiver_id: Mapped[UUID] = mapped_column(
        ForeignKey("caregiver.caregiver_id", ondelete="RESTRICT"),
        nullable=False,
    )
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)

    # Inputs snapshot
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 4), nullable=False)
    overtime_multiplier: Mapped[Decimal] = mapped_column(Numeric(4, 2), nullable=False)
    regular_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=Decimal("0"))
    overtime_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=Decimal("0"))
    total_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=Decimal("0"))
    weekend_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=Decimal("0"))
    night_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=Decimal("0"))
    pto_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=Decimal("0"))
    mileage: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    shift_count: Mapped[int] = mapped_column(nullable=False, default=0)

    # Computed pay
    regular_pay: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    overtime_pay: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    pto_pay: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    bonuses: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    gross_pay: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    federal_tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    social_security_tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    medicare_tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    other_deductions: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    total_deductions: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    net_pay: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))

    # Workflow
    status: Mapped[str] = mapped_column(String, nullable=False, default="draft")
    approved_by: Mapped[UUID | None] = mapped_column(nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    processed_by: Mapped[UUID | None] = mapped_column(nullable=True)
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    paid_by: Mapped[UUID | None] = mapped_column(nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    payment_method: Mapped[str | None] = mapped_column(String, nullable=True)
    check_number: Mapped[int | None] = mapped_column(BigInteger, nullable=True, unique=True)

    __table_args__ = (
        UniqueConstraint(
            "caregiver_id",
            "period_start",
            "period_end",
            name="payroll_record_caregiver_period_unique",
        ),
        CheckConstraint(
            "status IN ('draft', 'approved', 'processed', 'paid')",
            name="payroll_record_status_check",
        ),
        CheckConstraint(
            "payment_method IS NULL OR payment_method IN ('check', 'direct_deposit', 'cash')",
            name="payroll_record_payment_method_check",
        ),
        CheckConstraint("period_end >= period_start", name="payroll_record_dates_check"),
        CheckConstraint(
            "check_number IS NULL OR status IN ('processed', 'paid')",
            name="payroll_record_check_number_status",
        ),
    )

    # Load created_at on insert; async sessions cannot lazy-load it later
    __mapper_args__ = {"eager_defaults": True}

    # Relationships
    caregiver: Mapped[Caregiver] = relationship(lazy="raise")


class CheckNumberCounter(Base):
    """Named counter row. Incremented in place, never derived from max()."""

    __tablename__ = "check_number_counter"

    name: Mapped[str] = mapped_column(String(50), primary_key=True)
    current_value: Mapped[int] = mapped_column(BigInteger, nullable=False)


class PayrollAuditEvent(Base, TimestampMixin):
    """Audit trail entry for a payroll action."""

    __tablename__ = "payroll_audit_event"

    audit_event_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    actor_id: Mapped[UUID | None] = mapped_column(nullable=True)
    entity_type: Mapped[str] = mapped_column(String, nullable=False)
    entity_id: Mapped[UUID] = mapped_column(nullable=False)
    action: Mapped[str] = mapped_column(String, nullable=False)
    details_json: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
