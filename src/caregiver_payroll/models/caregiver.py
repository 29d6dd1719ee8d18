"""Caregiver and pay rate models (employee master, read-only for payroll)."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, Date, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from caregiver_payroll.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from caregiver_payroll.models.attendance import MileageEntry, TimeEntry, TimeOffRequest


class Caregiver(Base, TimestampMixin):
    """Caregiver on the agency's payroll."""

    __tablename__ = "caregiver"

    caregiver_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    default_hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    overtime_multiplier: Mapped[Decimal | None] = mapped_column(Numeric(4, 2), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "default_hourly_rate IS NULL OR default_hourly_rate >= 0",
            name="caregiver_rate_nonnegative",
        ),
        CheckConstraint(
            "overtime_multiplier IS NULL OR overtime_multiplier >= 1",
            name="caregiver_ot_multiplier_check",
        ),
    )

    # Relationships
    pay_rates: Mapped[list[CaregiverPayRate]] = relationship(back_populates="caregiver")
    client_rates: Mapped[list[ClientRateOverride]] = relationship(back_populates="caregiver")
    time_entries: Mapped[list[TimeEntry]] = relationship(back_populates="caregiver")
    time_off_requests: Mapped[list[TimeOffRequest]] = relationship(back_populates="caregiver")
    mileage_entries: Mapped[list[MileageEntry]] = relationship(back_populates="caregiver")

    @property
    def full_name(self) -> str:
        """Get full name."""
        return f"{self.first_name} {self.last_name}"


class CaregiverPayRate(Base, TimestampMixin):
    """Effective-dated hourly rate override for a caregiver."""

    __tablename__ = "caregiver_pay_rate"

    caregiver_pay_rate_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    caregiver_id: Mapped[UUID] = mapped_column(
        ForeignKey("caregiver.caregiver_id", ondelete="CASCADE"),
        nullable=False,
    )
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    effective_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    reason: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        CheckConstraint("hourly_rate >= 0", name="caregiver_pay_rate_nonnegative"),
        CheckConstraint(
            "end_date IS NULL OR end_date > effective_date",
            name="caregiver_pay_rate_dates_check",
        ),
    )

    # Relationships
    caregiver: Mapped[Caregiver] = relationship(back_populates="pay_rates")

    def is_active_on(self, as_of_date: date) -> bool:
        """Check if rate is active on a given date."""
        if self.effective_date > as_of_date:
            return False
        if self.end_date is not None and self.end_date <= as_of_date:
            return False
        return True


class ClientRateOverride(Base, TimestampMixin):
    """Rate paid to a caregiver for shifts with one specific client."""

    __tablename__ = "client_rate_override"

    client_rate_override_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    caregiver_id: Mapped[UUID] = mapped_column(
        ForeignKey("caregiver.caregiver_id", ondelete="CASCADE"),
        nullable=False,
    )
    client_id: Mapped[UUID] = mapped_column(nullable=False)
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    __table_args__ = (
        UniqueConstraint("caregiver_id", "client_id", name="client_rate_override_unique"),
        CheckConstraint("hourly_rate >= 0", name="client_rate_override_nonnegative"),
    )

    # Relationships
    caregiver: Mapped[Caregiver] = relationship(back_populates="client_rates")
