"""Attendance, time-off and mileage inputs (owned by other subsystems)."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from caregiver_payroll.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from caregiver_payroll.models.caregiver import Caregiver


class TimeEntry(Base, TimestampMixin):
    """Clock-in/clock-out record for one visit."""

    __tablename__ = "time_entry"

    time_entry_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    caregiver_id: Mapped[UUID] = mapped_column(
        ForeignKey("caregiver.caregiver_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    client_id: Mapped[UUID] = mapped_column(nullable=False)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_complete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    caregiver: Mapped[Caregiver] = relationship(back_populates="time_entries")


class TimeOffRequest(Base, TimestampMixin):
    """Paid or unpaid time off request."""

    __tablename__ = "time_off_request"

    time_off_request_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    caregiver_id: Mapped[UUID] = mapped_column(
        ForeignKey("caregiver.caregiver_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)

    __table_args__ = (
        CheckConstraint(
            "type IN ('vacation', 'sick', 'personal', 'holiday', 'unpaid')",
            name="time_off_type_check",
        ),
        CheckConstraint(
            "status IN ('pending', 'approved', 'denied')",
            name="time_off_status_check",
        ),
        CheckConstraint("end_date >= start_date", name="time_off_dates_check"),
        CheckConstraint("hours >= 0", name="time_off_hours_nonnegative"),
    )

    # Relationships
    caregiver: Mapped[Caregiver] = relationship(back_populates="time_off_requests")


class MileageEntry(Base, TimestampMixin):
    """Miles driven between client visits."""

    __tablename__ = "mileage_entry"

    mileage_entry_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    caregiver_id: Mapped[UUID] = mapped_column(
        ForeignKey("caregiver.caregiver_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    entry_date: Mapped[date] = mapped_column(Date, nullable=False)
    miles: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)

    __table_args__ = (CheckConstraint("miles >= 0", name="mileage_nonnegative"),)

    # Relationships
    caregiver: Mapped[Caregiver] = relationship(back_populates="mileage_entries")
