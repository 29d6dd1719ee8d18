"""Persistence boundary of the payroll engine.

The engine reads attendance, time off, mileage and the employee master from
collaborator stores it does not own, and reads/writes payroll records only
through ``PayrollRepository``. Concrete adapters live in
``caregiver_payroll.repositories.sqlalchemy_repository`` and
``caregiver_payroll.repositories.sources``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID
from zoneinfo import ZoneInfo

if TYPE_CHECKING:
    from caregiver_payroll.calculators.types import PayPeriod
    from caregiver_payroll.models import (
        Caregiver,
        CaregiverPayRate,
        PayrollRecord,
        TimeEntry,
        TimeOffRequest,
    )
    from caregiver_payroll.repositories.filters import PayrollRecordFilter


class CaregiverDirectory(ABC):
    """Employee master: caregivers and their rates."""

    @abstractmethod
    async def get_caregiver(self, caregiver_id: UUID) -> Caregiver | None: ...

    @abstractmethod
    async def list_caregivers(self, include_inactive: bool = False) -> list[Caregiver]: ...

    @abstractmethod
    async def get_pay_rates(self, caregiver_id: UUID) -> list[CaregiverPayRate]: ...

    @abstractmethod
    async def get_client_rates(self, caregiver_id: UUID) -> dict[UUID, Decimal]:
        """Per-client hourly rates keyed by client id."""


class AttendanceStore(ABC):
    @abstractmethod
    async def list_time_entries(
        self, caregiver_id: UUID, period: PayPeriod, tz: ZoneInfo
    ) -> list[TimeEntry]:
        """Entries starting inside the period window, complete or not."""


class TimeOffStore(ABC):
    @abstractmethod
    async def list_time_off(self, caregiver_id: UUID, period: PayPeriod) -> list[TimeOffRequest]:
        """Requests whose date range overlaps the period, any status or type."""


class MileageStore(ABC):
    @abstractmethod
    async def total_miles(self, caregiver_id: UUID, period: PayPeriod) -> Decimal: ...


class PayrollRepository(ABC):
    """Reads and writes payroll records.

    Every status change goes through ``advance_status`` with the status the
    caller observed; implementations must apply it as a single conditional
    write and raise ``ConcurrencyConflictError`` when it no longer holds.
    """

    @abstractmethod
    async def get_record(self, caregiver_id: UUID, period: PayPeriod) -> PayrollRecord | None: ...

    @abstractmethod
    async def get_by_id(self, payroll_record_id: UUID) -> PayrollRecord | None: ...

    @abstractmethod
    async def records_for_period(self, period: PayPeriod) -> dict[UUID, PayrollRecord]:
        """Stored records for exactly this period keyed by caregiver id."""

    @abstractmethod
    async def find_records(self, record_filter: PayrollRecordFilter) -> list[PayrollRecord]: ...

    @abstractmethod
    async def earliest_in_status(self, caregiver_id: UUID, status: str) -> PayrollRecord | None:
        """The caregiver's record with the earliest period in the given status."""

    @abstractmethod
    async def latest_for_caregiver(self, caregiver_id: UUID) -> PayrollRecord | None: ...

    @abstractmethod
    async def insert(self, record: PayrollRecord) -> PayrollRecord:
        """Persist a new record.

        Raises:
            ConcurrencyConflictError: If a record for the same caregiver and
                period already exists.
        """

    @abstractmethod
    async def advance_status(
        self,
        payroll_record_id: UUID,
        expected_status: str,
        new_status: str,
        values: dict[str, Any],
    ) -> PayrollRecord:
        """Move a record from expected_status to new_status, writing values.

        Raises:
            ConcurrencyConflictError: If the record is no longer in expected_status.
        """

    @abstractmethod
    async def assign_check_number(self, payroll_record_id: UUID, check_number: int) -> PayrollRecord:
        """Stamp a check number on a processed record that has none.

        Raises:
            ConcurrencyConflictError: If the record is not processed or already numbered.
        """
