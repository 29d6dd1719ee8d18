"""SQLAlchemy adapters for collaborator data (employee master, attendance, time off, mileage)."""

from __future__ import annotations

from datetime import timezone
from decimal import Decimal
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from caregiver_payroll.calculators.types import PayPeriod
from caregiver_payroll.models import (
    Caregiver,
    CaregiverPayRate,
    ClientRateOverride,
    MileageEntry,
    TimeEntry,
    TimeOffRequest,
)
from caregiver_payroll.repositories.base import (
    AttendanceStore,
    CaregiverDirectory,
    MileageStore,
    TimeOffStore,
)


class SqlCaregiverDirectory(CaregiverDirectory):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_caregiver(self, caregiver_id: UUID) -> Caregiver | None:
        return await self.session.get(Caregiver, caregiver_id)

    async def list_caregivers(self, include_inactive: bool = False) -> list[Caregiver]:
        stmt = select(Caregiver).order_by(Caregiver.last_name, Caregiver.first_name)
        if not include_inactive:
            stmt = stmt.where(Caregiver.is_active.is_(True))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_pay_rates(self, caregiver_id: UUID) -> list[CaregiverPayRate]:
        result = await self.session.execute(
            select(CaregiverPayRate)
            .where(CaregiverPayRate.caregiver_id == caregiver_id)
            .order_by(CaregiverPayRate.effective_date.desc())
        )
        return list(result.scalars().all())

    async def get_client_rates(self, caregiver_id: UUID) -> dict[UUID, Decimal]:
        result = await self.session.execute(
            select(ClientRateOverride.client_id, ClientRateOverride.hourly_rate).where(
                ClientRateOverride.caregiver_id == caregiver_id
            )
        )
        return {client_id: Decimal(rate) for client_id, rate in result.all()}


class SqlAttendanceStore(AttendanceStore):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_time_entries(
        self, caregiver_id: UUID, period: PayPeriod, tz: ZoneInfo
    ) -> list[TimeEntry]:
        lower, upper = period.window(tz)
        result = await self.session.execute(
            select(TimeEntry)
            .where(
                TimeEntry.caregiver_id == caregiver_id,
                TimeEntry.start_time >= lower.astimezone(timezone.utc),
                TimeEntry.start_time < upper.astimezone(timezone.utc),
            )
            .order_by(TimeEntry.start_time)
        )
        return list(result.scalars().all())


class SqlTimeOffStore(TimeOffStore):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_time_off(self, caregiver_id: UUID, period: PayPeriod) -> list[TimeOffRequest]:
        result = await self.session.execute(
            select(TimeOffRequest).where(
                TimeOffRequest.caregiver_id == caregiver_id,
                TimeOffRequest.start_date <= period.end,
                TimeOffRequest.end_date >= period.start,
            )
        )
        return list(result.scalars().all())


class SqlMileageStore(MileageStore):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def total_miles(self, caregiver_id: UUID, period: PayPeriod) -> Decimal:
        result = await self.session.execute(
            select(func.coalesce(func.sum(MileageEntry.miles), 0)).where(
                MileageEntry.caregiver_id == caregiver_id,
                MileageEntry.entry_date >= period.start,
                MileageEntry.entry_date <= period.end,
            )
        )
        return Decimal(str(result.scalar_one()))
