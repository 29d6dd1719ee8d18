"""Pytest fixtures for caregiver payroll tests."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from caregiver_payroll.calculators.types import PayPeriod
from caregiver_payroll.database import create_schema, get_engine, make_session_factory
from caregiver_payroll.models import Caregiver, MileageEntry, TimeEntry, TimeOffRequest
from caregiver_payroll.payroll_config import PayrollConfig

# Monday 2024-01-01 through Sunday 2024-01-14: two full ISO weeks
PERIOD = PayPeriod(date(2024, 1, 1), date(2024, 1, 14))
NEXT_PERIOD = PayPeriod(date(2024, 1, 15), date(2024, 1, 28))
ACTOR_ID = UUID("a1b2c3d4-1111-2222-3333-444455556666")
CLIENT_ID = UUID("c3e2f7a1-2345-6789-abcd-ef0123456789")


def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def make_entry(
    start: datetime,
    minutes: int | None,
    *,
    caregiver_id: UUID | None = None,
    client_id: UUID = CLIENT_ID,
    is_complete: bool = True,
    end: datetime | None = None,
) -> TimeEntry:
    """Transient time entry; end defaults to start + minutes."""
    if end is None and minutes is not None:
        end = start + timedelta(minutes=minutes)
    return TimeEntry(
        time_entry_id=uuid4(),
        caregiver_id=caregiver_id or uuid4(),
        client_id=client_id,
        start_time=start,
        end_time=end,
        duration_minutes=minutes,
        is_complete=is_complete,
    )


def forty_five_hour_week(caregiver_id: UUID | None = None, monday: date = PERIOD.start) -> list[TimeEntry]:
    """Five 9-hour day shifts starting 08:00 UTC, Monday to Friday."""
    return [
        make_entry(
            datetime.combine(monday + timedelta(days=i), datetime.min.time(), tzinfo=timezone.utc)
            + timedelta(hours=8),
            540,
            caregiver_id=caregiver_id,
        )
        for i in range(5)
    ]


@pytest.fixture
def payroll_config() -> PayrollConfig:
    """Reference rules: 26 periods, 40h weekly threshold, 1.5x, $20 default, UTC."""
    return PayrollConfig()


@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite so separate sessions see separate transactions."""
    engine = get_engine(f"sqlite+aiosqlite:///{tmp_path / 'payroll.db'}")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return make_session_factory(engine)


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def add_caregiver(session: AsyncSession) -> Callable[..., Awaitable[Caregiver]]:
    async def _add(
        first_name: str = "Ada",
        last_name: str = "Okafor",
        default_hourly_rate: Decimal | None = Decimal("20.00"),
        is_active: bool = True,
        overtime_multiplier: Decimal | None = None,
    ) -> Caregiver:
        caregiver = Caregiver(
            first_name=first_name,
            last_name=last_name,
            default_hourly_rate=default_hourly_rate,
            is_active=is_active,
            overtime_multiplier=overtime_multiplier,
        )
        session.add(caregiver)
        await session.flush()
        return caregiver

    return _add


@pytest.fixture
def add_entries(session: AsyncSession) -> Callable[..., Awaitable[list[TimeEntry]]]:
    async def _add(entries: list[TimeEntry], caregiver: Caregiver) -> list[TimeEntry]:
        for entry in entries:
            entry.caregiver_id = caregiver.caregiver_id
            session.add(entry)
        await session.flush()
        return entries

    return _add


@pytest.fixture
def add_time_off(session: AsyncSession) -> Callable[..., Awaitable[TimeOffRequest]]:
    async def _add(
        caregiver: Caregiver,
        start_date: date,
        end_date: date,
        hours: Decimal,
        type: str = "vacation",
        status: str = "approved",
    ) -> TimeOffRequest:
        request = TimeOffRequest(
            caregiver_id=caregiver.caregiver_id,
            type=type,
            status=status,
            start_date=start_date,
            end_date=end_date,
            hours=hours,
        )
        session.add(request)
        await session.flush()
        return request

    return _add


@pytest.fixture
def add_mileage(session: AsyncSession) -> Callable[..., Awaitable[MileageEntry]]:
    async def _add(caregiver: Caregiver, entry_date: date, miles: Decimal) -> MileageEntry:
        entry = MileageEntry(caregiver_id=caregiver.caregiver_id, entry_date=entry_date, miles=miles)
        session.add(entry)
        await session.flush()
        return entry

    return _add
