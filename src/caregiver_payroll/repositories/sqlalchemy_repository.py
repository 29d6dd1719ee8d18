"""SQLAlchemy implementation of the payroll repository."""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import Select, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from caregiver_payroll.calculators.types import PayPeriod
from caregiver_payroll.exceptions import ConcurrencyConflictError
from caregiver_payroll.models import PayrollRecord
from caregiver_payroll.repositories.base import PayrollRepository
from caregiver_payroll.repositories.filters import PayrollRecordFilter

logger = logging.getLogger(__name__)


def _by_id(payroll_record_id: UUID) -> Select[tuple[PayrollRecord]]:
    return (
        select(PayrollRecord)
        .where(PayrollRecord.payroll_record_id == payroll_record_id)
        .execution_options(populate_existing=True)
    )


class SqlAlchemyPayrollRepository(PayrollRepository):
    """Payroll records in the caller's session. Never commits."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_record(self, caregiver_id: UUID, period: PayPeriod) -> PayrollRecord | None:
        result = await self.session.execute(
            select(PayrollRecord).where(
                PayrollRecord.caregiver_id == caregiver_id,
                PayrollRecord.period_start == period.start,
                PayrollRecord.period_end == period.end,
            )
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, payroll_record_id: UUID) -> PayrollRecord | None:
        result = await self.session.execute(_by_id(payroll_record_id))
        return result.scalar_one_or_none()

    async def _reload(self, payroll_record_id: UUID) -> PayrollRecord:
        # Row was just updated in this transaction
        result = await self.session.execute(_by_id(payroll_record_id))
        return result.scalar_one()

    async def records_for_period(self, period: PayPeriod) -> dict[UUID, PayrollRecord]:
        result = await self.session.execute(
            select(PayrollRecord).where(
                PayrollRecord.period_start == period.start,
                PayrollRecord.period_end == period.end,
            )
        )
        return {record.caregiver_id: record for record in result.scalars()}

    async def find_records(self, record_filter: PayrollRecordFilter) -> list[PayrollRecord]:
        result = await self.session.execute(record_filter.to_select())
        return list(result.scalars().all())

    async def earliest_in_status(self, caregiver_id: UUID, status: str) -> PayrollRecord | None:
        result = await self.session.execute(
            select(PayrollRecord)
            .where(
                PayrollRecord.caregiver_id == caregiver_id,
                PayrollRecord.status == status,
            )
            .order_by(PayrollRecord.period_start, PayrollRecord.period_end)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def latest_for_caregiver(self, caregiver_id: UUID) -> PayrollRecord | None:
        result = await self.session.execute(
            select(PayrollRecord)
            .where(PayrollRecord.caregiver_id == caregiver_id)
            .order_by(PayrollRecord.period_start.desc(), PayrollRecord.period_end.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def insert(self, record: PayrollRecord) -> PayrollRecord:
        try:
            async with self.session.begin_nested():
                self.session.add(record)
        except IntegrityError as exc:
            logger.info(
                "Duplicate payroll record for caregiver %s period %s..%s",
                record.caregiver_id,
                record.period_start,
                record.period_end,
            )
            raise ConcurrencyConflictError(
                None,
                None,
                f"a payroll record for caregiver {record.caregiver_id} and period "
                f"{record.period_start}..{record.period_end} already exists",
            ) from exc
        return record

    async def advance_status(
        self,
        payroll_record_id: UUID,
        expected_status: str,
        new_status: str,
        values: dict[str, Any],
    ) -> PayrollRecord:
        # Conditional update: only one concurrent caller can match expected_status
        result = await self.session.execute(
            update(PayrollRecord)
            .where(
                PayrollRecord.payroll_record_id == payroll_record_id,
                PayrollRecord.status == expected_status,
            )
            .values(status=new_status, **values)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            raise ConcurrencyConflictError(
                payroll_record_id,
                expected_status,
                f"transition to '{new_status}' lost to a concurrent update",
            )

        return await self._reload(payroll_record_id)

    async def assign_check_number(self, payroll_record_id: UUID, check_number: int) -> PayrollRecord:
        result = await self.session.execute(
            update(PayrollRecord)
            .where(
                PayrollRecord.payroll_record_id == payroll_record_id,
                PayrollRecord.status == "processed",
                PayrollRecord.check_number.is_(None),
            )
            .values(check_number=check_number)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            raise ConcurrencyConflictError(
                payroll_record_id,
                "processed",
                f"check number {check_number} could not be assigned",
            )

        return await self._reload(payroll_record_id)
