"""Payroll service: the operations exposed to callers."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from caregiver_payroll.calculators.record_builder import PayrollRecordBuilder
from caregiver_payroll.calculators.types import PayPeriod
from caregiver_payroll.exceptions import RecordNotFoundError
from caregiver_payroll.models import PayrollRecord
from caregiver_payroll.payroll_config import PayrollConfig
from caregiver_payroll.repositories import (
    PayrollRecordFilter,
    PayrollRepository,
    SqlAlchemyPayrollRepository,
    SqlAttendanceStore,
    SqlCaregiverDirectory,
    SqlMileageStore,
    SqlTimeOffStore,
)
from caregiver_payroll.services.approval_workflow import ApprovalWorkflow, ProcessResult
from caregiver_payroll.services.audit import AuditTrail
from caregiver_payroll.services.check_numbers import CheckNumberIssuer
from caregiver_payroll.services.state_machine import PayrollStateMachine

logger = logging.getLogger(__name__)


class PayrollService:
    """Calculation, approval workflow and record listing over one session."""

    def __init__(
        self,
        repository: PayrollRepository,
        builder: PayrollRecordBuilder,
        workflow: ApprovalWorkflow,
    ):
        self.repository = repository
        self.builder = builder
        self.workflow = workflow

    @classmethod
    def for_session(cls, session: AsyncSession, config: PayrollConfig) -> PayrollService:
        """Wire the SQLAlchemy adapters around a request-scoped session."""
        caregivers = SqlCaregiverDirectory(session)
        repository = SqlAlchemyPayrollRepository(session)
        builder = PayrollRecordBuilder(
            config,
            caregivers=caregivers,
            attendance=SqlAttendanceStore(session),
            time_off=SqlTimeOffStore(session),
            mileage=SqlMileageStore(session),
        )
        workflow = ApprovalWorkflow(
            repository,
            builder,
            caregivers,
            check_numbers=CheckNumberIssuer(session, start=config.check_number_start),
            audit=AuditTrail(session),
        )
        return cls(repository, builder, workflow)

    async def calculate(self, period: PayPeriod) -> list[PayrollRecord]:
        """Payroll for every caregiver with payable activity in the period.

        Records already approved or later are returned as stored; everyone
        else gets a freshly computed, unsaved draft. Performs no writes.
        """
        stored = await self.repository.records_for_period(period)
        frozen = [r for r in stored.values() if PayrollStateMachine.is_snapshot_frozen(r.status)]
        drafts = await self.builder.build_for_period(
            period, exclude={r.caregiver_id for r in frozen}
        )
        logger.debug(
            "Period %s: %d frozen records, %d drafts", period, len(frozen), len(drafts)
        )
        return frozen + drafts

    async def approve(self, caregiver_id: UUID, period: PayPeriod, actor_id: UUID) -> PayrollRecord:
        return await self.workflow.approve(caregiver_id, period, actor_id)

    async def process(
        self,
        caregiver_id: UUID,
        actor_id: UUID,
        period: PayPeriod | None = None,
    ) -> ProcessResult:
        return await self.workflow.process(caregiver_id, actor_id, period)

    async def mark_paid(
        self,
        caregiver_id: UUID,
        actor_id: UUID,
        payment_method: str,
        period: PayPeriod | None = None,
    ) -> PayrollRecord:
        return await self.workflow.mark_paid(caregiver_id, actor_id, payment_method, period)

    async def get_record(self, payroll_record_id: UUID) -> PayrollRecord:
        record = await self.repository.get_by_id(payroll_record_id)
        if record is None:
            raise RecordNotFoundError(payroll_record_id=payroll_record_id)
        return record

    async def list_records(self, record_filter: PayrollRecordFilter | None = None) -> list[PayrollRecord]:
        """Stored payroll records matching the filter, newest period first."""
        return await self.repository.find_records(record_filter or PayrollRecordFilter())
