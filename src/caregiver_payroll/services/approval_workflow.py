"""Approval workflow: draft → approved → processed → paid."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from caregiver_payroll.calculators.record_builder import PayrollRecordBuilder
from caregiver_payroll.calculators.types import PayPeriod
from caregiver_payroll.exceptions import PayrollValidationError, RecordNotFoundError
from caregiver_payroll.models import PayrollRecord
from caregiver_payroll.repositories.base import CaregiverDirectory, PayrollRepository
from caregiver_payroll.services.audit import AuditTrail
from caregiver_payroll.services.check_numbers import CheckNumberIssuer
from caregiver_payroll.services.state_machine import PayrollStateMachine, PayrollStatus

logger = logging.getLogger(__name__)

PAYMENT_METHODS = ("check", "direct_deposit", "cash")

# Columns copied from a fresh calculation when a stored draft is approved
SNAPSHOT_FIELDS = (
    "hourly_rate",
    "overtime_multiplier",
    "regular_hours",
    "overtime_hours",
    "total_hours",
    "weekend_hours",
    "night_hours",
    "pto_hours",
    "mileage",
    "shift_count",
    "regular_pay",
    "overtime_pay",
    "pto_pay",
    "bonuses",
    "gross_pay",
    "federal_tax",
    "social_security_tax",
    "medicare_tax",
    "other_deductions",
    "total_deductions",
    "net_pay",
)


@dataclass
class ProcessResult:
    """Outcome of processing a payroll record."""

    record: PayrollRecord
    check_number: int


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApprovalWorkflow:
    """Moves payroll records through their lifecycle.

    Each transition checks the record's current status against the state
    machine, then writes through ``PayrollRepository.advance_status`` with the
    observed status as precondition, so a concurrent transition that got
    there first surfaces as ``ConcurrencyConflictError`` instead of a double
    write. Transitions never commit; the caller's session does.

    A replayed transition (its first attempt already committed) finds the
    record in the target status and raises ``InvalidStateTransitionError``
    with ``already_applied`` set, changing nothing.
    """

    def __init__(
        self,
        repository: PayrollRepository,
        builder: PayrollRecordBuilder,
        caregivers: CaregiverDirectory,
        check_numbers: CheckNumberIssuer,
        audit: AuditTrail | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repository = repository
        self.builder = builder
        self.caregivers = caregivers
        self.check_numbers = check_numbers
        self.audit = audit
        self.clock = clock

    async def approve(self, caregiver_id: UUID, period: PayPeriod, actor_id: UUID) -> PayrollRecord:
        """Freeze a fresh snapshot for the caregiver and period and mark it approved.

        Raises:
            InvalidStateTransitionError: If a record exists past ``draft``.
            RecordNotFoundError: If the caregiver is unknown.
            PayrollValidationError: If the caregiver has nothing to pay in the period.
            ConcurrencyConflictError: If a concurrent approve created the record first.
        """
        self._require_actor(actor_id)
        existing = await self.repository.get_record(caregiver_id, period)
        current = existing.status if existing is not None else None
        PayrollStateMachine.validate_transition(current, PayrollStatus.APPROVED)

        caregiver = await self.caregivers.get_caregiver(caregiver_id)
        if caregiver is None:
            raise RecordNotFoundError(caregiver_id, period.start, period.end)

        draft = await self.builder.build_for_caregiver(caregiver, period)
        if draft is None:
            raise PayrollValidationError(
                f"Caregiver {caregiver_id} has no payable activity in period {period}"
            )

        now = self.clock()
        if existing is None:
            draft.status = PayrollStatus.APPROVED.value
            draft.approved_by = actor_id
            draft.approved_at = now
            record = await self.repository.insert(draft)
        else:
            values: dict[str, Any] = {name: getattr(draft, name) for name in SNAPSHOT_FIELDS}
            values.update(approved_by=actor_id, approved_at=now)
            record = await self.repository.advance_status(
                existing.payroll_record_id,
                PayrollStatus.DRAFT.value,
                PayrollStatus.APPROVED.value,
                values,
            )

        logger.info(
            "Approved payroll record %s for caregiver %s period %s by %s",
            record.payroll_record_id,
            caregiver_id,
            period,
            actor_id,
        )
        await self._audit(
            "approve",
            record,
            actor_id,
            {"gross_pay": record.gross_pay, "net_pay": record.net_pay},
        )
        return record

    async def process(
        self,
        caregiver_id: UUID,
        actor_id: UUID,
        period: PayPeriod | None = None,
    ) -> ProcessResult:
        """Claim an approved record and issue its check number in the same transaction.

        Without a period, the caregiver's earliest approved record is processed.
        """
        self._require_actor(actor_id)
        record = await self._locate(caregiver_id, period, PayrollStatus.PROCESSED)
        PayrollStateMachine.validate_transition(record.status, PayrollStatus.PROCESSED)

        # Claim first so a losing caller never touches the counter
        await self.repository.advance_status(
            record.payroll_record_id,
            PayrollStatus.APPROVED.value,
            PayrollStatus.PROCESSED.value,
            {"processed_by": actor_id, "processed_at": self.clock()},
        )
        check_number = await self.check_numbers.next_number()
        record = await self.repository.assign_check_number(record.payroll_record_id, check_number)

        logger.info(
            "Processed payroll record %s for caregiver %s with check %d",
            record.payroll_record_id,
            caregiver_id,
            check_number,
        )
        await self._audit("process", record, actor_id, {"check_number": check_number})
        return ProcessResult(record=record, check_number=check_number)

    async def mark_paid(
        self,
        caregiver_id: UUID,
        actor_id: UUID,
        payment_method: str,
        period: PayPeriod | None = None,
    ) -> PayrollRecord:
        """Stamp payer, time and payment method on a processed record.

        Without a period, the caregiver's earliest processed record is marked.
        """
        self._require_actor(actor_id)
        if payment_method not in PAYMENT_METHODS:
            raise PayrollValidationError(
                f"Unknown payment method '{payment_method}'; expected one of {', '.join(PAYMENT_METHODS)}"
            )

        record = await self._locate(caregiver_id, period, PayrollStatus.PAID)
        PayrollStateMachine.validate_transition(record.status, PayrollStatus.PAID)

        record = await self.repository.advance_status(
            record.payroll_record_id,
            PayrollStatus.PROCESSED.value,
            PayrollStatus.PAID.value,
            {"paid_by": actor_id, "paid_at": self.clock(), "payment_method": payment_method},
        )

        logger.info(
            "Marked payroll record %s for caregiver %s paid by %s",
            record.payroll_record_id,
            caregiver_id,
            payment_method,
        )
        await self._audit("mark_paid", record, actor_id, {"payment_method": payment_method})
        return record

    async def _locate(
        self,
        caregiver_id: UUID,
        period: PayPeriod | None,
        target: PayrollStatus,
    ) -> PayrollRecord:
        if period is not None:
            record = await self.repository.get_record(caregiver_id, period)
            if record is None:
                raise RecordNotFoundError(caregiver_id, period.start, period.end)
            return record

        predecessor = PayrollStateMachine.predecessor(target)
        record = await self.repository.earliest_in_status(caregiver_id, predecessor)
        if record is not None:
            return record

        # Nothing waiting; report the most recent record's status as the conflict
        latest = await self.repository.latest_for_caregiver(caregiver_id)
        if latest is None:
            raise RecordNotFoundError(caregiver_id)
        return latest

    @staticmethod
    def _require_actor(actor_id: UUID | None) -> None:
        if actor_id is None:
            raise PayrollValidationError("actor_id is required for payroll transitions")

    async def _audit(
        self,
        action: str,
        record: PayrollRecord,
        actor_id: UUID,
        details: dict[str, Any],
    ) -> None:
        if self.audit is None:
            return
        details = {
            "caregiver_id": record.caregiver_id,
            "period_start": record.period_start,
            "period_end": record.period_end,
            "status": record.status,
            **details,
        }
        await self.audit.record(action, record.payroll_record_id, actor_id, details)
