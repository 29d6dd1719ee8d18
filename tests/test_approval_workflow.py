"""Tests for the approval workflow and payroll service."""

import asyncio
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from caregiver_payroll.exceptions import (
    ConcurrencyConflictError,
    InvalidStateTransitionError,
    PayrollValidationError,
    RecordNotFoundError,
)
from caregiver_payroll.models import Caregiver, PayrollAuditEvent, PayrollRecord
from caregiver_payroll.payroll_config import PayrollConfig
from caregiver_payroll.repositories import PayrollRecordFilter, SqlAlchemyPayrollRepository
from caregiver_payroll.services import AuditTrail, CheckNumberIssuer, PayrollService

from tests.conftest import ACTOR_ID, NEXT_PERIOD, PERIOD, forty_five_hour_week, make_entry, utc


@pytest.fixture
def service(session) -> PayrollService:
    return PayrollService.for_session(session, PayrollConfig())


@pytest.fixture
def worker(add_caregiver, add_entries):
    """A caregiver with a 45-hour first week in PERIOD."""

    async def _worker(first_name: str = "Ada") -> Caregiver:
        caregiver = await add_caregiver(first_name)
        await add_entries(forty_five_hour_week(), caregiver)
        return caregiver

    return _worker


async def audit_actions(session) -> list[str]:
    result = await session.execute(select(PayrollAuditEvent.action))
    return sorted(result.scalars())


class TestApprove:
    """Approval freezes the snapshot."""

    async def test_approve_stamps_approver(self, service, worker):
        caregiver = await worker()

        record = await service.approve(caregiver.caregiver_id, PERIOD, ACTOR_ID)

        assert record.payroll_record_id is not None
        assert record.status == "approved"
        assert record.approved_by == ACTOR_ID
        assert record.approved_at is not None
        assert record.gross_pay == Decimal("950.00")
        assert record.check_number is None

    async def test_second_approve_is_already_applied(self, service, worker):
        """A replayed approve changes nothing and reports the replay."""
        caregiver = await worker()
        await service.approve(caregiver.caregiver_id, PERIOD, ACTOR_ID)

        with pytest.raises(InvalidStateTransitionError) as exc_info:
            await service.approve(caregiver.caregiver_id, PERIOD, uuid4())

        assert exc_info.value.already_applied is True
        stored = await service.repository.get_record(caregiver.caregiver_id, PERIOD)
        assert stored.approved_by == ACTOR_ID

    async def test_approve_after_process_rejected(self, service, worker):
        """A processed record cannot be re-approved and keeps its snapshot."""
        caregiver = await worker()
        await service.approve(caregiver.caregiver_id, PERIOD, ACTOR_ID)
        await service.process(caregiver.caregiver_id, ACTOR_ID, PERIOD)

        with pytest.raises(InvalidStateTransitionError) as exc_info:
            await service.approve(caregiver.caregiver_id, PERIOD, ACTOR_ID)

        assert exc_info.value.already_applied is False
        stored = await service.repository.get_record(caregiver.caregiver_id, PERIOD)
        assert stored.status == "processed"
        assert stored.check_number == 1001

    async def test_no_activity_rejected(self, service, add_caregiver):
        caregiver = await add_caregiver()

        with pytest.raises(PayrollValidationError):
            await service.approve(caregiver.caregiver_id, PERIOD, ACTOR_ID)

    async def test_unknown_caregiver(self, service):
        with pytest.raises(RecordNotFoundError):
            await service.approve(uuid4(), PERIOD, ACTOR_ID)

    async def test_missing_actor_rejected(self, service, worker):
        caregiver = await worker()

        with pytest.raises(PayrollValidationError):
            await service.approve(caregiver.caregiver_id, PERIOD, None)

    async def test_stored_draft_is_recomputed_and_approved(self, session, service, worker):
        """A draft saved earlier is advanced with a fresh snapshot."""
        caregiver = await worker()
        draft = PayrollRecord(
            caregiver_id=caregiver.caregiver_id,
            period_start=PERIOD.start,
            period_end=PERIOD.end,
            hourly_rate=Decimal("1.00"),
            overtime_multiplier=Decimal("1.5"),
            gross_pay=Decimal("1.00"),
            status="draft",
        )
        session.add(draft)
        await session.flush()

        record = await service.approve(caregiver.caregiver_id, PERIOD, ACTOR_ID)

        assert record.payroll_record_id == draft.payroll_record_id
        assert record.status == "approved"
        assert record.hourly_rate == Decimal("20.0000")
        assert record.gross_pay == Decimal("950.00")
        assert record.shift_count == 5


class TestProcess:
    """Processing claims the record and issues a check number."""

    async def test_process_issues_sequential_checks(self, service, worker):
        first = await worker("Ada")
        second = await worker("Ben")
        await service.approve(first.caregiver_id, PERIOD, ACTOR_ID)
        await service.approve(second.caregiver_id, PERIOD, ACTOR_ID)

        one = await service.process(first.caregiver_id, ACTOR_ID, PERIOD)
        two = await service.process(second.caregiver_id, ACTOR_ID)

        assert one.check_number == 1001
        assert two.check_number == 1002
        assert one.record.status == "processed"
        assert one.record.processed_by == ACTOR_ID
        assert one.record.check_number == 1001

    async def test_process_without_period_takes_earliest(self, service, worker, add_entries):
        """With two approved periods the older one is processed first."""
        caregiver = await worker()
        await add_entries(forty_five_hour_week(monday=NEXT_PERIOD.start), caregiver)
        await service.approve(caregiver.caregiver_id, NEXT_PERIOD, ACTOR_ID)
        await service.approve(caregiver.caregiver_id, PERIOD, ACTOR_ID)

        result = await service.process(caregiver.caregiver_id, ACTOR_ID)

        assert result.record.period_start == PERIOD.start
        later = await service.repository.get_record(caregiver.caregiver_id, NEXT_PERIOD)
        assert later.status == "approved"

    async def test_process_without_records(self, service, add_caregiver):
        caregiver = await add_caregiver()

        with pytest.raises(RecordNotFoundError):
            await service.process(caregiver.caregiver_id, ACTOR_ID)

    async def test_process_period_not_found(self, service, worker):
        caregiver = await worker()

        with pytest.raises(RecordNotFoundError):
            await service.process(caregiver.caregiver_id, ACTOR_ID, PERIOD)

    async def test_process_replay_keeps_counter(self, session, service, worker):
        """A replayed process raises without consuming another check number."""
        caregiver = await worker()
        await service.approve(caregiver.caregiver_id, PERIOD, ACTOR_ID)
        await service.process(caregiver.caregiver_id, ACTOR_ID)

        with pytest.raises(InvalidStateTransitionError) as exc_info:
            await service.process(caregiver.caregiver_id, ACTOR_ID)

        assert exc_info.value.already_applied is True
        assert await CheckNumberIssuer(session).current_value() == 1001

    async def test_process_draft_rejected(self, session, service, worker):
        """A draft must be approved before it can be processed."""
        caregiver = await worker()
        session.add(
            PayrollRecord(
                caregiver_id=caregiver.caregiver_id,
                period_start=PERIOD.start,
                period_end=PERIOD.end,
                hourly_rate=Decimal("20"),
                overtime_multiplier=Decimal("1.5"),
            )
        )
        await session.flush()

        with pytest.raises(InvalidStateTransitionError):
            await service.process(caregiver.caregiver_id, ACTOR_ID, PERIOD)


class TestMarkPaid:
    """Marking a processed record as paid."""

    async def test_mark_paid(self, service, worker):
        caregiver = await worker()
        await service.approve(caregiver.caregiver_id, PERIOD, ACTOR_ID)
        await service.process(caregiver.caregiver_id, ACTOR_ID)

        record = await service.mark_paid(caregiver.caregiver_id, ACTOR_ID, "direct_deposit")

        assert record.status == "paid"
        assert record.paid_by == ACTOR_ID
        assert record.paid_at is not None
        assert record.payment_method == "direct_deposit"
        assert record.check_number == 1001

    async def test_unknown_payment_method(self, service, worker):
        caregiver = await worker()

        with pytest.raises(PayrollValidationError):
            await service.mark_paid(caregiver.caregiver_id, ACTOR_ID, "bitcoin")

    async def test_mark_paid_requires_processed(self, service, worker):
        """processed cannot be skipped."""
        caregiver = await worker()
        await service.approve(caregiver.caregiver_id, PERIOD, ACTOR_ID)

        with pytest.raises(InvalidStateTransitionError) as exc_info:
            await service.mark_paid(caregiver.caregiver_id, ACTOR_ID, "check")

        assert exc_info.value.from_status == "approved"


class TestCalculate:
    """Calculation returns frozen records as stored and drafts for the rest."""

    async def test_frozen_record_returned_as_stored(self, service, worker, add_entries):
        """Attendance edited after approval does not change the approved snapshot."""
        approved = await worker("Ada")
        pending = await worker("Ben")
        await service.approve(approved.caregiver_id, PERIOD, ACTOR_ID)

        await add_entries([make_entry(utc(2024, 1, 9, 8), 600)], approved)

        records = {r.caregiver_id: r for r in await service.calculate(PERIOD)}

        assert records[approved.caregiver_id].status == "approved"
        assert records[approved.caregiver_id].gross_pay == Decimal("950.00")
        assert records[pending.caregiver_id].status == "draft"
        assert records[pending.caregiver_id].payroll_record_id is None

    async def test_calculate_writes_nothing(self, session, service, worker):
        await worker()

        records = await service.calculate(PERIOD)

        assert len(records) == 1
        count = await session.scalar(select(func.count()).select_from(PayrollRecord))
        assert count == 0

    async def test_list_records(self, service, worker):
        first = await worker("Ada")
        second = await worker("Ben")
        await service.approve(first.caregiver_id, PERIOD, ACTOR_ID)
        await service.approve(second.caregiver_id, PERIOD, ACTOR_ID)
        await service.process(first.caregiver_id, ACTOR_ID)

        assert len(await service.list_records()) == 2
        processed = await service.list_records(PayrollRecordFilter.for_status("processed"))
        assert [r.caregiver_id for r in processed] == [first.caregiver_id]


class TestGetRecord:
    """Lookup of a stored record by ID."""

    async def test_get_record(self, service, worker):
        caregiver = await worker()
        approved = await service.approve(caregiver.caregiver_id, PERIOD, ACTOR_ID)

        record = await service.get_record(approved.payroll_record_id)

        assert record.caregiver_id == caregiver.caregiver_id

    async def test_unknown_record(self, service):
        record_id = uuid4()

        with pytest.raises(RecordNotFoundError) as exc_info:
            await service.get_record(record_id)

        assert exc_info.value.payroll_record_id == record_id


class TestAudit:
    """Audit events are best-effort."""

    async def test_transitions_are_audited(self, session, service, worker):
        caregiver = await worker()
        await service.approve(caregiver.caregiver_id, PERIOD, ACTOR_ID)
        await service.process(caregiver.caregiver_id, ACTOR_ID)
        await service.mark_paid(caregiver.caregiver_id, ACTOR_ID, "cash")

        assert await audit_actions(session) == ["approve", "mark_paid", "process"]

    async def test_failed_audit_write_is_contained(self, session, service, worker):
        """A rejected audit row rolls back alone; the session stays usable."""
        caregiver = await worker()
        record = await service.approve(caregiver.caregiver_id, PERIOD, ACTOR_ID)

        ok = await AuditTrail(session).record("note", None, ACTOR_ID)  # type: ignore[arg-type]

        assert ok is False
        stored = await service.repository.get_record(caregiver.caregiver_id, PERIOD)
        assert stored.payroll_record_id == record.payroll_record_id
        assert await audit_actions(session) == ["approve"]


class TestConcurrentTransitions:
    """Two sessions racing on the same record."""

    async def _approved_record(self, session_factory) -> PayrollRecord:
        async with session_factory() as setup:
            caregiver = Caregiver(first_name="Ada", last_name="Okafor", default_hourly_rate=Decimal("20.00"))
            setup.add(caregiver)
            await setup.flush()
            for entry in forty_five_hour_week(caregiver.caregiver_id):
                setup.add(entry)
            await setup.flush()
            record = await PayrollService.for_session(setup, PayrollConfig()).approve(
                caregiver.caregiver_id, PERIOD, ACTOR_ID
            )
            await setup.commit()
        return record

    async def test_simultaneous_process_calls(self, session_factory):
        """Two processors running at once: one check number, one rejected transition."""
        record = await self._approved_record(session_factory)

        async def process_in_own_session():
            async with session_factory() as session:
                result = await PayrollService.for_session(session, PayrollConfig()).process(
                    record.caregiver_id, ACTOR_ID, PERIOD
                )
                await session.commit()
                return result

        outcomes = await asyncio.gather(
            process_in_own_session(), process_in_own_session(), return_exceptions=True
        )

        checks = [o.check_number for o in outcomes if not isinstance(o, BaseException)]
        errors = [o for o in outcomes if isinstance(o, BaseException)]
        assert checks == [1001]
        assert len(errors) == 1
        assert isinstance(errors[0], (InvalidStateTransitionError, ConcurrencyConflictError))

        async with session_factory() as check:
            assert await CheckNumberIssuer(check).current_value() == 1001

    async def test_losing_process_issues_no_check(self, session_factory):
        """Only the first processor claims the record and consumes a number."""
        record = await self._approved_record(session_factory)

        async with session_factory() as session_a:
            repo_a = SqlAlchemyPayrollRepository(session_a)
            stale = await repo_a.get_by_id(record.payroll_record_id)
            assert stale.status == "approved"
            await session_a.commit()

            async with session_factory() as session_b:
                result = await PayrollService.for_session(session_b, PayrollConfig()).process(
                    record.caregiver_id, ACTOR_ID, PERIOD
                )
                await session_b.commit()
            assert result.check_number == 1001

            # A still believes the record is approved
            with pytest.raises(ConcurrencyConflictError):
                await repo_a.advance_status(
                    record.payroll_record_id, "approved", "processed", {"processed_by": ACTOR_ID}
                )
            await session_a.rollback()

            session_a.expire_all()
            with pytest.raises(InvalidStateTransitionError) as exc_info:
                await PayrollService.for_session(session_a, PayrollConfig()).process(
                    record.caregiver_id, ACTOR_ID, PERIOD
                )
            assert exc_info.value.already_applied is True
            await session_a.rollback()

        async with session_factory() as check:
            assert await CheckNumberIssuer(check).current_value() == 1001
            issued = await check.scalar(
                select(func.count()).select_from(PayrollRecord).where(PayrollRecord.check_number.is_not(None))
            )
            assert issued == 1

    async def test_duplicate_insert_conflicts(self, session_factory):
        """Two approvals racing to create the same record: the second insert fails."""
        async with session_factory() as session_a:
            caregiver = Caregiver(first_name="Ada", last_name="Okafor", default_hourly_rate=Decimal("20.00"))
            session_a.add(caregiver)
            await session_a.flush()
            for entry in forty_five_hour_week(caregiver.caregiver_id):
                session_a.add(entry)
            await session_a.commit()

            service_a = PayrollService.for_session(session_a, PayrollConfig())
            draft = await service_a.builder.build_for_caregiver(caregiver, PERIOD)
            await session_a.commit()

            async with session_factory() as session_b:
                await PayrollService.for_session(session_b, PayrollConfig()).approve(
                    caregiver.caregiver_id, PERIOD, ACTOR_ID
                )
                await session_b.commit()

            draft.status = "approved"
            with pytest.raises(ConcurrencyConflictError):
                await service_a.repository.insert(draft)
            await session_a.rollback()

        async with session_factory() as check:
            count = await check.scalar(select(func.count()).select_from(PayrollRecord))
            assert count == 1
