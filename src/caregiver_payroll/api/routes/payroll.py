"""Payroll API endpoints."""

from datetime import date
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Body, Path, Query, status

from caregiver_payroll.api.dependencies import ActorId, DbSession, Service
from caregiver_payroll.api.schemas import (
    CalculateResponse,
    ErrorResponse,
    MarkPaidRequest,
    OptionalPeriodRequest,
    PayrollListResponse,
    PayrollRecordResponse,
    PeriodRequest,
    ProcessResponse,
)
from caregiver_payroll.calculators.types import PayPeriod
from caregiver_payroll.repositories import PayrollRecordFilter

router = APIRouter(prefix="/payroll", tags=["payroll"])

TRANSITION_ERRORS = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
}


def _optional_period(payload: OptionalPeriodRequest | None) -> PayPeriod | None:
    if payload is None or payload.period_start is None or payload.period_end is None:
        return None
    return PayPeriod(payload.period_start, payload.period_end)


@router.post(
    "/calculate",
    response_model=CalculateResponse,
    responses={422: {"model": ErrorResponse}},
)
async def calculate_payroll(service: Service, payload: PeriodRequest) -> CalculateResponse:
    """Compute payroll for every caregiver with payable activity. Writes nothing."""
    period = PayPeriod(payload.period_start, payload.period_end)
    records = await service.calculate(period)
    return CalculateResponse(
        period_start=period.start,
        period_end=period.end,
        records=[PayrollRecordResponse.model_validate(r) for r in records],
        total_gross=sum((r.gross_pay for r in records), Decimal("0.00")),
        total_net=sum((r.net_pay for r in records), Decimal("0.00")),
    )


@router.get("", response_model=PayrollListResponse)
async def list_payroll(
    service: Service,
    status_filter: Annotated[list[str] | None, Query(alias="status")] = None,
    caregiver_id: UUID | None = None,
    period_from: date | None = None,
    period_to: date | None = None,
    has_check_number: bool | None = None,
    limit: Annotated[int | None, Query(ge=1, le=1000)] = None,
) -> PayrollListResponse:
    """List stored payroll records, newest period first."""
    record_filter = PayrollRecordFilter(
        statuses=tuple(status_filter) if status_filter else None,
        caregiver_id=caregiver_id,
        period_from=period_from,
        period_to=period_to,
        has_check_number=has_check_number,
        limit=limit,
    )
    records = await service.list_records(record_filter)
    return PayrollListResponse(
        items=[PayrollRecordResponse.model_validate(r) for r in records],
        total=len(records),
    )


@router.get(
    "/{payroll_record_id}",
    response_model=PayrollRecordResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_payroll_record(
    service: Service,
    payroll_record_id: Annotated[UUID, Path()],
) -> PayrollRecordResponse:
    """Get a stored payroll record by ID."""
    record = await service.get_record(payroll_record_id)
    return PayrollRecordResponse.model_validate(record)


@router.post(
    "/{caregiver_id}/approve",
    response_model=PayrollRecordResponse,
    status_code=status.HTTP_200_OK,
    responses=TRANSITION_ERRORS,
)
async def approve_payroll(
    db: DbSession,
    service: Service,
    actor_id: ActorId,
    caregiver_id: Annotated[UUID, Path()],
    payload: PeriodRequest,
) -> PayrollRecordResponse:
    """Freeze and approve the caregiver's payroll for the period."""
    period = PayPeriod(payload.period_start, payload.period_end)
    record = await service.approve(caregiver_id, period, actor_id)
    await db.commit()
    return PayrollRecordResponse.model_validate(record)


@router.post(
    "/{caregiver_id}/process",
    response_model=ProcessResponse,
    responses=TRANSITION_ERRORS,
)
async def process_payroll(
    db: DbSession,
    service: Service,
    actor_id: ActorId,
    caregiver_id: Annotated[UUID, Path()],
    payload: Annotated[OptionalPeriodRequest | None, Body()] = None,
) -> ProcessResponse:
    """Process an approved record and issue its check number."""
    result = await service.process(caregiver_id, actor_id, _optional_period(payload))
    await db.commit()
    return ProcessResponse(
        record=PayrollRecordResponse.model_validate(result.record),
        check_number=result.check_number,
    )


@router.post(
    "/{caregiver_id}/mark-paid",
    response_model=PayrollRecordResponse,
    responses=TRANSITION_ERRORS,
)
async def mark_payroll_paid(
    db: DbSession,
    service: Service,
    actor_id: ActorId,
    caregiver_id: Annotated[UUID, Path()],
    payload: Annotated[MarkPaidRequest | None, Body()] = None,
) -> PayrollRecordResponse:
    """Mark a processed record as paid."""
    payload = payload or MarkPaidRequest()
    record = await service.mark_paid(
        caregiver_id, actor_id, payload.payment_method, _optional_period(payload)
    )
    await db.commit()
    return PayrollRecordResponse.model_validate(record)
