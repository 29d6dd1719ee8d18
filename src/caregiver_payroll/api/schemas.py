"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ============================================================================
# Requests
# ============================================================================


class PeriodRequest(BaseModel):
    """Pay period bounds, both inclusive."""

    period_start: date
    period_end: date

    @model_validator(mode="after")
    def check_order(self) -> "PeriodRequest":
        if self.period_end < self.period_start:
            raise ValueError("period_end must not be before period_start")
        return self


class OptionalPeriodRequest(BaseModel):
    """Period is optional; without it the caregiver's oldest eligible record is used."""

    period_start: date | None = None
    period_end: date | None = None

    @model_validator(mode="after")
    def check_pair(self) -> "OptionalPeriodRequest":
        if (self.period_start is None) != (self.period_end is None):
            raise ValueError("period_start and period_end must be given together")
        if self.period_start and self.period_end and self.period_end < self.period_start:
            raise ValueError("period_end must not be before period_start")
        return self


class MarkPaidRequest(OptionalPeriodRequest):
    payment_method: Literal["check", "direct_deposit", "cash"] = "check"


# ============================================================================
# Responses
# ============================================================================


class PayrollRecordResponse(BaseModel):
    """Schema for payroll record response. Drafts have no id."""

    model_config = ConfigDict(from_attributes=True)

    payroll_record_id: UUID | None = None
    caregiver_id: UUID
    period_start: date
    period_end: date
    status: str

    hourly_rate: Decimal
    overtime_multiplier: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal
    total_hours: Decimal
    weekend_hours: Decimal
    night_hours: Decimal
    pto_hours: Decimal
    mileage: Decimal
    shift_count: int

    regular_pay: Decimal
    overtime_pay: Decimal
    pto_pay: Decimal
    bonuses: Decimal
    gross_pay: Decimal
    federal_tax: Decimal
    social_security_tax: Decimal
    medicare_tax: Decimal
    other_deductions: Decimal
    total_deductions: Decimal
    net_pay: Decimal

    approved_by: UUID | None = None
    approved_at: datetime | None = None
    processed_by: UUID | None = None
    processed_at: datetime | None = None
    paid_by: UUID | None = None
    paid_at: datetime | None = None
    payment_method: str | None = None
    check_number: int | None = None


class PayrollListResponse(BaseModel):
    items: list[PayrollRecordResponse]
    total: int


class CalculateResponse(BaseModel):
    period_start: date
    period_end: date
    records: list[PayrollRecordResponse]
    total_gross: Decimal = Field(description="Sum of gross pay over all records")
    total_net: Decimal


class ProcessResponse(BaseModel):
    record: PayrollRecordResponse
    check_number: int


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    code: str
