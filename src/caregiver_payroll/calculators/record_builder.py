"""Assembly of draft payroll records from attendance, time off and mileage."""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Mapping, Sequence
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from caregiver_payroll.calculators.differential import DifferentialCalculator
from caregiver_payroll.calculators.rate_resolver import RateResolver
from caregiver_payroll.calculators.tax_calculator import TaxWithholdingCalculator
from caregiver_payroll.calculators.time_aggregator import TimeEntryAggregator
from caregiver_payroll.calculators.types import CENT, PayPeriod, to_cents
from caregiver_payroll.models import PayrollRecord
from caregiver_payroll.payroll_config import PayrollConfig

if TYPE_CHECKING:
    from caregiver_payroll.models import Caregiver, CaregiverPayRate, TimeEntry, TimeOffRequest
    from caregiver_payroll.repositories.base import (
        AttendanceStore,
        CaregiverDirectory,
        MileageStore,
        TimeOffStore,
    )

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def paid_time_off_hours(requests: Iterable[TimeOffRequest], period: PayPeriod) -> Decimal:
    """Hours of approved, paid time off whose whole range lies inside the period."""
    total = ZERO
    for request in requests:
        if request.status != "approved" or request.type == "unpaid":
            continue
        if not period.covers(request.start_date, request.end_date):
            continue
        total += Decimal(request.hours)
    return total


class PayrollRecordBuilder:
    """Builds draft PayrollRecords.

    Pipeline per caregiver:
    1. Resolve the rate snapshot (RateResolver)
    2. Aggregate complete time entries (TimeEntryAggregator)
    3. Split regular/overtime (DifferentialCalculator)
    4. Price hours and PTO, gross = regular + overtime + PTO + bonuses
    5. Withholding (TaxWithholdingCalculator) and net pay

    Caregivers with no worked minutes and no paid time off produce no record.
    Drafts are transient; nothing here adds them to a session.
    """

    def __init__(
        self,
        config: PayrollConfig,
        caregivers: CaregiverDirectory,
        attendance: AttendanceStore,
        time_off: TimeOffStore,
        mileage: MileageStore,
    ):
        self.config = config
        self.caregivers = caregivers
        self.attendance = attendance
        self.time_off = time_off
        self.mileage = mileage

        self.aggregator = TimeEntryAggregator(config.differential, config.timezone)
        self.differential = DifferentialCalculator(config.overtime)
        self.tax_calculator = TaxWithholdingCalculator(config.tax)
        self.rate_resolver = RateResolver(config)

    async def build_for_period(
        self, period: PayPeriod, exclude: Collection[UUID] = ()
    ) -> list[PayrollRecord]:
        """Drafts for every active caregiver with payable activity in the period.

        Caregivers in ``exclude`` are skipped.
        """
        records: list[PayrollRecord] = []
        for caregiver in await self.caregivers.list_caregivers():
            if caregiver.caregiver_id in exclude:
                continue
            record = await self.build_for_caregiver(caregiver, period)
            if record is not None:
                records.append(record)
        logger.info("Calculated %d payroll drafts for period %s", len(records), period)
        return records

    async def build_for_caregiver(self, caregiver: Caregiver, period: PayPeriod) -> PayrollRecord | None:
        """Draft for one caregiver, or None when there is nothing to pay."""
        caregiver_id = caregiver.caregiver_id
        entries = await self.attendance.list_time_entries(caregiver_id, period, self.config.timezone)
        requests = await self.time_off.list_time_off(caregiver_id, period)
        miles = await self.mileage.total_miles(caregiver_id, period)
        pay_rates = await self.caregivers.get_pay_rates(caregiver_id)
        client_rates = await self.caregivers.get_client_rates(caregiver_id)

        return self.compute(
            caregiver,
            period,
            entries=entries,
            time_off=requests,
            mileage=miles,
            pay_rates=pay_rates,
            client_rates=client_rates,
        )

    def compute(
        self,
        caregiver: Caregiver,
        period: PayPeriod,
        entries: Iterable[TimeEntry],
        time_off: Iterable[TimeOffRequest] = (),
        mileage: Decimal = ZERO,
        pay_rates: Sequence[CaregiverPayRate] = (),
        client_rates: Mapping[UUID, Decimal] | None = None,
    ) -> PayrollRecord | None:
        """Compute a draft from already-loaded inputs."""
        aggregated = self.aggregator.aggregate(entries, period)
        pto_hours = paid_time_off_hours(time_off, period)

        if aggregated.total_minutes == 0 and pto_hours == 0:
            logger.debug("Caregiver %s has no payable activity in %s", caregiver.caregiver_id, period)
            return None

        rate = self.rate_resolver.resolve(
            caregiver, period, pay_rates, client_rates or {}, aggregated.shifts
        )
        totals = self.differential.calculate(
            caregiver.caregiver_id,
            aggregated,
            overtime_multiplier=rate.overtime_multiplier,
            pto_hours=pto_hours,
            mileage=mileage,
        )

        hourly = rate.effective_rate
        regular_pay = to_cents(Decimal(totals.regular_minutes) * hourly / 60)
        overtime_pay = to_cents(
            Decimal(totals.overtime_minutes) * hourly * totals.overtime_multiplier / 60
        )
        pto_pay = to_cents(totals.pto_hours * hourly)
        bonuses = to_cents(ZERO)
        gross_pay = regular_pay + overtime_pay + pto_pay + bonuses

        withholding = self.tax_calculator.calculate(gross_pay)
        other_deductions = to_cents(ZERO)
        total_deductions = withholding.total + other_deductions
        net_pay = gross_pay - total_deductions

        regular_hours = totals.regular_hours
        overtime_hours = totals.overtime_hours

        return PayrollRecord(
            caregiver_id=caregiver.caregiver_id,
            period_start=period.start,
            period_end=period.end,
            hourly_rate=hourly,
            overtime_multiplier=totals.overtime_multiplier,
            regular_hours=regular_hours,
            overtime_hours=overtime_hours,
            total_hours=regular_hours + overtime_hours,
            weekend_hours=totals.weekend_hours,
            night_hours=totals.night_hours,
            pto_hours=totals.pto_hours.quantize(CENT),
            mileage=totals.mileage.quantize(CENT),
            shift_count=aggregated.shift_count,
            regular_pay=regular_pay,
            overtime_pay=overtime_pay,
            pto_pay=pto_pay,
            bonuses=bonuses,
            gross_pay=gross_pay,
            federal_tax=withholding.federal,
            social_security_tax=withholding.social_security,
            medicare_tax=withholding.medicare,
            other_deductions=other_deductions,
            total_deductions=total_deductions,
            net_pay=net_pay,
            status="draft",
        )
