"""Pay rate resolution for a caregiver and period."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from caregiver_payroll.calculators.types import RATE_PRECISION, PayPeriod, ResolvedRate, ShiftMinutes
from caregiver_payroll.payroll_config import PayrollConfig

if TYPE_CHECKING:
    from caregiver_payroll.models import Caregiver, CaregiverPayRate


class RateResolver:
    """Resolves the hourly rate snapshot for one caregiver and period.

    Base rate selection priority:
    1. Effective-dated pay rate active on the period end (latest effective date wins)
    2. Caregiver's default hourly rate
    3. Configured default hourly rate

    Per-client rates replace the base rate for shifts with that client. When
    shifts carry different rates the snapshot rate is the minutes-weighted
    average (the regular rate of pay), rounded to four decimals.
    """

    def __init__(self, config: PayrollConfig):
        self.config = config

    def base_rate(
        self,
        caregiver: Caregiver,
        pay_rates: Sequence[CaregiverPayRate],
        as_of_date: date,
    ) -> tuple[Decimal, str]:
        """Return (rate, source) for the caregiver on the given date."""
        active = [r for r in pay_rates if r.is_active_on(as_of_date)]
        if active:
            latest = max(active, key=lambda r: r.effective_date)
            return Decimal(latest.hourly_rate), "pay_rate"
        if caregiver.default_hourly_rate is not None:
            return Decimal(caregiver.default_hourly_rate), "caregiver_default"
        return self.config.default_hourly_rate, "config_default"

    def overtime_multiplier(self, caregiver: Caregiver) -> Decimal:
        if caregiver.overtime_multiplier is not None:
            return Decimal(caregiver.overtime_multiplier)
        return self.config.overtime.multiplier

    def resolve(
        self,
        caregiver: Caregiver,
        period: PayPeriod,
        pay_rates: Sequence[CaregiverPayRate],
        client_rates: Mapping[UUID, Decimal],
        shifts: Sequence[ShiftMinutes],
    ) -> ResolvedRate:
        """Resolve the rate snapshot used for every pay figure of the period."""
        base, source = self.base_rate(caregiver, pay_rates, period.end)

        total_minutes = sum(s.minutes for s in shifts)
        if total_minutes == 0:
            effective = base
        else:
            weighted = sum(
                Decimal(s.minutes) * Decimal(client_rates.get(s.client_id, base)) for s in shifts
            )
            effective = weighted / Decimal(total_minutes)

        return ResolvedRate(
            base_rate=base,
            effective_rate=effective.quantize(RATE_PRECISION, rounding=ROUND_HALF_UP),
            overtime_multiplier=self.overtime_multiplier(caregiver),
            source=source,
        )
