"""Regular/overtime allocation."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from uuid import UUID

from caregiver_payroll.calculators.types import AggregatedTime, DifferentialTotals, ShiftMinutes
from caregiver_payroll.payroll_config import OvertimeConfig


class DifferentialCalculator:
    """Splits chronologically ordered shifts into regular and overtime minutes.

    A running regular-minute accumulator is kept per window. With the default
    ``window="week"`` the accumulator resets at every ISO calendar week
    boundary (each shift counts toward the week it starts in); with
    ``window="period"`` one threshold covers the whole pay period. A shift
    that crosses the threshold is split at the boundary.
    """

    def __init__(self, config: OvertimeConfig):
        self.config = config

    def split(self, shifts: Sequence[ShiftMinutes]) -> tuple[int, int]:
        """Return (regular_minutes, overtime_minutes) for the given shifts."""
        threshold = self.config.threshold_minutes
        accumulated: dict[tuple[int, int] | None, int] = {}
        regular = 0
        overtime = 0

        for shift in sorted(shifts, key=lambda s: s.local_start):
            key = shift.iso_week if self.config.window == "week" else None
            used = accumulated.get(key, 0)
            capacity = max(0, threshold - used)
            regular_part = min(shift.minutes, capacity)
            accumulated[key] = used + regular_part
            regular += regular_part
            overtime += shift.minutes - regular_part

        return regular, overtime

    def calculate(
        self,
        caregiver_id: UUID,
        aggregated: AggregatedTime,
        overtime_multiplier: Decimal | None = None,
        pto_hours: Decimal = Decimal("0"),
        mileage: Decimal = Decimal("0"),
    ) -> DifferentialTotals:
        """Build the differential totals for one caregiver and period.

        ``overtime_multiplier`` overrides the configured multiplier when given.
        """
        regular, overtime = self.split(aggregated.shifts)
        return DifferentialTotals(
            caregiver_id=caregiver_id,
            regular_minutes=regular,
            overtime_minutes=overtime,
            weekend_minutes=aggregated.weekend_minutes,
            night_minutes=aggregated.night_minutes,
            overtime_multiplier=(
                overtime_multiplier if overtime_multiplier is not None else self.config.multiplier
            ),
            pto_hours=pto_hours,
            mileage=mileage,
        )
