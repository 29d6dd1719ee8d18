"""Type definitions for the pay calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID
from zoneinfo import ZoneInfo

from caregiver_payroll.exceptions import PayrollValidationError

CENT = Decimal("0.01")
RATE_PRECISION = Decimal("0.0001")
MINUTES_PER_HOUR = Decimal("60")


def to_cents(amount: Decimal) -> Decimal:
    """Round a money amount half-up to cents."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def minutes_to_hours(minutes: int) -> Decimal:
    """Convert whole minutes to hours at two decimals."""
    return (Decimal(minutes) / MINUTES_PER_HOUR).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PayPeriod:
    """Inclusive date range a payroll record covers."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if not isinstance(self.start, date) or not isinstance(self.end, date):
            raise PayrollValidationError("Pay period start and end dates are required")
        if isinstance(self.start, datetime) or isinstance(self.end, datetime):
            raise PayrollValidationError("Pay period bounds must be dates, not timestamps")
        if self.end < self.start:
            raise PayrollValidationError(
                f"Pay period end {self.end} is before start {self.start}"
            )

    def window(self, tz: ZoneInfo) -> tuple[datetime, datetime]:
        """Aggregation window in agency local time: [start 00:00, end + 1 day 00:00)."""
        lower = datetime.combine(self.start, time.min, tzinfo=tz)
        upper = datetime.combine(self.end + timedelta(days=1), time.min, tzinfo=tz)
        return lower, upper

    def covers(self, start: date, end: date) -> bool:
        """True when [start, end] lies fully inside the period."""
        return self.start <= start and end <= self.end

    def __str__(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat()}"


@dataclass(frozen=True)
class ShiftMinutes:
    """Worked minutes of one complete time entry, tagged in agency local time."""

    time_entry_id: UUID
    client_id: UUID
    local_start: datetime
    minutes: int
    is_weekend: bool = False
    is_night: bool = False

    @property
    def iso_week(self) -> tuple[int, int]:
        iso = self.local_start.isocalendar()
        return iso[0], iso[1]


@dataclass
class AggregatedTime:
    """Per-caregiver attendance totals for one period."""

    total_minutes: int = 0
    weekend_minutes: int = 0
    night_minutes: int = 0
    shifts: list[ShiftMinutes] = field(default_factory=list)

    @property
    def shift_count(self) -> int:
        return len(self.shifts)


@dataclass(frozen=True)
class DifferentialTotals:
    """Regular/overtime split plus differential tagging for one caregiver and period.

    ``regular_minutes + overtime_minutes`` always equals the aggregated total.
    """

    caregiver_id: UUID
    regular_minutes: int
    overtime_minutes: int
    weekend_minutes: int
    night_minutes: int
    overtime_multiplier: Decimal
    pto_hours: Decimal = Decimal("0")
    mileage: Decimal = Decimal("0")

    @property
    def total_minutes(self) -> int:
        return self.regular_minutes + self.overtime_minutes

    @property
    def regular_hours(self) -> Decimal:
        return minutes_to_hours(self.regular_minutes)

    @property
    def overtime_hours(self) -> Decimal:
        return minutes_to_hours(self.overtime_minutes)

    @property
    def weekend_hours(self) -> Decimal:
        return minutes_to_hours(self.weekend_minutes)

    @property
    def night_hours(self) -> Decimal:
        return minutes_to_hours(self.night_minutes)


@dataclass(frozen=True)
class TaxWithholding:
    """Statutory withholding for one period's gross pay."""

    federal: Decimal = Decimal("0.00")
    social_security: Decimal = Decimal("0.00")
    medicare: Decimal = Decimal("0.00")

    @property
    def total(self) -> Decimal:
        return self.federal + self.social_security + self.medicare


@dataclass(frozen=True)
class ResolvedRate:
    """Rate snapshot for one caregiver and period."""

    base_rate: Decimal
    effective_rate: Decimal
    overtime_multiplier: Decimal
    source: str  # "pay_rate" | "caregiver_default" | "config_default"
