"""Attendance aggregation into period minute totals."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from caregiver_payroll.calculators.types import AggregatedTime, PayPeriod, ShiftMinutes
from caregiver_payroll.exceptions import ComputationError
from caregiver_payroll.payroll_config import DifferentialConfig

if TYPE_CHECKING:
    from caregiver_payroll.models import TimeEntry

logger = logging.getLogger(__name__)


def _as_aware(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; they were stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TimeEntryAggregator:
    """Sums a caregiver's completed time entries into period totals.

    Weekend and night tags are decided by the entry's start instant in the
    agency time zone. Tagged minutes are subsets of the total, never extra
    hours. Entries that are incomplete or carry no duration contribute
    nothing.
    """

    def __init__(self, differential: DifferentialConfig, tz: ZoneInfo):
        self.differential = differential
        self.tz = tz

    def aggregate(self, entries: Iterable[TimeEntry], period: PayPeriod) -> AggregatedTime:
        """Aggregate entries whose start falls inside the period window.

        Raises:
            ComputationError: If an entry has a negative duration or ends
                before it starts.
        """
        lower, upper = period.window(self.tz)
        result = AggregatedTime()

        for entry in entries:
            if not entry.is_complete or entry.duration_minutes is None:
                continue
            self._validate(entry)

            local_start = _as_aware(entry.start_time).astimezone(self.tz)
            if not lower <= local_start < upper:
                continue

            shift = ShiftMinutes(
                time_entry_id=entry.time_entry_id,
                client_id=entry.client_id,
                local_start=local_start,
                minutes=int(entry.duration_minutes),
                is_weekend=local_start.weekday() in self.differential.weekend_days,
                is_night=self.differential.is_night_hour(local_start.hour),
            )
            result.shifts.append(shift)
            result.total_minutes += shift.minutes
            if shift.is_weekend:
                result.weekend_minutes += shift.minutes
            if shift.is_night:
                result.night_minutes += shift.minutes

        result.shifts.sort(key=lambda s: (s.local_start, str(s.time_entry_id)))
        return result

    def _validate(self, entry: TimeEntry) -> None:
        if entry.duration_minutes < 0:
            logger.warning(
                "Time entry %s has negative duration %s",
                entry.time_entry_id,
                entry.duration_minutes,
            )
            raise ComputationError(
                f"Time entry {entry.time_entry_id} has negative duration "
                f"({entry.duration_minutes} minutes)",
                time_entry_id=entry.time_entry_id,
            )
        if entry.end_time is not None and _as_aware(entry.end_time) < _as_aware(entry.start_time):
            raise ComputationError(
                f"Time entry {entry.time_entry_id} ends before it starts",
                time_entry_id=entry.time_entry_id,
            )
