"""Composable payroll record filter."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.sql.elements import ColumnElement

from caregiver_payroll.exceptions import PayrollValidationError
from caregiver_payroll.models import PayrollRecord

PAYROLL_STATUSES = ("draft", "approved", "processed", "paid")


@dataclass(frozen=True)
class PayrollRecordFilter:
    """Optional predicates for listing payroll records.

    Unset fields place no constraint. Filters combine with ``&``:

        PayrollRecordFilter(status="approved") & PayrollRecordFilter(period_from=date(2024, 1, 1))
    """

    statuses: tuple[str, ...] | None = None
    caregiver_id: UUID | None = None
    period_from: date | None = None  # period_start >= period_from
    period_to: date | None = None  # period_end <= period_to
    has_check_number: bool | None = None
    limit: int | None = None

    def __post_init__(self) -> None:
        if self.statuses is not None:
            unknown = [s for s in self.statuses if s not in PAYROLL_STATUSES]
            if unknown:
                raise PayrollValidationError(f"Unknown payroll status: {', '.join(unknown)}")
        if self.period_from and self.period_to and self.period_to < self.period_from:
            raise PayrollValidationError("period_to is before period_from")
        if self.limit is not None and self.limit < 1:
            raise PayrollValidationError("limit must be positive")

    @classmethod
    def for_status(cls, *statuses: str, **kwargs: Any) -> PayrollRecordFilter:
        return cls(statuses=tuple(statuses), **kwargs)

    def __and__(self, other: PayrollRecordFilter) -> PayrollRecordFilter:
        changes: dict[str, Any] = {}
        if other.statuses is not None:
            if self.statuses is None:
                changes["statuses"] = other.statuses
            else:
                changes["statuses"] = tuple(s for s in self.statuses if s in other.statuses)
        for name in ("caregiver_id", "has_check_number"):
            value = getattr(other, name)
            if value is not None:
                if getattr(self, name) is not None and getattr(self, name) != value:
                    raise PayrollValidationError(f"Conflicting values for {name}")
                changes[name] = value
        if other.period_from is not None:
            changes["period_from"] = max(filter(None, (self.period_from, other.period_from)))
        if other.period_to is not None:
            changes["period_to"] = min(filter(None, (self.period_to, other.period_to)))
        if other.limit is not None:
            changes["limit"] = min(filter(None, (self.limit, other.limit)))
        return replace(self, **changes)

    def clauses(self) -> list[ColumnElement[bool]]:
        """SQLAlchemy WHERE clauses for the set predicates."""
        clauses: list[ColumnElement[bool]] = []
        if self.statuses is not None:
            clauses.append(PayrollRecord.status.in_(self.statuses))
        if self.caregiver_id is not None:
            clauses.append(PayrollRecord.caregiver_id == self.caregiver_id)
        if self.period_from is not None:
            clauses.append(PayrollRecord.period_start >= self.period_from)
        if self.period_to is not None:
            clauses.append(PayrollRecord.period_end <= self.period_to)
        if self.has_check_number is True:
            clauses.append(PayrollRecord.check_number.is_not(None))
        elif self.has_check_number is False:
            clauses.append(PayrollRecord.check_number.is_(None))
        return clauses

    def to_select(self) -> Select[tuple[PayrollRecord]]:
        stmt = (
            select(PayrollRecord)
            .where(*self.clauses())
            .order_by(
                PayrollRecord.period_start.desc(),
                PayrollRecord.caregiver_id,
            )
        )
        if self.limit is not None:
            stmt = stmt.limit(self.limit)
        return stmt
