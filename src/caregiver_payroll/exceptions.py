"""Typed exceptions for payroll computation and approval.

Every exception carries a machine-readable ``code`` so the API layer can map
it to a response without parsing messages.

    PayrollError
    +-- PayrollValidationError       bad period bounds, unknown payment method
    +-- RecordNotFoundError          transition needs a record that is absent
    +-- InvalidStateTransitionError  transition attempted from the wrong status
    +-- ConcurrencyConflictError     a concurrent transition won the race
    +-- ComputationError             malformed attendance data
"""

from __future__ import annotations

from datetime import date
from uuid import UUID


class PayrollError(Exception):
    """Base class for all payroll engine errors."""

    code: str = "PAYROLL_ERROR"


class PayrollValidationError(PayrollError):
    """Raised when caller input is missing or invalid."""

    code = "VALIDATION_ERROR"


class RecordNotFoundError(PayrollError):
    """Raised when a transition requires a payroll record that does not exist."""

    code = "NOT_FOUND"

    def __init__(
        self,
        caregiver_id: UUID | None = None,
        period_start: date | None = None,
        period_end: date | None = None,
        *,
        payroll_record_id: UUID | None = None,
    ):
        self.caregiver_id = caregiver_id
        self.period_start = period_start
        self.period_end = period_end
        self.payroll_record_id = payroll_record_id
        if payroll_record_id is not None:
            msg = f"Payroll record {payroll_record_id} not found"
        else:
            msg = f"No payroll record for caregiver {caregiver_id}"
            if period_start is not None:
                msg += f" in period {period_start} to {period_end}"
        super().__init__(msg)


class InvalidStateTransitionError(PayrollError):
    """Raised when a transition is attempted from a status other than its predecessor."""

    code = "INVALID_STATE_TRANSITION"

    def __init__(self, from_status: str | None, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status or 'none'}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)

    @property
    def already_applied(self) -> bool:
        """True when the record is already in the target status (a replayed request)."""
        return self.from_status == self.to_status


class ConcurrencyConflictError(PayrollError):
    """Raised when the expected-status precondition of a transition no longer holds."""

    code = "CONCURRENCY_CONFLICT"

    def __init__(self, record_id: UUID | None, expected_status: str | None, detail: str | None = None):
        self.record_id = record_id
        self.expected_status = expected_status
        msg = f"Payroll record {record_id} changed concurrently"
        if expected_status:
            msg += f" (expected status '{expected_status}')"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class ComputationError(PayrollError):
    """Raised when attendance data cannot be aggregated (negative or inverted durations)."""

    code = "COMPUTATION_ERROR"

    def __init__(self, message: str, time_entry_id: UUID | None = None):
        self.time_entry_id = time_entry_id
        super().__init__(message)
