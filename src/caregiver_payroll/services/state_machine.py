"""Payroll record state machine with transition validation."""

from __future__ import annotations

from enum import Enum

from caregiver_payroll.exceptions import InvalidStateTransitionError


class PayrollStatus(str, Enum):
    """Payroll record status values."""

    DRAFT = "draft"
    APPROVED = "approved"
    PROCESSED = "processed"
    PAID = "paid"


class PayrollStateMachine:
    """State machine for payroll record status transitions.

    Allowed transitions (strictly forward, none skipped):
    - (no record) → approved
    - draft → approved
    - approved → processed
    - processed → paid
    """

    # Define valid transitions: {from_status: [allowed_to_statuses]}
    VALID_TRANSITIONS: dict[str | None, list[str]] = {
        None: [PayrollStatus.APPROVED],
        PayrollStatus.DRAFT: [PayrollStatus.APPROVED],
        PayrollStatus.APPROVED: [PayrollStatus.PROCESSED],
        PayrollStatus.PROCESSED: [PayrollStatus.PAID],
        PayrollStatus.PAID: [],  # Terminal state
    }

    # Statuses whose hour/rate snapshot is frozen
    SNAPSHOT_FROZEN = {
        PayrollStatus.APPROVED,
        PayrollStatus.PROCESSED,
        PayrollStatus.PAID,
    }

    ORDER = [
        PayrollStatus.DRAFT,
        PayrollStatus.APPROVED,
        PayrollStatus.PROCESSED,
        PayrollStatus.PAID,
    ]

    @classmethod
    def can_transition(cls, from_status: str | None, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str | None, to_status: str) -> None:
        """Validate a transition, raising InvalidStateTransitionError if invalid."""
        if from_status is not None:
            from_status = PayrollStatus(from_status).value
        to_status = PayrollStatus(to_status).value
        if not cls.can_transition(from_status, to_status):
            reason = None
            if from_status == to_status:
                reason = "already applied"
            elif from_status is not None and cls.rank(from_status) > cls.rank(to_status):
                reason = "status is already past the target"
            raise InvalidStateTransitionError(from_status, to_status, reason)

    @classmethod
    def predecessor(cls, to_status: str) -> str:
        """The status a record must be in for a transition into to_status."""
        index = cls.rank(to_status)
        if index == 0:
            raise ValueError(f"'{to_status}' has no predecessor")
        return cls.ORDER[index - 1].value

    @classmethod
    def rank(cls, status: str) -> int:
        return cls.ORDER.index(PayrollStatus(status))

    @classmethod
    def is_snapshot_frozen(cls, status: str) -> bool:
        """Check if a record's snapshot must be returned as stored."""
        return status in cls.SNAPSHOT_FROZEN
