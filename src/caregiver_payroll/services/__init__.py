"""Payroll workflow services."""

from caregiver_payroll.services.approval_workflow import (
    PAYMENT_METHODS,
    ApprovalWorkflow,
    ProcessResult,
)
from caregiver_payroll.services.audit import AuditTrail
from caregiver_payroll.services.check_numbers import CheckNumberIssuer
from caregiver_payroll.services.payroll_service import PayrollService
from caregiver_payroll.services.state_machine import PayrollStateMachine, PayrollStatus

__all__ = [
    "PAYMENT_METHODS",
    "ApprovalWorkflow",
    "AuditTrail",
    "CheckNumberIssuer",
    "PayrollService",
    "PayrollStateMachine",
    "PayrollStatus",
    "ProcessResult",
]
