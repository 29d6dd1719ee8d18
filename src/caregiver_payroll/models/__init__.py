"""SQLAlchemy models for the caregiver payroll engine."""

from caregiver_payroll.models.attendance import MileageEntry, TimeEntry, TimeOffRequest
from caregiver_payroll.models.base import Base, TimestampMixin
from caregiver_payroll.models.caregiver import Caregiver, CaregiverPayRate, ClientRateOverride
from caregiver_payroll.models.payroll import CheckNumberCounter, PayrollAuditEvent, PayrollRecord

__all__ = [
    "Base",
    "TimestampMixin",
    "Caregiver",
    "CaregiverPayRate",
    "ClientRateOverride",
    "TimeEntry",
    "TimeOffRequest",
    "MileageEntry",
    "PayrollRecord",
    "CheckNumberCounter",
    "PayrollAuditEvent",
]
