"""Persistence boundary and SQLAlchemy adapters."""

from caregiver_payroll.repositories.base import (
    AttendanceStore,
    CaregiverDirectory,
    MileageStore,
    PayrollRepository,
    TimeOffStore,
)
from caregiver_payroll.repositories.filters import PayrollRecordFilter
from caregiver_payroll.repositories.sources import (
    SqlAttendanceStore,
    SqlCaregiverDirectory,
    SqlMileageStore,
    SqlTimeOffStore,
)
from caregiver_payroll.repositories.sqlalchemy_repository import SqlAlchemyPayrollRepository

__all__ = [
    "AttendanceStore",
    "CaregiverDirectory",
    "MileageStore",
    "PayrollRepository",
    "TimeOffStore",
    "PayrollRecordFilter",
    "SqlAlchemyPayrollRepository",
    "SqlAttendanceStore",
    "SqlCaregiverDirectory",
    "SqlMileageStore",
    "SqlTimeOffStore",
]
