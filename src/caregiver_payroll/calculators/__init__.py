"""Pay calculation pipeline: aggregation, overtime split, withholding, record assembly."""

from caregiver_payroll.calculators.differential import DifferentialCalculator
from caregiver_payroll.calculators.rate_resolver import RateResolver
from caregiver_payroll.calculators.record_builder import PayrollRecordBuilder, paid_time_off_hours
from caregiver_payroll.calculators.tax_calculator import TaxWithholdingCalculator
from caregiver_payroll.calculators.time_aggregator import TimeEntryAggregator
from caregiver_payroll.calculators.types import (
    AggregatedTime,
    DifferentialTotals,
    PayPeriod,
    ResolvedRate,
    ShiftMinutes,
    TaxWithholding,
)

__all__ = [
    "AggregatedTime",
    "DifferentialCalculator",
    "DifferentialTotals",
    "PayPeriod",
    "PayrollRecordBuilder",
    "RateResolver",
    "ResolvedRate",
    "ShiftMinutes",
    "TaxWithholding",
    "TaxWithholdingCalculator",
    "TimeEntryAggregator",
    "paid_time_off_hours",
]
