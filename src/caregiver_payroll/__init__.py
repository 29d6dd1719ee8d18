"""Caregiver payroll engine: attendance to pay, with an auditable approval workflow."""

__version__ = "0.1.0"
