"""HTTP API for the caregiver payroll engine."""
