"""Federal income tax and FICA withholding."""

from __future__ import annotations

from decimal import Decimal

from caregiver_payroll.calculators.types import TaxWithholding, to_cents
from caregiver_payroll.payroll_config import TaxConfig

ZERO = Decimal("0")


class TaxWithholdingCalculator:
    """Maps one period's gross pay to federal, Social Security and Medicare withholding.

    Stateless: the same gross always yields the same withholding. Federal tax
    annualizes the period gross (``gross * periods_per_year``), subtracts the
    annual standard deduction, runs the result through the progressive
    bracket table and divides back to the period:

        {
            "periods_per_year": 26,
            "standard_deduction": 13850,
            "brackets": [
                {"min": 0, "max": 12532, "rate": 0},
                {"min": 12532, "max": 51792, "rate": 0.10},
                ...
            ],
            "social_security": {"rate": 0.062, "wage_base_limit": 168600},
            "medicare": {"rate": 0.0145}
        }

    Social Security applies only to the part of the period gross under
    ``wage_base_limit / periods_per_year``. Medicare is uncapped.
    """

    def __init__(self, config: TaxConfig):
        self.config = config

    def calculate(self, gross_pay: Decimal) -> TaxWithholding:
        """Calculate withholding for a period's gross pay. Zero or negative gross yields zeros."""
        if gross_pay <= 0:
            return TaxWithholding()

        return TaxWithholding(
            federal=self.federal_tax(gross_pay),
            social_security=self.social_security_tax(gross_pay),
            medicare=to_cents(gross_pay * self.config.medicare_rate),
        )

    def federal_tax(self, gross_pay: Decimal) -> Decimal:
        """Federal income tax on a period's gross pay."""
        if gross_pay <= 0:
            return to_cents(ZERO)
        periods = Decimal(self.config.periods_per_year)
        annual_taxable = max(ZERO, gross_pay * periods - self.config.standard_deduction)
        return to_cents(self.annual_bracket_tax(annual_taxable) / periods)

    def federal_tax_on_taxable(self, period_taxable: Decimal) -> Decimal:
        """Federal income tax on period income that is already net of the standard deduction."""
        if period_taxable <= 0:
            return to_cents(ZERO)
        periods = Decimal(self.config.periods_per_year)
        return to_cents(self.annual_bracket_tax(period_taxable * periods) / periods)

    def social_security_tax(self, gross_pay: Decimal) -> Decimal:
        if gross_pay <= 0:
            return to_cents(ZERO)
        period_cap = self.config.social_security_wage_base / Decimal(self.config.periods_per_year)
        return to_cents(min(gross_pay, period_cap) * self.config.social_security_rate)

    def annual_bracket_tax(self, annual_taxable: Decimal) -> Decimal:
        """Run an annual amount through the progressive brackets (unrounded)."""
        if annual_taxable <= 0:
            return ZERO

        total_tax = ZERO
        for bracket in sorted(self.config.brackets, key=lambda b: b.min_amount):
            if annual_taxable <= bracket.min_amount:
                break
            upper = annual_taxable
            if bracket.max_amount is not None:
                upper = min(upper, bracket.max_amount)
            taxable_in_bracket = upper - bracket.min_amount
            if taxable_in_bracket > 0:
                total_tax += taxable_in_bracket * bracket.rate

        return total_tax
