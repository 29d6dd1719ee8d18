"""Tests for withholding calculation."""

from decimal import Decimal

import pytest

from caregiver_payroll.calculators.tax_calculator import TaxWithholdingCalculator
from caregiver_payroll.payroll_config import TaxBracket, TaxConfig


@pytest.fixture
def biweekly() -> TaxWithholdingCalculator:
    return TaxWithholdingCalculator(TaxConfig())


@pytest.fixture
def weekly() -> TaxWithholdingCalculator:
    return TaxWithholdingCalculator(TaxConfig(periods_per_year=52))


class TestProgressiveBrackets:
    """Test the annual bracket table."""

    def test_amount_in_zero_bracket(self, biweekly):
        """Income inside the 0% band owes nothing."""
        assert biweekly.annual_bracket_tax(Decimal("12000")) == Decimal("0")

    def test_amount_spanning_two_brackets(self, biweekly):
        """52,000 is 10% of 39,260 plus 12% of 208."""
        assert biweekly.annual_bracket_tax(Decimal("52000")) == Decimal("3950.96")

    def test_top_bracket_has_no_ceiling(self, biweekly):
        """Income past the last boundary is taxed at the top rate."""
        base = biweekly.annual_bracket_tax(Decimal("1072188"))
        above = biweekly.annual_bracket_tax(Decimal("1082188"))

        assert above - base == Decimal("3200.00")

    def test_custom_brackets(self):
        """Brackets come from configuration."""
        config = TaxConfig(
            standard_deduction=Decimal("0"),
            brackets=(
                TaxBracket(Decimal("0"), Decimal("1000"), Decimal("0.10")),
                TaxBracket(Decimal("1000"), None, Decimal("0.20")),
            ),
        )
        calculator = TaxWithholdingCalculator(config)

        assert calculator.annual_bracket_tax(Decimal("1500")) == Decimal("200.00")


class TestFederal:
    """Test federal withholding."""

    def test_weekly_taxable_thousand(self, weekly):
        """$1,000 weekly taxable income withholds $75.98 with the reference table."""
        assert weekly.federal_tax_on_taxable(Decimal("1000")) == Decimal("75.98")

    def test_standard_deduction_is_subtracted(self, weekly):
        """The annual standard deduction comes off before the brackets."""
        # 1266.35 * 52 - 13850 = 52000.20
        assert weekly.federal_tax(Decimal("1266.35")) == Decimal("75.98")

    def test_income_below_deduction_owes_nothing(self, biweekly):
        """Annualized gross under the standard deduction owes no federal tax."""
        assert biweekly.federal_tax(Decimal("500.00")) == Decimal("0.00")

    def test_deterministic(self, biweekly):
        """Identical gross always yields identical withholding."""
        first = biweekly.calculate(Decimal("2345.67"))
        biweekly.calculate(Decimal("99999.99"))
        second = biweekly.calculate(Decimal("2345.67"))

        assert first == second


class TestFica:
    """Test Social Security and Medicare."""

    def test_scenario_gross_950(self, biweekly):
        """$950 biweekly: no federal, 6.2% SS, 1.45% Medicare rounded half-up."""
        result = biweekly.calculate(Decimal("950.00"))

        assert result.federal == Decimal("0.00")
        assert result.social_security == Decimal("58.90")
        assert result.medicare == Decimal("13.78")
        assert result.total == Decimal("72.68")

    def test_social_security_capped_at_period_wage_base(self, biweekly):
        """Wages above wage_base / periods_per_year are not taxed for SS."""
        result = biweekly.calculate(Decimal("10000.00"))

        # 168600 / 26 * 0.062 = 402.046...
        assert result.social_security == Decimal("402.05")
        assert result.medicare == Decimal("145.00")

    @pytest.mark.parametrize("gross", [Decimal("0"), Decimal("-50.00")])
    def test_zero_or_negative_gross(self, biweekly, gross):
        """Zero or negative gross withholds zero for all three components."""
        result = biweekly.calculate(gross)

        assert result.federal == Decimal("0.00")
        assert result.social_security == Decimal("0.00")
        assert result.medicare == Decimal("0.00")
        assert result.total == Decimal("0")
