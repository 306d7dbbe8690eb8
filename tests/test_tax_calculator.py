"""Unit tests for IncomeTaxCalculator."""

from decimal import Decimal

import pytest

from hr_payroll.calculators.tax_calculator import (
    PROGRESSIVE_TAX_BRACKETS,
    IncomeTaxCalculator,
)
from hr_payroll.calculators.types import TaxBracket


class TestProgressiveTaxCalculation:
    """Test progressive tax bracket calculations."""

    def setup_method(self):
        self.calc = IncomeTaxCalculator()

    def test_schedule_has_seven_brackets(self):
        assert len(PROGRESSIVE_TAX_BRACKETS) == 7
        assert [b.rate for b in PROGRESSIVE_TAX_BRACKETS] == [
            Decimal("0.05"),
            Decimal("0.10"),
            Decimal("0.15"),
            Decimal("0.20"),
            Decimal("0.25"),
            Decimal("0.30"),
            Decimal("0.35"),
        ]
        assert PROGRESSIVE_TAX_BRACKETS[-1].max_amount is None

    @pytest.mark.parametrize(
        "taxable,expected",
        [
            ("3000000", "150000.00"),
            ("5000000", "250000.00"),
            # 250,000 + 10% of 3,000,000
            ("8000000", "550000.00"),
            # 250,000 + 500,000 + 15% of 5,000,000
            ("15000000", "1500000.00"),
            # 250k + 500k + 1.2M + 2.8M + 5M + 8.4M + 35% of 20M
            ("100000000", "25150000.00"),
        ],
    )
    def test_marginal_brackets(self, taxable, expected):
        assert self.calc.calculate(Decimal(taxable), progressive=True) == Decimal(expected)

    def test_bracket_boundary_is_continuous(self):
        below = self.calc.progressive_tax(Decimal("9999999"))
        at = self.calc.progressive_tax(Decimal("10000000"))
        above = self.calc.progressive_tax(Decimal("10000001"))

        assert below < at < above
        assert at == Decimal("750000.00")

    def test_zero_and_negative_income(self):
        assert self.calc.calculate(Decimal("0")) == Decimal("0")
        assert self.calc.calculate(Decimal("-100")) == Decimal("0")

    def test_rounds_half_up_to_two_places(self):
        # 5% of 0.10 = 0.005
        assert self.calc.progressive_tax(Decimal("0.10")) == Decimal("0.01")

    def test_custom_brackets_sorted(self):
        calc = IncomeTaxCalculator(
            brackets=[
                TaxBracket(Decimal("1000"), None, Decimal("0.20")),
                TaxBracket(Decimal("0"), Decimal("1000"), Decimal("0.10")),
            ]
        )

        assert calc.progressive_tax(Decimal("1500")) == Decimal("200.00")


class TestFlatTax:
    """Flat-rate mode when progressive tax is disabled."""

    def test_flat_ten_percent(self):
        calc = IncomeTaxCalculator()

        assert calc.calculate(Decimal("15000000"), progressive=False) == Decimal("1500000.00")

    def test_flat_and_progressive_differ(self):
        calc = IncomeTaxCalculator()
        taxable = Decimal("30000000")

        # 250k + 500k + 1.2M + 2.4M across the first four brackets
        assert calc.calculate(taxable, progressive=True) == Decimal("4350000.00")
        assert calc.calculate(taxable, progressive=False) == Decimal("3000000.00")

    def test_flat_zero_income(self):
        assert IncomeTaxCalculator().flat_tax(Decimal("0")) == Decimal("0")
