"""Personal income tax calculation."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from hr_payroll.calculators.types import ZERO, TaxBracket, round_money

# Monthly progressive schedule, amounts in VND.
PROGRESSIVE_TAX_BRACKETS: tuple[TaxBracket, ...] = (
    TaxBracket(Decimal("0"), Decimal("5000000"), Decimal("0.05")),
    TaxBracket(Decimal("5000000"), Decimal("10000000"), Decimal("0.10")),
    TaxBracket(Decimal("10000000"), Decimal("18000000"), Decimal("0.15")),
    TaxBracket(Decimal("18000000"), Decimal("32000000"), Decimal("0.20")),
    TaxBracket(Decimal("32000000"), Decimal("52000000"), Decimal("0.25")),
    TaxBracket(Decimal("52000000"), Decimal("80000000"), Decimal("0.30")),
    TaxBracket(Decimal("80000000"), None, Decimal("0.35")),
)

FLAT_TAX_RATE = Decimal("0.10")


class IncomeTaxCalculator:
    """Computes monthly income tax on taxable income.

    With ``progressive=True`` the bracket schedule is applied marginally;
    otherwise a single flat rate applies to the whole taxable income.
    Both modes are selected per regulation.
    """

    def __init__(
        self,
        brackets: Sequence[TaxBracket] = PROGRESSIVE_TAX_BRACKETS,
        flat_rate: Decimal = FLAT_TAX_RATE,
    ):
        self.brackets = sorted(brackets, key=lambda b: b.min_amount)
        self.flat_rate = flat_rate

    def calculate(self, taxable_income: Decimal, progressive: bool = True) -> Decimal:
        if taxable_income <= 0:
            return ZERO
        if progressive:
            return self.progressive_tax(taxable_income)
        return self.flat_tax(taxable_income)

    def progressive_tax(self, taxable_income: Decimal) -> Decimal:
        """Calculate tax using progressive brackets."""
        if taxable_income <= 0:
            return ZERO

        total_tax = ZERO
        for bracket in self.brackets:
            if taxable_income <= bracket.min_amount:
                break
            upper = bracket.max_amount if bracket.max_amount is not None else taxable_income
            taxable_in_bracket = min(taxable_income, upper) - bracket.min_amount
            if taxable_in_bracket > 0:
                total_tax += taxable_in_bracket * bracket.rate

        return round_money(total_tax)

    def flat_tax(self, taxable_income: Decimal) -> Decimal:
        if taxable_income <= 0:
            return ZERO
        return round_money(taxable_income * self.flat_rate)
