"""Effective-dated salary regulation resolution."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import date

from hr_payroll.calculators.types import RegulationDefaults, RegulationTerms, period_bounds
from hr_payroll.models import SalaryRegulation

RegulationLookup = Callable[[date], Awaitable[SalaryRegulation | None]]


class NoApplicableRegulationError(Exception):
    """Raised when no regulation is effective for a pay period."""

    def __init__(self, year: int, month: int, period_start: date):
        self.year = year
        self.month = month
        self.period_start = period_start
        super().__init__(
            f"No salary regulation configured for {month:02d}/{year} "
            f"(none effective on or before {period_start})"
        )


class RegulationResolver:
    """Selects the regulation version in force for a pay period.

    The active regulation is the row with the latest ``effective_date`` on or
    before the first day of the period. Missing fields are filled from
    ``RegulationDefaults`` so callers always receive complete terms.

    One resolver is created per batch run; results are cached per period for
    that run only.
    """

    def __init__(
        self,
        lookup: RegulationLookup,
        defaults: RegulationDefaults | None = None,
    ):
        self._lookup = lookup
        self.defaults = defaults or RegulationDefaults()
        self._cache: dict[tuple[int, int], RegulationTerms] = {}

    async def resolve(self, year: int, month: int) -> RegulationTerms:
        """Return merged regulation terms for the period.

        Raises:
            InvalidPeriodError: If month is outside 1..12
            NoApplicableRegulationError: If no regulation is effective yet
        """
        key = (year, month)
        if key in self._cache:
            return self._cache[key]

        period_start, _ = period_bounds(year, month)
        regulation = await self._lookup(period_start)
        if regulation is None:
            raise NoApplicableRegulationError(year, month, period_start)

        terms = self.defaults.apply(regulation)
        self._cache[key] = terms
        return terms
