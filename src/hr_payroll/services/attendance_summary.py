"""Attendance summaries for employee-facing views.

These use the lighter calculations: reconciled clock-event spans for the
monthly overview and the calendar-based overtime strategy for per-employee
figures. Batch payroll uses ``aggregate_by_status`` instead.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from uuid import UUID

from hr_payroll.calculators.attendance_aggregator import (
    MalformedAttendanceError,
    aggregate_by_calendar,
)
from hr_payroll.calculators.attendance_reconciler import AttendanceReconciler, IdentitySummary
from hr_payroll.calculators.types import (
    CalendarTotals,
    EmployeeProfile,
    RegulationDefaults,
    RegulationTerms,
    period_bounds,
    period_datetime_bounds,
)
from hr_payroll.services.store import AttendanceFetchError, SqlPayrollStore

logger = logging.getLogger(__name__)


class EmployeeNotFoundError(Exception):
    """Raised when an employee id does not exist."""

    def __init__(self, employee_id: UUID):
        self.employee_id = employee_id
        super().__init__(f"Employee {employee_id} not found")


@dataclass(frozen=True)
class RosterSummary:
    """One roster line: the employee and their calendar-strategy totals."""

    profile: EmployeeProfile
    working_days: int
    totals: CalendarTotals


class AttendanceSummaryService:
    """Builds monthly attendance summaries from the store."""

    def __init__(
        self,
        store: SqlPayrollStore,
        reconciler: AttendanceReconciler | None = None,
        defaults: RegulationDefaults | None = None,
        max_workers: int = 8,
    ):
        self.store = store
        self.reconciler = reconciler or AttendanceReconciler()
        self.defaults = defaults or RegulationDefaults()
        self.max_workers = max_workers

    async def clock_summary(self, year: int, month: int) -> list[IdentitySummary]:
        """Per-identity totals reconciled from raw clock events."""
        start, end = period_datetime_bounds(year, month)
        events = await self.store.fetch_clock_events(start, end)
        roster = await self.store.fetch_roster()
        spans = self.reconciler.reconcile(events, roster, start, end)
        return self.reconciler.summarize(spans)

    async def _terms(self, year: int, month: int) -> RegulationTerms:
        # Summaries fall back to defaults when no regulation exists yet.
        period_start, _ = period_bounds(year, month)
        regulation = await self.store.fetch_latest_regulation(period_start)
        return self.defaults.apply(regulation)

    async def employee_summary(self, employee_id: UUID, year: int, month: int) -> CalendarTotals:
        """Calendar-strategy totals for one employee.

        Raises:
            EmployeeNotFoundError: If the employee does not exist
            MalformedAttendanceError: If a stored row is out of range
        """
        terms = await self._terms(year, month)
        profile = await self.store.fetch_employee(employee_id)
        if profile is None:
            raise EmployeeNotFoundError(employee_id)
        rows = await self.store.fetch_attendance(employee_id, year, month)
        return aggregate_by_calendar(employee_id, year, month, rows, terms)

    async def roster_summary(self, year: int, month: int) -> list[RosterSummary]:
        """Calendar-strategy totals for every active employee.

        Employees whose attendance cannot be loaded or aggregated are left
        out and logged.
        """
        terms = await self._terms(year, month)
        employees = await self.store.fetch_active_employees()
        semaphore = asyncio.Semaphore(self.max_workers)

        async def summarize(profile: EmployeeProfile) -> RosterSummary | None:
            try:
                async with semaphore:
                    rows = await self.store.fetch_attendance(profile.employee_id, year, month)
                totals = aggregate_by_calendar(profile.employee_id, year, month, rows, terms)
            except (AttendanceFetchError, MalformedAttendanceError) as exc:
                logger.warning("Skipping employee %s in roster summary: %s", profile.employee_id, exc)
                return None
            return RosterSummary(
                profile=profile,
                working_days=terms.working_days_per_month,
                totals=totals,
            )

        results = await asyncio.gather(*(summarize(p) for p in employees))
        return [r for r in results if r is not None]
