"""Batch payroll generation and persistence."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from hr_payroll.calculators.attendance_aggregator import (
    MalformedAttendanceError,
    aggregate_by_status,
)
from hr_payroll.calculators.compensation import CompensationCalculator
from hr_payroll.calculators.regulation_resolver import RegulationResolver
from hr_payroll.calculators.types import (
    EmployeeProfile,
    PayrollComputation,
    RegulationDefaults,
    RegulationTerms,
    period_bounds,
)
from hr_payroll.models import PAYROLL_CONFLICT_KEY
from hr_payroll.services.store import (
    AttendanceFetchError,
    DuplicatePayrollError,
    PayrollDataSource,
)

logger = logging.getLogger(__name__)


class PayrollConflictError(Exception):
    """Raised when saving would overwrite existing payroll records."""

    def __init__(self, conflict_count: int, periods: list[tuple[int, int]]):
        self.conflict_count = conflict_count
        self.periods = periods
        super().__init__(
            f"{conflict_count} employee(s) already have payroll records for "
            f"{', '.join(f'{m:02d}/{y}' for m, y in periods)}. "
            "Save again with overwrite to replace them."
        )


class InvalidBatchError(ValueError):
    """Raised when a batch to save is internally inconsistent."""


@dataclass(frozen=True)
class SkippedEmployee:
    employee_id: UUID
    reason: str


@dataclass
class BatchResult:
    """Outcome of one ``generate`` run."""

    year: int
    month: int
    records: list[PayrollComputation] = field(default_factory=list)
    skipped: list[SkippedEmployee] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class SaveResult:
    success: bool
    count: int


class PayrollBatchWriter:
    """Generates a month of payroll for all active employees and saves it.

    ``generate`` never writes. ``save`` either inserts the whole batch or,
    when any record already exists, writes nothing and raises
    ``PayrollConflictError`` so the caller can confirm an overwrite.
    """

    def __init__(
        self,
        source: PayrollDataSource,
        calculator: CompensationCalculator | None = None,
        defaults: RegulationDefaults | None = None,
        max_workers: int = 8,
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.source = source
        self.calculator = calculator or CompensationCalculator()
        self.defaults = defaults or RegulationDefaults()
        self.max_workers = max_workers

    async def generate(
        self,
        year: int,
        month: int,
        resolver: RegulationResolver | None = None,
    ) -> BatchResult:
        """Compute payroll records for every active employee.

        Raises:
            InvalidPeriodError: If the period is invalid
            NoApplicableRegulationError: If no regulation covers the period
        """
        period_bounds(year, month)
        resolver = resolver or RegulationResolver(
            self.source.fetch_latest_regulation, self.defaults
        )
        terms = await resolver.resolve(year, month)

        employees = await self.source.fetch_active_employees()
        logger.info(
            "Generating payroll for %02d/%d: %d active employees", month, year, len(employees)
        )

        semaphore = asyncio.Semaphore(self.max_workers)
        outcomes = await asyncio.gather(
            *(self._compute_employee(semaphore, profile, terms, year, month) for profile in employees)
        )

        result = BatchResult(year=year, month=month)
        for outcome in outcomes:
            if isinstance(outcome, SkippedEmployee):
                result.skipped.append(outcome)
            else:
                result.records.append(outcome)

        logger.info(
            "Generated payroll for %02d/%d: %d records, %d skipped",
            month,
            year,
            result.count,
            len(result.skipped),
        )
        return result

    async def _compute_employee(
        self,
        semaphore: asyncio.Semaphore,
        profile: EmployeeProfile,
        terms: RegulationTerms,
        year: int,
        month: int,
    ) -> PayrollComputation | SkippedEmployee:
        try:
            async with semaphore:
                rows = await self.source.fetch_attendance(profile.employee_id, year, month)
            totals = aggregate_by_status(profile.employee_id, year, month, rows)
        except (AttendanceFetchError, MalformedAttendanceError) as exc:
            logger.warning("Skipping employee %s: %s", profile.employee_id, exc)
            return SkippedEmployee(employee_id=profile.employee_id, reason=str(exc))
        return self.calculator.compute(profile, terms, totals)

    async def save(
        self,
        records: Sequence[PayrollComputation | dict[str, Any]],
        overwrite: bool = False,
    ) -> SaveResult:
        """Persist a batch as a single write.

        Raises:
            InvalidBatchError: If the batch repeats an (employee, month, year) key
            PayrollConflictError: If records exist and ``overwrite`` is false
        """
        rows = [r.to_record_values() if isinstance(r, PayrollComputation) else dict(r) for r in records]
        keys = [tuple(row[k] for k in PAYROLL_CONFLICT_KEY) for row in rows]
        if len(set(keys)) != len(keys):
            raise InvalidBatchError("Batch contains more than one record for the same employee and period")
        if not rows:
            return SaveResult(success=True, count=0)

        if overwrite:
            count = await self.source.upsert_payroll_records(rows)
            logger.info("Overwrote payroll batch: %d records", count)
            return SaveResult(success=True, count=count)

        try:
            count = await self.source.insert_payroll_records(rows)
        except DuplicatePayrollError:
            conflict_count = await self.source.count_existing(keys)
            periods = sorted({(month, year) for _, month, year in keys}, key=lambda p: (p[1], p[0]))
            logger.info("Payroll save conflict: %d existing records", conflict_count)
            raise PayrollConflictError(conflict_count, periods) from None

        logger.info("Saved payroll batch: %d records", count)
        return SaveResult(success=True, count=count)
