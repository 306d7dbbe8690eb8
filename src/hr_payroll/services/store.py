"""Data access for the payroll engine.

``PayrollDataSource`` is the collaborator contract the batch writer and the
summary service depend on; ``SqlPayrollStore`` implements it on SQLAlchemy.
Each call opens its own session so concurrent per-employee fetches never
share an ``AsyncSession``.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from typing import Any, Protocol
from uuid import UUID

from sqlalchemy import func, insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hr_payroll.calculators.attendance_reconciler import RosterEntry
from hr_payroll.calculators.types import AttendanceRow, EmployeeProfile, RawClockEvent
from hr_payroll.models import (
    PAYROLL_CONFLICT_KEY,
    AttendanceRecord,
    ClockEvent,
    Employee,
    PayrollRecord,
    SalaryRegulation,
)

# Columns an overwrite never touches.
_PRESERVED_ON_OVERWRITE = frozenset(
    {"id", "created_at", "updated_at", "payment_date", *PAYROLL_CONFLICT_KEY}
)

PayrollKey = tuple[UUID, int, int]


class AttendanceFetchError(Exception):
    """Raised when attendance rows for one employee cannot be loaded."""

    def __init__(self, employee_id: UUID, year: int, month: int, detail: str = ""):
        self.employee_id = employee_id
        self.year = year
        self.month = month
        message = f"Could not load attendance for employee {employee_id} in {month:02d}/{year}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class DuplicatePayrollError(Exception):
    """Raised by a plain insert when a (employee, month, year) row already exists."""


class RegulationExistsError(Exception):
    """Raised when a regulation with the same effective date already exists."""

    def __init__(self, effective_date: date):
        self.effective_date = effective_date
        super().__init__(f"A regulation effective {effective_date} already exists")


class PayrollDataSource(Protocol):
    """Collaborator interface consumed by the payroll engine."""

    async def fetch_active_employees(self) -> list[EmployeeProfile]: ...

    async def fetch_attendance(
        self, employee_id: UUID, year: int, month: int
    ) -> list[AttendanceRow]: ...

    async def fetch_latest_regulation(self, on_or_before: date) -> SalaryRegulation | None: ...

    async def insert_payroll_records(self, records: Sequence[dict[str, Any]]) -> int: ...

    async def upsert_payroll_records(self, records: Sequence[dict[str, Any]]) -> int: ...

    async def count_existing(self, keys: Iterable[PayrollKey]) -> int: ...


class SqlPayrollStore:
    """SQLAlchemy implementation of ``PayrollDataSource`` plus query helpers."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    # === Employees ===

    async def fetch_active_employees(self) -> list[EmployeeProfile]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Employee)
                .where(Employee.status == "active")
                .order_by(Employee.employee_code)
            )
            return [EmployeeProfile.from_employee(e) for e in result.scalars().all()]

    async def fetch_employee(self, employee_id: UUID) -> EmployeeProfile | None:
        async with self._session_factory() as session:
            employee = await session.get(Employee, employee_id)
            return EmployeeProfile.from_employee(employee) if employee else None

    async def fetch_roster(self) -> list[RosterEntry]:
        """Every employee regardless of status, for clock-event matching."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(Employee.id, Employee.employee_code, Employee.name).order_by(
                    Employee.employee_code
                )
            )
            return [
                RosterEntry(employee_id=row.id, employee_code=row.employee_code, name=row.name)
                for row in result.all()
            ]

    # === Attendance ===

    async def fetch_attendance(
        self, employee_id: UUID, year: int, month: int
    ) -> list[AttendanceRow]:
        """Attendance rows for one employee and period.

        Raises:
            AttendanceFetchError: If the query fails
        """
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(AttendanceRecord)
                    .where(
                        AttendanceRecord.employee_id == employee_id,
                        AttendanceRecord.year == year,
                        AttendanceRecord.month == month,
                    )
                    .order_by(AttendanceRecord.work_date)
                )
                return [
                    AttendanceRow(
                        employee_id=r.employee_id,
                        work_date=r.work_date,
                        status=r.status,
                        work_value=r.work_value,
                        overtime_hours=r.overtime_hours,
                    )
                    for r in result.scalars().all()
                ]
        except SQLAlchemyError as exc:
            raise AttendanceFetchError(employee_id, year, month, str(exc)) from exc

    async def fetch_clock_events(self, start: datetime, end: datetime) -> list[RawClockEvent]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ClockEvent.finger_id, ClockEvent.check_time)
                .where(ClockEvent.check_time >= start, ClockEvent.check_time < end)
                .order_by(ClockEvent.check_time)
            )
            return [
                RawClockEvent(finger_id=row.finger_id, check_time=row.check_time)
                for row in result.all()
            ]

    # === Regulations (append-only) ===

    async def fetch_latest_regulation(self, on_or_before: date) -> SalaryRegulation | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(SalaryRegulation)
                .where(SalaryRegulation.effective_date <= on_or_before)
                .order_by(SalaryRegulation.effective_date.desc())
                .limit(1)
            )
            return result.scalar_one_or_none()

    async def list_regulations(self) -> list[SalaryRegulation]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(SalaryRegulation).order_by(SalaryRegulation.effective_date.desc())
            )
            return list(result.scalars().all())

    async def add_regulation(self, values: dict[str, Any]) -> SalaryRegulation:
        """Append a new regulation version.

        Raises:
            RegulationExistsError: If one is already effective on that date
        """
        regulation = SalaryRegulation(**values)
        async with self._session_factory() as session:
            try:
                async with session.begin():
                    session.add(regulation)
            except IntegrityError as exc:
                raise RegulationExistsError(values["effective_date"]) from exc
        return regulation

    # === Payroll records ===

    async def insert_payroll_records(self, records: Sequence[dict[str, Any]]) -> int:
        """Insert all records in one transaction.

        Raises:
            DuplicatePayrollError: If any key already exists; nothing is written
            IntegrityError: For any other constraint violation
        """
        if not records:
            return 0
        async with self._session_factory() as session:
            try:
                async with session.begin():
                    await session.execute(insert(PayrollRecord), list(records))
            except IntegrityError as exc:
                integrity_error = exc
            else:
                return len(records)

        # Only a stored (employee, month, year) collision is a duplicate.
        keys = [tuple(r[k] for k in PAYROLL_CONFLICT_KEY) for r in records]
        if await self.count_existing(keys) > 0:
            raise DuplicatePayrollError(str(integrity_error.orig)) from integrity_error
        raise integrity_error

    async def upsert_payroll_records(self, records: Sequence[dict[str, Any]]) -> int:
        """Insert or overwrite records keyed on (employee_id, month, year)."""
        if not records:
            return 0
        async with self._session_factory() as session:
            async with session.begin():
                dialect = session.get_bind().dialect.name
                if dialect == "postgresql":
                    from sqlalchemy.dialects.postgresql import insert as dialect_insert
                elif dialect == "sqlite":
                    from sqlalchemy.dialects.sqlite import insert as dialect_insert
                else:
                    raise NotImplementedError(f"Upsert not supported for dialect {dialect}")

                stmt = dialect_insert(PayrollRecord).values(list(records))
                update_cols = {
                    column.name: stmt.excluded[column.name]
                    for column in PayrollRecord.__table__.columns
                    if column.name not in _PRESERVED_ON_OVERWRITE
                }
                update_cols["updated_at"] = func.now()
                stmt = stmt.on_conflict_do_update(
                    index_elements=list(PAYROLL_CONFLICT_KEY),
                    set_=update_cols,
                )
                await session.execute(stmt)
        return len(records)

    async def count_existing(self, keys: Iterable[PayrollKey]) -> int:
        """Count stored records matching any of the given keys."""
        by_period: dict[tuple[int, int], set[UUID]] = defaultdict(set)
        for employee_id, month, year in keys:
            by_period[(month, year)].add(employee_id)

        total = 0
        async with self._session_factory() as session:
            for (month, year), employee_ids in by_period.items():
                result = await session.execute(
                    select(func.count())
                    .select_from(PayrollRecord)
                    .where(
                        PayrollRecord.month == month,
                        PayrollRecord.year == year,
                        PayrollRecord.employee_id.in_(employee_ids),
                    )
                )
                total += result.scalar_one()
        return total

    async def list_payroll_records(
        self, year: int | None = None, month: int | None = None
    ) -> list[PayrollRecord]:
        stmt = select(PayrollRecord)
        if year is not None:
            stmt = stmt.where(PayrollRecord.year == year)
        if month is not None:
            stmt = stmt.where(PayrollRecord.month == month)
        stmt = stmt.order_by(
            PayrollRecord.year.desc(), PayrollRecord.month.desc(), PayrollRecord.employee_id
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())
