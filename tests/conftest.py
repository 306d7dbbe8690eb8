"""Pytest fixtures for HR payroll engine tests."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, AsyncGenerator
from uuid import UUID, uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from hr_payroll.calculators.types import (
    Allowances,
    AttendanceRow,
    EmployeeProfile,
    RegulationDefaults,
    RegulationTerms,
)
from hr_payroll.database import build_session_factory
from hr_payroll.models import (
    AttendanceRecord,
    Base,
    ClockEvent,
    Department,
    Employee,
    PAYROLL_CONFLICT_KEY,
    Position,
    SalaryRegulation,
)
from hr_payroll.services.store import (
    AttendanceFetchError,
    DuplicatePayrollError,
    SqlPayrollStore,
)

# In-memory SQLite shared by every session of one test
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture
async def engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(session_factory) -> SqlPayrollStore:
    return SqlPayrollStore(session_factory)


# ============================================================================
# Pure calculator inputs
# ============================================================================


@pytest.fixture
def terms() -> RegulationTerms:
    """Default regulation terms (22 days, 150/200% overtime)."""
    return RegulationDefaults().apply(None)


@pytest.fixture
def make_profile() -> Callable[..., EmployeeProfile]:
    """Factory for employee profiles with sensible defaults."""

    def _make(**overrides: Any) -> EmployeeProfile:
        values: dict[str, Any] = {
            "employee_id": uuid4(),
            "employee_code": "EMP001",
            "name": "Nguyen Van A",
            "base_salary": Decimal("22000000"),
            "allowances": Allowances(),
        }
        values.update(overrides)
        return EmployeeProfile(**values)

    return _make


@pytest.fixture
def make_row() -> Callable[..., AttendanceRow]:
    def _make(
        employee_id: UUID,
        work_date: date,
        status: str = "present_full",
        work_value: str | None = "1",
        overtime_hours: str | None = None,
    ) -> AttendanceRow:
        return AttendanceRow(
            employee_id=employee_id,
            work_date=work_date,
            status=status,
            work_value=Decimal(work_value) if work_value is not None else None,
            overtime_hours=Decimal(overtime_hours) if overtime_hours is not None else None,
        )

    return _make


# ============================================================================
# In-memory data source
# ============================================================================


class FakeDataSource:
    """In-memory stand-in for the SQL store used by batch writer tests."""

    def __init__(
        self,
        employees: Sequence[EmployeeProfile] = (),
        attendance: dict[UUID, list[AttendanceRow]] | None = None,
        regulations: Sequence[SalaryRegulation] = (),
    ):
        self.employees = list(employees)
        self.attendance = attendance or {}
        self.regulations = list(regulations)
        self.failing_employees: set[UUID] = set()
        self.records: dict[tuple[Any, ...], dict[str, Any]] = {}
        self.regulation_lookups = 0
        self.attendance_calls = 0

    async def fetch_active_employees(self) -> list[EmployeeProfile]:
        return list(self.employees)

    async def fetch_attendance(self, employee_id: UUID, year: int, month: int) -> list[AttendanceRow]:
        self.attendance_calls += 1
        if employee_id in self.failing_employees:
            raise AttendanceFetchError(employee_id, year, month, "connection reset")
        return [
            row
            for row in self.attendance.get(employee_id, [])
            if row.work_date.year == year and row.work_date.month == month
        ]

    async def fetch_latest_regulation(self, on_or_before: date) -> SalaryRegulation | None:
        self.regulation_lookups += 1
        candidates = [r for r in self.regulations if r.effective_date <= on_or_before]
        return max(candidates, key=lambda r: r.effective_date, default=None)

    def _key(self, record: dict[str, Any]) -> tuple[Any, ...]:
        return tuple(record[k] for k in PAYROLL_CONFLICT_KEY)

    async def insert_payroll_records(self, records: Sequence[dict[str, Any]]) -> int:
        if any(self._key(r) in self.records for r in records):
            raise DuplicatePayrollError("duplicate key")
        for record in records:
            self.records[self._key(record)] = dict(record)
        return len(records)

    async def upsert_payroll_records(self, records: Sequence[dict[str, Any]]) -> int:
        for record in records:
            self.records[self._key(record)] = dict(record)
        return len(records)

    async def count_existing(self, keys: Iterable[tuple[UUID, int, int]]) -> int:
        return sum(1 for key in keys if tuple(key) in self.records)


@pytest.fixture
def fake_source() -> FakeDataSource:
    return FakeDataSource()


def make_regulation(effective_date: date, **values: Any) -> SalaryRegulation:
    """Unsaved regulation row; ``id`` is assigned eagerly for lookups."""
    return SalaryRegulation(id=uuid4(), effective_date=effective_date, **values)


@pytest.fixture
def regulation_factory() -> Callable[..., SalaryRegulation]:
    return make_regulation


# ============================================================================
# Seeded database
# ============================================================================


@pytest.fixture
async def seeded(session_factory) -> dict[str, Any]:
    """Two active employees, one terminated, a regulation and March 2025 attendance.

    March 2025: the 3rd is a Monday, the 8th a Saturday.
    """
    async with session_factory() as session:
        async with session.begin():
            dept = Department(name="Engineering")
            developer = Position(name="Developer")
            intern = Position(name="Intern Developer")
            session.add_all([dept, developer, intern])
            await session.flush()

            alice = Employee(
                employee_code="EMP007",
                name="Alice",
                department_id=dept.id,
                position_id=developer.id,
                base_salary=Decimal("22000000"),
                housing_allowance=Decimal("1000000"),
                meal_allowance=Decimal("1000000"),
                dependents_count=0,
                children_count=1,
                marital_status="married",
            )
            bob = Employee(
                employee_code="EMP012",
                name="Bob",
                department_id=dept.id,
                position_id=intern.id,
                base_salary=Decimal("11000000"),
            )
            carol = Employee(
                employee_code="EMP020",
                name="Carol",
                status="terminated",
                base_salary=Decimal("15000000"),
            )
            regulation = SalaryRegulation(
                effective_date=date(2025, 1, 1),
                working_days_per_month=22,
                working_hours_per_day=Decimal("8"),
                max_hours_per_day=Decimal("10"),
                overtime_weekday_rate=Decimal("150"),
                overtime_weekend_rate=Decimal("200"),
            )
            session.add_all([alice, bob, carol, regulation])
            await session.flush()

            rows = []
            for day in (3, 4, 5, 6, 7):
                rows.append(
                    AttendanceRecord(
                        employee_id=alice.id,
                        work_date=date(2025, 3, day),
                        month=3,
                        year=2025,
                        status="present_full",
                        work_value=Decimal("1"),
                        overtime_hours=Decimal("3") if day == 4 else Decimal("0"),
                    )
                )
            rows.append(
                AttendanceRecord(
                    employee_id=alice.id,
                    work_date=date(2025, 3, 8),
                    month=3,
                    year=2025,
                    status="weekend_overtime",
                    work_value=Decimal("1"),
                    overtime_hours=Decimal("8"),
                )
            )
            rows.append(
                AttendanceRecord(
                    employee_id=bob.id,
                    work_date=date(2025, 3, 3),
                    month=3,
                    year=2025,
                    status="present_half",
                    work_value=Decimal("0.5"),
                )
            )
            session.add_all(rows)

            session.add_all(
                [
                    ClockEvent(finger_id="007", check_time=datetime(2025, 3, 3, 8, 0, tzinfo=timezone.utc)),
                    ClockEvent(finger_id="007", check_time=datetime(2025, 3, 3, 18, 0, tzinfo=timezone.utc)),
                    ClockEvent(finger_id="999", check_time=datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)),
                    ClockEvent(finger_id="12", check_time=datetime(2025, 3, 4, 8, 0, tzinfo=timezone.utc)),
                    ClockEvent(finger_id="12", check_time=datetime(2025, 3, 4, 12, 0, tzinfo=timezone.utc)),
                    ClockEvent(finger_id="007", check_time=datetime(2025, 4, 1, 8, 0, tzinfo=timezone.utc)),
                ]
            )

        return {
            "alice": alice.id,
            "bob": bob.id,
            "carol": carol.id,
            "regulation": regulation.id,
            "intern_position": intern.id,
        }
