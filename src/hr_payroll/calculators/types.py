"""Type definitions for the payroll calculation pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

if TYPE_CHECKING:
    from hr_payroll.models import Employee, SalaryRegulation

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")
OUTPUT_PRECISION = Decimal("0.01")

PROBATION_MULTIPLIER = Decimal("0.85")
PROBATION_MARKERS = ("probation", "intern", "thử việc")
MARRIED_MARKERS = ("married", "đã kết hôn")


def round_money(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places for persistence."""
    return amount.quantize(OUTPUT_PRECISION, rounding=ROUND_HALF_UP)


def as_decimal(value: Any) -> Decimal:
    """Coerce a nullable numeric column value; missing becomes zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class InvalidPeriodError(ValueError):
    """Raised when a (year, month) pair is not a valid pay period."""

    def __init__(self, year: int, month: int):
        self.year = year
        self.month = month
        super().__init__(f"Invalid pay period {month}/{year}")


def period_bounds(year: int, month: int) -> tuple[date, date]:
    """First day of the period and first day of the following period."""
    if not 1 <= month <= 12 or year < 1:
        raise InvalidPeriodError(year, month)
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


def period_datetime_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """UTC datetime window ``[start, end)`` covering the period."""
    start, end = period_bounds(year, month)
    return (
        datetime(start.year, start.month, start.day, tzinfo=timezone.utc),
        datetime(end.year, end.month, end.day, tzinfo=timezone.utc),
    )


class AttendanceStatus(str, Enum):
    """Classification stored on each attendance row."""

    PRESENT_FULL = "present_full"
    PRESENT_HALF = "present_half"
    LATE_FULL = "late_full"
    ABSENT_FULL = "absent_full"
    LEAVE_FULL = "leave_full"
    LEAVE_HALF_DAY = "leave_half_day"
    MEETING_FULL = "meeting_full"
    OVERTIME = "overtime"
    WEEKEND_OVERTIME = "weekend_overtime"
    PAID_LEAVE = "paid_leave"


# Only these statuses credit actual working days.
STANDARD_WORK_STATUSES = frozenset(
    {
        AttendanceStatus.PRESENT_FULL.value,
        AttendanceStatus.PRESENT_HALF.value,
        AttendanceStatus.PAID_LEAVE.value,
    }
)


@dataclass(frozen=True)
class AttendanceRow:
    """One attendance day as consumed by the aggregators."""

    employee_id: UUID
    work_date: date
    status: str
    work_value: Decimal | None = None
    overtime_hours: Decimal | None = None

    @property
    def day_of_week(self) -> int:
        """ISO weekday, Monday=1 .. Sunday=7."""
        return self.work_date.isoweekday()

    @property
    def is_weekend(self) -> bool:
        return self.day_of_week in (6, 7)


@dataclass(frozen=True)
class Allowances:
    """Fixed monthly allowances from the employee profile."""

    housing: Decimal = ZERO
    transport: Decimal = ZERO
    meal: Decimal = ZERO
    phone: Decimal = ZERO
    position: Decimal = ZERO
    attendance: Decimal = ZERO
    other: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return sum((getattr(self, f.name) for f in fields(self)), ZERO)


def detect_probation(position_name: str | None) -> bool:
    """Position-name heuristic for profiles without an explicit flag."""
    if not position_name:
        return False
    lowered = position_name.lower()
    return any(marker in lowered for marker in PROBATION_MARKERS)


@dataclass(frozen=True)
class EmployeeProfile:
    """Read-only employee snapshot used by the compensation calculator."""

    employee_id: UUID
    base_salary: Decimal
    employee_code: str = ""
    name: str = ""
    department_id: UUID | None = None
    position_id: UUID | None = None
    position_name: str | None = None
    allowances: Allowances = field(default_factory=Allowances)
    dependents_count: int = 0
    children_count: int = 0
    marital_status: str | None = None
    personal_deduction: Decimal | None = None
    is_probation: bool = False

    @property
    def effective_dependents(self) -> int:
        """Dependents for tax purposes.

        An explicit count wins; otherwise children plus a spouse when the
        marital status says married.
        """
        if self.dependents_count > 0:
            return self.dependents_count
        count = max(0, self.children_count)
        status = (self.marital_status or "").lower()
        if any(marker in status for marker in MARRIED_MARKERS) and "unmarried" not in status:
            count += 1
        return count

    @classmethod
    def from_employee(cls, employee: Employee) -> EmployeeProfile:
        """Build a profile from an ORM row, filling missing fields with zero."""
        position_name = employee.position.name if employee.position else None
        is_probation = (
            employee.is_probation
            if employee.is_probation is not None
            else detect_probation(position_name)
        )
        return cls(
            employee_id=employee.id,
            employee_code=employee.employee_code,
            name=employee.name,
            base_salary=as_decimal(employee.base_salary),
            department_id=employee.department_id,
            position_id=employee.position_id,
            position_name=position_name,
            allowances=Allowances(
                housing=as_decimal(employee.housing_allowance),
                transport=as_decimal(employee.transport_allowance),
                meal=as_decimal(employee.meal_allowance),
                phone=as_decimal(employee.phone_allowance),
                position=as_decimal(employee.position_allowance),
                attendance=as_decimal(employee.attendance_allowance),
                other=as_decimal(employee.other_allowances),
            ),
            dependents_count=employee.dependents_count or 0,
            children_count=employee.children_count or 0,
            marital_status=employee.marital_status,
            personal_deduction=employee.personal_deduction,
            is_probation=is_probation,
        )


@dataclass(frozen=True)
class RegulationTerms:
    """Fully populated regulation values, rates in percent."""

    regulation_id: UUID | None
    effective_date: date | None
    working_days_per_month: int
    working_hours_per_day: Decimal
    max_hours_per_day: Decimal
    overtime_weekday_rate: Decimal
    overtime_weekend_rate: Decimal
    overtime_holiday_rate: Decimal
    overtime_night_rate: Decimal
    employee_social_insurance_rate: Decimal
    employee_health_insurance_rate: Decimal
    employee_unemployment_insurance_rate: Decimal
    employee_union_fee_rate: Decimal
    company_social_insurance_rate: Decimal
    company_health_insurance_rate: Decimal
    company_unemployment_insurance_rate: Decimal
    company_union_fee_rate: Decimal
    max_insurance_salary: Decimal | None
    max_unemployment_salary: Decimal | None
    personal_deduction: Decimal
    dependent_deduction: Decimal
    enable_progressive_tax: bool


@dataclass(frozen=True)
class RegulationDefaults:
    """Fallback policy for missing regulation fields.

    Fields in ``ZERO_IS_MISSING`` fall back when stored as NULL or 0 (a zero
    divisor or a zero overtime multiplier is never intentional). All other
    fields fall back only when NULL, so a 0% union fee stays 0%.
    """

    working_days_per_month: int = 22
    working_hours_per_day: Decimal = Decimal("8")
    max_hours_per_day: Decimal = Decimal("8")
    overtime_weekday_rate: Decimal = Decimal("150")
    overtime_weekend_rate: Decimal = Decimal("200")
    overtime_holiday_rate: Decimal = Decimal("300")
    overtime_night_rate: Decimal = Decimal("130")
    employee_social_insurance_rate: Decimal = Decimal("8")
    employee_health_insurance_rate: Decimal = Decimal("1.5")
    employee_unemployment_insurance_rate: Decimal = Decimal("1")
    employee_union_fee_rate: Decimal = Decimal("0")
    company_social_insurance_rate: Decimal = Decimal("17.5")
    company_health_insurance_rate: Decimal = Decimal("3")
    company_unemployment_insurance_rate: Decimal = Decimal("1")
    company_union_fee_rate: Decimal = Decimal("0")
    personal_deduction: Decimal = Decimal("11000000")
    dependent_deduction: Decimal = Decimal("4400000")
    enable_progressive_tax: bool = True

    ZERO_IS_MISSING = frozenset(
        {
            "working_days_per_month",
            "working_hours_per_day",
            "max_hours_per_day",
            "overtime_weekday_rate",
            "overtime_weekend_rate",
            "overtime_holiday_rate",
            "overtime_night_rate",
            "personal_deduction",
            "dependent_deduction",
        }
    )

    def apply(self, regulation: SalaryRegulation | None) -> RegulationTerms:
        """Merge a stored regulation over these defaults."""
        values: dict[str, Any] = {}
        for f in fields(self):
            default = getattr(self, f.name)
            stored = getattr(regulation, f.name, None) if regulation is not None else None
            if stored is None or (f.name in self.ZERO_IS_MISSING and stored == 0):
                values[f.name] = default
            elif isinstance(default, bool):
                values[f.name] = bool(stored)
            elif isinstance(default, int):
                values[f.name] = int(stored)
            else:
                values[f.name] = as_decimal(stored)

        return RegulationTerms(
            regulation_id=regulation.id if regulation is not None else None,
            effective_date=regulation.effective_date if regulation is not None else None,
            max_insurance_salary=_positive_or_none(
                getattr(regulation, "max_insurance_salary", None)
            ),
            max_unemployment_salary=_positive_or_none(
                getattr(regulation, "max_unemployment_salary", None)
            ),
            **values,
        )


def _positive_or_none(value: Any) -> Decimal | None:
    """Caps stored as NULL or 0 mean "no cap"."""
    if value is None:
        return None
    amount = as_decimal(value)
    return amount if amount > 0 else None


@dataclass(frozen=True)
class MonthlyTotals:
    """Status-driven monthly attendance totals (batch generation)."""

    employee_id: UUID
    year: int
    month: int
    actual_working_days: Decimal = ZERO
    weekday_overtime_days: Decimal = ZERO
    weekend_overtime_days: Decimal = ZERO

    @property
    def total_overtime_days(self) -> Decimal:
        return self.weekday_overtime_days + self.weekend_overtime_days


@dataclass(frozen=True)
class CalendarTotals:
    """Date-driven monthly totals (employee-facing summary)."""

    employee_id: UUID
    year: int
    month: int
    working_hours_per_day: Decimal
    present_days: Decimal = ZERO
    weekday_overtime_hours: Decimal = ZERO
    weekend_overtime_hours: Decimal = ZERO

    @property
    def overtime_hours(self) -> Decimal:
        return self.weekday_overtime_hours + self.weekend_overtime_hours

    @property
    def weekday_overtime_days(self) -> Decimal:
        if self.working_hours_per_day <= 0:
            return ZERO
        return self.weekday_overtime_hours / self.working_hours_per_day

    @property
    def weekend_overtime_days(self) -> Decimal:
        if self.working_hours_per_day <= 0:
            return ZERO
        return self.weekend_overtime_hours / self.working_hours_per_day


@dataclass(frozen=True)
class TaxBracket:
    """Tax bracket for progressive taxation."""

    min_amount: Decimal
    max_amount: Decimal | None  # None = no upper limit
    rate: Decimal  # As decimal, e.g., 0.05 for 5%


@dataclass(frozen=True)
class InsuranceBreakdown:
    """Insurance contributions for one side (employee or company)."""

    social: Decimal = ZERO
    health: Decimal = ZERO
    unemployment: Decimal = ZERO
    union: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.social + self.health + self.unemployment + self.union


@dataclass(frozen=True)
class PayrollComputation:
    """Result of computing one employee's payroll for one month.

    Field names match ``PayrollRecord`` columns so that
    ``to_record_values()`` feeds the insert/upsert directly.
    """

    employee_id: UUID
    month: int
    year: int
    calculation_id: UUID
    regulation_id: UUID | None

    base_salary: Decimal
    working_days: int
    actual_working_days: Decimal
    daily_rate: Decimal
    probation_multiplier: Decimal
    actual_base_salary: Decimal

    weekday_overtime_days: Decimal
    weekend_overtime_days: Decimal
    weekday_overtime_pay: Decimal
    weekend_overtime_pay: Decimal
    overtime_pay: Decimal
    overtime_hours: Decimal
    overtime_rate: Decimal

    housing_allowance: Decimal
    transport_allowance: Decimal
    meal_allowance: Decimal
    phone_allowance: Decimal
    position_allowance: Decimal
    attendance_allowance: Decimal
    other_allowances: Decimal
    total_allowances: Decimal

    gross_income: Decimal

    social_insurance_employee: Decimal
    health_insurance_employee: Decimal
    unemployment_insurance_employee: Decimal
    union_fee_employee: Decimal
    employee_insurance_total: Decimal

    social_insurance_company: Decimal
    health_insurance_company: Decimal
    unemployment_insurance_company: Decimal
    union_fee_company: Decimal
    company_insurance_total: Decimal

    income_after_insurance: Decimal
    income_for_tax: Decimal
    personal_deduction: Decimal
    dependent_deduction: Decimal
    number_of_dependents: int
    taxable_income: Decimal
    income_tax: Decimal
    progressive_tax: bool

    total_deductions: Decimal
    net_salary: Decimal
    status: str = "pending"

    @property
    def period_key(self) -> tuple[UUID, int, int]:
        return (self.employee_id, self.month, self.year)

    def to_record_values(self) -> dict[str, Any]:
        """Column values for the payroll_record table."""
        return asdict(self)


@dataclass(frozen=True)
class RawClockEvent:
    """A punch from the device feed."""

    finger_id: str
    check_time: datetime


@dataclass(frozen=True)
class ClockIdentity:
    """Who a clock event belongs to.

    Linked identities carry the employee id. Unlinked ones keep the
    device id as ``finger:<id>`` so their punches stay visible.
    """

    key: str
    employee_id: UUID | None = None
    employee_code: str | None = None
    name: str | None = None

    @property
    def linked(self) -> bool:
        return self.employee_id is not None

    @classmethod
    def unlinked(cls, finger_id: str) -> ClockIdentity:
        return cls(key=f"finger:{finger_id}")


@dataclass(frozen=True)
class DailySpan:
    """First and last punch for one identity on one UTC calendar day."""

    identity: ClockIdentity
    work_date: date
    first_seen: datetime
    last_seen: datetime
    standard_hours: Decimal = Decimal("8")

    @property
    def hours(self) -> Decimal:
        seconds = Decimal(str((self.last_seen - self.first_seen).total_seconds()))
        return (seconds / Decimal("3600")).quantize(OUTPUT_PRECISION, rounding=ROUND_HALF_UP)

    @property
    def work_value(self) -> Decimal:
        if self.standard_hours <= 0:
            return ZERO
        value = self.hours / self.standard_hours
        return min(ONE, max(ZERO, value)).quantize(OUTPUT_PRECISION, rounding=ROUND_HALF_UP)

    @property
    def overtime_hours(self) -> Decimal:
        return max(ZERO, self.hours - self.standard_hours)
