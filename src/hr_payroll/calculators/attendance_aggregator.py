"""Monthly attendance aggregation.

Two strategies exist and serve different call sites:

- ``aggregate_by_status`` drives batch payroll generation. It trusts the
  stored status classification and sums ``work_value``.
- ``aggregate_by_calendar`` drives the employee-facing summaries. It
  classifies weekend days from the calendar date and derives overtime
  hours from ``overtime_hours`` with a different rule for weekends.

They intentionally disagree for some inputs (a ``weekend_overtime`` row
dated on a weekday, for example) and are tested separately.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from uuid import UUID

from hr_payroll.calculators.types import (
    ONE,
    STANDARD_WORK_STATUSES,
    ZERO,
    AttendanceRow,
    AttendanceStatus,
    CalendarTotals,
    MonthlyTotals,
    RegulationTerms,
)

# Statuses whose overtime_hours count on a Saturday or Sunday.
WEEKEND_OVERTIME_STATUSES = frozenset(
    {
        AttendanceStatus.PRESENT_FULL.value,
        AttendanceStatus.PRESENT_HALF.value,
        AttendanceStatus.LATE_FULL.value,
        AttendanceStatus.MEETING_FULL.value,
        AttendanceStatus.OVERTIME.value,
        AttendanceStatus.WEEKEND_OVERTIME.value,
    }
)


class MalformedAttendanceError(ValueError):
    """Raised when an attendance row cannot be aggregated."""

    def __init__(self, employee_id: UUID, work_date: date | None, reason: str):
        self.employee_id = employee_id
        self.work_date = work_date
        self.reason = reason
        super().__init__(
            f"Malformed attendance for employee {employee_id} on {work_date}: {reason}"
        )


def _checked_work_value(row: AttendanceRow, employee_id: UUID) -> Decimal:
    if row.employee_id != employee_id:
        raise MalformedAttendanceError(
            employee_id, row.work_date, f"row belongs to employee {row.employee_id}"
        )
    value = row.work_value if row.work_value is not None else ZERO
    if value < ZERO or value > ONE:
        raise MalformedAttendanceError(
            employee_id, row.work_date, f"work_value {value} outside [0, 1]"
        )
    if row.overtime_hours is not None and row.overtime_hours < ZERO:
        raise MalformedAttendanceError(
            employee_id, row.work_date, f"negative overtime_hours {row.overtime_hours}"
        )
    return value


def aggregate_by_status(
    employee_id: UUID,
    year: int,
    month: int,
    rows: Iterable[AttendanceRow],
) -> MonthlyTotals:
    """Sum work values into actual, weekday-overtime and weekend-overtime days.

    Only standard work statuses credit actual working days; ``overtime`` and
    ``weekend_overtime`` rows feed their own buckets.

    Raises:
        MalformedAttendanceError: If any row is out of range
    """
    actual = ZERO
    weekday_ot = ZERO
    weekend_ot = ZERO

    for row in rows:
        value = _checked_work_value(row, employee_id)
        if row.status in STANDARD_WORK_STATUSES:
            actual += value
        elif row.status == AttendanceStatus.OVERTIME.value:
            weekday_ot += value
        elif row.status == AttendanceStatus.WEEKEND_OVERTIME.value:
            weekend_ot += value

    return MonthlyTotals(
        employee_id=employee_id,
        year=year,
        month=month,
        actual_working_days=actual,
        weekday_overtime_days=weekday_ot,
        weekend_overtime_days=weekend_ot,
    )


def aggregate_by_calendar(
    employee_id: UUID,
    year: int,
    month: int,
    rows: Iterable[AttendanceRow],
    terms: RegulationTerms,
) -> CalendarTotals:
    """Sum present days and overtime hours using the calendar weekday.

    Weekend days: the recorded ``overtime_hours`` all count, for worked
    statuses only. Weekdays: only the hours beyond ``working_hours_per_day``
    count, capped so the day never exceeds ``max_hours_per_day``.

    Raises:
        MalformedAttendanceError: If any row is out of range
    """
    standard = terms.working_hours_per_day
    ceiling = terms.max_hours_per_day

    present = ZERO
    weekday_hours = ZERO
    weekend_hours = ZERO

    for row in rows:
        value = _checked_work_value(row, employee_id)
        if value > ZERO and row.status != AttendanceStatus.WEEKEND_OVERTIME.value:
            present += value

        recorded = row.overtime_hours or ZERO
        if row.is_weekend:
            if row.status in WEEKEND_OVERTIME_STATUSES:
                weekend_hours += recorded
        else:
            counted = min(standard + recorded, ceiling) - standard
            weekday_hours += max(ZERO, counted)

    return CalendarTotals(
        employee_id=employee_id,
        year=year,
        month=month,
        working_hours_per_day=standard,
        present_days=present,
        weekday_overtime_hours=weekday_hours,
        weekend_overtime_hours=weekend_hours,
    )
