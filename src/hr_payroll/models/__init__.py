"""ORM models."""

from hr_payroll.models.attendance import AttendanceRecord, ClockEvent
from hr_payroll.models.base import Base, TimestampMixin
from hr_payroll.models.employee import Department, Employee, Position
from hr_payroll.models.payroll import PAYROLL_CONFLICT_KEY, PayrollRecord
from hr_payroll.models.regulation import SalaryRegulation

__all__ = [
    "AttendanceRecord",
    "Base",
    "ClockEvent",
    "Department",
    "Employee",
    "PAYROLL_CONFLICT_KEY",
    "PayrollRecord",
    "Position",
    "SalaryRegulation",
    "TimestampMixin",
]
