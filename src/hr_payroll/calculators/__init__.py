"""Payroll calculation pipeline."""

from hr_payroll.calculators.attendance_aggregator import (
    MalformedAttendanceError,
    aggregate_by_calendar,
    aggregate_by_status,
)
from hr_payroll.calculators.attendance_reconciler import AttendanceReconciler, normalize_device_code
from hr_payroll.calculators.compensation import CompensationCalculator
from hr_payroll.calculators.regulation_resolver import NoApplicableRegulationError, RegulationResolver
from hr_payroll.calculators.tax_calculator import IncomeTaxCalculator, PROGRESSIVE_TAX_BRACKETS

__all__ = [
    "AttendanceReconciler",
    "CompensationCalculator",
    "IncomeTaxCalculator",
    "MalformedAttendanceError",
    "NoApplicableRegulationError",
    "PROGRESSIVE_TAX_BRACKETS",
    "RegulationResolver",
    "aggregate_by_calendar",
    "aggregate_by_status",
    "normalize_device_code",
]
