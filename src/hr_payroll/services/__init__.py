"""Payroll engine services."""

from hr_payroll.services.attendance_summary import AttendanceSummaryService, EmployeeNotFoundError
from hr_payroll.services.notifications import NotificationDispatcher
from hr_payroll.services.payroll_batch import BatchResult, PayrollBatchWriter, PayrollConflictError
from hr_payroll.services.store import AttendanceFetchError, PayrollDataSource, SqlPayrollStore

__all__ = [
    "AttendanceFetchError",
    "AttendanceSummaryService",
    "BatchResult",
    "EmployeeNotFoundError",
    "NotificationDispatcher",
    "PayrollBatchWriter",
    "PayrollConflictError",
    "PayrollDataSource",
    "SqlPayrollStore",
]
