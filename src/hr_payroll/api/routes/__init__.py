"""API routes."""

from hr_payroll.api.routes.attendance import router as attendance_router
from hr_payroll.api.routes.health import router as health_router
from hr_payroll.api.routes.payroll import router as payroll_router
from hr_payroll.api.routes.regulations import router as regulations_router

__all__ = ["attendance_router", "health_router", "payroll_router", "regulations_router"]
