"""Monthly payroll record model."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hr_payroll.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from hr_payroll.models.employee import Employee

PAYROLL_CONFLICT_KEY = ("employee_id", "month", "year")


class PayrollRecord(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Computed payroll for one employee and one month.

    Financial columns are written only by the batch writer. Approval
    workflows change ``status`` and payment metadata only.
    """

    __tablename__ = "payroll_record"

    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.id", ondelete="CASCADE"), nullable=False
    )
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")

    # Traceability
    calculation_id: Mapped[UUID] = mapped_column(nullable=False)
    regulation_id: Mapped[UUID | None] = mapped_column(nullable=True)

    # Attendance-driven base pay
    base_salary: Mapped[Decimal] = mapped_column(nullable=False)
    working_days: Mapped[int] = mapped_column(Integer, nullable=False)
    actual_working_days: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    daily_rate: Mapped[Decimal] = mapped_column(nullable=False)
    probation_multiplier: Mapped[Decimal] = mapped_column(Numeric(4, 2), nullable=False)
    actual_base_salary: Mapped[Decimal] = mapped_column(nullable=False)

    # Overtime
    weekday_overtime_days: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    weekend_overtime_days: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    weekday_overtime_pay: Mapped[Decimal] = mapped_column(nullable=False)
    weekend_overtime_pay: Mapped[Decimal] = mapped_column(nullable=False)
    overtime_pay: Mapped[Decimal] = mapped_column(nullable=False)
    overtime_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    overtime_rate: Mapped[Decimal] = mapped_column(Numeric(7, 3), nullable=False)

    # Allowances
    housing_allowance: Mapped[Decimal] = mapped_column(nullable=False)
    transport_allowance: Mapped[Decimal] = mapped_column(nullable=False)
    meal_allowance: Mapped[Decimal] = mapped_column(nullable=False)
    phone_allowance: Mapped[Decimal] = mapped_column(nullable=False)
    position_allowance: Mapped[Decimal] = mapped_column(nullable=False)
    attendance_allowance: Mapped[Decimal] = mapped_column(nullable=False)
    other_allowances: Mapped[Decimal] = mapped_column(nullable=False)
    total_allowances: Mapped[Decimal] = mapped_column(nullable=False)

    gross_income: Mapped[Decimal] = mapped_column(nullable=False)

    # Insurance, employee side
    social_insurance_employee: Mapped[Decimal] = mapped_column(nullable=False)
    health_insurance_employee: Mapped[Decimal] = mapped_column(nullable=False)
    unemployment_insurance_employee: Mapped[Decimal] = mapped_column(nullable=False)
    union_fee_employee: Mapped[Decimal] = mapped_column(nullable=False)
    employee_insurance_total: Mapped[Decimal] = mapped_column(nullable=False)

    # Insurance, company side
    social_insurance_company: Mapped[Decimal] = mapped_column(nullable=False)
    health_insurance_company: Mapped[Decimal] = mapped_column(nullable=False)
    unemployment_insurance_company: Mapped[Decimal] = mapped_column(nullable=False)
    union_fee_company: Mapped[Decimal] = mapped_column(nullable=False)
    company_insurance_total: Mapped[Decimal] = mapped_column(nullable=False)

    # Tax
    income_after_insurance: Mapped[Decimal] = mapped_column(nullable=False)
    income_for_tax: Mapped[Decimal] = mapped_column(nullable=False)
    personal_deduction: Mapped[Decimal] = mapped_column(nullable=False)
    dependent_deduction: Mapped[Decimal] = mapped_column(nullable=False)
    number_of_dependents: Mapped[int] = mapped_column(Integer, nullable=False)
    taxable_income: Mapped[Decimal] = mapped_column(nullable=False)
    income_tax: Mapped[Decimal] = mapped_column(nullable=False)
    progressive_tax: Mapped[bool] = mapped_column(nullable=False)

    total_deductions: Mapped[Decimal] = mapped_column(nullable=False)
    net_salary: Mapped[Decimal] = mapped_column(nullable=False)

    # Payment metadata (owned by approval workflows)
    payment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint(*PAYROLL_CONFLICT_KEY, name="payroll_record_employee_period_unique"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'paid', 'rejected')",
            name="payroll_record_status_check",
        ),
        CheckConstraint("month BETWEEN 1 AND 12", name="payroll_record_month_check"),
    )

    employee: Mapped[Employee] = relationship()
