"""Versioned salary regulation model."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, Integer, Numeric, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from hr_payroll.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

Rate = Numeric(7, 3)


class SalaryRegulation(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Effective-dated compensation parameters.

    Rows are append-only: a new regulation is a new row with a later
    ``effective_date``; history stays queryable. Every rate column is a
    percentage (150 means 150%). Nullable columns are filled from
    ``RegulationDefaults`` before use.
    """

    __tablename__ = "salary_regulation"

    effective_date: Mapped[date] = mapped_column(Date, nullable=False)

    max_insurance_salary: Mapped[Decimal | None] = mapped_column(nullable=True)
    max_unemployment_salary: Mapped[Decimal | None] = mapped_column(nullable=True)

    working_days_per_month: Mapped[int | None] = mapped_column(Integer, nullable=True)
    working_hours_per_day: Mapped[Decimal | None] = mapped_column(Rate, nullable=True)
    max_hours_per_day: Mapped[Decimal | None] = mapped_column(Rate, nullable=True)

    overtime_weekday_rate: Mapped[Decimal | None] = mapped_column(Rate, nullable=True)
    overtime_weekend_rate: Mapped[Decimal | None] = mapped_column(Rate, nullable=True)
    overtime_holiday_rate: Mapped[Decimal | None] = mapped_column(Rate, nullable=True)
    overtime_night_rate: Mapped[Decimal | None] = mapped_column(Rate, nullable=True)

    employee_social_insurance_rate: Mapped[Decimal | None] = mapped_column(Rate, nullable=True)
    employee_health_insurance_rate: Mapped[Decimal | None] = mapped_column(Rate, nullable=True)
    employee_unemployment_insurance_rate: Mapped[Decimal | None] = mapped_column(
        Rate, nullable=True
    )
    employee_union_fee_rate: Mapped[Decimal | None] = mapped_column(Rate, nullable=True)

    company_social_insurance_rate: Mapped[Decimal | None] = mapped_column(Rate, nullable=True)
    company_health_insurance_rate: Mapped[Decimal | None] = mapped_column(Rate, nullable=True)
    company_unemployment_insurance_rate: Mapped[Decimal | None] = mapped_column(
        Rate, nullable=True
    )
    company_union_fee_rate: Mapped[Decimal | None] = mapped_column(Rate, nullable=True)

    personal_deduction: Mapped[Decimal | None] = mapped_column(nullable=True)
    dependent_deduction: Mapped[Decimal | None] = mapped_column(nullable=True)
    enable_progressive_tax: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    __table_args__ = (
        UniqueConstraint("effective_date", name="salary_regulation_effective_date_unique"),
    )
