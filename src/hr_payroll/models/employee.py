"""Employee, department and position models."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hr_payroll.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from hr_payroll.models.attendance import AttendanceRecord


class Department(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Organisational department (managed outside the engine)."""

    __tablename__ = "department"

    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)


class Position(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Job position. The name feeds the probation heuristic."""

    __tablename__ = "position"

    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)


class Employee(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Employee HR record. Read-only to the payroll engine."""

    __tablename__ = "employee"

    employee_code: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")
    department_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("department.id", ondelete="SET NULL"), nullable=True
    )
    position_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("position.id", ondelete="SET NULL"), nullable=True
    )

    base_salary: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    # Fixed monthly allowances
    housing_allowance: Mapped[Decimal | None] = mapped_column(nullable=True)
    transport_allowance: Mapped[Decimal | None] = mapped_column(nullable=True)
    meal_allowance: Mapped[Decimal | None] = mapped_column(nullable=True)
    phone_allowance: Mapped[Decimal | None] = mapped_column(nullable=True)
    position_allowance: Mapped[Decimal | None] = mapped_column(nullable=True)
    attendance_allowance: Mapped[Decimal | None] = mapped_column(nullable=True)
    other_allowances: Mapped[Decimal | None] = mapped_column(nullable=True)

    # Tax profile
    dependents_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    children_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    marital_status: Mapped[str | None] = mapped_column(String, nullable=True)
    personal_deduction: Mapped[Decimal | None] = mapped_column(nullable=True)

    # NULL means "not migrated yet": fall back to the position-name heuristic.
    is_probation: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'inactive', 'terminated', 'on_leave')",
            name="employee_status_check",
        ),
        CheckConstraint("dependents_count >= 0", name="employee_dependents_check"),
    )

    # Relationships
    department: Mapped[Department | None] = relationship(lazy="selectin")
    position: Mapped[Position | None] = relationship(lazy="selectin")
    attendance_records: Mapped[list[AttendanceRecord]] = relationship(
        back_populates="employee"
    )
