"""Attendance rows and raw device clock events."""

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
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hr_payroll.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from hr_payroll.models.employee import Employee


class AttendanceRecord(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """One classified attendance day for an employee."""

    __tablename__ = "attendance_record"

    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.id", ondelete="CASCADE"), nullable=False
    )
    work_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False)
    work_value: Mapped[Decimal | None] = mapped_column(Numeric(4, 2), nullable=True)
    overtime_hours: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    check_in_time: Mapped[datetime | None] = mapped_column(nullable=True)
    check_out_time: Mapped[datetime | None] = mapped_column(nullable=True)
    notes: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        UniqueConstraint("employee_id", "date", name="attendance_employee_date_unique"),
        Index("attendance_period_idx", "employee_id", "year", "month"),
    )

    employee: Mapped[Employee] = relationship(back_populates="attendance_records")


class ClockEvent(Base):
    """Raw punch from the legacy fingerprint device feed.

    ``finger_id`` is whatever the device stored; it has no guaranteed
    relationship to ``Employee.employee_code``. The engine only reads
    this table.
    """

    __tablename__ = "clock_event"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    finger_id: Mapped[str] = mapped_column(String, nullable=False)
    check_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        CheckConstraint("length(finger_id) > 0", name="clock_event_finger_id_check"),
        Index("clock_event_check_time_idx", "check_time"),
    )
