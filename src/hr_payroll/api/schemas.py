"""Pydantic schemas for API request/response models."""

from datetime import date
from decimal import Decimal
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

# Mirrors payroll_record_status_check
PayrollStatus = Literal["pending", "approved", "paid", "rejected"]


# ============================================================================
# Common
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
    context: dict[str, Any] | None = None


class PayrollConflictResponse(ErrorResponse):
    """409 body returned when a save would overwrite existing records."""

    conflict_count: int


class PeriodRequest(BaseModel):
    """A pay period. Range checks happen in the engine so errors map to 400."""

    year: int
    month: int


# ============================================================================
# Payroll schemas
# ============================================================================


class PayrollRecordSchema(BaseModel):
    """Computed payroll values for one employee and month."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    month: int
    year: int
    status: PayrollStatus = "pending"
    calculation_id: UUID
    regulation_id: UUID | None = None

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


class StoredPayrollRecord(PayrollRecordSchema):
    """A persisted payroll record."""

    id: UUID
    payment_date: date | None = None


class SkippedEmployeeSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    reason: str


class GenerateResponse(BaseModel):
    """Schema for a generated (unsaved) payroll batch."""

    records: list[PayrollRecordSchema]
    skipped: list[SkippedEmployeeSchema]
    count: int


class SaveRequest(BaseModel):
    """Schema for saving a generated batch."""

    records: list[PayrollRecordSchema]
    overwrite: bool = False


class SaveResponse(BaseModel):
    success: bool
    count: int


class RosterSummaryItem(BaseModel):
    """One employee line of the payroll roster summary."""

    employee_id: UUID
    employee_code: str
    name: str
    position: str | None = None
    base_salary: Decimal
    working_days: int
    present_days: Decimal
    overtime_hours: Decimal
    weekday_overtime_hours: Decimal
    weekend_overtime_hours: Decimal
    weekday_overtime_days: Decimal
    weekend_overtime_days: Decimal
    dependents: int
    is_probation: bool
    allowances: dict[str, Decimal]


# ============================================================================
# Attendance schemas
# ============================================================================


class CalendarSummaryResponse(BaseModel):
    """Calendar-strategy attendance totals for one employee."""

    employee_id: UUID
    year: int
    month: int
    total_present_days: Decimal
    total_overtime_hours: Decimal
    weekday_overtime_hours: Decimal
    weekend_overtime_hours: Decimal
    weekday_overtime_days: Decimal
    weekend_overtime_days: Decimal
    total_overtime_days: Decimal
    standard_present_days: Decimal


class ClockSummaryItem(BaseModel):
    """Reconciled clock-event totals for one identity."""

    identity: str
    linked: bool
    employee_id: UUID | None = None
    employee_code: str | None = None
    name: str | None = None
    days: int
    total_hours: Decimal
    work_days: Decimal
    overtime_hours: Decimal


class ClockSummaryResponse(BaseModel):
    year: int
    month: int
    items: list[ClockSummaryItem]
    unlinked_count: int


# ============================================================================
# Regulation schemas
# ============================================================================


class RegulationFields(BaseModel):
    """Optional regulation parameters; rates are percentages."""

    max_insurance_salary: Decimal | None = Field(default=None, ge=0)
    max_unemployment_salary: Decimal | None = Field(default=None, ge=0)
    working_days_per_month: int | None = Field(default=None, ge=0)
    working_hours_per_day: Decimal | None = Field(default=None, ge=0)
    max_hours_per_day: Decimal | None = Field(default=None, ge=0)
    overtime_weekday_rate: Decimal | None = Field(default=None, ge=0)
    overtime_weekend_rate: Decimal | None = Field(default=None, ge=0)
    overtime_holiday_rate: Decimal | None = Field(default=None, ge=0)
    overtime_night_rate: Decimal | None = Field(default=None, ge=0)
    employee_social_insurance_rate: Decimal | None = Field(default=None, ge=0)
    employee_health_insurance_rate: Decimal | None = Field(default=None, ge=0)
    employee_unemployment_insurance_rate: Decimal | None = Field(default=None, ge=0)
    employee_union_fee_rate: Decimal | None = Field(default=None, ge=0)
    company_social_insurance_rate: Decimal | None = Field(default=None, ge=0)
    company_health_insurance_rate: Decimal | None = Field(default=None, ge=0)
    company_unemployment_insurance_rate: Decimal | None = Field(default=None, ge=0)
    company_union_fee_rate: Decimal | None = Field(default=None, ge=0)
    personal_deduction: Decimal | None = Field(default=None, ge=0)
    dependent_deduction: Decimal | None = Field(default=None, ge=0)
    enable_progressive_tax: bool | None = None


class RegulationCreate(RegulationFields):
    """Schema for appending a new regulation version."""

    effective_date: date


class RegulationResponse(RegulationFields):
    """Schema for a stored regulation version."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    effective_date: date
