"""Monthly compensation calculation."""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal
from typing import Any
from uuid import UUID

from hr_payroll.calculators.tax_calculator import IncomeTaxCalculator
from hr_payroll.calculators.types import (
    HUNDRED,
    ONE,
    PROBATION_MULTIPLIER,
    ZERO,
    EmployeeProfile,
    InsuranceBreakdown,
    MonthlyTotals,
    PayrollComputation,
    RegulationTerms,
    round_money,
)


def _capped(base: Decimal, cap: Decimal | None) -> Decimal:
    base = max(ZERO, base)
    if cap is None:
        return base
    return min(base, cap)


class CompensationCalculator:
    """Pure payroll computation for one employee and one month.

    Calculation order:
    1) Daily rate from base salary and the regulation's working days
    2) Pro-rated base salary, scaled for probation
    3) Weekday and weekend overtime pay
    4) Allowances and gross income
    5) Employee and company insurance on the capped insurance base
    6) Taxable income after insurance, meal allowance and deductions
    7) Income tax, total deductions and net salary

    Every money component is rounded to 2 places before it is summed, so
    ``gross_income`` always equals the sum of its stored parts. The
    calculator performs no I/O and holds no mutable state.
    """

    def __init__(
        self,
        engine_version: str = "1.0.0",
        tax_calculator: IncomeTaxCalculator | None = None,
    ):
        self.engine_version = engine_version
        self.tax_calculator = tax_calculator or IncomeTaxCalculator()

    def compute(
        self,
        profile: EmployeeProfile,
        terms: RegulationTerms,
        totals: MonthlyTotals,
    ) -> PayrollComputation:
        working_days = terms.working_days_per_month
        daily_rate = profile.base_salary / Decimal(working_days)
        multiplier = PROBATION_MULTIPLIER if profile.is_probation else ONE

        actual_days = max(ZERO, totals.actual_working_days)
        weekday_days = max(ZERO, totals.weekday_overtime_days)
        weekend_days = max(ZERO, totals.weekend_overtime_days)

        actual_base_salary = round_money(daily_rate * actual_days * multiplier)
        weekday_overtime_pay = round_money(
            daily_rate * multiplier * weekday_days * (terms.overtime_weekday_rate / HUNDRED)
        )
        weekend_overtime_pay = round_money(
            daily_rate * multiplier * weekend_days * (terms.overtime_weekend_rate / HUNDRED)
        )
        overtime_pay = weekday_overtime_pay + weekend_overtime_pay

        allowances = profile.allowances
        housing = round_money(allowances.housing)
        transport = round_money(allowances.transport)
        meal = round_money(allowances.meal)
        phone = round_money(allowances.phone)
        position = round_money(allowances.position)
        attendance = round_money(allowances.attendance)
        other = round_money(allowances.other)
        total_allowances = housing + transport + meal + phone + position + attendance + other

        gross_income = actual_base_salary + total_allowances + overtime_pay

        employee_side = self._insurance(
            profile.base_salary,
            terms,
            social=terms.employee_social_insurance_rate,
            health=terms.employee_health_insurance_rate,
            unemployment=terms.employee_unemployment_insurance_rate,
            union=terms.employee_union_fee_rate,
        )
        company_side = self._insurance(
            profile.base_salary,
            terms,
            social=terms.company_social_insurance_rate,
            health=terms.company_health_insurance_rate,
            unemployment=terms.company_unemployment_insurance_rate,
            union=terms.company_union_fee_rate,
        )
        employee_insurance_total = employee_side.total

        income_after_insurance = gross_income - employee_insurance_total
        # Meal allowance is treated as fully tax-exempt.
        income_for_tax = income_after_insurance - meal

        personal_deduction = (
            profile.personal_deduction
            if profile.personal_deduction is not None and profile.personal_deduction > 0
            else terms.personal_deduction
        )
        dependents = profile.effective_dependents
        dependent_deduction = round_money(terms.dependent_deduction * dependents)
        personal_deduction = round_money(personal_deduction)

        taxable_income = max(ZERO, income_for_tax - personal_deduction - dependent_deduction)
        income_tax = self.tax_calculator.calculate(
            taxable_income, progressive=terms.enable_progressive_tax
        )

        total_deductions = employee_insurance_total + income_tax
        net_salary = gross_income - total_deductions

        overtime_rate = (
            terms.overtime_weekend_rate if weekend_days > 0 else terms.overtime_weekday_rate
        )

        return PayrollComputation(
            employee_id=profile.employee_id,
            month=totals.month,
            year=totals.year,
            calculation_id=self.calculation_id(profile, terms, totals),
            regulation_id=terms.regulation_id,
            base_salary=round_money(profile.base_salary),
            working_days=working_days,
            actual_working_days=round_money(actual_days),
            daily_rate=round_money(daily_rate),
            probation_multiplier=multiplier,
            actual_base_salary=actual_base_salary,
            weekday_overtime_days=round_money(weekday_days),
            weekend_overtime_days=round_money(weekend_days),
            weekday_overtime_pay=weekday_overtime_pay,
            weekend_overtime_pay=weekend_overtime_pay,
            overtime_pay=overtime_pay,
            overtime_hours=round_money((weekday_days + weekend_days) * terms.working_hours_per_day),
            overtime_rate=overtime_rate,
            housing_allowance=housing,
            transport_allowance=transport,
            meal_allowance=meal,
            phone_allowance=phone,
            position_allowance=position,
            attendance_allowance=attendance,
            other_allowances=other,
            total_allowances=total_allowances,
            gross_income=gross_income,
            social_insurance_employee=employee_side.social,
            health_insurance_employee=employee_side.health,
            unemployment_insurance_employee=employee_side.unemployment,
            union_fee_employee=employee_side.union,
            employee_insurance_total=employee_insurance_total,
            social_insurance_company=company_side.social,
            health_insurance_company=company_side.health,
            unemployment_insurance_company=company_side.unemployment,
            union_fee_company=company_side.union,
            company_insurance_total=company_side.total,
            income_after_insurance=income_after_insurance,
            income_for_tax=income_for_tax,
            personal_deduction=personal_deduction,
            dependent_deduction=dependent_deduction,
            number_of_dependents=dependents,
            taxable_income=taxable_income,
            income_tax=income_tax,
            progressive_tax=terms.enable_progressive_tax,
            total_deductions=total_deductions,
            net_salary=net_salary,
        )

    def _insurance(
        self,
        base_salary: Decimal,
        terms: RegulationTerms,
        *,
        social: Decimal,
        health: Decimal,
        unemployment: Decimal,
        union: Decimal,
    ) -> InsuranceBreakdown:
        """Contributions for one side; unemployment has its own cap."""
        insurance_base = _capped(base_salary, terms.max_insurance_salary)
        unemployment_base = _capped(base_salary, terms.max_unemployment_salary)
        return InsuranceBreakdown(
            social=round_money(insurance_base * max(ZERO, social) / HUNDRED),
            health=round_money(insurance_base * max(ZERO, health) / HUNDRED),
            unemployment=round_money(unemployment_base * max(ZERO, unemployment) / HUNDRED),
            union=round_money(insurance_base * max(ZERO, union) / HUNDRED),
        )

    def calculation_id(
        self,
        profile: EmployeeProfile,
        terms: RegulationTerms,
        totals: MonthlyTotals,
    ) -> UUID:
        """Generate deterministic calculation ID."""
        data: dict[str, Any] = {
            "employee_id": str(profile.employee_id),
            "year": totals.year,
            "month": totals.month,
            "engine_version": self.engine_version,
            "regulation_id": str(terms.regulation_id) if terms.regulation_id else None,
            "base_salary": str(profile.base_salary),
            "allowances": [str(v) for v in (
                profile.allowances.housing,
                profile.allowances.transport,
                profile.allowances.meal,
                profile.allowances.phone,
                profile.allowances.position,
                profile.allowances.attendance,
                profile.allowances.other,
            )],
            "dependents": profile.effective_dependents,
            "personal_deduction": (
                str(profile.personal_deduction) if profile.personal_deduction is not None else None
            ),
            "is_probation": profile.is_probation,
            "actual_working_days": str(totals.actual_working_days),
            "weekday_overtime_days": str(totals.weekday_overtime_days),
            "weekend_overtime_days": str(totals.weekend_overtime_days),
        }
        json_str = json.dumps(data, sort_keys=True)
        hash_bytes = hashlib.sha256(json_str.encode()).digest()
        return UUID(bytes=hash_bytes[:16])
