"""Create the schema and seed a baseline salary regulation.

Run with:
    python scripts/seed_regulation.py
    python scripts/seed_regulation.py --effective-date 2025-01-01 --max-insurance-salary 46800000

Regulations are append-only; running this twice for the same date is a no-op.
"""

from __future__ import annotations

import argparse
import asyncio
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hr_payroll.database import dispose_db, get_session, init_db
from hr_payroll.models import Base, SalaryRegulation


async def create_schema() -> None:
    """Create any missing tables."""
    engine, _ = init_db()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("Schema ready")


async def seed_regulation(
    session: AsyncSession,
    effective_date: date,
    max_insurance_salary: Decimal | None,
    max_unemployment_salary: Decimal | None,
) -> SalaryRegulation | None:
    """Append the baseline regulation unless one exists for that date."""
    result = await session.execute(
        select(SalaryRegulation).where(SalaryRegulation.effective_date == effective_date)
    )
    if result.scalar_one_or_none() is not None:
        print(f"Regulation effective {effective_date} already exists, skipping")
        return None

    regulation = SalaryRegulation(
        effective_date=effective_date,
        max_insurance_salary=max_insurance_salary,
        max_unemployment_salary=max_unemployment_salary,
        working_days_per_month=22,
        working_hours_per_day=Decimal("8"),
        max_hours_per_day=Decimal("12"),
        overtime_weekday_rate=Decimal("150"),
        overtime_weekend_rate=Decimal("200"),
        overtime_holiday_rate=Decimal("300"),
        overtime_night_rate=Decimal("130"),
        employee_social_insurance_rate=Decimal("8"),
        employee_health_insurance_rate=Decimal("1.5"),
        employee_unemployment_insurance_rate=Decimal("1"),
        employee_union_fee_rate=Decimal("0"),
        company_social_insurance_rate=Decimal("17.5"),
        company_health_insurance_rate=Decimal("3"),
        company_unemployment_insurance_rate=Decimal("1"),
        company_union_fee_rate=Decimal("2"),
        personal_deduction=Decimal("11000000"),
        dependent_deduction=Decimal("4400000"),
        enable_progressive_tax=True,
    )
    session.add(regulation)
    await session.flush()
    print(f"Created regulation effective {effective_date}")
    return regulation


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed a baseline salary regulation")
    parser.add_argument("--effective-date", type=date.fromisoformat, default=date(2024, 1, 1))
    parser.add_argument("--max-insurance-salary", type=Decimal, default=None)
    parser.add_argument("--max-unemployment-salary", type=Decimal, default=None)
    return parser.parse_args()


async def main(args: argparse.Namespace) -> None:
    """Run seed script."""
    await create_schema()

    async with get_session() as session:
        await seed_regulation(
            session,
            args.effective_date,
            args.max_insurance_salary,
            args.max_unemployment_salary,
        )

    await dispose_db()
    print("\nDone!")


if __name__ == "__main__":
    asyncio.run(main(parse_args()))
