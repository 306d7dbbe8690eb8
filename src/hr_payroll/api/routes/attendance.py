"""Attendance summary endpoints."""

from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query

from hr_payroll.api.dependencies import SummaryService
from hr_payroll.api.schemas import (
    CalendarSummaryResponse,
    ClockSummaryItem,
    ClockSummaryResponse,
    ErrorResponse,
)

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.get(
    "/summary",
    response_model=ClockSummaryResponse,
    responses={400: {"model": ErrorResponse}},
)
async def clock_summary(
    service: SummaryService,
    year: Annotated[int, Query()],
    month: Annotated[int, Query()],
) -> ClockSummaryResponse:
    """Monthly totals reconciled from raw device clock events.

    Punches whose device id matches no employee are listed under
    ``finger:<id>`` identities.
    """
    summaries = await service.clock_summary(year, month)
    items = [
        ClockSummaryItem(
            identity=s.identity.key,
            linked=s.identity.linked,
            employee_id=s.identity.employee_id,
            employee_code=s.identity.employee_code,
            name=s.identity.name,
            days=s.days,
            total_hours=s.total_hours,
            work_days=s.work_days,
            overtime_hours=s.overtime_hours,
        )
        for s in summaries
    ]
    return ClockSummaryResponse(
        year=year,
        month=month,
        items=items,
        unlinked_count=sum(1 for item in items if not item.linked),
    )


@router.get(
    "/employees/{employee_id}/summary",
    response_model=CalendarSummaryResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def employee_summary(
    service: SummaryService,
    employee_id: Annotated[UUID, Path()],
    year: Annotated[int, Query()],
    month: Annotated[int, Query()],
) -> CalendarSummaryResponse:
    """Calendar-based attendance totals for one employee."""
    totals = await service.employee_summary(employee_id, year, month)
    total_ot_days = totals.weekday_overtime_days + totals.weekend_overtime_days
    return CalendarSummaryResponse(
        employee_id=employee_id,
        year=year,
        month=month,
        total_present_days=totals.present_days,
        total_overtime_hours=totals.overtime_hours,
        weekday_overtime_hours=totals.weekday_overtime_hours,
        weekend_overtime_hours=totals.weekend_overtime_hours,
        weekday_overtime_days=totals.weekday_overtime_days,
        weekend_overtime_days=totals.weekend_overtime_days,
        total_overtime_days=total_ot_days,
        standard_present_days=max(Decimal("0"), totals.present_days - total_ot_days),
    )
