"""Payroll generation and persistence endpoints."""

from collections import defaultdict
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Query

from hr_payroll.api.dependencies import BatchWriter, Notifier, Store, SummaryService
from hr_payroll.api.schemas import (
    ErrorResponse,
    GenerateResponse,
    PayrollConflictResponse,
    PayrollRecordSchema,
    PeriodRequest,
    RosterSummaryItem,
    SaveRequest,
    SaveResponse,
    SkippedEmployeeSchema,
    StoredPayrollRecord,
)
from hr_payroll.calculators.types import period_bounds
from hr_payroll.services.notifications import NotificationDispatcher

router = APIRouter(prefix="/payroll", tags=["payroll"])


# ============================================================================
# Generation and persistence
# ============================================================================


@router.post(
    "/generate",
    response_model=GenerateResponse,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def generate_payroll(writer: BatchWriter, payload: PeriodRequest) -> GenerateResponse:
    """Compute (but do not save) payroll for all active employees."""
    result = await writer.generate(payload.year, payload.month)
    return GenerateResponse(
        records=[PayrollRecordSchema.model_validate(r) for r in result.records],
        skipped=[SkippedEmployeeSchema.model_validate(s) for s in result.skipped],
        count=result.count,
    )


async def _notify_saved(
    notifier: NotificationDispatcher,
    employees_by_period: dict[tuple[int, int], list[UUID]],
) -> None:
    for (month, year), employee_ids in employees_by_period.items():
        await notifier.notify_payroll_generated(employee_ids, month, year)


@router.post(
    "/save",
    response_model=SaveResponse,
    responses={
        400: {"model": ErrorResponse},
        409: {"model": PayrollConflictResponse},
    },
)
async def save_payroll(
    writer: BatchWriter,
    notifier: Notifier,
    payload: SaveRequest,
    background_tasks: BackgroundTasks,
) -> SaveResponse:
    """Save a generated batch.

    Without ``overwrite`` the save is rejected with 409 when any employee
    already has a record for the period; resend with ``overwrite=true`` to
    replace them.
    """
    for record in payload.records:
        period_bounds(record.year, record.month)

    result = await writer.save(
        [record.model_dump() for record in payload.records],
        overwrite=payload.overwrite,
    )

    employees_by_period: dict[tuple[int, int], list[UUID]] = defaultdict(list)
    for record in payload.records:
        employees_by_period[(record.month, record.year)].append(record.employee_id)
    if employees_by_period:
        background_tasks.add_task(_notify_saved, notifier, dict(employees_by_period))

    return SaveResponse(success=result.success, count=result.count)


# ============================================================================
# Queries
# ============================================================================


@router.get("", response_model=list[StoredPayrollRecord])
async def list_payroll(
    store: Store,
    year: Annotated[int | None, Query()] = None,
    month: Annotated[int | None, Query()] = None,
) -> list[StoredPayrollRecord]:
    """List stored payroll records, optionally for one period."""
    records = await store.list_payroll_records(year=year, month=month)
    return [StoredPayrollRecord.model_validate(r) for r in records]


@router.get(
    "/employees",
    response_model=list[RosterSummaryItem],
    responses={400: {"model": ErrorResponse}},
)
async def payroll_roster(
    service: SummaryService,
    year: Annotated[int, Query()],
    month: Annotated[int, Query()],
) -> list[RosterSummaryItem]:
    """Active employees with calendar-based attendance totals for the period."""
    period_bounds(year, month)
    summaries = await service.roster_summary(year, month)
    items = []
    for summary in summaries:
        profile, totals = summary.profile, summary.totals
        allowances = profile.allowances
        items.append(
            RosterSummaryItem(
                employee_id=profile.employee_id,
                employee_code=profile.employee_code,
                name=profile.name,
                position=profile.position_name,
                base_salary=profile.base_salary,
                working_days=summary.working_days,
                present_days=totals.present_days,
                overtime_hours=totals.overtime_hours,
                weekday_overtime_hours=totals.weekday_overtime_hours,
                weekend_overtime_hours=totals.weekend_overtime_hours,
                weekday_overtime_days=totals.weekday_overtime_days,
                weekend_overtime_days=totals.weekend_overtime_days,
                dependents=profile.effective_dependents,
                is_probation=profile.is_probation,
                allowances={
                    "housing": allowances.housing,
                    "transport": allowances.transport,
                    "meal": allowances.meal,
                    "phone": allowances.phone,
                    "position": allowances.position,
                    "attendance": allowances.attendance,
                    "other": allowances.other,
                },
            )
        )
    return items
