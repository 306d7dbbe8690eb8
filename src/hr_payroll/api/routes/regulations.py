"""Salary regulation endpoints.

Regulations are append-only: there is no update or delete route.
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from hr_payroll.api.dependencies import Store
from hr_payroll.api.schemas import ErrorResponse, RegulationCreate, RegulationResponse

router = APIRouter(prefix="/regulations", tags=["regulations"])


@router.get("", response_model=list[RegulationResponse])
async def list_regulations(store: Store) -> list[RegulationResponse]:
    """Full regulation history, newest first."""
    regulations = await store.list_regulations()
    return [RegulationResponse.model_validate(r) for r in regulations]


@router.get(
    "/effective",
    response_model=RegulationResponse,
    responses={404: {"model": ErrorResponse}},
)
async def effective_regulation(
    store: Store,
    on: Annotated[date, Query()],
) -> RegulationResponse:
    """The regulation in force on the given date."""
    regulation = await store.fetch_latest_regulation(on)
    if regulation is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No regulation effective on or before {on}",
        )
    return RegulationResponse.model_validate(regulation)


@router.post(
    "",
    response_model=RegulationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def create_regulation(store: Store, payload: RegulationCreate) -> RegulationResponse:
    """Append a new regulation version."""
    regulation = await store.add_regulation(payload.model_dump())
    return RegulationResponse.model_validate(regulation)
