"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hr_payroll import __version__
from hr_payroll.api.routes import (
    attendance_router,
    health_router,
    payroll_router,
    regulations_router,
)
from hr_payroll.calculators.regulation_resolver import NoApplicableRegulationError
from hr_payroll.calculators.types import InvalidPeriodError
from hr_payroll.config import get_settings
from hr_payroll.database import dispose_db, init_db
from hr_payroll.logging_config import configure_logging
from hr_payroll.services.attendance_summary import EmployeeNotFoundError
from hr_payroll.services.payroll_batch import InvalidBatchError, PayrollConflictError
from hr_payroll.services.store import RegulationExistsError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    configure_logging(get_settings())
    init_db()
    yield
    await dispose_db()


def _error(status_code: int, detail: str, code: str, **extra: object) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail, "code": code, **extra})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="HR Payroll Engine API",
        description="Attendance reconciliation and monthly payroll computation",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(NoApplicableRegulationError)
    async def no_regulation_handler(
        request: Request, exc: NoApplicableRegulationError
    ) -> JSONResponse:
        return _error(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            str(exc),
            "NO_REGULATION",
            context={"year": exc.year, "month": exc.month},
        )

    @app.exception_handler(PayrollConflictError)
    async def conflict_handler(request: Request, exc: PayrollConflictError) -> JSONResponse:
        return _error(
            status.HTTP_409_CONFLICT,
            "Some employees already have payroll records for this period. "
            "Do you want to overwrite them?",
            "PAYROLL_CONFLICT",
            conflict_count=exc.conflict_count,
            context={"periods": [{"month": m, "year": y} for m, y in exc.periods]},
        )

    @app.exception_handler(InvalidPeriodError)
    async def invalid_period_handler(request: Request, exc: InvalidPeriodError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc), "INVALID_PERIOD")

    @app.exception_handler(InvalidBatchError)
    async def invalid_batch_handler(request: Request, exc: InvalidBatchError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc), "INVALID_BATCH")

    @app.exception_handler(EmployeeNotFoundError)
    async def employee_not_found_handler(
        request: Request, exc: EmployeeNotFoundError
    ) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, str(exc), "EMPLOYEE_NOT_FOUND")

    @app.exception_handler(RegulationExistsError)
    async def regulation_exists_handler(
        request: Request, exc: RegulationExistsError
    ) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, str(exc), "REGULATION_EXISTS")

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred",
            "INTERNAL_ERROR",
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(payroll_router, prefix="/api/v1")
    app.include_router(attendance_router, prefix="/api/v1")
    app.include_router(regulations_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
