"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hr_payroll.calculators import AttendanceReconciler, CompensationCalculator
from hr_payroll.config import Settings, get_settings
from hr_payroll.database import init_db
from hr_payroll.services.attendance_summary import AttendanceSummaryService
from hr_payroll.services.notifications import NotificationDispatcher, log_notification
from hr_payroll.services.payroll_batch import PayrollBatchWriter
from hr_payroll.services.store import SqlPayrollStore


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the application engine."""
    _, factory = init_db()
    return factory


SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]
AppSettings = Annotated[Settings, Depends(get_settings)]


async def get_db_session(factory: SessionFactory) -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async with factory() as session:
        yield session


def get_store(factory: SessionFactory) -> SqlPayrollStore:
    return SqlPayrollStore(factory)


Store = Annotated[SqlPayrollStore, Depends(get_store)]


def get_batch_writer(store: Store, settings: AppSettings) -> PayrollBatchWriter:
    """A fresh writer per request; its regulation cache lives for one batch."""
    return PayrollBatchWriter(
        store,
        calculator=CompensationCalculator(engine_version=settings.engine_version),
        max_workers=settings.payroll_max_workers,
    )


def get_summary_service(store: Store, settings: AppSettings) -> AttendanceSummaryService:
    return AttendanceSummaryService(
        store,
        reconciler=AttendanceReconciler(standard_hours=settings.standard_shift_hours),
        max_workers=settings.payroll_max_workers,
    )


@lru_cache(maxsize=1)
def get_notifier() -> NotificationDispatcher:
    """Process-wide dispatcher with the default logging handler."""
    dispatcher = NotificationDispatcher()
    dispatcher.on_all(log_notification)
    return dispatcher


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
BatchWriter = Annotated[PayrollBatchWriter, Depends(get_batch_writer)]
SummaryService = Annotated[AttendanceSummaryService, Depends(get_summary_service)]
Notifier = Annotated[NotificationDispatcher, Depends(get_notifier)]
