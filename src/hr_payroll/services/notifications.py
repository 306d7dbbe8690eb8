"""Best-effort notification dispatch.

Handlers are isolated: a failing handler is logged and the remaining
handlers still run. ``emit`` never raises, so payroll success never
depends on notification delivery.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Union

logger = logging.getLogger(__name__)

PAYROLL_GENERATED = "payroll_generated"


@dataclass(frozen=True)
class NotificationEvent:
    """A notification to deliver."""

    kind: str
    payload: dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


NotificationHandler = Callable[[NotificationEvent], Union[Awaitable[None], None]]


@dataclass
class _Registration:
    handler: NotificationHandler
    kinds: set[str] | None  # None = all kinds


class NotificationDispatcher:
    """Routes notification events to registered handlers.

    Usage:
        dispatcher = NotificationDispatcher()
        dispatcher.on(PAYROLL_GENERATED, send_payslip_ready)
        await dispatcher.emit(PAYROLL_GENERATED, {"employee_ids": [...], "month": 3, "year": 2025})
    """

    def __init__(self) -> None:
        self._handlers: list[_Registration] = []

    def on(self, kind: str | list[str], handler: NotificationHandler) -> None:
        """Register handler for specific event kind(s)."""
        kinds = set(kind) if isinstance(kind, list) else {kind}
        self._handlers.append(_Registration(handler=handler, kinds=kinds))

    def on_all(self, handler: NotificationHandler) -> None:
        self._handlers.append(_Registration(handler=handler, kinds=None))

    def off(self, handler: NotificationHandler) -> None:
        self._handlers = [reg for reg in self._handlers if reg.handler is not handler]

    async def emit(self, kind: str, payload: dict[str, Any]) -> list[Exception]:
        """Deliver an event to all matching handlers.

        Returns list of any exceptions raised by handlers.
        """
        event = NotificationEvent(kind=kind, payload=payload)
        matching = [reg for reg in self._handlers if reg.kinds is None or kind in reg.kinds]
        if not matching:
            return []

        results = await asyncio.gather(
            *(self._call(reg.handler, event) for reg in matching),
            return_exceptions=True,
        )
        return [r for r in results if isinstance(r, Exception)]

    async def _call(self, handler: NotificationHandler, event: NotificationEvent) -> None:
        try:
            outcome = handler(event)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:
            logger.exception("Notification handler %s failed for %s", handler, event.kind)
            raise

    async def notify_payroll_generated(
        self, employee_ids: list[Any], month: int, year: int
    ) -> list[Exception]:
        return await self.emit(
            PAYROLL_GENERATED,
            {"employee_ids": [str(e) for e in employee_ids], "month": month, "year": year},
        )


def log_notification(event: NotificationEvent) -> None:
    """Default handler: record the event in the application log."""
    logger.info("Notification %s: %s", event.kind, event.payload)
