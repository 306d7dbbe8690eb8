"""Tests for best-effort notification dispatch."""

import logging

import pytest

from hr_payroll.services.notifications import (
    PAYROLL_GENERATED,
    NotificationDispatcher,
    log_notification,
)

pytestmark = pytest.mark.asyncio


class TestNotificationDispatcher:
    async def test_routes_by_kind(self):
        dispatcher = NotificationDispatcher()
        generated, everything = [], []
        dispatcher.on(PAYROLL_GENERATED, generated.append)
        dispatcher.on_all(everything.append)

        await dispatcher.emit("payroll_approved", {})
        await dispatcher.emit(PAYROLL_GENERATED, {"month": 3})

        assert [e.payload for e in generated] == [{"month": 3}]
        assert [e.kind for e in everything] == ["payroll_approved", PAYROLL_GENERATED]

    async def test_async_handlers_are_awaited(self):
        dispatcher = NotificationDispatcher()
        seen = []

        async def handler(event):
            seen.append(event.kind)

        dispatcher.on_all(handler)
        await dispatcher.emit(PAYROLL_GENERATED, {})

        assert seen == [PAYROLL_GENERATED]

    async def test_failing_handler_is_isolated(self, caplog):
        dispatcher = NotificationDispatcher()
        delivered = []

        def broken(event):
            raise RuntimeError("smtp unavailable")

        dispatcher.on_all(broken)
        dispatcher.on_all(delivered.append)

        with caplog.at_level(logging.ERROR):
            errors = await dispatcher.emit(PAYROLL_GENERATED, {})

        assert len(errors) == 1
        assert isinstance(errors[0], RuntimeError)
        assert len(delivered) == 1
        assert "smtp unavailable" in caplog.text

    async def test_off_removes_handler(self):
        dispatcher = NotificationDispatcher()
        seen = []
        handler = seen.append
        dispatcher.on_all(handler)
        dispatcher.off(handler)

        assert await dispatcher.emit(PAYROLL_GENERATED, {}) == []
        assert seen == []

    async def test_payroll_generated_payload(self, make_profile):
        dispatcher = NotificationDispatcher()
        seen = []
        dispatcher.on(PAYROLL_GENERATED, seen.append)
        profile = make_profile()

        await dispatcher.notify_payroll_generated([profile.employee_id], 3, 2025)

        assert seen[0].payload == {
            "employee_ids": [str(profile.employee_id)],
            "month": 3,
            "year": 2025,
        }

    async def test_log_notification(self, caplog):
        dispatcher = NotificationDispatcher()
        dispatcher.on_all(log_notification)

        with caplog.at_level(logging.INFO, logger="hr_payroll.services.notifications"):
            await dispatcher.emit(PAYROLL_GENERATED, {"month": 3})

        assert "payroll_generated" in caplog.text
