"""API endpoint integration tests."""

from decimal import Decimal
from uuid import uuid4

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


class TestHealthEndpoints:
    """Test health check endpoints."""

    async def test_health_check(self, client: AsyncClient):
        """Health endpoint should return 200."""
        response = await client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "healthy"
        assert "timestamp" in data

    async def test_readiness_check(self, client: AsyncClient, seeded):
        response = await client.get("/ready")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["regulation_effective_date"] == "2025-01-01"

    async def test_not_ready_without_regulation(self, client: AsyncClient):
        response = await client.get("/ready")
        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "not_ready"
        assert data["reason"] == "no salary regulation in force"

    async def test_liveness_check(self, client: AsyncClient):
        response = await client.get("/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"


class TestGenerateAndSave:
    """POST /payroll/generate and /payroll/save."""

    async def test_generate_returns_records(self, client: AsyncClient, seeded):
        response = await client.post("/api/v1/payroll/generate", json={"year": 2025, "month": 3})

        assert response.status_code == 200, response.text
        data = response.json()
        assert data["count"] == 2
        assert data["skipped"] == []
        alice = next(r for r in data["records"] if r["employee_id"] == str(seeded["alice"]))
        assert Decimal(alice["actual_base_salary"]) == Decimal("5000000")
        assert Decimal(alice["weekend_overtime_pay"]) == Decimal("2000000")
        assert Decimal(alice["gross_income"]) == (
            Decimal(alice["actual_base_salary"])
            + Decimal(alice["total_allowances"])
            + Decimal(alice["overtime_pay"])
        )
        bob = next(r for r in data["records"] if r["employee_id"] == str(seeded["bob"]))
        assert Decimal(bob["probation_multiplier"]) == Decimal("0.85")

    async def test_generate_without_regulation(self, client: AsyncClient, seeded):
        response = await client.post("/api/v1/payroll/generate", json={"year": 2024, "month": 12})

        assert response.status_code == 422
        data = response.json()
        assert data["code"] == "NO_REGULATION"
        assert "12/2024" in data["detail"]

    async def test_generate_invalid_month(self, client: AsyncClient, seeded):
        response = await client.post("/api/v1/payroll/generate", json={"year": 2025, "month": 13})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_PERIOD"

    async def test_save_then_conflict_then_overwrite(
        self, client: AsyncClient, seeded, notifications
    ):
        generated = (
            await client.post("/api/v1/payroll/generate", json={"year": 2025, "month": 3})
        ).json()

        first = await client.post(
            "/api/v1/payroll/save", json={"records": generated["records"], "overwrite": False}
        )
        assert first.status_code == 200, first.text
        assert first.json() == {"success": True, "count": 2}

        second = await client.post(
            "/api/v1/payroll/save", json={"records": generated["records"]}
        )
        assert second.status_code == 409
        conflict = second.json()
        assert conflict["code"] == "PAYROLL_CONFLICT"
        assert conflict["conflict_count"] == 2
        assert "overwrite" in conflict["detail"]

        third = await client.post(
            "/api/v1/payroll/save", json={"records": generated["records"], "overwrite": True}
        )
        assert third.status_code == 200
        assert third.json()["count"] == 2

        listed = (await client.get("/api/v1/payroll", params={"year": 2025, "month": 3})).json()
        assert len(listed) == 2

        assert [e.kind for e in notifications] == ["payroll_generated", "payroll_generated"]
        assert notifications[0].payload["month"] == 3
        assert set(notifications[0].payload["employee_ids"]) == {
            str(seeded["alice"]),
            str(seeded["bob"]),
        }

    async def test_failing_notification_does_not_fail_save(
        self, app, client: AsyncClient, seeded
    ):
        from hr_payroll.api.dependencies import get_notifier
        from hr_payroll.services.notifications import NotificationDispatcher

        def broken(event):
            raise RuntimeError("mail server down")

        dispatcher = NotificationDispatcher()
        dispatcher.on_all(broken)
        app.dependency_overrides[get_notifier] = lambda: dispatcher

        generated = (
            await client.post("/api/v1/payroll/generate", json={"year": 2025, "month": 3})
        ).json()
        response = await client.post("/api/v1/payroll/save", json={"records": generated["records"]})

        assert response.status_code == 200
        assert response.json()["success"] is True

    async def test_save_rejects_unknown_status(self, client: AsyncClient, seeded):
        generated = (
            await client.post("/api/v1/payroll/generate", json={"year": 2025, "month": 3})
        ).json()
        generated["records"][0]["status"] = "bogus"

        response = await client.post("/api/v1/payroll/save", json={"records": generated["records"]})

        assert response.status_code == 422
        listed = await client.get("/api/v1/payroll", params={"year": 2025, "month": 3})
        assert listed.json() == []

    async def test_save_duplicate_records_in_batch(self, client: AsyncClient, seeded):
        generated = (
            await client.post("/api/v1/payroll/generate", json={"year": 2025, "month": 3})
        ).json()
        records = generated["records"] + generated["records"][:1]

        response = await client.post("/api/v1/payroll/save", json={"records": records})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_BATCH"


class TestPayrollQueries:
    async def test_list_empty(self, client: AsyncClient, seeded):
        response = await client.get("/api/v1/payroll", params={"year": 2025, "month": 3})

        assert response.status_code == 200
        assert response.json() == []

    async def test_roster_summary(self, client: AsyncClient, seeded):
        response = await client.get("/api/v1/payroll/employees", params={"year": 2025, "month": 3})

        assert response.status_code == 200, response.text
        items = {item["employee_id"]: item for item in response.json()}
        assert set(items) == {str(seeded["alice"]), str(seeded["bob"])}

        alice = items[str(seeded["alice"])]
        assert alice["working_days"] == 22
        assert Decimal(alice["present_days"]) == Decimal("5")
        # Tuesday 3h capped at 10h/day gives 2h; Saturday 8h all count
        assert Decimal(alice["weekday_overtime_hours"]) == Decimal("2")
        assert Decimal(alice["weekend_overtime_hours"]) == Decimal("8")
        assert Decimal(alice["weekend_overtime_days"]) == Decimal("1")
        assert alice["dependents"] == 2
        assert items[str(seeded["bob"])]["is_probation"] is True


class TestAttendanceEndpoints:
    async def test_clock_summary_links_and_keeps_unmatched(self, client: AsyncClient, seeded):
        response = await client.get("/api/v1/attendance/summary", params={"year": 2025, "month": 3})

        assert response.status_code == 200, response.text
        data = response.json()
        items = {item["identity"]: item for item in data["items"]}
        alice = items[str(seeded["alice"])]
        assert alice["linked"] is True
        assert alice["employee_code"] == "EMP007"
        assert Decimal(alice["total_hours"]) == Decimal("10")
        assert Decimal(alice["overtime_hours"]) == Decimal("2")
        bob = items[str(seeded["bob"])]
        assert Decimal(bob["work_days"]) == Decimal("0.5")
        assert items["finger:999"]["linked"] is False
        assert data["unlinked_count"] == 1

    async def test_employee_summary(self, client: AsyncClient, seeded):
        response = await client.get(
            f"/api/v1/attendance/employees/{seeded['alice']}/summary",
            params={"year": 2025, "month": 3},
        )

        assert response.status_code == 200, response.text
        data = response.json()
        assert Decimal(data["total_present_days"]) == Decimal("5")
        assert Decimal(data["total_overtime_hours"]) == Decimal("10")
        assert Decimal(data["total_overtime_days"]) == Decimal("1.25")
        assert Decimal(data["standard_present_days"]) == Decimal("3.75")

    async def test_employee_summary_unknown(self, client: AsyncClient, seeded):
        response = await client.get(
            f"/api/v1/attendance/employees/{uuid4()}/summary",
            params={"year": 2025, "month": 3},
        )

        assert response.status_code == 404
        assert response.json()["code"] == "EMPLOYEE_NOT_FOUND"

    async def test_summary_invalid_month(self, client: AsyncClient, seeded):
        response = await client.get("/api/v1/attendance/summary", params={"year": 2025, "month": 0})

        assert response.status_code == 400


class TestRegulationEndpoints:
    async def test_list_and_effective(self, client: AsyncClient, seeded):
        listed = await client.get("/api/v1/regulations")
        assert listed.status_code == 200
        assert [r["effective_date"] for r in listed.json()] == ["2025-01-01"]

        effective = await client.get("/api/v1/regulations/effective", params={"on": "2025-03-15"})
        assert effective.status_code == 200
        assert effective.json()["id"] == str(seeded["regulation"])

        missing = await client.get("/api/v1/regulations/effective", params={"on": "2024-06-01"})
        assert missing.status_code == 404

    async def test_append_new_version(self, client: AsyncClient, seeded):
        response = await client.post(
            "/api/v1/regulations",
            json={
                "effective_date": "2025-07-01",
                "working_days_per_month": 24,
                "max_insurance_salary": "46800000",
            },
        )

        assert response.status_code == 201, response.text
        assert response.json()["working_days_per_month"] == 24

        march = await client.get("/api/v1/regulations/effective", params={"on": "2025-03-01"})
        assert march.json()["id"] == str(seeded["regulation"])
        july = await client.get("/api/v1/regulations/effective", params={"on": "2025-07-01"})
        assert july.json()["working_days_per_month"] == 24

    async def test_same_effective_date_conflicts(self, client: AsyncClient, seeded):
        response = await client.post("/api/v1/regulations", json={"effective_date": "2025-01-01"})

        assert response.status_code == 409
        assert response.json()["code"] == "REGULATION_EXISTS"

    async def test_negative_rate_rejected(self, client: AsyncClient, seeded):
        response = await client.post(
            "/api/v1/regulations",
            json={"effective_date": "2025-08-01", "overtime_weekday_rate": "-5"},
        )

        assert response.status_code == 422
