"""
═══════════════════════════════════════════════════════════════════════════════
                    OPSPLAN — HTTP API Tests
═══════════════════════════════════════════════════════════════════════════════

Run with: python -m pytest opsplan/tests/test_api.py -v
"""

import logging

import pytest

import opsplan


class TestHealth:

    def test_health(self, test_client):
        response = test_client.get("/api/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["settings"]["conflict_window_days"] == 7

    def test_package_exports_version_only(self, test_client):
        assert opsplan.__all__ == ["__version__"]
        assert test_client.get("/api/health").json()["version"] == opsplan.__version__


class TestPlanningEndpoints:

    def test_cost(self, test_client, scenario_payload):
        response = test_client.post("/api/planning/cost", json={"scenario": scenario_payload})
        assert response.status_code == 200
        assert response.json()["material"] == pytest.approx(22.0)

    def test_cost_request_is_logged(self, test_client, scenario_payload, caplog):
        with caplog.at_level(logging.INFO, logger="opsplan.planning.api"):
            test_client.post("/api/planning/cost", json={"scenario": scenario_payload})
        assert "Cost breakdown for 'Test'" in caplog.text

    def test_capacity(self, test_client, scenario_payload):
        response = test_client.post("/api/planning/capacity", json={"scenario": scenario_payload})
        assert response.status_code == 200
        body = response.json()
        assert body["bottleneck_station_id"] == "st1"
        assert len(body["stations"]) == 1

    def test_bad_payload_is_422(self, test_client, scenario_payload):
        scenario_payload["schedule"][0]["date"] = "someday"
        response = test_client.post("/api/planning/cost", json={"scenario": scenario_payload})
        assert response.status_code == 422
        assert "date" in response.json()["detail"]

    def test_missing_body_is_422(self, test_client):
        assert test_client.post("/api/planning/cost", json={}).status_code == 422


class TestInventoryEndpoints:

    def test_exposure(self, test_client, scenario_payload):
        response = test_client.post("/api/inventory/exposure", json={"scenario": scenario_payload})
        assert response.status_code == 200
        assert len(response.json()["rows"]) == 2

    def test_consumption(self, test_client, scenario_payload):
        response = test_client.post("/api/inventory/consumption", json={"scenario": scenario_payload})
        assert response.status_code == 200
        body = response.json()
        assert body["consumed"]["s1"] == pytest.approx(200.0)
        assert body["batches"][0]["assembly_complete"] is True

    def test_remaining(self, test_client, scenario_payload):
        response = test_client.post("/api/inventory/remaining", json={"scenario": scenario_payload})
        body = response.json()
        assert body["total"] == 2
        assert body["items"][0]["remaining_qty"] == pytest.approx(300.0)
        assert body["items"][0]["status"] == "OK"

    def test_remaining_request_is_logged(self, test_client, scenario_payload, caplog):
        with caplog.at_level(logging.INFO, logger="opsplan.inventory.api"):
            test_client.post("/api/inventory/remaining", json={"scenario": scenario_payload})
        assert "Remaining stock for 'Test': 0 of 2 items flagged" in caplog.text


class TestSchedulingEndpoints:

    def test_conflicts(self, test_client, scenario_payload):
        response = test_client.post(
            "/api/scheduling/conflicts",
            json={"scenario": scenario_payload, "today": "2024-01-10"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["at_risk"] == 1
        assert body["window_end"] == "2024-01-17"

    def test_window_from_settings(self, test_client, scenario_payload, monkeypatch):
        monkeypatch.setenv("OPSPLAN_CONFLICT_WINDOW_DAYS", "1")
        response = test_client.post(
            "/api/scheduling/conflicts",
            json={"scenario": scenario_payload, "today": "2024-01-11"},
        )
        assert response.json()["window_end"] == "2024-01-12"

    def test_invalid_window(self, test_client, scenario_payload):
        response = test_client.post(
            "/api/scheduling/conflicts",
            json={"scenario": scenario_payload, "today": "2024-01-10", "window_days": 0},
        )
        assert response.status_code == 422

    def test_day_check(self, test_client, scenario_payload):
        for day, expected in (("2024-01-10", False), ("2024-01-11", True)):
            response = test_client.post(
                "/api/scheduling/conflicts/day",
                json={"scenario": scenario_payload, "entry_id": "e2", "day": day},
            )
            assert response.status_code == 200
            assert response.json()["has_conflict"] is expected

    def test_day_check_unknown_entry(self, test_client, scenario_payload):
        response = test_client.post(
            "/api/scheduling/conflicts/day",
            json={"scenario": scenario_payload, "entry_id": "nope", "day": "2024-01-10"},
        )
        assert response.status_code == 404


class TestSummaryEndpoints:

    def test_summary(self, test_client, scenario_payload):
        response = test_client.post(
            "/api/summary", json={"scenario": scenario_payload, "today": "2024-01-10"}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["at_risk"] == 1
        assert body["revenue_per_month"] == pytest.approx(100000.0)

    def test_default_scenarios(self, test_client):
        response = test_client.get("/api/scenarios/defaults", params={"today": "2024-01-10"})
        assert response.status_code == 200
        body = response.json()
        assert list(body) == ["Pilot", "Ramp", "Scale"]
        assert body["Scale"]["inputs"]["monthlyDemand"] == 18000
        assert body["Pilot"]["auditLog"] == ["Scenario Pilot initialised (2024-01-10)"]
