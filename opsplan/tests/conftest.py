"""
Shared fixtures for the opsplan tests.
"""
from datetime import date

import pytest
from fastapi.testclient import TestClient

from opsplan.scenario import load_snapshot
from opsplan.scenario.defaults import base_scenario
from opsplan.settings import EngineSettings


TODAY = date(2024, 1, 10)


def make_inputs(**overrides):
    """Global inputs payload with round numbers."""
    inputs = {
        "salePricePerUnit": 100,
        "monthlyDemand": 1000,
        "availableMinutesPerMonth": 10000,
        "oee": 0.8,
        "downtimePct": 0.1,
        "labourRatePerHour": 60,
        "labourMinutesPerUnit": 10,
        "qualityCostPerUnit": 1,
        "capexTotal": 120000,
        "depreciationMonths": 60,
        "marginGuardrailPct": 25,
    }
    inputs.update(overrides)
    return inputs


def make_payload(**collections):
    """Scenario payload named 'Test'; keyword args become collections (camelCase keys)."""
    payload = {"name": "Test", "inputs": make_inputs()}
    payload.update(collections)
    return payload


@pytest.fixture
def make_snapshot():
    """Factory: build a loaded snapshot from collection payloads."""
    def _make(inputs=None, **collections):
        payload = make_payload(**collections)
        if inputs:
            payload["inputs"] = make_inputs(**inputs)
        return load_snapshot(payload)
    return _make


@pytest.fixture
def bom_stock():
    """Two BOM lines: usage 2 and usage 0.5."""
    return [
        {"id": "s1", "name": "Core PCB", "unitCost": 10, "usagePerFinishedUnit": 2,
         "leadTimeDays": 30, "onHandQty": 500, "reorderPointQty": 200, "minQty": 100},
        {"id": "s2", "name": "Housing", "unitCost": 4, "usagePerFinishedUnit": 0.5,
         "leadTimeDays": 15, "onHandQty": 400},
    ]


@pytest.fixture
def stage_processes():
    return [
        {"id": "pa", "name": "Assembly", "stage": "Assembly"},
        {"id": "pp", "name": "Test & Pack", "stage": "Post-Assembly"},
    ]


@pytest.fixture
def pilot_snapshot():
    """Seeded Pilot scenario."""
    return base_scenario("Pilot", 2500, TODAY)


@pytest.fixture
def scenario_payload(bom_stock, stage_processes):
    """Persisted payload with one completed assembly and a maintenance clash."""
    return make_payload(
        stock=bom_stock,
        machines=[{"id": "M1", "name": "Line 1", "status": "Available"}],
        processes=stage_processes,
        stations=[{"id": "st1", "name": "Line", "cycleTimeSeconds": 60, "installedCount": 1}],
        batches=[{"id": "b1", "batchNumber": "B-001", "goodQty": 100, "status": "Complete"}],
        schedule=[
            {"id": "e1", "batchId": "b1", "date": "2024-01-08", "durationDays": 1,
             "processId": "pa", "status": "Complete"},
            {"id": "e2", "batchId": "b1", "date": "2024-01-10", "durationDays": 2,
             "processId": "pp", "assignedMachineIdsCsv": "M1", "status": "Planned"},
        ],
        maintenanceBlocks=[
            {"id": "mb1", "date": "2024-01-11", "durationDays": 1, "machineIdsCsv": "M1"},
        ],
    )


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Settings reload from a clean environment for each test."""
    for key in ("OPSPLAN_CONFLICT_WINDOW_DAYS", "OPSPLAN_LOG_LEVEL", "OPSPLAN_CORS_ORIGIN_REGEX"):
        monkeypatch.delenv(key, raising=False)
    EngineSettings.reset()
    yield
    EngineSettings.reset()


@pytest.fixture(scope="function")
def test_client():
    """FastAPI test client."""
    from opsplan.api import app
    return TestClient(app)
