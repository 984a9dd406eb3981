"""
Scenario snapshot: immutable data model, seed data and copy-on-write edits.
"""

from .models import (
    DEFAULTS,
    BatchStatus,
    CapaItem,
    CapaStatus,
    GlobalInputs,
    LogisticsLane,
    MachineAsset,
    MachineStatus,
    MaintenanceBlock,
    MaintenanceStatus,
    Person,
    PlanningDecision,
    PlanningDefaults,
    ProcessStage,
    ProcessTemplate,
    ProductionBatch,
    RiskEntry,
    ScenarioFormatError,
    ScenarioSnapshot,
    ScheduledProcess,
    Station,
    StockItem,
    Warehouse,
)
from .defaults import base_scenario, default_scenarios
from .store import (
    append_audit,
    duplicate_scenario,
    export_scenario_json,
    load_snapshot,
    normalize_payload,
    remove_entity,
    replace_collection,
    update_inputs,
    upsert_entity,
)

__all__ = [
    # Model
    "DEFAULTS", "PlanningDefaults", "GlobalInputs", "ScenarioSnapshot", "ScenarioFormatError",
    "StockItem", "MachineAsset", "Person", "ProcessTemplate", "Station",
    "ProductionBatch", "ScheduledProcess", "MaintenanceBlock",
    "LogisticsLane", "Warehouse", "PlanningDecision", "CapaItem", "RiskEntry",
    "BatchStatus", "MachineStatus", "MaintenanceStatus", "ProcessStage", "CapaStatus",
    # Seeds
    "base_scenario", "default_scenarios",
    # Store
    "normalize_payload", "load_snapshot", "export_scenario_json",
    "replace_collection", "upsert_entity", "remove_entity", "update_inputs",
    "append_audit", "duplicate_scenario",
]
