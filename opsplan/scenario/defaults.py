"""
OpsPlan - Seed Scenarios
========================

Pilot / Ramp / Scale starting datasets. Only demand, OEE, downtime, scrap and
safety-stock days differ between them.
"""

from __future__ import annotations

from datetime import date
from typing import Dict

from .models import (
    BatchStatus,
    GlobalInputs,
    LogisticsLane,
    MachineAsset,
    MachineStatus,
    Person,
    PlanningDecision,
    ProcessStage,
    ProcessTemplate,
    ProductionBatch,
    RiskEntry,
    ScenarioSnapshot,
    Station,
    StockItem,
    Warehouse,
)

SCENARIO_DEMAND: Dict[str, float] = {
    "Pilot": 2500,
    "Ramp": 7000,
    "Scale": 18000,
}

_OEE = {"Pilot": 0.62, "Ramp": 0.74, "Scale": 0.83}
_DOWNTIME = {"Pilot": 0.18, "Ramp": 0.12, "Scale": 0.08}
_SCRAP = {"Pilot": 0.06, "Ramp": 0.03, "Scale": 0.015}


def base_scenario(name: str, demand: float, today: date) -> ScenarioSnapshot:
    """Seed snapshot; unknown names get the Scale drivers."""
    inputs = GlobalInputs(
        sale_price_per_unit=390,
        monthly_demand=demand,
        available_minutes_per_month=22 * 8 * 60,
        oee=_OEE.get(name, 0.83),
        downtime_pct=_DOWNTIME.get(name, 0.08),
        labour_rate_per_hour=42,
        labour_minutes_per_unit=18,
        quality_cost_per_unit=6.5,
        scrap_rate_pct=_SCRAP.get(name, 0.015),
        overhead_pct=0.25,
        holding_rate_pct_annual=0.24,
        safety_stock_days=21 if name == "Pilot" else 14,
        capex_total=1_400_000,
        depreciation_months=60,
        margin_guardrail_pct=25,
    )

    stock = (
        StockItem(id="s1", name="Core PCB", type="Component", unit_cost=58, uom="pcs",
                  location="RM-01", usage_per_finished_unit=1, lead_time_days=35, moq=500,
                  single_source=True, on_hand_qty=1800, reorder_point_qty=1200, min_qty=800),
        StockItem(id="s2", name="Housing", type="Component", unit_cost=24, uom="pcs",
                  location="RM-02", usage_per_finished_unit=1, lead_time_days=21, moq=800,
                  on_hand_qty=2600, reorder_point_qty=1500, min_qty=1000),
        StockItem(id="s3", name="Packaging Kit", type="Packaging", unit_cost=6.2, uom="pcs",
                  location="PK-01", usage_per_finished_unit=1, lead_time_days=14, moq=1000,
                  on_hand_qty=3400, reorder_point_qty=2000, min_qty=1500),
        StockItem(id="s4", name="IPA (cleaning)", type="Consumable", unit_cost=18, uom="L",
                  location="CON-01", usage_per_finished_unit=0.02, lead_time_days=7, moq=20,
                  on_hand_qty=60, reorder_point_qty=30, min_qty=20),
    )

    return ScenarioSnapshot(
        name=name,
        inputs=inputs,
        stock=stock,
        people=(
            Person(id="p1", name="Operator A", role="Assembler", shift="Day"),
            Person(id="p2", name="Operator B", role="Test Tech", shift="Day"),
            Person(id="p3", name="Supervisor", role="Supervisor", shift="Day"),
        ),
        machines=(
            MachineAsset(id="m1", name="Assembly Line #1", type="Assembly Line",
                         status=MachineStatus.AVAILABLE),
            MachineAsset(id="m2", name="Assembly Line #2", type="Assembly Line",
                         status=MachineStatus.AVAILABLE),
            MachineAsset(id="m3", name="Test Bench #1", type="Test Bench",
                         status=MachineStatus.AVAILABLE),
        ),
        processes=(
            ProcessTemplate(id="pr1", name="Final Assembly", default_duration_min=480,
                            allowed_machine_types_csv="Assembly Line",
                            stage=ProcessStage.ASSEMBLY),
            ProcessTemplate(id="pr2", name="Test & Pack", default_duration_min=480,
                            allowed_machine_types_csv="Test Bench",
                            stage=ProcessStage.POST_ASSEMBLY),
        ),
        stations=(
            Station(id="st1", name="Assembly Line", cycle_time_seconds=420, installed_count=2),
            Station(id="st2", name="Test Bench", cycle_time_seconds=240, installed_count=1),
        ),
        batches=(
            ProductionBatch(id="b1", batch_number="BATCH-001", purpose="Pilot build",
                            planned_qty=200, scrap_stage=ProcessStage.ASSEMBLY,
                            status=BatchStatus.PLANNED),
        ),
        logistics=(
            LogisticsLane(id="l1", lane="Asia -> AU DC", direction="Inbound", mode="Sea",
                          cost_per_shipment=5200, units_per_shipment=2400),
            LogisticsLane(id="l2", lane="AU DC -> Customers", direction="Outbound", mode="Road",
                          cost_per_shipment=950, units_per_shipment=900),
        ),
        warehouses=(
            Warehouse(id="w1", location="RM Hub", type="RM", monthly_cost=18000,
                      utilization_pct=0.71, capacity_pct_limit=0.85),
            Warehouse(id="w2", location="FG DC", type="FG", monthly_cost=22000,
                      utilization_pct=0.76, capacity_pct_limit=0.85),
        ),
        decisions=(
            PlanningDecision(id="d1", title="A) Capacity: machines & timing",
                             target="No process over 85% utilisation at target demand"),
            PlanningDecision(id="d2", title="B) People: roles & staffing",
                             target="Staffing plan supports ramp without overtime risk"),
            PlanningDecision(id="d3", title="C) Supply chain: what to order & when",
                             target="No stockouts; define safety stock + reorder points"),
        ),
        risks=(
            RiskEntry(id="r1", area="Supply", status="Amber",
                      mitigation="Dual-source PCB qualification"),
            RiskEntry(id="r2", area="Quality", status="Green",
                      mitigation="SPC on line-side torque"),
        ),
        audit_log=(f"Scenario {name} initialised ({today.isoformat()})",),
    )


def default_scenarios(today: date) -> Dict[str, ScenarioSnapshot]:
    """The three seed scenarios keyed by name."""
    return {name: base_scenario(name, demand, today) for name, demand in SCENARIO_DEMAND.items()}
