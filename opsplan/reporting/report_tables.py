"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    REPORT TABLES — Derived Views as DataFrames
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Tabular views of one scenario for downstream exporters (spreadsheets,
operations reports). Each builder returns a `pandas.DataFrame` with
human-readable column headers; `build_report_tables` returns all of them
keyed by sheet name.

Sheets:
    Summary        scenario name, export date and the alert counts
    Decisions      planning decisions
    CAPAs          corrective / preventive actions
    Issues         scheduled processes with status Issue, Quarantine or Cancelled
    Stock          on hand, consumed, remaining and status per item
    Risks          risk register
    Maintenance    maintenance blocks, machine ids resolved to names
    MachinesDown   machines out of service
    Capacity       per-station capacity check
    Exposure       pipeline / safety stock exposure per item
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict

import pandas as pd

from opsplan.core.numeric import split_csv_ids
from opsplan.dashboards.alerts import summary_alerts
from opsplan.inventory.consumption import stock_remaining_after_production
from opsplan.inventory.exposure import compute_inventory_exposure
from opsplan.planning.capacity_analyzer import analyze_capacity
from opsplan.scenario.models import BatchStatus, MachineStatus, ScenarioSnapshot
from opsplan.scheduling.conflicts import DEFAULT_WINDOW_DAYS

logger = logging.getLogger(__name__)

REPORTED_ISSUE_STATUSES = frozenset({BatchStatus.ISSUE, BatchStatus.QUARANTINE, BatchStatus.CANCELLED})

STOCK_COLUMNS = ["Item", "On hand", "Consumed", "Remaining", "Reorder point", "Min qty", "Status"]
ISSUE_COLUMNS = [
    "Date", "Batch", "Process", "Status", "Notes", "Observations", "People", "Machines",
]
DECISION_COLUMNS = ["Decision", "Target", "Owner", "Status", "Notes"]
CAPA_COLUMNS = [
    "Ref", "Batch ID", "Title", "Owner", "Due date", "Status", "Root cause", "Action", "Notes",
]
RISK_COLUMNS = ["Area", "Status", "Owner", "Mitigation"]
MAINTENANCE_COLUMNS = ["Date", "Days", "Machines", "Title", "Status", "Notes"]
MACHINE_COLUMNS = ["Machine", "Type", "Status", "Notes"]
CAPACITY_COLUMNS = [
    "Station", "Cycle time (s)", "Installed", "Capacity / machine",
    "Required", "Shortfall", "Utilization %", "Bottleneck",
]
EXPOSURE_COLUMNS = [
    "Item", "Daily demand", "Pipeline units", "Safety units",
    "Reorder point units", "Pipeline value", "Safety value",
]


def summary_table(
    snapshot: ScenarioSnapshot,
    today: date,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> pd.DataFrame:
    """Two-column Field/Value sheet."""
    alerts = summary_alerts(snapshot, today, window_days)
    rows = [
        ("Scenario", snapshot.name),
        ("Exported", today.isoformat()),
        ("Below min", alerts.below_min),
        ("Reorder", alerts.reorder),
        ("Open issues", alerts.open_issues),
        ("Open CAPAs", alerts.open_capas),
        ("Machines down", alerts.machines_down),
        ("At risk", alerts.at_risk),
        ("Blocked", alerts.blocked),
        ("Revenue / month", alerts.revenue_per_month),
        ("Margin %", alerts.margin_pct),
    ]
    return pd.DataFrame(rows, columns=["Field", "Value"])


def stock_table(snapshot: ScenarioSnapshot) -> pd.DataFrame:
    records = [
        {
            "Item": p.name,
            "On hand": p.on_hand_qty,
            "Consumed": p.consumed_qty,
            "Remaining": p.remaining_qty,
            "Reorder point": p.reorder_point_qty,
            "Min qty": p.min_qty,
            "Status": p.status.value,
        }
        for p in stock_remaining_after_production(snapshot)
    ]
    return pd.DataFrame(records, columns=STOCK_COLUMNS)


def issues_table(snapshot: ScenarioSnapshot) -> pd.DataFrame:
    """Scheduled processes flagged Issue, Quarantine or Cancelled, oldest first."""
    batches = snapshot.batch_by_id()
    processes = snapshot.process_by_id()
    records = []
    for entry in snapshot.schedule:
        if entry.status not in REPORTED_ISSUE_STATUSES:
            continue
        batch = batches.get(entry.batch_id)
        process = processes.get(entry.process_id)
        records.append({
            "Date": entry.date.isoformat(),
            "Batch": batch.batch_number if batch else entry.batch_id,
            "Process": process.name if process else entry.process_id,
            "Status": entry.status.value,
            "Notes": entry.notes,
            "Observations": entry.observations,
            "People": entry.assigned_people_ids_csv,
            "Machines": entry.assigned_machine_ids_csv,
        })
    df = pd.DataFrame(records, columns=ISSUE_COLUMNS)
    return df.sort_values("Date", kind="stable").reset_index(drop=True)


def decisions_table(snapshot: ScenarioSnapshot) -> pd.DataFrame:
    records = [
        {"Decision": d.title, "Target": d.target, "Owner": d.owner, "Status": d.status, "Notes": d.notes}
        for d in snapshot.decisions
    ]
    return pd.DataFrame(records, columns=DECISION_COLUMNS)


def capas_table(snapshot: ScenarioSnapshot) -> pd.DataFrame:
    records = [
        {
            "Ref": c.ref,
            "Batch ID": c.batch_id or "",
            "Title": c.title,
            "Owner": c.owner,
            "Due date": c.due_date,
            "Status": c.status.value,
            "Root cause": c.root_cause,
            "Action": c.action,
            "Notes": c.notes,
        }
        for c in snapshot.capas
    ]
    return pd.DataFrame(records, columns=CAPA_COLUMNS)


def risks_table(snapshot: ScenarioSnapshot) -> pd.DataFrame:
    records = [
        {"Area": r.area, "Status": r.status, "Owner": r.owner, "Mitigation": r.mitigation}
        for r in snapshot.risks
    ]
    return pd.DataFrame(records, columns=RISK_COLUMNS)


def machine_names(snapshot: ScenarioSnapshot, machine_ids_csv: str) -> str:
    """Comma list of machine names; unknown ids are kept as given."""
    names = {m.id: m.name for m in snapshot.machines}
    return ", ".join(names.get(machine_id, machine_id) for machine_id in split_csv_ids(machine_ids_csv))


def maintenance_table(snapshot: ScenarioSnapshot) -> pd.DataFrame:
    records = [
        {
            "Date": block.date.isoformat(),
            "Days": block.duration_days,
            "Machines": machine_names(snapshot, block.machine_ids_csv),
            "Title": block.title,
            "Status": block.status.value,
            "Notes": block.notes,
        }
        for block in snapshot.maintenance_blocks
    ]
    df = pd.DataFrame(records, columns=MAINTENANCE_COLUMNS)
    return df.sort_values("Date", kind="stable").reset_index(drop=True)


def machines_down_table(snapshot: ScenarioSnapshot) -> pd.DataFrame:
    records = [
        {"Machine": m.name, "Type": m.type, "Status": m.status.value, "Notes": m.notes}
        for m in snapshot.machines
        if m.status == MachineStatus.OUT_OF_SERVICE
    ]
    return pd.DataFrame(records, columns=MACHINE_COLUMNS)


def capacity_table(snapshot: ScenarioSnapshot) -> pd.DataFrame:
    report = analyze_capacity(snapshot)
    records = [
        {
            "Station": row.name,
            "Cycle time (s)": row.cycle_time_seconds,
            "Installed": row.installed_count,
            "Capacity / machine": row.capacity_per_machine,
            "Required": row.required_machines,
            "Shortfall": row.shortfall,
            "Utilization %": row.utilization_pct,
            "Bottleneck": row.station_id == report.bottleneck_station_id,
        }
        for row in report.stations
    ]
    return pd.DataFrame(records, columns=CAPACITY_COLUMNS)


def exposure_table(snapshot: ScenarioSnapshot) -> pd.DataFrame:
    exposure = compute_inventory_exposure(snapshot)
    records = [
        {
            "Item": row.name,
            "Daily demand": row.daily_demand,
            "Pipeline units": row.pipeline_units,
            "Safety units": row.safety_stock_units,
            "Reorder point units": row.reorder_point_units,
            "Pipeline value": row.pipeline_value,
            "Safety value": row.safety_stock_value,
        }
        for row in exposure.rows
    ]
    return pd.DataFrame(records, columns=EXPOSURE_COLUMNS)


def build_report_tables(
    snapshot: ScenarioSnapshot,
    today: date,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> Dict[str, pd.DataFrame]:
    """All report sheets for one scenario, in export order."""
    tables = {
        "Summary": summary_table(snapshot, today, window_days),
        "Decisions": decisions_table(snapshot),
        "CAPAs": capas_table(snapshot),
        "Issues": issues_table(snapshot),
        "Stock": stock_table(snapshot),
        "Risks": risks_table(snapshot),
        "Maintenance": maintenance_table(snapshot),
        "MachinesDown": machines_down_table(snapshot),
        "Capacity": capacity_table(snapshot),
        "Exposure": exposure_table(snapshot),
    }
    logger.info(
        f"Report tables for '{snapshot.name}': "
        + ", ".join(f"{name}={len(df)}" for name, df in tables.items())
    )
    return tables
