"""
OpsPlan - Alert / Summary Aggregator
====================================

Count-based status indicators for the dashboard header, composed from the
stock consumption engine, the conflict detector and the cost model.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, List

from opsplan.inventory.consumption import StockStatus, stock_remaining_after_production
from opsplan.planning.cost_model import compute_cost_breakdown
from opsplan.scenario.models import BatchStatus, MachineStatus, ScenarioSnapshot
from opsplan.scheduling.conflicts import DEFAULT_WINDOW_DAYS, detect_schedule_conflicts

logger = logging.getLogger(__name__)

OPEN_ISSUE_STATUSES = frozenset({BatchStatus.ISSUE, BatchStatus.QUARANTINE})


@dataclass(frozen=True)
class SummaryAlerts:
    below_min: int
    reorder: int
    open_issues: int
    open_capas: int
    machines_down: int
    at_risk: int
    blocked: int
    revenue_per_month: float
    margin_pct: float
    margin_guardrail_met: bool
    attention: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "below_min": self.below_min,
            "reorder": self.reorder,
            "open_issues": self.open_issues,
            "open_capas": self.open_capas,
            "machines_down": self.machines_down,
            "at_risk": self.at_risk,
            "blocked": self.blocked,
            "revenue_per_month": self.revenue_per_month,
            "margin_pct": self.margin_pct,
            "margin_guardrail_met": self.margin_guardrail_met,
            "attention": list(self.attention),
        }


def attention_items(alerts: SummaryAlerts) -> List[str]:
    """One message per non-zero alert, or a single all-clear line."""
    items = []
    if alerts.below_min:
        items.append("Stock below minimum: check stock positions and raise orders.")
    if alerts.reorder:
        items.append("Stock at reorder: review reorder points and supplier lead times.")
    if alerts.open_issues:
        items.append("Production issues/quarantine: review schedule items marked Issue or Quarantine.")
    if alerts.open_capas:
        items.append("Open CAPAs: assign owners and due dates.")
    if alerts.machines_down:
        items.append("Machines out of service: update machine status and plan maintenance blocks.")
    if alerts.at_risk:
        items.append("Scheduled processes at risk: resolve double bookings and maintenance clashes.")
    if not items:
        items.append("Nothing critical flagged right now.")
    return items


def summary_alerts(
    snapshot: ScenarioSnapshot,
    today: date,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> SummaryAlerts:
    """Alert counts and headline KPIs for one scenario."""
    stock = stock_remaining_after_production(snapshot)
    conflicts = detect_schedule_conflicts(snapshot, today, window_days)
    cost = compute_cost_breakdown(snapshot)

    counts = SummaryAlerts(
        below_min=sum(1 for p in stock if p.status == StockStatus.BELOW_MIN),
        reorder=sum(1 for p in stock if p.status == StockStatus.REORDER),
        open_issues=sum(1 for e in snapshot.schedule if e.status in OPEN_ISSUE_STATUSES),
        open_capas=sum(1 for c in snapshot.capas if c.is_open),
        machines_down=sum(1 for m in snapshot.machines if m.status == MachineStatus.OUT_OF_SERVICE),
        at_risk=conflicts.at_risk,
        blocked=conflicts.blocked,
        revenue_per_month=snapshot.inputs.sale_price_per_unit * snapshot.inputs.monthly_demand,
        margin_pct=cost.margin_pct,
        margin_guardrail_met=cost.margin_guardrail_met,
    )
    result = replace(counts, attention=attention_items(counts))
    logger.info(
        f"Summary '{snapshot.name}': below_min={result.below_min}, reorder={result.reorder}, "
        f"issues={result.open_issues}, capas={result.open_capas}, down={result.machines_down}, "
        f"at_risk={result.at_risk}"
    )
    return result
