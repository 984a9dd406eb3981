"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    CAPACITY ANALYZER — Required vs Installed Machines per Station
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Monthly capacity check of each station against effective demand.

Mathematical Model:
─────────────────────────────────────────────────────────────────────────────────────────────────────

Parameters:
    D_eff   : effective monthly demand (demand × scrap multiplier)
    T       : available seconds per month (available minutes × 60)
    OEE     : overall equipment effectiveness (0..1)
    c_s     : cycle time of station s (seconds)
    n_s     : machines installed at station s

Per station:
    cap_machine_s = T × OEE / c_s
    cap_s         = cap_machine_s × n_s
    required_s    = D_eff / cap_machine_s
    shortfall_s   = max(0, required_s − n_s)
    util_s        = D_eff / cap_s × 100

Bottleneck Detection:
    s* = argmax_s util_s     (first occurrence wins on ties)

Staffing:
    FTE  = D_eff × labour_min_per_unit / available_minutes
    takt = T / D_eff
═══════════════════════════════════════════════════════════════════════════════════════════════════════
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from opsplan.core.numeric import safe_divide
from opsplan.scenario.models import ScenarioSnapshot, Station

logger = logging.getLogger(__name__)

SECONDS_PER_MINUTE = 60


@dataclass(frozen=True)
class StationCapacity:
    """Capacity check for one station."""
    station_id: str
    name: str
    cycle_time_seconds: float
    installed_count: float
    capacity_per_machine: float
    station_capacity: float
    required_machines: float
    shortfall: float
    utilization_pct: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CapacityReport:
    """Result of the capacity analysis."""
    effective_demand: float
    available_seconds_per_month: float
    takt_time_seconds: float
    fte_required: float
    stations: List[StationCapacity] = field(default_factory=list)
    bottleneck_station_id: Optional[str] = None

    @property
    def bottleneck(self) -> Optional[StationCapacity]:
        for row in self.stations:
            if row.station_id == self.bottleneck_station_id:
                return row
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "effective_demand": self.effective_demand,
            "available_seconds_per_month": self.available_seconds_per_month,
            "takt_time_seconds": self.takt_time_seconds,
            "fte_required": self.fte_required,
            "stations": [s.to_dict() for s in self.stations],
            "bottleneck_station_id": self.bottleneck_station_id,
        }


def station_capacity(
    station: Station,
    effective_demand: float,
    available_seconds: float,
    oee: float,
) -> StationCapacity:
    """Capacity figures for a single station."""
    per_machine = safe_divide(available_seconds * oee, station.cycle_time_seconds)
    capacity = per_machine * station.installed_count
    required = safe_divide(effective_demand, per_machine)

    return StationCapacity(
        station_id=station.id,
        name=station.name,
        cycle_time_seconds=station.cycle_time_seconds,
        installed_count=station.installed_count,
        capacity_per_machine=per_machine,
        station_capacity=capacity,
        required_machines=required,
        shortfall=max(0.0, required - station.installed_count),
        utilization_pct=safe_divide(effective_demand, capacity) * 100,
    )


def select_bottleneck(rows: List[StationCapacity]) -> Optional[str]:
    """Station id with the highest utilization; the first one wins a tie."""
    if not rows:
        return None
    utilization = np.array([row.utilization_pct for row in rows], dtype=float)
    return rows[int(np.argmax(utilization))].station_id


def analyze_capacity(snapshot: ScenarioSnapshot) -> CapacityReport:
    """Per-station required vs installed machines, bottleneck and FTE estimate."""
    inputs = snapshot.inputs
    demand = inputs.effective_monthly_demand
    available_seconds = inputs.available_minutes_per_month * SECONDS_PER_MINUTE

    rows = [
        station_capacity(station, demand, available_seconds, inputs.oee)
        for station in snapshot.stations
    ]
    bottleneck = select_bottleneck(rows)

    fte = safe_divide(demand * inputs.labour_minutes_per_unit, inputs.available_minutes_per_month)
    takt = safe_divide(available_seconds, demand)

    for row in rows:
        if row.shortfall > 0:
            logger.info(
                f"Station {row.station_id} ({row.name}) short by {row.shortfall:.2f} machines "
                f"at {row.utilization_pct:.1f}% utilization"
            )

    return CapacityReport(
        effective_demand=demand,
        available_seconds_per_month=available_seconds,
        takt_time_seconds=takt,
        fte_required=fte,
        stations=rows,
        bottleneck_station_id=bottleneck,
    )
