"""
════════════════════════════════════════════════════════════════════════════════════════════════════
PLANNING API - Cost breakdown and capacity endpoints
════════════════════════════════════════════════════════════════════════════════════════════════════
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter

from opsplan.planning.capacity_analyzer import analyze_capacity
from opsplan.planning.cost_model import compute_cost_breakdown
from opsplan.scenario.schemas import ScenarioRequest, snapshot_from_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/planning", tags=["Planning"])


@router.post("/cost", summary="Per-unit cost breakdown and margin")
async def cost_breakdown(body: ScenarioRequest) -> Dict[str, Any]:
    snapshot = snapshot_from_request(body)
    cost = compute_cost_breakdown(snapshot)
    logger.info(f"Cost breakdown for '{snapshot.name}': total={cost.total:.2f}, margin={cost.margin_pct:.1f}%")
    return cost.to_dict()


@router.post("/capacity", summary="Station capacity, bottleneck and FTE")
async def capacity(body: ScenarioRequest) -> Dict[str, Any]:
    """
    Required vs installed machines per station.

    The bottleneck is the station with the highest utilization.
    """
    snapshot = snapshot_from_request(body)
    report = analyze_capacity(snapshot)
    logger.info(
        f"Capacity for '{snapshot.name}': {len(report.stations)} stations, "
        f"bottleneck={report.bottleneck_station_id}"
    )
    return report.to_dict()
