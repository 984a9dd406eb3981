"""
════════════════════════════════════════════════════════════════════════════════════════════════════
INVENTORY API - Exposure, consumption and remaining stock endpoints
════════════════════════════════════════════════════════════════════════════════════════════════════
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter

from opsplan.inventory.consumption import (
    StockStatus,
    batch_consumption,
    stock_consumption,
    stock_remaining_after_production,
)
from opsplan.inventory.exposure import compute_inventory_exposure
from opsplan.scenario.schemas import ScenarioRequest, snapshot_from_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inventory", tags=["Inventory"])


@router.post("/exposure", summary="Pipeline and safety stock exposure")
async def exposure(body: ScenarioRequest) -> Dict[str, Any]:
    snapshot = snapshot_from_request(body)
    result = compute_inventory_exposure(snapshot)
    logger.info(f"Exposure for '{snapshot.name}': {len(result.rows)} items, total={result.total_value:.2f}")
    return result.to_dict()


@router.post("/consumption", summary="Stock consumed by production")
async def consumption(body: ScenarioRequest) -> Dict[str, Any]:
    """
    Totals per stock item plus the per-batch detail they were built from.
    """
    snapshot = snapshot_from_request(body)
    logger.info(f"Consumption for '{snapshot.name}': {len(snapshot.batches)} batches")
    return {
        "consumed": stock_consumption(snapshot),
        "batches": [detail.to_dict() for detail in batch_consumption(snapshot)],
    }


@router.post("/remaining", summary="Remaining stock and status")
async def remaining(body: ScenarioRequest) -> Dict[str, Any]:
    snapshot = snapshot_from_request(body)
    positions = stock_remaining_after_production(snapshot)
    flagged = sum(1 for p in positions if p.status != StockStatus.OK)
    logger.info(f"Remaining stock for '{snapshot.name}': {flagged} of {len(positions)} items flagged")
    return {
        "total": len(positions),
        "items": [p.to_dict() for p in positions],
    }
