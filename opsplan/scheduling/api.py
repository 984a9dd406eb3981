"""
════════════════════════════════════════════════════════════════════════════════════════════════════
SCHEDULING API - Conflict detection endpoints
════════════════════════════════════════════════════════════════════════════════════════════════════

- Window summary: ready / at risk / blocked over [today, today + window)
- Day check: does one scheduled process clash on one calendar day
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from opsplan.scenario.schemas import (
    DayConflictRequest,
    WindowRequest,
    snapshot_from_request,
)
from opsplan.scheduling.conflicts import BookingMap, day_conflict, detect_schedule_conflicts
from opsplan.settings import EngineSettings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scheduling", tags=["Scheduling"])


@router.post("/conflicts", summary="Conflict summary over the rolling window")
async def conflicts(body: WindowRequest) -> Dict[str, Any]:
    snapshot = snapshot_from_request(body)
    window = body.window_days or EngineSettings.get_config().conflict_window_days
    return detect_schedule_conflicts(snapshot, body.today, window).to_dict()


@router.post("/conflicts/day", summary="Conflict check for one process on one day")
async def conflict_on_day(body: DayConflictRequest) -> Dict[str, Any]:
    """
    Per-day predicate used for calendar highlighting.

    Days outside the process span never conflict.
    """
    snapshot = snapshot_from_request(body)
    entry = next((e for e in snapshot.schedule if e.id == body.entry_id), None)
    if entry is None:
        raise HTTPException(status_code=404, detail="Scheduled process not found")

    found = day_conflict(BookingMap.from_snapshot(snapshot), entry, body.day)
    return {
        "entry_id": entry.id,
        "has_conflict": found.has_conflict,
        **found.to_dict(),
    }
