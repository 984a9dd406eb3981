"""
Request bodies shared by the HTTP routers, and the payload -> snapshot step
every endpoint goes through.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Optional

from fastapi import HTTPException
from pydantic import BaseModel, Field

from .models import ScenarioFormatError, ScenarioSnapshot
from .store import load_snapshot

logger = logging.getLogger(__name__)


class ScenarioRequest(BaseModel):
    """A persisted scenario payload (camelCase keys)."""
    scenario: Dict[str, Any] = Field(..., description="Scenario payload as persisted")


class WindowRequest(ScenarioRequest):
    """Scenario plus the reference date for windowed views."""
    today: date = Field(..., description="First day of the conflict window")
    window_days: Optional[int] = Field(None, ge=1, description="Window length; server default when omitted")


class DayConflictRequest(ScenarioRequest):
    """Scenario plus one scheduled process and one calendar day."""
    entry_id: str = Field(..., description="Scheduled process id")
    day: date


def snapshot_from_request(body: ScenarioRequest) -> ScenarioSnapshot:
    """Load the request's scenario; structural problems become HTTP 422."""
    try:
        return load_snapshot(body.scenario)
    except ScenarioFormatError as exc:
        logger.warning(f"Rejected scenario payload: {exc}")
        raise HTTPException(status_code=422, detail=str(exc))
