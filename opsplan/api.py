"""
OpsPlan HTTP entry point.

    uvicorn opsplan.api:app --port 8000
"""

import logging
from datetime import date
from typing import Any, Dict, Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware

from opsplan import __version__
from opsplan.dashboards.alerts import summary_alerts
from opsplan.inventory import api as inventory_api
from opsplan.planning import api as planning_api
from opsplan.scenario.defaults import default_scenarios
from opsplan.scenario.schemas import WindowRequest, snapshot_from_request
from opsplan.scheduling import api as scheduling_api
from opsplan.settings import EngineSettings

load_dotenv()

settings = EngineSettings.get_config()
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="OpsPlan API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=settings.cors_origin_regex,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(planning_api.router, prefix="/api")
app.include_router(inventory_api.router, prefix="/api")
app.include_router(scheduling_api.router, prefix="/api")


@app.post("/api/summary", tags=["Summary"])
async def summary(body: WindowRequest) -> Dict[str, Any]:
    """Alert counts, headline KPIs and attention items."""
    snapshot = snapshot_from_request(body)
    window = body.window_days or EngineSettings.get_config().conflict_window_days
    return summary_alerts(snapshot, body.today, window).to_dict()


@app.get("/api/scenarios/defaults", tags=["Scenarios"])
async def scenario_defaults(
    today: Optional[date] = Query(None, description="Date stamped into the audit log"),
) -> Dict[str, Any]:
    """Pilot / Ramp / Scale seed scenarios in the persisted shape."""
    seeds = default_scenarios(today or date.today())
    return {name: snapshot.to_dict() for name, snapshot in seeds.items()}


@app.get("/api/health")
async def health():
    return {"status": "ok", "version": __version__, "settings": EngineSettings.to_dict()}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
