"""
OpsPlan - Inventory Exposure Calculator
=======================================

Pipeline and safety-stock cash exposure, and reorder-point units, per stock item.

    daily demand     = D_eff / 30
    pipeline units   = daily × lead_time_days
    safety units     = daily × safety_stock_days
    reorder point    = pipeline + safety
    extended cost    = unit_cost × usage_per_finished_unit
    pipeline value   = pipeline units × extended cost
    safety value     = safety units × extended cost

Unit counts are finished-unit equivalents; values are cash. Totals are plain sums.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

from opsplan.core.numeric import safe_divide
from opsplan.scenario.models import ScenarioSnapshot, StockItem

logger = logging.getLogger(__name__)

DAYS_PER_MONTH = 30


@dataclass(frozen=True)
class ExposureRow:
    """Exposure of one stock item."""
    item_id: str
    name: str
    daily_demand: float
    pipeline_units: float
    safety_stock_units: float
    reorder_point_units: float
    extended_unit_cost: float
    pipeline_value: float
    safety_stock_value: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class InventoryExposure:
    rows: List[ExposureRow] = field(default_factory=list)
    total_pipeline_value: float = 0.0
    total_safety_stock_value: float = 0.0

    @property
    def total_value(self) -> float:
        return self.total_pipeline_value + self.total_safety_stock_value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows": [r.to_dict() for r in self.rows],
            "total_pipeline_value": self.total_pipeline_value,
            "total_safety_stock_value": self.total_safety_stock_value,
            "total_value": self.total_value,
        }


def exposure_for_item(item: StockItem, daily_demand: float, safety_stock_days: float) -> ExposureRow:
    pipeline_units = daily_demand * item.lead_time_days
    safety_units = daily_demand * safety_stock_days
    extended = item.unit_cost * item.usage_per_finished_unit
    return ExposureRow(
        item_id=item.id,
        name=item.name,
        daily_demand=daily_demand,
        pipeline_units=pipeline_units,
        safety_stock_units=safety_units,
        reorder_point_units=pipeline_units + safety_units,
        extended_unit_cost=extended,
        pipeline_value=pipeline_units * extended,
        safety_stock_value=safety_units * extended,
    )


def compute_inventory_exposure(snapshot: ScenarioSnapshot) -> InventoryExposure:
    """Exposure rows for every stock item, in ledger order, with totals."""
    inputs = snapshot.inputs
    daily = safe_divide(inputs.effective_monthly_demand, DAYS_PER_MONTH)

    rows = [exposure_for_item(item, daily, inputs.safety_stock_days) for item in snapshot.stock]
    result = InventoryExposure(
        rows=rows,
        total_pipeline_value=sum(r.pipeline_value for r in rows),
        total_safety_stock_value=sum(r.safety_stock_value for r in rows),
    )
    logger.debug(
        f"Exposure '{snapshot.name}': pipeline={result.total_pipeline_value:.2f}, "
        f"safety={result.total_safety_stock_value:.2f}"
    )
    return result
