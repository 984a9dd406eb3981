"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    COST MODEL — Per-Unit Cost Breakdown & Margin
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Derives the landed cost of one finished unit from the scenario drivers.

Mathematical Model:
─────────────────────────────────────────────────────────────────────────────────────────────────────

    V            = D × (1 + max(0, scrap))                 effective monthly volume

    labour       = (rate_h / 60) × min_per_unit
    overhead     = labour × overhead_pct
    material     = Σ_i cost_i × usage_i                    rate per unit, not scaled by V
    logistics    = Σ_l safe(cost_l, units_l)
    warehouse    = safe(Σ_w monthly_w, V)
    holding      = material × (holding_annual / 12)
    capex        = safe(safe(capex_total, months), V)
    quality      = quality_cost_per_unit

    total        = Σ components
    margin/unit  = price − total
    margin %     = safe(margin/unit, price) × 100

    safe(n, d)   = n / d if d > 0 else 0
═══════════════════════════════════════════════════════════════════════════════════════════════════════
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict

from opsplan.core.numeric import safe_divide
from opsplan.scenario.models import ScenarioSnapshot

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class CostBreakdown:
    """Cost per finished unit, by component, with margin."""
    labour: float
    labour_overhead: float
    material: float
    logistics: float
    warehouse: float
    holding: float
    capex_depreciation: float
    quality: float
    total: float
    margin_per_unit: float
    margin_pct: float
    margin_guardrail_met: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def material_cost_per_unit(snapshot: ScenarioSnapshot) -> float:
    """BOM material cost of one finished unit."""
    return sum(item.unit_cost * item.usage_per_finished_unit for item in snapshot.stock)


def compute_cost_breakdown(snapshot: ScenarioSnapshot) -> CostBreakdown:
    """Per-unit cost breakdown and margin for the scenario."""
    inputs = snapshot.inputs
    volume = inputs.effective_monthly_demand

    labour = (inputs.labour_rate_per_hour / 60) * inputs.labour_minutes_per_unit
    labour_overhead = labour * inputs.overhead_pct
    material = material_cost_per_unit(snapshot)

    logistics = sum(
        safe_divide(lane.cost_per_shipment, lane.units_per_shipment)
        for lane in snapshot.logistics
    )

    warehouse_monthly = sum(w.monthly_cost for w in snapshot.warehouses)
    warehouse = safe_divide(warehouse_monthly, volume)

    holding = material * (inputs.holding_rate_pct_annual / MONTHS_PER_YEAR)

    capex_depreciation = safe_divide(
        safe_divide(inputs.capex_total, inputs.depreciation_months), volume
    )

    quality = inputs.quality_cost_per_unit

    total = (
        labour + labour_overhead + material + logistics
        + warehouse + holding + capex_depreciation + quality
    )
    margin_per_unit = inputs.sale_price_per_unit - total
    margin_pct = safe_divide(margin_per_unit, inputs.sale_price_per_unit) * 100

    logger.debug(
        f"Cost model '{snapshot.name}': volume={volume:.1f}, total={total:.2f}, "
        f"margin={margin_pct:.1f}%"
    )

    return CostBreakdown(
        labour=labour,
        labour_overhead=labour_overhead,
        material=material,
        logistics=logistics,
        warehouse=warehouse,
        holding=holding,
        capex_depreciation=capex_depreciation,
        quality=quality,
        total=total,
        margin_per_unit=margin_per_unit,
        margin_pct=margin_pct,
        margin_guardrail_met=margin_pct > inputs.margin_guardrail_pct,
    )
