"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    OPSPLAN — PLANNING CALCULATORS
═══════════════════════════════════════════════════════════════════════════════════════════════════════

- Cost model: per-unit cost breakdown and margin
- Capacity analyzer: required vs installed machines, bottleneck, FTE
"""

from .cost_model import (
    CostBreakdown,
    compute_cost_breakdown,
    material_cost_per_unit,
)

from .capacity_analyzer import (
    CapacityReport,
    StationCapacity,
    analyze_capacity,
    select_bottleneck,
    station_capacity,
)

__all__ = [
    # Cost
    "CostBreakdown", "compute_cost_breakdown", "material_cost_per_unit",
    # Capacity
    "CapacityReport", "StationCapacity", "analyze_capacity", "select_bottleneck",
    "station_capacity",
]
