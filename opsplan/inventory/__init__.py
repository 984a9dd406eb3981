"""
Inventory calculators: exposure, item/quantity line parsing and
stage-aware stock consumption.
"""

from .exposure import (
    ExposureRow,
    InventoryExposure,
    compute_inventory_exposure,
)
from .line_items import LineItem, parse_line_items, sum_line_items
from .consumption import (
    BatchConsumption,
    StockPosition,
    StockStatus,
    batch_consumption,
    classify_stock,
    completed_stages,
    stock_consumption,
    stock_remaining_after_production,
)

__all__ = [
    "ExposureRow",
    "InventoryExposure",
    "compute_inventory_exposure",
    "LineItem",
    "parse_line_items",
    "sum_line_items",
    "BatchConsumption",
    "StockPosition",
    "StockStatus",
    "batch_consumption",
    "classify_stock",
    "completed_stages",
    "stock_consumption",
    "stock_remaining_after_production",
]
