"""
OpsPlan - Item/Quantity Line Parser
===================================

Parser for the free-text "Item Name, Qty" lists carried on production
batches (component rejects, consumption overrides).

Grammar (one pair per line):
    line  := name "," qty ["," ignored ...]
    name  := stock item name, matched case-insensitively after trimming
    qty   := any finite decimal number

Blank lines are ignored. A line is skipped, and the rest still apply, when:
    - it has no comma
    - the quantity does not parse or is not finite
    - the name matches no stock item
No fuzzy matching: "core pcb" matches "Core PCB ", "Core-PCB" does not.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from opsplan.scenario.models import StockItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LineItem:
    """One resolved line: stock item id and quantity."""
    item_id: str
    quantity: float
    line_no: int


def _name_key(name: str) -> str:
    return name.strip().lower()


def build_name_index(stock: Iterable[StockItem]) -> Dict[str, str]:
    """Map normalized item name -> item id. The first item wins a duplicate name."""
    index: Dict[str, str] = {}
    for item in stock:
        index.setdefault(_name_key(item.name), item.id)
    return index


def _parse_quantity(raw: str) -> Optional[float]:
    try:
        qty = float(raw)
    except ValueError:
        return None
    return qty if math.isfinite(qty) else None


def parse_line_items(text: Optional[str], stock: Iterable[StockItem]) -> List[LineItem]:
    """Parse item/quantity lines against the stock ledger, skipping malformed lines."""
    if not text or not str(text).strip():
        return []

    index = build_name_index(stock)
    items: List[LineItem] = []
    for line_no, raw_line in enumerate(str(text).splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue

        parts = [p.strip() for p in line.split(",")]
        if len(parts) < 2:
            logger.warning(f"Skipping line {line_no} without quantity: {line!r}")
            continue

        qty = _parse_quantity(parts[1])
        if qty is None:
            logger.warning(f"Skipping line {line_no} with invalid quantity: {line!r}")
            continue

        item_id = index.get(_name_key(parts[0]))
        if item_id is None:
            logger.warning(f"Skipping line {line_no} with unknown item: {parts[0]!r}")
            continue

        items.append(LineItem(item_id=item_id, quantity=qty, line_no=line_no))
    return items


def sum_line_items(items: Iterable[LineItem]) -> Dict[str, float]:
    """Total quantity per item id; repeated items accumulate."""
    totals: Dict[str, float] = {}
    for entry in items:
        totals[entry.item_id] = totals.get(entry.item_id, 0.0) + entry.quantity
    return totals
