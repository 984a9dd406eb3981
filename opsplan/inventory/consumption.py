"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    STOCK CONSUMPTION ENGINE — Stage-Aware BOM & Scrap Accounting
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Computes how much of each stock item production has consumed, from batch
outcomes and the completion state of their scheduled processes.

Completion gate (per batch, per stage):
─────────────────────────────────────────────────────────────────────────────────────────────────────
    A stage (Assembly / Post-Assembly) of a batch is complete when at least
    one scheduled process for that batch, whose process template belongs to
    that stage, has status Complete. The two stages are checked
    independently. A scheduled process whose template is missing belongs
    to no stage.

Rules, in precedence order:
─────────────────────────────────────────────────────────────────────────────────────────────────────
    1. Good units         Assembly complete      → BOM × good_qty
    2. Scrap (qty ≠ 0)
       Assembly scrap     Assembly complete      → itemized component rejects,
                                                   or BOM × scrap_qty when none
                                                   resolve (fallback)
       Post-Assembly      Post-Assembly complete → BOM × scrap_qty
    3. Overrides          any stage complete     → absolute quantity per item,
                                                   replacing 1-2 for that item
                                                   on that batch

    BOM × n  =  { item: n × usage_per_finished_unit  for every stock item }

Remaining stock:
    remaining = on_hand − consumed
    status    = Below Min   if min_qty set and remaining < min_qty
                Reorder     elif reorder_point_qty set and remaining < reorder_point_qty
                OK          otherwise
═══════════════════════════════════════════════════════════════════════════════════════════════════════
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from opsplan.inventory.line_items import parse_line_items, sum_line_items
from opsplan.scenario.models import (
    BatchStatus,
    ProcessStage,
    ProductionBatch,
    ScenarioSnapshot,
    StockItem,
)

logger = logging.getLogger(__name__)


class StockStatus(str, Enum):
    """Stock condition after production."""
    OK = "OK"
    REORDER = "Reorder"
    BELOW_MIN = "Below Min"


# ═══════════════════════════════════════════════════════════════════════════════
# DATA STRUCTURES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BatchConsumption:
    """Consumption attributed to one batch."""
    batch_id: str
    batch_number: str
    assembly_complete: bool
    post_assembly_complete: bool
    quantities: Dict[str, float] = field(default_factory=dict)
    scrap_fallback_used: bool = False
    overridden_items: Tuple[str, ...] = ()

    @property
    def counted(self) -> bool:
        """True when any stage of the batch is complete."""
        return self.assembly_complete or self.post_assembly_complete

    def to_dict(self) -> Dict[str, Any]:
        return {
            "batch_id": self.batch_id,
            "batch_number": self.batch_number,
            "assembly_complete": self.assembly_complete,
            "post_assembly_complete": self.post_assembly_complete,
            "quantities": dict(self.quantities),
            "scrap_fallback_used": self.scrap_fallback_used,
            "overridden_items": list(self.overridden_items),
        }


@dataclass(frozen=True)
class StockPosition:
    """Remaining-stock row for one item."""
    item_id: str
    name: str
    on_hand_qty: float
    consumed_qty: float
    remaining_qty: float
    reorder_point_qty: Optional[float]
    min_qty: Optional[float]
    status: StockStatus

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item_id": self.item_id,
            "name": self.name,
            "on_hand_qty": self.on_hand_qty,
            "consumed_qty": self.consumed_qty,
            "remaining_qty": self.remaining_qty,
            "reorder_point_qty": self.reorder_point_qty,
            "min_qty": self.min_qty,
            "status": self.status.value,
        }


# ═══════════════════════════════════════════════════════════════════════════════
# COMPLETION GATE
# ═══════════════════════════════════════════════════════════════════════════════

def completed_stages(snapshot: ScenarioSnapshot) -> Dict[str, Set[ProcessStage]]:
    """Batch id -> stages with at least one Complete scheduled process."""
    templates = snapshot.process_by_id()
    done: Dict[str, Set[ProcessStage]] = {}
    for entry in snapshot.schedule:
        if entry.status != BatchStatus.COMPLETE:
            continue
        template = templates.get(entry.process_id)
        if template is None:
            logger.debug(f"Scheduled process {entry.id} references unknown template {entry.process_id!r}")
            continue
        done.setdefault(entry.batch_id, set()).add(template.stage)
    return done


# ═══════════════════════════════════════════════════════════════════════════════
# CONSUMPTION
# ═══════════════════════════════════════════════════════════════════════════════

def _add_bom(target: Dict[str, float], stock: Sequence[StockItem], units: float) -> None:
    if not units:
        return
    for item in stock:
        target[item.id] = target.get(item.id, 0.0) + units * item.usage_per_finished_unit


def consume_batch(
    batch: ProductionBatch,
    stages: Set[ProcessStage],
    stock: Sequence[StockItem],
) -> BatchConsumption:
    """Apply the good/scrap/override rules to a single batch."""
    assembly_done = ProcessStage.ASSEMBLY in stages
    post_done = ProcessStage.POST_ASSEMBLY in stages

    quantities: Dict[str, float] = {item.id: 0.0 for item in stock}
    fallback = False

    if assembly_done:
        _add_bom(quantities, stock, batch.good_qty)

    if batch.scrap_qty:
        if batch.scrap_stage == ProcessStage.POST_ASSEMBLY:
            if post_done:
                _add_bom(quantities, stock, batch.scrap_qty)
        elif assembly_done:
            rejects = sum_line_items(parse_line_items(batch.component_rejects, stock))
            if rejects:
                for item_id, qty in rejects.items():
                    quantities[item_id] = quantities.get(item_id, 0.0) + qty
            else:
                fallback = True
                _add_bom(quantities, stock, batch.scrap_qty)

    overridden: Tuple[str, ...] = ()
    if assembly_done or post_done:
        overrides = sum_line_items(parse_line_items(batch.consumption_overrides, stock))
        quantities.update(overrides)
        overridden = tuple(overrides)

    if fallback:
        logger.info(
            f"Batch {batch.batch_number or batch.id}: no component rejects itemized, "
            f"charging full BOM for {batch.scrap_qty:g} scrapped units"
        )

    return BatchConsumption(
        batch_id=batch.id,
        batch_number=batch.batch_number,
        assembly_complete=assembly_done,
        post_assembly_complete=post_done,
        quantities=quantities,
        scrap_fallback_used=fallback,
        overridden_items=overridden,
    )


def batch_consumption(snapshot: ScenarioSnapshot) -> List[BatchConsumption]:
    """Per-batch consumption detail, in batch order."""
    stages = completed_stages(snapshot)
    defined = {p.stage for p in snapshot.processes}
    for batch in snapshot.batches:
        if batch.scrap_qty and batch.scrap_stage not in defined:
            logger.warning(
                f"Batch {batch.batch_number or batch.id}: {batch.scrap_qty:g} {batch.scrap_stage.value} "
                f"scrap not counted, no process template has stage {batch.scrap_stage.value!r}"
            )
    return [
        consume_batch(batch, stages.get(batch.id, set()), snapshot.stock)
        for batch in snapshot.batches
    ]


def stock_consumption(snapshot: ScenarioSnapshot) -> Dict[str, float]:
    """Stock item id -> total quantity consumed by production (every item present)."""
    consumed: Dict[str, float] = {item.id: 0.0 for item in snapshot.stock}
    for detail in batch_consumption(snapshot):
        if not detail.counted:
            continue
        for item_id, qty in detail.quantities.items():
            consumed[item_id] = consumed.get(item_id, 0.0) + qty
    return consumed


# ═══════════════════════════════════════════════════════════════════════════════
# REMAINING STOCK
# ═══════════════════════════════════════════════════════════════════════════════

def classify_stock(
    remaining: float,
    min_qty: Optional[float],
    reorder_point_qty: Optional[float],
) -> StockStatus:
    """Below Min takes precedence over Reorder."""
    if min_qty is not None and remaining < min_qty:
        return StockStatus.BELOW_MIN
    if reorder_point_qty is not None and remaining < reorder_point_qty:
        return StockStatus.REORDER
    return StockStatus.OK


def stock_remaining_after_production(
    snapshot: ScenarioSnapshot,
    consumed: Optional[Mapping[str, float]] = None,
) -> List[StockPosition]:
    """Remaining stock and status per item, in ledger order."""
    if consumed is None:
        consumed = stock_consumption(snapshot)

    positions = []
    for item in snapshot.stock:
        used = float(consumed.get(item.id, 0.0))
        remaining = item.on_hand_qty - used
        positions.append(StockPosition(
            item_id=item.id,
            name=item.name,
            on_hand_qty=item.on_hand_qty,
            consumed_qty=used,
            remaining_qty=remaining,
            reorder_point_qty=item.reorder_point_qty,
            min_qty=item.min_qty,
            status=classify_stock(remaining, item.min_qty, item.reorder_point_qty),
        ))
    return positions
