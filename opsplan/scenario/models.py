"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    SCENARIO SNAPSHOT — Immutable Planning Input
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Data model for one planning scenario (Pilot, Ramp, Scale, or any named copy).

Every entity is a frozen dataclass and every collection is a tuple, so a
snapshot can be shared freely between calculators. Edits never happen in
place: `opsplan.scenario.store` builds a new snapshot with
`dataclasses.replace`.

Wire format:
─────────────────────────────────────────────────────────────────────────────────────────────────────
    Persisted payloads use camelCase keys (salePricePerUnit, onHandQty,
    assignedMachineIdsCsv, ...). `from_dict` accepts camelCase or
    snake_case keys; `to_dict` always writes camelCase, so a payload
    survives a load/dump round trip unchanged in shape.

Defaults for optional global inputs are resolved here, once, when
`GlobalInputs` is built:
    scrap_rate_pct            0.0
    overhead_pct              0.25
    holding_rate_pct_annual   0.24
    safety_stock_days         14
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar

from dateutil.parser import isoparse

logger = logging.getLogger(__name__)


class ScenarioFormatError(ValueError):
    """Raised when a scenario payload is structurally unusable."""


# ═══════════════════════════════════════════════════════════════════════════════
# ENUMS
# ═══════════════════════════════════════════════════════════════════════════════

class MachineStatus(str, Enum):
    """Machine availability."""
    AVAILABLE = "Available"
    IN_USE = "In Use"
    OUT_OF_SERVICE = "Out of Service"


class ProcessStage(str, Enum):
    """Production lifecycle stage a process template (and scrap) belongs to."""
    ASSEMBLY = "Assembly"
    POST_ASSEMBLY = "Post-Assembly"


class BatchStatus(str, Enum):
    """Status shared by production batches and scheduled processes."""
    PLANNED = "Planned"
    IN_PROGRESS = "In Progress"
    ISSUE = "Issue"
    COMPLETE = "Complete"
    QUARANTINE = "Quarantine"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"


class MaintenanceStatus(str, Enum):
    """Maintenance block status. Cancelled blocks are inert."""
    PLANNED = "Planned"
    IN_PROGRESS = "In Progress"
    COMPLETE = "Complete"
    CANCELLED = "Cancelled"


class CapaStatus(str, Enum):
    """Corrective/preventive action status."""
    OPEN = "Open"
    IN_PROGRESS = "In progress"
    EFFECTIVENESS_CHECK = "Effectiveness check"
    CLOSED = "Closed"
    CANCELLED = "Cancelled"


E = TypeVar("E", bound=Enum)


# ═══════════════════════════════════════════════════════════════════════════════
# PAYLOAD COERCION
# ═══════════════════════════════════════════════════════════════════════════════

def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _get(payload: Mapping[str, Any], name: str) -> Any:
    """Look up a field by its camelCase key, falling back to snake_case."""
    key = _camel(name)
    if key in payload:
        return payload[key]
    return payload.get(name)


def _num(payload: Mapping[str, Any], name: str, default: float = 0.0) -> float:
    value = _get(payload, name)
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ScenarioFormatError(f"Field '{_camel(name)}' is not numeric: {value!r}")
    if not math.isfinite(number):
        raise ScenarioFormatError(f"Field '{_camel(name)}' is not finite: {value!r}")
    return number


def _opt_num(payload: Mapping[str, Any], name: str) -> Optional[float]:
    value = _get(payload, name)
    if value is None or value == "":
        return None
    return _num(payload, name)


def _int(payload: Mapping[str, Any], name: str, default: int = 0) -> int:
    return int(_num(payload, name, float(default)))


def _text(payload: Mapping[str, Any], name: str, default: str = "") -> str:
    value = _get(payload, name)
    if value is None:
        return default
    return str(value)


def _flag(payload: Mapping[str, Any], name: str) -> bool:
    value = _get(payload, name)
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def _day(payload: Mapping[str, Any], name: str) -> date:
    value = _get(payload, name)
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        raise ScenarioFormatError(f"Field '{_camel(name)}' is required")
    try:
        return isoparse(str(value).strip()).date()
    except (TypeError, ValueError):
        raise ScenarioFormatError(f"Field '{_camel(name)}' is not an ISO date: {value!r}")


def _enum(enum_cls: Type[E], payload: Mapping[str, Any], name: str, default: E) -> E:
    value = _get(payload, name)
    if value is None or value == "":
        return default
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value))
    except ValueError:
        raise ScenarioFormatError(
            f"Field '{_camel(name)}' has unknown value {value!r}; "
            f"expected one of {[m.value for m in enum_cls]}"
        )


def _require_id(payload: Any, kind: str) -> str:
    if not isinstance(payload, Mapping):
        raise ScenarioFormatError(f"{kind} entry must be an object, got {type(payload).__name__}")
    value = payload.get("id")
    if value is None or str(value).strip() == "":
        raise ScenarioFormatError(f"{kind} entry is missing 'id'")
    return str(value)


def _serialize(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, tuple):
        return [_serialize(v) for v in value]
    if isinstance(value, _Record):
        return value.to_dict()
    return value


class _Record:
    """Mixin: camelCase dict export for frozen dataclasses."""

    def to_dict(self) -> Dict[str, Any]:
        return {_camel(f.name): _serialize(getattr(self, f.name)) for f in fields(self)}


# ═══════════════════════════════════════════════════════════════════════════════
# GLOBAL INPUTS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PlanningDefaults:
    """Documented fallbacks for optional global inputs."""
    scrap_rate_pct: float = 0.0
    overhead_pct: float = 0.25
    holding_rate_pct_annual: float = 0.24
    safety_stock_days: float = 14.0


DEFAULTS = PlanningDefaults()


@dataclass(frozen=True)
class GlobalInputs(_Record):
    """Scalar cost and capacity drivers for a scenario."""
    sale_price_per_unit: float
    monthly_demand: float
    available_minutes_per_month: float
    oee: float
    downtime_pct: float
    labour_rate_per_hour: float
    labour_minutes_per_unit: float
    quality_cost_per_unit: float
    capex_total: float
    depreciation_months: float
    margin_guardrail_pct: float
    scrap_rate_pct: float = DEFAULTS.scrap_rate_pct
    overhead_pct: float = DEFAULTS.overhead_pct
    holding_rate_pct_annual: float = DEFAULTS.holding_rate_pct_annual
    safety_stock_days: float = DEFAULTS.safety_stock_days

    @property
    def scrap_multiplier(self) -> float:
        """1 + max(0, scrap rate)."""
        return 1.0 + max(0.0, self.scrap_rate_pct)

    @property
    def effective_monthly_demand(self) -> float:
        """Monthly demand inflated by expected scrap loss."""
        return self.monthly_demand * self.scrap_multiplier

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "GlobalInputs":
        if not isinstance(payload, Mapping):
            raise ScenarioFormatError("'inputs' must be an object")
        required = (
            "sale_price_per_unit", "monthly_demand", "available_minutes_per_month",
            "oee", "downtime_pct", "labour_rate_per_hour", "labour_minutes_per_unit",
            "quality_cost_per_unit", "capex_total", "depreciation_months",
            "margin_guardrail_pct",
        )
        missing = [_camel(name) for name in required if _get(payload, name) is None]
        if missing:
            raise ScenarioFormatError(f"Global inputs missing required fields: {missing}")

        return cls(
            **{name: _num(payload, name) for name in required},
            scrap_rate_pct=_num(payload, "scrap_rate_pct", DEFAULTS.scrap_rate_pct),
            overhead_pct=_num(payload, "overhead_pct", DEFAULTS.overhead_pct),
            holding_rate_pct_annual=_num(
                payload, "holding_rate_pct_annual", DEFAULTS.holding_rate_pct_annual
            ),
            safety_stock_days=_num(payload, "safety_stock_days", DEFAULTS.safety_stock_days),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# MASTER DATA
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StockItem(_Record):
    """A stock-ledger line with its per-finished-unit BOM usage."""
    id: str
    name: str
    type: str = "Component"  # Component | Consumable | Packaging | Spare
    unit_cost: float = 0.0
    uom: str = "pcs"
    location: str = ""
    usage_per_finished_unit: float = 0.0
    lead_time_days: float = 0.0
    moq: float = 0.0
    single_source: bool = False
    on_hand_qty: float = 0.0  # may go negative; never clamped here
    reorder_point_qty: Optional[float] = None
    min_qty: Optional[float] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "StockItem":
        item_id = _require_id(payload, "Stock item")
        return cls(
            id=item_id,
            name=_text(payload, "name"),
            type=_text(payload, "type", "Component"),
            unit_cost=_num(payload, "unit_cost"),
            uom=_text(payload, "uom", "pcs"),
            location=_text(payload, "location"),
            usage_per_finished_unit=_num(payload, "usage_per_finished_unit"),
            lead_time_days=_num(payload, "lead_time_days"),
            moq=_num(payload, "moq"),
            single_source=_flag(payload, "single_source"),
            on_hand_qty=_num(payload, "on_hand_qty"),
            reorder_point_qty=_opt_num(payload, "reorder_point_qty"),
            min_qty=_opt_num(payload, "min_qty"),
        )


@dataclass(frozen=True)
class MachineAsset(_Record):
    """A machine that can be assigned to scheduled processes."""
    id: str
    name: str
    type: str = ""
    status: MachineStatus = MachineStatus.AVAILABLE
    notes: str = ""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "MachineAsset":
        return cls(
            id=_require_id(payload, "Machine"),
            name=_text(payload, "name"),
            type=_text(payload, "type"),
            status=_enum(MachineStatus, payload, "status", MachineStatus.AVAILABLE),
            notes=_text(payload, "notes"),
        )


@dataclass(frozen=True)
class Person(_Record):
    id: str
    name: str
    role: str = ""
    shift: str = ""
    notes: str = ""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Person":
        return cls(
            id=_require_id(payload, "Person"),
            name=_text(payload, "name"),
            role=_text(payload, "role"),
            shift=_text(payload, "shift"),
            notes=_text(payload, "notes"),
        )


@dataclass(frozen=True)
class ProcessTemplate(_Record):
    """A reusable process definition bound to one lifecycle stage."""
    id: str
    name: str
    default_duration_min: float = 0.0
    allowed_machine_types_csv: str = ""
    stage: ProcessStage = ProcessStage.ASSEMBLY
    notes: str = ""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ProcessTemplate":
        return cls(
            id=_require_id(payload, "Process template"),
            name=_text(payload, "name"),
            default_duration_min=_num(payload, "default_duration_min"),
            allowed_machine_types_csv=_text(payload, "allowed_machine_types_csv"),
            stage=_enum(ProcessStage, payload, "stage", ProcessStage.ASSEMBLY),
            notes=_text(payload, "notes"),
        )


@dataclass(frozen=True)
class Station(_Record):
    """A capacity station: a group of identical machines sharing a cycle time."""
    id: str
    name: str
    cycle_time_seconds: float = 0.0
    installed_count: float = 0.0

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Station":
        return cls(
            id=_require_id(payload, "Station"),
            name=_text(payload, "name"),
            cycle_time_seconds=_num(payload, "cycle_time_seconds"),
            installed_count=_num(payload, "installed_count"),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# EXECUTION
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ProductionBatch(_Record):
    """
    A production run and its outcome.

    Scrap rules:
        Assembly       component-level rejects listed in `component_rejects`
        Post-Assembly  the whole BOM of each scrapped finished unit
    `consumption_overrides` is the legacy absolute-quantity field; both text
    fields hold one "Item Name, Qty" pair per line.
    """
    id: str
    batch_number: str
    purpose: str = ""
    planned_qty: float = 0.0
    good_qty: float = 0.0
    scrap_stage: ProcessStage = ProcessStage.ASSEMBLY
    scrap_qty: float = 0.0
    component_rejects: str = ""
    consumption_overrides: str = ""
    status: BatchStatus = BatchStatus.PLANNED
    notes: str = ""
    observations: str = ""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ProductionBatch":
        return cls(
            id=_require_id(payload, "Batch"),
            batch_number=_text(payload, "batch_number"),
            purpose=_text(payload, "purpose"),
            planned_qty=_num(payload, "planned_qty"),
            good_qty=_num(payload, "good_qty"),
            scrap_stage=_enum(ProcessStage, payload, "scrap_stage", ProcessStage.ASSEMBLY),
            scrap_qty=_num(payload, "scrap_qty"),
            component_rejects=_text(payload, "component_rejects"),
            consumption_overrides=_text(payload, "consumption_overrides"),
            status=_enum(BatchStatus, payload, "status", BatchStatus.PLANNED),
            notes=_text(payload, "notes"),
            observations=_text(payload, "observations"),
        )


@dataclass(frozen=True)
class ScheduledProcess(_Record):
    """A process for a batch placed on the calendar, spanning whole days."""
    id: str
    batch_id: str
    date: date
    duration_days: int = 1
    process_id: str = ""
    assigned_people_ids_csv: str = ""
    assigned_machine_ids_csv: str = ""
    status: BatchStatus = BatchStatus.PLANNED
    notes: str = ""
    observations: str = ""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ScheduledProcess":
        return cls(
            id=_require_id(payload, "Scheduled process"),
            batch_id=_text(payload, "batch_id"),
            date=_day(payload, "date"),
            duration_days=_int(payload, "duration_days", 1),
            process_id=_text(payload, "process_id"),
            assigned_people_ids_csv=_text(payload, "assigned_people_ids_csv"),
            assigned_machine_ids_csv=_text(payload, "assigned_machine_ids_csv"),
            status=_enum(BatchStatus, payload, "status", BatchStatus.PLANNED),
            notes=_text(payload, "notes"),
            observations=_text(payload, "observations"),
        )


@dataclass(frozen=True)
class MaintenanceBlock(_Record):
    """Reserves machines for whole days."""
    id: str
    date: date
    duration_days: int = 1
    machine_ids_csv: str = ""
    title: str = ""
    notes: str = ""
    status: MaintenanceStatus = MaintenanceStatus.PLANNED

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "MaintenanceBlock":
        return cls(
            id=_require_id(payload, "Maintenance block"),
            date=_day(payload, "date"),
            duration_days=_int(payload, "duration_days", 1),
            machine_ids_csv=_text(payload, "machine_ids_csv"),
            title=_text(payload, "title"),
            notes=_text(payload, "notes"),
            status=_enum(MaintenanceStatus, payload, "status", MaintenanceStatus.PLANNED),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# COST DESCRIPTORS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LogisticsLane(_Record):
    id: str
    lane: str
    direction: str = "Inbound"  # Inbound | Outbound
    mode: str = "Road"          # Air | Sea | Road
    cost_per_shipment: float = 0.0
    units_per_shipment: float = 0.0

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "LogisticsLane":
        return cls(
            id=_require_id(payload, "Logistics lane"),
            lane=_text(payload, "lane"),
            direction=_text(payload, "direction", "Inbound"),
            mode=_text(payload, "mode", "Road"),
            cost_per_shipment=_num(payload, "cost_per_shipment"),
            units_per_shipment=_num(payload, "units_per_shipment"),
        )


@dataclass(frozen=True)
class Warehouse(_Record):
    id: str
    location: str
    type: str = "RM"  # FG | RM
    monthly_cost: float = 0.0
    utilization_pct: float = 0.0
    capacity_pct_limit: Optional[float] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Warehouse":
        return cls(
            id=_require_id(payload, "Warehouse"),
            location=_text(payload, "location"),
            type=_text(payload, "type", "RM"),
            monthly_cost=_num(payload, "monthly_cost"),
            utilization_pct=_num(payload, "utilization_pct"),
            capacity_pct_limit=_opt_num(payload, "capacity_pct_limit"),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# TRACKING
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PlanningDecision(_Record):
    id: str
    title: str
    target: str = ""
    owner: str = ""
    status: str = "Not started"  # Not started | In progress | Blocked | Done
    notes: str = ""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PlanningDecision":
        return cls(
            id=_require_id(payload, "Decision"),
            title=_text(payload, "title"),
            target=_text(payload, "target"),
            owner=_text(payload, "owner"),
            status=_text(payload, "status", "Not started"),
            notes=_text(payload, "notes"),
        )


@dataclass(frozen=True)
class CapaItem(_Record):
    """Corrective and preventive action record."""
    id: str
    ref: str
    title: str = ""
    batch_id: Optional[str] = None
    owner: str = ""
    due_date: str = ""
    status: CapaStatus = CapaStatus.OPEN
    root_cause: str = ""
    action: str = ""
    notes: str = ""

    @property
    def is_open(self) -> bool:
        return self.status not in (CapaStatus.CLOSED, CapaStatus.CANCELLED)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CapaItem":
        batch_id = _get(payload, "batch_id")
        return cls(
            id=_require_id(payload, "CAPA"),
            ref=_text(payload, "ref"),
            title=_text(payload, "title"),
            batch_id=str(batch_id) if batch_id else None,
            owner=_text(payload, "owner"),
            due_date=_text(payload, "due_date"),
            status=_enum(CapaStatus, payload, "status", CapaStatus.OPEN),
            root_cause=_text(payload, "root_cause"),
            action=_text(payload, "action"),
            notes=_text(payload, "notes"),
        )


@dataclass(frozen=True)
class RiskEntry(_Record):
    id: str
    area: str
    status: str = "Green"  # Green | Amber | Red
    mitigation: str = ""
    owner: str = ""

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "RiskEntry":
        return cls(
            id=_require_id(payload, "Risk"),
            area=_text(payload, "area"),
            status=_text(payload, "status", "Green"),
            mitigation=_text(payload, "mitigation"),
            owner=_text(payload, "owner"),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# SNAPSHOT
# ═══════════════════════════════════════════════════════════════════════════════

COLLECTIONS: Dict[str, type] = {
    "stock": StockItem,
    "people": Person,
    "machines": MachineAsset,
    "processes": ProcessTemplate,
    "stations": Station,
    "batches": ProductionBatch,
    "schedule": ScheduledProcess,
    "maintenance_blocks": MaintenanceBlock,
    "logistics": LogisticsLane,
    "warehouses": Warehouse,
    "decisions": PlanningDecision,
    "capas": CapaItem,
    "risks": RiskEntry,
}


@dataclass(frozen=True)
class ScenarioSnapshot(_Record):
    """
    Root value for one scenario.

    Calculators only read it. Lookup helpers build fresh dicts on each call;
    nothing is cached on the instance.
    """
    name: str
    inputs: GlobalInputs
    stock: Tuple[StockItem, ...] = ()
    people: Tuple[Person, ...] = ()
    machines: Tuple[MachineAsset, ...] = ()
    processes: Tuple[ProcessTemplate, ...] = ()
    stations: Tuple[Station, ...] = ()
    batches: Tuple[ProductionBatch, ...] = ()
    schedule: Tuple[ScheduledProcess, ...] = ()
    maintenance_blocks: Tuple[MaintenanceBlock, ...] = ()
    logistics: Tuple[LogisticsLane, ...] = ()
    warehouses: Tuple[Warehouse, ...] = ()
    decisions: Tuple[PlanningDecision, ...] = ()
    capas: Tuple[CapaItem, ...] = ()
    risks: Tuple[RiskEntry, ...] = ()
    audit_log: Tuple[str, ...] = field(default_factory=tuple)

    def stock_by_id(self) -> Dict[str, StockItem]:
        return {item.id: item for item in self.stock}

    def process_by_id(self) -> Dict[str, ProcessTemplate]:
        return {p.id: p for p in self.processes}

    def batch_by_id(self) -> Dict[str, ProductionBatch]:
        return {b.id: b for b in self.batches}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ScenarioSnapshot":
        """
        Build a snapshot from a (normalized) payload.

        Raises:
            ScenarioFormatError: non-object payload, missing name/inputs, a
                collection that is not a list, or an unusable entry.
        """
        if not isinstance(payload, Mapping):
            raise ScenarioFormatError("Scenario payload must be an object")
        name = _get(payload, "name")
        if not name:
            raise ScenarioFormatError("Scenario payload is missing 'name'")
        if _get(payload, "inputs") is None:
            raise ScenarioFormatError("Scenario payload is missing 'inputs'")

        collections: Dict[str, tuple] = {}
        for attr, entity_cls in COLLECTIONS.items():
            raw = _get(payload, attr)
            if raw is None:
                raw = []
            if not isinstance(raw, (list, tuple)):
                raise ScenarioFormatError(f"'{_camel(attr)}' must be a list")
            collections[attr] = tuple(entity_cls.from_dict(entry) for entry in raw)

        audit = _get(payload, "audit_log") or []
        if not isinstance(audit, (list, tuple)):
            raise ScenarioFormatError("'auditLog' must be a list")

        snapshot = cls(
            name=str(name),
            inputs=GlobalInputs.from_dict(_get(payload, "inputs")),
            audit_log=tuple(str(line) for line in audit),
            **collections,
        )
        logger.debug(
            f"Loaded scenario '{snapshot.name}': {len(snapshot.stock)} stock items, "
            f"{len(snapshot.batches)} batches, {len(snapshot.schedule)} scheduled processes"
        )
        return snapshot
