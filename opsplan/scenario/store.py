"""
OpsPlan - Scenario Store Utilities
==================================

Copy-on-write helpers around `ScenarioSnapshot`, plus the load-side
migration that older payloads go through before the engine sees them.

Nothing here touches disk or network: persistence belongs to the caller.
Every edit returns a new snapshot; the one passed in is never modified.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, Mapping

from .models import COLLECTIONS, ScenarioFormatError, ScenarioSnapshot, _camel

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# LOAD / EXPORT
# ═══════════════════════════════════════════════════════════════════════════════

def normalize_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Migrate an older payload to the current shape.

    Absent or non-list collections become empty lists, and an absent audit
    log becomes an empty list. Optional global inputs are left absent: their
    defaults are applied when `GlobalInputs` is built. The input mapping is
    not modified.
    """
    if not isinstance(payload, Mapping):
        raise ScenarioFormatError("Scenario payload must be an object")

    patched = copy.deepcopy(dict(payload))
    for attr in list(COLLECTIONS) + ["audit_log"]:
        key = _camel(attr)
        value = patched.pop(key, None)
        legacy = patched.pop(attr, None)
        if value is None:
            value = legacy
        if not isinstance(value, list):
            if value is not None:
                logger.warning(f"Scenario field '{key}' is not a list; replacing with []")
            value = []
        patched[key] = value
    return patched


def load_snapshot(payload: Mapping[str, Any]) -> ScenarioSnapshot:
    """Normalize then parse a persisted payload."""
    return ScenarioSnapshot.from_dict(normalize_payload(payload))


def export_scenario_json(snapshot: ScenarioSnapshot) -> str:
    """Pretty JSON in the persisted camelCase shape."""
    return json.dumps(snapshot.to_dict(), indent=2)


# ═══════════════════════════════════════════════════════════════════════════════
# COPY-ON-WRITE EDITS
# ═══════════════════════════════════════════════════════════════════════════════

def _check_collection(collection: str) -> None:
    if collection not in COLLECTIONS:
        raise KeyError(f"Unknown scenario collection: {collection}")


def replace_collection(snapshot: ScenarioSnapshot, collection: str, items) -> ScenarioSnapshot:
    """Swap one whole collection."""
    _check_collection(collection)
    return replace(snapshot, **{collection: tuple(items)})


def upsert_entity(snapshot: ScenarioSnapshot, collection: str, entity) -> ScenarioSnapshot:
    """Replace the entity with the same id in place, or append it."""
    _check_collection(collection)
    current = getattr(snapshot, collection)
    if any(existing.id == entity.id for existing in current):
        items = tuple(entity if existing.id == entity.id else existing for existing in current)
    else:
        items = current + (entity,)
    return replace(snapshot, **{collection: items})


def remove_entity(snapshot: ScenarioSnapshot, collection: str, entity_id: str) -> ScenarioSnapshot:
    """Drop the entity with `entity_id`; unknown ids leave the collection unchanged."""
    _check_collection(collection)
    items = tuple(e for e in getattr(snapshot, collection) if e.id != entity_id)
    return replace(snapshot, **{collection: items})


def update_inputs(snapshot: ScenarioSnapshot, **changes: Any) -> ScenarioSnapshot:
    """New snapshot with some global inputs changed."""
    return replace(snapshot, inputs=replace(snapshot.inputs, **changes))


def append_audit(snapshot: ScenarioSnapshot, note: str) -> ScenarioSnapshot:
    return replace(snapshot, audit_log=snapshot.audit_log + (note,))


def duplicate_scenario(
    scenarios: Mapping[str, ScenarioSnapshot],
    source: str,
    target: str,
    at: datetime,
) -> Dict[str, ScenarioSnapshot]:
    """
    Copy scenario `source` under the name `target`.

    Returns a new mapping. An unknown source returns an unchanged copy of
    the mapping. `at` stamps the audit note.
    """
    result = dict(scenarios)
    src = scenarios.get(source)
    if src is None:
        logger.warning(f"Cannot duplicate unknown scenario '{source}'")
        return result

    result[target] = replace(
        src,
        name=target,
        audit_log=src.audit_log + (f"Duplicated from {source} at {at.isoformat()}",),
    )
    logger.info(f"Duplicated scenario '{source}' -> '{target}'")
    return result
