"""
═══════════════════════════════════════════════════════════════════════════════════════════════════════
                    SCHEDULE CONFLICT DETECTOR — Day-Indexed Resource Bookings
═══════════════════════════════════════════════════════════════════════════════════════════════════════

Flags double-booked people/machines and maintenance clashes for scheduled
processes starting inside a rolling window.

Booking map:
─────────────────────────────────────────────────────────────────────────────────────────────────────
    For every non-Cancelled scheduled process, each day d in
    [date, date + duration) gets +1 for every assigned person id and every
    assigned machine id (an id listed twice on one process counts once).
    For every non-Cancelled maintenance block, each machine id is marked
    blocked on every day the block spans. Durations below 1 count as 1 day.

Classification (processes whose start date is in [today, today + window)):
─────────────────────────────────────────────────────────────────────────────────────────────────────
    Blocked  status ∈ {Issue, Quarantine, Cancelled}
    At risk  not blocked, and on some day of its span:
               people[d][p] > 1  or  machines[d][m] > 1  or  m ∈ maintenance[d]
    Ready    otherwise

`event_has_conflict_on_day` is the per-day predicate; the window summary is
built from it, so calendar highlighting and counts always agree.

`today` is always supplied by the caller.
═══════════════════════════════════════════════════════════════════════════════════════════════════════
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Any, Dict, List, Set, Tuple

from opsplan.core.numeric import split_csv_ids
from opsplan.scenario.models import (
    BatchStatus,
    MaintenanceStatus,
    ScenarioSnapshot,
    ScheduledProcess,
)

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 7

BLOCKING_STATUSES = frozenset({BatchStatus.ISSUE, BatchStatus.QUARANTINE, BatchStatus.CANCELLED})


class ConflictState(str, Enum):
    READY = "ready"
    AT_RISK = "at_risk"
    BLOCKED = "blocked"


def span_days(start: date, duration_days: int) -> List[date]:
    """Calendar days covered by [start, start + duration), at least one day."""
    return [start + timedelta(days=i) for i in range(max(1, int(duration_days)))]


# ═══════════════════════════════════════════════════════════════════════════════
# BOOKING MAP
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class BookingMap:
    """Per-day tallies of people and machines, and maintenance-blocked machines."""
    people: Dict[date, Counter] = field(default_factory=dict)
    machines: Dict[date, Counter] = field(default_factory=dict)
    maintenance: Dict[date, Set[str]] = field(default_factory=dict)

    @classmethod
    def from_snapshot(cls, snapshot: ScenarioSnapshot) -> "BookingMap":
        bookings = cls()
        for entry in snapshot.schedule:
            if entry.status == BatchStatus.CANCELLED:
                continue
            people = set(split_csv_ids(entry.assigned_people_ids_csv))
            machines = set(split_csv_ids(entry.assigned_machine_ids_csv))
            for day in span_days(entry.date, entry.duration_days):
                bookings.people.setdefault(day, Counter()).update(people)
                bookings.machines.setdefault(day, Counter()).update(machines)

        for block in snapshot.maintenance_blocks:
            if block.status == MaintenanceStatus.CANCELLED:
                continue
            machines = split_csv_ids(block.machine_ids_csv)
            for day in span_days(block.date, block.duration_days):
                bookings.maintenance.setdefault(day, set()).update(machines)
        return bookings

    def person_count(self, day: date, person_id: str) -> int:
        return self.people.get(day, Counter())[person_id]

    def machine_count(self, day: date, machine_id: str) -> int:
        return self.machines.get(day, Counter())[machine_id]

    def machine_in_maintenance(self, day: date, machine_id: str) -> bool:
        return machine_id in self.maintenance.get(day, set())


def build_booking_map(snapshot: ScenarioSnapshot) -> BookingMap:
    return BookingMap.from_snapshot(snapshot)


# ═══════════════════════════════════════════════════════════════════════════════
# PER-DAY PREDICATE
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DayConflict:
    """What clashes for one scheduled process on one day."""
    day: date
    double_booked_people: Tuple[str, ...] = ()
    double_booked_machines: Tuple[str, ...] = ()
    maintenance_machines: Tuple[str, ...] = ()

    @property
    def has_conflict(self) -> bool:
        return bool(self.double_booked_people or self.double_booked_machines or self.maintenance_machines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day": self.day.isoformat(),
            "double_booked_people": list(self.double_booked_people),
            "double_booked_machines": list(self.double_booked_machines),
            "maintenance_machines": list(self.maintenance_machines),
        }


def day_conflict(bookings: BookingMap, entry: ScheduledProcess, day: date) -> DayConflict:
    """Clashes of `entry` on `day`; empty when the day is outside its span."""
    if day not in span_days(entry.date, entry.duration_days):
        return DayConflict(day=day)

    people = sorted(set(split_csv_ids(entry.assigned_people_ids_csv)))
    machines = sorted(set(split_csv_ids(entry.assigned_machine_ids_csv)))
    return DayConflict(
        day=day,
        double_booked_people=tuple(p for p in people if bookings.person_count(day, p) > 1),
        double_booked_machines=tuple(m for m in machines if bookings.machine_count(day, m) > 1),
        maintenance_machines=tuple(m for m in machines if bookings.machine_in_maintenance(day, m)),
    )


def event_has_conflict_on_day(bookings: BookingMap, entry: ScheduledProcess, day: date) -> bool:
    """True when an assigned person/machine is double-booked or a machine is in maintenance that day."""
    return day_conflict(bookings, entry, day).has_conflict


# ═══════════════════════════════════════════════════════════════════════════════
# WINDOW SUMMARY
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class EntryAssessment:
    entry_id: str
    batch_id: str
    start: date
    duration_days: int
    status: BatchStatus
    state: ConflictState
    conflict_days: Tuple[DayConflict, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entry_id": self.entry_id,
            "batch_id": self.batch_id,
            "start": self.start.isoformat(),
            "duration_days": self.duration_days,
            "status": self.status.value,
            "state": self.state.value,
            "conflict_days": [d.to_dict() for d in self.conflict_days],
        }


@dataclass(frozen=True)
class ConflictSummary:
    window_start: date
    window_end: date  # exclusive
    ready: int = 0
    at_risk: int = 0
    blocked: int = 0
    entries: Tuple[EntryAssessment, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "window_start": self.window_start.isoformat(),
            "window_end": self.window_end.isoformat(),
            "ready": self.ready,
            "at_risk": self.at_risk,
            "blocked": self.blocked,
            "entries": [e.to_dict() for e in self.entries],
        }


def assess_entry(bookings: BookingMap, entry: ScheduledProcess) -> EntryAssessment:
    """Blocked / at risk / ready for one scheduled process."""
    clash_days = [
        day for day in span_days(entry.date, entry.duration_days)
        if event_has_conflict_on_day(bookings, entry, day)
    ]
    conflicts = tuple(day_conflict(bookings, entry, day) for day in clash_days)
    if entry.status in BLOCKING_STATUSES:
        state = ConflictState.BLOCKED
    elif conflicts:
        state = ConflictState.AT_RISK
    else:
        state = ConflictState.READY

    return EntryAssessment(
        entry_id=entry.id,
        batch_id=entry.batch_id,
        start=entry.date,
        duration_days=entry.duration_days,
        status=entry.status,
        state=state,
        conflict_days=conflicts,
    )


def detect_schedule_conflicts(
    snapshot: ScenarioSnapshot,
    today: date,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> ConflictSummary:
    """Classify every scheduled process starting in [today, today + window_days)."""
    window_end = today + timedelta(days=max(0, int(window_days)))
    bookings = BookingMap.from_snapshot(snapshot)

    assessed = tuple(
        assess_entry(bookings, entry)
        for entry in snapshot.schedule
        if today <= entry.date < window_end
    )
    counts = Counter(a.state for a in assessed)

    summary = ConflictSummary(
        window_start=today,
        window_end=window_end,
        ready=counts[ConflictState.READY],
        at_risk=counts[ConflictState.AT_RISK],
        blocked=counts[ConflictState.BLOCKED],
        entries=assessed,
    )
    logger.debug(
        f"Conflicts '{snapshot.name}' {today.isoformat()}..{window_end.isoformat()}: "
        f"ready={summary.ready}, at_risk={summary.at_risk}, blocked={summary.blocked}"
    )
    return summary
