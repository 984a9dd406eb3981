"""
Schedule conflict detection over a rolling window of calendar days.
"""

from .conflicts import (
    DEFAULT_WINDOW_DAYS,
    BookingMap,
    ConflictState,
    ConflictSummary,
    DayConflict,
    EntryAssessment,
    assess_entry,
    build_booking_map,
    day_conflict,
    detect_schedule_conflicts,
    event_has_conflict_on_day,
    span_days,
)

__all__ = [
    "DEFAULT_WINDOW_DAYS",
    "BookingMap",
    "ConflictState",
    "ConflictSummary",
    "DayConflict",
    "EntryAssessment",
    "assess_entry",
    "build_booking_map",
    "day_conflict",
    "detect_schedule_conflicts",
    "event_has_conflict_on_day",
    "span_days",
]
