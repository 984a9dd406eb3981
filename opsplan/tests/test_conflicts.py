"""
═══════════════════════════════════════════════════════════════════════════════
                    OPSPLAN — Schedule Conflict Tests
═══════════════════════════════════════════════════════════════════════════════
"""

from datetime import date

import pytest

from opsplan.scheduling.conflicts import (
    BookingMap,
    ConflictState,
    day_conflict,
    detect_schedule_conflicts,
    event_has_conflict_on_day,
    span_days,
)

TODAY = date(2024, 1, 10)


def _entry(entry_id, day, days=1, people="", machines="", status="Planned"):
    return {
        "id": entry_id, "batchId": "b1", "date": day, "durationDays": days,
        "assignedPeopleIdsCsv": people, "assignedMachineIdsCsv": machines, "status": status,
    }


def _states(summary):
    return {a.entry_id: a.state for a in summary.entries}


class TestSpanDays:

    def test_multi_day(self):
        assert span_days(date(2024, 1, 30), 3) == [
            date(2024, 1, 30), date(2024, 1, 31), date(2024, 2, 1),
        ]

    @pytest.mark.parametrize("duration", [0, -2])
    def test_short_duration_counts_as_one_day(self, duration):
        assert span_days(TODAY, duration) == [TODAY]


class TestBookingMap:

    def test_repeated_id_counts_once(self, make_snapshot):
        snapshot = make_snapshot(schedule=[_entry("e1", "2024-01-10", machines="M1, M1")])
        bookings = BookingMap.from_snapshot(snapshot)
        assert bookings.machine_count(TODAY, "M1") == 1

    def test_cancelled_entries_and_blocks_ignored(self, make_snapshot):
        snapshot = make_snapshot(
            schedule=[
                _entry("e1", "2024-01-10", machines="M1"),
                _entry("e2", "2024-01-10", machines="M1", status="Cancelled"),
            ],
            maintenanceBlocks=[
                {"id": "mb1", "date": "2024-01-10", "machineIdsCsv": "M1", "status": "Cancelled"},
            ],
        )
        bookings = BookingMap.from_snapshot(snapshot)
        assert bookings.machine_count(TODAY, "M1") == 1
        assert not bookings.machine_in_maintenance(TODAY, "M1")
        assert _states(detect_schedule_conflicts(snapshot, TODAY))["e1"] == ConflictState.READY


class TestMaintenanceClash:

    def test_clash_only_on_maintenance_day(self, make_snapshot):
        """Two-day process on M1 from 2024-01-10, maintenance on M1 2024-01-11."""
        snapshot = make_snapshot(
            schedule=[_entry("e1", "2024-01-10", days=2, machines="M1")],
            maintenanceBlocks=[{"id": "mb1", "date": "2024-01-11", "machineIdsCsv": "M1"}],
        )
        bookings = BookingMap.from_snapshot(snapshot)
        entry = snapshot.schedule[0]

        assert not event_has_conflict_on_day(bookings, entry, date(2024, 1, 10))
        assert event_has_conflict_on_day(bookings, entry, date(2024, 1, 11))
        assert not event_has_conflict_on_day(bookings, entry, date(2024, 1, 12))

        summary = detect_schedule_conflicts(snapshot, TODAY)
        assert summary.at_risk == 1
        assessment = summary.entries[0]
        assert [c.day for c in assessment.conflict_days] == [date(2024, 1, 11)]
        assert assessment.conflict_days[0].maintenance_machines == ("M1",)


class TestDoubleBooking:

    def test_shared_machine_flags_both_entries(self, make_snapshot):
        snapshot = make_snapshot(schedule=[
            _entry("e1", "2024-01-10", days=3, machines="M1"),
            _entry("e2", "2024-01-11", days=3, machines="M1, M2"),
        ])
        bookings = BookingMap.from_snapshot(snapshot)
        first, second = snapshot.schedule

        for day in (date(2024, 1, 11), date(2024, 1, 12)):
            assert event_has_conflict_on_day(bookings, first, day)
            assert event_has_conflict_on_day(bookings, second, day)
        assert not event_has_conflict_on_day(bookings, first, date(2024, 1, 10))
        assert not event_has_conflict_on_day(bookings, second, date(2024, 1, 13))

        states = _states(detect_schedule_conflicts(snapshot, TODAY))
        assert states == {"e1": ConflictState.AT_RISK, "e2": ConflictState.AT_RISK}

    def test_shared_person(self, make_snapshot):
        snapshot = make_snapshot(schedule=[
            _entry("e1", "2024-01-10", people="p1, p2"),
            _entry("e2", "2024-01-10", people="p2"),
        ])
        found = day_conflict(BookingMap.from_snapshot(snapshot), snapshot.schedule[0], TODAY)
        assert found.double_booked_people == ("p2",)
        assert found.double_booked_machines == ()

    def test_blocked_partner_still_causes_risk(self, make_snapshot):
        snapshot = make_snapshot(schedule=[
            _entry("e1", "2024-01-10", machines="M1", status="Issue"),
            _entry("e2", "2024-01-10", machines="M1"),
        ])
        states = _states(detect_schedule_conflicts(snapshot, TODAY))
        assert states == {"e1": ConflictState.BLOCKED, "e2": ConflictState.AT_RISK}

    def test_day_outside_span_never_conflicts(self, make_snapshot):
        snapshot = make_snapshot(schedule=[
            _entry("e1", "2024-01-10", machines="M1"),
            _entry("e2", "2024-01-10", machines="M1"),
        ])
        bookings = BookingMap.from_snapshot(snapshot)
        assert not event_has_conflict_on_day(bookings, snapshot.schedule[0], date(2024, 1, 9))


class TestWindowSummary:

    def test_window_bounds(self, make_snapshot):
        snapshot = make_snapshot(schedule=[
            _entry("before", "2024-01-09"),
            _entry("first", "2024-01-10"),
            _entry("last", "2024-01-16"),
            _entry("after", "2024-01-17"),
        ])
        summary = detect_schedule_conflicts(snapshot, TODAY)
        assert set(_states(summary)) == {"first", "last"}
        assert summary.ready == 2
        assert summary.window_end == date(2024, 1, 17)

    @pytest.mark.parametrize("status", ["Issue", "Quarantine", "Cancelled"])
    def test_blocking_statuses(self, make_snapshot, status):
        snapshot = make_snapshot(schedule=[_entry("e1", "2024-01-10", status=status)])
        summary = detect_schedule_conflicts(snapshot, TODAY)
        assert summary.blocked == 1
        assert summary.ready == summary.at_risk == 0

    def test_entry_started_before_window_still_books(self, make_snapshot):
        snapshot = make_snapshot(schedule=[
            _entry("early", "2024-01-08", days=5, machines="M1"),
            _entry("e1", "2024-01-11", machines="M1"),
        ])
        summary = detect_schedule_conflicts(snapshot, TODAY)
        assert _states(summary) == {"e1": ConflictState.AT_RISK}

    def test_custom_window(self, make_snapshot):
        snapshot = make_snapshot(schedule=[_entry("e1", "2024-01-20")])
        assert detect_schedule_conflicts(snapshot, TODAY, 7).ready == 0
        assert detect_schedule_conflicts(snapshot, TODAY, 14).ready == 1

    def test_empty_schedule(self, make_snapshot):
        summary = detect_schedule_conflicts(make_snapshot(), TODAY)
        assert (summary.ready, summary.at_risk, summary.blocked) == (0, 0, 0)
        assert summary.to_dict()["entries"] == []
