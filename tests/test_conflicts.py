import asyncio
from datetime import date, time

import pytest

from roombook.core.config import get_settings
from roombook.db.session import SessionLocal
from roombook.models.enums import RoomStatus
from roombook.schemas.booking import TimeSelection
from roombook.services import conflicts
from roombook.services.conflicts import (
    check_multiple_room_conflicts,
    check_room_conflicts,
    format_conflict_message,
    intervals_overlap,
)

D = "2025-06-01"


def selection(start, end, day=D):
    return TimeSelection(
        start_time=time.fromisoformat(start),
        end_time=time.fromisoformat(end),
        date=date.fromisoformat(day),
    )


def test_intervals_overlap_half_open():
    assert intervals_overlap(time(10, 30), time(11, 30), time(10), time(11))
    assert intervals_overlap(time(9), time(12), time(10), time(11))
    assert not intervals_overlap(time(11), time(12), time(10), time(11))
    assert not intervals_overlap(time(9), time(10), time(10), time(11))


def test_intervals_overlap_inclusive_flags_touching_bookings():
    assert intervals_overlap(time(11), time(12), time(10), time(11), inclusive=True)
    assert not intervals_overlap(time(11, 1), time(12), time(10), time(11), inclusive=True)


def test_overlapping_interval_reports_the_conflicting_booking(db, rooms, make_booking):
    existing = make_booking(1, D, "10:00", "11:00", reference="ABCD1234")

    status = check_room_conflicts(db, 1, selection("10:30", "11:30"))

    assert status.status == RoomStatus.CONFLICT
    assert status.available is False
    assert status.message == "Booked from 10:00 - 11:00"
    details = status.conflict_details
    assert details.conflicting_booking.booking_reference == existing.booking_reference
    assert details.conflicting_booking.start_time == "10:00"
    assert details.conflicting_booking.end_time == "11:00"
    assert format_conflict_message(details) == "This room has been booked from 10:00 - 11:00"


def test_touching_interval_is_available(db, rooms, make_booking):
    make_booking(1, D, "10:00", "11:00")

    status = check_room_conflicts(db, 1, selection("11:00", "12:00"))

    assert status.status == RoomStatus.AVAILABLE
    assert status.available is True


def test_touching_interval_conflicts_with_legacy_boundaries(db, rooms, make_booking, monkeypatch):
    make_booking(1, D, "10:00", "11:00")
    monkeypatch.setenv("CONFLICT_INCLUSIVE_BOUNDARIES", "true")
    get_settings.cache_clear()

    status = check_room_conflicts(db, 1, selection("11:00", "12:00"))

    assert status.status == RoomStatus.CONFLICT


@pytest.mark.parametrize("lifecycle", ["pending", "confirmed", "active"])
def test_unverified_bookings_never_conflict(db, rooms, make_booking, lifecycle):
    make_booking(1, D, "10:00", "11:00", status=lifecycle, verification_status="pending")

    assert check_room_conflicts(db, 1, selection("10:00", "11:00")).available is True


def test_cancelled_and_completed_bookings_do_not_conflict(db, rooms, make_booking):
    make_booking(1, D, "10:00", "11:00", status="cancelled")
    make_booking(1, D, "10:00", "11:00", status="completed")

    assert check_room_conflicts(db, 1, selection("10:00", "11:00")).available is True


def test_other_rooms_and_dates_are_ignored(db, rooms, make_booking):
    make_booking(2, D, "10:00", "11:00")
    make_booking(1, "2025-06-02", "10:00", "11:00")

    assert check_room_conflicts(db, 1, selection("10:00", "11:00")).available is True


def test_earliest_overlap_is_reported(db, rooms, make_booking):
    make_booking(1, D, "11:00", "12:00", reference="LATER001")
    make_booking(1, D, "09:00", "10:30", reference="EARLY001")

    status = check_room_conflicts(db, 1, selection("10:00", "11:30"))

    assert status.conflict_details.conflicting_booking.booking_reference == "EARLY001"


def test_closed_and_maintenance_rooms(db, rooms):
    rooms[0].available = False
    rooms[1].under_maintenance = True
    db.commit()

    closed = check_room_conflicts(db, 1, selection("10:00", "11:00"))
    maintenance = check_room_conflicts(db, 2, selection("10:00", "11:00"))

    assert closed.status == RoomStatus.CLOSED
    assert closed.message == "Room is currently closed"
    assert maintenance.status == RoomStatus.MAINTENANCE
    assert maintenance.message == "Room is under maintenance"


def test_query_failure_fails_open(db, rooms, make_booking, monkeypatch):
    make_booking(1, D, "10:00", "11:00")

    def broken(*args, **kwargs):
        raise RuntimeError("connection reset")

    monkeypatch.setattr(conflicts, "find_first_conflict", broken)

    status = check_room_conflicts(db, 1, selection("10:00", "11:00"))

    assert status.status == RoomStatus.AVAILABLE


def test_batch_check_isolates_a_failing_room(rooms, make_booking, monkeypatch):
    make_booking(1, D, "10:00", "11:00", reference="ROOM1BKD")
    make_booking(2, D, "10:00", "11:00", reference="ROOM2BKD")

    real = conflicts.find_first_conflict

    def flaky(db, room_id, *args, **kwargs):
        if room_id == 2:
            raise RuntimeError("timeout talking to database")
        return real(db, room_id, *args, **kwargs)

    monkeypatch.setattr(conflicts, "find_first_conflict", flaky)

    results = asyncio.run(
        check_multiple_room_conflicts([1, 2, 3], selection("10:30", "11:30"), SessionLocal)
    )

    assert [r.room_id for r in results] == [1, 2, 3]
    assert results[0].status == RoomStatus.CONFLICT
    assert results[0].conflict_details.conflicting_booking.booking_reference == "ROOM1BKD"
    assert results[1].status == RoomStatus.AVAILABLE
    assert results[2].status == RoomStatus.AVAILABLE


def test_batch_check_survives_a_session_that_cannot_open(rooms):
    def no_sessions():
        raise RuntimeError("pool exhausted")

    results = asyncio.run(
        check_multiple_room_conflicts([1, 2], selection("10:00", "11:00"), no_sessions)
    )

    assert [r.status for r in results] == [RoomStatus.AVAILABLE, RoomStatus.AVAILABLE]


def test_rooms_in_a_closed_building_are_closed(db, building, rooms):
    building.available = False
    db.commit()

    status = check_room_conflicts(db, 1, selection("10:00", "11:00"))

    assert status.available is False
    assert status.status == RoomStatus.CLOSED
    assert status.message == "Building is currently closed"
