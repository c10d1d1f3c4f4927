"""
Room conflict checks.

The check only looks at bookings that are verified and live (confirmed or
active) for the same room and date. Read failures fail OPEN: the room is
reported as available. Double booking is prevented at write time, where
submission and verification re-run ``find_first_conflict`` while holding
a lock on the room row.
"""
import asyncio
from datetime import date, time
from typing import Callable, List, Optional

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from roombook.core.config import get_settings
from roombook.core.logging_config import get_logger
from roombook.db.session import SessionLocal
from roombook.models.booking import Booking
from roombook.models.enums import LIVE_BOOKING_STATUSES, RoomStatus, VerificationStatus
from roombook.models.room import Room
from roombook.schemas.booking import (
    BookingConflict,
    ConflictingBooking,
    RoomAvailabilityStatus,
    TimeSelection,
)
from roombook.utils.time_validation import format_hhmm, get_current_eastern_time

logger = get_logger()

STATUS_MESSAGES = {
    RoomStatus.CLOSED: "Room is currently closed",
    RoomStatus.MAINTENANCE: "Room is under maintenance",
}
BUILDING_CLOSED_MESSAGE = "Building is currently closed"


def intervals_overlap(s1: time, e1: time, s2: time, e2: time, inclusive: bool = False) -> bool:
    """Half-open overlap test for [s1, e1) and [s2, e2).

    ``inclusive=True`` is the legacy closed test, under which a booking
    ending at 10:00 clashes with one starting at 10:00.
    """
    if inclusive:
        return s1 <= e2 and s2 <= e1
    return s1 < e2 and s2 < e1


def find_first_conflict(
    db: Session,
    room_id: int,
    booking_date: date,
    start_time: time,
    end_time: time,
    inclusive: Optional[bool] = None,
    exclude_booking_id: Optional[int] = None,
) -> Optional[Booking]:
    """Earliest verified, live booking overlapping the interval, if any."""
    if inclusive is None:
        inclusive = get_settings().CONFLICT_INCLUSIVE_BOUNDARIES

    query = db.query(Booking).filter(
        Booking.room_id == room_id,
        Booking.booking_date == booking_date,
        Booking.verification_status == VerificationStatus.VERIFIED.value,
        Booking.status.in_(LIVE_BOOKING_STATUSES),
    )
    if exclude_booking_id is not None:
        query = query.filter(Booking.id != exclude_booking_id)

    for booking in query.order_by(Booking.start_time).all():
        if intervals_overlap(start_time, end_time, booking.start_time, booking.end_time, inclusive):
            return booking
    return None


def _booked_message(start: str, end: str) -> str:
    return f"This room has been booked from {start} - {end}"


def format_conflict_message(conflict: BookingConflict) -> str:
    booking = conflict.conflicting_booking
    return _booked_message(booking.start_time, booking.end_time)


def available_status(room_id: int) -> RoomAvailabilityStatus:
    return RoomAvailabilityStatus(room_id=room_id, available=True, status=RoomStatus.AVAILABLE)


def _unavailable_status(room_id: int, status: RoomStatus,
                        message: Optional[str] = None) -> RoomAvailabilityStatus:
    return RoomAvailabilityStatus(
        room_id=room_id,
        available=False,
        status=status,
        message=message or STATUS_MESSAGES[status],
    )


def _conflict_status(room_id: int, booking: Booking) -> RoomAvailabilityStatus:
    start, end = format_hhmm(booking.start_time), format_hhmm(booking.end_time)
    conflicting = ConflictingBooking(
        start_time=start,
        end_time=end,
        booking_reference=booking.booking_reference,
    )
    conflict = BookingConflict(
        room_id=room_id,
        conflicting_booking=conflicting,
        conflict_message=_booked_message(start, end),
    )

    return RoomAvailabilityStatus(
        room_id=room_id,
        available=False,
        status=RoomStatus.CONFLICT,
        message=f"Booked from {start} - {end}",
        conflict_details=conflict,
    )


def check_room_conflicts(db: Session, room_id: int, selection: TimeSelection,
                         inclusive: Optional[bool] = None) -> RoomAvailabilityStatus:
    """Availability of one room for the selected interval. Never raises."""
    booking_date = selection.date or get_current_eastern_time(
        tz_name=get_settings().BOOKING_TIMEZONE
    ).date()

    try:
        room = db.query(Room).filter(Room.id == room_id).first()
        if room is not None:
            if not room.available:
                return _unavailable_status(room_id, RoomStatus.CLOSED)
            if room.under_maintenance:
                return _unavailable_status(room_id, RoomStatus.MAINTENANCE)
            if not room.building.available:
                return _unavailable_status(room_id, RoomStatus.CLOSED, BUILDING_CLOSED_MESSAGE)

        booking = find_first_conflict(
            db, room_id, booking_date, selection.start_time, selection.end_time, inclusive
        )
    except Exception as e:
        logger.error(f"Conflict check failed for room {room_id}, treating as available -> {e}")
        return available_status(room_id)

    if booking is None:
        return available_status(room_id)
    return _conflict_status(room_id, booking)


def _check_in_own_session(session_factory: Callable[[], Session], room_id: int,
                          selection: TimeSelection, inclusive: Optional[bool]) -> RoomAvailabilityStatus:
    db = session_factory()
    try:
        return check_room_conflicts(db, room_id, selection, inclusive)
    finally:
        db.close()


async def check_multiple_room_conflicts(
    room_ids: List[int],
    selection: TimeSelection,
    session_factory: Callable[[], Session] = SessionLocal,
    inclusive: Optional[bool] = None,
) -> List[RoomAvailabilityStatus]:
    """Check several rooms concurrently, one session per room.

    Results come back in ``room_ids`` order. A failure for one room only
    degrades that room to available.
    """
    checks = [
        run_in_threadpool(_check_in_own_session, session_factory, room_id, selection, inclusive)
        for room_id in room_ids
    ]
    results = await asyncio.gather(*checks, return_exceptions=True)

    statuses = []
    for room_id, result in zip(room_ids, results):
        if isinstance(result, BaseException):
            logger.error(f"Conflict check crashed for room {room_id}, treating as available -> {result}")
            statuses.append(available_status(room_id))
        else:
            statuses.append(result)
    return statuses
