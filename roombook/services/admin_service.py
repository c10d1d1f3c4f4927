"""
Operations behind the admin dashboard.

Each function returns an OperationResult and logs instead of raising.
"""
import asyncio
import math
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from roombook.core.logging_config import get_logger
from roombook.db.session import SessionLocal
from roombook.models.booking import Booking
from roombook.models.building import Building
from roombook.models.enums import LIVE_BOOKING_STATUSES, BookingStatus
from roombook.schemas.booking import BookingOut, OperationResult, StatusUpdateError, StatusUpdateResult
from roombook.schemas.building import BuildingOut
from roombook.services.booking_service import cancel_booking, lock_room
from roombook.services.conflicts import find_first_conflict

logger = get_logger()
admin_log = logger.bind(log_type="admin")

HEALTH_CHECK_TIMEOUT_SECONDS = 10
ACTIVE_STATUSES = (
    BookingStatus.CONFIRMED.value,
    BookingStatus.ACTIVE.value,
    BookingStatus.PENDING.value,
)


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# =====================================================================
# HEALTH CHECK
# =====================================================================
def _count_bookings(session_factory: Callable[[], Session]) -> int:
    db = session_factory()
    try:
        return db.query(func.count(Booking.id)).scalar()
    finally:
        db.close()


async def check_connection(session_factory: Callable[[], Session] = SessionLocal,
                           timeout: float = HEALTH_CHECK_TIMEOUT_SECONDS) -> OperationResult:
    """Round-trip to the database, abandoned after ``timeout`` seconds."""
    try:
        count = await asyncio.wait_for(
            run_in_threadpool(_count_bookings, session_factory), timeout
        )
    except asyncio.TimeoutError:
        logger.error(f"Database health check timed out after {timeout}s")
        return OperationResult(success=False, error=f"Connection timed out after {timeout} seconds")
    except Exception as e:
        logger.error(f"Database health check failed -> {e}")
        return OperationResult(success=False, error=str(e))

    return OperationResult(
        success=True,
        data={"message": "Successfully connected to database", "count": count},
    )


# =====================================================================
# BOOKING STATS
# =====================================================================
def get_booking_stats(db: Session, now: Optional[datetime] = None) -> OperationResult:
    now = now or datetime.now(timezone.utc)
    seven_days_ago = now - timedelta(days=7)
    thirty_days_ago = now - timedelta(days=30)

    try:
        rows = db.query(Booking.status, Booking.created_at).all()
    except Exception as e:
        logger.error(f"Error fetching booking stats -> {e}")
        return OperationResult(success=False, error="Failed to fetch booking statistics")

    created = [_utc(r.created_at) for r in rows]
    status_breakdown = Counter(r.status for r in rows)

    return OperationResult(success=True, data={
        "total_bookings": len(rows),
        "recent_bookings": sum(1 for c in created if c >= seven_days_ago),
        "monthly_bookings": sum(1 for c in created if c >= thirty_days_ago),
        "active_bookings": sum(status_breakdown[s] for s in ACTIVE_STATUSES),
        "status_breakdown": dict(status_breakdown),
    })


# =====================================================================
# BOOKINGS LIST (PAGINATED + FILTERED)
# =====================================================================
def get_bookings(db: Session, page: int = 1, limit: int = 10, status: Optional[str] = None,
                 building: Optional[str] = None, date_from=None, date_to=None,
                 user_email: Optional[str] = None) -> OperationResult:
    query = db.query(Booking)

    if status:
        query = query.filter(Booking.status == status)
    if building:
        query = query.filter(Booking.building_short_name == building)
    if date_from:
        query = query.filter(Booking.booking_date >= date_from)
    if date_to:
        query = query.filter(Booking.booking_date <= date_to)
    if user_email:
        query = query.filter(Booking.user_email.ilike(f"%{user_email}%"))

    try:
        total = query.count()
        bookings = (
            query.order_by(Booking.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
    except Exception as e:
        logger.error(f"Error fetching bookings -> {e}")
        return OperationResult(success=False, error="Failed to fetch bookings")

    return OperationResult(success=True, data={
        "bookings": [BookingOut.model_validate(b).model_dump(mode="json") for b in bookings],
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if limit else 0,
    })


# =====================================================================
# BUILDING STATS
# =====================================================================
def get_building_stats(db: Session, now: Optional[datetime] = None) -> OperationResult:
    now = now or datetime.now(timezone.utc)
    seven_days_ago = now - timedelta(days=7)

    try:
        buildings = db.query(Building).all()
        rows = db.query(
            Booking.building_short_name,
            Booking.building_name,
            Booking.room_name,
            Booking.created_at,
        ).all()
        building_data = [BuildingOut.model_validate(b).model_dump(mode="json") for b in buildings]
    except Exception as e:
        logger.error(f"Error fetching building stats -> {e}")
        return OperationResult(success=False, error="Failed to fetch building statistics")

    usage = {}
    for row in rows:
        code = row.building_short_name or "Unknown"
        entry = usage.setdefault(code, {
            "code": code,
            "name": row.building_name or code,
            "count": 0,
            "recent_count": 0,
            "rooms": set(),
        })
        entry["count"] += 1
        entry["rooms"].add(row.room_name)
        if _utc(row.created_at) >= seven_days_ago:
            entry["recent_count"] += 1

    building_usage = []
    for entry in usage.values():
        rooms = entry.pop("rooms")
        entry["unique_rooms"] = len(rooms)
        building_usage.append(entry)

    return OperationResult(success=True, data={
        "buildings": building_data,
        "building_usage": building_usage,
        "total_bookings": len(rows),
    })


# =====================================================================
# USER STATS
# =====================================================================
def get_user_stats(db: Session, now: Optional[datetime] = None) -> OperationResult:
    """Users are identified by booking email; there is no separate user table."""
    now = now or datetime.now(timezone.utc)
    seven_days_ago = now - timedelta(days=7)

    try:
        rows = db.query(Booking.user_email, Booking.created_at).all()
    except Exception as e:
        logger.error(f"Error fetching user stats -> {e}")
        return OperationResult(success=False, error="Failed to fetch user statistics")

    return OperationResult(success=True, data={
        "total_users": len({r.user_email for r in rows}),
        "active_users_this_week": len({
            r.user_email for r in rows if _utc(r.created_at) >= seven_days_ago
        }),
        "total_bookings": len(rows),
    })


# =====================================================================
# STATUS UPDATE
# =====================================================================
def _status_failure(reason: StatusUpdateError, error: str) -> StatusUpdateResult:
    return StatusUpdateResult(success=False, reason=reason, error=error)


def update_booking_status(db: Session, booking_id: int, status: BookingStatus,
                          reason: Optional[str] = None) -> StatusUpdateResult:
    """Move a booking to ``status``.

    Moving into a live status re-checks the slot under the room lock.
    """
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        return _status_failure(StatusUpdateError.NOT_FOUND, "Booking not found")

    if status == BookingStatus.CANCELLED:
        if booking.status == BookingStatus.CANCELLED.value:
            return _status_failure(StatusUpdateError.ALREADY_CANCELLED, "Booking is already cancelled")
        cancelled = cancel_booking(db, booking, reason)
        if not cancelled.success:
            return _status_failure(StatusUpdateError.DATABASE_ERROR, cancelled.error)
    else:
        try:
            if status.value in LIVE_BOOKING_STATUSES:
                lock_room(db, booking.room_id)
                clash = find_first_conflict(
                    db, booking.room_id, booking.booking_date, booking.start_time, booking.end_time,
                    exclude_booking_id=booking.id,
                )
                if clash:
                    db.rollback()
                    return _status_failure(
                        StatusUpdateError.SLOT_TAKEN,
                        f"Slot is held by booking {clash.booking_reference}",
                    )

            booking.status = status.value
            booking.updated_at = datetime.now(timezone.utc)
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Error updating booking status | Id={booking_id} -> {e}")
            return _status_failure(StatusUpdateError.DATABASE_ERROR, "Failed to update booking status")

    admin_log.info(f"Booking status changed | Id={booking_id} | Status={status.value}")
    db.refresh(booking)
    return StatusUpdateResult(
        success=True,
        data=BookingOut.model_validate(booking).model_dump(mode="json"),
    )


# =====================================================================
# DASHBOARD OVERVIEW
# =====================================================================
def _in_own_session(session_factory, fn):
    db = session_factory()
    try:
        return fn(db)
    finally:
        db.close()


async def get_dashboard_overview(session_factory: Callable[[], Session] = SessionLocal) -> OperationResult:
    bookings, users, buildings, system = await asyncio.gather(
        run_in_threadpool(_in_own_session, session_factory, get_booking_stats),
        run_in_threadpool(_in_own_session, session_factory, get_user_stats),
        run_in_threadpool(_in_own_session, session_factory, get_building_stats),
        check_connection(session_factory),
        return_exceptions=True,
    )

    def section(result):
        if isinstance(result, OperationResult) and result.success:
            return result.data
        return {}

    return OperationResult(success=True, data={
        "bookings": section(bookings),
        "users": section(users),
        "buildings": section(buildings),
        "system": section(system),
    })
