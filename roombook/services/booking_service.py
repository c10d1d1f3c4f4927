"""
Booking submission and email verification.

A booking moves form -> pending (pending/pending row + verification email)
-> confirmed (confirmed/verified row + confirmation email). Public
functions catch their own errors and return a result object.
"""
import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from roombook.core.config import get_settings
from roombook.core.logging_config import get_logger
from roombook.models.booking import Booking
from roombook.models.enums import BookingStatus, VerificationStatus
from roombook.models.room import Room
from roombook.schemas.booking import (
    BookingCreate,
    OperationResult,
    SubmissionError,
    SubmissionResult,
    VerificationError,
    VerificationResult,
)
from roombook.services.conflicts import find_first_conflict
from roombook.services.email_service import EmailDispatcher
from roombook.utils.time_validation import format_hhmm, get_past_time_error_message, is_past_time

logger = get_logger()
booking_log = logger.bind(log_type="booking")

REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
REFERENCE_LENGTH = 8

VERIFICATION_MESSAGES = {
    VerificationError.NOT_FOUND: "Booking not found",
    VerificationError.ALREADY_VERIFIED: "Booking has already been verified",
    VerificationError.CANCELLED: "Booking has been cancelled",
    VerificationError.INVALID_CODE: "Invalid verification code",
    VerificationError.EXPIRED: "Verification code has expired",
    VerificationError.SLOT_TAKEN: "This time slot was confirmed by another booking",
    VerificationError.DATABASE_ERROR: "Failed to confirm booking",
}


# ---------------------------------------------------------------------
# CODES
# ---------------------------------------------------------------------
def generate_booking_reference() -> str:
    return "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(REFERENCE_LENGTH))


def generate_verification_code() -> str:
    return str(100000 + secrets.randbelow(900000))


def _utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def lock_room(db: Session, room_id: int) -> Optional[Room]:
    # Serialises check-then-write per room (no-op on SQLite, which locks the file)
    return db.query(Room).filter(Room.id == room_id).with_for_update().first()


# ---------------------------------------------------------------------
# SUBMIT
# ---------------------------------------------------------------------
def _submission_failure(reason: SubmissionError, error: str) -> SubmissionResult:
    return SubmissionResult(success=False, reason=reason, error=error)


def submit_booking_request(db: Session, data: BookingCreate, mailer: EmailDispatcher,
                           now: Optional[datetime] = None) -> SubmissionResult:
    settings = get_settings()
    now = now or datetime.now(timezone.utc)

    date_str = data.booking_date.isoformat()
    start_str = format_hhmm(data.start_time)

    if is_past_time(date_str, start_str, now=now, tz_name=settings.BOOKING_TIMEZONE):
        return _submission_failure(
            SubmissionError.PAST_TIME,
            get_past_time_error_message(date_str, start_str, now=now, tz_name=settings.BOOKING_TIMEZONE),
        )

    reference = generate_booking_reference()
    verification_code = generate_verification_code()

    try:
        room = lock_room(db, data.room_id)
        if not room:
            db.rollback()
            return _submission_failure(SubmissionError.ROOM_NOT_FOUND, "Room not found")

        building = room.building
        if not room.available or room.under_maintenance or not building.available:
            db.rollback()
            return _submission_failure(
                SubmissionError.ROOM_UNAVAILABLE, "Room is not available for booking"
            )

        clash = find_first_conflict(
            db, room.id, data.booking_date, data.start_time, data.end_time,
            inclusive=settings.CONFLICT_INCLUSIVE_BOUNDARIES,
        )
        if clash:
            db.rollback()
            return _submission_failure(
                SubmissionError.CONFLICT,
                f"This room has been booked from {format_hhmm(clash.start_time)} - "
                f"{format_hhmm(clash.end_time)}",
            )

        booking = Booking(
            booking_reference=reference,
            verification_code=verification_code,
            room_id=room.id,
            building_id=building.id,
            room_name=room.name,
            room_eid=room.eid,
            room_capacity=room.capacity,
            building_name=building.name,
            building_short_name=building.short_name,
            user_name=data.user_name,
            user_email=data.user_email,
            contact_phone=data.user_phone,
            group_size=data.group_size,
            purpose=data.purpose,
            notes=data.notes,
            booking_date=data.booking_date,
            start_time=data.start_time,
            end_time=data.end_time,
            duration_minutes=data.duration_minutes,
            status=BookingStatus.PENDING.value,
            verification_status=VerificationStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

        db.add(booking)
        db.commit()
        db.refresh(booking)

    except Exception as e:
        db.rollback()
        logger.error(f"Booking submission failed | Room={data.room_id} -> {e}")
        return _submission_failure(SubmissionError.DATABASE_ERROR, "Failed to submit booking request")

    booking_log.info(
        f"Booking Requested | Id={booking.id} | Ref={reference} | Room={booking.room_id} | "
        f"{date_str} {start_str}-{format_hhmm(data.end_time)} | User={data.user_email}"
    )

    # A failed email leaves the pending row in place
    email_sent = mailer.send_verification_email(
        user_email=data.user_email,
        user_name=data.user_name,
        verification_code=verification_code,
        booking_reference=reference,
    )

    return SubmissionResult(
        success=True,
        booking_id=booking.id,
        booking_reference=reference,
        email_sent=email_sent,
    )


# ---------------------------------------------------------------------
# VERIFY
# ---------------------------------------------------------------------
def _verification_failure(reason: VerificationError) -> VerificationResult:
    return VerificationResult(success=False, reason=reason, error=VERIFICATION_MESSAGES[reason])


def verify_booking_code(db: Session, booking_id: int, verification_code: str,
                        mailer: EmailDispatcher, now: Optional[datetime] = None) -> VerificationResult:
    """Confirm a pending booking with its emailed code.

    Checks run in order and the first failure wins: not found, already
    verified, cancelled, wrong code, expired. A failure never mutates the row.
    """
    settings = get_settings()
    now = now or datetime.now(timezone.utc)
    ttl = timedelta(minutes=settings.VERIFICATION_CODE_TTL_MINUTES)

    try:
        booking = db.query(Booking).filter(Booking.id == booking_id).first()

        if not booking:
            return _verification_failure(VerificationError.NOT_FOUND)

        if booking.verification_status == VerificationStatus.VERIFIED.value:
            return _verification_failure(VerificationError.ALREADY_VERIFIED)

        if booking.status == BookingStatus.CANCELLED.value:
            return _verification_failure(VerificationError.CANCELLED)

        if booking.verification_code != verification_code:
            return _verification_failure(VerificationError.INVALID_CODE)

        if now - _utc(booking.created_at) > ttl:
            return _verification_failure(VerificationError.EXPIRED)

        lock_room(db, booking.room_id)
        clash = find_first_conflict(
            db, booking.room_id, booking.booking_date, booking.start_time, booking.end_time,
            inclusive=settings.CONFLICT_INCLUSIVE_BOUNDARIES,
            exclude_booking_id=booking.id,
        )
        if clash:
            db.rollback()
            return _verification_failure(VerificationError.SLOT_TAKEN)

        booking.status = BookingStatus.CONFIRMED.value
        booking.verification_status = VerificationStatus.VERIFIED.value
        booking.updated_at = now
        db.commit()
        db.refresh(booking)

    except Exception as e:
        db.rollback()
        logger.error(f"Booking verification failed | Id={booking_id} -> {e}")
        return _verification_failure(VerificationError.DATABASE_ERROR)

    booking_log.info(f"Booking Confirmed | Id={booking.id} | Ref={booking.booking_reference}")

    email_sent = mailer.send_confirmation_email(
        user_email=booking.user_email,
        user_name=booking.user_name,
        room_name=booking.room_name,
        building_name=booking.building_name,
        booking_date=booking.booking_date.isoformat(),
        start_time=format_hhmm(booking.start_time),
        end_time=format_hhmm(booking.end_time),
        booking_reference=booking.booking_reference,
    )

    return VerificationResult(success=True, email_sent=email_sent)


# ---------------------------------------------------------------------
# LOOKUP
# ---------------------------------------------------------------------
def get_booking_by_reference(db: Session, email: str, reference: str) -> Optional[Booking]:
    try:
        return db.query(Booking).filter(
            Booking.user_email == email,
            Booking.booking_reference == reference.upper(),
        ).first()
    except Exception as e:
        logger.error(f"Booking lookup error | Ref={reference} -> {e}")
        return None


def get_user_bookings(db: Session, email: str) -> List[Booking]:
    try:
        return (
            db.query(Booking)
            .filter(Booking.user_email == email)
            .order_by(Booking.created_at.desc())
            .all()
        )
    except Exception as e:
        logger.error(f"User bookings lookup error | User={email} -> {e}")
        return []


# ---------------------------------------------------------------------
# CANCEL
# ---------------------------------------------------------------------
def cancel_booking(db: Session, booking: Booking, reason: Optional[str] = None,
                   now: Optional[datetime] = None) -> OperationResult:
    now = now or datetime.now(timezone.utc)

    if booking.status == BookingStatus.CANCELLED.value:
        return OperationResult(success=False, error="Booking is already cancelled")

    try:
        booking.status = BookingStatus.CANCELLED.value
        booking.cancellation_reason = reason
        booking.cancelled_at = now
        booking.updated_at = now
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Booking cancellation failed | Id={booking.id} -> {e}")
        return OperationResult(success=False, error="Failed to cancel booking")

    booking_log.info(f"Booking Cancelled | Id={booking.id} | Ref={booking.booking_reference}")
    return OperationResult(success=True, data={"booking_id": booking.id})
