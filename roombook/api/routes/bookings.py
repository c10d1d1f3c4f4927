from datetime import date, time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import EmailStr, ValidationError
from sqlalchemy.orm import Session

from roombook.core.config import get_settings
from roombook.core.dependencies import get_db, get_mailer, get_session_factory
from roombook.core.logging_config import get_logger
from roombook.schemas.booking import (
    AvailabilityRequest,
    BookingCreate,
    BookingOut,
    CancelRequest,
    RoomAvailabilityStatus,
    SubmissionError,
    TimeSelection,
    VerificationError,
    VerifyCodeRequest,
)
from roombook.services import booking_service
from roombook.services.conflicts import check_multiple_room_conflicts, check_room_conflicts
from roombook.services.email_service import EmailDispatcher
from roombook.utils.time_validation import (
    format_hhmm,
    get_current_eastern_time,
    get_past_time_error_message,
    is_past_time,
)

router = APIRouter(prefix="/bookings", tags=["Bookings"])
logger = get_logger()

SUBMISSION_STATUS_CODES = {
    SubmissionError.PAST_TIME: 400,
    SubmissionError.ROOM_NOT_FOUND: 404,
    SubmissionError.ROOM_UNAVAILABLE: 409,
    SubmissionError.CONFLICT: 409,
    SubmissionError.DATABASE_ERROR: 500,
}

VERIFICATION_STATUS_CODES = {
    VerificationError.NOT_FOUND: 404,
    VerificationError.ALREADY_VERIFIED: 409,
    VerificationError.CANCELLED: 409,
    VerificationError.INVALID_CODE: 400,
    VerificationError.EXPIRED: 410,
    VerificationError.SLOT_TAKEN: 409,
    VerificationError.DATABASE_ERROR: 500,
}


def reject_past_selection(selection: TimeSelection):
    # No date means today, same as the conflict check
    tz_name = get_settings().BOOKING_TIMEZONE
    booking_date = selection.date or get_current_eastern_time(tz_name=tz_name).date()
    date_str = booking_date.isoformat()
    start_str = format_hhmm(selection.start_time)
    if is_past_time(date_str, start_str, tz_name=tz_name):
        raise HTTPException(
            status_code=400,
            detail=get_past_time_error_message(date_str, start_str, tz_name=tz_name),
        )


# ---------------------------------------------------------------------
# AVAILABILITY (MULTIPLE ROOMS)
# ---------------------------------------------------------------------
@router.post("/availability", response_model=list[RoomAvailabilityStatus])
async def rooms_availability(
    data: AvailabilityRequest,
    session_factory=Depends(get_session_factory),
):
    reject_past_selection(data)
    return await check_multiple_room_conflicts(data.room_ids, data, session_factory)


# ---------------------------------------------------------------------
# AVAILABILITY (SINGLE ROOM)
# ---------------------------------------------------------------------
@router.get("/rooms/{room_id}/conflicts", response_model=RoomAvailabilityStatus)
def room_conflicts(
    room_id: int,
    start_time: time,
    end_time: time,
    booking_date: Optional[date] = None,
    db: Session = Depends(get_db),
):
    try:
        selection = TimeSelection(start_time=start_time, end_time=end_time, date=booking_date)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.errors()[0]["msg"])

    return check_room_conflicts(db, room_id, selection)


# ---------------------------------------------------------------------
# SUBMIT BOOKING REQUEST
# ---------------------------------------------------------------------
@router.post("/", status_code=201)
def submit_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    mailer: EmailDispatcher = Depends(get_mailer),
):
    result = booking_service.submit_booking_request(db, data, mailer)

    if not result.success:
        raise HTTPException(status_code=SUBMISSION_STATUS_CODES[result.reason], detail=result.error)

    return {
        "message": "Booking request received. Check your email for the verification code.",
        "booking_id": result.booking_id,
        "booking_reference": result.booking_reference,
        "email_sent": result.email_sent,
    }


# ---------------------------------------------------------------------
# VERIFY CODE
# ---------------------------------------------------------------------
@router.post("/{booking_id}/verify")
def verify_booking(
    booking_id: int,
    data: VerifyCodeRequest,
    db: Session = Depends(get_db),
    mailer: EmailDispatcher = Depends(get_mailer),
):
    result = booking_service.verify_booking_code(db, booking_id, data.verification_code, mailer)

    if not result.success:
        raise HTTPException(
            status_code=VERIFICATION_STATUS_CODES[result.reason],
            detail={"reason": result.reason.value, "message": result.error},
        )

    return {"message": "Booking confirmed", "email_sent": result.email_sent}


# ---------------------------------------------------------------------
# LOOKUP BY REFERENCE
# ---------------------------------------------------------------------
@router.get("/lookup", response_model=BookingOut)
def lookup_booking(email: EmailStr, reference: str, db: Session = Depends(get_db)):
    booking = booking_service.get_booking_by_reference(db, email, reference)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


# ---------------------------------------------------------------------
# USER: MY BOOKINGS
# ---------------------------------------------------------------------
@router.get("/user", response_model=list[BookingOut])
def user_bookings(email: EmailStr = Query(...), db: Session = Depends(get_db)):
    return booking_service.get_user_bookings(db, email)


# ---------------------------------------------------------------------
# CANCEL (USER)
# ---------------------------------------------------------------------
@router.post("/{booking_id}/cancel")
def cancel_booking(booking_id: int, data: CancelRequest, db: Session = Depends(get_db)):
    booking = booking_service.get_booking_by_reference(db, data.user_email, data.booking_reference)

    if not booking or booking.id != booking_id:
        raise HTTPException(status_code=404, detail="Booking not found")

    result = booking_service.cancel_booking(db, booking, data.reason)
    if not result.success:
        raise HTTPException(status_code=409, detail=result.error)

    logger.bind(log_type="booking").info(f"User cancelled booking | Ref={booking.booking_reference}")
    return {"message": "Booking cancelled successfully"}
