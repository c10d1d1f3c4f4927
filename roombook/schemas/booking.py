import datetime as dt
from datetime import date, time, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, PositiveInt, model_validator

from roombook.core.exceptions import BookingValidationError
from roombook.models.enums import BookingStatus, RoomStatus
from roombook.utils.time_validation import minutes_between


def resolve_duration(start_time: time, end_time: time, duration_minutes: Optional[int]) -> int:
    """Derive the duration from the interval, rejecting a mismatched one."""
    if end_time <= start_time:
        raise BookingValidationError("End time must be after start time")
    duration = minutes_between(start_time, end_time)
    if duration_minutes is not None and duration_minutes != duration:
        raise BookingValidationError("duration_minutes does not match start and end time")
    return duration


class TimeSelection(BaseModel):
    start_time: time
    end_time: time
    duration_minutes: Optional[int] = None
    date: Optional[dt.date] = None

    @model_validator(mode="after")
    def check_interval(self):
        self.duration_minutes = resolve_duration(
            self.start_time, self.end_time, self.duration_minutes
        )
        return self


class AvailabilityRequest(TimeSelection):
    room_ids: List[PositiveInt] = Field(min_length=1)


class BookingCreate(BaseModel):
    room_id: PositiveInt
    user_name: str = Field(min_length=1)
    user_email: EmailStr
    user_phone: Optional[str] = None
    group_size: Optional[PositiveInt] = None

    booking_date: date
    start_time: time
    end_time: time
    duration_minutes: Optional[int] = None

    purpose: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_times(self):
        self.duration_minutes = resolve_duration(
            self.start_time, self.end_time, self.duration_minutes
        )
        return self


class VerifyCodeRequest(BaseModel):
    verification_code: str = Field(min_length=1)


class CancelRequest(BaseModel):
    user_email: EmailStr
    booking_reference: str
    reason: Optional[str] = None


class StatusUpdate(BaseModel):
    status: BookingStatus
    reason: Optional[str] = None


class BookingOut(BaseModel):
    id: int
    room_id: int
    building_id: int
    room_name: str
    building_name: str
    building_short_name: Optional[str] = None

    user_name: str
    user_email: str
    contact_phone: Optional[str] = None
    group_size: Optional[int] = None
    purpose: Optional[str] = None
    notes: Optional[str] = None

    booking_date: date
    start_time: time
    end_time: time
    duration_minutes: int

    status: str
    verification_status: str
    booking_reference: str

    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ---------------- CONFLICT CHECK ----------------

class ConflictingBooking(BaseModel):
    start_time: str
    end_time: str
    booking_reference: str


class BookingConflict(BaseModel):
    room_id: int
    conflicting_booking: ConflictingBooking
    conflict_message: str


class RoomAvailabilityStatus(BaseModel):
    room_id: int
    available: bool
    status: RoomStatus
    message: Optional[str] = None
    conflict_details: Optional[BookingConflict] = None


# ---------------- OPERATION RESULTS ----------------

class SubmissionError(str, Enum):
    PAST_TIME = "past_time"
    ROOM_NOT_FOUND = "room_not_found"
    ROOM_UNAVAILABLE = "room_unavailable"
    CONFLICT = "conflict"
    DATABASE_ERROR = "database_error"


class VerificationError(str, Enum):
    NOT_FOUND = "not_found"
    ALREADY_VERIFIED = "already_verified"
    CANCELLED = "cancelled"
    INVALID_CODE = "invalid_code"
    EXPIRED = "expired"
    SLOT_TAKEN = "slot_taken"
    DATABASE_ERROR = "database_error"


class StatusUpdateError(str, Enum):
    NOT_FOUND = "not_found"
    ALREADY_CANCELLED = "already_cancelled"
    SLOT_TAKEN = "slot_taken"
    DATABASE_ERROR = "database_error"


class SubmissionResult(BaseModel):
    success: bool
    error: Optional[str] = None
    reason: Optional[SubmissionError] = None
    booking_id: Optional[int] = None
    booking_reference: Optional[str] = None
    email_sent: Optional[bool] = None


class VerificationResult(BaseModel):
    success: bool
    error: Optional[str] = None
    reason: Optional[VerificationError] = None
    email_sent: Optional[bool] = None


class OperationResult(BaseModel):
    success: bool
    error: Optional[str] = None
    data: Optional[dict] = None


class StatusUpdateResult(OperationResult):
    reason: Optional[StatusUpdateError] = None
