from enum import Enum


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ACTIVE = "active"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class VerificationStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"


class RoomStatus(str, Enum):
    AVAILABLE = "available"
    CONFLICT = "conflict"
    CLOSED = "closed"
    MAINTENANCE = "maintenance"


# bookings in these states block other bookings once verified
LIVE_BOOKING_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.ACTIVE.value)
