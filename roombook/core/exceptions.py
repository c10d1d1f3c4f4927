class RoomBookError(Exception):
    """Base class for domain errors raised inside roombook."""


class BookingValidationError(RoomBookError, ValueError):
    """A booking request failed validation before touching the database."""


class ContactsParseError(RoomBookError, ValueError):
    """A building's stored contacts blob is not a JSON object."""
