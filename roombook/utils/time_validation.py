"""
Past-time validation for booking requests.

Every wall-clock value a user picks is interpreted in the library's civil
timezone (US Eastern by default). Both the candidate and "now" are projected
through the zone database, so the comparison stays correct on daylight-saving
transition days where a fixed UTC offset would be off by an hour.
"""
from datetime import datetime, time, timezone
from typing import Optional

import pytz

DEFAULT_TIMEZONE = "America/New_York"


def _zone(tz_name: Optional[str] = None):
    return pytz.timezone(tz_name or DEFAULT_TIMEZONE)


def get_current_eastern_time(now: Optional[datetime] = None, tz_name: Optional[str] = None) -> datetime:
    """Current instant expressed in the booking timezone.

    ``now`` may be passed for tests; a naive value is taken to be UTC.
    """
    tz = _zone(tz_name)
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(tz)


def localize_wall_clock(date_str: str, time_str: str, tz_name: Optional[str] = None) -> datetime:
    """Attach the booking timezone to a naive ``YYYY-MM-DD`` + ``HH:MM`` pair.

    Raises ValueError on malformed input.
    """
    naive = datetime.strptime(f"{date_str} {time_str[:5]}", "%Y-%m-%d %H:%M")
    tz = _zone(tz_name)
    # is_dst=False picks standard time for the repeated fall-back hour;
    # normalize() moves spring-forward gap times onto a real instant
    return tz.normalize(tz.localize(naive, is_dst=False))


def is_past_time(date_str: str, time_str: str, now: Optional[datetime] = None,
                 tz_name: Optional[str] = None) -> bool:
    """True if the selected wall-clock time is at or before now.

    The current minute counts as past, so a booking can never start "now".
    """
    selected = localize_wall_clock(date_str, time_str, tz_name)
    current = get_current_eastern_time(now, tz_name)
    return selected <= current


def format_eastern_time(now: Optional[datetime] = None, tz_name: Optional[str] = None) -> str:
    current = get_current_eastern_time(now, tz_name)
    # e.g. "Sunday, June 1, 2025, 02:05:09 PM EDT"
    return (
        f"{current.strftime('%A')}, {current.strftime('%B')} {current.day}, "
        f"{current.year}, {current.strftime('%I:%M:%S %p %Z')}"
    )


def get_past_time_error_message(date_str: str, time_str: str, now: Optional[datetime] = None,
                                tz_name: Optional[str] = None) -> str:
    current_time = format_eastern_time(now, tz_name)
    return (
        "You cannot book a room for a past time.\n\n"
        f"Selected time: {date_str} {time_str[:5]} (Eastern Time)\n"
        f"Current time: {current_time}\n\n"
        "Please select a future date and time."
    )


def time_to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def minutes_between(start: time, end: time) -> int:
    return time_to_minutes(end) - time_to_minutes(start)


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")
