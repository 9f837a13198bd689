"""
Conversion between human-facing time strings and window minute offsets.

Stored bookings carry times such as "02:00 م", "2:00 PM" or "14:00" and
durations such as "30 mins", "1 hr" or "1.5 hr". The codec turns them into
integer minutes relative to the operating window's opening time and back.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import NamedTuple

from .exceptions import ParseError
from .models import OperatingWindow


class MeridiemMarkers(NamedTuple):
    """Morning/afternoon markers appended to 12-hour display times."""
    morning: str
    afternoon: str


ARABIC_MARKERS = MeridiemMarkers(morning="ص", afternoon="م")
LATIN_MARKERS = MeridiemMarkers(morning="AM", afternoon="PM")

MARKER_SETS = {
    "arabic": ARABIC_MARKERS,
    "latin": LATIN_MARKERS,
}

_TIME_PATTERN = re.compile(r"(?<!\d)(\d{1,2}):(\d{2})(?!\d)")
_LEADING_INTEGER = re.compile(r"^\s*(\d+)")
_LEADING_NUMBER = re.compile(r"^\s*(\d+(?:\.\d+)?|\.\d+)")
_MINUTE_UNITS = ("min", "دقيق")


class TimeCodec:
    """
    Parses and formats times of day and durations for one operating window.

    Parsing accepts both marker alphabets regardless of ``markers``; the
    marker set only decides how 12-hour times are rendered.
    """

    def __init__(self, window: OperatingWindow, markers: MeridiemMarkers = ARABIC_MARKERS):
        self.window = window
        self.markers = markers

    def parse_time_of_day(self, text: str) -> int:
        """
        Convert a time string to minutes from window opening.

        Examples: "09:00 ص", "02:00 م", "9:00 AM", "2:00 pm", "14:30"

        The result may be negative or beyond the window length when the
        time lies outside opening hours; range checks belong to the
        availability engine.

        Raises:
            ParseError: If no H:MM / HH:MM pair is present or it is out of range
        """
        cleaned = text.strip()
        match = _TIME_PATTERN.search(cleaned)
        if not match:
            raise ParseError(f"No time of day found in {text!r}", text=text)

        hour = int(match.group(1))
        minute = int(match.group(2))
        if hour > 23 or minute > 59:
            raise ParseError(f"Time of day out of range in {text!r}", text=text)

        upper = cleaned.upper()
        is_pm = ARABIC_MARKERS.afternoon in cleaned or "PM" in upper
        is_am = ARABIC_MARKERS.morning in cleaned or "AM" in upper
        if (is_pm or is_am) and not 1 <= hour <= 12:
            raise ParseError(f"Hour must be 1-12 with a meridiem marker in {text!r}", text=text)

        # Afternoon wins when both markers appear
        if is_pm and hour != 12:
            hour += 12
        elif not is_pm and is_am and hour == 12:
            hour = 0

        return hour * 60 + minute - self.window.day_start_minutes

    def format_minutes(self, minutes: int, use_24_hour: bool = False) -> str:
        """Convert minutes from window opening to a display time string."""
        total_minutes = self.window.day_start_minutes + minutes
        hour, minute = divmod(total_minutes, 60)

        if use_24_hour:
            return f"{hour:02d}:{minute:02d}"

        marker = self.markers.afternoon if hour >= 12 else self.markers.morning
        if hour > 12:
            hour -= 12
        if hour == 0:
            hour = 12

        return f"{hour:02d}:{minute:02d} {marker}"

    def hour_label(self, hour: int) -> str:
        """Short label for a wall-clock hour, e.g. "2 م" for 14."""
        marker = self.markers.afternoon if hour >= 12 else self.markers.morning
        display_hour = hour - 12 if hour > 12 else hour
        if display_hour == 0:
            display_hour = 12
        return f"{display_hour} {marker}"

    @staticmethod
    def parse_duration(text: str) -> int:
        """
        Convert a duration string to minutes.

        Examples: "30 mins" -> 30, "1 hr" -> 60, "1.5 hr" -> 90

        Raises:
            ParseError: If no leading number is present, the duration is not
                positive, or the hour value is not a whole number of minutes
        """
        lowered = text.lower()

        if any(unit in lowered for unit in _MINUTE_UNITS):
            match = _LEADING_INTEGER.match(text)
            if not match:
                raise ParseError(f"No minute count found in {text!r}", text=text)
            minutes = int(match.group(1))
        else:
            match = _LEADING_NUMBER.match(text)
            if not match:
                raise ParseError(f"No hour count found in {text!r}", text=text)
            try:
                exact = Decimal(match.group(1)) * 60
            except InvalidOperation as exc:
                raise ParseError(f"Invalid hour count in {text!r}", text=text) from exc
            if exact != exact.to_integral_value():
                raise ParseError(f"Duration {text!r} is not a whole number of minutes", text=text)
            minutes = int(exact)

        if minutes <= 0:
            raise ParseError(f"Duration must be positive, got {text!r}", text=text)
        return minutes

    @staticmethod
    def format_duration(minutes: int) -> str:
        """Render minutes in the duration catalog's style ("30 mins", "1 hr", "1.5 hr")."""
        if minutes < 60 or minutes % 30:
            return f"{minutes} mins"
        hours = Decimal(minutes) / 60
        return f"{hours.normalize():f} hr"
