"""
Domain layer - Pure business logic without external dependencies.
"""

from .availability import AvailabilityEngine
from .exceptions import (
    BookingStoreError,
    ConfigurationError,
    ConflictAtCommit,
    OutsideOpeningHours,
    ParseError,
    SpaSlotError,
)
from .models import Booking, GridCell, HourRow, OperatingWindow, Slot, TimeBlock
from .slot_calculator import SlotCalculator, SlotSequence
from .time_codec import ARABIC_MARKERS, LATIN_MARKERS, MeridiemMarkers, TimeCodec

__all__ = [
    "ARABIC_MARKERS",
    "AvailabilityEngine",
    "Booking",
    "BookingStoreError",
    "ConfigurationError",
    "ConflictAtCommit",
    "GridCell",
    "HourRow",
    "LATIN_MARKERS",
    "MeridiemMarkers",
    "OperatingWindow",
    "OutsideOpeningHours",
    "ParseError",
    "Slot",
    "SlotCalculator",
    "SlotSequence",
    "SpaSlotError",
    "TimeBlock",
    "TimeCodec",
]
