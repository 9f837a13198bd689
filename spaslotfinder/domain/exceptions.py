"""
Domain-specific exception hierarchy for the spa slot finder.
"""

from typing import Sequence


class SpaSlotError(Exception):
    """Base class for all application-level errors."""


class ParseError(SpaSlotError, ValueError):
    """Raised when a time-of-day or duration string cannot be decoded."""

    def __init__(self, message: str, text: str = ""):
        super().__init__(message)
        self.text = text


class ConfigurationError(SpaSlotError, ValueError):
    """Raised when the operating window or a cadence is inconsistent."""


class ConflictAtCommit(SpaSlotError):
    """Raised when a booking collides with one accepted in the meantime."""

    def __init__(self, message: str, conflicts: Sequence[str] = ()):
        super().__init__(message)
        self.conflicts = list(conflicts)


class BookingStoreError(SpaSlotError):
    """Raised when booking data cannot be fetched, parsed or written."""


class OutsideOpeningHours(SpaSlotError):
    """Raised when a requested interval does not fit inside the operating window."""
