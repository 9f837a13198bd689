"""
Adapters layer - Booking stores the service reads from and writes to.
"""

from .json_booking_store import JsonBookingStore
from .rest_booking_store import RestBookingStore

__all__ = ["JsonBookingStore", "RestBookingStore"]
