"""
Tests for the BookingAvailabilityService orchestration layer.
"""

import asyncio
from datetime import date
from typing import Dict, List

import pytest

from spaslotfinder.domain.exceptions import ConflictAtCommit, OutsideOpeningHours, ParseError
from spaslotfinder.domain.models import Booking, OperatingWindow, TimeBlock
from spaslotfinder.domain.slot_calculator import SlotCalculator
from spaslotfinder.services.booking_availability import BookingAvailabilityService

BOOKING_DATE = date(2025, 3, 2)


class StubBookingStore:
    """Minimal stub matching BookingStoreProtocol."""

    def __init__(self, bookings: List[Booking]):
        self._bookings = bookings
        self.fetches: List[date] = []
        self.inserted: List[Dict[str, object]] = []

    async def fetch_approved_bookings(self, booking_date):
        self.fetches.append(booking_date)
        return list(self._bookings)

    async def insert_booking(self, booking_date, booking, status="pending"):
        self.inserted.append({"date": booking_date, "booking": booking, "status": status})


def _build_service(bookings: List[Booking]) -> BookingAvailabilityService:
    calculator = SlotCalculator(window=OperatingWindow())
    return BookingAvailabilityService(booking_store=StubBookingStore(bookings), slot_calculator=calculator)


def test_fetch_time_blocks_skips_malformed_bookings():
    """A malformed stored booking is excluded instead of occupying opening time."""
    service = _build_service([Booking("tbd", "1 hr"), Booking("02:00 م", "1 hr")])

    blocks = asyncio.run(service.fetch_time_blocks(BOOKING_DATE))

    assert blocks == [TimeBlock(start=300, end=360, label="02:00 م (1 hr)")]


def test_available_slots_for_catalog_duration():
    service = _build_service([Booking("02:00 م", "1 hr")])

    slots = list(asyncio.run(service.available_slots(BOOKING_DATE, "30 mins")))

    assert len(slots) == 20
    assert slots[0].available  # no phantom block at 09:00
    taken = [slot.display_time for slot in slots if not slot.available]
    assert taken == ["02:00 م", "02:30 م"]


def test_timeline_highlights_selection():
    service = _build_service([Booking("02:00 م", "1 hr")])

    rows = asyncio.run(service.timeline(BOOKING_DATE, selected_time="01:30 م", duration_text="1 hr"))

    assert len(rows) == 10
    one_pm = rows[4]
    assert one_pm.label == "1 م"
    assert [cell.status for cell in one_pm.cells] == ["free", "free", "selected", "selected"]
    assert [cell.status for cell in rows[5].cells] == ["booked"] * 4
    assert rows[5].cells[0].booking_label == "02:00 م (1 hr)"


def test_is_available_uses_fresh_snapshot():
    service = _build_service([Booking("02:00 م", "1 hr")])
    store = service._booking_store

    assert asyncio.run(service.is_available(BOOKING_DATE, "03:00 م", "1 hr"))
    assert not asyncio.run(service.is_available(BOOKING_DATE, "02:30 PM", "30 mins"))
    assert store.fetches == [BOOKING_DATE, BOOKING_DATE]


def test_confirm_booking_commits_free_slot():
    service = _build_service([Booking("02:00 م", "1 hr")])
    store = service._booking_store

    booking = asyncio.run(service.confirm_booking(BOOKING_DATE, "03:00 م", "1.5 hr"))

    assert booking == Booking("03:00 م", "1.5 hr")
    assert store.inserted == [{"date": BOOKING_DATE, "booking": booking, "status": "pending"}]


def test_confirm_booking_rejects_taken_slot():
    """A slot taken since the list was shown raises and is not written."""
    service = _build_service([Booking("02:00 م", "1 hr")])
    store = service._booking_store

    with pytest.raises(ConflictAtCommit) as exc_info:
        asyncio.run(service.confirm_booking(BOOKING_DATE, "01:30 م", "1 hr"))

    assert exc_info.value.conflicts == ["02:00 م (1 hr)"]
    assert store.inserted == []


@pytest.mark.parametrize("booking_time", ["06:30 م", "08:30 ص"])
def test_confirm_booking_rejects_interval_outside_opening_hours(booking_time):
    service = _build_service([Booking("06:00 م", "30 mins")])
    store = service._booking_store

    with pytest.raises(OutsideOpeningHours):
        asyncio.run(service.confirm_booking(BOOKING_DATE, booking_time, "1 hr"))

    assert store.inserted == []
    assert store.fetches == []


def test_confirm_booking_with_malformed_request():
    service = _build_service([])

    with pytest.raises(ParseError):
        asyncio.run(service.confirm_booking(BOOKING_DATE, "whenever", "1 hr"))
