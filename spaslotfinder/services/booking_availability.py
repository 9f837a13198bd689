"""
Application services for computing a day's availability and committing
new bookings.

The service fetches the approved bookings for a date through a booking store
adapter and delegates every decision to the domain-level ``SlotCalculator``.
It holds no state between calls: each call recomputes from a fresh snapshot,
which is also what the commit path relies on to re-check a slot right before
writing it.
"""

from __future__ import annotations

import logging
from datetime import date as Date
from typing import List, Protocol

from ..domain.exceptions import ConflictAtCommit, OutsideOpeningHours
from ..domain.models import Booking, GridCell, HourRow, TimeBlock
from ..domain.slot_calculator import SlotCalculator, SlotSequence

logger = logging.getLogger(__name__)

PENDING_STATUS = "pending"


class BookingStoreProtocol(Protocol):
    """Protocol describing the booking store behaviour needed by the service."""

    async def fetch_approved_bookings(self, booking_date: Date) -> List[Booking]:
        """Return the bookings that occupy time on the given date."""

    async def insert_booking(
        self,
        booking_date: Date,
        booking: Booking,
        status: str = PENDING_STATUS,
    ) -> None:
        """Persist a booking, raising ConflictAtCommit if it collides."""


class BookingAvailabilityService:
    """
    Orchestrates booking retrieval, availability calculation and the
    conflict-checked commit of a new booking.
    """

    def __init__(
        self,
        booking_store: BookingStoreProtocol,
        slot_calculator: SlotCalculator,
    ) -> None:
        self._booking_store = booking_store
        self._slot_calculator = slot_calculator

    @property
    def calculator(self) -> SlotCalculator:
        return self._slot_calculator

    async def fetch_time_blocks(self, booking_date: Date) -> List[TimeBlock]:
        """
        Fetch the date's approved bookings and decode them into blocks.

        Malformed stored bookings are logged and left out rather than
        corrupting the whole day's availability.
        """
        bookings = await self._booking_store.fetch_approved_bookings(booking_date)
        logger.debug("Fetched %d approved booking(s) for %s", len(bookings), booking_date)

        return self._slot_calculator.engine.to_time_blocks(bookings, skip_invalid=True)

    async def available_slots(
        self,
        booking_date: Date,
        duration_text: str,
    ) -> SlotSequence:
        """Slots for a catalog duration on the given date."""
        duration = self._slot_calculator.codec.parse_duration(duration_text)
        blocks = await self.fetch_time_blocks(booking_date)
        return self._slot_calculator.generate_slots(duration, blocks)

    async def timeline(
        self,
        booking_date: Date,
        selected_time: str | None = None,
        duration_text: str | None = None,
    ) -> List[HourRow]:
        """
        Occupancy grid grouped by hour, optionally highlighting a tentative
        selection of ``duration_text`` starting at ``selected_time``.
        """
        blocks = await self.fetch_time_blocks(booking_date)

        selection = None
        if selected_time and duration_text:
            codec = self._slot_calculator.codec
            selection = (
                codec.parse_time_of_day(selected_time),
                codec.parse_duration(duration_text),
            )

        cells: List[GridCell] = self._slot_calculator.generate_grid(blocks, selection=selection)
        return self._slot_calculator.group_grid_by_hour(cells)

    async def is_available(
        self,
        booking_date: Date,
        booking_time: str,
        duration_text: str,
    ) -> bool:
        """Point query against a freshly fetched snapshot."""
        codec = self._slot_calculator.codec
        start = codec.parse_time_of_day(booking_time)
        duration = codec.parse_duration(duration_text)
        blocks = await self.fetch_time_blocks(booking_date)
        return self._slot_calculator.engine.is_interval_available(start, duration, blocks)

    async def confirm_booking(
        self,
        booking_date: Date,
        booking_time: str,
        duration_text: str,
    ) -> Booking:
        """
        Re-check a chosen slot against fresh data and commit it.

        The re-check narrows the window for double bookings; exclusivity
        itself is enforced by the store, which raises ConflictAtCommit when
        a concurrent write got there first.

        Raises:
            ParseError: If the requested time or duration is malformed
            OutsideOpeningHours: If the interval does not fit the operating window
            ConflictAtCommit: If the slot is no longer available
        """
        codec = self._slot_calculator.codec
        engine = self._slot_calculator.engine

        start = codec.parse_time_of_day(booking_time)
        duration = codec.parse_duration(duration_text)
        if start < 0 or start + duration > self._slot_calculator.window.length_minutes:
            raise OutsideOpeningHours(
                f"{booking_time} ({duration_text}) does not fit inside opening hours"
            )

        blocks = await self.fetch_time_blocks(booking_date)

        if not engine.is_interval_available(start, duration, blocks):
            conflicts = [
                block.label or codec.format_minutes(block.start)
                for block in engine.conflicting_blocks(start, duration, blocks)
            ]
            logger.info(
                "Rejected booking %s (%s) on %s, conflicts: %s",
                booking_time, duration_text, booking_date, conflicts,
            )
            raise ConflictAtCommit(
                "Slot no longer available, please choose another",
                conflicts=conflicts,
            )

        booking = Booking(booking_time=booking_time, booking_duration=duration_text)
        await self._booking_store.insert_booking(booking_date, booking, status=PENDING_STATUS)
        logger.info("Submitted booking %s on %s", booking.label(), booking_date)
        return booking
