"""
Occupancy checks for candidate appointments against a day's bookings.
"""

import logging
from typing import Iterable, List

from .exceptions import ParseError
from .models import Booking, OperatingWindow, TimeBlock
from .time_codec import TimeCodec

logger = logging.getLogger(__name__)


class AvailabilityEngine:
    """
    Decides whether [start, start + duration) is free within the window.

    Blocks are never assumed to be disjoint: a candidate is rejected as soon
    as any block overlaps it, so duplicate or overlapping bookings behave as
    their union.
    """

    def __init__(self, window: OperatingWindow, codec: TimeCodec | None = None):
        self.window = window
        self.codec = codec or TimeCodec(window)

    def to_time_blocks(
        self,
        bookings: Iterable[Booking],
        skip_invalid: bool = False
    ) -> List[TimeBlock]:
        """
        Decode bookings into occupied blocks, one block per booking.

        Args:
            bookings: Stored bookings for a single date
            skip_invalid: Exclude bookings whose time or duration cannot be
                parsed instead of raising

        Returns:
            List of TimeBlock objects in input order

        Raises:
            ParseError: If a booking is malformed and skip_invalid is False
        """
        blocks: List[TimeBlock] = []

        for booking in bookings:
            try:
                start = self.codec.parse_time_of_day(booking.booking_time)
                duration = self.codec.parse_duration(booking.booking_duration)
            except ParseError as exc:
                if not skip_invalid:
                    raise
                logger.warning("Skipping booking %s: %s", booking.label(), exc)
                continue

            end = start + duration
            if end <= 0:
                logger.debug("Booking %s ends before opening, ignored", booking.label())
                continue

            # Bookings that begin before opening still occupy the minutes they spill into
            blocks.append(TimeBlock(start=max(start, 0), end=end, label=booking.label()))

        return blocks

    def is_interval_available(
        self,
        start: int,
        duration: int,
        blocks: Iterable[TimeBlock]
    ) -> bool:
        """
        Check that [start, start + duration) lies inside the window and
        overlaps no block. Intervals running past closing are unavailable,
        never truncated.
        """
        end = start + duration

        if start < 0 or end > self.window.length_minutes:
            return False

        return not any(block.overlaps(start, end) for block in blocks)

    def conflicting_blocks(
        self,
        start: int,
        duration: int,
        blocks: Iterable[TimeBlock]
    ) -> List[TimeBlock]:
        """Return the blocks that overlap [start, start + duration)."""
        end = start + duration
        return [block for block in blocks if block.overlaps(start, end)]
