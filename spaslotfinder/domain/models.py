"""
Domain models for the daily operating window and its occupancy.

All offsets are integer minutes counted from the window's opening time,
which keeps the arithmetic free of dates and timezones.
"""

from dataclasses import dataclass, field
from typing import Any, List, Mapping

from .exceptions import ConfigurationError

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class OperatingWindow:
    """
    The span of the day during which appointments can be scheduled.

    Invariant: the window opens before it closes and its length is a
    positive multiple of the smallest granularity.
    """
    day_start_minutes: int = 9 * 60
    day_end_minutes: int = 19 * 60
    granularity_minutes: int = 15

    def __post_init__(self):
        if not 0 <= self.day_start_minutes <= MINUTES_PER_DAY:
            raise ConfigurationError(
                f"day_start_minutes must be within 0..{MINUTES_PER_DAY}, got {self.day_start_minutes}"
            )
        if not 0 <= self.day_end_minutes <= MINUTES_PER_DAY:
            raise ConfigurationError(
                f"day_end_minutes must be within 0..{MINUTES_PER_DAY}, got {self.day_end_minutes}"
            )
        if self.day_end_minutes <= self.day_start_minutes:
            raise ConfigurationError(
                f"Window end {self.day_end_minutes} must be after window start {self.day_start_minutes}"
            )
        if self.granularity_minutes <= 0 or self.length_minutes % self.granularity_minutes:
            raise ConfigurationError(
                f"Window length {self.length_minutes} is not a multiple of "
                f"{self.granularity_minutes} minutes"
            )

    @classmethod
    def from_hours(cls, start_hour: int, end_hour: int, granularity_minutes: int = 15) -> "OperatingWindow":
        """Build a window from whole opening and closing hours."""
        return cls(
            day_start_minutes=start_hour * 60,
            day_end_minutes=end_hour * 60,
            granularity_minutes=granularity_minutes,
        )

    @property
    def length_minutes(self) -> int:
        return self.day_end_minutes - self.day_start_minutes

    def validate_cadence(self, step_minutes: int) -> int:
        """
        Ensure a slot or grid cadence tiles the window exactly.

        Raises:
            ConfigurationError: If the cadence is not positive or does not
                divide the window length
        """
        if step_minutes <= 0:
            raise ConfigurationError(f"Cadence must be positive, got {step_minutes}")
        if self.length_minutes % step_minutes:
            raise ConfigurationError(
                f"Cadence of {step_minutes} minutes does not divide the "
                f"{self.length_minutes}-minute window"
            )
        return step_minutes


@dataclass(frozen=True)
class TimeBlock:
    """
    An occupied half-open interval [start, end) relative to window opening.

    Invariant: 0 <= start < end.
    """
    start: int
    end: int
    label: str | None = None

    def __post_init__(self):
        if self.start < 0:
            raise ValueError(f"Block start {self.start} must not be negative")
        if self.start >= self.end:
            raise ValueError(f"Block start {self.start} must be before end {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.end - self.start

    def overlaps(self, start: int, end: int) -> bool:
        """Check if this block overlaps the half-open interval [start, end)."""
        return self.start < end and start < self.end

    def contains(self, minute: int) -> bool:
        return self.start <= minute < self.end


@dataclass(frozen=True)
class Slot:
    """A candidate appointment start with its availability flag."""
    minutes_from_start: int
    display_time: str
    available: bool


@dataclass(frozen=True)
class GridCell:
    """
    A fixed-width visualization bucket of the day's timeline.
    """
    minutes_from_start: int
    is_booked: bool
    booking_label: str | None = None
    is_selected: bool = False

    @property
    def status(self) -> str:
        if self.is_booked:
            return "booked"
        if self.is_selected:
            return "selected"
        return "free"


@dataclass(frozen=True)
class HourRow:
    """Grid cells belonging to one wall-clock hour, for grouped display."""
    label: str
    cells: List[GridCell] = field(default_factory=list)


@dataclass(frozen=True)
class Booking:
    """
    A stored booking as the booking store returns it.

    Both fields keep their human-readable form; decoding is the codec's job.
    """
    booking_time: str
    booking_duration: str

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Booking":
        """Build a booking from a store row such as {"booking_time": ..., "booking_duration": ...}."""
        return cls(
            booking_time=str(record["booking_time"]),
            booking_duration=str(record["booking_duration"]),
        )

    def label(self) -> str:
        return f"{self.booking_time} ({self.booking_duration})"

