"""
Core business logic for laying out a day's bookable slots and timeline.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .availability import AvailabilityEngine
from .models import GridCell, HourRow, OperatingWindow, Slot, TimeBlock
from .time_codec import TimeCodec

DEFAULT_STEP_MINUTES = 30
DEFAULT_CELL_MINUTES = 15


class SlotSequence:
    """
    Candidate starts for one duration, in chronological order.

    Slots are computed lazily and every iteration starts over, so the same
    sequence can be rendered and then scanned again.
    """

    def __init__(
        self,
        calculator: "SlotCalculator",
        duration_minutes: int,
        blocks: Sequence[TimeBlock],
        step_minutes: int
    ):
        self._calculator = calculator
        self.duration_minutes = duration_minutes
        self._blocks = tuple(blocks)
        self.step_minutes = step_minutes

    def __iter__(self) -> Iterator[Slot]:
        last_start = self._calculator.window.length_minutes - self.duration_minutes
        engine = self._calculator.engine
        codec = self._calculator.codec

        for minutes in range(0, last_start + 1, self.step_minutes):
            yield Slot(
                minutes_from_start=minutes,
                display_time=codec.format_minutes(minutes, self._calculator.use_24_hour),
                available=engine.is_interval_available(minutes, self.duration_minutes, self._blocks),
            )

    def __len__(self) -> int:
        last_start = self._calculator.window.length_minutes - self.duration_minutes
        if last_start < 0:
            return 0
        return last_start // self.step_minutes + 1


class SlotCalculator:
    """
    Produces the selectable slots and the fine-grained occupancy grid.

    Algorithm:
    1. Walk candidate starts from opening to the last start that still ends
       by closing time, at the slot cadence
    2. Ask the availability engine whether each candidate interval is free
    3. Separately, walk the whole window at the grid cadence and mark every
       cell whose start minute lies inside a booked block
    """

    def __init__(
        self,
        window: OperatingWindow,
        engine: AvailabilityEngine | None = None,
        step_minutes: int = DEFAULT_STEP_MINUTES,
        cell_minutes: int = DEFAULT_CELL_MINUTES,
        use_24_hour: bool = False
    ):
        self.window = window
        self.engine = engine or AvailabilityEngine(window)
        self.codec: TimeCodec = self.engine.codec
        self.step_minutes = window.validate_cadence(step_minutes)
        self.cell_minutes = window.validate_cadence(cell_minutes)
        self.use_24_hour = use_24_hour

    def generate_slots(
        self,
        duration_minutes: int,
        blocks: Sequence[TimeBlock],
        step_minutes: int | None = None
    ) -> SlotSequence:
        """
        Candidate starts for an appointment of the given duration.

        Empty (not an error) when the duration is longer than the window.
        """
        step = self._resolve_cadence(step_minutes, self.step_minutes)
        return SlotSequence(self, duration_minutes, blocks, step)

    def generate_grid(
        self,
        blocks: Sequence[TimeBlock],
        cell_minutes: int | None = None,
        selection: Optional[Tuple[int, int]] = None
    ) -> List[GridCell]:
        """
        Build one cell per bucket across the whole window.

        A cell is booked when its start minute lies inside a block; the first
        matching block's label is attached and later blocks are not examined.

        Args:
            blocks: Occupied blocks for the day
            cell_minutes: Bucket width, defaults to the configured cadence
            selection: Optional (start, duration) of the user's tentative
                choice; free cells inside it are flagged as selected
        """
        cell = self._resolve_cadence(cell_minutes, self.cell_minutes)
        cells: List[GridCell] = []

        for minutes in range(0, self.window.length_minutes, cell):
            booking_label = None
            is_booked = False

            for block in blocks:
                if block.contains(minutes):
                    is_booked = True
                    booking_label = block.label
                    break

            is_selected = False
            if selection is not None and not is_booked:
                selected_start, selected_duration = selection
                is_selected = selected_start <= minutes < selected_start + selected_duration

            cells.append(GridCell(
                minutes_from_start=minutes,
                is_booked=is_booked,
                booking_label=booking_label,
                is_selected=is_selected
            ))

        return cells

    def group_grid_by_hour(self, cells: Iterable[GridCell]) -> List[HourRow]:
        """
        Group grid cells under the wall-clock hour they start in.

        Example (window 09:00 - 11:00, 15-minute cells):
        ["9 ص": 4 cells, "10 ص": 4 cells]
        """
        rows: List[HourRow] = []
        current_hour: int | None = None

        for cell in cells:
            hour = (self.window.day_start_minutes + cell.minutes_from_start) // 60
            if hour != current_hour:
                rows.append(HourRow(label=self.codec.hour_label(hour)))
                current_hour = hour
            rows[-1].cells.append(cell)

        return rows

    @staticmethod
    def has_any_available_slot(slots: Iterable[Slot]) -> bool:
        """True when at least one slot can be booked."""
        return any(slot.available for slot in slots)

    def find_next_available_slot(
        self,
        duration_minutes: int,
        blocks: Sequence[TimeBlock],
        step_minutes: int | None = None
    ) -> Slot | None:
        """Return the earliest available slot, or None if the day is full."""
        for slot in self.generate_slots(duration_minutes, blocks, step_minutes):
            if slot.available:
                return slot
        return None

    def count_available_slots(
        self,
        duration_minutes: int,
        blocks: Sequence[TimeBlock],
        step_minutes: int | None = None
    ) -> int:
        return sum(
            1 for slot in self.generate_slots(duration_minutes, blocks, step_minutes)
            if slot.available
        )

    def time_labels(self, step_minutes: int | None = None) -> List[str]:
        """Display times at every cadence point from opening to closing, both inclusive."""
        step = self._resolve_cadence(step_minutes, self.step_minutes)
        return [
            self.codec.format_minutes(minutes, self.use_24_hour)
            for minutes in range(0, self.window.length_minutes + 1, step)
        ]

    def _resolve_cadence(self, requested: int | None, default: int) -> int:
        if requested is None:
            return default
        return self.window.validate_cadence(requested)
