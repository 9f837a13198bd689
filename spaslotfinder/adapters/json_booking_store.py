"""
File-backed booking store for local use and demos.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import pendulum
from filelock import FileLock, Timeout

from ..domain.availability import AvailabilityEngine
from ..domain.exceptions import BookingStoreError, ConflictAtCommit
from ..domain.models import Booking

logger = logging.getLogger(__name__)

APPROVED_STATUS = "approved"
# Statuses that hold their time when a new booking is written
OCCUPYING_STATUSES = frozenset({APPROVED_STATUS, "pending"})


class JsonBookingStore:
    """
    Booking store backed by a JSON file holding a list of records:

        [
            {
                "booking_date": "2025-03-02",
                "booking_time": "02:00 م",
                "booking_duration": "1 hr",
                "status": "approved"
            }
        ]

    The file is re-read on every call so each availability computation sees
    the current snapshot. Inserts hold an exclusive lock file across the
    overlap check and the write.
    """

    def __init__(self, path: Path, engine: AvailabilityEngine, lock_timeout: float = 10):
        self.path = path
        self.engine = engine
        self.lock_path = path.with_suffix(path.suffix + ".lock")
        self._file_lock = FileLock(str(self.lock_path), timeout=lock_timeout)

    def _load_records(self) -> List[Dict[str, Any]]:
        """Load booking records, treating a missing file as an empty store."""
        if not self.path.exists():
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                records = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise BookingStoreError(f"Could not read bookings from {self.path}: {exc}") from exc

        if not isinstance(records, list):
            raise BookingStoreError(f"Bookings file {self.path} must contain a list of records")

        return records

    def _save_records(self, records: List[Dict[str, Any]]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(records, f, ensure_ascii=False, indent=2)
            tmp_path.replace(self.path)
        except OSError as exc:
            raise BookingStoreError(f"Could not write bookings to {self.path}: {exc}") from exc

    @staticmethod
    def _record_date(record: Dict[str, Any]) -> str | None:
        try:
            return pendulum.parse(str(record["booking_date"])).to_date_string()
        except (KeyError, ValueError) as exc:
            logger.warning("Skipping booking record with invalid date %r: %s", record, exc)
            return None

    def _bookings_for(self, records: List[Any], booking_date, statuses) -> List[Booking]:
        day = booking_date.isoformat()
        bookings: List[Booking] = []

        for record in records:
            if not isinstance(record, dict):
                logger.warning("Skipping booking record that is not an object: %r", record)
                continue
            if str(record.get("status", "")).lower() not in statuses:
                continue
            if self._record_date(record) != day:
                continue
            try:
                bookings.append(Booking.from_record(record))
            except KeyError as exc:
                logger.warning("Skipping booking record missing %s: %r", exc, record)

        return bookings

    def _insert(self, booking_date, booking: Booking, status: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BookingStoreError(f"Could not create {self.path.parent}: {exc}") from exc

        try:
            with self._file_lock:
                records = self._load_records()
                taken = self.engine.to_time_blocks(
                    self._bookings_for(records, booking_date, OCCUPYING_STATUSES),
                    skip_invalid=True,
                )
                candidate = self.engine.to_time_blocks([booking])

                conflicts = [
                    block.label
                    for new_block in candidate
                    for block in taken
                    if block.overlaps(new_block.start, new_block.end)
                ]
                if conflicts:
                    raise ConflictAtCommit(
                        "Slot no longer available, please choose another",
                        conflicts=conflicts,
                    )

                records.append({
                    "booking_date": booking_date.isoformat(),
                    "booking_time": booking.booking_time,
                    "booking_duration": booking.booking_duration,
                    "status": status,
                })
                self._save_records(records)
        except Timeout as exc:
            raise BookingStoreError(f"Timed out waiting for the lock on {self.path}") from exc

    async def fetch_approved_bookings(self, booking_date) -> List[Booking]:
        """
        Load approved bookings for a date from the JSON file.

        Args:
            booking_date: Date to filter on

        Returns:
            List of bookings in file order
        """
        records = await asyncio.to_thread(self._load_records)
        return await asyncio.to_thread(self._bookings_for, records, booking_date, {APPROVED_STATUS})

    async def insert_booking(self, booking_date, booking: Booking, status: str = "pending") -> None:
        """
        Append a booking unless it overlaps an approved or pending one.

        The overlap check and the write run under a lock file next to the
        bookings file, so separate processes sharing the file are serialised.

        Raises:
            ConflictAtCommit: If the interval is already taken
            BookingStoreError: If the file cannot be read, written or locked
        """
        await asyncio.to_thread(self._insert, booking_date, booking, status)
