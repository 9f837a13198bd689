"""
HTTP booking store speaking the PostgREST query dialect.
"""

import asyncio
import logging
from typing import Any, Dict, List

import requests

from ..domain.exceptions import BookingStoreError, ConflictAtCommit
from ..domain.models import Booking

logger = logging.getLogger(__name__)


class RestBookingStore:
    """
    Client for a hosted bookings table exposed over REST.

    Reads use ``GET /rest/v1/<table>`` with ``eq.`` filters on date and
    status; writes ``POST`` a single row. The backend is expected to enforce
    exclusivity (an exclusion constraint on overlapping intervals) and answer
    409 on a collision.
    """

    REST_PATH = "/rest/v1"

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        table: str = "bookings",
        timeout: float = 30,
        session: requests.Session | None = None
    ):
        """
        Initialize the REST client.

        Args:
            base_url: Project URL, e.g. https://example.supabase.co
            api_key: API key sent as ``apikey`` and bearer token
            table: Bookings table name
            timeout: Request timeout in seconds
            session: Optional pre-configured requests session
        """
        self.endpoint = f"{base_url.rstrip('/')}{self.REST_PATH}/{table}"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if api_key:
            self.headers["apikey"] = api_key
            self.headers["Authorization"] = f"Bearer {api_key}"

    async def fetch_approved_bookings(self, booking_date) -> List[Booking]:
        """
        Fetch approved bookings for a date.

        Raises:
            BookingStoreError: If the request fails or the payload is malformed
        """
        params = {
            "select": "booking_time,booking_duration",
            "booking_date": f"eq.{booking_date.isoformat()}",
            "status": "eq.approved",
        }
        data = await asyncio.to_thread(self._get, params)
        return self._parse_bookings(data)

    async def insert_booking(self, booking_date, booking: Booking, status: str = "pending") -> None:
        """
        Insert a booking row.

        Raises:
            ConflictAtCommit: If the backend rejects the row as overlapping
            BookingStoreError: If the request fails for any other reason
        """
        payload = {
            "booking_date": booking_date.isoformat(),
            "booking_time": booking.booking_time,
            "booking_duration": booking.booking_duration,
            "status": status,
        }
        await asyncio.to_thread(self._post, payload)

    def _get(self, params: Dict[str, str]) -> Any:
        try:
            response = self.session.get(
                self.endpoint,
                headers=self.headers,
                params=params,
                timeout=self.timeout
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            raise BookingStoreError(f"Failed to fetch bookings from {self.endpoint}: {e}") from e
        except ValueError as e:
            raise BookingStoreError(f"Bookings response is not valid JSON: {e}") from e

    def _post(self, payload: Dict[str, str]) -> None:
        try:
            response = self.session.post(
                self.endpoint,
                headers={**self.headers, "Prefer": "return=minimal"},
                json=payload,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise BookingStoreError(f"Failed to submit booking to {self.endpoint}: {e}") from e

        if response.status_code == 409:
            raise ConflictAtCommit(
                "Slot no longer available, please choose another",
                conflicts=[f"{payload['booking_time']} ({payload['booking_duration']})"],
            )

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise BookingStoreError(f"Booking was rejected by {self.endpoint}: {e}") from e

    def _parse_bookings(self, data: Any) -> List[Booking]:
        """
        Parse the response rows into bookings.

        Response format:
        [
            {"booking_time": "02:00 م", "booking_duration": "1 hr"}
        ]
        """
        if not isinstance(data, list):
            raise BookingStoreError("Bookings response must be a JSON array")

        bookings: List[Booking] = []
        for row in data:
            try:
                bookings.append(Booking.from_record(row))
            except (KeyError, TypeError) as e:
                logger.warning("Could not parse booking row %r: %s", row, e)
                continue

        return bookings
