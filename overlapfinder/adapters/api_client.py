"""
HTTP client for the meeting scheduler REST API.
"""

import logging
from typing import Any, Dict, List

import requests

from ..domain.exceptions import AvailabilitySourceError, InvalidRecordError, MeetingNotFoundError
from ..domain.models import AvailabilityRecord, Meeting

logger = logging.getLogger(__name__)


class AvailabilityApiClient:
    """
    Read-only client for the meeting and availability endpoints.

    Uses ``GET /meetings/{id}`` and ``GET /availability?meeting_id=...``.
    Requests are not retried.
    """

    def __init__(self, base_url: str, timeout: int = 30):
        """
        Initialize the API client.

        Args:
            base_url: API root, e.g. ``https://example.com/api``
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {"Accept": "application/json"}

    def get_meeting(self, meeting_id: str) -> Meeting:
        """
        Fetch a meeting by id.

        Raises:
            MeetingNotFoundError: If the API answers 404
            AvailabilitySourceError: If the API call fails
        """
        url = f"{self.base_url}/meetings/{meeting_id}"
        data = self._get_json(url, params=None, not_found_message=f"Meeting not found: {meeting_id}")

        if not isinstance(data, dict):
            raise AvailabilitySourceError(f"Unexpected meeting payload from {url}")

        try:
            return Meeting.from_dict(data)
        except InvalidRecordError as e:
            raise AvailabilitySourceError(f"Could not parse meeting {meeting_id}: {e}") from e

    def get_availability(self, meeting_id: str) -> List[AvailabilityRecord]:
        """
        Fetch all availability records of a meeting.

        Rows that lack required fields are logged and skipped.

        Raises:
            AvailabilitySourceError: If the API call fails
        """
        url = f"{self.base_url}/availability"
        data = self._get_json(url, params={"meeting_id": meeting_id})

        if not isinstance(data, list):
            raise AvailabilitySourceError(f"Unexpected availability payload from {url}")

        return self._parse_availability_response(data)

    def _get_json(
        self,
        url: str,
        params: Dict[str, str] | None,
        not_found_message: str | None = None
    ) -> Any:
        """
        GET a JSON document.

        A 404 raises MeetingNotFoundError when not_found_message is given;
        otherwise it is reported like any other HTTP failure.
        """
        try:
            response = requests.get(
                url,
                headers=self.headers,
                params=params,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise AvailabilitySourceError(f"Failed to reach {url}: {e}") from e

        if response.status_code == 404 and not_found_message:
            raise MeetingNotFoundError(not_found_message)

        try:
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as e:
            raise AvailabilitySourceError(f"Request to {url} failed: {e}") from e
        except ValueError as e:
            raise AvailabilitySourceError(f"Invalid JSON from {url}: {e}") from e

    def _parse_availability_response(self, rows: List[Dict[str, Any]]) -> List[AvailabilityRecord]:
        """
        Parse availability rows into domain records.

        Row format:
        {
            "id": "...",
            "meeting_id": "...",
            "participant_name": "Alice",
            "available_date": "2025-06-01",
            "start_time": "09:00:00",
            "end_time": "10:00:00",
            "created_at": "..."
        }
        """
        records: List[AvailabilityRecord] = []

        for row in rows:
            if not isinstance(row, dict):
                logger.warning("Ignoring availability row that is not an object: %r", row)
                continue
            try:
                records.append(AvailabilityRecord.from_dict(row))
            except InvalidRecordError as e:
                logger.warning("Could not parse availability row: %s", e)

        return records
