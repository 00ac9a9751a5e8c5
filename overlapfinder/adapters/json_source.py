"""
Availability source backed by a JSON export file.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from ..domain.exceptions import AvailabilitySourceError, InvalidRecordError
from ..domain.models import AvailabilityRecord, Meeting

logger = logging.getLogger(__name__)


class JsonAvailabilitySource:
    """
    Loads a meeting and its availability from a JSON file.

    This allows running the application offline and makes it easy to
    feed fixtures into the overlap engine. The file holds either a list
    of availability rows or an object of the form::

        {"meeting": {...}, "availability": [...]}
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._load_data()

    def _load_data(self):
        """Load meeting and availability data from the JSON file."""
        if not self.path.exists():
            raise AvailabilitySourceError(f"Availability file not found: {self.path}")

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise AvailabilitySourceError(f"Invalid JSON in {self.path}: {exc}") from exc

        if isinstance(data, list):
            self.meeting_data: Dict[str, Any] = {}
            self.rows: List[Any] = data
        elif isinstance(data, dict):
            self.meeting_data = data.get("meeting") or {}
            self.rows = data.get("availability") or []
        else:
            raise AvailabilitySourceError(
                f"{self.path} must contain a list or an object with an 'availability' list"
            )

    def get_meeting(self, meeting_id: str) -> Meeting:
        """
        Return the meeting described in the file.

        Files without a meeting object yield a meeting without title.
        """
        if not self.meeting_data:
            return Meeting(id=meeting_id)

        data = dict(self.meeting_data)
        data.setdefault("id", meeting_id)
        try:
            return Meeting.from_dict(data)
        except InvalidRecordError as exc:
            raise AvailabilitySourceError(f"Could not parse meeting in {self.path}: {exc}") from exc

    def get_availability(self, meeting_id: str) -> List[AvailabilityRecord]:
        """
        Return the availability rows for a meeting.

        Rows carrying a different ``meeting_id`` are ignored; rows without
        one are assumed to belong to the requested meeting.
        """
        records: List[AvailabilityRecord] = []

        for row in self.rows:
            if not isinstance(row, dict):
                logger.warning("Ignoring availability entry that is not an object: %r", row)
                continue

            row_meeting = row.get("meeting_id")
            if row_meeting and str(row_meeting) != meeting_id:
                continue

            try:
                records.append(AvailabilityRecord.from_dict(row))
            except InvalidRecordError as exc:
                # Skip invalid entries
                logger.warning("Skipping availability entry in %s: %s", self.path, exc)

        return records
