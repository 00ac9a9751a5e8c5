"""
Application services for finding common meeting availability.

The service coordinates fetching availability records via a source adapter
and delegates the overlap calculation to the domain-level ``OverlapEngine``.
This keeps the CLI thin and improves testability by allowing the data
source to be replaced via a simple protocol.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Protocol

from ..domain.models import AvailabilityRecord, Meeting, OverlapReport
from ..domain.overlap_engine import OverlapEngine

logger = logging.getLogger(__name__)


class AvailabilitySourceProtocol(Protocol):
    """Protocol describing the data source behaviour needed by the service."""

    def get_meeting(self, meeting_id: str) -> Meeting:
        """Return the meeting with the given id."""

    def get_availability(self, meeting_id: str) -> List[AvailabilityRecord]:
        """Return all availability records submitted for a meeting."""


class AvailabilityService:
    """
    Orchestrates availability retrieval and overlap calculation.

    Results are recomputed in full on every call; nothing is cached
    between fetches.
    """

    def __init__(
        self,
        source: AvailabilitySourceProtocol,
        engine: OverlapEngine | None = None,
    ) -> None:
        self._source = source
        self._engine = engine or OverlapEngine()

    def get_meeting(self, meeting_id: str) -> Meeting:
        return self._source.get_meeting(meeting_id)

    def fetch_records(self, meeting_id: str) -> List[AvailabilityRecord]:
        """Fetch availability records for the requested meeting."""
        records = list(self._source.get_availability(meeting_id))
        logger.debug("Fetched %d availability record(s) for meeting %s", len(records), meeting_id)
        return records

    def find_common_slots(self, meeting_id: str) -> OverlapReport:
        """
        Retrieve availability and compute common slots.
        """
        records = self.fetch_records(meeting_id)
        return self._engine.analyze(records)

    def grouped_availability(self, meeting_id: str) -> Dict[str, List[AvailabilityRecord]]:
        """Retrieve availability grouped by date for plain listing."""
        records = self.fetch_records(meeting_id)
        return self._engine.group_by_date(records)
