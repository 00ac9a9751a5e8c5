"""
Domain layer - Pure business logic without external dependencies.
"""

from .exceptions import (
    AvailabilitySourceError,
    InvalidRecordError,
    InvalidTimeError,
    MeetingNotFoundError,
    OverlapFinderError,
)
from .models import (
    AvailabilityRecord,
    CommonAvailabilitySlot,
    Meeting,
    OverlapReport,
    RejectedRecord,
    TimeRange,
)
from .overlap_engine import OverlapEngine, compute_common_availability, group_by_date

__all__ = [
    "AvailabilityRecord",
    "AvailabilitySourceError",
    "CommonAvailabilitySlot",
    "InvalidRecordError",
    "InvalidTimeError",
    "Meeting",
    "MeetingNotFoundError",
    "OverlapEngine",
    "OverlapFinderError",
    "OverlapReport",
    "RejectedRecord",
    "TimeRange",
    "compute_common_availability",
    "group_by_date",
]
