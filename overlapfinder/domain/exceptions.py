"""
Domain-specific exception hierarchy for the overlap finder application.
"""


class OverlapFinderError(Exception):
    """Base class for all application-level errors."""


class InvalidTimeError(ValueError):
    """Raised when a clock time string cannot be interpreted."""


class InvalidRecordError(OverlapFinderError, ValueError):
    """Raised when an availability record cannot be used for computation."""

    def __init__(self, reason: str, record=None):
        super().__init__(reason)
        self.reason = reason
        self.record = record


class AvailabilitySourceError(OverlapFinderError):
    """Raised when availability data cannot be fetched or parsed."""


class MeetingNotFoundError(AvailabilitySourceError):
    """Raised when the requested meeting does not exist."""
