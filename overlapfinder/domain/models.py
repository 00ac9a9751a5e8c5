"""
Domain models for availability records and common availability slots.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

import pendulum

from .exceptions import InvalidRecordError, InvalidTimeError

MINUTES_PER_DAY = 24 * 60

_CLOCK_TIME_PATTERN = re.compile(r"^([0-9]{2}):([0-9]{2})(?::([0-9]{2}))?$")

_TIMESTAMP_DATE_PATTERN = re.compile(r"^([0-9]{4}-[0-9]{2}-[0-9]{2})T")


def parse_clock_time(value: str) -> int:
    """
    Convert a ``HH:MM`` clock time into minutes since midnight.

    ``HH:MM:SS`` is accepted as well because SQL ``TIME`` columns serialize
    that way; the seconds are dropped. ``24:00`` denotes the end of the day.

    Raises:
        InvalidTimeError: If the value is not a valid clock time
    """
    if not isinstance(value, str):
        raise InvalidTimeError(f"Time must be a string, got {value!r}")

    match = _CLOCK_TIME_PATTERN.match(value.strip())
    if not match:
        raise InvalidTimeError(f"Time {value!r} is not in HH:MM format")

    hours = int(match.group(1))
    minutes = int(match.group(2))
    seconds = int(match.group(3) or 0)

    if minutes > 59 or seconds > 59:
        raise InvalidTimeError(f"Time {value!r} is out of range")
    if hours == 24 and (minutes or seconds):
        raise InvalidTimeError(f"Time {value!r} is past the end of the day")
    if hours > 24:
        raise InvalidTimeError(f"Time {value!r} is out of range")

    return hours * 60 + minutes


def format_clock_time(minutes: int) -> str:
    """Format minutes since midnight as ``HH:MM``."""
    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise ValueError(f"Minutes must be between 0 and {MINUTES_PER_DAY}, got {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_12h(value: str) -> str:
    """
    Format a ``HH:MM`` time for display on a 12-hour clock.

    Example: ``"13:05"`` -> ``"1:05 PM"``
    """
    minutes = parse_clock_time(value)
    hour24 = (minutes // 60) % 24
    hour12 = 12 if hour24 == 0 else hour24 - 12 if hour24 > 12 else hour24
    suffix = "PM" if hour24 >= 12 else "AM"
    return f"{hour12}:{minutes % 60:02d} {suffix}"


def format_date_long(date: str) -> str:
    """
    Format an ISO date for display, e.g. ``"Sunday, June 1, 2025"``.

    Dates that are not ISO formatted are returned unchanged, since the engine
    treats them as opaque grouping keys.
    """
    try:
        parsed = pendulum.from_format(date, "YYYY-MM-DD")
    except ValueError:
        return date
    return parsed.format("dddd, MMMM D, YYYY")


@dataclass(frozen=True)
class TimeRange:
    """
    Represents a half-open range of minutes within a single day.

    Invariant: start must be before end.
    """
    start: int
    end: int

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start minute {self.start} must be before end minute {self.end}")

    @classmethod
    def from_clock_times(cls, start_time: str, end_time: str) -> "TimeRange":
        """Build a range from two ``HH:MM`` strings."""
        return cls(start=parse_clock_time(start_time), end=parse_clock_time(end_time))

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.end - self.start

    def contains(self, other: "TimeRange") -> bool:
        """Check if this range fully covers another."""
        return self.start <= other.start and self.end >= other.end


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return value
    return None


@dataclass(frozen=True)
class AvailabilityRecord:
    """
    One participant's declared open time window on one date.

    Times are kept as submitted; validation happens when the engine
    converts them into a TimeRange.
    """
    participant_name: str
    date: str
    start_time: str
    end_time: str
    id: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AvailabilityRecord":
        """
        Build a record from an API row or fixture entry.

        Accepts the REST API column names (``available_date``) as well as
        ``date`` and camelCase keys.

        Raises:
            InvalidRecordError: If a required field is missing
        """
        participant_name = _pick(data, "participant_name", "participantName")
        date = _pick(data, "available_date", "date")
        start_time = _pick(data, "start_time", "startTime")
        end_time = _pick(data, "end_time", "endTime")

        missing = [
            name for name, value in (
                ("participant_name", participant_name),
                ("date", date),
                ("start_time", start_time),
                ("end_time", end_time),
            )
            if value is None
        ]
        if missing:
            raise InvalidRecordError(
                f"Availability entry is missing field(s): {', '.join(missing)}",
                record=dict(data),
            )

        # Date columns may arrive as full ISO timestamps
        date = str(date)
        timestamp = _TIMESTAMP_DATE_PATTERN.match(date)
        if timestamp:
            date = timestamp.group(1)

        return cls(
            participant_name=str(participant_name),
            date=date,
            start_time=str(start_time),
            end_time=str(end_time),
            id=str(data.get("id") or ""),
        )

    def time_range(self) -> TimeRange:
        """
        Convert the record's times into a TimeRange.

        Raises:
            InvalidRecordError: If the times are malformed or out of order
        """
        if not isinstance(self.participant_name, str) or not self.participant_name.strip():
            raise InvalidRecordError("participant name is missing or empty", record=self)
        if not isinstance(self.date, str) or not self.date:
            raise InvalidRecordError("date is missing", record=self)
        try:
            start = parse_clock_time(self.start_time)
            end = parse_clock_time(self.end_time)
        except InvalidTimeError as exc:
            raise InvalidRecordError(str(exc), record=self) from exc

        if start >= end:
            raise InvalidRecordError(
                f"start time {self.start_time} is not before end time {self.end_time}",
                record=self,
            )
        return TimeRange(start=start, end=end)

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "participant_name": self.participant_name,
            "date": self.date,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }


@dataclass(frozen=True)
class CommonAvailabilitySlot:
    """
    A maximal interval on one date during which the same set of
    two or more participants are all available.
    """
    date: str
    start_time: str
    end_time: str
    participants: Tuple[str, ...]

    def time_range(self) -> TimeRange:
        return TimeRange.from_clock_times(self.start_time, self.end_time)

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.time_range().duration_minutes()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "participants": list(self.participants),
        }

    def format_time_range(self, time_format: str = "12h") -> str:
        if time_format == "24h":
            return f"{self.start_time} - {self.end_time}"
        return f"{format_12h(self.start_time)} - {format_12h(self.end_time)}"


@dataclass(frozen=True)
class Meeting:
    """A meeting that participants submit availability for."""
    id: str
    title: str = ""
    creator_name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Meeting":
        meeting_id = data.get("id")
        if not meeting_id:
            raise InvalidRecordError("Meeting entry has no id", record=dict(data))
        return cls(
            id=str(meeting_id),
            title=str(data.get("title") or ""),
            creator_name=str(_pick(data, "creator_name", "creatorName") or ""),
        )


@dataclass(frozen=True)
class RejectedRecord:
    """A record that was excluded from the overlap computation."""
    record: AvailabilityRecord
    reason: str


@dataclass
class OverlapReport:
    """Result of an overlap computation including diagnostics."""
    slots: List[CommonAvailabilitySlot] = field(default_factory=list)
    rejected: List[RejectedRecord] = field(default_factory=list)
