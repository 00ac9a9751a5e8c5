"""
Core business logic for finding common availability.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from .exceptions import InvalidRecordError
from .models import (
    AvailabilityRecord,
    CommonAvailabilitySlot,
    OverlapReport,
    RejectedRecord,
    TimeRange,
    format_clock_time,
)

logger = logging.getLogger(__name__)

MIN_PARTICIPANTS = 2


class OverlapEngine:
    """
    Calculates the intervals where two or more participants are available.

    Algorithm (independently for every date):
    1. Collect every start and end time as a breakpoint
    2. For each pair of consecutive breakpoints, find the participants
       whose records cover the whole elementary interval
    3. Keep elementary intervals with at least two distinct participants
    4. Merge adjacent intervals that share the same participant set
    5. Sort by date and start time

    Malformed records (unparseable times, start not before end) are left
    out. By default they are reported in ``OverlapReport.rejected``; with
    ``strict=True`` the first one raises ``InvalidRecordError``.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict

    def compute_common_availability(
        self,
        records: Iterable[AvailabilityRecord]
    ) -> List[CommonAvailabilitySlot]:
        """
        Find all common availability slots.

        Args:
            records: Availability records in any order

        Returns:
            Slots sorted by date and start time
        """
        return self.analyze(records).slots

    def analyze(self, records: Iterable[AvailabilityRecord]) -> OverlapReport:
        """
        Find all common availability slots and collect rejected records.

        Args:
            records: Availability records in any order

        Returns:
            OverlapReport with the slots and any records that were skipped

        Raises:
            InvalidRecordError: In strict mode, for the first malformed record
        """
        report = OverlapReport()
        ranges_by_date: Dict[str, List[Tuple[str, TimeRange]]] = {}

        for record in records:
            try:
                time_range = record.time_range()
            except InvalidRecordError as exc:
                if self.strict:
                    raise
                logger.warning(
                    "Skipping availability record %r of %r: %s",
                    record.id, record.participant_name, exc.reason
                )
                report.rejected.append(RejectedRecord(record=record, reason=exc.reason))
                continue

            ranges_by_date.setdefault(record.date, []).append(
                (record.participant_name, time_range)
            )

        for date in sorted(ranges_by_date):
            entries = ranges_by_date[date]

            if len(entries) < MIN_PARTICIPANTS:
                continue

            day_slots = self._merge_adjacent_slots(
                self._elementary_slots(date, entries)
            )
            logger.debug(
                "%s: %d record(s) produced %d common slot(s)",
                date, len(entries), len(day_slots)
            )
            report.slots.extend(day_slots)

        report.slots.sort(key=lambda slot: (slot.date, slot.start_time))
        return report

    def group_by_date(
        self,
        records: Iterable[AvailabilityRecord]
    ) -> Dict[str, List[AvailabilityRecord]]:
        """
        Group records by date for plain listing.

        Dates are ordered ascending and each date's records are sorted by
        start time. No validation is applied; every record is listed.
        """
        grouped: Dict[str, List[AvailabilityRecord]] = {}

        for record in records:
            grouped.setdefault(record.date, []).append(record)

        return {
            date: sorted(
                grouped[date],
                key=lambda r: (r.start_time, r.end_time, r.participant_name)
            )
            for date in sorted(grouped)
        }

    @staticmethod
    def participants(records: Iterable[AvailabilityRecord]) -> List[str]:
        """Return the sorted distinct participant names."""
        return sorted({record.participant_name for record in records})

    def _elementary_slots(
        self,
        date: str,
        entries: Sequence[Tuple[str, TimeRange]]
    ) -> List[CommonAvailabilitySlot]:
        """
        Split one date into elementary intervals between breakpoints.

        Within an elementary interval the set of available participants
        cannot change, so every minute is attributed to exactly one slot.
        """
        breakpoints = sorted(
            {tr.start for _, tr in entries} | {tr.end for _, tr in entries}
        )
        slots: List[CommonAvailabilitySlot] = []

        for start, end in zip(breakpoints, breakpoints[1:]):
            if start >= end:
                continue

            interval = TimeRange(start=start, end=end)
            names = {name for name, tr in entries if tr.contains(interval)}

            if len(names) >= MIN_PARTICIPANTS:
                slots.append(
                    CommonAvailabilitySlot(
                        date=date,
                        start_time=format_clock_time(start),
                        end_time=format_clock_time(end),
                        participants=tuple(sorted(names)),
                    )
                )

        return slots

    def _merge_adjacent_slots(
        self,
        slots: List[CommonAvailabilitySlot]
    ) -> List[CommonAvailabilitySlot]:
        """
        Merge touching slots that have the same participants.

        Example: [09:00-10:00 (A, B), 10:00-11:00 (A, B)] -> [09:00-11:00 (A, B)]
        """
        if not slots:
            return []

        merged: List[CommonAvailabilitySlot] = [slots[0]]

        for current in slots[1:]:
            last = merged[-1]

            if last.end_time == current.start_time and last.participants == current.participants:
                merged[-1] = CommonAvailabilitySlot(
                    date=last.date,
                    start_time=last.start_time,
                    end_time=current.end_time,
                    participants=last.participants,
                )
            else:
                merged.append(current)

        return merged


def compute_common_availability(
    records: Iterable[AvailabilityRecord]
) -> List[CommonAvailabilitySlot]:
    """Find common availability slots, skipping malformed records."""
    return OverlapEngine().compute_common_availability(records)


def group_by_date(
    records: Iterable[AvailabilityRecord]
) -> Dict[str, List[AvailabilityRecord]]:
    """Group records by date, each date sorted by start time."""
    return OverlapEngine().group_by_date(records)
