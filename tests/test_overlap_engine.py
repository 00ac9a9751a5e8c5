"""
Tests for the overlap engine.
"""

import random

import pytest

from overlapfinder.domain.exceptions import InvalidRecordError
from overlapfinder.domain.models import AvailabilityRecord, CommonAvailabilitySlot, parse_clock_time
from overlapfinder.domain.overlap_engine import (
    OverlapEngine,
    compute_common_availability,
    group_by_date,
)


def _record(name, start, end, date="2025-06-01", record_id=""):
    return AvailabilityRecord(
        participant_name=name,
        date=date,
        start_time=start,
        end_time=end,
        id=record_id,
    )


def _slot(start, end, participants, date="2025-06-01"):
    return CommonAvailabilitySlot(
        date=date,
        start_time=start,
        end_time=end,
        participants=tuple(participants),
    )


class TestComputeCommonAvailability:
    """Scenario tests for compute_common_availability."""

    def test_partial_overlap(self):
        """Two overlapping ranges yield their intersection."""
        records = [
            _record("Alice", "09:00", "10:00"),
            _record("Bob", "09:30", "10:30"),
        ]

        assert compute_common_availability(records) == [
            _slot("09:30", "10:00", ["Alice", "Bob"]),
        ]

    def test_one_long_range_against_two_short(self):
        """A participant set change at a breakpoint starts a new slot."""
        records = [
            _record("Alice", "09:00", "11:00"),
            _record("Bob", "09:00", "10:00"),
            _record("Carol", "10:00", "11:00"),
        ]

        assert compute_common_availability(records) == [
            _slot("09:00", "10:00", ["Alice", "Bob"]),
            _slot("10:00", "11:00", ["Alice", "Carol"]),
        ]

    def test_single_record(self):
        assert compute_common_availability([_record("Alice", "09:00", "10:00")]) == []

    def test_empty_input(self):
        assert compute_common_availability([]) == []

    def test_different_dates_never_overlap(self):
        """Records on different dates are independent."""
        records = [
            _record("Alice", "09:00", "10:00", date="2025-06-01"),
            _record("Bob", "09:00", "10:00", date="2025-06-02"),
        ]

        assert compute_common_availability(records) == []

    def test_identical_ranges(self):
        records = [
            _record("Alice", "09:00", "10:00"),
            _record("Bob", "09:00", "10:00"),
        ]

        assert compute_common_availability(records) == [
            _slot("09:00", "10:00", ["Alice", "Bob"]),
        ]

    def test_adjacent_slots_with_different_participants_not_merged(self):
        """Touching slots stay separate when their participants differ."""
        records = [
            _record("Alice", "09:00", "10:00"),
            _record("Bob", "09:00", "09:30"),
            _record("Carol", "09:30", "10:00"),
        ]

        assert compute_common_availability(records) == [
            _slot("09:00", "09:30", ["Alice", "Bob"]),
            _slot("09:30", "10:00", ["Alice", "Carol"]),
        ]

    def test_nested_participant_splits_pair(self):
        """A third participant joining mid-range gets its own slot."""
        records = [
            _record("Alice", "09:00", "12:00"),
            _record("Bob", "09:00", "12:00"),
            _record("Carol", "10:00", "11:00"),
            _record("Dave", "13:00", "14:00"),
        ]

        assert compute_common_availability(records) == [
            _slot("09:00", "10:00", ["Alice", "Bob"]),
            _slot("10:00", "11:00", ["Alice", "Bob", "Carol"]),
            _slot("11:00", "12:00", ["Alice", "Bob"]),
        ]

    def test_split_records_of_one_participant_merge(self):
        """Back-to-back records of one person produce one maximal slot."""
        records = [
            _record("Alice", "09:00", "10:00"),
            _record("Alice", "10:00", "11:00"),
            _record("Bob", "08:00", "12:00"),
        ]

        assert compute_common_availability(records) == [
            _slot("09:00", "11:00", ["Alice", "Bob"]),
        ]

    def test_duplicate_records_count_once(self):
        """The same participant twice is still only one participant."""
        records = [
            _record("Alice", "09:00", "10:00", record_id="1"),
            _record("Alice", "09:00", "10:00", record_id="2"),
        ]

        assert compute_common_availability(records) == []

    def test_duplicate_records_do_not_duplicate_names(self):
        records = [
            _record("Alice", "09:00", "10:00"),
            _record("Alice", "09:30", "11:00"),
            _record("Bob", "09:00", "11:00"),
        ]

        assert compute_common_availability(records) == [
            _slot("09:00", "11:00", ["Alice", "Bob"]),
        ]

    def test_touching_ranges_do_not_overlap(self):
        """Ranges are half-open, so 09:00-10:00 and 10:00-11:00 share nothing."""
        records = [
            _record("Alice", "09:00", "10:00"),
            _record("Bob", "10:00", "11:00"),
        ]

        assert compute_common_availability(records) == []

    def test_gap_between_slots_is_not_merged(self):
        records = [
            _record("Alice", "09:00", "12:00"),
            _record("Bob", "09:00", "10:00"),
            _record("Bob", "11:00", "12:00"),
        ]

        assert compute_common_availability(records) == [
            _slot("09:00", "10:00", ["Alice", "Bob"]),
            _slot("11:00", "12:00", ["Alice", "Bob"]),
        ]

    def test_sorted_by_date_then_start(self):
        """Output is ordered by date, then start time."""
        records = [
            _record("Alice", "14:00", "15:00", date="2025-06-02"),
            _record("Bob", "14:00", "15:00", date="2025-06-02"),
            _record("Alice", "16:00", "17:00", date="2025-06-01"),
            _record("Bob", "16:00", "17:00", date="2025-06-01"),
            _record("Alice", "08:00", "09:00", date="2025-06-01"),
            _record("Bob", "08:00", "09:00", date="2025-06-01"),
        ]

        result = compute_common_availability(records)

        assert [(s.date, s.start_time) for s in result] == [
            ("2025-06-01", "08:00"),
            ("2025-06-01", "16:00"),
            ("2025-06-02", "14:00"),
        ]

    def test_participants_sorted_alphabetically(self):
        records = [
            _record("Zoe", "09:00", "10:00"),
            _record("Carol", "09:00", "10:00"),
            _record("Mia", "09:00", "10:00"),
        ]

        assert compute_common_availability(records)[0].participants == ("Carol", "Mia", "Zoe")

    def test_seconds_are_accepted(self):
        """Times serialized with seconds are accepted and reported as HH:MM."""
        records = [
            _record("Alice", "09:00:00", "10:00:00"),
            _record("Bob", "09:30:00", "10:30:00"),
        ]

        assert compute_common_availability(records) == [
            _slot("09:30", "10:00", ["Alice", "Bob"]),
        ]

    def test_end_of_day(self):
        records = [
            _record("Alice", "22:00", "24:00"),
            _record("Bob", "23:00", "24:00"),
        ]

        assert compute_common_availability(records) == [
            _slot("23:00", "24:00", ["Alice", "Bob"]),
        ]


class TestMalformedRecords:
    """Tests for the handling of malformed records."""

    def test_malformed_records_are_skipped(self):
        """Bad records are left out without aborting the computation."""
        bad_time = _record("Carol", "nine", "10:00", record_id="c")
        reversed_range = _record("Dave", "10:00", "09:00", record_id="d")
        empty_range = _record("Erin", "09:00", "09:00", record_id="e")
        records = [
            _record("Alice", "09:00", "10:00"),
            bad_time,
            _record("Bob", "09:30", "10:30"),
            reversed_range,
            empty_range,
        ]

        report = OverlapEngine().analyze(records)

        assert report.slots == [_slot("09:30", "10:00", ["Alice", "Bob"])]
        assert [rejected.record for rejected in report.rejected] == [
            bad_time, reversed_range, empty_range
        ]
        assert all(rejected.reason for rejected in report.rejected)

    def test_record_without_name_is_skipped(self):
        """A record with no participant name does not abort the computation."""
        nameless = _record(None, "09:00", "10:00")
        records = [
            nameless,
            _record("Alice", "09:00", "10:00"),
            _record("Bob", "09:00", "10:00"),
        ]

        report = OverlapEngine().analyze(records)

        assert report.slots == [_slot("09:00", "10:00", ["Alice", "Bob"])]
        assert [rejected.record for rejected in report.rejected] == [nameless]

    def test_rejected_records_do_not_count_toward_date_group(self):
        records = [
            _record("Alice", "09:00", "10:00"),
            _record("Bob", "10:00", "09:00"),
        ]

        report = OverlapEngine().analyze(records)

        assert report.slots == []
        assert len(report.rejected) == 1

    def test_strict_mode_raises(self):
        """Strict mode rejects the whole input on the first bad record."""
        records = [
            _record("Alice", "09:00", "10:00"),
            _record("Bob", "25:00", "26:00"),
        ]

        with pytest.raises(InvalidRecordError) as exc_info:
            OverlapEngine(strict=True).compute_common_availability(records)

        assert exc_info.value.record.participant_name == "Bob"

    def test_skipped_record_is_logged(self, caplog):
        records = [_record("Alice", "10:00", "09:00", record_id="x1")]

        with caplog.at_level("WARNING"):
            OverlapEngine().analyze(records)

        assert "x1" in caplog.text


def _random_records(rng, count):
    names = ["Alice", "Bob", "Carol", "Dave", "Erin"]
    dates = ["2025-06-01", "2025-06-02"]
    records = []
    for index in range(count):
        start = rng.randrange(0, 20) * 30
        end = start + rng.randrange(1, 8) * 30
        records.append(
            _record(
                rng.choice(names),
                f"{start // 60:02d}:{start % 60:02d}",
                f"{end // 60:02d}:{end % 60:02d}",
                date=rng.choice(dates),
                record_id=str(index),
            )
        )
    return records


def _available_at(records, date, minute):
    return {
        r.participant_name for r in records
        if r.date == date
        and parse_clock_time(r.start_time) <= minute < parse_clock_time(r.end_time)
    }


class TestProperties:
    """Property checks against randomly generated inputs."""

    @pytest.mark.parametrize("seed", range(25))
    def test_matches_minute_by_minute_reference(self, seed):
        """Every minute is attributed to a slot exactly when two or more people are free."""
        rng = random.Random(seed)
        records = _random_records(rng, rng.randrange(2, 12))

        result = compute_common_availability(records)

        for date in {r.date for r in records}:
            for minute in range(0, 24 * 60, 15):
                expected = _available_at(records, date, minute)
                covering = [
                    s for s in result
                    if s.date == date
                    and parse_clock_time(s.start_time) <= minute < parse_clock_time(s.end_time)
                ]
                if len(expected) >= 2:
                    assert len(covering) == 1
                    assert set(covering[0].participants) == expected
                else:
                    assert covering == []

    @pytest.mark.parametrize("seed", range(25))
    def test_output_invariants(self, seed):
        """Sorted, non-overlapping, maximal slots with two or more unique names."""
        rng = random.Random(seed)
        records = _random_records(rng, rng.randrange(2, 12))

        result = compute_common_availability(records)

        assert result == sorted(result, key=lambda s: (s.date, s.start_time))
        for slot in result:
            assert len(slot.participants) >= 2
            assert list(slot.participants) == sorted(set(slot.participants))
            assert slot.start_time < slot.end_time
        for previous, current in zip(result, result[1:]):
            if previous.date != current.date:
                continue
            assert previous.end_time <= current.start_time
            if previous.end_time == current.start_time:
                assert previous.participants != current.participants

    @pytest.mark.parametrize("seed", range(10))
    def test_order_independent_and_idempotent(self, seed):
        rng = random.Random(seed)
        records = _random_records(rng, 10)
        shuffled = list(records)
        rng.shuffle(shuffled)

        first = compute_common_availability(records)

        assert compute_common_availability(records) == first
        assert compute_common_availability(shuffled) == first

    def test_pairwise_overlaps_are_reported(self):
        """Any two overlapping records of different people show up together."""
        rng = random.Random(42)
        records = _random_records(rng, 15)
        result = compute_common_availability(records)

        for r1 in records:
            for r2 in records:
                if r1.date != r2.date or r1.participant_name == r2.participant_name:
                    continue
                start = max(parse_clock_time(r1.start_time), parse_clock_time(r2.start_time))
                end = min(parse_clock_time(r1.end_time), parse_clock_time(r2.end_time))
                if start >= end:
                    continue
                assert any(
                    s.date == r1.date
                    and parse_clock_time(s.start_time) < end
                    and parse_clock_time(s.end_time) > start
                    and {r1.participant_name, r2.participant_name} <= set(s.participants)
                    for s in result
                )


class TestGroupByDate:
    """Tests for the per-date listing helper."""

    def test_groups_and_sorts(self):
        records = [
            _record("Bob", "13:00", "14:00", date="2025-06-02"),
            _record("Carol", "11:00", "12:00", date="2025-06-01"),
            _record("Alice", "09:00", "10:00", date="2025-06-01"),
        ]

        grouped = group_by_date(records)

        assert list(grouped) == ["2025-06-01", "2025-06-02"]
        assert [r.participant_name for r in grouped["2025-06-01"]] == ["Alice", "Carol"]
        assert [r.participant_name for r in grouped["2025-06-02"]] == ["Bob"]

    def test_keeps_malformed_records(self):
        """Listing shows everything that was submitted."""
        records = [_record("Alice", "10:00", "09:00")]

        assert group_by_date(records) == {"2025-06-01": records}

    def test_ties_are_deterministic(self):
        records = [
            _record("Bob", "09:00", "10:00"),
            _record("Alice", "09:00", "10:00"),
        ]

        first = group_by_date(records)
        second = group_by_date(list(reversed(records)))

        assert first == second
        assert [r.participant_name for r in first["2025-06-01"]] == ["Alice", "Bob"]

    def test_empty(self):
        assert group_by_date([]) == {}

    def test_participants(self):
        records = [
            _record("Bob", "09:00", "10:00"),
            _record("Alice", "09:00", "10:00"),
            _record("Bob", "11:00", "12:00"),
        ]

        assert OverlapEngine.participants(records) == ["Alice", "Bob"]
