"""Tests for slot generation from weekly schedules."""

from dataclasses import dataclass
from datetime import date, datetime, time

import pytest

from slotkeeper.core.exceptions import ValidationError
from slotkeeper.services.slot_generator import day_of_week_index, generate_windows

MONDAY = date(2030, 1, 7)


@dataclass
class Row:
    day_of_week: int
    start_time: time
    end_time: time


def test_day_of_week_index_starts_on_sunday():
    assert day_of_week_index(date(2030, 1, 6)) == 0  # Sunday
    assert day_of_week_index(MONDAY) == 1
    assert day_of_week_index(date(2030, 1, 12)) == 6  # Saturday


def test_range_too_short_for_one_window_yields_nothing():
    rows = [Row(1, time(9, 0), time(9, 20))]
    assert generate_windows(rows, MONDAY, 30) == []


def test_leftover_shorter_than_duration_keeps_the_whole_window():
    rows = [Row(1, time(9, 0), time(9, 50))]
    assert generate_windows(rows, MONDAY, 30) == [
        (datetime(2030, 1, 7, 9, 0), datetime(2030, 1, 7, 9, 30)),
    ]


def test_partial_trailing_window_is_dropped_not_truncated():
    rows = [Row(1, time(9, 0), time(10, 45))]
    windows = generate_windows(rows, MONDAY, 30)
    assert [(s.time(), e.time()) for s, e in windows] == [
        (time(9, 0), time(9, 30)),
        (time(9, 30), time(10, 0)),
        (time(10, 0), time(10, 30)),
    ]


def test_window_ending_exactly_at_range_end_is_kept():
    rows = [Row(1, time(9, 0), time(10, 0))]
    windows = generate_windows(rows, MONDAY, 60)
    assert windows == [(datetime(2030, 1, 7, 9, 0), datetime(2030, 1, 7, 10, 0))]


def test_multiple_ranges_concatenate_in_given_order():
    rows = [
        Row(1, time(14, 0), time(15, 0)),
        Row(1, time(9, 0), time(10, 0)),
    ]
    windows = generate_windows(rows, MONDAY, 60)
    assert [s.hour for s, _ in windows] == [14, 9]


def test_other_weekdays_are_ignored():
    rows = [Row(2, time(9, 0), time(17, 0))]
    assert generate_windows(rows, MONDAY, 30) == []


def test_no_schedule_is_empty_not_error():
    assert generate_windows([], MONDAY, 30) == []


def test_generation_is_deterministic():
    rows = [Row(1, time(8, 0), time(12, 0)), Row(1, time(13, 0), time(17, 0))]
    first = generate_windows(rows, MONDAY, 45)
    second = generate_windows(rows, MONDAY, 45)
    assert first == second
    assert len(first) == 10


@pytest.mark.parametrize("duration", [0, -15, None])
def test_non_positive_duration_is_rejected(duration):
    with pytest.raises(ValidationError):
        generate_windows([Row(1, time(9, 0), time(10, 0))], MONDAY, duration)
