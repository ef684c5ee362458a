from datetime import time
from itertools import product

import pytest

from app.services.time_intervals import (
    TimeInterval,
    day_name,
    format_display_time,
    format_time_of_day,
    overlaps,
    parse_time_of_day,
)


def interval(start: str, end: str, day: int = 1) -> TimeInterval:
    return TimeInterval(day, parse_time_of_day(start), parse_time_of_day(end))


def test_overlap_is_symmetric():
    points = ["08:00", "09:00", "09:30", "10:00", "11:00"]
    ranges = [(s, e) for s, e in product(points, points) if s < e]
    for (s1, e1), (s2, e2) in product(ranges, ranges):
        a, b = interval(s1, e1), interval(s2, e2)
        assert overlaps(a, b) == overlaps(b, a)


def test_touching_boundaries_do_not_overlap():
    assert not overlaps(interval("09:00", "10:00"), interval("10:00", "11:00"))
    assert not overlaps(interval("10:00", "11:00"), interval("09:00", "10:00"))


def test_identical_intervals_overlap():
    assert overlaps(interval("09:00", "10:00"), interval("09:00", "10:00"))


@pytest.mark.parametrize(
    "proposed",
    [("10:00", "12:00"), ("08:00", "09:30"), ("10:00", "11:00"), ("08:00", "13:00")],
)
def test_partial_overlap_and_containment(proposed):
    existing = interval("09:00", "11:00")
    assert overlaps(interval(*proposed), existing)


def test_different_days_never_overlap():
    assert not overlaps(interval("09:00", "10:00", day=1), interval("09:00", "10:00", day=2))


def test_seconds_are_respected_at_boundaries():
    assert not overlaps(interval("09:00:00", "09:59:30"), interval("09:59:30", "11:00:00"))
    assert overlaps(interval("09:00:00", "09:59:31"), interval("09:59:30", "11:00:00"))


def test_parse_time_accepts_seconds_and_short_form():
    assert parse_time_of_day("07:05:09") == time(7, 5, 9)
    assert parse_time_of_day("23:59") == time(23, 59, 0)


@pytest.mark.parametrize("value", ["24:00:00", "9:00", "09:60:00", "09:00:60", "nine", "", "09:00:00Z", 900, None])
def test_parse_time_rejects_malformed_values(value):
    with pytest.raises(ValueError):
        parse_time_of_day(value)


def test_interval_requires_start_before_end():
    with pytest.raises(ValueError):
        interval("10:00", "10:00")
    with pytest.raises(ValueError):
        interval("11:00", "10:00")


def test_formatting_keeps_seconds():
    assert format_time_of_day(time(9, 0)) == "09:00:00"
    assert format_display_time(time(9, 0)) == "09:00"
    assert format_display_time(time(9, 0, 30)) == "09:00:30"
    assert interval("09:00", "10:00").describe() == "09:00 to 10:00"


def test_day_names_start_on_sunday():
    assert day_name(0) == "Sunday"
    assert day_name(1) == "Monday"
    assert day_name(6) == "Saturday"
    with pytest.raises(ValueError):
        day_name(7)
