"""Weekday-scoped time-of-day intervals.

Intervals are half-open, ``[start, end)``: a period ending at 10:00 and
another starting at 10:00 do not overlap. Days use 0 = Sunday through
6 = Saturday everywhere in the application.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import time

DAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)
MIN_DAY_OF_WEEK = 0
MAX_DAY_OF_WEEK = 6

TIME_OF_DAY_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)(?::([0-5]\d))?$")


def day_name(day_of_week: int) -> str:
    if not MIN_DAY_OF_WEEK <= day_of_week <= MAX_DAY_OF_WEEK:
        raise ValueError(f"day_of_week must be between {MIN_DAY_OF_WEEK} and {MAX_DAY_OF_WEEK}")
    return DAY_NAMES[day_of_week]


def parse_time_of_day(value: str) -> time:
    """Parse ``HH:MM:SS`` (or ``HH:MM``, seconds = 0) into a naive ``time``."""
    if not isinstance(value, str):
        raise ValueError("Time must be a string in HH:MM:SS format")
    match = TIME_OF_DAY_PATTERN.match(value.strip())
    if match is None:
        raise ValueError("Time must be in HH:MM:SS 24-hour format")
    hours, minutes, seconds = match.groups()
    return time(int(hours), int(minutes), int(seconds or 0))


def format_time_of_day(value: time) -> str:
    return value.strftime("%H:%M:%S")


def format_display_time(value: time) -> str:
    # Seconds are only shown when present so nothing is silently truncated.
    if value.second:
        return value.strftime("%H:%M:%S")
    return value.strftime("%H:%M")


@dataclass(frozen=True)
class TimeInterval:
    day_of_week: int
    start: time
    end: time

    def __post_init__(self) -> None:
        if not self.start < self.end:
            raise ValueError("Interval start must be before its end")

    def overlaps(self, other: "TimeInterval") -> bool:
        return overlaps(self, other)

    def describe(self) -> str:
        return f"{format_display_time(self.start)} to {format_display_time(self.end)}"


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    """True iff the two half-open intervals share an instant on the same day."""
    if a.day_of_week != b.day_of_week:
        return False
    return a.start < b.end and b.start < a.end
