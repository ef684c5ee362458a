from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import time
from typing import Any, Mapping

from app.models.timetable_entry import TimetableEntry
from app.schemas.conflict import ConflictReport
from app.services.time_intervals import TimeInterval, format_time_of_day, overlaps
from app.services.timetable_store import TimetableEntryStore


@dataclass(frozen=True)
class ProposedEntry:
    class_id: str
    teacher_id: str
    subject_id: str
    day_of_week: int
    start_time: time
    end_time: time

    @classmethod
    def from_entry(cls, entry: TimetableEntry) -> "ProposedEntry":
        return cls(
            class_id=entry.class_id,
            teacher_id=entry.teacher_id,
            subject_id=entry.subject_id,
            day_of_week=entry.day_of_week,
            start_time=entry.start_time,
            end_time=entry.end_time,
        )

    def merged(self, changes: Mapping[str, Any]) -> "ProposedEntry":
        return replace(self, **changes)

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.day_of_week, self.start_time, self.end_time)

    def as_values(self) -> dict[str, Any]:
        return {
            "class_id": self.class_id,
            "teacher_id": self.teacher_id,
            "subject_id": self.subject_id,
            "day_of_week": self.day_of_week,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }


def _interval_of(entry: TimetableEntry) -> TimeInterval:
    return TimeInterval(entry.day_of_week, entry.start_time, entry.end_time)


class ConflictDetector:
    """Finds the first existing entry that a proposed entry would collide with.

    Teacher collisions are checked before class collisions and only the first
    one found is reported. The detector never writes and lets store errors
    propagate.
    """

    def __init__(self, store: TimetableEntryStore) -> None:
        self.store = store

    def check_conflicts(self, proposed: ProposedEntry, exclude_id: str | None = None) -> ConflictReport | None:
        interval = proposed.interval

        for existing in self.store.find_by_teacher_and_day(proposed.teacher_id, proposed.day_of_week, exclude_id):
            if overlaps(interval, _interval_of(existing)):
                return self._build_report("teacher", existing)

        for existing in self.store.find_by_class_and_day(proposed.class_id, proposed.day_of_week, exclude_id):
            if overlaps(interval, _interval_of(existing)):
                return self._build_report("class", existing)

        return None

    @staticmethod
    def _build_report(conflict_type: str, existing: TimetableEntry) -> ConflictReport:
        class_name = existing.school_class.name
        subject_name = existing.subject.name
        teacher_name = existing.teacher.name
        time_range = _interval_of(existing).describe()
        if conflict_type == "teacher":
            details = f"Teacher already assigned to Class {class_name} for {subject_name} from {time_range}"
        else:
            details = f"Class already scheduled for {subject_name} with {teacher_name} from {time_range}"
        return ConflictReport(
            conflict_type=conflict_type,
            entry_id=existing.id,
            day_of_week=existing.day_of_week,
            start_time=format_time_of_day(existing.start_time),
            end_time=format_time_of_day(existing.end_time),
            class_name=class_name,
            subject_name=subject_name,
            teacher_name=teacher_name,
            details=details,
        )
