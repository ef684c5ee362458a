from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import ResourceNotFoundError, StoreUnavailableError
from app.models.school_class import SchoolClass
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.models.timetable_entry import TimetableEntry

logger = logging.getLogger(__name__)

ENTRY_FIELDS = ("class_id", "teacher_id", "subject_id", "day_of_week", "start_time", "end_time")
REFERENCE_MODELS = {
    "class_id": (SchoolClass, "Class"),
    "teacher_id": (Teacher, "Teacher"),
    "subject_id": (Subject, "Subject"),
}


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Timetable store failure during %s", operation)
        raise StoreUnavailableError(details={"operation": operation}) from exc


class TimetableEntryStore:
    """Reads and writes timetable entries on a caller-owned session.

    The store only flushes; committing or rolling back is up to the caller,
    so a rejected mutation never leaves a partial write behind.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, entry_id: str) -> TimetableEntry:
        with store_errors("get"):
            entry = self.db.get(TimetableEntry, entry_id)
        if entry is None:
            raise ResourceNotFoundError("Timetable entry", entry_id)
        return entry

    def list_entries(
        self,
        *,
        class_id: str | None = None,
        teacher_id: str | None = None,
        day_of_week: int | None = None,
    ) -> list[TimetableEntry]:
        query = select(TimetableEntry)
        if class_id is not None:
            query = query.where(TimetableEntry.class_id == class_id)
        if teacher_id is not None:
            query = query.where(TimetableEntry.teacher_id == teacher_id)
        if day_of_week is not None:
            query = query.where(TimetableEntry.day_of_week == day_of_week)
        query = query.order_by(TimetableEntry.day_of_week, TimetableEntry.start_time, TimetableEntry.id)
        with store_errors("list"):
            return list(self.db.execute(query).scalars())

    def find_by_teacher_and_day(
        self, teacher_id: str, day_of_week: int, exclude_id: str | None = None
    ) -> list[TimetableEntry]:
        return self._find_scoped(TimetableEntry.teacher_id == teacher_id, day_of_week, exclude_id)

    def find_by_class_and_day(
        self, class_id: str, day_of_week: int, exclude_id: str | None = None
    ) -> list[TimetableEntry]:
        return self._find_scoped(TimetableEntry.class_id == class_id, day_of_week, exclude_id)

    def _find_scoped(self, scope_clause, day_of_week: int, exclude_id: str | None) -> list[TimetableEntry]:
        query = select(TimetableEntry).where(scope_clause, TimetableEntry.day_of_week == day_of_week)
        if exclude_id is not None:
            query = query.where(TimetableEntry.id != exclude_id)
        query = query.order_by(TimetableEntry.start_time, TimetableEntry.id)
        with store_errors("find"):
            return list(self.db.execute(query).scalars())

    def ensure_references(self, values: Mapping[str, Any]) -> None:
        """Raise ``ResourceNotFoundError`` for the first referenced id that does not exist."""
        for field_name, (model, label) in REFERENCE_MODELS.items():
            if field_name not in values:
                continue
            with store_errors("lookup"):
                exists = self.db.get(model, values[field_name]) is not None
            if not exists:
                raise ResourceNotFoundError(label, values[field_name])

    def insert(self, values: Mapping[str, Any]) -> TimetableEntry:
        self.ensure_references(values)
        entry = TimetableEntry(**{name: values[name] for name in ENTRY_FIELDS})
        with store_errors("insert"):
            self.db.add(entry)
            self.db.flush()
        return entry

    def update(self, entry_id: str, changes: Mapping[str, Any]) -> TimetableEntry:
        entry = self.get(entry_id)
        self.ensure_references(changes)
        unknown = set(changes) - set(ENTRY_FIELDS)
        if unknown:
            raise ValueError(f"Unknown timetable entry fields: {', '.join(sorted(unknown))}")
        with store_errors("update"):
            for key, value in changes.items():
                setattr(entry, key, value)
            self.db.flush()
        return entry

    def delete(self, entry_id: str) -> None:
        entry = self.get(entry_id)
        with store_errors("delete"):
            self.db.delete(entry)
            self.db.flush()
