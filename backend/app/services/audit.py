from __future__ import annotations

from sqlalchemy.orm import Session

from app.models.activity_log import ActivityLog
from app.models.timetable_entry import TimetableEntry
from app.models.user import User
from app.services.time_intervals import format_time_of_day


def entry_snapshot(entry: TimetableEntry) -> dict:
    return {
        "class_id": entry.class_id,
        "teacher_id": entry.teacher_id,
        "subject_id": entry.subject_id,
        "day_of_week": entry.day_of_week,
        "start_time": format_time_of_day(entry.start_time),
        "end_time": format_time_of_day(entry.end_time),
    }


def log_activity(
    db: Session,
    *,
    user: User | None,
    action: str,
    entity_type: str | None = None,
    entity_id: str | None = None,
    details: dict | None = None,
) -> None:
    record = ActivityLog(
        user_id=user.id if user is not None else None,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details or {},
    )
    db.add(record)
