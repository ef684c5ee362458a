"""Seed demo classes, teachers, subjects and a conflict-free weekly timetable.

Run:
  PYTHONPATH=backend python scripts/seed_demo_timetable.py
"""

from __future__ import annotations

import os

from sqlalchemy import select

from app.core.exceptions import ScheduleConflictError
from app.core.security import create_access_token
from app.db.bootstrap import ensure_runtime_schema_compatibility
from app.db.session import SessionLocal
from app.models.school_class import SchoolClass
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.models.user import User, UserRole
from app.services.timetable_service import create_entry

ADMIN_EMAIL = os.getenv("DEMO_ADMIN_EMAIL", "admin.demo@schooldesk.local")
WEEKDAYS = [1, 2, 3, 4, 5]  # Monday..Friday
PERIODS = [("08:00:00", "09:00:00"), ("09:00:00", "10:00:00"), ("10:00:00", "11:00:00")]

CLASSES = [("Grade 5A", "101"), ("Grade 5B", "102")]
SUBJECTS = [("Mathematics", "MATH"), ("Science", "SCI"), ("English", "ENG")]
TEACHERS = [
    ("Priya Sharma", "priya.sharma@schooldesk.local", "Mathematics"),
    ("Rahul Verma", "rahul.verma@schooldesk.local", "Science"),
    ("Anita Desai", "anita.desai@schooldesk.local", "Languages"),
]


def _get_or_create(session, model, lookup: dict, **values):
    existing = session.execute(select(model).filter_by(**lookup)).scalar_one_or_none()
    if existing is not None:
        return existing
    record = model(**lookup, **values)
    session.add(record)
    session.flush()
    return record


def main() -> None:
    ensure_runtime_schema_compatibility()
    with SessionLocal() as session:
        admin = _get_or_create(session, User, {"email": ADMIN_EMAIL}, name="Demo Admin", role=UserRole.admin)
        classes = [_get_or_create(session, SchoolClass, {"name": name}, room_number=room) for name, room in CLASSES]
        subjects = [_get_or_create(session, Subject, {"code": code}, name=name) for name, code in SUBJECTS]
        teachers = [
            _get_or_create(session, Teacher, {"email": email}, name=name, department=department)
            for name, email, department in TEACHERS
        ]
        session.commit()

        created = skipped = 0
        for day in WEEKDAYS:
            for period_index, (start, end) in enumerate(PERIODS):
                for class_index, school_class in enumerate(classes):
                    # Rotate so no teacher is in two classes during the same period.
                    slot = (period_index + class_index + day) % len(teachers)
                    fields = {
                        "class_id": school_class.id,
                        "teacher_id": teachers[slot].id,
                        "subject_id": subjects[slot].id,
                        "day_of_week": day,
                        "start_time": start,
                        "end_time": end,
                    }
                    try:
                        create_entry(session, fields, can_edit=True, actor=admin)
                        created += 1
                    except ScheduleConflictError as exc:
                        skipped += 1
                        print(f"  skipped: {exc.report.details}")

        print(f"\nTimetable entries created: {created}, skipped as conflicting: {skipped}")
        print(f"Admin bearer token for {admin.email}:\n  {create_access_token(admin.id)}")


if __name__ == "__main__":
    main()
