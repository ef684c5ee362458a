from datetime import time

import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import ResourceNotFoundError, StoreUnavailableError
from app.services.timetable_store import TimetableEntryStore


def values(school, **overrides):
    base = {
        "class_id": school.class_a,
        "teacher_id": school.teacher_t,
        "subject_id": school.math,
        "day_of_week": 1,
        "start_time": time(9, 0),
        "end_time": time(10, 0),
    }
    base.update(overrides)
    return base


def test_insert_and_scoped_lookups(db, school):
    store = TimetableEntryStore(db)
    first = store.insert(values(school))
    second = store.insert(values(school, start_time=time(11, 0), end_time=time(12, 0), class_id=school.class_b))
    store.insert(values(school, day_of_week=2))
    db.commit()

    teacher_monday = store.find_by_teacher_and_day(school.teacher_t, 1)
    assert [entry.id for entry in teacher_monday] == [first.id, second.id]

    assert [entry.id for entry in store.find_by_teacher_and_day(school.teacher_t, 1, exclude_id=first.id)] == [second.id]
    assert [entry.id for entry in store.find_by_class_and_day(school.class_a, 1)] == [first.id]
    assert store.find_by_class_and_day(school.class_b, 2) == []


def test_insert_rejects_unknown_references(db, school):
    store = TimetableEntryStore(db)
    with pytest.raises(ResourceNotFoundError) as excinfo:
        store.insert(values(school, subject_id="missing-subject"))
    assert excinfo.value.resource_type == "Subject"
    assert excinfo.value.status_code == 404


def test_get_update_delete(db, school):
    store = TimetableEntryStore(db)
    entry = store.insert(values(school))
    db.commit()

    updated = store.update(entry.id, {"subject_id": school.science, "end_time": time(10, 30)})
    db.commit()
    assert updated.subject_id == school.science
    assert store.get(entry.id).end_time == time(10, 30)

    store.delete(entry.id)
    db.commit()
    with pytest.raises(ResourceNotFoundError):
        store.get(entry.id)
    with pytest.raises(ResourceNotFoundError):
        store.delete(entry.id)


def test_update_missing_entry(db, school):
    with pytest.raises(ResourceNotFoundError):
        TimetableEntryStore(db).update("nope", {"day_of_week": 2})


def test_list_entries_filters_and_orders(db, school):
    store = TimetableEntryStore(db)
    late = store.insert(values(school, start_time=time(13, 0), end_time=time(14, 0)))
    early = store.insert(values(school, start_time=time(8, 0), end_time=time(9, 0)))
    tuesday = store.insert(values(school, day_of_week=2, class_id=school.class_b))
    db.commit()

    assert [entry.id for entry in store.list_entries()] == [early.id, late.id, tuesday.id]
    assert [entry.id for entry in store.list_entries(class_id=school.class_b)] == [tuesday.id]
    assert [entry.id for entry in store.list_entries(teacher_id=school.teacher_t, day_of_week=1)] == [early.id, late.id]


def test_driver_failures_surface_as_store_unavailable(db, school, monkeypatch):
    store = TimetableEntryStore(db)

    def broken_execute(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "execute", broken_execute)
    with pytest.raises(StoreUnavailableError) as excinfo:
        store.find_by_teacher_and_day(school.teacher_t, 1)
    assert excinfo.value.details["operation"] == "find"
