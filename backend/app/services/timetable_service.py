"""Create, update and delete timetable entries.

These functions are the only way entries change. Each call validates the
proposed entry, checks it against the current timetable and writes it in a
single transaction while holding the per-(teacher, day) and per-(class, day)
locks, so two overlapping proposals can never both be committed.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.exceptions import (
    EntryValidationError,
    ScheduleAccessDeniedError,
    ScheduleConflictError,
    StoreUnavailableError,
)
from app.models.timetable_entry import TimetableEntry
from app.models.user import User
from app.schemas.conflict import ConflictReport
from app.services.audit import entry_snapshot, log_activity
from app.services.conflict_service import ConflictDetector, ProposedEntry
from app.services.schedule_locks import class_day_key, entry_key, schedule_locks, teacher_day_key
from app.services.time_intervals import MAX_DAY_OF_WEEK, MIN_DAY_OF_WEEK, parse_time_of_day
from app.services.timetable_store import ENTRY_FIELDS, TimetableEntryStore

logger = logging.getLogger(__name__)

ID_FIELDS = ("class_id", "teacher_id", "subject_id")
FIELD_LABELS = {
    "class_id": "Class ID",
    "teacher_id": "Teacher ID",
    "subject_id": "Subject ID",
    "day_of_week": "Day of week",
    "start_time": "Start time",
    "end_time": "End time",
}


def ensure_can_edit(can_edit: bool) -> None:
    if not can_edit:
        raise ScheduleAccessDeniedError()


def _normalize_fields(fields: Mapping[str, Any], *, partial: bool) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for name in ENTRY_FIELDS:
        raw = fields.get(name)
        if raw is None:
            if not partial:
                raise EntryValidationError(f"{FIELD_LABELS[name]} is required", field=name)
            continue

        if name in ID_FIELDS:
            if not isinstance(raw, str) or not raw.strip():
                raise EntryValidationError(f"{FIELD_LABELS[name]} is required", field=name)
            values[name] = raw.strip()
        elif name == "day_of_week":
            if isinstance(raw, bool) or not isinstance(raw, int) or not MIN_DAY_OF_WEEK <= raw <= MAX_DAY_OF_WEEK:
                raise EntryValidationError(
                    f"Valid day of week is required ({MIN_DAY_OF_WEEK}-{MAX_DAY_OF_WEEK})", field=name
                )
            values[name] = raw
        else:
            try:
                values[name] = parse_time_of_day(raw)
            except ValueError as exc:
                raise EntryValidationError(
                    f"Invalid {FIELD_LABELS[name].lower()} format. Use HH:MM:SS.", field=name
                ) from exc
    return values


def parse_day_filter(raw: str | None) -> int | None:
    """Read the ``dayOfWeek`` list filter; malformed values are a validation error."""
    if raw is None:
        return None
    try:
        day = int(raw)
    except ValueError:
        day = None
    if day is None or not MIN_DAY_OF_WEEK <= day <= MAX_DAY_OF_WEEK:
        raise EntryValidationError(
            f"Valid day of week is required ({MIN_DAY_OF_WEEK}-{MAX_DAY_OF_WEEK})", field="day_of_week"
        )
    return day


def _ensure_time_order(proposed: ProposedEntry) -> None:
    if proposed.end_time <= proposed.start_time:
        raise EntryValidationError("End time must be after start time", field="end_time")


def _scope_keys(proposed: ProposedEntry) -> list[str]:
    return [
        teacher_day_key(proposed.teacher_id, proposed.day_of_week),
        class_day_key(proposed.class_id, proposed.day_of_week),
    ]


def _refresh_snapshot(db: Session) -> None:
    """End whatever transaction the caller already opened on ``db``.

    Under REPEATABLE READ or SERIALIZABLE the snapshot is fixed by the first
    read, which for a request is the user lookup. Reads after this call see
    every entry committed by earlier holders of the scheduling locks.
    """
    db.rollback()


@contextmanager
def _unit_of_work(db: Session) -> Iterator[None]:
    try:
        yield
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Timetable transaction failed")
        raise StoreUnavailableError() from exc
    except Exception:
        db.rollback()
        raise


def _raise_if_conflicting(detector: ConflictDetector, proposed: ProposedEntry, exclude_id: str | None = None) -> None:
    report = detector.check_conflicts(proposed, exclude_id=exclude_id)
    if report is not None:
        logger.warning("Rejected timetable change: %s", report.details)
        raise ScheduleConflictError(report)


def check_entry(db: Session, fields: Mapping[str, Any], *, exclude_id: str | None = None) -> ConflictReport | None:
    """Validate ``fields`` and report the first conflict without writing anything.

    With ``exclude_id`` the fields are merged over that existing entry, as an
    update would do.
    """
    store = TimetableEntryStore(db)
    try:
        if exclude_id is not None:
            existing = store.get(exclude_id)
            changes = _normalize_fields(fields, partial=True)
            proposed = ProposedEntry.from_entry(existing).merged(changes)
        else:
            changes = _normalize_fields(fields, partial=False)
            proposed = ProposedEntry(**changes)
        _ensure_time_order(proposed)
        store.ensure_references(changes)
        return ConflictDetector(store).check_conflicts(proposed, exclude_id=exclude_id)
    finally:
        db.rollback()


def create_entry(
    db: Session,
    fields: Mapping[str, Any],
    *,
    can_edit: bool,
    actor: User | None = None,
) -> TimetableEntry:
    ensure_can_edit(can_edit)
    proposed = ProposedEntry(**_normalize_fields(fields, partial=False))
    _ensure_time_order(proposed)

    store = TimetableEntryStore(db)
    timeout = get_settings().schedule_lock_timeout_seconds
    with schedule_locks.hold(_scope_keys(proposed), timeout=timeout), _unit_of_work(db):
        _refresh_snapshot(db)
        store.ensure_references(proposed.as_values())
        _raise_if_conflicting(ConflictDetector(store), proposed)
        entry = store.insert(proposed.as_values())
        log_activity(
            db,
            user=actor,
            action="timetable.entry.created",
            entity_type="timetable_entry",
            entity_id=entry.id,
            details=entry_snapshot(entry),
        )
        entry_id = entry.id

    logger.info("Created timetable entry %s", entry_id)
    return store.get(entry_id)


def update_entry(
    db: Session,
    entry_id: str,
    fields: Mapping[str, Any],
    *,
    can_edit: bool,
    actor: User | None = None,
) -> TimetableEntry:
    """Apply a partial update; unspecified fields keep their stored values.

    The merged entry is checked against every other entry, never itself.
    """
    ensure_can_edit(can_edit)
    store = TimetableEntryStore(db)
    timeout = get_settings().schedule_lock_timeout_seconds
    with schedule_locks.hold([entry_key(entry_id)], timeout=timeout) as held, _unit_of_work(db):
        _refresh_snapshot(db)
        changes = _normalize_fields(fields, partial=True)
        proposed = ProposedEntry.from_entry(store.get(entry_id)).merged(changes)
        _ensure_time_order(proposed)

        held.acquire(_scope_keys(proposed))
        # The entry lock keeps the row itself unchanged, so the scope stays valid.
        _refresh_snapshot(db)
        existing = store.get(entry_id)
        before = entry_snapshot(existing)
        proposed = ProposedEntry.from_entry(existing).merged(changes)
        store.ensure_references(changes)
        _raise_if_conflicting(ConflictDetector(store), proposed, exclude_id=entry_id)
        entry = store.update(entry_id, changes)
        log_activity(
            db,
            user=actor,
            action="timetable.entry.updated",
            entity_type="timetable_entry",
            entity_id=entry_id,
            details={"before": before, "after": entry_snapshot(entry)},
        )

    logger.info("Updated timetable entry %s", entry_id)
    return store.get(entry_id)


def delete_entry(
    db: Session,
    entry_id: str,
    *,
    can_edit: bool,
    actor: User | None = None,
) -> None:
    ensure_can_edit(can_edit)
    store = TimetableEntryStore(db)
    timeout = get_settings().schedule_lock_timeout_seconds
    with schedule_locks.hold([entry_key(entry_id)], timeout=timeout), _unit_of_work(db):
        _refresh_snapshot(db)
        snapshot = entry_snapshot(store.get(entry_id))
        store.delete(entry_id)
        log_activity(
            db,
            user=actor,
            action="timetable.entry.deleted",
            entity_type="timetable_entry",
            entity_id=entry_id,
            details=snapshot,
        )

    logger.info("Deleted timetable entry %s", entry_id)
