from typing import Any

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import can_edit_schedule, get_current_user, get_db
from app.models.user import User
from app.schemas.conflict import ConflictCheckOut
from app.schemas.timetable import (
    MessageOut,
    TimetableEntryListOut,
    TimetableEntryMutationOut,
    TimetableEntryOut,
    TimetableEntryPayload,
)
from app.services.timetable_service import (
    check_entry,
    create_entry,
    delete_entry,
    ensure_can_edit,
    parse_day_filter,
    update_entry,
)
from app.services.timetable_store import TimetableEntryStore

router = APIRouter()


def entry_list(entries) -> TimetableEntryListOut:
    items = [TimetableEntryOut.from_entry(entry) for entry in entries]
    return TimetableEntryListOut(timetableEntries=items, count=len(items))


@router.get("", response_model=TimetableEntryListOut)
def list_timetable_entries(
    class_id: str | None = Query(default=None, alias="classId"),
    teacher_id: str | None = Query(default=None, alias="teacherId"),
    day_of_week: str | None = Query(default=None, alias="dayOfWeek"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableEntryListOut:
    entries = TimetableEntryStore(db).list_entries(
        class_id=class_id, teacher_id=teacher_id, day_of_week=parse_day_filter(day_of_week)
    )
    return entry_list(entries)


@router.post("", response_model=TimetableEntryMutationOut, status_code=status.HTTP_201_CREATED)
def create_timetable_entry(
    payload: Any = Body(default=None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableEntryMutationOut:
    fields = TimetableEntryPayload.fields_from_body(payload)
    entry = create_entry(db, fields, can_edit=can_edit_schedule(current_user), actor=current_user)
    return TimetableEntryMutationOut(
        message="Timetable entry created successfully",
        timetableEntry=TimetableEntryOut.from_entry(entry),
    )


@router.post("/check", response_model=ConflictCheckOut)
def check_timetable_entry(
    payload: Any = Body(default=None),
    exclude_id: str | None = Query(default=None, alias="excludeId"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ConflictCheckOut:
    ensure_can_edit(can_edit_schedule(current_user))
    fields = TimetableEntryPayload.fields_from_body(payload)
    return ConflictCheckOut(conflict=check_entry(db, fields, exclude_id=exclude_id))


@router.get("/{entry_id}", response_model=TimetableEntryOut)
def get_timetable_entry(
    entry_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableEntryOut:
    return TimetableEntryOut.from_entry(TimetableEntryStore(db).get(entry_id))


@router.patch("/{entry_id}", response_model=TimetableEntryMutationOut)
def update_timetable_entry(
    entry_id: str,
    payload: Any = Body(default=None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableEntryMutationOut:
    fields = TimetableEntryPayload.fields_from_body(payload)
    entry = update_entry(db, entry_id, fields, can_edit=can_edit_schedule(current_user), actor=current_user)
    return TimetableEntryMutationOut(
        message="Timetable entry updated successfully",
        timetableEntry=TimetableEntryOut.from_entry(entry),
    )


@router.delete("/{entry_id}", response_model=MessageOut)
def delete_timetable_entry(
    entry_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageOut:
    delete_entry(db, entry_id, can_edit=can_edit_schedule(current_user), actor=current_user)
    return MessageOut(message="Timetable entry deleted successfully")
