from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import can_edit_schedule, get_current_user, get_db, require_roles
from app.api.routes.timetable import entry_list
from app.core.exceptions import AppError, ResourceNotFoundError
from app.models.teacher import Teacher
from app.models.user import User, UserRole
from app.schemas.teacher import TeacherCreate, TeacherOut
from app.schemas.timetable import (
    TimetableEntryListOut,
    TimetableEntryMutationOut,
    TimetableEntryOut,
    TimetableEntryPayload,
)
from app.services.timetable_service import create_entry, ensure_can_edit
from app.services.timetable_store import TimetableEntryStore

router = APIRouter()


def _get_teacher_or_404(db: Session, teacher_id: str) -> Teacher:
    teacher = db.get(Teacher, teacher_id)
    if teacher is None:
        raise ResourceNotFoundError("Teacher", teacher_id)
    return teacher


@router.get("/", response_model=list[TeacherOut])
def list_teachers(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[TeacherOut]:
    return list(db.execute(select(Teacher).order_by(Teacher.name)).scalars())


@router.get("/me", response_model=TeacherOut)
def get_my_teacher_profile(
    current_user: User = Depends(require_roles(UserRole.teacher)),
    db: Session = Depends(get_db),
) -> TeacherOut:
    teacher = db.execute(select(Teacher).where(Teacher.user_id == current_user.id)).scalar_one_or_none()
    if teacher is None:
        raise AppError("Teacher profile not found", status_code=status.HTTP_404_NOT_FOUND)
    return teacher


@router.post("/", response_model=TeacherOut, status_code=status.HTTP_201_CREATED)
def create_teacher(
    payload: TeacherCreate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> TeacherOut:
    existing = db.execute(select(Teacher).where(Teacher.email == payload.email)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Teacher email already exists")
    if payload.user_id is not None and db.get(User, payload.user_id) is None:
        raise ResourceNotFoundError("User", payload.user_id)
    teacher = Teacher(**payload.model_dump())
    db.add(teacher)
    db.commit()
    db.refresh(teacher)
    return teacher


@router.get("/{teacher_id}", response_model=TeacherOut)
def get_teacher(
    teacher_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TeacherOut:
    return _get_teacher_or_404(db, teacher_id)


@router.get("/{teacher_id}/timetable", response_model=TimetableEntryListOut)
def list_teacher_timetable(
    teacher_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableEntryListOut:
    _get_teacher_or_404(db, teacher_id)
    return entry_list(TimetableEntryStore(db).list_entries(teacher_id=teacher_id))


@router.post("/{teacher_id}/timetable", response_model=TimetableEntryMutationOut, status_code=status.HTTP_201_CREATED)
def create_teacher_timetable_entry(
    teacher_id: str,
    payload: Any = Body(default=None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableEntryMutationOut:
    can_edit = can_edit_schedule(current_user)
    ensure_can_edit(can_edit)
    _get_teacher_or_404(db, teacher_id)
    fields = {**TimetableEntryPayload.fields_from_body(payload), "teacher_id": teacher_id}
    entry = create_entry(db, fields, can_edit=can_edit, actor=current_user)
    return TimetableEntryMutationOut(
        message="Timetable entry created successfully",
        timetableEntry=TimetableEntryOut.from_entry(entry),
    )
