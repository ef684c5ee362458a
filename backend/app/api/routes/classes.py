from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import can_edit_schedule, get_current_user, get_db, require_roles
from app.api.routes.timetable import entry_list
from app.core.exceptions import ResourceNotFoundError
from app.models.school_class import SchoolClass
from app.models.user import User, UserRole
from app.schemas.school_class import SchoolClassCreate, SchoolClassOut
from app.schemas.timetable import (
    TimetableEntryListOut,
    TimetableEntryMutationOut,
    TimetableEntryOut,
    TimetableEntryPayload,
)
from app.services.timetable_service import create_entry, ensure_can_edit
from app.services.timetable_store import TimetableEntryStore

router = APIRouter()


def _get_class_or_404(db: Session, class_id: str) -> SchoolClass:
    school_class = db.get(SchoolClass, class_id)
    if school_class is None:
        raise ResourceNotFoundError("Class", class_id)
    return school_class


@router.get("/", response_model=list[SchoolClassOut])
def list_classes(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[SchoolClassOut]:
    return list(db.execute(select(SchoolClass).order_by(SchoolClass.name)).scalars())


@router.post("/", response_model=SchoolClassOut, status_code=status.HTTP_201_CREATED)
def create_class(
    payload: SchoolClassCreate,
    current_user: User = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
) -> SchoolClassOut:
    existing = db.execute(select(SchoolClass).where(SchoolClass.name == payload.name)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Class name already exists")
    school_class = SchoolClass(**payload.model_dump())
    db.add(school_class)
    db.commit()
    db.refresh(school_class)
    return school_class


@router.get("/{class_id}", response_model=SchoolClassOut)
def get_class(
    class_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SchoolClassOut:
    return _get_class_or_404(db, class_id)


@router.get("/{class_id}/timetable", response_model=TimetableEntryListOut)
def list_class_timetable(
    class_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableEntryListOut:
    _get_class_or_404(db, class_id)
    return entry_list(TimetableEntryStore(db).list_entries(class_id=class_id))


@router.post("/{class_id}/timetable", response_model=TimetableEntryMutationOut, status_code=status.HTTP_201_CREATED)
def create_class_timetable_entry(
    class_id: str,
    payload: Any = Body(default=None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableEntryMutationOut:
    can_edit = can_edit_schedule(current_user)
    ensure_can_edit(can_edit)
    _get_class_or_404(db, class_id)
    fields = {**TimetableEntryPayload.fields_from_body(payload), "class_id": class_id}
    entry = create_entry(db, fields, can_edit=can_edit, actor=current_user)
    return TimetableEntryMutationOut(
        message="Timetable entry created successfully",
        timetableEntry=TimetableEntryOut.from_entry(entry),
    )
