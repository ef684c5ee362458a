from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.core.exceptions import EntryValidationError
from app.models.timetable_entry import TimetableEntry
from app.services.time_intervals import day_name, format_time_of_day


class TimetableEntryPayload(BaseModel):
    """Create/update body.

    Values are deliberately untyped here: shape validation belongs to the
    timetable service so malformed input is reported as a 400 with the same
    messages on every route.
    """

    model_config = ConfigDict(populate_by_name=True)

    class_id: Any = Field(default=None, alias="classId")
    teacher_id: Any = Field(default=None, alias="teacherId")
    subject_id: Any = Field(default=None, alias="subjectId")
    day_of_week: Any = Field(default=None, alias="dayOfWeek")
    start_time: Any = Field(default=None, alias="startTime")
    end_time: Any = Field(default=None, alias="endTime")

    def to_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)

    @classmethod
    def fields_from_body(cls, body: Any) -> dict[str, Any]:
        if not isinstance(body, dict):
            raise EntryValidationError("Request body must be a JSON object")
        return cls.model_validate(body).to_fields()


class TimetableEntryOut(BaseModel):
    id: str
    dayOfWeek: int
    dayName: str
    startTime: str
    endTime: str
    classId: str
    className: str
    subjectId: str
    subject: str
    subjectCode: str
    teacherId: str
    teacherName: str

    @classmethod
    def from_entry(cls, entry: TimetableEntry) -> "TimetableEntryOut":
        return cls(
            id=entry.id,
            dayOfWeek=entry.day_of_week,
            dayName=day_name(entry.day_of_week),
            startTime=format_time_of_day(entry.start_time),
            endTime=format_time_of_day(entry.end_time),
            classId=entry.class_id,
            className=entry.school_class.name,
            subjectId=entry.subject_id,
            subject=entry.subject.name,
            subjectCode=entry.subject.code,
            teacherId=entry.teacher_id,
            teacherName=entry.teacher.name,
        )


class TimetableEntryListOut(BaseModel):
    timetableEntries: list[TimetableEntryOut]
    count: int


class TimetableEntryMutationOut(BaseModel):
    message: str
    timetableEntry: TimetableEntryOut


class MessageOut(BaseModel):
    message: str
