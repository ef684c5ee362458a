from typing import Literal

from pydantic import BaseModel


class ConflictReport(BaseModel):
    """The first existing entry found colliding with a proposed one."""

    conflict_type: Literal["teacher", "class"]
    entry_id: str
    day_of_week: int
    start_time: str
    end_time: str
    class_name: str
    subject_name: str
    teacher_name: str
    details: str


class ConflictCheckOut(BaseModel):
    conflict: ConflictReport | None = None
