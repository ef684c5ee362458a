import uuid
from datetime import datetime, time

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.base import Base
from app.models.school_class import SchoolClass
from app.models.subject import Subject
from app.models.teacher import Teacher


class TimetableEntry(Base):
    """One recurring weekly period: a teacher teaching a subject to a class.

    ``day_of_week`` uses 0 = Sunday through 6 = Saturday.
    """

    __tablename__ = "timetable_entries"
    __table_args__ = (
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_timetable_entries_day_of_week"),
        CheckConstraint("start_time < end_time", name="ck_timetable_entries_time_order"),
        Index("ix_timetable_entries_teacher_day", "teacher_id", "day_of_week"),
        Index("ix_timetable_entries_class_day", "class_id", "day_of_week"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    class_id: Mapped[str] = mapped_column(String(36), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False)
    teacher_id: Mapped[str] = mapped_column(String(36), ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False)
    subject_id: Mapped[str] = mapped_column(String(36), ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    school_class: Mapped[SchoolClass] = relationship(lazy="joined")
    teacher: Mapped[Teacher] = relationship(lazy="joined")
    subject: Mapped[Subject] = relationship(lazy="joined")
