from app.models.activity_log import ActivityLog  # noqa: F401
from app.models.school_class import SchoolClass  # noqa: F401
from app.models.subject import Subject  # noqa: F401
from app.models.teacher import Teacher  # noqa: F401
from app.models.timetable_entry import TimetableEntry  # noqa: F401
from app.models.user import User, UserRole  # noqa: F401
