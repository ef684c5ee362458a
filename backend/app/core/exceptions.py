class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class EntryValidationError(AppError):
    """Raised when a proposed timetable entry is malformed or incomplete."""
    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, status_code=400, details={"field": field} if field else None)
        self.field = field


class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)
        self.resource_type = resource_type
        self.resource_id = resource_id


class ScheduleConflictError(AppError):
    """Raised when a proposed entry collides with an existing one.

    ``report`` is the :class:`~app.schemas.conflict.ConflictReport` of the
    first collision found; its ``details`` string is the operator-facing text.
    """
    def __init__(self, report):
        title = "Teacher scheduling conflict" if report.conflict_type == "teacher" else "Class scheduling conflict"
        super().__init__(title, status_code=409, details=report.model_dump())
        self.report = report


class ScheduleAccessDeniedError(AppError):
    """Raised when the caller is not allowed to change the timetable."""
    def __init__(self, message: str = "Scheduling changes require administrator access"):
        super().__init__(message, status_code=403)


class StoreUnavailableError(AppError):
    """Raised on transient store failures. Nothing was written; retrying is safe."""
    def __init__(self, message: str = "Timetable store is temporarily unavailable", details: dict = None):
        super().__init__(message, status_code=500, details={"retryable": True, **(details or {})})
