"""Business-rule errors raised by the lifecycle and scheduling services.

Every error carries the HTTP status it maps to. The API layer turns them into
``{"message": ...}`` JSON bodies; services raise them and never return error
codes.
"""

from typing import Any, Optional


class CoreError(Exception):
    """Base class for all recoverable business-rule failures."""

    status_code: int = 400
    default_message: str = "Request could not be processed"

    def __init__(self, message: Optional[str] = None, **extra: Any) -> None:
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"message": self.message, **self.extra}


class NotFound(CoreError):
    status_code = 404
    default_message = "Resource not found"


class InvalidTransition(CoreError):
    default_message = "Transition not allowed from the current status"


class GroupFull(CoreError):
    default_message = "Group is full"


class GroupClosed(CoreError):
    default_message = "Group is not open"


class AlreadyAssigned(CoreError):
    default_message = "Student is already in this group"


class AlreadyInAnotherGroup(CoreError):
    default_message = "Student is already assigned to another group for this course"


class NotAssigned(CoreError):
    default_message = "Student is not in this group"


class NotEnrolled(CoreError):
    default_message = "Student is not enrolled in this course"


class InvalidReference(CoreError):
    default_message = "Referenced entity does not exist"


class InvalidInterval(CoreError):
    default_message = "Session end must be after its start"


class ScheduleConflict(CoreError):
    default_message = "Session overlaps an existing session"


class ActiveEnrollmentLimit(CoreError):
    default_message = "Too many active enrollments"


class DuplicateEnrollment(CoreError):
    status_code = 409
    default_message = "Already enrolled in this course"
