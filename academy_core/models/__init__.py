"""Database models for the enrollment lifecycle and scheduling core."""

from academy_core.models.course import Course
from academy_core.models.department import Department
from academy_core.models.enrollment import (
    ACTIVE_STATUSES,
    SEAT_HOLDING_STATUSES,
    Enrollment,
    Level,
    RegistrationStatus,
)
from academy_core.models.group import Group, GroupStatus
from academy_core.models.registration_history import RegistrationHistoryEntry
from academy_core.models.room import Room
from academy_core.models.session import Session
from academy_core.models.student import Student
from academy_core.models.teacher import Teacher

__all__ = [
    "Student",
    "Teacher",
    "Course",
    "Department",
    "Room",
    "Group",
    "GroupStatus",
    "Enrollment",
    "RegistrationStatus",
    "Level",
    "SEAT_HOLDING_STATUSES",
    "ACTIVE_STATUSES",
    "RegistrationHistoryEntry",
    "Session",
]
