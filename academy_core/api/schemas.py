"""Response models shared by several routers."""

from datetime import date, datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict

from academy_core.models import GroupStatus, Level, RegistrationStatus
from academy_core.utils.timezone import ensure_utc

# SQLite hands datetimes back naive; normalise everything to aware UTC
UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


class EnrollmentResponse(BaseModel):
    """Enrollment response model."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    course_id: int
    group_id: Optional[int]
    level: Optional[Level]
    registration_status: RegistrationStatus
    enrollment_date: UtcDatetime


class HistoryEntryResponse(BaseModel):
    """Registration history entry response model."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    enrollment_id: int
    old_status: RegistrationStatus
    new_status: RegistrationStatus
    changed_by: int
    changed_at: UtcDatetime


class GroupResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    course_id: int
    level: Optional[Level]
    max_students: int
    status: GroupStatus


class SessionResponse(BaseModel):
    """Session response model."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    course_id: int
    teacher_id: int
    group_id: int
    room_id: Optional[int]
    session_date: UtcDatetime
    end_time: Optional[UtcDatetime]
    topic: Optional[str]


class SessionSlotResponse(BaseModel):
    """A session as shown on a room schedule."""

    session_id: int
    session_date: UtcDatetime
    end_time: UtcDatetime
    topic: Optional[str]
    group_id: int
    group_name: Optional[str]
    course_name: Optional[str]
    teacher_id: int
    teacher_name: Optional[str]
    room_id: Optional[int]
    is_live: bool
    remaining_minutes: Optional[int]


class RoomOverviewEntry(BaseModel):
    room_id: int
    name: str
    capacity: int
    location: Optional[str]
    sessions_today: int
    is_occupied: bool
    remaining_minutes: Optional[int]
    sessions: list[SessionSlotResponse]


class RoomOverviewResponse(BaseModel):
    """Daily room overview."""

    date: date
    total_rooms: int
    occupied_now: int
    free_now: int
    rooms: list[RoomOverviewEntry]
