"""Session creation with teacher and room conflict detection."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from academy_core.core.database import unit_of_work
from academy_core.core.exceptions import InvalidInterval, InvalidReference, NotFound, ScheduleConflict
from academy_core.models import Course, Room, Session, Teacher
from academy_core.repositories.groups import GroupRepository
from academy_core.repositories.references import ReferenceRepository
from academy_core.repositories.sessions import SessionRepository
from academy_core.services.occupancy import default_duration, session_end, session_start
from academy_core.utils.timezone import ensure_utc, local_day_bounds, to_local

logger = logging.getLogger(__name__)


@dataclass
class SessionRequest:
    course_id: int
    teacher_id: int
    group_id: int
    start: datetime
    end: Optional[datetime] = None
    room_id: Optional[int] = None
    topic: Optional[str] = None


@dataclass
class RoomAvailability:
    room: Room
    start: datetime
    end: datetime
    conflicts: list[Session]
    sessions_that_day: int

    @property
    def available(self) -> bool:
        return not self.conflicts


def resolve_interval(start: datetime, end: Optional[datetime]) -> tuple[datetime, datetime]:
    start = ensure_utc(start)
    end = ensure_utc(end) if end is not None else start + default_duration()
    if end <= start:
        raise InvalidInterval()
    return start, end


class ScheduleConflictDetector:
    """Creates sessions only when neither the teacher nor the room is already booked."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.sessions = SessionRepository(db)
        self.groups = GroupRepository(db)
        self.references = ReferenceRepository(db)

    async def create_session(self, request: SessionRequest) -> Session:
        start, end = resolve_interval(request.start, request.end)

        async with unit_of_work(self.db):
            await self._check_references(request)

            session = Session(
                course_id=request.course_id,
                teacher_id=request.teacher_id,
                group_id=request.group_id,
                room_id=request.room_id,
                session_date=start,
                end_time=end,
                topic=request.topic,
            )
            # The pending row holds the write lock while overlaps are checked
            await self.sessions.add(session)

            conflicts = await self.sessions.find_overlapping(
                request.teacher_id,
                request.room_id,
                start,
                end,
                default_duration(),
                exclude_id=session.id,
            )
            if conflicts:
                raise self._conflict_error(request, conflicts[0])

        logger.info(
            f"✅ Session {session.id} created: group {request.group_id}, teacher {request.teacher_id}, "
            f"room {request.room_id}, {start.isoformat()} – {end.isoformat()}"
        )
        return session

    async def _check_references(self, request: SessionRequest) -> None:
        if await self.references.get(Course, request.course_id) is None:
            raise InvalidReference("Course not found", field="course_id")
        teacher = await self.references.get(Teacher, request.teacher_id, lock=True)
        if teacher is None:
            raise InvalidReference("Teacher not found", field="teacher_id")
        group = await self.groups.get(request.group_id)
        if group is None:
            raise InvalidReference("Group not found", field="group_id")
        if group.course_id != request.course_id:
            raise InvalidReference("Group does not belong to this course", field="group_id")
        if request.room_id is not None:
            room = await self.references.get(Room, request.room_id, lock=True)
            if room is None:
                raise InvalidReference("Room not found", field="room_id")
            if not room.is_active:
                raise InvalidReference("Room is not active", field="room_id")

    def _conflict_error(self, request: SessionRequest, other: Session) -> ScheduleConflict:
        if other.teacher_id == request.teacher_id:
            resource, resource_id = "teacher", request.teacher_id
        else:
            resource, resource_id = "room", request.room_id
        logger.warning(
            f"⛔ Schedule conflict on {resource} {resource_id} with session {other.id}"
        )
        return ScheduleConflict(
            f"The {resource} is already booked for an overlapping session",
            resource=resource,
            resource_id=resource_id,
            conflicting_session_id=other.id,
            conflicting_start=session_start(other).isoformat(),
            conflicting_end=session_end(other).isoformat(),
        )

    async def check_room_availability(
        self, room_id: int, start: datetime, end: Optional[datetime] = None
    ) -> RoomAvailability:
        """Would ``[start, end)`` fit in the room? Lists the sessions in the way."""
        room = await self.references.get(Room, room_id)
        if room is None:
            raise NotFound("Room not found")
        start, end = resolve_interval(start, end)

        conflicts = await self.sessions.find_overlapping(
            None, room_id, start, end, default_duration()
        )
        day_start, day_end = local_day_bounds(to_local(start).date())
        same_day = await self.sessions.list_for_room(
            room_id, day_start, day_end - timedelta(microseconds=1)
        )
        return RoomAvailability(
            room=room, start=start, end=end, conflicts=conflicts, sessions_that_day=len(same_day)
        )

    async def room_schedule(
        self,
        room_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> tuple[Room, list[Session]]:
        room = await self.references.get(Room, room_id)
        if room is None:
            raise NotFound("Room not found")
        lower = local_day_bounds(date_from)[0] if date_from else None
        upper = local_day_bounds(date_to)[1] - timedelta(microseconds=1) if date_to else None
        return room, await self.sessions.list_for_room(room_id, lower, upper)
