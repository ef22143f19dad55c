"""
Occupancy projection: who is busy right now and what runs today.

Everything here is derived from stored session rows and a reference clock.
The slot grid is a display aid and is never consulted for conflicts; only
``scheduling.ScheduleConflictDetector`` decides those.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from academy_core.core.settings import settings
from academy_core.models import Room, Session, Teacher
from academy_core.repositories.references import ReferenceRepository
from academy_core.repositories.sessions import SessionRepository
from academy_core.utils.timezone import (
    ensure_utc,
    local_day_bounds,
    minutes_of_day,
    parse_time_string,
    to_local,
)

logger = logging.getLogger(__name__)


def default_duration() -> timedelta:
    return timedelta(minutes=settings.default_session_minutes)


def session_start(session: Session) -> datetime:
    return ensure_utc(session.session_date)


def session_end(session: Session) -> datetime:
    """Stored end time, or start plus the default duration."""
    if session.end_time is not None:
        return ensure_utc(session.end_time)
    return session_start(session) + default_duration()


def is_live(session: Session, now: datetime) -> bool:
    """``start <= now < end``."""
    now = ensure_utc(now)
    return session_start(session) <= now < session_end(session)


def is_occupied(sessions: Iterable[Session], now: datetime) -> bool:
    """True when any of the resource's sessions is running at ``now``."""
    return any(is_live(session, now) for session in sessions)


def remaining_minutes(session: Session, now: datetime) -> Optional[int]:
    """Whole minutes left in a running session, ``None`` when it is not running."""
    if not is_live(session, now):
        return None
    seconds = (session_end(session) - ensure_utc(now)).total_seconds()
    # Half a minute or more counts as a minute
    return max(0, math.floor(seconds / 60 + 0.5))


def slot_labels(
    first: Optional[str] = None,
    last: Optional[str] = None,
    width_minutes: Optional[int] = None,
) -> list[str]:
    """``HH:MM`` slot boundaries from ``first`` to ``last`` inclusive."""
    first_min = minutes_of_day(parse_time_string(first if first is not None else settings.slot_day_start))
    last_min = minutes_of_day(parse_time_string(last if last is not None else settings.slot_day_end))
    width = width_minutes if width_minutes is not None else settings.slot_width_minutes
    if width <= 0:
        raise ValueError("Slot width must be positive")
    return [f"{m // 60:02d}:{m % 60:02d}" for m in range(first_min, last_min + 1, width)]


def nearest_slot(moment: datetime, labels: Sequence[str]) -> str:
    """Label whose boundary is closest to the local time of ``moment``.

    Ties go to the earlier slot.
    """
    target = minutes_of_day(to_local(moment).time())
    best = labels[0]
    best_distance = abs(minutes_of_day(parse_time_string(best)) - target)
    for label in labels[1:]:
        distance = abs(minutes_of_day(parse_time_string(label)) - target)
        if distance < best_distance:
            best, best_distance = label, distance
    return best


def daily_slot_grid(
    sessions: Iterable[Session],
    day: date,
    labels: Optional[Sequence[str]] = None,
) -> dict[str, list[Session]]:
    """Bucket the sessions starting on local ``day`` into display slots.

    Every slot label is present in the result, empty or not.
    """
    labels = list(labels or slot_labels())
    grid: dict[str, list[Session]] = {label: [] for label in labels}
    for session in sorted(sessions, key=lambda s: (session_start(s), s.id or 0)):
        if to_local(session_start(session)).date() != day:
            continue
        grid[nearest_slot(session_start(session), labels)].append(session)
    return grid


@dataclass
class OccupancySummary:
    date: date
    total_rooms: int
    occupied_rooms: int
    total_teachers: int
    occupied_teachers: int
    sessions_today: int


def occupancy_summary(
    day: date,
    rooms: Sequence[Room],
    teachers: Sequence[Teacher],
    sessions: Sequence[Session],
    now: datetime,
) -> OccupancySummary:
    live = [s for s in sessions if is_live(s, now)]
    busy_rooms = {s.room_id for s in live if s.room_id is not None}
    busy_teachers = {s.teacher_id for s in live}
    return OccupancySummary(
        date=day,
        total_rooms=len(rooms),
        occupied_rooms=len([r for r in rooms if r.id in busy_rooms]),
        total_teachers=len(teachers),
        occupied_teachers=len([t for t in teachers if t.id in busy_teachers]),
        sessions_today=len(sessions),
    )


def describe_session(session: Session, now: datetime) -> dict:
    """Display payload of one session."""
    group = session.group
    teacher = session.teacher
    return {
        "session_id": session.id,
        "session_date": session_start(session),
        "end_time": session_end(session),
        "topic": session.topic,
        "group_id": session.group_id,
        "group_name": group.name if group else None,
        "course_name": group.course.course_name if group and group.course else None,
        "teacher_id": session.teacher_id,
        "teacher_name": teacher.full_name if teacher else None,
        "room_id": session.room_id,
        "is_live": is_live(session, now),
        "remaining_minutes": remaining_minutes(session, now),
    }


class OccupancyProjection:
    """Loads the sessions of a day and projects them against ``now``."""

    def __init__(self, db: AsyncSession):
        self.sessions = SessionRepository(db)
        self.references = ReferenceRepository(db)

    async def day_sessions(self, day: date) -> list[Session]:
        """Sessions running at any point of local ``day``, including ones carried over midnight."""
        start, end = local_day_bounds(day)
        return await self.sessions.list_overlapping(start, end, default_duration())

    async def room_overview(self, day: date, now: datetime) -> dict:
        """Per active room: its sessions of the day and whether it is busy at ``now``."""
        rooms = await self.references.active_rooms()
        sessions = await self.day_sessions(day)

        overview = []
        for room in rooms:
            room_sessions = [s for s in sessions if s.room_id == room.id]
            live = next((s for s in room_sessions if is_live(s, now)), None)
            overview.append(
                {
                    "room_id": room.id,
                    "name": room.name,
                    "capacity": room.capacity,
                    "location": room.location,
                    "sessions_today": len(room_sessions),
                    "is_occupied": live is not None,
                    "remaining_minutes": remaining_minutes(live, now) if live else None,
                    "sessions": [describe_session(s, now) for s in room_sessions],
                }
            )

        occupied = len([r for r in overview if r["is_occupied"]])
        logger.info(f"📊 Room overview {day}: {occupied}/{len(rooms)} occupied, {len(sessions)} sessions")
        return {
            "date": day,
            "total_rooms": len(rooms),
            "occupied_now": occupied,
            "free_now": len(rooms) - occupied,
            "rooms": overview,
        }

    async def summary(self, day: date, now: datetime) -> OccupancySummary:
        rooms = await self.references.active_rooms()
        teachers = await self.references.active_teachers()
        sessions = await self.day_sessions(day)
        return occupancy_summary(day, rooms, teachers, sessions, now)

    async def slot_grid(self, day: date) -> dict[str, list[Session]]:
        return daily_slot_grid(await self.day_sessions(day), day)
