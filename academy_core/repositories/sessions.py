"""Session queries used by the conflict detector and the occupancy projection."""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from academy_core.models import Group, Session
from academy_core.utils.intervals import intervals_overlap
from academy_core.utils.timezone import ensure_utc


def _overlapping(candidates, start: datetime, end: datetime, default_duration: timedelta) -> list[Session]:
    overlapping = []
    for candidate in candidates:
        candidate_start = ensure_utc(candidate.session_date)
        candidate_end = (
            ensure_utc(candidate.end_time)
            if candidate.end_time is not None
            else candidate_start + default_duration
        )
        if intervals_overlap(candidate_start, candidate_end, start, end):
            overlapping.append(candidate)
    return overlapping


class SessionRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, session: Session) -> Session:
        self.db.add(session)
        await self.db.flush()
        return session

    async def find_overlapping(
        self,
        teacher_id: Optional[int],
        room_id: Optional[int],
        start: datetime,
        end: datetime,
        default_duration: timedelta,
        exclude_id: Optional[int] = None,
    ) -> list[Session]:
        """Sessions sharing the teacher or the room whose interval overlaps ``[start, end)``.

        Rows without an end time are narrowed in Python using the default
        duration, so the SQL stays portable.
        """
        resources = []
        if teacher_id is not None:
            resources.append(Session.teacher_id == teacher_id)
        if room_id is not None:
            resources.append(Session.room_id == room_id)
        if not resources:
            return []

        query = (
            select(Session)
            .where(
                or_(*resources),
                Session.session_date < end,
                or_(Session.end_time.is_(None), Session.end_time > start),
            )
            .order_by(Session.session_date, Session.id)
        )
        if exclude_id is not None:
            query = query.where(Session.id != exclude_id)

        result = await self.db.execute(query)
        return _overlapping(result.scalars().all(), start, end, default_duration)

    async def list_overlapping(
        self, start: datetime, end: datetime, default_duration: timedelta
    ) -> list[Session]:
        """Sessions running at any point of ``[start, end)``, with display relations loaded.

        A session that began before ``start`` and is still running is included.
        """
        result = await self.db.execute(
            select(Session)
            .options(
                selectinload(Session.group).selectinload(Group.course),
                selectinload(Session.teacher),
                selectinload(Session.room),
            )
            .where(
                Session.session_date < end,
                or_(Session.end_time.is_(None), Session.end_time > start),
            )
            .order_by(Session.session_date, Session.id)
            .execution_options(populate_existing=True)
        )
        return _overlapping(result.scalars().all(), start, end, default_duration)

    async def list_for_room(
        self,
        room_id: int,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> list[Session]:
        query = (
            select(Session)
            .options(
                selectinload(Session.group).selectinload(Group.course),
                selectinload(Session.teacher),
            )
            .where(Session.room_id == room_id)
            .order_by(Session.session_date, Session.id)
            .execution_options(populate_existing=True)
        )
        if date_from is not None:
            query = query.where(Session.session_date >= date_from)
        if date_to is not None:
            query = query.where(Session.session_date <= date_to)
        result = await self.db.execute(query)
        return list(result.scalars().all())
