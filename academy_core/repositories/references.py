"""Lookups of rows owned by the external CRUD layer."""

from typing import Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from academy_core.models import Course, Room, Student, Teacher

ModelT = TypeVar("ModelT", Course, Room, Student, Teacher)


class ReferenceRepository:
    """Existence checks and resource locks for students, teachers, courses and rooms."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, model: type[ModelT], entity_id: int, lock: bool = False) -> Optional[ModelT]:
        query = select(model).where(model.id == entity_id)
        if lock:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def active_rooms(self) -> list[Room]:
        result = await self.db.execute(
            select(Room).where(Room.is_active.is_(True)).order_by(Room.name)
        )
        return list(result.scalars().all())

    async def active_teachers(self) -> list[Teacher]:
        result = await self.db.execute(
            select(Teacher).where(Teacher.active.is_(True)).order_by(Teacher.id)
        )
        return list(result.scalars().all())
