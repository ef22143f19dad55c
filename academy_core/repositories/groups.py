"""Group queries."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from academy_core.models import Group


class GroupRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, group_id: int, lock: bool = False) -> Optional[Group]:
        """Load a group; ``lock`` takes a row lock until the transaction ends."""
        query = (
            select(Group)
            .where(Group.id == group_id)
            .execution_options(populate_existing=True)
        )
        if lock:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()
