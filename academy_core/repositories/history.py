"""Registration history queries."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from academy_core.models import RegistrationHistoryEntry


class HistoryRepository:
    """Append-only access to registration history."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def append(self, entry: RegistrationHistoryEntry) -> RegistrationHistoryEntry:
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def list_for_enrollment(self, enrollment_id: int) -> list[RegistrationHistoryEntry]:
        result = await self.db.execute(
            select(RegistrationHistoryEntry)
            .where(RegistrationHistoryEntry.enrollment_id == enrollment_id)
            .order_by(RegistrationHistoryEntry.changed_at, RegistrationHistoryEntry.id)
        )
        return list(result.scalars().all())
