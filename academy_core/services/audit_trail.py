"""Audit trail for enrollment status transitions."""

import logging
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from academy_core.models import RegistrationHistoryEntry, RegistrationStatus
from academy_core.repositories.history import HistoryRepository
from academy_core.utils.timezone import now_utc

logger = logging.getLogger(__name__)


class AuditTrail:
    """Single primitive every transition goes through to leave a history entry."""

    def __init__(self, db: AsyncSession):
        self.history = HistoryRepository(db)

    async def record(
        self,
        enrollment_id: int,
        old_status: RegistrationStatus,
        new_status: RegistrationStatus,
        admin_id: int,
    ) -> RegistrationHistoryEntry:
        """Append one history entry.

        Does not commit: the entry belongs to the caller's transaction and is
        discarded together with the status write if that transaction rolls
        back. Errors propagate to the caller.
        """
        entry = RegistrationHistoryEntry(
            enrollment_id=enrollment_id,
            old_status=old_status,
            new_status=new_status,
            changed_by=admin_id,
            changed_at=now_utc(),
        )
        await self.history.append(entry)
        logger.info(
            f"📝 History: enrollment {enrollment_id} {old_status.value} → "
            f"{new_status.value} by admin {admin_id}"
        )
        return entry

    async def entries(self, enrollment_id: int) -> list[RegistrationHistoryEntry]:
        return await self.history.list_for_enrollment(enrollment_id)


def replay_status(entries: Iterable[RegistrationHistoryEntry]) -> RegistrationStatus:
    """Rebuild an enrollment's status from its ordered history.

    Raises ``ValueError`` when an entry does not start where the previous
    one ended.
    """
    status = RegistrationStatus.PENDING
    for entry in entries:
        if entry.old_status != status:
            raise ValueError(
                f"History entry {entry.id} starts at {entry.old_status.value}, "
                f"expected {status.value}"
            )
        status = entry.new_status
    return status
