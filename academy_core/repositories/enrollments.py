"""Enrollment queries used by the lifecycle and group capacity services."""

from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from academy_core.models import (
    ACTIVE_STATUSES,
    SEAT_HOLDING_STATUSES,
    Enrollment,
    Level,
    RegistrationStatus,
)


class EnrollmentRepository:
    """Reads and guarded writes on enrollment rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, enrollment_id: int, fresh: bool = False) -> Optional[Enrollment]:
        query = select(Enrollment).where(Enrollment.id == enrollment_id)
        if fresh:
            query = query.execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_for_student_course(
        self, student_id: int, course_id: int
    ) -> Optional[Enrollment]:
        result = await self.db.execute(
            select(Enrollment)
            .where(Enrollment.student_id == student_id, Enrollment.course_id == course_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def count_active_for_student(self, student_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Enrollment.id)).where(
                Enrollment.student_id == student_id,
                Enrollment.registration_status.in_(ACTIVE_STATUSES),
            )
        )
        return result.scalar() or 0

    async def add(self, enrollment: Enrollment) -> Enrollment:
        self.db.add(enrollment)
        await self.db.flush()
        return enrollment

    async def compare_and_set_status(
        self,
        enrollment_id: int,
        expected: RegistrationStatus,
        new: RegistrationStatus,
    ) -> bool:
        """Move ``expected`` to ``new`` in one statement.

        The guard is evaluated by the database against the row as it is inside
        the current transaction, so a concurrent transition that already moved
        the row makes this one match nothing.
        """
        result = await self.db.execute(
            update(Enrollment)
            .where(
                Enrollment.id == enrollment_id,
                Enrollment.registration_status == expected,
            )
            .values(registration_status=new)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def set_group_if_unassigned(
        self, enrollment_id: int, group_id: int, level: Optional[Level]
    ) -> bool:
        result = await self.db.execute(
            update(Enrollment)
            .where(Enrollment.id == enrollment_id, Enrollment.group_id.is_(None))
            .values(group_id=group_id, level=level)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def clear_group(self, enrollment_id: int, group_id: int) -> bool:
        result = await self.db.execute(
            update(Enrollment)
            .where(Enrollment.id == enrollment_id, Enrollment.group_id == group_id)
            .values(group_id=None)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def count_seated(self, group_id: int) -> int:
        """Live seat count of a group."""
        result = await self.db.execute(
            select(func.count(Enrollment.id)).where(
                Enrollment.group_id == group_id,
                Enrollment.registration_status.in_(SEAT_HOLDING_STATUSES),
            )
        )
        return result.scalar() or 0
