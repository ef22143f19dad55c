"""Group seat management."""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from academy_core.core.database import unit_of_work
from academy_core.core.exceptions import (
    AlreadyAssigned,
    AlreadyInAnotherGroup,
    GroupClosed,
    GroupFull,
    InvalidTransition,
    NotAssigned,
    NotEnrolled,
    NotFound,
)
from academy_core.models import Enrollment, Group, GroupStatus, RegistrationStatus, Student
from academy_core.repositories.enrollments import EnrollmentRepository
from academy_core.repositories.groups import GroupRepository
from academy_core.repositories.references import ReferenceRepository

logger = logging.getLogger(__name__)


def reopen_if_free(group: Group, seated: int) -> bool:
    """Flip a FULL group back to OPEN once a seat is free. The group row must be locked."""
    if group.status == GroupStatus.FULL and seated < group.max_students:
        group.status = GroupStatus.OPEN
        logger.info(f"🔓 Group {group.id} reopened ({seated}/{group.max_students})")
        return True
    return False


@dataclass
class SeatChange:
    """Outcome of a seat operation."""

    group: Group
    enrollment: Enrollment
    occupancy: int


class GroupCapacityManager:
    """Assigns students to groups without ever exceeding ``max_students``.

    Occupancy is counted from enrollment rows every time it is needed. A seat
    operation locks the group row, writes the enrollment's group reference
    with a conditional update and then re-counts inside the same transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.groups = GroupRepository(db)
        self.enrollments = EnrollmentRepository(db)
        self.references = ReferenceRepository(db)

    async def occupancy(self, group_id: int) -> tuple[Group, int]:
        group = await self.groups.get(group_id)
        if group is None:
            raise NotFound("Group not found")
        return group, await self.enrollments.count_seated(group_id)

    async def assign_student(self, group_id: int, student_id: int) -> SeatChange:
        async with unit_of_work(self.db):
            group, enrollment = await self._load(group_id, student_id)

            if enrollment is None:
                raise NotEnrolled("Student must enroll in this course first")
            if enrollment.group_id == group_id:
                raise AlreadyAssigned()
            if enrollment.group_id is not None:
                raise AlreadyInAnotherGroup(current_group_id=enrollment.group_id)
            if enrollment.registration_status == RegistrationStatus.REJECTED:
                raise InvalidTransition("A rejected enrollment cannot join a group")

            seated = await self.enrollments.count_seated(group_id)
            if group.status == GroupStatus.FULL or seated >= group.max_students:
                raise GroupFull(occupancy=seated, max_students=group.max_students)
            if group.status != GroupStatus.OPEN:
                raise GroupClosed(status=group.status.value)

            if not await self.enrollments.set_group_if_unassigned(
                enrollment.id, group_id, group.level
            ):
                raise AlreadyInAnotherGroup()

            seated = await self.enrollments.count_seated(group_id)
            if seated > group.max_students:
                # Another seat was taken between the first count and the write
                raise GroupFull(occupancy=seated - 1, max_students=group.max_students)
            if seated >= group.max_students:
                group.status = GroupStatus.FULL
                logger.info(f"🔒 Group {group_id} is now FULL ({seated}/{group.max_students})")

        enrollment = await self.enrollments.get(enrollment.id, fresh=True)
        logger.info(
            f"✅ Student {student_id} joined group {group_id} ({seated}/{group.max_students})"
        )
        return SeatChange(group=group, enrollment=enrollment, occupancy=seated)

    async def remove_student(self, group_id: int, student_id: int) -> SeatChange:
        async with unit_of_work(self.db):
            group, enrollment = await self._load(group_id, student_id)

            if enrollment is None or enrollment.group_id != group_id:
                raise NotAssigned()
            if not await self.enrollments.clear_group(enrollment.id, group_id):
                raise NotAssigned()

            seated = await self.enrollments.count_seated(group_id)
            reopen_if_free(group, seated)

        enrollment = await self.enrollments.get(enrollment.id, fresh=True)
        logger.info(f"✅ Student {student_id} left group {group_id}")
        return SeatChange(group=group, enrollment=enrollment, occupancy=seated)

    async def _load(self, group_id: int, student_id: int) -> tuple[Group, Optional[Enrollment]]:
        group = await self.groups.get(group_id, lock=True)
        if group is None:
            raise NotFound("Group not found")
        student = await self.references.get(Student, student_id)
        if student is None:
            raise NotFound("Student not found")
        enrollment = await self.enrollments.get_for_student_course(student_id, group.course_id)
        return group, enrollment
