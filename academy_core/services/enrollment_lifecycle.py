"""
Enrollment lifecycle: request, validate, reject, mark paid, finish.

Every transition is one transaction holding the guarded status write and its
history entry. The allowed moves live in ``TRANSITIONS`` and nowhere else.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from academy_core.core.database import unit_of_work
from academy_core.core.exceptions import (
    ActiveEnrollmentLimit,
    DuplicateEnrollment,
    GroupClosed,
    GroupFull,
    InvalidReference,
    InvalidTransition,
    NotFound,
)
from academy_core.core.settings import settings
from academy_core.models import (
    Course,
    Enrollment,
    Group,
    GroupStatus,
    Level,
    RegistrationHistoryEntry,
    RegistrationStatus,
    Student,
)
from academy_core.repositories.enrollments import EnrollmentRepository
from academy_core.repositories.groups import GroupRepository
from academy_core.repositories.references import ReferenceRepository
from academy_core.services.audit_trail import AuditTrail
from academy_core.services.group_capacity import reopen_if_free

logger = logging.getLogger(__name__)

VALIDATE = "validate"
REJECT = "reject"
MARK_PAID = "mark_paid"
FINISH = "finish"

TRANSITIONS: dict[RegistrationStatus, dict[str, RegistrationStatus]] = {
    RegistrationStatus.PENDING: {
        VALIDATE: RegistrationStatus.VALIDATED,
        REJECT: RegistrationStatus.REJECTED,
    },
    RegistrationStatus.VALIDATED: {
        MARK_PAID: RegistrationStatus.PAID,
    },
    RegistrationStatus.PAID: {
        FINISH: RegistrationStatus.FINISHED,
    },
    RegistrationStatus.FINISHED: {},
    RegistrationStatus.REJECTED: {},
}


def resolve_transition(action: str) -> tuple[RegistrationStatus, RegistrationStatus]:
    """Return the ``(from, to)`` pair of an action.

    Each action is legal from exactly one status.
    """
    for source, actions in TRANSITIONS.items():
        if action in actions:
            return source, actions[action]
    raise ValueError(f"Unknown enrollment action: {action}")


def allowed_actions(status: RegistrationStatus) -> list[str]:
    return sorted(TRANSITIONS[status])


class EnrollmentLifecycle:
    """State machine over enrollment rows."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.enrollments = EnrollmentRepository(db)
        self.references = ReferenceRepository(db)
        self.groups = GroupRepository(db)
        self.audit = AuditTrail(db)

    async def validate(self, enrollment_id: int, admin_id: int) -> Enrollment:
        return await self.apply(enrollment_id, VALIDATE, admin_id)

    async def reject(
        self, enrollment_id: int, admin_id: int, reason: Optional[str] = None
    ) -> Enrollment:
        return await self.apply(enrollment_id, REJECT, admin_id, reason=reason)

    async def mark_paid(self, enrollment_id: int, admin_id: int) -> Enrollment:
        return await self.apply(enrollment_id, MARK_PAID, admin_id)

    async def finish(self, enrollment_id: int, admin_id: int) -> Enrollment:
        return await self.apply(enrollment_id, FINISH, admin_id)

    async def apply(
        self,
        enrollment_id: int,
        action: str,
        admin_id: int,
        reason: Optional[str] = None,
    ) -> Enrollment:
        """Run one transition and record it."""
        source, target = resolve_transition(action)

        async with unit_of_work(self.db):
            group = None
            if target == RegistrationStatus.REJECTED:
                # Group row is locked before the enrollment row, same order as seat operations
                group = await self._lock_seat_group(enrollment_id)
            moved = await self.enrollments.compare_and_set_status(
                enrollment_id, source, target
            )
            if not moved:
                current = await self.enrollments.get(enrollment_id, fresh=True)
                if current is None:
                    raise NotFound("Enrollment not found")
                logger.warning(
                    f"⛔ Enrollment {enrollment_id}: {action} refused in status "
                    f"{current.registration_status.value}"
                )
                raise InvalidTransition(
                    f"Cannot {action.replace('_', ' ')} an enrollment in status "
                    f"{current.registration_status.value}",
                    current_status=current.registration_status.value,
                    allowed_actions=allowed_actions(current.registration_status),
                )
            await self.audit.record(enrollment_id, source, target, admin_id)
            if group is not None:
                reopen_if_free(group, await self.enrollments.count_seated(group.id))

        enrollment = await self.enrollments.get(enrollment_id, fresh=True)
        if reason:
            logger.info(f"✅ Enrollment {enrollment_id} {source.value} → {target.value} (reason: {reason})")
        else:
            logger.info(f"✅ Enrollment {enrollment_id} {source.value} → {target.value}")
        return enrollment

    async def request_enrollment(
        self,
        student_id: int,
        course_id: int,
        group_id: Optional[int] = None,
        level: Optional[Level] = None,
    ) -> Enrollment:
        """Create a PENDING enrollment, optionally holding a seat in a group."""
        async with unit_of_work(self.db):
            student = await self.references.get(Student, student_id)
            if student is None:
                raise NotFound("Student not found")

            active = await self.enrollments.count_active_for_student(student_id)
            if active >= settings.max_active_enrollments:
                raise ActiveEnrollmentLimit(
                    f"You can only have {settings.max_active_enrollments} active enrollments at a time",
                    current_active=active,
                    max_allowed=settings.max_active_enrollments,
                )

            course = await self.references.get(Course, course_id)
            if course is None:
                raise NotFound("Course not found")

            existing = await self.enrollments.get_for_student_course(student_id, course_id)
            if existing is not None:
                raise DuplicateEnrollment(enrollment_id=existing.id)

            group = None
            if group_id is not None:
                group = await self.groups.get(group_id, lock=True)
                if group is None:
                    raise NotFound("Group not found")
                if group.course_id != course_id:
                    raise InvalidReference("Group does not belong to this course")
                seated = await self.enrollments.count_seated(group_id)
                if group.status == GroupStatus.FULL or seated >= group.max_students:
                    raise GroupFull(occupancy=seated, max_students=group.max_students)
                if group.status != GroupStatus.OPEN:
                    raise GroupClosed(status=group.status.value)
                level = group.level

            enrollment = Enrollment(
                student_id=student_id,
                course_id=course_id,
                group_id=group_id,
                level=level,
                registration_status=RegistrationStatus.PENDING,
            )
            try:
                await self.enrollments.add(enrollment)
            except IntegrityError as exc:
                raise DuplicateEnrollment() from exc

            if group is not None:
                seated = await self.enrollments.count_seated(group.id)
                if seated > group.max_students:
                    raise GroupFull(occupancy=seated - 1, max_students=group.max_students)
                if seated >= group.max_students and group.status == GroupStatus.OPEN:
                    group.status = GroupStatus.FULL

        logger.info(
            f"✅ Enrollment {enrollment.id} requested: student {student_id}, course {course_id}, "
            f"group {group_id}"
        )
        return await self.enrollments.get(enrollment.id, fresh=True)

    async def get_enrollment(self, enrollment_id: int) -> Enrollment:
        enrollment = await self.enrollments.get(enrollment_id, fresh=True)
        if enrollment is None:
            raise NotFound("Enrollment not found")
        return enrollment

    async def get_history(self, enrollment_id: int) -> list[RegistrationHistoryEntry]:
        await self.get_enrollment(enrollment_id)
        return await self.audit.entries(enrollment_id)

    async def _lock_seat_group(self, enrollment_id: int) -> Optional[Group]:
        """Lock the group the enrollment sits in, if any."""
        current = await self.enrollments.get(enrollment_id, fresh=True)
        if current is None or current.group_id is None:
            return None
        return await self.groups.get(current.group_id, lock=True)
