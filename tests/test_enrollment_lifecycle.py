"""Enrollment state machine and history tests."""

import pytest

from academy_core.core.exceptions import (
    ActiveEnrollmentLimit,
    DuplicateEnrollment,
    GroupClosed,
    GroupFull,
    InvalidReference,
    InvalidTransition,
    NotFound,
)
from academy_core.models import GroupStatus, Level, RegistrationStatus
from academy_core.services.audit_trail import AuditTrail, replay_status
from academy_core.services.enrollment_lifecycle import (
    FINISH,
    MARK_PAID,
    REJECT,
    TRANSITIONS,
    VALIDATE,
    EnrollmentLifecycle,
    allowed_actions,
    resolve_transition,
)
from academy_core.services.group_capacity import GroupCapacityManager
from tests.conftest import ADMIN_ID


class TestTransitionTable:
    def test_each_action_has_one_source(self):
        assert resolve_transition(VALIDATE) == (RegistrationStatus.PENDING, RegistrationStatus.VALIDATED)
        assert resolve_transition(REJECT) == (RegistrationStatus.PENDING, RegistrationStatus.REJECTED)
        assert resolve_transition(MARK_PAID) == (RegistrationStatus.VALIDATED, RegistrationStatus.PAID)
        assert resolve_transition(FINISH) == (RegistrationStatus.PAID, RegistrationStatus.FINISHED)

    def test_unknown_action(self):
        with pytest.raises(ValueError):
            resolve_transition("cancel")

    def test_terminal_states_have_no_moves(self):
        assert allowed_actions(RegistrationStatus.FINISHED) == []
        assert allowed_actions(RegistrationStatus.REJECTED) == []
        assert set(TRANSITIONS) == set(RegistrationStatus)


class TestTransitions:
    async def test_full_happy_path_records_history(self, db, seed):
        student = await seed.student()
        course = await seed.course()
        enrollment = await seed.enrollment(student, course)
        lifecycle = EnrollmentLifecycle(db)

        assert (await lifecycle.validate(enrollment.id, ADMIN_ID)).registration_status == RegistrationStatus.VALIDATED
        assert (await lifecycle.mark_paid(enrollment.id, ADMIN_ID)).registration_status == RegistrationStatus.PAID
        finished = await lifecycle.finish(enrollment.id, ADMIN_ID)
        assert finished.registration_status == RegistrationStatus.FINISHED

        history = await lifecycle.get_history(enrollment.id)
        assert [(h.old_status, h.new_status) for h in history] == [
            (RegistrationStatus.PENDING, RegistrationStatus.VALIDATED),
            (RegistrationStatus.VALIDATED, RegistrationStatus.PAID),
            (RegistrationStatus.PAID, RegistrationStatus.FINISHED),
        ]
        assert all(h.changed_by == ADMIN_ID for h in history)
        assert replay_status(history) == finished.registration_status

    async def test_reject_from_pending(self, db, seed):
        enrollment = await seed.enrollment(await seed.student(), await seed.course())
        rejected = await EnrollmentLifecycle(db).reject(enrollment.id, ADMIN_ID, reason="Incomplete file")
        assert rejected.registration_status == RegistrationStatus.REJECTED

    @pytest.mark.parametrize(
        "status,action",
        [
            (RegistrationStatus.VALIDATED, VALIDATE),
            (RegistrationStatus.PAID, REJECT),
            (RegistrationStatus.PENDING, MARK_PAID),
            (RegistrationStatus.PENDING, FINISH),
            (RegistrationStatus.FINISHED, VALIDATE),
            (RegistrationStatus.REJECTED, MARK_PAID),
        ],
    )
    async def test_illegal_transition_changes_nothing(self, db, seed, status, action):
        enrollment = await seed.enrollment(await seed.student(), await seed.course(), status=status)
        enrollment_id = enrollment.id
        lifecycle = EnrollmentLifecycle(db)

        with pytest.raises(InvalidTransition) as exc_info:
            await lifecycle.apply(enrollment_id, action, ADMIN_ID)

        assert exc_info.value.extra["current_status"] == status.value
        current = await lifecycle.get_enrollment(enrollment_id)
        assert current.registration_status == status
        assert await lifecycle.get_history(enrollment_id) == []

    async def test_unknown_enrollment(self, db):
        with pytest.raises(NotFound):
            await EnrollmentLifecycle(db).validate(999, ADMIN_ID)

    async def test_second_validate_fails(self, db, seed):
        enrollment_id = (await seed.enrollment(await seed.student(), await seed.course())).id
        lifecycle = EnrollmentLifecycle(db)
        await lifecycle.validate(enrollment_id, ADMIN_ID)

        with pytest.raises(InvalidTransition):
            await lifecycle.validate(enrollment_id, ADMIN_ID)
        assert len(await lifecycle.get_history(enrollment_id)) == 1

    async def test_failed_history_write_keeps_status(self, db, seed, monkeypatch):
        enrollment_id = (await seed.enrollment(await seed.student(), await seed.course())).id

        async def broken_record(self, *args, **kwargs):
            raise RuntimeError("history table unavailable")

        monkeypatch.setattr(AuditTrail, "record", broken_record)
        lifecycle = EnrollmentLifecycle(db)

        with pytest.raises(RuntimeError):
            await lifecycle.validate(enrollment_id, ADMIN_ID)

        current = await lifecycle.get_enrollment(enrollment_id)
        assert current.registration_status == RegistrationStatus.PENDING
        assert await lifecycle.get_history(enrollment_id) == []

    async def test_rejecting_seated_enrollment_reopens_full_group(self, db, seed):
        course = await seed.course()
        group = await seed.group(course, max_students=1)
        alice = await seed.student(first_name="Alice")
        bob = await seed.student(first_name="Bob")
        alice_enrollment = await seed.enrollment(alice, course)
        await seed.enrollment(bob, course)
        group_id, alice_id, bob_id = group.id, alice.id, bob.id
        enrollment_id = alice_enrollment.id
        manager = GroupCapacityManager(db)

        assert (await manager.assign_student(group_id, alice_id)).group.status == GroupStatus.FULL

        await EnrollmentLifecycle(db).reject(enrollment_id, ADMIN_ID)

        reopened, seated = await manager.occupancy(group_id)
        assert seated == 0
        assert reopened.status == GroupStatus.OPEN

        change = await manager.assign_student(group_id, bob_id)
        assert change.occupancy == 1
        assert change.group.status == GroupStatus.FULL


class TestRequestEnrollment:
    async def test_creates_pending_enrollment(self, db, seed):
        student = await seed.student()
        course = await seed.course()

        enrollment = await EnrollmentLifecycle(db).request_enrollment(student.id, course.id, level=Level.A2)

        assert enrollment.registration_status == RegistrationStatus.PENDING
        assert enrollment.group_id is None
        assert enrollment.level == Level.A2

    async def test_duplicate_enrollment(self, db, seed):
        student = await seed.student()
        course = await seed.course()
        lifecycle = EnrollmentLifecycle(db)
        await lifecycle.request_enrollment(student.id, course.id)

        with pytest.raises(DuplicateEnrollment) as exc_info:
            await lifecycle.request_enrollment(student.id, course.id)
        assert exc_info.value.status_code == 409

    async def test_active_enrollment_limit(self, db, seed):
        student = await seed.student()
        lifecycle = EnrollmentLifecycle(db)
        for code in ("A", "B", "C"):
            course = await seed.course(name=f"Course {code}", code=code)
            await lifecycle.request_enrollment(student.id, course.id)

        extra = await seed.course(name="Course D", code="D")
        with pytest.raises(ActiveEnrollmentLimit) as exc_info:
            await lifecycle.request_enrollment(student.id, extra.id)
        assert exc_info.value.extra == {"current_active": 3, "max_allowed": 3}

    async def test_finished_enrollments_do_not_count_toward_limit(self, db, seed):
        student = await seed.student()
        for code in ("A", "B", "C"):
            course = await seed.course(name=f"Course {code}", code=code)
            await seed.enrollment(student, course, status=RegistrationStatus.FINISHED)

        extra = await seed.course(name="Course D", code="D")
        enrollment = await EnrollmentLifecycle(db).request_enrollment(student.id, extra.id)
        assert enrollment.registration_status == RegistrationStatus.PENDING

    async def test_unknown_student_and_course(self, db, seed):
        course_id = (await seed.course()).id
        student_id = (await seed.student()).id
        lifecycle = EnrollmentLifecycle(db)

        with pytest.raises(NotFound):
            await lifecycle.request_enrollment(999, course_id)
        with pytest.raises(NotFound):
            await lifecycle.request_enrollment(student_id, 999)

    async def test_with_group_takes_group_level_and_fills_it(self, db, seed):
        course = await seed.course()
        group = await seed.group(course, max_students=1, level=Level.C1)
        student = await seed.student()

        enrollment = await EnrollmentLifecycle(db).request_enrollment(student.id, course.id, group.id)

        assert enrollment.group_id == group.id
        assert enrollment.level == Level.C1
        await db.refresh(group)
        assert group.status == GroupStatus.FULL

    async def test_with_full_group(self, db, seed):
        course = await seed.course()
        group = await seed.group(course, max_students=1)
        await seed.enrollment(await seed.student(), course, group=group)
        newcomer = await seed.student(first_name="Bruno")

        with pytest.raises(GroupFull):
            await EnrollmentLifecycle(db).request_enrollment(newcomer.id, course.id, group.id)

    async def test_with_closed_group(self, db, seed):
        course = await seed.course()
        group = await seed.group(course, status=GroupStatus.CLOSED)
        student = await seed.student()

        with pytest.raises(GroupClosed):
            await EnrollmentLifecycle(db).request_enrollment(student.id, course.id, group.id)

    async def test_with_group_of_another_course(self, db, seed):
        course = await seed.course()
        other = await seed.course(name="French", code="FRA")
        group = await seed.group(other)
        student = await seed.student()

        with pytest.raises(InvalidReference):
            await EnrollmentLifecycle(db).request_enrollment(student.id, course.id, group.id)
