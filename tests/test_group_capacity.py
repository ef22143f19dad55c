"""Group seat assignment tests."""

import pytest

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
from academy_core.models import GroupStatus, Level, RegistrationStatus
from academy_core.services.group_capacity import GroupCapacityManager


async def test_assign_copies_level_and_counts_seat(db, seed):
    course = await seed.course()
    group = await seed.group(course, level=Level.B2)
    student = await seed.student()
    await seed.enrollment(student, course)

    change = await GroupCapacityManager(db).assign_student(group.id, student.id)

    assert change.enrollment.group_id == group.id
    assert change.enrollment.level == Level.B2
    assert change.occupancy == 1
    assert change.group.status == GroupStatus.OPEN


async def test_last_seat_marks_group_full_and_next_join_fails(db, seed):
    course = await seed.course()
    group = await seed.group(course, max_students=2)
    students = [await seed.student(first_name=f"S{i}") for i in range(3)]
    for student in students:
        await seed.enrollment(student, course)
    group_id = group.id
    student_ids = [s.id for s in students]
    manager = GroupCapacityManager(db)

    await manager.assign_student(group_id, student_ids[0])
    change = await manager.assign_student(group_id, student_ids[1])
    assert change.occupancy == 2
    assert change.group.status == GroupStatus.FULL

    with pytest.raises(GroupFull) as exc_info:
        await manager.assign_student(group_id, student_ids[2])
    assert exc_info.value.extra == {"occupancy": 2, "max_students": 2}

    _, seated = await manager.occupancy(group_id)
    assert seated == 2


async def test_remove_reopens_full_group(db, seed):
    course = await seed.course()
    group = await seed.group(course, max_students=1)
    student = await seed.student()
    await seed.enrollment(student, course, group=group)
    group_id, student_id = group.id, student.id
    manager = GroupCapacityManager(db)

    # Seeded directly, so the group still says OPEN; a removal must not break that
    change = await manager.remove_student(group_id, student_id)
    assert change.enrollment.group_id is None
    assert change.occupancy == 0

    await manager.assign_student(group_id, student_id)
    _, seated = await manager.occupancy(group_id)
    assert seated == 1

    change = await manager.remove_student(group_id, student_id)
    assert change.group.status == GroupStatus.OPEN


async def test_remove_not_assigned(db, seed):
    course = await seed.course()
    group = await seed.group(course)
    student = await seed.student()
    await seed.enrollment(student, course)

    with pytest.raises(NotAssigned):
        await GroupCapacityManager(db).remove_student(group.id, student.id)


async def test_assign_twice(db, seed):
    course = await seed.course()
    group = await seed.group(course)
    student = await seed.student()
    await seed.enrollment(student, course)
    group_id, student_id = group.id, student.id
    manager = GroupCapacityManager(db)
    await manager.assign_student(group_id, student_id)

    with pytest.raises(AlreadyAssigned):
        await manager.assign_student(group_id, student_id)


async def test_assign_while_in_another_group(db, seed):
    course = await seed.course()
    first = await seed.group(course, name="First")
    second = await seed.group(course, name="Second")
    student = await seed.student()
    await seed.enrollment(student, course, group=first)
    first_id = first.id

    with pytest.raises(AlreadyInAnotherGroup) as exc_info:
        await GroupCapacityManager(db).assign_student(second.id, student.id)
    assert exc_info.value.extra["current_group_id"] == first_id


async def test_assign_requires_enrollment(db, seed):
    course = await seed.course()
    group = await seed.group(course)
    student = await seed.student()

    with pytest.raises(NotEnrolled):
        await GroupCapacityManager(db).assign_student(group.id, student.id)


async def test_closed_group(db, seed):
    course = await seed.course()
    group = await seed.group(course, status=GroupStatus.CLOSED)
    student = await seed.student()
    await seed.enrollment(student, course)

    with pytest.raises(GroupClosed):
        await GroupCapacityManager(db).assign_student(group.id, student.id)


async def test_rejected_enrollment_cannot_join(db, seed):
    course = await seed.course()
    group = await seed.group(course)
    student = await seed.student()
    await seed.enrollment(student, course, status=RegistrationStatus.REJECTED)

    with pytest.raises(InvalidTransition):
        await GroupCapacityManager(db).assign_student(group.id, student.id)


async def test_rejected_enrollments_do_not_hold_seats(db, seed):
    course = await seed.course()
    group = await seed.group(course, max_students=1)
    rejected = await seed.student(first_name="Rejected")
    await seed.enrollment(rejected, course, status=RegistrationStatus.REJECTED, group=group)
    student = await seed.student()
    await seed.enrollment(student, course)

    change = await GroupCapacityManager(db).assign_student(group.id, student.id)
    assert change.occupancy == 1


async def test_unknown_ids(db, seed):
    course = await seed.course()
    group_id = (await seed.group(course)).id
    student_id = (await seed.student()).id
    manager = GroupCapacityManager(db)

    with pytest.raises(NotFound):
        await manager.assign_student(999, student_id)
    with pytest.raises(NotFound):
        await manager.assign_student(group_id, 999)
    with pytest.raises(NotFound):
        await manager.remove_student(group_id, 999)
    with pytest.raises(NotFound):
        await manager.occupancy(999)
