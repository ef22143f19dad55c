"""Seed database with sample data."""

import asyncio
import logging
import sys
from datetime import datetime, time, timedelta

sys.path.append(".")

from academy_core.core.database import AsyncSessionLocal, init_db
from academy_core.core.security import create_access_token
from academy_core.models import (
    Course,
    Department,
    Enrollment,
    Group,
    GroupStatus,
    Level,
    RegistrationStatus,
    Room,
    Session,
    Student,
    Teacher,
)
from academy_core.utils.timezone import LOCAL_TZ, ensure_utc, now_utc, to_local

logger = logging.getLogger(__name__)


async def seed_data():
    """Seed database with sample data."""
    await init_db()

    async with AsyncSessionLocal() as db:
        department = Department(name="Languages")
        db.add(department)

        rooms = [
            Room(name="Room 101", capacity=20, location="Ground floor"),
            Room(name="Room 102", capacity=25, location="Ground floor"),
            Room(name="Room 201", capacity=15, location="First floor"),
        ]
        teachers = [
            Teacher(first_name="Claire", last_name="Martin"),
            Teacher(first_name="David", last_name="Okafor"),
        ]
        courses = [
            Course(course_name="English", course_code="ENG"),
            Course(course_name="French", course_code="FRA"),
        ]
        db.add_all(rooms + teachers + courses)
        await db.flush()

        groups = [
            Group(name="ENG A1 morning", course_id=courses[0].id, level=Level.A1,
                  max_students=12, status=GroupStatus.OPEN, teacher_id=teachers[0].id,
                  department_id=department.id),
            Group(name="ENG B1 evening", course_id=courses[0].id, level=Level.B1,
                  max_students=10, status=GroupStatus.OPEN, teacher_id=teachers[0].id,
                  department_id=department.id),
            Group(name="FRA A2", course_id=courses[1].id, level=Level.A2,
                  max_students=8, status=GroupStatus.OPEN, teacher_id=teachers[1].id,
                  department_id=department.id),
        ]
        db.add_all(groups)

        students = [
            Student(first_name="Alice", last_name="Dubois"),
            Student(first_name="Bruno", last_name="Silva"),
            Student(first_name="Chen", last_name="Wei"),
            Student(first_name="Dana", last_name="Levi"),
        ]
        db.add_all(students)
        await db.flush()

        db.add_all([
            Enrollment(student_id=students[0].id, course_id=courses[0].id, group_id=groups[0].id,
                       level=Level.A1, registration_status=RegistrationStatus.PENDING),
            Enrollment(student_id=students[1].id, course_id=courses[0].id,
                       registration_status=RegistrationStatus.PENDING),
            Enrollment(student_id=students[2].id, course_id=courses[1].id, group_id=groups[2].id,
                       level=Level.A2, registration_status=RegistrationStatus.PENDING),
        ])

        # Today's sessions in local time
        today = to_local(now_utc()).date()
        for hour, group, room in ((9, groups[0], rooms[0]), (11, groups[2], rooms[1]), (14, groups[1], rooms[0])):
            start = ensure_utc(datetime.combine(today, time(hour, 0), tzinfo=LOCAL_TZ))
            db.add(Session(
                course_id=group.course_id,
                teacher_id=group.teacher_id,
                group_id=group.id,
                room_id=room.id,
                session_date=start,
                end_time=start + timedelta(minutes=90),
                topic=f"{group.name} class",
            ))

        await db.commit()

    token = create_access_token({"sub": "1", "role": "ADMIN"})
    logger.info("✅ Seed data created")
    logger.info(f"🔑 Admin token for local testing: {token}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed_data())
