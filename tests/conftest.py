"""
Test configuration and fixtures.

Every test gets its own SQLite file so sessions opened by the services and by
the API see the same data through separate connections.
"""

import os
from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Set testing environment before the application modules read it
os.environ["ENV"] = "test"
os.environ["TZ"] = "UTC"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["LOG_LEVEL"] = "WARNING"

from academy_core.core.database import Base, get_db  # noqa: E402
from academy_core.core.security import create_access_token  # noqa: E402
from academy_core.main import app  # noqa: E402
from academy_core.models import (  # noqa: E402
    Course,
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

ADMIN_ID = 7


def utc(year, month, day, hour=0, minute=0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


async def _make_engine(path, serialized: bool):
    engine = create_async_engine(f"sqlite+aiosqlite:///{path}", echo=False)

    if serialized:
        # Every transaction takes the database write lock on BEGIN, so
        # concurrent transactions run one after another instead of failing.
        @event.listens_for(engine.sync_engine, "connect")
        def do_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine.sync_engine, "begin")
        def do_begin(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return engine


@pytest.fixture
async def engine(tmp_path):
    engine = await _make_engine(tmp_path / "test.db", serialized=False)
    yield engine
    await engine.dispose()


@pytest.fixture
async def serialized_engine(tmp_path):
    engine = await _make_engine(tmp_path / "serialized.db", serialized=True)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def serialized_factory(serialized_engine):
    return async_sessionmaker(serialized_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """API client whose requests each get their own database session."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict:
    token = create_access_token({"sub": str(ADMIN_ID), "role": "ADMIN"})
    return {"Authorization": f"Bearer {token}"}


class Seeder:
    """Creates reference rows and commits them."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _save(self, obj):
        self.db.add(obj)
        await self.db.commit()
        return obj

    async def student(self, first_name="Alice", last_name="Dubois") -> Student:
        return await self._save(Student(first_name=first_name, last_name=last_name))

    async def teacher(self, first_name="Claire", last_name="Martin") -> Teacher:
        return await self._save(Teacher(first_name=first_name, last_name=last_name, active=True))

    async def course(self, name="English", code=None) -> Course:
        return await self._save(Course(course_name=name, course_code=code))

    async def room(self, name="Room 101", capacity=20, is_active=True) -> Room:
        return await self._save(Room(name=name, capacity=capacity, is_active=is_active))

    async def group(
        self,
        course: Course,
        max_students=25,
        status=GroupStatus.OPEN,
        level=Level.B1,
        name="Group",
    ) -> Group:
        return await self._save(
            Group(name=name, course_id=course.id, level=level, max_students=max_students, status=status)
        )

    async def enrollment(
        self,
        student: Student,
        course: Course,
        status=RegistrationStatus.PENDING,
        group: Group = None,
    ) -> Enrollment:
        return await self._save(
            Enrollment(
                student_id=student.id,
                course_id=course.id,
                group_id=group.id if group else None,
                registration_status=status,
            )
        )

    async def session(
        self,
        course: Course,
        teacher: Teacher,
        group: Group,
        start: datetime,
        end: datetime = None,
        room: Room = None,
        topic=None,
    ) -> Session:
        return await self._save(
            Session(
                course_id=course.id,
                teacher_id=teacher.id,
                group_id=group.id,
                room_id=room.id if room else None,
                session_date=start,
                end_time=end,
                topic=topic,
            )
        )


@pytest.fixture
def seed(db) -> Seeder:
    return Seeder(db)


@pytest.fixture
async def serialized_seed(serialized_factory) -> AsyncGenerator[Seeder, None]:
    async with serialized_factory() as session:
        yield Seeder(session)
