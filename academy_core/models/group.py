"""Group model."""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Enum as SQLEnum, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from academy_core.core.database import Base
from academy_core.models.enrollment import Level


class GroupStatus(str, Enum):
    """Group operational status enum."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"
    FULL = "FULL"
    FINISHED = "FINISHED"


class Group(Base):
    """Capacity-bounded cohort of one course at one level.

    There is no occupancy column: seat usage is always counted from the
    enrollments that reference the group.
    """

    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), nullable=False)
    level: Mapped[Optional[Level]] = mapped_column(SQLEnum(Level), nullable=True)
    max_students: Mapped[int] = mapped_column(Integer, nullable=False, default=25)
    status: Mapped[GroupStatus] = mapped_column(
        SQLEnum(GroupStatus), default=GroupStatus.OPEN, nullable=False
    )
    teacher_id: Mapped[Optional[int]] = mapped_column(ForeignKey("teachers.id"), nullable=True)
    department_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("departments.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    course: Mapped["Course"] = relationship("Course", back_populates="groups")
    teacher: Mapped[Optional["Teacher"]] = relationship("Teacher", back_populates="groups")
    enrollments: Mapped[list["Enrollment"]] = relationship(
        "Enrollment", back_populates="group"
    )
    sessions: Mapped[list["Session"]] = relationship("Session", back_populates="group")

    def __repr__(self) -> str:
        return (
            f"<Group(id={self.id}, name='{self.name}', course_id={self.course_id}, "
            f"max={self.max_students}, status={self.status})>"
        )
