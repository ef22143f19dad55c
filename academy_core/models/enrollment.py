"""Enrollment model."""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Enum as SQLEnum, ForeignKey, Integer, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from academy_core.core.database import Base


class RegistrationStatus(str, Enum):
    """Registration status enum."""

    PENDING = "PENDING"
    VALIDATED = "VALIDATED"
    PAID = "PAID"
    FINISHED = "FINISHED"
    REJECTED = "REJECTED"


class Level(str, Enum):
    """Proficiency level enum."""

    A1 = "A1"
    A2 = "A2"
    B1 = "B1"
    B2 = "B2"
    C1 = "C1"


# Statuses that occupy a seat in the referenced group
SEAT_HOLDING_STATUSES = (
    RegistrationStatus.PENDING,
    RegistrationStatus.VALIDATED,
    RegistrationStatus.PAID,
    RegistrationStatus.FINISHED,
)

# Statuses that count against the per-student enrollment limit
ACTIVE_STATUSES = (
    RegistrationStatus.PENDING,
    RegistrationStatus.VALIDATED,
    RegistrationStatus.PAID,
)


class Enrollment(Base):
    """One student's registration for one course.

    The status column is written only by the lifecycle service. The group
    reference is written only after a capacity check.
    """

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollment_student_course"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    student_id: Mapped[int] = mapped_column(ForeignKey("students.id"), nullable=False, index=True)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), nullable=False)
    group_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("groups.id"), nullable=True, index=True
    )
    level: Mapped[Optional[Level]] = mapped_column(SQLEnum(Level), nullable=True)
    registration_status: Mapped[RegistrationStatus] = mapped_column(
        SQLEnum(RegistrationStatus), default=RegistrationStatus.PENDING, nullable=False
    )
    enrollment_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    student: Mapped["Student"] = relationship("Student", back_populates="enrollments")
    course: Mapped["Course"] = relationship("Course", back_populates="enrollments")
    group: Mapped[Optional["Group"]] = relationship("Group", back_populates="enrollments")
    history: Mapped[list["RegistrationHistoryEntry"]] = relationship(
        "RegistrationHistoryEntry",
        back_populates="enrollment",
        order_by="RegistrationHistoryEntry.id",
    )

    def __repr__(self) -> str:
        return (
            f"<Enrollment(id={self.id}, student_id={self.student_id}, "
            f"course_id={self.course_id}, group_id={self.group_id}, "
            f"status={self.registration_status})>"
        )
