"""Session model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from academy_core.core.database import Base


class Session(Base):
    """One scheduled meeting of a group.

    ``end_time`` may be empty for rows created without one; readers fall back
    to the configured default duration.
    """

    __tablename__ = "sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), nullable=False)
    teacher_id: Mapped[int] = mapped_column(ForeignKey("teachers.id"), nullable=False)
    group_id: Mapped[int] = mapped_column(ForeignKey("groups.id"), nullable=False)
    room_id: Mapped[Optional[int]] = mapped_column(ForeignKey("rooms.id"), nullable=True)
    session_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    topic: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("idx_session_teacher_start", "teacher_id", "session_date"),
        Index("idx_session_room_start", "room_id", "session_date"),
    )

    # Relationships
    teacher: Mapped["Teacher"] = relationship("Teacher", back_populates="sessions")
    group: Mapped["Group"] = relationship("Group", back_populates="sessions")
    room: Mapped[Optional["Room"]] = relationship("Room", back_populates="sessions")
    course: Mapped["Course"] = relationship("Course")

    def __repr__(self) -> str:
        return (
            f"<Session(id={self.id}, group_id={self.group_id}, teacher_id={self.teacher_id}, "
            f"room_id={self.room_id}, start={self.session_date}, end={self.end_time})>"
        )
