"""Teacher model."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from academy_core.core.database import Base


class Teacher(Base):
    """Teacher reference row, also the lock target for teacher bookings."""

    __tablename__ = "teachers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    groups: Mapped[list["Group"]] = relationship("Group", back_populates="teacher")
    sessions: Mapped[list["Session"]] = relationship(
        "Session", back_populates="teacher"
    )

    def __repr__(self) -> str:
        return f"<Teacher(id={self.id}, name='{self.full_name}', active={self.active})>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
