"""Room model."""

from typing import Optional

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from academy_core.core.database import Base


class Room(Base):
    """Room model; a lookup key for conflict detection and occupancy."""

    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    location: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    sessions: Mapped[list["Session"]] = relationship("Session", back_populates="room")

    def __repr__(self) -> str:
        return f"<Room(id={self.id}, name='{self.name}', active={self.is_active})>"
