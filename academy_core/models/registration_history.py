"""Registration history model."""

from datetime import datetime

from sqlalchemy import DateTime, Enum as SQLEnum, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from academy_core.core.database import Base
from academy_core.models.enrollment import RegistrationStatus


class RegistrationHistoryEntry(Base):
    """Append-only record of one enrollment status transition."""

    __tablename__ = "registration_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    enrollment_id: Mapped[int] = mapped_column(ForeignKey("enrollments.id"), nullable=False)
    old_status: Mapped[RegistrationStatus] = mapped_column(
        SQLEnum(RegistrationStatus), nullable=False
    )
    new_status: Mapped[RegistrationStatus] = mapped_column(
        SQLEnum(RegistrationStatus), nullable=False
    )
    changed_by: Mapped[int] = mapped_column(Integer, nullable=False)
    changed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_history_enrollment_changed", "enrollment_id", "changed_at"),
    )

    # Relationships
    enrollment: Mapped["Enrollment"] = relationship("Enrollment", back_populates="history")

    def __repr__(self) -> str:
        return (
            f"<RegistrationHistoryEntry(id={self.id}, enrollment_id={self.enrollment_id}, "
            f"{self.old_status} -> {self.new_status}, by={self.changed_by})>"
        )
