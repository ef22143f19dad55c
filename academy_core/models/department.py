"""Department model."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from academy_core.core.database import Base


class Department(Base):
    """Department a group may be attached to."""

    __tablename__ = "departments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<Department(id={self.id}, name='{self.name}')>"
