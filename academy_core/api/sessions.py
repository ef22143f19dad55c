"""Sessions API endpoints."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, status
from pydantic import BaseModel, ConfigDict, Field

from academy_core.api.dependencies import AdminUser, ConflictDetector
from academy_core.api.schemas import SessionResponse
from academy_core.services.scheduling import SessionRequest

router = APIRouter(prefix="/sessions", tags=["sessions"])


class SessionCreate(BaseModel):
    """Session creation model.

    ``end_time`` defaults to the configured session length.
    """

    model_config = ConfigDict(extra="forbid")

    course_id: int
    teacher_id: int
    group_id: int
    room_id: Optional[int] = None
    session_date: datetime
    end_time: Optional[datetime] = None
    topic: Optional[str] = Field(default=None, max_length=300)


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    payload: SessionCreate, detector: ConflictDetector, admin: AdminUser
) -> SessionResponse:
    """Create a session unless its teacher or room is already booked."""
    session = await detector.create_session(
        SessionRequest(
            course_id=payload.course_id,
            teacher_id=payload.teacher_id,
            group_id=payload.group_id,
            start=payload.session_date,
            end=payload.end_time,
            room_id=payload.room_id,
            topic=payload.topic,
        )
    )
    return SessionResponse.model_validate(session)
