"""Room schedule and occupancy endpoints."""

from datetime import date, datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from academy_core.api.dependencies import ConflictDetector, Projection
from academy_core.api.schemas import RoomOverviewResponse, SessionResponse
from academy_core.services.occupancy import session_end, session_start
from academy_core.services.schedule_export import build_room_schedule_workbook, export_filename
from academy_core.utils.timezone import ensure_utc, now_utc, to_local

router = APIRouter(prefix="/rooms", tags=["rooms"])


class GridSessionResponse(BaseModel):
    session_id: int
    room_id: Optional[int]
    teacher_id: int
    group_id: int
    start: datetime
    end: datetime
    topic: Optional[str]


class DailyGridResponse(BaseModel):
    """Sessions of a day bucketed into display slots."""

    date: date
    slots: Dict[str, List[GridSessionResponse]]


class AvailabilityResponse(BaseModel):
    room_id: int
    start: datetime
    end: datetime
    available: bool
    sessions_that_day: int
    conflicts: List[SessionResponse]


class RoomScheduleResponse(BaseModel):
    room_id: int
    name: str
    sessions: List[SessionResponse]


def _resolve_day(day: Optional[date], now: datetime) -> date:
    return day or to_local(now).date()


# Static paths are declared before the ``/{room_id}`` ones


@router.get("/schedule", response_model=RoomOverviewResponse)
async def get_room_schedule_overview(
    projection: Projection,
    day: Optional[date] = Query(default=None, alias="date"),
    at: Optional[datetime] = Query(default=None, description="Reference time, defaults to now"),
) -> RoomOverviewResponse:
    """Every active room with its sessions of the day and whether it is busy now."""
    now = ensure_utc(at) if at else now_utc()
    overview = await projection.room_overview(_resolve_day(day, now), now)
    return RoomOverviewResponse.model_validate(overview)


@router.get("/schedule/grid", response_model=DailyGridResponse)
async def get_daily_grid(
    projection: Projection,
    day: Optional[date] = Query(default=None, alias="date"),
) -> DailyGridResponse:
    day = _resolve_day(day, now_utc())
    grid = await projection.slot_grid(day)
    return DailyGridResponse(
        date=day,
        slots={
            label: [
                GridSessionResponse(
                    session_id=s.id,
                    room_id=s.room_id,
                    teacher_id=s.teacher_id,
                    group_id=s.group_id,
                    start=session_start(s),
                    end=session_end(s),
                    topic=s.topic,
                )
                for s in sessions
            ]
            for label, sessions in grid.items()
        },
    )


@router.get("/schedule/export")
async def export_room_schedule(
    projection: Projection,
    day: Optional[date] = Query(default=None, alias="date"),
) -> StreamingResponse:
    """Export the day's room schedule to Excel."""
    now = now_utc()
    day = _resolve_day(day, now)
    overview = await projection.room_overview(day, now)
    output = build_room_schedule_workbook(overview)
    return StreamingResponse(
        output,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={export_filename(day)}"},
    )


@router.get("/{room_id}/availability", response_model=AvailabilityResponse)
async def check_room_availability(
    room_id: int,
    detector: ConflictDetector,
    start: datetime,
    end: Optional[datetime] = None,
) -> AvailabilityResponse:
    """Would a session in ``[start, end)`` fit in this room?"""
    availability = await detector.check_room_availability(room_id, start, end)
    return AvailabilityResponse(
        room_id=room_id,
        start=availability.start,
        end=availability.end,
        available=availability.available,
        sessions_that_day=availability.sessions_that_day,
        conflicts=[SessionResponse.model_validate(s) for s in availability.conflicts],
    )


@router.get("/{room_id}/schedule", response_model=RoomScheduleResponse)
async def get_room_schedule(
    room_id: int,
    detector: ConflictDetector,
    date_from: Optional[date] = Query(default=None, alias="from"),
    date_to: Optional[date] = Query(default=None, alias="to"),
) -> RoomScheduleResponse:
    """Sessions held in one room, ordered by start."""
    room, sessions = await detector.room_schedule(room_id, date_from, date_to)
    return RoomScheduleResponse(
        room_id=room.id,
        name=room.name,
        sessions=[SessionResponse.model_validate(s) for s in sessions],
    )
