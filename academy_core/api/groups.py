"""Group seat endpoints."""

from fastapi import APIRouter
from pydantic import BaseModel

from academy_core.api.dependencies import AdminUser, CapacityManager
from academy_core.api.schemas import EnrollmentResponse, GroupResponse
from academy_core.services.group_capacity import SeatChange

router = APIRouter(prefix="/groups", tags=["groups"])


class SeatChangeResponse(BaseModel):
    """Group and enrollment after a seat operation."""

    group: GroupResponse
    enrollment: EnrollmentResponse
    occupancy: int


class OccupancyResponse(BaseModel):
    group: GroupResponse
    occupancy: int
    max_students: int
    free_seats: int


def _seat_change(change: SeatChange) -> SeatChangeResponse:
    return SeatChangeResponse(
        group=GroupResponse.model_validate(change.group),
        enrollment=EnrollmentResponse.model_validate(change.enrollment),
        occupancy=change.occupancy,
    )


@router.post("/{group_id}/students/{student_id}", response_model=SeatChangeResponse)
async def add_student_to_group(
    group_id: int, student_id: int, capacity: CapacityManager, admin: AdminUser
) -> SeatChangeResponse:
    """Seat an enrolled student in a group."""
    return _seat_change(await capacity.assign_student(group_id, student_id))


@router.delete("/{group_id}/students/{student_id}", response_model=SeatChangeResponse)
async def remove_student_from_group(
    group_id: int, student_id: int, capacity: CapacityManager, admin: AdminUser
) -> SeatChangeResponse:
    """Free the student's seat in a group."""
    return _seat_change(await capacity.remove_student(group_id, student_id))


@router.get("/{group_id}/occupancy", response_model=OccupancyResponse)
async def get_group_occupancy(group_id: int, capacity: CapacityManager) -> OccupancyResponse:
    group, seated = await capacity.occupancy(group_id)
    return OccupancyResponse(
        group=GroupResponse.model_validate(group),
        occupancy=seated,
        max_students=group.max_students,
        free_seats=max(0, group.max_students - seated),
    )
