"""Enrollments API endpoints."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, status
from pydantic import BaseModel, ConfigDict, Field

from academy_core.api.dependencies import AdminUser, Lifecycle
from academy_core.api.schemas import EnrollmentResponse, HistoryEntryResponse
from academy_core.models import Level

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/enrollments", tags=["enrollments"])


class EnrollmentCreate(BaseModel):
    """Enrollment request model."""

    model_config = ConfigDict(extra="forbid")

    student_id: int
    course_id: int
    group_id: Optional[int] = None
    level: Optional[Level] = None


class RejectRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    reason: Optional[str] = Field(default=None, max_length=500)


@router.post("", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
async def request_enrollment(
    payload: EnrollmentCreate,
    lifecycle: Lifecycle,
    admin: AdminUser,
) -> EnrollmentResponse:
    """Create a PENDING enrollment, optionally with a seat in a group."""
    enrollment = await lifecycle.request_enrollment(
        payload.student_id, payload.course_id, payload.group_id, payload.level
    )
    return EnrollmentResponse.model_validate(enrollment)


@router.get("/{enrollment_id}", response_model=EnrollmentResponse)
async def get_enrollment(enrollment_id: int, lifecycle: Lifecycle) -> EnrollmentResponse:
    """Get enrollment by ID."""
    return EnrollmentResponse.model_validate(await lifecycle.get_enrollment(enrollment_id))


@router.get("/{enrollment_id}/history", response_model=List[HistoryEntryResponse])
async def get_enrollment_history(
    enrollment_id: int, lifecycle: Lifecycle
) -> List[HistoryEntryResponse]:
    """Status changes of an enrollment, oldest first."""
    entries = await lifecycle.get_history(enrollment_id)
    return [HistoryEntryResponse.model_validate(entry) for entry in entries]


@router.patch("/{enrollment_id}/validate", response_model=EnrollmentResponse)
async def validate_enrollment(
    enrollment_id: int, lifecycle: Lifecycle, admin: AdminUser
) -> EnrollmentResponse:
    """PENDING → VALIDATED."""
    enrollment = await lifecycle.validate(enrollment_id, admin.user_id)
    return EnrollmentResponse.model_validate(enrollment)


@router.patch("/{enrollment_id}/reject", response_model=EnrollmentResponse)
async def reject_enrollment(
    enrollment_id: int,
    lifecycle: Lifecycle,
    admin: AdminUser,
    payload: Optional[RejectRequest] = Body(default=None),
) -> EnrollmentResponse:
    """PENDING → REJECTED, with an optional reason."""
    reason = payload.reason if payload else None
    enrollment = await lifecycle.reject(enrollment_id, admin.user_id, reason=reason)
    return EnrollmentResponse.model_validate(enrollment)


@router.patch("/{enrollment_id}/mark-paid", response_model=EnrollmentResponse)
async def mark_enrollment_paid(
    enrollment_id: int, lifecycle: Lifecycle, admin: AdminUser
) -> EnrollmentResponse:
    """VALIDATED → PAID."""
    enrollment = await lifecycle.mark_paid(enrollment_id, admin.user_id)
    return EnrollmentResponse.model_validate(enrollment)


@router.patch("/{enrollment_id}/finish", response_model=EnrollmentResponse)
async def finish_enrollment(
    enrollment_id: int, lifecycle: Lifecycle, admin: AdminUser
) -> EnrollmentResponse:
    """PAID → FINISHED."""
    enrollment = await lifecycle.finish(enrollment_id, admin.user_id)
    return EnrollmentResponse.model_validate(enrollment)
