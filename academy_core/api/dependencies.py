"""API dependencies for authentication and database access."""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from academy_core.core.database import get_db
from academy_core.core.security import AdminIdentity, verify_token
from academy_core.services.enrollment_lifecycle import EnrollmentLifecycle
from academy_core.services.group_capacity import GroupCapacityManager
from academy_core.services.occupancy import OccupancyProjection
from academy_core.services.scheduling import ScheduleConflictDetector

# Security scheme
security = HTTPBearer(auto_error=False)


async def get_current_admin(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)]
) -> AdminIdentity:
    """Caller identity taken from the bearer token.

    Role checks happen upstream; only ``user_id`` is used here, for history
    attribution.
    """
    identity = verify_token(credentials.credentials) if credentials else None
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


# Dependency aliases for easier use
DbSession = Annotated[AsyncSession, Depends(get_db)]
AdminUser = Annotated[AdminIdentity, Depends(get_current_admin)]


def get_lifecycle(db: DbSession) -> EnrollmentLifecycle:
    return EnrollmentLifecycle(db)


def get_capacity_manager(db: DbSession) -> GroupCapacityManager:
    return GroupCapacityManager(db)


def get_conflict_detector(db: DbSession) -> ScheduleConflictDetector:
    return ScheduleConflictDetector(db)


def get_projection(db: DbSession) -> OccupancyProjection:
    return OccupancyProjection(db)


Lifecycle = Annotated[EnrollmentLifecycle, Depends(get_lifecycle)]
CapacityManager = Annotated[GroupCapacityManager, Depends(get_capacity_manager)]
ConflictDetector = Annotated[ScheduleConflictDetector, Depends(get_conflict_detector)]
Projection = Annotated[OccupancyProjection, Depends(get_projection)]
