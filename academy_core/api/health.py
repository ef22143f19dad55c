"""Health check API endpoints."""

import logging

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from academy_core.api.dependencies import DbSession

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="ok", message="Academy core API is running")


@router.get("/health/db", response_model=HealthResponse)
async def health_check_db(db: DbSession) -> HealthResponse:
    """Database health check endpoint."""
    try:
        result = await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"❌ Database health check failed: {e}")
        return HealthResponse(status="error", message=f"Database connection failed: {e}")
    if result.scalar() == 1:
        return HealthResponse(status="ok", message="Database connection is working")
    return HealthResponse(status="error", message="Database query failed")
