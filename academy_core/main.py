"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from academy_core.api import enrollments, groups, health, rooms, sessions
from academy_core.api.errors import register_exception_handlers
from academy_core.core.database import init_db
from academy_core.core.settings import settings

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting academy core...")

    await init_db()
    logger.info("Database initialized")

    yield

    logger.info("Application stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Academy Enrollment & Scheduling Core",
        description="Enrollment lifecycle, group capacity, session scheduling and room occupancy",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(enrollments.router)
    app.include_router(groups.router)
    app.include_router(sessions.router)
    app.include_router(rooms.router)
    return app


app = create_app()


if __name__ == "__main__":
    import os

    import uvicorn

    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        "academy_core.main:app",
        host="0.0.0.0",
        port=port,
        reload=settings.env == "dev",
        proxy_headers=True,
        forwarded_allow_ips="*",
    )
