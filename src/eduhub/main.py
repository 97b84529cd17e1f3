"""
EduHub API - Main Application Entry Point

Builds the FastAPI app: logging, startup of Redis, the database and the
job scheduler, CORS, the versioned API router, probes, and a
development-only diagnostics router.
"""

import logging
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from eduhub.api import api_router
from eduhub.core import redis as redis_module
from eduhub.core.config import settings
from eduhub.core.database import async_session_maker, close_db, init_db
from eduhub.core.redis import close_redis, init_redis
from eduhub.core.scheduler import (
    list_registered_jobs,
    pause_job,
    resume_job,
    start_scheduler,
    stop_scheduler,
    trigger_job_manually,
)
from eduhub.modules.auth import register_auth_jobs

logging.basicConfig(
    level=logging.DEBUG if settings.is_development else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


async def _start_scheduler() -> None:
    register_auth_jobs()
    await start_scheduler()


_STARTUP: list[tuple[str, Callable[[], Awaitable[Any]]]] = [
    ("Redis", init_redis),
    ("Database", init_db),
    ("Scheduler", _start_scheduler),
]


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Start dependencies in order and tear them down in reverse.

    Outside production a dependency that fails to start is logged and
    skipped; Redis-backed features then use their in-process stores.
    """
    logger.info(f"Starting EduHub API ({settings.python_env})")
    for name, start in _STARTUP:
        try:
            await start()
            logger.info(f"{name} started")
        except Exception as e:
            logger.error(f"{name} failed to start: {e}")
            if settings.is_production:
                raise

    yield

    logger.info("Shutting down EduHub API")
    await stop_scheduler()
    await close_redis()
    await close_db()


app = FastAPI(
    title="EduHub API",
    description="Student application platform for South African institutions",
    version="0.1.0",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    return {"service": "EduHub API", "environment": settings.python_env}


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "healthy"}


@app.get("/ready", tags=["Health"])
async def readiness_check() -> dict[str, str]:
    return {"status": "ready"}


def _require_development() -> None:
    if not settings.is_development:
        raise HTTPException(status_code=404, detail="Not found")


debug_router = APIRouter(prefix="/debug", tags=["Debug"], dependencies=[Depends(_require_development)])


@debug_router.get("/connections")
async def debug_connections() -> dict[str, str]:
    """Probe the database and Redis; failures are reported, not raised."""
    status = {}
    try:
        async with async_session_maker() as session:
            await session.execute(text("SELECT 1"))
        status["database"] = "connected"
    except Exception as e:
        status["database"] = f"error: {e}"

    client = redis_module.redis_client
    if client is None:
        status["redis"] = "not initialized"
    else:
        try:
            await client.ping()
            status["redis"] = "connected"
        except Exception as e:
            status["redis"] = f"error: {e}"
    return status


@debug_router.get("/jobs")
async def debug_jobs() -> dict[str, Any]:
    return {"jobs": list_registered_jobs()}


@debug_router.post("/jobs/{job_id}/{action}")
async def debug_job_action(job_id: str, action: str) -> dict[str, Any]:
    """Run (``trigger``), ``pause`` or ``resume`` a registered job."""
    if action == "trigger":
        try:
            return await trigger_job_manually(job_id)
        except ValueError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
    if action == "pause":
        return {"job_id": job_id, "paused": pause_job(job_id)}
    if action == "resume":
        return {"job_id": job_id, "resumed": resume_job(job_id)}
    raise HTTPException(status_code=400, detail=f"Unknown job action: {action}")


app.include_router(debug_router)
