# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# /health        process is up; reports which backends are configured
# /health/ready  document store and login throttle store are reachable
#                (503 while either is not)
# =============================================================================

import logging
from typing import Callable

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from app.auth.dependencies import ThrottleDep
from app.config import settings
from app.dependencies import StoreDep

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    environment: str
    storage_backend: str
    throttle_backend: str
    admin_login_enabled: bool


class ReadinessResponse(BaseModel):
    """Per-dependency status: "ok" or "unreachable"."""
    status: str
    storage: str
    throttle: str


def _check(name: str, ping: Callable[[], bool]) -> str:
    try:
        return "ok" if ping() else "unreachable"
    except Exception as e:
        logger.warning(f"{name} readiness check failed: {e}")
        return "unreachable"


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(
        status="ok",
        environment=settings.ENVIRONMENT,
        storage_backend=settings.STORAGE_BACKEND,
        throttle_backend=settings.THROTTLE_BACKEND,
        admin_login_enabled=bool(settings.ADMIN_ACCESS_CODE),
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(store: StoreDep, throttle: ThrottleDep, response: Response):
    """Ready when both storage and the admin attempt store answer."""
    result = ReadinessResponse(
        status="ready",
        storage=_check("Storage", store.ping),
        throttle=_check("Throttle", throttle.ping),
    )
    if "unreachable" in (result.storage, result.throttle):
        result.status = "not_ready"
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return result
