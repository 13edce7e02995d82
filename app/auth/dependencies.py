# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for caller identity and the admin login
# throttle.
#
# Every request resolves to an Identity (possibly anonymous); routes never
# reject here. The authorization gate in core/authorization.py decides what
# each identity may do.
#
# Usage:
#   from app.auth import IdentityDep
#
#   @router.get("/things")
#   async def list_things(identity: IdentityDep):
#       return service.list_things(identity)
# =============================================================================

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.auth.identity import resolve_identity
from app.auth.throttle import InMemoryAttemptStore, LoginThrottle, RedisAttemptStore
from app.config import settings
from core.models.identity import Identity

logger = logging.getLogger(__name__)

# Bearer extractor that yields None instead of failing when absent
security_optional = HTTPBearer(auto_error=False)


async def get_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security_optional),
) -> Identity:
    """
    Resolve the caller from the Authorization header and admin cookie.

    Returns:
        Identity: anonymous, user or admin
    """
    token = credentials.credentials if credentials else None
    identity = resolve_identity(token, request.cookies.get(settings.ADMIN_COOKIE_NAME))
    logger.debug(f"Resolved caller: {identity.kind.value} {identity.email or ''}")
    return identity


IdentityDep = Annotated[Identity, Depends(get_identity)]


@lru_cache
def get_login_throttle() -> LoginThrottle:
    """
    Shared throttle for the admin code exchange.

    Cached so every request in this process sees the same counters.
    """
    if settings.THROTTLE_BACKEND == "redis":
        store = RedisAttemptStore.from_url(settings.REDIS_URL)
    else:
        store = InMemoryAttemptStore()
    return LoginThrottle(
        store,
        max_attempts=settings.ADMIN_MAX_ATTEMPTS,
        window_seconds=settings.admin_lockout_seconds,
    )


ThrottleDep = Annotated[LoginThrottle, Depends(get_login_throttle)]


def client_address(request: Request) -> str:
    """Network address used to key login attempts."""
    return request.client.host if request.client else "unknown"
