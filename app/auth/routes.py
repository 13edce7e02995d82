# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# API endpoints for caller identity and the admin session.
#
# Endpoints:
#   GET  /auth/me            - How the server classifies the caller
#   POST /auth/admin/login   - Exchange the admin code for a session cookie
#   GET  /auth/admin/verify  - Whether the caller holds an admin session
#   POST /auth/admin/logout  - Clear the admin session cookie
# =============================================================================

import hmac
import logging

from fastapi import APIRouter, Request, Response

from app.auth.dependencies import IdentityDep, ThrottleDep, client_address
from app.auth.identity import issue_admin_session_token
from app.auth.models import AdminLoginRequest, IdentityResponse
from app.config import settings
from app.exceptions import InvalidAdminCodeError, ServiceUnavailableError
from app.responses import success

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get("/me")
async def get_me(identity: IdentityDep) -> dict:
    """
    Return the caller's resolved identity.

    Anonymous callers get kind "anonymous" rather than an error.
    """
    return success(IdentityResponse.from_identity(identity))


@router.post("/admin/login")
async def admin_login(
    body: AdminLoginRequest,
    request: Request,
    response: Response,
    throttle: ThrottleDep,
) -> dict:
    """
    Exchange the admin access code for an admin session cookie.

    Raises:
        429: After too many failed attempts from this address
        401: If the code is wrong
        503: If no admin code is configured
    """
    address = client_address(request)
    throttle.check(address)

    if not settings.ADMIN_ACCESS_CODE:
        raise ServiceUnavailableError(
            "Admin login is not configured",
            suggestion="Set ADMIN_ACCESS_CODE on the server",
        )

    if not hmac.compare_digest(body.admin_code.encode(), settings.ADMIN_ACCESS_CODE.encode()):
        throttle.record_failure(address)
        raise InvalidAdminCodeError()

    throttle.reset(address)
    response.set_cookie(
        key=settings.ADMIN_COOKIE_NAME,
        value=issue_admin_session_token(),
        max_age=settings.admin_session_seconds,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )
    logger.info(f"Admin session started from {address}")
    return success({"authenticated": True}, message="Admin session started")


@router.get("/admin/verify")
async def admin_verify(identity: IdentityDep) -> dict:
    """Report whether the caller currently holds admin rights."""
    return success({"authenticated": identity.is_admin})


@router.post("/admin/logout")
async def admin_logout(response: Response) -> dict:
    """Clear the admin session cookie."""
    response.delete_cookie(
        key=settings.ADMIN_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    return success({"authenticated": False}, message="Admin session ended")
