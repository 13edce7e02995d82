# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Resolves who is calling (bearer token and admin session cookie) and guards
# the admin code exchange.
#
# Usage:
#   from app.auth import IdentityDep
#
#   @router.get("/protected")
#   async def protected(identity: IdentityDep):
#       return service.do_thing(identity)
# =============================================================================

from app.auth.dependencies import IdentityDep, get_identity, get_login_throttle
from app.auth.identity import create_access_token, resolve_identity
from app.auth.models import AdminLoginRequest, IdentityResponse

__all__ = [
    "IdentityDep",
    "get_identity",
    "get_login_throttle",
    "create_access_token",
    "resolve_identity",
    "AdminLoginRequest",
    "IdentityResponse",
]
