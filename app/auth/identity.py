# =============================================================================
# app/auth/identity.py - Identity Resolution
# =============================================================================
# Turns request credential material into an Identity:
#
#   Bearer token
#     - signed JWT (JWT_SECRET)  -> User(email), or Admin when role = "admin"
#     - raw email address        -> User(email)  (only if ALLOW_EMAIL_TOKENS)
#     - anything else / missing  -> Anonymous
#
#   Admin session cookie
#     - signed admin session JWT -> Admin (keeps the bearer email, if any)
#
# An email never makes anyone an admin by itself; only a signed role claim
# or a valid admin session does.
# =============================================================================

import logging
import re
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError

from app.auth.models import TokenPayload
from app.config import settings
from core.models.identity import Identity

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
USER_ROLE = "user"
ADMIN_SESSION_SCOPE = "admin_session"

EMAIL_TOKEN_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+$")


# =============================================================================
# Issuing
# =============================================================================

def create_access_token(email: str, role: str = USER_ROLE, expires_minutes: int | None = None) -> str:
    """
    Sign a bearer token for an email.

    Args:
        email: Subject of the token
        role: "user" or "admin"
        expires_minutes: Lifetime; defaults to ACCESS_TOKEN_TTL_MINUTES
    """
    now = datetime.now(timezone.utc)
    ttl = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_TTL_MINUTES
    claims = {
        "sub": email,
        "email": email,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=ttl)).timestamp()),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def issue_admin_session_token() -> str:
    """Signed value stored in the admin session cookie."""
    now = datetime.now(timezone.utc)
    claims = {
        "scope": ADMIN_SESSION_SCOPE,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=settings.admin_session_seconds)).timestamp()),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


# =============================================================================
# Resolving
# =============================================================================

def _decode(token: str) -> dict | None:
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        logger.info("Rejected expired token")
    except JWTError:
        pass
    return None


def resolve_bearer(token: str | None) -> Identity:
    """
    Classify a bearer credential.

    Never raises; a credential that can't be used is Anonymous.
    """
    if not token:
        return Identity.anonymous()

    token = token.strip()
    claims = _decode(token)
    if claims is not None:
        try:
            payload = TokenPayload(**claims)
        except ValidationError:
            logger.warning("Signed token with malformed claims")
            return Identity.anonymous()

        email = payload.email or payload.sub
        if payload.role == ADMIN_ROLE:
            return Identity.admin(email)
        if email and EMAIL_TOKEN_PATTERN.match(email):
            return Identity.user(email)
        return Identity.anonymous()

    if settings.ALLOW_EMAIL_TOKENS and EMAIL_TOKEN_PATTERN.match(token):
        return Identity.user(token)

    return Identity.anonymous()


def resolve_admin_cookie(value: str | None) -> bool:
    """True when the cookie holds a valid, unexpired admin session."""
    if not value:
        return False
    claims = _decode(value)
    return bool(claims and claims.get("scope") == ADMIN_SESSION_SCOPE)


def combine(bearer: Identity, has_admin_session: bool) -> Identity:
    """Merge the bearer identity with the admin session flag."""
    if has_admin_session and not bearer.is_admin:
        return Identity.admin(bearer.email)
    return bearer


def resolve_identity(token: str | None, admin_cookie: str | None) -> Identity:
    """Full resolution from both credential sources."""
    return combine(resolve_bearer(token), resolve_admin_cookie(admin_cookie))
