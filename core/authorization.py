# =============================================================================
# core/authorization.py - Authorization Gate
# =============================================================================
# Decides whether an Identity satisfies the role an operation requires.
#
# Required roles:
# - ANY_USER:            any authenticated caller (user or admin)
# - ADMIN_ONLY:          admin callers only
# - SelfOrAdmin(email):  the owner of the resource, or an admin
#
# authorize() is pure and returns a Decision; ensure_authorized() raises the
# matching typed error. Services call ensure_authorized() before touching
# storage, and absence of proof is always a denial.
#
# Usage:
#   ensure_authorized(ADMIN_ONLY, identity)
#   ensure_authorized(SelfOrAdmin(task.user_id), identity)
# =============================================================================

import logging
from dataclasses import dataclass
from enum import Enum

from app.exceptions import ForbiddenError, UnauthenticatedError
from core.models.identity import Identity

logger = logging.getLogger(__name__)


# =============================================================================
# Required Roles
# =============================================================================

@dataclass(frozen=True)
class AnyUser:
    """Any authenticated caller."""


@dataclass(frozen=True)
class AdminOnly:
    """Admin callers only."""


@dataclass(frozen=True)
class SelfOrAdmin:
    """The resource owner (by email) or an admin."""
    owner_email: str | None


RequiredRole = AnyUser | AdminOnly | SelfOrAdmin

ANY_USER = AnyUser()
ADMIN_ONLY = AdminOnly()


# =============================================================================
# Decisions
# =============================================================================

class DenyReason(str, Enum):
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"


@dataclass(frozen=True)
class Decision:
    """Outcome of an authorization check."""
    allowed: bool
    reason: DenyReason | None = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason) -> "Decision":
        return cls(allowed=False, reason=reason)


def authorize(required: RequiredRole, identity: Identity) -> Decision:
    """
    Check an identity against a required role.

    Idempotent and side-effect free.
    """
    if not identity.is_authenticated:
        return Decision.deny(DenyReason.UNAUTHENTICATED)

    if identity.is_admin:
        return Decision.allow()

    if isinstance(required, AnyUser):
        return Decision.allow()

    if isinstance(required, SelfOrAdmin) and identity.owns(required.owner_email):
        return Decision.allow()

    return Decision.deny(DenyReason.FORBIDDEN)


def ensure_authorized(required: RequiredRole, identity: Identity) -> None:
    """
    Raise if the identity does not satisfy the required role.

    Raises:
        UnauthenticatedError: No identity presented
        ForbiddenError: Identity present but role insufficient
    """
    decision = authorize(required, identity)
    if decision.allowed:
        return

    if decision.reason == DenyReason.UNAUTHENTICATED:
        raise UnauthenticatedError()

    logger.warning(f"Forbidden: {identity.kind.value} {identity.email} lacks {type(required).__name__}")
    if isinstance(required, AdminOnly):
        raise ForbiddenError("Admin access required")
    raise ForbiddenError()


def require_email(identity: Identity) -> str:
    """
    Email of the caller, for operations that record who acted.

    An admin session without an email cannot act as an applicant or assignee.
    """
    if not identity.email:
        raise ForbiddenError("This action requires a user identity with an email")
    return identity.email
