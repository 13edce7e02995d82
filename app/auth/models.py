# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from pydantic import BaseModel, Field

from core.models.identity import CallerKind, Identity


class AdminLoginRequest(BaseModel):
    """Body of the admin code exchange."""
    admin_code: str = Field(..., min_length=1, description="Admin access code")


class IdentityResponse(BaseModel):
    """
    The caller as the server sees it.

    Useful for clients checking whether a stored credential still works.
    """
    kind: CallerKind
    email: str | None = None
    is_admin: bool = False

    @classmethod
    def from_identity(cls, identity: Identity) -> "IdentityResponse":
        return cls(kind=identity.kind, email=identity.email, is_admin=identity.is_admin)


class TokenPayload(BaseModel):
    """Decoded bearer token claims."""
    sub: str | None = None
    email: str | None = None
    role: str = "user"
    exp: int | None = None
    iat: int | None = None
