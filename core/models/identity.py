# =============================================================================
# core/models/identity.py - Caller Identity
# =============================================================================
# The resolved classification of whoever is making a request:
# - anonymous: no usable credential
# - user:      an authenticated email identity
# - admin:     an admin session or a token carrying the admin role claim
#
# The role is carried explicitly by the value; nothing downstream compares
# email strings to decide who is an admin.
# =============================================================================

from enum import Enum

from pydantic import BaseModel, ConfigDict

from lib.utils import normalize_email


class CallerKind(str, Enum):
    """Tag of the Identity variant."""
    ANONYMOUS = "anonymous"
    USER = "user"
    ADMIN = "admin"


class Identity(BaseModel):
    """
    Caller identity.

    Build instances through the constructors rather than directly:

        Identity.anonymous()
        Identity.user("someone@example.com")
        Identity.admin()                      # admin session without an email
        Identity.admin("ops@example.com")     # admin token carrying an email
    """

    model_config = ConfigDict(frozen=True)

    kind: CallerKind = CallerKind.ANONYMOUS
    email: str | None = None

    @classmethod
    def anonymous(cls) -> "Identity":
        return cls(kind=CallerKind.ANONYMOUS)

    @classmethod
    def user(cls, email: str) -> "Identity":
        return cls(kind=CallerKind.USER, email=normalize_email(email))

    @classmethod
    def admin(cls, email: str | None = None) -> "Identity":
        return cls(kind=CallerKind.ADMIN, email=normalize_email(email) if email else None)

    @property
    def is_authenticated(self) -> bool:
        return self.kind != CallerKind.ANONYMOUS

    @property
    def is_admin(self) -> bool:
        return self.kind == CallerKind.ADMIN

    def owns(self, email: str | None) -> bool:
        """True when this identity's email is the given owner email."""
        return bool(self.email and email and self.email == normalize_email(email))
