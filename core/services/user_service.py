# =============================================================================
# core/services/user_service.py - User Profiles
# =============================================================================
# Users are keyed by email and written by upsert; this service never deletes
# them. Profile contents are stored as given.
# =============================================================================

import logging
from typing import Any

from app.exceptions import UserNotFoundError
from core.authorization import ADMIN_ONLY, ANY_USER, SelfOrAdmin, ensure_authorized, require_email
from core.models.identity import Identity
from core.models.user import User, UserStatus, UserUpsert
from core.services.base import StoreService
from lib.utils import normalize_email, utc_now_iso

logger = logging.getLogger(__name__)

USERS = "users"


class UserService(StoreService):
    """Service for user profile operations."""

    def upsert(self, identity: Identity, email: str, data: UserUpsert) -> User:
        """
        Create or update the user with this email.

        Only the fields present in data are written; a new user starts
        ACTIVE with an empty profile.
        """
        email = normalize_email(email)
        ensure_authorized(SelfOrAdmin(email), identity)

        changes: dict[str, Any] = data.model_dump(mode="json", exclude_none=True)
        existing = self.store.find_one(USERS, {"email": email})

        document: dict[str, Any] = {"email": email, **changes, "updated_at": utc_now_iso()}
        if existing is None:
            document.setdefault("status", UserStatus.ACTIVE.value)
            document.setdefault("profile", {})
            document.setdefault("onboarding_completed", False)

        doc = self.store.upsert(USERS, document, on="email")
        logger.info(f"{'Created' if existing is None else 'Updated'} user {email}")
        return User(**doc)

    def get(self, identity: Identity, email: str) -> User:
        """Fetch a user by email. Self or admin."""
        email = normalize_email(email)
        ensure_authorized(SelfOrAdmin(email), identity)

        doc = self.store.find_one(USERS, {"email": email})
        if doc is None:
            raise UserNotFoundError(email)
        return User(**doc)

    def list_users(self, identity: Identity, status: UserStatus | None = None) -> list[User]:
        """All users, newest first. Admin only."""
        ensure_authorized(ADMIN_ONLY, identity)

        filters = {"status": status.value} if status else None
        docs = self.store.find(USERS, filters, order_by="created_at", descending=True)
        return [User(**d) for d in docs]

    def me(self, identity: Identity) -> User:
        """The caller's own user record."""
        ensure_authorized(ANY_USER, identity)
        return self.get(identity, require_email(identity))

    def upsert_me(self, identity: Identity, data: UserUpsert) -> User:
        ensure_authorized(ANY_USER, identity)
        return self.upsert(identity, require_email(identity), data)
