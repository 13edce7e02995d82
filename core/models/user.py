# =============================================================================
# core/models/user.py - User Schemas
# =============================================================================
# Users are keyed by email and created or updated by upsert. Profile fields
# are opaque to the platform and stored as one JSON object.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class User(BaseModel):
    """Stored user document."""

    id: str | None = None
    email: str
    status: UserStatus = UserStatus.ACTIVE
    profile: dict[str, Any] = Field(default_factory=dict)
    onboarding_completed: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserUpsert(BaseModel):
    """
    Profile fields to create or update.

    Example:
        {"profile": {"firstname": "Ada", "roles": ["creator"]}, "onboarding_completed": true}
    """
    profile: dict[str, Any] | None = None
    onboarding_completed: bool | None = None
    status: UserStatus | None = None
