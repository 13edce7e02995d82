# =============================================================================
# app/routers/users.py - User Profile Endpoints
# =============================================================================
# Profiles are keyed by email. A user reads and writes their own; admins can
# read and write any.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path, Query

from app.auth import IdentityDep
from app.dependencies import UserServiceDep
from app.responses import success
from core.models.user import UserStatus, UserUpsert

router = APIRouter()

Email = Annotated[str, Path(description="User email")]


@router.get("")
async def list_users(
    identity: IdentityDep,
    service: UserServiceDep,
    status_filter: Annotated[UserStatus | None, Query(alias="status", description="Filter by status")] = None,
):
    """All users. Admin only."""
    return success(service.list_users(identity, status_filter))


@router.get("/me")
async def get_my_profile(identity: IdentityDep, service: UserServiceDep):
    return success(service.me(identity))


@router.put("/me")
async def upsert_my_profile(body: UserUpsert, identity: IdentityDep, service: UserServiceDep):
    """Create or update the caller's own profile."""
    user = service.upsert_me(identity, body)
    return success(user, message="Profile saved")


@router.get("/{email}")
async def get_user(email: Email, identity: IdentityDep, service: UserServiceDep):
    return success(service.get(identity, email))


@router.put("/{email}")
async def upsert_user(email: Email, body: UserUpsert, identity: IdentityDep, service: UserServiceDep):
    user = service.upsert(identity, email, body)
    return success(user, message="Profile saved")
