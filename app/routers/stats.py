# =============================================================================
# app/routers/stats.py - Dashboard Counters
# =============================================================================
# Counts are read one by one and may not agree with each other exactly.
# =============================================================================

from fastapi import APIRouter

from app.auth import IdentityDep
from app.dependencies import StatsServiceDep
from app.responses import success

router = APIRouter()


@router.get("")
async def get_user_stats(identity: IdentityDep, service: StatsServiceDep):
    return success(service.user_stats(identity))


@router.get("/admin")
async def get_admin_stats(identity: IdentityDep, service: StatsServiceDep):
    """Platform-wide counters. Admin only."""
    return success(service.admin_stats(identity))
