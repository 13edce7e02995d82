# =============================================================================
# core/models/stats.py - Dashboard Counters
# =============================================================================
# Each count is read independently; the numbers are not a snapshot taken at
# one instant and may disagree slightly with each other.
# =============================================================================

from pydantic import BaseModel, Field


class UserStats(BaseModel):
    """Counters shown on a user's dashboard."""
    total_projects: int = Field(default=0, ge=0)
    open_projects: int = Field(default=0, ge=0)
    active_applications: int = Field(default=0, ge=0, description="Caller's PENDING or ACCEPTED applications")
    completed_tasks: int = Field(default=0, ge=0, description="Caller's COMPLETED tasks")


class AdminStats(BaseModel):
    """Platform-wide counters for the admin dashboard."""
    total_projects: int = Field(default=0, ge=0)
    open_projects: int = Field(default=0, ge=0)
    total_tasks: int = Field(default=0, ge=0)
    pending_applications: int = Field(default=0, ge=0)
    active_users: int = Field(default=0, ge=0)
