# =============================================================================
# core/models/project.py - Project Schemas
# =============================================================================
# A project is what users apply to and what tasks belong to.
# - ProjectStatus: lifecycle states (gates whether applications are accepted)
# - Project: stored document
# - ProjectCreate / ProjectStatusUpdate: request bodies
# - ProjectSummary: minimal view joined onto applications and tasks
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ProjectStatus(str, Enum):
    """
    Project lifecycle.

    Flow: COMING_SOON -> OPEN -> IN_PROGRESS -> COMPLETED

    Applications may only be created while the project is OPEN.
    """
    COMING_SOON = "COMING_SOON"
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

    @property
    def rank(self) -> int:
        return list(ProjectStatus).index(self)

    def can_transition_to(self, target: "ProjectStatus") -> bool:
        """Forward-only: any later state is reachable, earlier ones are not."""
        return target.rank > self.rank


class Project(BaseModel):
    """Stored project document."""

    id: str
    name: str
    description: str = ""
    cover_image: str | None = None
    status: ProjectStatus = ProjectStatus.COMING_SOON
    tags: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProjectCreate(BaseModel):
    """
    Schema for creating a project (admin only).

    Example:
        {
            "name": "Genesis Mint",
            "description": "Community launch",
            "status": "COMING_SOON"
        }
    """

    name: str = Field(..., min_length=1, max_length=200, description="Project name")
    description: str = Field(default="", max_length=5000)
    cover_image: str | None = Field(default=None, description="Cover image URL")
    status: ProjectStatus = Field(default=ProjectStatus.COMING_SOON)
    tags: list[str] = Field(default_factory=list)


class ProjectStatusUpdate(BaseModel):
    """
    Requested project status.

    Kept as a plain string so the service reports out-of-enum values with
    the list of valid statuses.
    """
    status: str = Field(..., description="COMING_SOON | OPEN | IN_PROGRESS | COMPLETED")


class ProjectSummary(BaseModel):
    """Minimal project view joined onto other entities."""

    id: str
    name: str
    status: ProjectStatus
