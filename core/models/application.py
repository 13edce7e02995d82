# =============================================================================
# core/models/application.py - Application Schemas
# =============================================================================
# An application is a user's request to join a project.
#
# State machine:
#     PENDING -> ACCEPTED
#             \-> REJECTED
#
# ACCEPTED and REJECTED are terminal. At most one PENDING application may
# exist per (project_id, user_id); storage enforces this with a partial
# unique index.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from .project import ProjectSummary


class ApplicationStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self != ApplicationStatus.PENDING


# Statuses an admin may decide an application into
DECISION_STATUSES = (ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED)


class Application(BaseModel):
    """Stored application document."""

    id: str
    project_id: str
    user_id: str = Field(..., description="Applicant email")
    answers: list[str] = Field(default_factory=list)
    status: ApplicationStatus = ApplicationStatus.PENDING
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ApplicationCreate(BaseModel):
    """
    Schema for applying to a project.

    Example:
        {"answers": ["I run a 10k Discord", "Mostly evenings"]}
    """
    answers: list[str] = Field(..., description="Answers to the project's questions, in order")


class ApplicationDecision(BaseModel):
    """Admin decision on an application (ACCEPTED or REJECTED)."""
    status: str = Field(..., description="ACCEPTED | REJECTED")


class ApplicationWithProject(Application):
    """Application joined with the minimal summary of its project."""
    project: ProjectSummary | None = None
