# =============================================================================
# core/models/modification.py - Task Modification Schemas
# =============================================================================
# A modification is a proposed change to a task's content awaiting review.
#
# State machine:
#     PENDING -> APPROVED   (proposed changes are applied to the task)
#             \-> REJECTED  (task untouched)
#
# Only content fields can be proposed; deadline and priority are not part of
# ProposedChanges and unknown fields are rejected.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ModificationStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


REVIEW_STATUSES = (ModificationStatus.APPROVED, ModificationStatus.REJECTED)


class ProposedChanges(BaseModel):
    """Partial set of task fields a modification may change."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1, max_length=2000)
    deliverables: list[str] | None = None
    platform: str | None = Field(default=None, max_length=50)

    def changed_fields(self) -> dict:
        """Only the fields that were actually proposed."""
        return self.model_dump(exclude_none=True)


class TaskModification(BaseModel):
    """Stored modification document."""

    id: str
    task_id: str
    proposed_changes: ProposedChanges = Field(default_factory=ProposedChanges)
    comments: str
    requested_by: str
    status: ModificationStatus = ModificationStatus.PENDING
    reviewed_by: str | None = None
    review_comments: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ModificationCreate(BaseModel):
    """
    Schema for proposing a change to a task.

    Example:
        {
            "proposed_changes": {"title": "Host two AMAs"},
            "comments": "Community asked for a second session"
        }
    """
    proposed_changes: ProposedChanges
    comments: str = Field(..., min_length=1, max_length=2000)


class ModificationReview(BaseModel):
    status: str = Field(..., description="APPROVED | REJECTED")
    comments: str | None = Field(default=None, max_length=2000)
