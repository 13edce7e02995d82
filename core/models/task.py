# =============================================================================
# core/models/task.py - Task Schemas
# =============================================================================
# A task is a unit of work inside a project, assigned to one user (by email).
#
# Task status:
#     PENDING <-> IN_PROGRESS -> COMPLETED   (COMPLETED is terminal, admin only)
#
# Submission status (the assignee's work record on the task):
#     pending -> pending_approval -> approved
#                                \-> rejected -> pending_approval (resubmit)
#
# Deadline and priority are fixed at creation.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class TaskStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class TaskPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class SubmissionStatus(str, Enum):
    PENDING = "pending"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"


# Verdicts an admin may give on a submitted piece of work
REVIEW_VERDICTS = (SubmissionStatus.APPROVED, SubmissionStatus.REJECTED)


class TaskSubmission(BaseModel):
    """Work submitted by the assignee, plus the reviewer's feedback."""

    link: str = ""
    description: str = ""
    status: SubmissionStatus = SubmissionStatus.PENDING
    submitted_at: datetime | None = None
    feedback: str = ""
    last_updated: datetime | None = None


class Task(BaseModel):
    """Stored task document."""

    id: str
    project_id: str
    user_id: str = Field(..., description="Assignee email")
    created_by: str = Field(..., description="Creator email or admin actor")
    title: str
    description: str
    deadline: datetime
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    platform: str | None = None
    deliverables: list[str] = Field(default_factory=list)
    submission: TaskSubmission = Field(default_factory=TaskSubmission)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AssignedTask(Task):
    """Task joined with its project's display name."""
    project_name: str


class TaskCreate(BaseModel):
    """
    Schema for creating a task (admin only).

    Example:
        {
            "user_id": "ambassador@example.com",
            "title": "Host an AMA",
            "description": "One hour AMA on the Discord stage",
            "deadline": "2025-03-01T18:00:00Z",
            "priority": "HIGH"
        }
    """

    user_id: str = Field(..., min_length=3, description="Assignee email")
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=2000)
    deadline: datetime
    priority: TaskPriority = TaskPriority.MEDIUM
    platform: str | None = Field(default=None, max_length=50)
    deliverables: list[str] = Field(default_factory=list)


class TaskStatusUpdate(BaseModel):
    status: str = Field(..., description="PENDING | IN_PROGRESS | COMPLETED")


class SubmissionCreate(BaseModel):
    """Work the assignee submits for review."""
    link: str = Field(..., description="Where the work can be seen")
    description: str = Field(..., description="What was done")


class SubmissionReview(BaseModel):
    """Admin verdict on a submission."""
    status: str = Field(..., description="approved | rejected")
    feedback: str = Field(default="", max_length=2000)
