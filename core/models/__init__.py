# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - identity.py: Caller identity (anonymous / user / admin)
# - project.py: Project documents and status lifecycle
# - application.py: Applications to join a project
# - task.py: Tasks, submissions and reviews
# - modification.py: Change requests against a task
# - chat.py: Project and task chat messages
# - user.py: User profiles keyed by email
# - stats.py: Dashboard counters
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Identity
# -----------------------------------------------------------------------------
from .identity import CallerKind, Identity

# -----------------------------------------------------------------------------
# Projects and Applications
# -----------------------------------------------------------------------------
from .project import (
    Project,
    ProjectCreate,
    ProjectStatus,
    ProjectStatusUpdate,
    ProjectSummary,
)
from .application import (
    Application,
    ApplicationCreate,
    ApplicationDecision,
    ApplicationStatus,
    ApplicationWithProject,
)

# -----------------------------------------------------------------------------
# Tasks and Modifications
# -----------------------------------------------------------------------------
from .task import (
    AssignedTask,
    SubmissionCreate,
    SubmissionReview,
    SubmissionStatus,
    Task,
    TaskCreate,
    TaskPriority,
    TaskStatus,
    TaskStatusUpdate,
    TaskSubmission,
)
from .modification import (
    ModificationCreate,
    ModificationReview,
    ModificationStatus,
    ProposedChanges,
    TaskModification,
)
from .chat import ChatMessage, ChatMessageCreate, MessageType

# -----------------------------------------------------------------------------
# Users and Stats
# -----------------------------------------------------------------------------
from .user import User, UserStatus, UserUpsert
from .stats import AdminStats, UserStats

__all__ = [
    # Identity
    "CallerKind",
    "Identity",
    # Project
    "Project",
    "ProjectCreate",
    "ProjectStatus",
    "ProjectStatusUpdate",
    "ProjectSummary",
    # Application
    "Application",
    "ApplicationCreate",
    "ApplicationDecision",
    "ApplicationStatus",
    "ApplicationWithProject",
    # Task
    "AssignedTask",
    "SubmissionCreate",
    "SubmissionReview",
    "SubmissionStatus",
    "Task",
    "TaskCreate",
    "TaskPriority",
    "TaskStatus",
    "TaskStatusUpdate",
    "TaskSubmission",
    # Modification
    "ModificationCreate",
    "ModificationReview",
    "ModificationStatus",
    "ProposedChanges",
    "TaskModification",
    # Chat
    "ChatMessage",
    "ChatMessageCreate",
    "MessageType",
    # User / Stats
    "User",
    "UserStatus",
    "UserUpsert",
    "AdminStats",
    "UserStats",
]
