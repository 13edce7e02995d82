# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .project_service import ProjectService
from .application_service import ApplicationService
from .task_service import TaskService
from .chat_service import ChatService
from .modification_service import ModificationService
from .stats_service import StatsService
from .user_service import UserService

__all__ = [
    "ProjectService",
    "ApplicationService",
    "TaskService",
    "ChatService",
    "ModificationService",
    "StatsService",
    "UserService",
]
