# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# Tests swap the document store through app.dependency_overrides:
#   app.dependency_overrides[get_document_store] = lambda: InMemoryDocumentStore()
# =============================================================================

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from app.config import settings
from core.services import (
    ApplicationService,
    ChatService,
    ModificationService,
    ProjectService,
    StatsService,
    TaskService,
    UserService,
)
from lib.document_store import DocumentStore, InMemoryDocumentStore
from lib.supabase_client import SupabaseDocumentStore

logger = logging.getLogger(__name__)


@lru_cache
def get_document_store() -> DocumentStore:
    """
    Get the process-wide document store.

    Built once from settings; "memory" keeps everything in this process.
    """
    if settings.STORAGE_BACKEND == "memory":
        logger.warning("Using in-memory document store; data will not survive a restart")
        return InMemoryDocumentStore()
    return SupabaseDocumentStore.from_settings(settings)


# Type alias for dependency injection
StoreDep = Annotated[DocumentStore, Depends(get_document_store)]


def get_project_service(store: StoreDep) -> ProjectService:
    return ProjectService(store, strict_transitions=settings.PROJECT_STRICT_TRANSITIONS)


def get_application_service(
    store: StoreDep,
    projects: Annotated[ProjectService, Depends(get_project_service)],
) -> ApplicationService:
    return ApplicationService(store, projects)


def get_task_service(
    store: StoreDep,
    projects: Annotated[ProjectService, Depends(get_project_service)],
) -> TaskService:
    return TaskService(store, projects)


def get_chat_service(
    store: StoreDep,
    tasks: Annotated[TaskService, Depends(get_task_service)],
) -> ChatService:
    return ChatService(store, tasks)


def get_modification_service(
    store: StoreDep,
    tasks: Annotated[TaskService, Depends(get_task_service)],
    chat: Annotated[ChatService, Depends(get_chat_service)],
) -> ModificationService:
    return ModificationService(store, tasks, chat)


def get_stats_service(store: StoreDep) -> StatsService:
    return StatsService(store)


def get_user_service(store: StoreDep) -> UserService:
    return UserService(store)


ProjectServiceDep = Annotated[ProjectService, Depends(get_project_service)]
ApplicationServiceDep = Annotated[ApplicationService, Depends(get_application_service)]
TaskServiceDep = Annotated[TaskService, Depends(get_task_service)]
ModificationServiceDep = Annotated[ModificationService, Depends(get_modification_service)]
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
StatsServiceDep = Annotated[StatsService, Depends(get_stats_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
