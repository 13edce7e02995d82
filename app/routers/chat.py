# =============================================================================
# app/routers/chat.py - Chat Endpoints
# =============================================================================
# Project threads under /projects/{project_id}/chat and task threads under
# /projects/{project_id}/tasks/{task_id}/chat.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path, Query, status

from app.auth import IdentityDep
from app.dependencies import ChatServiceDep
from app.responses import success
from core.models.chat import ChatMessageCreate

router = APIRouter()

ProjectId = Annotated[str, Path(description="Project id")]
TaskId = Annotated[str, Path(description="Task id")]


@router.get("/projects/{project_id}/chat")
async def list_project_messages(
    project_id: ProjectId,
    identity: IdentityDep,
    service: ChatServiceDep,
    user_id: Annotated[str | None, Query(description="Thread owner (admins only)")] = None,
):
    """Your thread in the project; admins see all threads or one user's."""
    return success(service.list_project_messages(identity, project_id, user_id))


@router.post("/projects/{project_id}/chat", status_code=status.HTTP_201_CREATED)
async def post_project_message(
    project_id: ProjectId,
    body: ChatMessageCreate,
    identity: IdentityDep,
    service: ChatServiceDep,
):
    message = service.post_project_message(identity, project_id, body)
    return success(message, message="Message sent")


@router.get("/projects/{project_id}/tasks/{task_id}/chat")
async def list_task_messages(
    project_id: ProjectId,
    task_id: TaskId,
    identity: IdentityDep,
    service: ChatServiceDep,
):
    return success(service.list_task_messages(identity, project_id, task_id))


@router.post("/projects/{project_id}/tasks/{task_id}/chat", status_code=status.HTTP_201_CREATED)
async def post_task_message(
    project_id: ProjectId,
    task_id: TaskId,
    body: ChatMessageCreate,
    identity: IdentityDep,
    service: ChatServiceDep,
):
    """Post into the task's thread. Assignee or admin."""
    message = service.post_task_message(identity, project_id, task_id, body)
    return success(message, message="Message sent")
