# =============================================================================
# app/routers/modifications.py - Task Modification Endpoints
# =============================================================================
# Change requests against a task, mounted under
# /projects/{project_id}/tasks/{task_id}/modifications.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path, status

from app.auth import IdentityDep
from app.dependencies import ModificationServiceDep
from app.responses import success
from core.models.modification import ModificationCreate, ModificationReview

router = APIRouter()

BASE = "/projects/{project_id}/tasks/{task_id}/modifications"

ProjectId = Annotated[str, Path(description="Project id")]
TaskId = Annotated[str, Path(description="Task id")]


@router.get(BASE)
async def list_modifications(
    project_id: ProjectId,
    task_id: TaskId,
    identity: IdentityDep,
    service: ModificationServiceDep,
):
    return success(service.list_for_task(identity, project_id, task_id))


@router.post(BASE, status_code=status.HTTP_201_CREATED)
async def request_modification(
    project_id: ProjectId,
    task_id: TaskId,
    body: ModificationCreate,
    identity: IdentityDep,
    service: ModificationServiceDep,
):
    """Propose a change to the task's content."""
    modification = service.request(identity, project_id, task_id, body)
    return success(modification, message="Modification requested")


@router.put(BASE + "/{modification_id}")
async def review_modification(
    project_id: ProjectId,
    task_id: TaskId,
    modification_id: Annotated[str, Path(description="Modification id")],
    body: ModificationReview,
    identity: IdentityDep,
    service: ModificationServiceDep,
):
    """
    Approve or reject a modification.

    Approval writes the proposed fields onto the task; the response carries
    both the modification and the task as they are now.
    """
    modification, task = service.review(
        identity, project_id, task_id, modification_id, body.status, body.comments
    )
    return success(
        {"modification": modification, "task": task},
        message=f"Modification {modification.status.value.lower()}",
    )
