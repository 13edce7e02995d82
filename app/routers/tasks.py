# =============================================================================
# app/routers/tasks.py - Task Endpoints
# =============================================================================
# Endpoints:
#   GET  /tasks/assigned                            - Caller's tasks
#   GET  /projects/{project_id}/tasks               - All tasks (admin)
#   POST /projects/{project_id}/tasks               - Create task (admin)
#   GET  /projects/{project_id}/tasks/{task_id}     - One task
#   PUT  /projects/{project_id}/tasks/{task_id}/status
#   POST /projects/{project_id}/tasks/{task_id}/submit
#   PUT  /projects/{project_id}/tasks/{task_id}/review   (admin)
#
# A task that exists but isn't assigned to the caller answers 404, same as
# one that doesn't exist.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path, Query, status

from app.auth import IdentityDep
from app.dependencies import TaskServiceDep
from app.responses import success
from core.models.task import SubmissionCreate, SubmissionReview, TaskCreate, TaskStatusUpdate

router = APIRouter()

ProjectId = Annotated[str, Path(description="Project id")]
TaskId = Annotated[str, Path(description="Task id")]


@router.get("/tasks/assigned")
async def list_assigned_tasks(
    identity: IdentityDep,
    service: TaskServiceDep,
    project_id: Annotated[str | None, Query(description="Only tasks in this project")] = None,
):
    """Tasks assigned to the caller, newest first, with project names."""
    return success(service.list_assigned(identity, project_id))


@router.get("/projects/{project_id}/tasks")
async def list_project_tasks(project_id: ProjectId, identity: IdentityDep, service: TaskServiceDep):
    return success(service.list_project_tasks(identity, project_id))


@router.post("/projects/{project_id}/tasks", status_code=status.HTTP_201_CREATED)
async def create_task(
    project_id: ProjectId,
    body: TaskCreate,
    identity: IdentityDep,
    service: TaskServiceDep,
):
    """Create and assign a task. Admin only."""
    task = service.create_task(identity, project_id, body)
    return success(task, message="Task created")


@router.get("/projects/{project_id}/tasks/{task_id}")
async def get_task(project_id: ProjectId, task_id: TaskId, identity: IdentityDep, service: TaskServiceDep):
    return success(service.get_one(identity, project_id, task_id))


@router.put("/projects/{project_id}/tasks/{task_id}/status")
async def update_task_status(
    project_id: ProjectId,
    task_id: TaskId,
    body: TaskStatusUpdate,
    identity: IdentityDep,
    service: TaskServiceDep,
):
    task = service.update_status(identity, project_id, task_id, body.status)
    return success(task, message=f"Task status is {task.status.value}")


@router.post("/projects/{project_id}/tasks/{task_id}/submit")
async def submit_task(
    project_id: ProjectId,
    task_id: TaskId,
    body: SubmissionCreate,
    identity: IdentityDep,
    service: TaskServiceDep,
):
    """Submit work on a task for review."""
    task = service.submit_work(identity, project_id, task_id, body)
    return success(task, message="Task submitted successfully")


@router.put("/projects/{project_id}/tasks/{task_id}/review")
async def review_task_submission(
    project_id: ProjectId,
    task_id: TaskId,
    body: SubmissionReview,
    identity: IdentityDep,
    service: TaskServiceDep,
):
    """Approve or reject submitted work. Admin only."""
    task = service.review_submission(identity, project_id, task_id, body.status, body.feedback)
    return success(task, message=f"Submission {task.submission.status.value}")
