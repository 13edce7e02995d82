# =============================================================================
# app/routers/projects.py - Project Endpoints
# =============================================================================
# Project listing and lookup for any signed-in caller; creation and status
# changes for admins. Applying to a project lives here too.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path, Query, status

from app.auth import IdentityDep
from app.dependencies import ApplicationServiceDep, ProjectServiceDep
from app.responses import success
from core.models.application import ApplicationCreate
from core.models.project import ProjectCreate, ProjectStatus, ProjectStatusUpdate

router = APIRouter()


@router.get("")
async def list_projects(
    identity: IdentityDep,
    service: ProjectServiceDep,
    status_filter: Annotated[ProjectStatus | None, Query(alias="status", description="Filter by status")] = None,
):
    """List projects, newest first."""
    return success(service.list_projects(identity, status_filter))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(
    body: ProjectCreate,
    identity: IdentityDep,
    service: ProjectServiceDep,
):
    """Create a project. Admin only."""
    project = service.create_project(identity, body)
    return success(project, message="Project created")


@router.get("/{project_id}")
async def get_project(
    project_id: Annotated[str, Path(description="Project id")],
    identity: IdentityDep,
    service: ProjectServiceDep,
):
    return success(service.get_project(identity, project_id))


@router.put("/{project_id}/status")
async def update_project_status(
    project_id: Annotated[str, Path(description="Project id")],
    body: ProjectStatusUpdate,
    identity: IdentityDep,
    service: ProjectServiceDep,
):
    """
    Move a project to a new status. Admin only.

    Backwards moves are refused while strict transitions are on.
    """
    project = service.set_status(identity, project_id, body.status)
    return success(project, message=f"Project status is {project.status.value}")


@router.post("/{project_id}/apply", status_code=status.HTTP_201_CREATED)
async def apply_to_project(
    project_id: Annotated[str, Path(description="Project id")],
    body: ApplicationCreate,
    identity: IdentityDep,
    service: ApplicationServiceDep,
):
    """
    Apply to an OPEN project.

    Only one PENDING application per caller and project; a second one
    returns 409 until the first is decided.
    """
    application = service.submit(identity, project_id, body.answers)
    return success(application, message="Application submitted")
