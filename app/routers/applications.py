# =============================================================================
# app/routers/applications.py - Application Endpoints
# =============================================================================
# Applicants see their own applications; admins see and decide all of them.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path, Query

from app.auth import IdentityDep
from app.dependencies import ApplicationServiceDep
from app.responses import success
from core.models.application import ApplicationDecision, ApplicationStatus

router = APIRouter()


@router.get("")
async def list_my_applications(identity: IdentityDep, service: ApplicationServiceDep):
    """The caller's applications with their project summaries."""
    return success(service.list_mine(identity))


@router.get("/all")
async def list_all_applications(
    identity: IdentityDep,
    service: ApplicationServiceDep,
    status_filter: Annotated[ApplicationStatus | None, Query(alias="status", description="Filter by status")] = None,
):
    """Every application. Admin only."""
    return success(service.list_all(identity, status_filter))


@router.get("/{application_id}")
async def get_application(
    application_id: Annotated[str, Path(description="Application id")],
    identity: IdentityDep,
    service: ApplicationServiceDep,
):
    return success(service.get(identity, application_id))


@router.put("/{application_id}/status")
async def decide_application(
    application_id: Annotated[str, Path(description="Application id")],
    body: ApplicationDecision,
    identity: IdentityDep,
    service: ApplicationServiceDep,
):
    """
    Accept or reject a pending application. Admin only.

    Repeating the same decision succeeds without changes; changing a
    decided application returns 409 ALREADY_DECIDED.
    """
    application = service.decide(identity, application_id, body.status)
    return success(application, message=f"Application {application.status.value.lower()}")
