# =============================================================================
# core/services/application_service.py - Application Lifecycle
# =============================================================================
# Handles users applying to projects and admins deciding on applications.
#
# - submit:  creates a PENDING application on an OPEN project
# - decide:  PENDING -> ACCEPTED | REJECTED (admin)
#
# The "one PENDING application per user and project" rule is a storage-level
# unique constraint; a duplicate insert surfaces as DuplicateApplicationError.
# Decisions are conditional updates guarded by status = PENDING, so two
# admins racing on the same application cannot both win.
# =============================================================================

import logging

from app.exceptions import (
    AlreadyDecidedError,
    ApplicationNotFoundError,
    DuplicateApplicationError,
    InputValidationError,
    ProjectNotOpenError,
)
from core.authorization import ADMIN_ONLY, ANY_USER, SelfOrAdmin, ensure_authorized, require_email
from core.models.application import (
    DECISION_STATUSES,
    Application,
    ApplicationStatus,
    ApplicationWithProject,
)
from core.models.identity import Identity
from core.models.project import ProjectStatus
from core.services.base import StoreService, parse_choice
from core.services.project_service import ProjectService
from lib.document_store import DuplicateKeyError
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

APPLICATIONS = "applications"


class ApplicationService(StoreService):
    """Service for the application lifecycle."""

    def __init__(self, store, projects: ProjectService | None = None):
        super().__init__(store)
        self.projects = projects or ProjectService(store)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def submit(self, identity: Identity, project_id: str, answers: list[str]) -> Application:
        """
        Apply to a project.

        Args:
            identity: The caller (must be authenticated with an email)
            project_id: Project to apply to
            answers: Ordered answers, at least one

        Returns:
            The new PENDING application

        Raises:
            ProjectNotFoundError: If the project doesn't exist
            ProjectNotOpenError: If the project is not OPEN
            InputValidationError: If answers is empty
            DuplicateApplicationError: If a PENDING application already exists
        """
        ensure_authorized(ANY_USER, identity)
        email = require_email(identity)

        project = self.projects.load(project_id)
        if project.status != ProjectStatus.OPEN:
            raise ProjectNotOpenError(project_id, project.status.value)

        if not answers:
            raise InputValidationError(
                "Answers are required",
                details={"field": "answers"},
                suggestion="Provide at least one answer",
            )

        now = utc_now_iso()
        try:
            doc = self.store.insert(APPLICATIONS, {
                "project_id": project_id,
                "user_id": email,
                "answers": list(answers),
                "status": ApplicationStatus.PENDING.value,
                "created_at": now,
                "updated_at": now,
            })
        except DuplicateKeyError:
            raise DuplicateApplicationError(project_id)

        logger.info(f"Application {doc['id']} submitted by {email} for project {project_id}")
        return Application(**doc)

    def decide(
        self,
        identity: Identity,
        application_id: str,
        new_status: str | ApplicationStatus,
    ) -> ApplicationWithProject:
        """
        Accept or reject a pending application. Admin only.

        Deciding again with the status the application already has is an
        idempotent success; trying to change a decided application fails.

        Raises:
            InputValidationError: If new_status is not ACCEPTED or REJECTED
            ApplicationNotFoundError: If the application doesn't exist
            AlreadyDecidedError: If the application was decided differently
        """
        ensure_authorized(ADMIN_ONLY, identity)
        target = parse_choice(ApplicationStatus, new_status, "status", DECISION_STATUSES)

        doc = self.store.update_by_id(
            APPLICATIONS,
            application_id,
            {"status": target.value, "updated_at": utc_now_iso()},
            guard={"status": ApplicationStatus.PENDING.value},
        )

        if doc is None:
            doc = self.store.find_by_id(APPLICATIONS, application_id)
            if doc is None:
                raise ApplicationNotFoundError(application_id)
            if doc["status"] != target.value:
                raise AlreadyDecidedError("Application", application_id, doc["status"], target.value)
            logger.info(f"Application {application_id} already {target.value}; nothing to do")
        else:
            logger.info(f"Application {application_id} {target.value.lower()} by {identity.email or 'admin'}")

        return self._with_project(Application(**doc))

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get(self, identity: Identity, application_id: str) -> ApplicationWithProject:
        """Fetch one application. Visible to its applicant and to admins."""
        ensure_authorized(ANY_USER, identity)

        doc = self.store.find_by_id(APPLICATIONS, application_id)
        if doc is None:
            raise ApplicationNotFoundError(application_id)
        ensure_authorized(SelfOrAdmin(doc["user_id"]), identity)
        return self._with_project(Application(**doc))

    def list_mine(self, identity: Identity) -> list[ApplicationWithProject]:
        """The caller's own applications, newest first."""
        ensure_authorized(ANY_USER, identity)
        email = require_email(identity)

        docs = self.store.find(APPLICATIONS, {"user_id": email}, order_by="created_at", descending=True)
        return self._join([Application(**d) for d in docs])

    def list_all(self, identity: Identity, status: ApplicationStatus | None = None) -> list[ApplicationWithProject]:
        """Every application, newest first. Admin only."""
        ensure_authorized(ADMIN_ONLY, identity)

        filters = {"status": status.value} if status else None
        docs = self.store.find(APPLICATIONS, filters, order_by="created_at", descending=True)
        return self._join([Application(**d) for d in docs])

    # -------------------------------------------------------------------------
    # Joins
    # -------------------------------------------------------------------------

    def _with_project(self, application: Application) -> ApplicationWithProject:
        return self._join([application])[0]

    def _join(self, applications: list[Application]) -> list[ApplicationWithProject]:
        summaries = self.projects.summaries([a.project_id for a in applications])
        return [
            ApplicationWithProject(**a.model_dump(), project=summaries.get(a.project_id))
            for a in applications
        ]
