# =============================================================================
# core/services/project_service.py - Project Business Logic
# =============================================================================
# Handles project creation, lookup and the project status lifecycle.
# Separates HTTP concerns from database/business logic.
# =============================================================================

import logging

from app.exceptions import ProjectNotFoundError, ProjectTransitionError, ConflictError
from core.authorization import ADMIN_ONLY, ANY_USER, ensure_authorized
from core.models.identity import Identity
from core.models.project import Project, ProjectCreate, ProjectStatus, ProjectSummary
from core.services.base import StoreService, parse_choice
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

PROJECTS = "projects"


class ProjectService(StoreService):
    """
    Service for project operations.

    Status transitions are forward-only unless strict_transitions is off,
    in which case any status may follow any other.
    """

    def __init__(self, store, strict_transitions: bool = True):
        super().__init__(store)
        self.strict_transitions = strict_transitions

    def create_project(self, identity: Identity, data: ProjectCreate) -> Project:
        """Create a project. Admin only."""
        ensure_authorized(ADMIN_ONLY, identity)

        now = utc_now_iso()
        doc = self.store.insert(PROJECTS, {
            **data.model_dump(mode="json"),
            "created_at": now,
            "updated_at": now,
        })
        logger.info(f"Created project: {doc['id']} ({doc['name']})")
        return Project(**doc)

    def list_projects(self, identity: Identity, status: ProjectStatus | None = None) -> list[Project]:
        """List projects, newest first, optionally filtered by status."""
        ensure_authorized(ANY_USER, identity)

        filters = {"status": status.value} if status else None
        docs = self.store.find(PROJECTS, filters, order_by="created_at", descending=True)
        return [Project(**d) for d in docs]

    def get_project(self, identity: Identity, project_id: str) -> Project:
        ensure_authorized(ANY_USER, identity)
        return self.load(project_id)

    def load(self, project_id: str) -> Project:
        """
        Fetch a project without an authorization check.

        For use by other services after they have run their own gate.

        Raises:
            ProjectNotFoundError: If the project doesn't exist
        """
        doc = self.store.find_by_id(PROJECTS, project_id)
        if not doc:
            raise ProjectNotFoundError(project_id)
        return Project(**doc)

    def summaries(self, project_ids: list[str]) -> dict[str, ProjectSummary]:
        """Minimal summaries for a set of projects, keyed by id. Missing ids are skipped."""
        docs = self.store.find_in(PROJECTS, "id", sorted(set(project_ids)))
        return {
            d["id"]: ProjectSummary(id=d["id"], name=d.get("name") or "", status=d["status"])
            for d in docs
        }

    def set_status(self, identity: Identity, project_id: str, new_status: str | ProjectStatus) -> Project:
        """
        Move a project to a new status. Admin only.

        Setting the current status again is a no-op.

        Raises:
            InputValidationError: If new_status is not a project status
            ProjectNotFoundError: If the project doesn't exist
            ProjectTransitionError: If the move goes backwards (strict mode)
            ConflictError: If the status changed concurrently
        """
        ensure_authorized(ADMIN_ONLY, identity)
        target = parse_choice(ProjectStatus, new_status, "status")

        project = self.load(project_id)
        current = project.status

        if current == target:
            return project

        if self.strict_transitions and not current.can_transition_to(target):
            raise ProjectTransitionError(project_id, current.value, target.value)

        updated = self.store.update_by_id(
            PROJECTS,
            project_id,
            {"status": target.value, "updated_at": utc_now_iso()},
            guard={"status": current.value},
        )
        if updated is None:
            raise ConflictError(
                message="Project status changed while updating",
                details={"project_id": project_id},
                suggestion="Reload the project and try again",
            )

        logger.info(f"Project {project_id} status: {current.value} -> {target.value}")
        return Project(**updated)
