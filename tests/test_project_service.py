# =============================================================================
# tests/test_project_service.py - Project Service Tests
# =============================================================================

import pytest

from app.exceptions import (
    ForbiddenError,
    InputValidationError,
    ProjectNotFoundError,
    ProjectTransitionError,
    UnauthenticatedError,
)
from core.models.project import ProjectCreate, ProjectStatus
from core.services import ProjectService


class TestCreateAndRead:
    """Test project creation and lookup."""

    def test_admin_creates_project(self, project_service, admin):
        project = project_service.create_project(admin, ProjectCreate(name="Genesis"))

        assert project.status == ProjectStatus.COMING_SOON
        assert project_service.get_project(admin, project.id).name == "Genesis"

    def test_user_cannot_create(self, project_service, user, store):
        with pytest.raises(ForbiddenError):
            project_service.create_project(user, ProjectCreate(name="Genesis"))

        assert store.count("projects") == 0

    def test_anonymous_cannot_list(self, project_service, anonymous):
        with pytest.raises(UnauthenticatedError):
            project_service.list_projects(anonymous)

    def test_list_filters_by_status(self, project_service, admin, user, open_project):
        project_service.create_project(admin, ProjectCreate(name="Later"))

        assert [p.id for p in project_service.list_projects(user, ProjectStatus.OPEN)] == [open_project.id]
        assert len(project_service.list_projects(user)) == 2

    def test_missing_project(self, project_service, user):
        with pytest.raises(ProjectNotFoundError):
            project_service.get_project(user, "missing")


class TestSetStatus:
    """Test the project status lifecycle."""

    def test_forward_transition(self, project_service, admin, open_project):
        project = project_service.set_status(admin, open_project.id, "IN_PROGRESS")

        assert project.status == ProjectStatus.IN_PROGRESS

    def test_backward_transition_refused(self, project_service, admin, open_project):
        with pytest.raises(ProjectTransitionError) as exc_info:
            project_service.set_status(admin, open_project.id, "COMING_SOON")

        assert exc_info.value.status_code == 400
        assert project_service.load(open_project.id).status == ProjectStatus.OPEN

    def test_same_status_is_noop(self, project_service, admin, open_project):
        project = project_service.set_status(admin, open_project.id, ProjectStatus.OPEN)

        assert project.updated_at == open_project.updated_at

    def test_relaxed_transitions(self, store, admin, open_project):
        relaxed = ProjectService(store, strict_transitions=False)

        assert relaxed.set_status(admin, open_project.id, "COMING_SOON").status == ProjectStatus.COMING_SOON

    def test_unknown_status(self, project_service, admin, open_project):
        with pytest.raises(InputValidationError) as exc_info:
            project_service.set_status(admin, open_project.id, "open")

        assert "OPEN" in exc_info.value.details["allowed"]

    def test_user_cannot_change_status(self, project_service, user, open_project):
        with pytest.raises(ForbiddenError):
            project_service.set_status(user, open_project.id, "COMPLETED")
