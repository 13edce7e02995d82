# =============================================================================
# tests/test_task_service.py - Task Lifecycle Tests
# =============================================================================
# Covers creation, assignment-scoped visibility, status changes, work
# submission and submission review.
# =============================================================================

import pytest

from app.exceptions import (
    ForbiddenError,
    InputValidationError,
    ProjectNotFoundError,
    TaskNotFoundError,
    TaskStateError,
    UnauthenticatedError,
)
from core.models.task import SubmissionCreate, SubmissionStatus, TaskStatus
from core.services.task_service import UNKNOWN_PROJECT_NAME

SUBMISSION = SubmissionCreate(link="https://x.com/post/1", description="Hosted the AMA")


# =============================================================================
# Create and Read
# =============================================================================

class TestCreate:
    """Test task creation."""

    def test_admin_creates_task(self, task):
        assert task.status == TaskStatus.PENDING
        assert task.user_id == "user@x.com"
        assert task.created_by == "ops@x.com"
        assert task.submission.status == SubmissionStatus.PENDING

    def test_session_admin_recorded_as_actor(self, task_service, session_admin, open_project, task_payload):
        task = task_service.create_task(session_admin, open_project.id, task_payload)

        assert task.created_by == "admin"

    def test_assignee_email_normalized(self, task_service, admin, open_project, task_payload):
        payload = task_payload.model_copy(update={"user_id": " User@X.com "})

        assert task_service.create_task(admin, open_project.id, payload).user_id == "user@x.com"

    def test_user_cannot_create(self, task_service, user, open_project, task_payload):
        with pytest.raises(ForbiddenError):
            task_service.create_task(user, open_project.id, task_payload)

    def test_project_must_exist(self, task_service, admin, task_payload):
        with pytest.raises(ProjectNotFoundError):
            task_service.create_task(admin, "missing", task_payload)

    def test_assignee_must_be_email(self, task_service, admin, open_project, task_payload):
        payload = task_payload.model_copy(update={"user_id": "nobody"})

        with pytest.raises(InputValidationError):
            task_service.create_task(admin, open_project.id, payload)


class TestGetOne:
    """Test that tasks are only visible to their assignee and admins."""

    def test_assignee_sees_task_with_submission(self, task_service, user, task, open_project):
        found = task_service.get_one(user, open_project.id, task.id)

        assert found.id == task.id
        assert found.submission.status == SubmissionStatus.PENDING

    def test_other_user_gets_not_found(self, task_service, other_user, task, open_project):
        with pytest.raises(TaskNotFoundError) as exc_info:
            task_service.get_one(other_user, open_project.id, task.id)

        assert exc_info.value.status_code == 404

    def test_not_yours_and_missing_look_the_same(self, task_service, other_user, task, open_project):
        with pytest.raises(TaskNotFoundError) as not_yours:
            task_service.get_one(other_user, open_project.id, task.id)
        with pytest.raises(TaskNotFoundError) as missing:
            task_service.get_one(other_user, open_project.id, "missing")

        assert not_yours.value.message == missing.value.message
        assert not_yours.value.code == missing.value.code

    def test_wrong_project(self, task_service, user, task):
        with pytest.raises(TaskNotFoundError):
            task_service.get_one(user, "other-project", task.id)

    def test_admin_sees_any_task(self, task_service, admin, task, open_project):
        assert task_service.get_one(admin, open_project.id, task.id).id == task.id

    def test_anonymous(self, task_service, anonymous, task, open_project):
        with pytest.raises(UnauthenticatedError):
            task_service.get_one(anonymous, open_project.id, task.id)


class TestListAssigned:
    """Test the caller's task list."""

    def test_only_own_tasks_with_project_name(self, task_service, admin, user, open_project, task_payload):
        task_service.create_task(admin, open_project.id, task_payload)
        task_service.create_task(
            admin, open_project.id, task_payload.model_copy(update={"user_id": "other@x.com"})
        )

        tasks = task_service.list_assigned(user)

        assert len(tasks) == 1
        assert tasks[0].project_name == "Genesis Mint"

    def test_filter_by_project(self, task_service, user, task, open_project):
        assert len(task_service.list_assigned(user, open_project.id)) == 1
        assert task_service.list_assigned(user, "other-project") == []

    def test_unresolved_project_gets_placeholder(self, task_service, user, task, store):
        store.update_by_id("tasks", task.id, {"project_id": "gone"})

        tasks = task_service.list_assigned(user)

        assert tasks[0].project_name == UNKNOWN_PROJECT_NAME

    def test_admin_lists_project_tasks(self, task_service, admin, user, task, open_project):
        assert [t.id for t in task_service.list_project_tasks(admin, open_project.id)] == [task.id]
        with pytest.raises(ForbiddenError):
            task_service.list_project_tasks(user, open_project.id)


# =============================================================================
# Status
# =============================================================================

class TestUpdateStatus:
    """Test task status changes."""

    def test_assignee_starts_work(self, task_service, user, task, open_project):
        updated = task_service.update_status(user, open_project.id, task.id, "IN_PROGRESS")

        assert updated.status == TaskStatus.IN_PROGRESS

    def test_assignee_cannot_complete(self, task_service, user, task, open_project):
        with pytest.raises(ForbiddenError):
            task_service.update_status(user, open_project.id, task.id, "COMPLETED")

    def test_other_user_not_found(self, task_service, other_user, task, open_project):
        with pytest.raises(TaskNotFoundError):
            task_service.update_status(other_user, open_project.id, task.id, "IN_PROGRESS")

    def test_completed_is_terminal(self, task_service, admin, task, open_project):
        task_service.update_status(admin, open_project.id, task.id, "COMPLETED")

        with pytest.raises(TaskStateError):
            task_service.update_status(admin, open_project.id, task.id, "IN_PROGRESS")

    def test_same_status_is_noop(self, task_service, user, task, open_project):
        assert task_service.update_status(user, open_project.id, task.id, "PENDING").status == TaskStatus.PENDING

    def test_unknown_status(self, task_service, user, task, open_project):
        with pytest.raises(InputValidationError):
            task_service.update_status(user, open_project.id, task.id, "DONE")


# =============================================================================
# Submission and Review
# =============================================================================

class TestSubmitWork:
    """Test the assignee submitting work."""

    def test_submit_moves_to_in_progress(self, task_service, user, task, open_project):
        submitted = task_service.submit_work(user, open_project.id, task.id, SUBMISSION)

        assert submitted.status == TaskStatus.IN_PROGRESS
        assert submitted.submission.status == SubmissionStatus.PENDING_APPROVAL
        assert submitted.submission.link == "https://x.com/post/1"
        assert submitted.submission.submitted_at is not None

    def test_blank_fields_rejected(self, task_service, user, task, open_project):
        with pytest.raises(InputValidationError):
            task_service.submit_work(user, open_project.id, task.id, SubmissionCreate(link="  ", description="x"))

    def test_other_user_not_found(self, task_service, other_user, task, open_project):
        with pytest.raises(TaskNotFoundError):
            task_service.submit_work(other_user, open_project.id, task.id, SUBMISSION)

    def test_completed_task_rejects_submission(self, task_service, admin, user, task, open_project):
        task_service.update_status(admin, open_project.id, task.id, "COMPLETED")

        with pytest.raises(TaskStateError):
            task_service.submit_work(user, open_project.id, task.id, SUBMISSION)


class TestReviewSubmission:
    """Test admin review of submitted work."""

    @pytest.fixture
    def submitted(self, task_service, user, task, open_project):
        return task_service.submit_work(user, open_project.id, task.id, SUBMISSION)

    def test_approve_completes_task(self, task_service, admin, submitted, open_project):
        reviewed = task_service.review_submission(admin, open_project.id, submitted.id, "approved", "Great")

        assert reviewed.status == TaskStatus.COMPLETED
        assert reviewed.submission.status == SubmissionStatus.APPROVED
        assert reviewed.submission.feedback == "Great"

    def test_reject_returns_to_in_progress(self, task_service, admin, user, submitted, open_project):
        reviewed = task_service.review_submission(admin, open_project.id, submitted.id, "rejected", "Add the link")

        assert reviewed.status == TaskStatus.IN_PROGRESS
        assert reviewed.submission.status == SubmissionStatus.REJECTED

        resubmitted = task_service.submit_work(user, open_project.id, submitted.id, SUBMISSION)
        assert resubmitted.submission.status == SubmissionStatus.PENDING_APPROVAL

    def test_nothing_to_review(self, task_service, admin, task, open_project):
        with pytest.raises(TaskStateError):
            task_service.review_submission(admin, open_project.id, task.id, "approved")

    def test_invalid_verdict(self, task_service, admin, submitted, open_project):
        with pytest.raises(InputValidationError):
            task_service.review_submission(admin, open_project.id, submitted.id, "pending_approval")

    def test_user_cannot_review(self, task_service, user, submitted, open_project):
        with pytest.raises(ForbiddenError):
            task_service.review_submission(user, open_project.id, submitted.id, "approved")
