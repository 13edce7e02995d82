# =============================================================================
# core/services/task_service.py - Task Lifecycle
# =============================================================================
# Handles task creation, assignment lookups, status changes, work submission
# and submission review.
#
# Visibility rule: a non-admin caller only ever sees tasks assigned to them.
# Lookups for such callers include user_id in the query itself, so "does not
# exist" and "not yours" both come back as TaskNotFoundError.
# =============================================================================

import logging
from typing import Any

from app.exceptions import ForbiddenError, InputValidationError, TaskNotFoundError, TaskStateError
from core.authorization import ADMIN_ONLY, ANY_USER, ensure_authorized, require_email
from core.models.identity import Identity
from core.models.task import (
    REVIEW_VERDICTS,
    AssignedTask,
    SubmissionCreate,
    SubmissionStatus,
    Task,
    TaskCreate,
    TaskStatus,
)
from core.services.base import StoreService, actor_of, parse_choice
from core.services.project_service import ProjectService
from lib.utils import normalize_email, utc_now_iso

logger = logging.getLogger(__name__)

TASKS = "tasks"

UNKNOWN_PROJECT_NAME = "Unknown Project"

# Statuses the assignee may set; COMPLETED is reserved for admins
ASSIGNEE_STATUSES = (TaskStatus.PENDING, TaskStatus.IN_PROGRESS)

# Statuses in which a task's content may still change
EDITABLE_STATUSES = (TaskStatus.PENDING, TaskStatus.IN_PROGRESS)


class TaskService(StoreService):
    """Service for the task lifecycle."""

    def __init__(self, store, projects: ProjectService | None = None):
        super().__init__(store)
        self.projects = projects or ProjectService(store)

    # -------------------------------------------------------------------------
    # Creation and Lookup
    # -------------------------------------------------------------------------

    def create_task(self, identity: Identity, project_id: str, data: TaskCreate) -> Task:
        """
        Create a task in a project and assign it. Admin only.

        Raises:
            ProjectNotFoundError: If the project doesn't exist
            InputValidationError: If the assignee is not an email
        """
        ensure_authorized(ADMIN_ONLY, identity)
        self.projects.load(project_id)

        if "@" not in data.user_id:
            raise InputValidationError(
                "Assignee must be an email address",
                details={"field": "user_id"},
            )

        now = utc_now_iso()
        doc = self.store.insert(TASKS, {
            **data.model_dump(mode="json"),
            "project_id": project_id,
            "user_id": normalize_email(data.user_id),
            "created_by": actor_of(identity),
            "status": TaskStatus.PENDING.value,
            "submission": {
                "link": "",
                "description": "",
                "status": SubmissionStatus.PENDING.value,
                "submitted_at": None,
                "feedback": "",
                "last_updated": None,
            },
            "created_at": now,
            "updated_at": now,
        })

        logger.info(f"Created task {doc['id']} in project {project_id} for {doc['user_id']}")
        return Task(**doc)

    def list_assigned(self, identity: Identity, project_id: str | None = None) -> list[AssignedTask]:
        """
        Tasks assigned to the caller, newest first, each with its project name.

        A task whose project can't be found gets a placeholder name.
        """
        ensure_authorized(ANY_USER, identity)
        email = require_email(identity)

        filters: dict[str, Any] = {"user_id": email}
        if project_id:
            filters["project_id"] = project_id

        docs = self.store.find(TASKS, filters, order_by="created_at", descending=True)
        summaries = self.projects.summaries([d["project_id"] for d in docs])

        return [
            AssignedTask(
                **d,
                project_name=(
                    summaries[d["project_id"]].name
                    if d["project_id"] in summaries else UNKNOWN_PROJECT_NAME
                ),
            )
            for d in docs
        ]

    def list_project_tasks(self, identity: Identity, project_id: str) -> list[Task]:
        """Every task in a project. Admin only."""
        ensure_authorized(ADMIN_ONLY, identity)
        self.projects.load(project_id)

        docs = self.store.find(TASKS, {"project_id": project_id}, order_by="created_at", descending=True)
        return [Task(**d) for d in docs]

    def get_one(self, identity: Identity, project_id: str, task_id: str) -> Task:
        """
        Fetch a task the caller may see.

        Raises:
            TaskNotFoundError: If the task doesn't exist in the project, or
                isn't assigned to the (non-admin) caller
        """
        ensure_authorized(ANY_USER, identity)
        return Task(**self._load_visible(identity, project_id, task_id))

    def load(self, project_id: str, task_id: str) -> Task:
        """Fetch a task by (task_id, project_id) without an ownership filter."""
        doc = self.store.find_one(TASKS, {"id": task_id, "project_id": project_id})
        if doc is None:
            raise TaskNotFoundError(task_id)
        return Task(**doc)

    def _load_visible(self, identity: Identity, project_id: str, task_id: str) -> dict[str, Any]:
        filters: dict[str, Any] = {"id": task_id, "project_id": project_id}
        if not identity.is_admin:
            filters["user_id"] = require_email(identity)

        doc = self.store.find_one(TASKS, filters)
        if doc is None:
            raise TaskNotFoundError(task_id)
        return doc

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def update_status(
        self,
        identity: Identity,
        project_id: str,
        task_id: str,
        new_status: str | TaskStatus,
    ) -> Task:
        """
        Change a task's status.

        The assignee may move the task between PENDING and IN_PROGRESS;
        only an admin may mark it COMPLETED. COMPLETED is terminal.

        Raises:
            InputValidationError: If new_status is not a task status
            TaskNotFoundError: If the task is absent or not visible
            ForbiddenError: If a non-admin sets COMPLETED
            TaskStateError: If the task is already COMPLETED
        """
        ensure_authorized(ANY_USER, identity)
        target = parse_choice(TaskStatus, new_status, "status")

        doc = self._load_visible(identity, project_id, task_id)
        if not identity.is_admin and target not in ASSIGNEE_STATUSES:
            raise ForbiddenError("Only an admin can mark a task completed")

        current = TaskStatus(doc["status"])
        if current == target:
            return Task(**doc)
        if current == TaskStatus.COMPLETED:
            raise TaskStateError(task_id, "Completed tasks cannot change status", current.value)

        updated = self._guarded_update(doc, {"status": target.value})
        logger.info(f"Task {task_id} status: {current.value} -> {target.value}")
        return Task(**updated)

    def submit_work(
        self,
        identity: Identity,
        project_id: str,
        task_id: str,
        data: SubmissionCreate,
    ) -> Task:
        """
        Record the assignee's work on a task and send it for approval.

        Resubmitting replaces the previous submission. A PENDING task moves
        to IN_PROGRESS.

        Raises:
            InputValidationError: If link or description is blank
            TaskNotFoundError: If the task is absent or not visible
            TaskStateError: If the task is already COMPLETED
        """
        ensure_authorized(ANY_USER, identity)

        link = data.link.strip()
        description = data.description.strip()
        if not link or not description:
            raise InputValidationError(
                "Link and description are required",
                details={"fields": ["link", "description"]},
            )

        doc = self._load_visible(identity, project_id, task_id)
        current = TaskStatus(doc["status"])
        if current == TaskStatus.COMPLETED:
            raise TaskStateError(task_id, f"Cannot submit task in {current.value} status", current.value)

        now = utc_now_iso()
        changes: dict[str, Any] = {
            "submission": {
                "link": link,
                "description": description,
                "status": SubmissionStatus.PENDING_APPROVAL.value,
                "submitted_at": now,
                "feedback": "",
                "last_updated": now,
            },
        }
        if current == TaskStatus.PENDING:
            changes["status"] = TaskStatus.IN_PROGRESS.value

        updated = self._guarded_update(doc, changes)
        logger.info(f"Task {task_id} submitted by {identity.email or 'admin'}")
        return Task(**updated)

    def review_submission(
        self,
        identity: Identity,
        project_id: str,
        task_id: str,
        verdict: str | SubmissionStatus,
        feedback: str = "",
    ) -> Task:
        """
        Approve or reject submitted work. Admin only.

        Approval completes the task; rejection sends it back to IN_PROGRESS
        so the assignee can resubmit.

        Raises:
            InputValidationError: If verdict is not approved or rejected
            TaskNotFoundError: If the task doesn't exist in the project
            TaskStateError: If there is no submission awaiting approval
        """
        ensure_authorized(ADMIN_ONLY, identity)
        target = parse_choice(SubmissionStatus, verdict, "status", REVIEW_VERDICTS)

        task = self.load(project_id, task_id)
        if task.submission.status != SubmissionStatus.PENDING_APPROVAL:
            raise TaskStateError(
                task_id,
                "Task has no submission awaiting approval",
                task.submission.status.value,
            )

        now = utc_now_iso()
        submission = task.submission.model_dump(mode="json")
        submission.update({
            "status": target.value,
            "feedback": feedback,
            "last_updated": now,
        })
        new_status = TaskStatus.COMPLETED if target == SubmissionStatus.APPROVED else TaskStatus.IN_PROGRESS

        updated = self._guarded_update(
            task.model_dump(mode="json"),
            {"submission": submission, "status": new_status.value},
        )
        logger.info(f"Task {task_id} submission {target.value} by {actor_of(identity)}")
        return Task(**updated)

    def ensure_editable(self, task: Task) -> None:
        """
        Refuse content changes to a task that is no longer open.

        Raises:
            TaskStateError: If the task is COMPLETED
        """
        if task.status not in EDITABLE_STATUSES:
            raise TaskStateError(task.id, f"Cannot modify task in {task.status.value} status", task.status.value)

    def apply_changes(self, task_id: str, changes: dict[str, Any]) -> Task | None:
        """
        Write content changes onto a task (used by approved modifications).

        The write is guarded on an editable status, so a task completed in
        the meantime is left untouched.

        Raises:
            TaskStateError: If the task is no longer editable
        """
        if not changes:
            doc = self.store.find_by_id(TASKS, task_id)
            return Task(**doc) if doc else None

        doc = self.store.update_by_id(
            TASKS,
            task_id,
            {**changes, "updated_at": utc_now_iso()},
            guard={"status": [s.value for s in EDITABLE_STATUSES]},
        )
        if doc is None:
            current = self.store.find_by_id(TASKS, task_id)
            if current is None:
                return None
            raise TaskStateError(task_id, f"Cannot modify task in {current['status']} status", current["status"])
        return Task(**doc)

    def _guarded_update(self, doc: dict[str, Any], changes: dict[str, Any]) -> dict[str, Any]:
        """Update a task only if its status is still what we read."""
        updated = self.store.update_by_id(
            TASKS,
            doc["id"],
            {**changes, "updated_at": utc_now_iso()},
            guard={"status": doc["status"]},
        )
        if updated is None:
            raise TaskStateError(doc["id"], "Task changed while updating; reload and retry", doc["status"])
        return updated
