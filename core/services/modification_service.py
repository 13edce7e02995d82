# =============================================================================
# core/services/modification_service.py - Task Modification Requests
# =============================================================================
# Change requests against a task's content (title, description, deliverables,
# platform).
#
# Who may do what:
# - request: an admin, the task's assignee, or the task's creator
# - review:  an admin, or a party related to the task other than the requester
#
# Only tasks that are not COMPLETED can be modified.
#
# Review is a conditional update guarded by status = PENDING. Approving also
# writes the proposed fields onto the task; those are two single-document
# writes, not a transaction. Requests and reviews are announced in the task's
# chat thread.
# =============================================================================

import logging

from app.exceptions import (
    AlreadyDecidedError,
    ForbiddenError,
    InputValidationError,
    ModificationNotFoundError,
)
from core.authorization import ANY_USER, ensure_authorized
from core.models.chat import MessageType
from core.models.identity import Identity
from core.models.modification import (
    REVIEW_STATUSES,
    ModificationCreate,
    ModificationStatus,
    TaskModification,
)
from core.models.task import Task
from core.services.base import StoreService, actor_of, parse_choice
from core.services.chat_service import ChatService
from core.services.task_service import TaskService
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

MODIFICATIONS = "task_modifications"


def is_related(identity: Identity, task: Task) -> bool:
    """True when the caller is the task's assignee or creator."""
    return identity.owns(task.user_id) or identity.owns(task.created_by)


class ModificationService(StoreService):
    """Service for task modification requests."""

    def __init__(self, store, tasks: TaskService | None = None, chat: ChatService | None = None):
        super().__init__(store)
        self.tasks = tasks or TaskService(store)
        self.chat = chat or ChatService(store, self.tasks)

    def request(
        self,
        identity: Identity,
        project_id: str,
        task_id: str,
        data: ModificationCreate,
    ) -> TaskModification:
        """
        Propose a change to a task.

        Raises:
            TaskNotFoundError: If the task doesn't exist in the project
            ForbiddenError: If the caller is not related to the task
            TaskStateError: If the task is COMPLETED
            InputValidationError: If no field change is proposed
        """
        ensure_authorized(ANY_USER, identity)

        task = self.tasks.load(project_id, task_id)
        if not (identity.is_admin or is_related(identity, task)):
            raise ForbiddenError("Only the task's assignee or creator can request changes")
        self.tasks.ensure_editable(task)

        changes = data.proposed_changes.changed_fields()
        if not changes:
            raise InputValidationError(
                "No changes proposed",
                details={"field": "proposed_changes"},
                suggestion="Propose at least one of title, description, deliverables, platform",
            )

        now = utc_now_iso()
        doc = self.store.insert(MODIFICATIONS, {
            "task_id": task_id,
            "proposed_changes": changes,
            "comments": data.comments,
            "requested_by": actor_of(identity),
            "status": ModificationStatus.PENDING.value,
            "reviewed_by": None,
            "review_comments": None,
            "created_at": now,
            "updated_at": now,
        })

        self.chat.post_task_event(
            task,
            sender=actor_of(identity),
            message_type=MessageType.MODIFICATION_REQUEST,
            content=data.comments.strip() or "Modification requested",
            metadata={"modification_id": doc["id"], "proposed_changes": changes},
        )

        logger.info(f"Modification {doc['id']} requested on task {task_id}: {sorted(changes)}")
        return TaskModification(**doc)

    def list_for_task(self, identity: Identity, project_id: str, task_id: str) -> list[TaskModification]:
        """Modifications of a task, newest first. Admin or related parties."""
        ensure_authorized(ANY_USER, identity)

        task = self.tasks.load(project_id, task_id)
        if not (identity.is_admin or is_related(identity, task)):
            raise ForbiddenError()

        docs = self.store.find(MODIFICATIONS, {"task_id": task_id}, order_by="created_at", descending=True)
        return [TaskModification(**d) for d in docs]

    def review(
        self,
        identity: Identity,
        project_id: str,
        task_id: str,
        modification_id: str,
        new_status: str | ModificationStatus,
        comments: str | None = None,
    ) -> tuple[TaskModification, Task]:
        """
        Approve or reject a pending modification.

        Approval applies the proposed fields to the task. Re-reviewing with
        the status the modification already has changes nothing.

        Returns:
            (modification, task) after the review

        Raises:
            InputValidationError: If new_status is not APPROVED or REJECTED
            TaskNotFoundError / ModificationNotFoundError: If either is absent
            ForbiddenError: If the caller may not review this modification
            AlreadyDecidedError: If it was already reviewed differently
            TaskStateError: If approving changes to a COMPLETED task
        """
        ensure_authorized(ANY_USER, identity)
        target = parse_choice(ModificationStatus, new_status, "status", REVIEW_STATUSES)

        task = self.tasks.load(project_id, task_id)
        current = self.store.find_one(MODIFICATIONS, {"id": modification_id, "task_id": task_id})
        if current is None:
            raise ModificationNotFoundError(modification_id)

        if not identity.is_admin:
            if not is_related(identity, task) or identity.owns(current["requested_by"]):
                raise ForbiddenError("You cannot review this modification")

        if target == ModificationStatus.APPROVED and current["status"] == ModificationStatus.PENDING.value:
            self.tasks.ensure_editable(task)

        doc = self.store.update_by_id(
            MODIFICATIONS,
            modification_id,
            {
                "status": target.value,
                "reviewed_by": actor_of(identity),
                "review_comments": comments,
                "updated_at": utc_now_iso(),
            },
            guard={"status": ModificationStatus.PENDING.value},
        )

        if doc is None:
            doc = self.store.find_by_id(MODIFICATIONS, modification_id)
            if doc is None:
                raise ModificationNotFoundError(modification_id)
            if doc["status"] != target.value:
                raise AlreadyDecidedError("Modification", modification_id, doc["status"], target.value)
            logger.info(f"Modification {modification_id} already {target.value}; nothing to do")
            return TaskModification(**doc), task

        modification = TaskModification(**doc)
        if target == ModificationStatus.APPROVED:
            updated = self.tasks.apply_changes(task_id, modification.proposed_changes.changed_fields())
            if updated is not None:
                task = updated

        approved = target == ModificationStatus.APPROVED
        self.chat.post_task_event(
            task,
            sender=actor_of(identity),
            message_type=MessageType.APPROVAL if approved else MessageType.REJECTION,
            content=comments or f"Modification request {target.value.lower()}",
            metadata={"modification_id": modification_id},
        )

        logger.info(f"Modification {modification_id} {target.value.lower()} by {actor_of(identity)}")
        return modification, task
