# =============================================================================
# core/services/chat_service.py - Project and Task Chat
# =============================================================================
# Who may do what:
# - project chat: any signed-in user reads and writes their own thread in a
#   project; admins read every thread and reply into a named one
# - task chat: the task's assignee and admins only; anyone else gets the same
#   TaskNotFoundError as for a missing task
#
# Modification requests and reviews post into the task thread through
# post_task_event().
# =============================================================================

import logging
from typing import Any

from app.exceptions import ForbiddenError, InputValidationError, TaskNotFoundError
from core.authorization import ANY_USER, ensure_authorized, require_email
from core.models.chat import POSTABLE_TYPES, ChatMessage, ChatMessageCreate, MessageType
from core.models.identity import Identity
from core.models.task import Task
from core.services.base import StoreService, actor_of, parse_choice
from core.services.task_service import TaskService
from lib.utils import normalize_email, utc_now_iso

logger = logging.getLogger(__name__)

CHAT_MESSAGES = "chat_messages"


class ChatService(StoreService):
    """Service for project and task chat threads."""

    def __init__(self, store, tasks: TaskService | None = None):
        super().__init__(store)
        self.tasks = tasks or TaskService(store)

    # -------------------------------------------------------------------------
    # Project Chat
    # -------------------------------------------------------------------------

    def list_project_messages(
        self,
        identity: Identity,
        project_id: str,
        user_id: str | None = None,
    ) -> list[ChatMessage]:
        """
        Messages of a project, oldest first.

        A user sees their own thread; an admin sees every thread, or only
        user_id's when given.
        """
        ensure_authorized(ANY_USER, identity)
        self.tasks.projects.load(project_id)

        filters: dict[str, Any] = {"project_id": project_id}
        if not identity.is_admin:
            filters["user_id"] = require_email(identity)
        elif user_id:
            filters["user_id"] = normalize_email(user_id)

        docs = self.store.find(CHAT_MESSAGES, filters, order_by="created_at")
        return [ChatMessage(**d) for d in docs]

    def post_project_message(self, identity: Identity, project_id: str, data: ChatMessageCreate) -> ChatMessage:
        """
        Post into a project thread.

        Raises:
            ProjectNotFoundError: If the project doesn't exist
            ForbiddenError: If a user writes into someone else's thread
            InputValidationError: If the content is blank, the type is not
                postable, or an admin names no thread owner
        """
        ensure_authorized(ANY_USER, identity)
        message_type = parse_choice(MessageType, data.message_type, "message_type", POSTABLE_TYPES)
        self.tasks.projects.load(project_id)

        owner = self._thread_owner(identity, data.user_id)
        message = self._insert(
            project_id=project_id,
            owner=owner,
            sender=actor_of(identity),
            content=data.content,
            message_type=message_type,
            metadata=data.metadata,
        )
        logger.info(f"Chat message {message.id} posted to project {project_id} thread of {owner}")
        return message

    def _thread_owner(self, identity: Identity, requested: str | None) -> str:
        if identity.is_admin:
            owner = requested or identity.email
            if not owner:
                raise InputValidationError(
                    "Thread owner is required",
                    details={"field": "user_id"},
                    suggestion="Name the user whose thread this message belongs to",
                )
            return normalize_email(owner)

        email = require_email(identity)
        if requested and not identity.owns(requested):
            raise ForbiddenError("You can only post in your own thread")
        return email

    # -------------------------------------------------------------------------
    # Task Chat
    # -------------------------------------------------------------------------

    def list_task_messages(self, identity: Identity, project_id: str, task_id: str) -> list[ChatMessage]:
        """Messages of a task's thread, oldest first. Assignee or admin."""
        task = self._load_for_chat(identity, project_id, task_id)

        docs = self.store.find(
            CHAT_MESSAGES,
            {"project_id": project_id, "related_task_id": task.id},
            order_by="created_at",
        )
        return [ChatMessage(**d) for d in docs]

    def post_task_message(
        self,
        identity: Identity,
        project_id: str,
        task_id: str,
        data: ChatMessageCreate,
    ) -> ChatMessage:
        """Post into a task's thread. Assignee or admin."""
        task = self._load_for_chat(identity, project_id, task_id)
        message_type = parse_choice(MessageType, data.message_type, "message_type", POSTABLE_TYPES)

        message = self._insert(
            project_id=project_id,
            owner=task.user_id,
            sender=actor_of(identity),
            content=data.content,
            message_type=message_type,
            related_task_id=task.id,
            metadata=data.metadata,
        )
        logger.info(f"Chat message {message.id} posted to task {task_id}")
        return message

    def post_task_event(
        self,
        task: Task,
        sender: str,
        message_type: MessageType,
        content: str,
        metadata: dict[str, Any] | None = None,
    ) -> ChatMessage:
        """Record a lifecycle event (modification request, approval, ...) in a task's thread."""
        return self._insert(
            project_id=task.project_id,
            owner=task.user_id,
            sender=sender,
            content=content,
            message_type=message_type,
            related_task_id=task.id,
            metadata=metadata,
        )

    def _load_for_chat(self, identity: Identity, project_id: str, task_id: str) -> Task:
        ensure_authorized(ANY_USER, identity)
        task = self.tasks.load(project_id, task_id)
        if not (identity.is_admin or identity.owns(task.user_id)):
            raise TaskNotFoundError(task_id)
        return task

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------

    def _insert(
        self,
        project_id: str,
        owner: str,
        sender: str,
        content: str,
        message_type: MessageType,
        related_task_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> ChatMessage:
        content = content.strip()
        if not content:
            raise InputValidationError("Message content is required", details={"field": "content"})

        now = utc_now_iso()
        doc = self.store.insert(CHAT_MESSAGES, {
            "project_id": project_id,
            "user_id": owner,
            "sender": sender,
            "content": content,
            "message_type": message_type.value,
            "related_task_id": related_task_id,
            "metadata": metadata or {},
            "created_at": now,
            "updated_at": now,
        })
        return ChatMessage(**doc)
