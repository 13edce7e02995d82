# =============================================================================
# tests/test_chat_service.py - Project and Task Chat Tests
# =============================================================================
# Covers thread ownership in project chat, assignee/admin access to task
# chat, and which message types callers may post.
# =============================================================================

import pytest

from app.exceptions import (
    ForbiddenError,
    InputValidationError,
    ProjectNotFoundError,
    TaskNotFoundError,
    UnauthenticatedError,
)
from core.models.chat import ChatMessageCreate, MessageType
from core.models.project import ProjectCreate


def message(content: str = "Hello", **kwargs) -> ChatMessageCreate:
    return ChatMessageCreate(content=content, **kwargs)


# =============================================================================
# Project Chat
# =============================================================================

class TestProjectChat:
    """Test per-user threads in a project."""

    def test_user_posts_into_own_thread(self, chat_service, user, open_project):
        posted = chat_service.post_project_message(user, open_project.id, message("When do we start?"))

        assert posted.user_id == "user@x.com"
        assert posted.sender == "user@x.com"
        assert posted.message_type == MessageType.GENERAL
        assert posted.related_task_id is None

    def test_users_only_see_own_thread(self, chat_service, user, other_user, open_project):
        chat_service.post_project_message(user, open_project.id, message("mine"))
        chat_service.post_project_message(other_user, open_project.id, message("theirs"))

        listed = chat_service.list_project_messages(user, open_project.id)

        assert [m.content for m in listed] == ["mine"]

    def test_user_cannot_read_other_thread_by_filter(self, chat_service, user, other_user, open_project):
        chat_service.post_project_message(other_user, open_project.id, message("theirs"))

        listed = chat_service.list_project_messages(user, open_project.id, user_id="other@x.com")

        assert listed == []

    def test_admin_sees_all_threads_oldest_first(self, chat_service, user, other_user, admin, open_project):
        chat_service.post_project_message(user, open_project.id, message("first"))
        chat_service.post_project_message(other_user, open_project.id, message("second"))

        everything = chat_service.list_project_messages(admin, open_project.id)
        one_thread = chat_service.list_project_messages(admin, open_project.id, user_id="Other@X.com")

        assert [m.content for m in everything] == ["first", "second"]
        assert [m.content for m in one_thread] == ["second"]

    def test_admin_replies_into_user_thread(self, chat_service, user, admin, open_project):
        chat_service.post_project_message(admin, open_project.id, message("Welcome aboard", user_id="user@x.com"))

        listed = chat_service.list_project_messages(user, open_project.id)

        assert listed[0].sender == "ops@x.com"
        assert listed[0].user_id == "user@x.com"

    def test_session_admin_must_name_thread(self, chat_service, session_admin, open_project):
        with pytest.raises(InputValidationError):
            chat_service.post_project_message(session_admin, open_project.id, message())

    def test_user_cannot_post_into_other_thread(self, chat_service, user, open_project, store):
        with pytest.raises(ForbiddenError):
            chat_service.post_project_message(user, open_project.id, message(user_id="other@x.com"))

        assert store.count("chat_messages") == 0

    def test_system_types_not_postable(self, chat_service, user, open_project):
        with pytest.raises(InputValidationError):
            chat_service.post_project_message(user, open_project.id, message(message_type="APPROVAL"))

    def test_blank_content(self, chat_service, user, open_project):
        with pytest.raises(InputValidationError):
            chat_service.post_project_message(user, open_project.id, message("   "))

    def test_missing_project(self, chat_service, user):
        with pytest.raises(ProjectNotFoundError):
            chat_service.list_project_messages(user, "missing")

    def test_anonymous_rejected(self, chat_service, anonymous, open_project):
        with pytest.raises(UnauthenticatedError):
            chat_service.post_project_message(anonymous, open_project.id, message())


# =============================================================================
# Task Chat
# =============================================================================

class TestTaskChat:
    """Test the thread shared by a task's assignee and admins."""

    def test_assignee_and_admin_share_thread(self, chat_service, user, admin, task, open_project):
        chat_service.post_task_message(user, open_project.id, task.id, message("Need the brief", message_type="TASK_DISCUSSION"))
        chat_service.post_task_message(admin, open_project.id, task.id, message("Sent it"))

        for caller in (user, admin):
            listed = chat_service.list_task_messages(caller, open_project.id, task.id)
            assert [m.content for m in listed] == ["Need the brief", "Sent it"]

        assert all(m.user_id == "user@x.com" for m in listed)
        assert all(m.related_task_id == task.id for m in listed)

    def test_other_user_sees_not_found(self, chat_service, other_user, task, open_project):
        with pytest.raises(TaskNotFoundError):
            chat_service.list_task_messages(other_user, open_project.id, task.id)

        with pytest.raises(TaskNotFoundError):
            chat_service.post_task_message(other_user, open_project.id, task.id, message())

    def test_task_messages_stay_out_of_other_tasks(self, chat_service, task_service, user, admin, task, open_project, task_payload):
        second = task_service.create_task(admin, open_project.id, task_payload)
        chat_service.post_task_message(user, open_project.id, task.id, message("about the first"))

        assert chat_service.list_task_messages(user, open_project.id, second.id) == []

    def test_wrong_project(self, chat_service, project_service, admin, user, task):
        elsewhere = project_service.create_project(admin, ProjectCreate(name="Other", description="x"))

        with pytest.raises(TaskNotFoundError):
            chat_service.list_task_messages(user, elsewhere.id, task.id)
