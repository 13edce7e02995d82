# =============================================================================
# core/models/chat.py - Chat Message Schemas
# =============================================================================
# Messages live in per-user threads:
# - project chat: one thread per (project, user) between that user and admins
# - task chat: the thread of a single task, shared by its assignee and admins
#
# user_id names the thread's owner; sender names who wrote the message (an
# admin reply in a user's thread has user_id = the user, sender = the admin).
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class MessageType(str, Enum):
    GENERAL = "GENERAL"
    TASK_DISCUSSION = "TASK_DISCUSSION"
    MODIFICATION_REQUEST = "MODIFICATION_REQUEST"
    APPROVAL = "APPROVAL"
    REJECTION = "REJECTION"
    SYSTEM = "SYSTEM"


# Types a caller may post directly; the rest are written by the service
POSTABLE_TYPES = (MessageType.GENERAL, MessageType.TASK_DISCUSSION)


class ChatMessage(BaseModel):
    """Stored chat message."""

    id: str
    project_id: str
    user_id: str = Field(..., description="Email of the thread owner")
    sender: str
    content: str
    message_type: MessageType = MessageType.GENERAL
    related_task_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ChatMessageCreate(BaseModel):
    """
    Schema for posting a message.

    Example:
        {
            "content": "Is the AMA recording needed by Friday?",
            "message_type": "TASK_DISCUSSION"
        }

    user_id is only read for admins posting into a user's project thread.
    """
    content: str = Field(..., min_length=1, max_length=2000)
    message_type: str = Field(default=MessageType.GENERAL.value, description="GENERAL | TASK_DISCUSSION")
    user_id: str | None = Field(default=None, description="Thread owner (admins only)")
    metadata: dict[str, Any] = Field(default_factory=dict)
