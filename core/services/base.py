# =============================================================================
# core/services/base.py - Shared Service Helpers
# =============================================================================

from enum import Enum
from typing import Iterable, TypeVar

from app.config import settings
from app.exceptions import invalid_choice
from core.models.identity import Identity
from lib.document_store import DocumentStore

E = TypeVar("E", bound=Enum)


class StoreService:
    """Base for services that operate on a DocumentStore."""

    def __init__(self, store: DocumentStore):
        self.store = store


def parse_choice(
    enum_cls: type[E],
    value: object,
    field: str,
    allowed: Iterable[E] | None = None,
) -> E:
    """
    Coerce a raw value into one of the allowed enum members.

    Matching is exact (wire values are case-sensitive).

    Raises:
        InputValidationError: If the value is not one of the allowed members
    """
    choices = list(allowed) if allowed is not None else list(enum_cls)
    for member in choices:
        if value == member or value == member.value:
            return member
    raise invalid_choice(field, value, [m.value for m in choices])


def actor_of(identity: Identity) -> str:
    """Name recorded on writes: the caller's email, or the admin actor."""
    return identity.email or settings.ADMIN_ACTOR
