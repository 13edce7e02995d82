# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

from datetime import datetime, timezone
from uuid import uuid4


# =============================================================================
# Identifier Utilities
# =============================================================================

def new_id() -> str:
    """Generate a new opaque document identifier."""
    return str(uuid4())


def normalize_email(value: str) -> str:
    """Emails are compared case-insensitively and without surrounding whitespace."""
    return value.strip().lower()


# =============================================================================
# Time Utilities
# =============================================================================

def utc_now() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string, the format documents are stored in."""
    return utc_now().isoformat()
