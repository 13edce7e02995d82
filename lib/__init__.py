# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - document_store.py: DocumentStore protocol, storage errors, in-memory store
# - supabase_client.py: Supabase (PostgREST) implementation of DocumentStore
# - utils.py: Shared helpers (ids, emails, timestamps)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.document_store import (
    DocumentStore,
    DuplicateKeyError,
    InMemoryDocumentStore,
    StorageError,
    StorageTimeoutError,
    StorageUnavailableError,
    UniqueConstraint,
)
from lib.supabase_client import SupabaseClientError, SupabaseDocumentStore
from lib.utils import new_id, normalize_email

__all__ = [
    # Storage
    "DocumentStore",
    "DuplicateKeyError",
    "InMemoryDocumentStore",
    "StorageError",
    "StorageTimeoutError",
    "StorageUnavailableError",
    "UniqueConstraint",
    # Supabase
    "SupabaseClientError",
    "SupabaseDocumentStore",
    # Utils
    "new_id",
    "normalize_email",
]
