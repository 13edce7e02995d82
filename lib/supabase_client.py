# =============================================================================
# lib/supabase_client.py - Supabase Document Store
# =============================================================================
# Production DocumentStore backed by Supabase (PostgREST).
#
# Each collection maps to one table (see scripts/schema.sql). Nested documents
# such as a task's submission are JSONB columns, so rows round-trip as the
# same dicts the in-memory store holds.
#
# Every call runs with a bounded client timeout and failures are translated
# into lib.document_store errors:
# - unique violation (Postgres 23505) -> DuplicateKeyError
# - malformed value on a read or update (Postgres class 22, e.g. a
#   non-UUID id) -> no match, so lookups come back empty
# - httpx timeout                      -> StorageTimeoutError
# - anything else                      -> StorageUnavailableError
#
# Usage:
#   from lib.supabase_client import SupabaseDocumentStore
#   store = SupabaseDocumentStore.from_settings(settings)
#   project = store.find_by_id("projects", project_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any, Iterable

import httpx
from supabase import Client, create_client

from lib.document_store import (
    Document,
    DuplicateKeyError,
    Filters,
    StorageTimeoutError,
    StorageUnavailableError,
)

# Set up logging for this module
logger = logging.getLogger(__name__)

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"

# Postgres SQLSTATE class for data exceptions (22P02 invalid_text_representation, ...)
DATA_EXCEPTION_CLASS = "22"

# Operations where a malformed filter value means "no such row"
LOOKUP_OPERATIONS = frozenset({"find", "update", "count"})


class _NoMatch:
    """Empty response returned for lookups that cannot match any row."""

    def __init__(self):
        self.data: list[Document] = []
        self.count = 0


class SupabaseClientError(Exception):
    """
    Error while creating the Supabase client.

    Provides actionable error messages:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseDocumentStore:
    """
    DocumentStore implementation on top of a Supabase client.

    Uses the service_role key which bypasses Row Level Security (RLS);
    authorization is enforced by the service layer before any call here.

    Example:
        store = SupabaseDocumentStore.from_settings(settings)
        tasks = store.find("tasks", {"user_id": "user@x.com"}, order_by="created_at", descending=True)
    """

    def __init__(self, client: Client):
        self.client = client

    @classmethod
    def from_settings(cls, settings: Any) -> SupabaseDocumentStore:
        """
        Create a store from application settings.

        Raises:
            SupabaseClientError: If credentials are missing or client creation fails
        """
        if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_KEY:
            raise SupabaseClientError(
                message="Supabase credentials are not configured",
                code="CLIENT_NOT_CONFIGURED",
                suggestion="Set SUPABASE_URL and SUPABASE_SERVICE_KEY, or STORAGE_BACKEND=memory for local runs",
            )

        from supabase import ClientOptions

        try:
            client = create_client(
                settings.SUPABASE_URL,
                settings.SUPABASE_SERVICE_KEY,
                options=ClientOptions(postgrest_client_timeout=settings.STORAGE_TIMEOUT_SECONDS),
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to create Supabase client: {e}",
                code="CLIENT_INIT_FAILED",
                suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file",
            )

        logger.info("Supabase client initialized successfully")
        return cls(client)

    # -------------------------------------------------------------------------
    # Query Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _apply_filters(query: Any, filters: Filters | None) -> Any:
        for key, value in (filters or {}).items():
            if isinstance(value, (list, tuple, set, frozenset)):
                query = query.in_(key, list(value))
            else:
                query = query.eq(key, value)
        return query

    def _execute(self, query: Any, operation: str, collection: str) -> Any:
        try:
            return query.execute()
        except httpx.TimeoutException:
            logger.error(f"Storage timeout: {operation} on {collection}")
            raise StorageTimeoutError(operation, collection)
        except Exception as e:
            code = _sqlstate(e)
            if code == UNIQUE_VIOLATION or UNIQUE_VIOLATION in str(e):
                raise DuplicateKeyError(collection, _constraint_name(e))
            if code.startswith(DATA_EXCEPTION_CLASS) and operation in LOOKUP_OPERATIONS:
                logger.debug(f"No match for {operation} on {collection}: malformed value ({code})")
                return _NoMatch()
            logger.error(f"Storage failure: {operation} on {collection}: {e}")
            raise StorageUnavailableError(operation, collection, str(e)[:200])

    # -------------------------------------------------------------------------
    # DocumentStore
    # -------------------------------------------------------------------------

    def insert(self, collection: str, document: Document) -> Document:
        query = self.client.table(collection).insert(document)
        response = self._execute(query, "insert", collection)
        if not response.data:
            raise StorageUnavailableError("insert", collection, "Insert returned no data")
        return response.data[0]

    def find_by_id(self, collection: str, doc_id: str) -> Document | None:
        return self.find_one(collection, {"id": doc_id})

    def find_one(self, collection: str, filters: Filters) -> Document | None:
        rows = self.find(collection, filters, limit=1)
        return rows[0] if rows else None

    def find(
        self,
        collection: str,
        filters: Filters | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Document]:
        query = self._apply_filters(self.client.table(collection).select("*"), filters)
        if order_by:
            query = query.order(order_by, desc=descending)
        if limit is not None:
            query = query.limit(limit)
        response = self._execute(query, "find", collection)
        return response.data or []

    def find_in(self, collection: str, field_name: str, values: Iterable[Any]) -> list[Document]:
        wanted = list(values)
        if not wanted:
            return []
        return self.find(collection, {field_name: wanted})

    def update_by_id(
        self,
        collection: str,
        doc_id: str,
        changes: Document,
        guard: Filters | None = None,
    ) -> Document | None:
        # The guard filters are part of the UPDATE's WHERE clause, so a
        # conditional transition is a single atomic statement
        query = self.client.table(collection).update(changes).eq("id", doc_id)
        query = self._apply_filters(query, guard)
        response = self._execute(query, "update", collection)
        return response.data[0] if response.data else None

    def upsert(self, collection: str, document: Document, on: str) -> Document:
        query = self.client.table(collection).upsert(document, on_conflict=on)
        response = self._execute(query, "upsert", collection)
        if not response.data:
            raise StorageUnavailableError("upsert", collection, "Upsert returned no data")
        return response.data[0]

    def count(self, collection: str, filters: Filters | None = None) -> int:
        query = self._apply_filters(
            self.client.table(collection).select("id", count="exact"),
            filters,
        )
        response = self._execute(query, "count", collection)
        return response.count or 0

    def ping(self) -> bool:
        try:
            self.find("projects", limit=1)
            return True
        except (StorageTimeoutError, StorageUnavailableError):
            return False


def _sqlstate(error: Exception) -> str:
    """Postgres error code carried by a PostgREST APIError, or ''."""
    return str(getattr(error, "code", None) or "")


def _constraint_name(error: Exception) -> str:
    """Best-effort extraction of the violated constraint from a PostgREST error."""
    message = str(error)
    marker = 'constraint "'
    if marker in message:
        return message.split(marker, 1)[1].split('"', 1)[0]
    return "unique"
