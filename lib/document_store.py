# =============================================================================
# lib/document_store.py - Document Storage Contract
# =============================================================================
# Defines the storage contract the services depend on and an in-process
# implementation of it.
#
# Collections hold JSON-compatible dicts keyed by an opaque "id". Filters are
# plain dicts: a scalar value means equality, a list/tuple/set means "one of".
#
# - DocumentStore: the protocol implemented by every backend
# - InMemoryDocumentStore: thread-safe process-local backend (local runs, tests)
# - UniqueConstraint: declarative uniqueness, optionally scoped by a predicate
#   (e.g. "one PENDING application per user and project")
#
# The production backend lives in lib/supabase_client.py.
# =============================================================================

from __future__ import annotations

import copy
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol

from lib.utils import new_id, utc_now_iso

logger = logging.getLogger(__name__)

Document = dict[str, Any]
Filters = dict[str, Any]


# =============================================================================
# Storage Errors
# =============================================================================

class StorageError(Exception):
    """
    Error raised by a storage backend.

    Carries a machine-readable code so the API layer can map it to a
    response without inspecting backend-specific exceptions.
    """

    def __init__(
        self,
        message: str,
        code: str = "STORAGE_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class DuplicateKeyError(StorageError):
    """A write would violate a uniqueness constraint."""

    def __init__(self, collection: str, constraint: str):
        super().__init__(
            message=f"Duplicate key in {collection} ({constraint})",
            code="DUPLICATE_KEY",
            details={"collection": collection, "constraint": constraint},
        )
        self.collection = collection
        self.constraint = constraint


class StorageTimeoutError(StorageError):
    """The backend did not answer within the configured timeout."""

    def __init__(self, operation: str, collection: str):
        super().__init__(
            message=f"Storage timed out during {operation} on {collection}",
            code="STORAGE_TIMEOUT",
            details={"operation": operation, "collection": collection},
        )


class StorageUnavailableError(StorageError):
    """The backend failed or could not be reached."""

    def __init__(self, operation: str, collection: str, error: str = ""):
        super().__init__(
            message=f"Storage unavailable during {operation} on {collection}",
            code="STORAGE_UNAVAILABLE",
            details={"operation": operation, "collection": collection, "error": error},
        )


# =============================================================================
# Storage Contract
# =============================================================================

class DocumentStore(Protocol):
    """Operations every storage backend provides."""

    def insert(self, collection: str, document: Document) -> Document: ...

    def find_by_id(self, collection: str, doc_id: str) -> Document | None: ...

    def find_one(self, collection: str, filters: Filters) -> Document | None: ...

    def find(
        self,
        collection: str,
        filters: Filters | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Document]: ...

    def find_in(self, collection: str, field_name: str, values: Iterable[Any]) -> list[Document]: ...

    def update_by_id(
        self,
        collection: str,
        doc_id: str,
        changes: Document,
        guard: Filters | None = None,
    ) -> Document | None: ...

    def upsert(self, collection: str, document: Document, on: str) -> Document: ...

    def count(self, collection: str, filters: Filters | None = None) -> int: ...

    def ping(self) -> bool: ...


# =============================================================================
# Unique Constraints
# =============================================================================

@dataclass(frozen=True)
class UniqueConstraint:
    """
    Uniqueness over a set of fields, optionally limited to documents that
    match a predicate filter (a partial unique index).
    """
    name: str
    collection: str
    fields: tuple[str, ...]
    where: Filters = field(default_factory=dict)

    def applies_to(self, document: Document) -> bool:
        return _matches(document, self.where)

    def key(self, document: Document) -> tuple[Any, ...]:
        return tuple(document.get(f) for f in self.fields)


# The uniqueness rules the schema declares (see scripts/schema.sql)
DEFAULT_CONSTRAINTS: tuple[UniqueConstraint, ...] = (
    UniqueConstraint(
        name="applications_one_pending_per_user_project",
        collection="applications",
        fields=("project_id", "user_id"),
        where={"status": "PENDING"},
    ),
    UniqueConstraint(
        name="users_email_key",
        collection="users",
        fields=("email",),
    ),
)


def _matches(document: Document, filters: Filters | None) -> bool:
    if not filters:
        return True
    for key, expected in filters.items():
        actual = document.get(key)
        if isinstance(expected, (list, tuple, set, frozenset)):
            if actual not in expected:
                return False
        elif actual != expected:
            return False
    return True


# =============================================================================
# In-Memory Backend
# =============================================================================

class InMemoryDocumentStore:
    """
    Process-local DocumentStore.

    Every operation holds one lock, so check-and-write for unique
    constraints and guarded updates are atomic within the process.
    Documents are deep-copied on the way in and out.
    """

    def __init__(self, constraints: Iterable[UniqueConstraint] = DEFAULT_CONSTRAINTS):
        self._collections: dict[str, dict[str, Document]] = {}
        self._constraints = tuple(constraints)
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _collection(self, name: str) -> dict[str, Document]:
        return self._collections.setdefault(name, {})

    def _check_unique(self, collection: str, candidate: Document) -> None:
        docs = self._collection(collection)
        for constraint in self._constraints:
            if constraint.collection != collection or not constraint.applies_to(candidate):
                continue
            key = constraint.key(candidate)
            for other in docs.values():
                if other.get("id") == candidate.get("id"):
                    continue
                if constraint.applies_to(other) and constraint.key(other) == key:
                    raise DuplicateKeyError(collection, constraint.name)

    # -------------------------------------------------------------------------
    # DocumentStore
    # -------------------------------------------------------------------------

    def insert(self, collection: str, document: Document) -> Document:
        with self._lock:
            doc = copy.deepcopy(document)
            doc.setdefault("id", new_id())
            doc.setdefault("created_at", utc_now_iso())
            doc.setdefault("updated_at", doc["created_at"])
            self._check_unique(collection, doc)
            self._collection(collection)[doc["id"]] = doc
            return copy.deepcopy(doc)

    def find_by_id(self, collection: str, doc_id: str) -> Document | None:
        with self._lock:
            doc = self._collection(collection).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def find_one(self, collection: str, filters: Filters) -> Document | None:
        results = self.find(collection, filters, limit=1)
        return results[0] if results else None

    def find(
        self,
        collection: str,
        filters: Filters | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Document]:
        with self._lock:
            results = [
                copy.deepcopy(doc)
                for doc in self._collection(collection).values()
                if _matches(doc, filters)
            ]
        if order_by:
            results.sort(key=lambda d: (d.get(order_by) is None, str(d.get(order_by) or "")), reverse=descending)
        if limit is not None:
            results = results[:limit]
        return results

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
        with self._lock:
            docs = self._collection(collection)
            current = docs.get(doc_id)
            if current is None or not _matches(current, guard):
                return None
            updated = {**current, **copy.deepcopy(changes), "id": doc_id}
            self._check_unique(collection, updated)
            docs[doc_id] = updated
            return copy.deepcopy(updated)

    def upsert(self, collection: str, document: Document, on: str) -> Document:
        with self._lock:
            existing = next(
                (d for d in self._collection(collection).values() if d.get(on) == document.get(on)),
                None,
            )
            if existing is None:
                return self.insert(collection, document)
            changes = {k: v for k, v in document.items() if k != "id"}
            return self.update_by_id(collection, existing["id"], changes)

    def count(self, collection: str, filters: Filters | None = None) -> int:
        with self._lock:
            return sum(1 for doc in self._collection(collection).values() if _matches(doc, filters))

    def ping(self) -> bool:
        return True
