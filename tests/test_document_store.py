# =============================================================================
# tests/test_document_store.py - In-Memory Document Store Tests
# =============================================================================
# Tests for lib/document_store.py:
# - Basic CRUD and filtering
# - Guarded (conditional) updates
# - Unique constraints, including the partial pending-application rule
# =============================================================================

import pytest

from lib.document_store import DuplicateKeyError, InMemoryDocumentStore, UniqueConstraint


@pytest.fixture
def store():
    return InMemoryDocumentStore()


# =============================================================================
# CRUD
# =============================================================================

class TestCrud:
    """Test insert, find and count."""

    def test_insert_assigns_id_and_timestamps(self, store):
        doc = store.insert("projects", {"name": "A", "status": "OPEN"})

        assert doc["id"]
        assert doc["created_at"]
        assert store.find_by_id("projects", doc["id"])["name"] == "A"

    def test_returned_documents_are_copies(self, store):
        doc = store.insert("projects", {"name": "A", "tags": ["x"]})
        doc["tags"].append("y")

        assert store.find_by_id("projects", doc["id"])["tags"] == ["x"]

    def test_find_with_equality_and_in_filters(self, store):
        store.insert("applications", {"user_id": "a@x.com", "status": "PENDING"})
        store.insert("applications", {"user_id": "a@x.com", "status": "ACCEPTED"})
        store.insert("applications", {"user_id": "a@x.com", "status": "REJECTED"})
        store.insert("applications", {"user_id": "b@x.com", "status": "PENDING"})

        found = store.find("applications", {"user_id": "a@x.com", "status": ["PENDING", "ACCEPTED"]})

        assert {d["status"] for d in found} == {"PENDING", "ACCEPTED"}
        assert store.count("applications", {"status": "PENDING"}) == 2
        assert store.count("applications") == 4

    def test_find_orders_and_limits(self, store):
        store.insert("tasks", {"title": "old", "created_at": "2024-01-01T00:00:00+00:00"})
        store.insert("tasks", {"title": "new", "created_at": "2024-02-01T00:00:00+00:00"})

        newest = store.find("tasks", order_by="created_at", descending=True, limit=1)

        assert [d["title"] for d in newest] == ["new"]

    def test_find_in(self, store):
        a = store.insert("projects", {"name": "A"})
        store.insert("projects", {"name": "B"})

        assert [d["name"] for d in store.find_in("projects", "id", [a["id"], "missing"])] == ["A"]
        assert store.find_in("projects", "id", []) == []

    def test_missing_documents(self, store):
        assert store.find_by_id("projects", "nope") is None
        assert store.find_one("projects", {"name": "nope"}) is None
        assert store.update_by_id("projects", "nope", {"name": "x"}) is None


# =============================================================================
# Guarded Updates
# =============================================================================

class TestGuardedUpdate:
    """Test conditional updates used for state transitions."""

    def test_guard_matches(self, store):
        doc = store.insert("applications", {"status": "PENDING"})

        updated = store.update_by_id("applications", doc["id"], {"status": "ACCEPTED"}, guard={"status": "PENDING"})

        assert updated["status"] == "ACCEPTED"

    def test_guard_mismatch_leaves_document(self, store):
        doc = store.insert("applications", {"status": "ACCEPTED"})

        result = store.update_by_id("applications", doc["id"], {"status": "REJECTED"}, guard={"status": "PENDING"})

        assert result is None
        assert store.find_by_id("applications", doc["id"])["status"] == "ACCEPTED"

    def test_only_first_of_two_transitions_wins(self, store):
        doc = store.insert("applications", {"status": "PENDING"})
        guard = {"status": "PENDING"}

        first = store.update_by_id("applications", doc["id"], {"status": "ACCEPTED"}, guard=guard)
        second = store.update_by_id("applications", doc["id"], {"status": "REJECTED"}, guard=guard)

        assert first is not None
        assert second is None


# =============================================================================
# Unique Constraints
# =============================================================================

class TestUniqueConstraints:
    """Test declarative (partial) unique constraints."""

    def test_one_pending_application_per_user_and_project(self, store):
        store.insert("applications", {"project_id": "p1", "user_id": "a@x.com", "status": "PENDING"})

        with pytest.raises(DuplicateKeyError) as exc_info:
            store.insert("applications", {"project_id": "p1", "user_id": "a@x.com", "status": "PENDING"})

        assert exc_info.value.constraint == "applications_one_pending_per_user_project"

    def test_decided_applications_do_not_block(self, store):
        first = store.insert("applications", {"project_id": "p1", "user_id": "a@x.com", "status": "PENDING"})
        store.update_by_id("applications", first["id"], {"status": "REJECTED"})

        second = store.insert("applications", {"project_id": "p1", "user_id": "a@x.com", "status": "PENDING"})

        assert second["status"] == "PENDING"

    def test_other_pairs_are_independent(self, store):
        store.insert("applications", {"project_id": "p1", "user_id": "a@x.com", "status": "PENDING"})
        store.insert("applications", {"project_id": "p2", "user_id": "a@x.com", "status": "PENDING"})
        store.insert("applications", {"project_id": "p1", "user_id": "b@x.com", "status": "PENDING"})

        assert store.count("applications", {"status": "PENDING"}) == 3

    def test_update_cannot_create_second_pending(self, store):
        store.insert("applications", {"project_id": "p1", "user_id": "a@x.com", "status": "PENDING"})
        decided = store.insert("applications", {"project_id": "p1", "user_id": "a@x.com", "status": "REJECTED"})

        with pytest.raises(DuplicateKeyError):
            store.update_by_id("applications", decided["id"], {"status": "PENDING"})

    def test_custom_constraints(self):
        store = InMemoryDocumentStore(constraints=[UniqueConstraint("slug_key", "projects", ("slug",))])
        store.insert("projects", {"slug": "a"})

        with pytest.raises(DuplicateKeyError):
            store.insert("projects", {"slug": "a"})


# =============================================================================
# Upsert
# =============================================================================

class TestUpsert:
    """Test upsert keyed on a field."""

    def test_insert_then_merge(self, store):
        created = store.upsert("users", {"email": "a@x.com", "profile": {"name": "A"}, "status": "ACTIVE"}, on="email")
        updated = store.upsert("users", {"email": "a@x.com", "onboarding_completed": True}, on="email")

        assert updated["id"] == created["id"]
        assert updated["profile"] == {"name": "A"}
        assert updated["onboarding_completed"] is True
        assert store.count("users") == 1
