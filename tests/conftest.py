# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up test environment variables before any imports
# - Provides an in-memory document store and services built on it
# - Provides caller identities and a TestClient wired to the same store
# =============================================================================

import os
from datetime import datetime, timedelta, timezone

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ["STORAGE_BACKEND"] = "memory"
os.environ["THROTTLE_BACKEND"] = "memory"
os.environ["JWT_SECRET"] = "test-secret-key-0123456789"
os.environ["ADMIN_ACCESS_CODE"] = "test-admin-code"
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from app.auth.dependencies import get_login_throttle
from app.auth.identity import create_access_token
from app.auth.throttle import InMemoryAttemptStore, LoginThrottle
from app.dependencies import get_document_store
from app.main import app
from core.models.identity import Identity
from core.models.project import ProjectCreate, ProjectStatus
from core.models.task import TaskCreate
from core.services import (
    ApplicationService,
    ChatService,
    ModificationService,
    ProjectService,
    StatsService,
    TaskService,
    UserService,
)
from lib.document_store import InMemoryDocumentStore

USER_EMAIL = "user@x.com"
OTHER_EMAIL = "other@x.com"
ADMIN_EMAIL = "ops@x.com"


# =============================================================================
# Clock
# =============================================================================

class FakeClock:
    """Manually advanced time source for throttle tests."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


# =============================================================================
# Storage and Services
# =============================================================================

@pytest.fixture
def store():
    """Fresh in-memory store per test."""
    return InMemoryDocumentStore()


@pytest.fixture
def project_service(store):
    return ProjectService(store, strict_transitions=True)


@pytest.fixture
def application_service(store, project_service):
    return ApplicationService(store, project_service)


@pytest.fixture
def task_service(store, project_service):
    return TaskService(store, project_service)


@pytest.fixture
def chat_service(store, task_service):
    return ChatService(store, task_service)


@pytest.fixture
def modification_service(store, task_service, chat_service):
    return ModificationService(store, task_service, chat_service)


@pytest.fixture
def stats_service(store):
    return StatsService(store)


@pytest.fixture
def user_service(store):
    return UserService(store)


# =============================================================================
# Identities
# =============================================================================

@pytest.fixture
def anonymous():
    return Identity.anonymous()


@pytest.fixture
def user():
    return Identity.user(USER_EMAIL)


@pytest.fixture
def other_user():
    return Identity.user(OTHER_EMAIL)


@pytest.fixture
def admin():
    return Identity.admin(ADMIN_EMAIL)


@pytest.fixture
def session_admin():
    """Admin from the session cookie alone, no email."""
    return Identity.admin()


# =============================================================================
# Sample Data
# =============================================================================

@pytest.fixture
def open_project(project_service, admin):
    return project_service.create_project(
        admin,
        ProjectCreate(name="Genesis Mint", description="Community launch", status=ProjectStatus.OPEN),
    )


@pytest.fixture
def task_payload():
    return TaskCreate(
        user_id=USER_EMAIL,
        title="Host an AMA",
        description="One hour AMA on the Discord stage",
        deadline=datetime.now(timezone.utc) + timedelta(days=7),
        deliverables=["Recording link"],
        platform="Discord",
    )


@pytest.fixture
def task(task_service, admin, open_project, task_payload):
    """Task in open_project assigned to USER_EMAIL, created by the admin."""
    return task_service.create_task(admin, open_project.id, task_payload)


# =============================================================================
# HTTP Client
# =============================================================================

@pytest.fixture
def throttle(clock):
    return LoginThrottle(InMemoryAttemptStore(), max_attempts=5, window_seconds=15 * 60, clock=clock)


@pytest.fixture
def client(store, throttle):
    """TestClient sharing the test's store and throttle."""
    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_login_throttle] = lambda: throttle
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def bearer(email: str, role: str = "user") -> dict[str, str]:
    """Authorization header with a signed token."""
    return {"Authorization": f"Bearer {create_access_token(email, role=role)}"}


@pytest.fixture
def user_headers():
    return bearer(USER_EMAIL)


@pytest.fixture
def other_headers():
    return bearer(OTHER_EMAIL)


@pytest.fixture
def admin_headers():
    return bearer(ADMIN_EMAIL, role="admin")
