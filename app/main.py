# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Collab Platform API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    CollabException,
    collab_exception_handler,
    storage_exception_handler,
    validation_exception_handler,
)
from app.routers import applications, chat, health, modifications, projects, stats, tasks, users
from app.auth import routes as auth_routes
from lib.document_store import StorageError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup and shutdown:
    - Startup: Log configuration, warn about single-instance settings
    - Shutdown: Log
    """
    logger.info(f"Starting Collab Platform API in {settings.ENVIRONMENT} mode")
    logger.info(f"Storage backend: {settings.STORAGE_BACKEND}, throttle backend: {settings.THROTTLE_BACKEND}")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    if settings.THROTTLE_BACKEND == "memory":
        logger.info("Admin login throttle is process-local; run a single instance or use THROTTLE_BACKEND=redis")
    if not settings.ADMIN_ACCESS_CODE:
        logger.warning("ADMIN_ACCESS_CODE is not set; admin login is disabled")

    yield

    logger.info("Shutting down Collab Platform API")


# Create FastAPI application
app = FastAPI(
    title="Collab Platform API",
    description="""
## Project and Task Collaboration API

Users apply to projects, get assigned tasks and submit work; admins decide
applications and manage project and task status.

### Lifecycles

| Entity | States |
|--------|--------|
| **Project** | COMING_SOON -> OPEN -> IN_PROGRESS -> COMPLETED |
| **Application** | PENDING -> ACCEPTED / REJECTED |
| **Task** | PENDING <-> IN_PROGRESS -> COMPLETED |
| **Modification** | PENDING -> APPROVED / REJECTED |

### Authentication

- `Authorization: Bearer <token>` - signed token, or an email address where allowed
- Admin session cookie - from `POST /api/v1/auth/admin/login`
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Caller identity and admin session"},
        {"name": "Projects", "description": "Projects and applying to them"},
        {"name": "Applications", "description": "Application review"},
        {"name": "Tasks", "description": "Task assignment, submission and review"},
        {"name": "Modifications", "description": "Change requests against tasks"},
        {"name": "Users", "description": "User profiles"},
        {"name": "Stats", "description": "Dashboard counters"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

app.add_exception_handler(CollabException, collab_exception_handler)
app.add_exception_handler(StorageError, storage_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints (router carries the /auth prefix)
app.include_router(
    auth_routes.router,
    prefix="/api/v1",
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)

# Project endpoints
app.include_router(
    projects.router,
    prefix="/api/v1/projects",
    tags=["Projects"]
)

# Application endpoints
app.include_router(
    applications.router,
    prefix="/api/v1/applications",
    tags=["Applications"]
)

# Task endpoints (nested under projects, plus /tasks/assigned)
app.include_router(
    tasks.router,
    prefix="/api/v1",
    tags=["Tasks"]
)

# Task modification endpoints
app.include_router(
    modifications.router,
    prefix="/api/v1",
    tags=["Modifications"]
)

# Project and task chat
app.include_router(
    chat.router,
    prefix="/api/v1",
    tags=["Chat"]
)

# User profile endpoints
app.include_router(
    users.router,
    prefix="/api/v1/users",
    tags=["Users"]
)

# Dashboard counters
app.include_router(
    stats.router,
    prefix="/api/v1/stats",
    tags=["Stats"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Collab Platform API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
