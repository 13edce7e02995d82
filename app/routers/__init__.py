# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - projects.py: Projects and applying to them
# - applications.py: Listing and deciding applications
# - tasks.py: Task assignment, status, submission and review
# - modifications.py: Change requests against tasks
# - users.py: User profiles
# - stats.py: Dashboard counters
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import projects
from . import applications
from . import tasks
from . import modifications
from . import users
from . import stats

__all__ = [
    "health",
    "projects",
    "applications",
    "tasks",
    "modifications",
    "users",
    "stats",
]
