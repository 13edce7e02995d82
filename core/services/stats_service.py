# =============================================================================
# core/services/stats_service.py - Dashboard Counters
# =============================================================================
# Read-only counts. Each count is its own query; nothing here writes.
# =============================================================================

import logging

from core.authorization import ADMIN_ONLY, ANY_USER, ensure_authorized, require_email
from core.models.application import ApplicationStatus
from core.models.identity import Identity
from core.models.project import ProjectStatus
from core.models.stats import AdminStats, UserStats
from core.models.task import TaskStatus
from core.models.user import UserStatus
from core.services.application_service import APPLICATIONS
from core.services.base import StoreService
from core.services.project_service import PROJECTS
from core.services.task_service import TASKS
from core.services.user_service import USERS

logger = logging.getLogger(__name__)

# Applications that still count as "active" for the applicant
ACTIVE_APPLICATION_STATUSES = [ApplicationStatus.PENDING.value, ApplicationStatus.ACCEPTED.value]


class StatsService(StoreService):

    def user_stats(self, identity: Identity) -> UserStats:
        """Counts for the caller's dashboard."""
        ensure_authorized(ANY_USER, identity)
        email = require_email(identity)

        return UserStats(
            total_projects=self.store.count(PROJECTS),
            open_projects=self.store.count(PROJECTS, {"status": ProjectStatus.OPEN.value}),
            active_applications=self.store.count(
                APPLICATIONS,
                {"user_id": email, "status": ACTIVE_APPLICATION_STATUSES},
            ),
            completed_tasks=self.store.count(
                TASKS,
                {"user_id": email, "status": TaskStatus.COMPLETED.value},
            ),
        )

    def admin_stats(self, identity: Identity) -> AdminStats:
        """Platform-wide counts. Admin only."""
        ensure_authorized(ADMIN_ONLY, identity)

        stats = AdminStats(
            total_projects=self.store.count(PROJECTS),
            open_projects=self.store.count(PROJECTS, {"status": ProjectStatus.OPEN.value}),
            total_tasks=self.store.count(TASKS),
            pending_applications=self.store.count(APPLICATIONS, {"status": ApplicationStatus.PENDING.value}),
            active_users=self.store.count(USERS, {"status": UserStatus.ACTIVE.value}),
        )
        logger.debug(f"Admin stats: {stats.model_dump()}")
        return stats
