"""
Counters for the public home page and the admin dashboard.
"""

from sqlalchemy.orm import Session

import models.schemas as schemas
from repositories.event_repository import EventRepository
from repositories.file_repository import FileRepository
from repositories.group_repository import GroupRepository
from repositories.post_repository import PostRepository
from repositories.report_repository import ReportRepository
from repositories.user_repository import UserRepository
from services.event_service import EventService


class StatsService:
    """Read-only aggregate counts."""

    @staticmethod
    def get_public_stats(db: Session) -> schemas.PublicStats:
        """Community totals. Expired events are swept first so they are not counted."""
        EventService.reap_expired_events(db)
        return schemas.PublicStats(
            total_users=UserRepository(db).count(),
            total_posts=PostRepository(db).count(),
            total_groups=GroupRepository(db).count(),
            total_events=EventRepository(db).count(),
        )

    @staticmethod
    def get_admin_stats(db: Session) -> schemas.AdminStats:
        user_repo = UserRepository(db)
        return schemas.AdminStats(
            total_users=user_repo.count(),
            pending_verifications=user_repo.count_unverified(),
            total_posts=PostRepository(db).count(),
            pending_reports=ReportRepository(db).count_pending(),
            pending_files=FileRepository(db).count_pending(),
        )
