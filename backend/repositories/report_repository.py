"""
Report repository for moderation.
"""

from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

import repositories.db_models as db_models
from .base import BaseRepository


class ReportRepository(BaseRepository[db_models.Report]):
    """Repository for Report entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Report, db)

    def list_by_status(
        self,
        status: Optional[db_models.ReportStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[db_models.Report]:
        """
        Get reports newest first.

        Args:
            status: Only reports in this status; None means every status
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            List of reports with reporter loaded
        """
        query = self.db.query(db_models.Report).options(
            joinedload(db_models.Report.reporter)
        )
        if status is not None:
            query = query.filter(db_models.Report.status == status)
        return (
            query.order_by(db_models.Report.created_at.desc(), db_models.Report.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_pending(self) -> int:
        return (
            self.db.query(db_models.Report)
            .filter(db_models.Report.status == db_models.ReportStatus.PENDING)
            .count()
        )
