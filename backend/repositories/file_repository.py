"""
Library file repository.
"""

from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

import repositories.db_models as db_models
from .base import BaseRepository


class FileRepository(BaseRepository[db_models.LibraryFile]):
    """Repository for LibraryFile entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.LibraryFile, db)

    def _with_uploader(self):
        return self.db.query(db_models.LibraryFile).options(
            joinedload(db_models.LibraryFile.uploader)
        )

    def get_with_uploader(self, file_id: int) -> Optional[db_models.LibraryFile]:
        return self._with_uploader().filter(db_models.LibraryFile.id == file_id).first()

    def list_approved(self, subject: Optional[str] = None) -> List[db_models.LibraryFile]:
        """
        Get approved files, newest first.

        Args:
            subject: Optional subject filter (exact match)

        Returns:
            List of files with uploaders loaded
        """
        query = self._with_uploader().filter(
            db_models.LibraryFile.approved == True  # noqa: E712
        )
        if subject:
            query = query.filter(db_models.LibraryFile.subject == subject)
        return query.order_by(
            db_models.LibraryFile.created_at.desc(), db_models.LibraryFile.id.desc()
        ).all()

    def list_pending(self) -> List[db_models.LibraryFile]:
        """Files waiting for admin approval, oldest first."""
        return (
            self._with_uploader()
            .filter(db_models.LibraryFile.approved == False)  # noqa: E712
            .order_by(db_models.LibraryFile.created_at.asc(), db_models.LibraryFile.id)
            .all()
        )

    def list_by_uploader(self, uploader_id: int) -> List[db_models.LibraryFile]:
        return (
            self._with_uploader()
            .filter(db_models.LibraryFile.uploader_id == uploader_id)
            .order_by(
                db_models.LibraryFile.created_at.desc(), db_models.LibraryFile.id.desc()
            )
            .all()
        )

    def count_pending(self) -> int:
        return (
            self.db.query(db_models.LibraryFile)
            .filter(db_models.LibraryFile.approved == False)  # noqa: E712
            .count()
        )

    def increment_downloads(self, file_id: int) -> None:
        """Atomically bump download_count and commit."""
        self.db.query(db_models.LibraryFile).filter(
            db_models.LibraryFile.id == file_id
        ).update(
            {db_models.LibraryFile.download_count: db_models.LibraryFile.download_count + 1},
            synchronize_session=False,
        )
        self.db.commit()
