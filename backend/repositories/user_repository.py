"""
User repository for database operations.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class UserRepository(BaseRepository[db_models.User]):
    """Repository for User entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.User, db)

    def get_by_email(self, email: str) -> Optional[db_models.User]:
        """
        Get user by email (case-insensitive).

        Args:
            email: User email

        Returns:
            User if found, None otherwise
        """
        return (
            self.db.query(db_models.User)
            .filter(db_models.User.email == email.strip().lower())
            .first()
        )

    def email_exists(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def list_users(self, skip: int = 0, limit: int = 100) -> List[db_models.User]:
        """Users ordered by first name, as shown in the directory."""
        return (
            self.db.query(db_models.User)
            .order_by(db_models.User.first_name, db_models.User.last_name)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def list_newest(self, skip: int = 0, limit: int = 100) -> List[db_models.User]:
        """Users newest first, as shown in the admin console."""
        return (
            self.db.query(db_models.User)
            .order_by(db_models.User.created_at.desc(), db_models.User.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_ids_except(self, excluded_user_id: int) -> List[int]:
        """
        Get every user ID except one, in ID order.

        Args:
            excluded_user_id: User to leave out (usually the content author)

        Returns:
            List of user IDs
        """
        rows = (
            self.db.query(db_models.User.id)
            .filter(db_models.User.id != excluded_user_id)
            .order_by(db_models.User.id)
            .all()
        )
        return [row[0] for row in rows]

    def count_unverified(self) -> int:
        return (
            self.db.query(db_models.User)
            .filter(db_models.User.verified == False)  # noqa: E712
            .count()
        )
