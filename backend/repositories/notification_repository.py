"""
In-app notification and notification preference repositories.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class NotificationRepository(BaseRepository[db_models.Notification]):
    """Repository for Notification rows."""

    def __init__(self, db: Session):
        super().__init__(db_models.Notification, db)

    def list_for_user(
        self, user_id: int, skip: int = 0, limit: int = 50
    ) -> List[db_models.Notification]:
        """
        Get a user's notifications, newest first.

        Args:
            user_id: Recipient user ID
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            List of notifications
        """
        return (
            self.db.query(db_models.Notification)
            .filter(db_models.Notification.user_id == user_id)
            .order_by(
                db_models.Notification.created_at.desc(),
                db_models.Notification.id.desc(),
            )
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_for_user(
        self, notification_id: int, user_id: int
    ) -> Optional[db_models.Notification]:
        """Get a notification only if it belongs to user_id."""
        return (
            self.db.query(db_models.Notification)
            .filter(
                db_models.Notification.id == notification_id,
                db_models.Notification.user_id == user_id,
            )
            .first()
        )

    def count_unread(self, user_id: int) -> int:
        return (
            self.db.query(db_models.Notification)
            .filter(
                db_models.Notification.user_id == user_id,
                db_models.Notification.read == False,  # noqa: E712
            )
            .count()
        )

    def mark_all_read(self, user_id: int) -> int:
        """Set read=True on every unread notification of user_id and commit."""
        updated = (
            self.db.query(db_models.Notification)
            .filter(
                db_models.Notification.user_id == user_id,
                db_models.Notification.read == False,  # noqa: E712
            )
            .update({db_models.Notification.read: True}, synchronize_session=False)
        )
        self.db.commit()
        return updated


class NotificationPreferenceRepository(
    BaseRepository[db_models.NotificationPreference]
):
    """Repository for the one-per-user preference row."""

    def __init__(self, db: Session):
        super().__init__(db_models.NotificationPreference, db)

    def get_by_user(self, user_id: int) -> Optional[db_models.NotificationPreference]:
        return (
            self.db.query(db_models.NotificationPreference)
            .filter(db_models.NotificationPreference.user_id == user_id)
            .first()
        )

    def get_or_create(self, user_id: int) -> db_models.NotificationPreference:
        """Return the user's preferences, creating the default row if missing."""
        preferences = self.get_by_user(user_id)
        if preferences is None:
            preferences = self.create(
                db_models.NotificationPreference(user_id=user_id)
            )
        return preferences
