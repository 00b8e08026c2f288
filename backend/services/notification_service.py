"""
In-app notifications: fan-out on content creation, inbox reads, preferences.

The fan-out is sequential and best-effort. Each recipient's row is committed
on its own, so a failure part-way leaves earlier recipients notified and
the triggering write (post, event, message) untouched.
"""

from typing import Iterable, List, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.exceptions import NotificationNotFoundException
from models.notification_types import NotificationKind
from repositories.group_repository import GroupRepository
from repositories.notification_repository import (
    NotificationPreferenceRepository,
    NotificationRepository,
)
from repositories.user_repository import UserRepository


class NotificationService:
    """Service for in-app notification business logic."""

    @staticmethod
    def fan_out(
        db: Session,
        recipient_ids: Iterable[int],
        kind: NotificationKind,
        title: str,
        message: str,
        related_id: Optional[int] = None,
    ) -> int:
        """
        Write one unread notification per recipient.

        Not atomic. A recipient whose insert fails is rolled back, logged and
        skipped; the loop carries on with the next one.

        Args:
            db: Database session
            recipient_ids: Users to notify, in delivery order
            kind: Notification kind stored in `type`
            title: Notification title
            message: Notification body
            related_id: ID of the post, event or group the client opens

        Returns:
            Number of notifications written
        """
        notification_repo = NotificationRepository(db)
        written = 0
        failed = 0

        for user_id in recipient_ids:
            try:
                notification_repo.add(
                    db_models.Notification(
                        user_id=user_id,
                        type=kind.value,
                        title=title,
                        message=message,
                        related_id=related_id,
                        read=False,
                    )
                )
                notification_repo.commit()
                written += 1
            except SQLAlchemyError as e:
                notification_repo.rollback()
                failed += 1
                logger.bind(kind=kind.value, related_id=related_id).warning(
                    f"Notification to user {user_id} failed, skipping: {e!r}"
                )

        logger.info(
            f"Fan-out {kind.value} #{related_id}: {written} written, {failed} failed"
        )
        return written

    # =========================================================================
    # Triggers
    # =========================================================================

    @staticmethod
    def notify_new_post(db: Session, post: db_models.Post) -> int:
        """
        Tell every other user about a new main-feed post.

        Posts inside a group are not announced.

        Args:
            db: Database session
            post: The post just committed

        Returns:
            Number of notifications written
        """
        if post.group_id is not None:
            return 0
        author = UserRepository(db).get_by_id(post.author_id)
        first_name = author.first_name if author else "Alguien"
        return NotificationService.fan_out(
            db,
            UserRepository(db).get_ids_except(post.author_id),
            NotificationKind.POST,
            "Nuevo anuncio",
            f"{first_name} hizo un nuevo anuncio",
            related_id=post.id,
        )

    @staticmethod
    def notify_new_event(db: Session, event: db_models.Event) -> int:
        """Tell every user except the host about a new event."""
        host = UserRepository(db).get_by_id(event.host_id)
        first_name = host.first_name if host else "Alguien"
        subject = event.subject or "un tema"
        return NotificationService.fan_out(
            db,
            UserRepository(db).get_ids_except(event.host_id),
            NotificationKind.EVENT,
            "Nueva asesoría",
            f"{first_name} abrió una nueva asesoría de {subject}",
            related_id=event.id,
        )

    @staticmethod
    def notify_new_message(db: Session, message: db_models.Message) -> int:
        """Tell the other members of the group about a new chat message."""
        sender = UserRepository(db).get_by_id(message.sender_id)
        first_name = sender.first_name if sender else "Alguien"
        return NotificationService.fan_out(
            db,
            GroupRepository(db).member_ids_except(message.group_id, message.sender_id),
            NotificationKind.MESSAGE,
            "Nuevo mensaje",
            f"{first_name} escribió en un grupo",
            related_id=message.group_id,
        )

    # =========================================================================
    # Inbox
    # =========================================================================

    @staticmethod
    def list_notifications(
        db: Session, user_id: int, skip: int = 0, limit: int = 50
    ) -> List[db_models.Notification]:
        return NotificationRepository(db).list_for_user(user_id, skip, limit)

    @staticmethod
    def count_unread(db: Session, user_id: int) -> int:
        return NotificationRepository(db).count_unread(user_id)

    @staticmethod
    def mark_read(
        db: Session, notification_id: int, user_id: int
    ) -> db_models.Notification:
        """
        Mark one of the caller's notifications as read.

        Idempotent. There is no way back to unread.

        Args:
            db: Database session
            notification_id: Notification ID
            user_id: Caller's user ID

        Returns:
            The notification

        Raises:
            NotificationNotFoundException: If it does not exist or belongs to
                another user.
        """
        notification_repo = NotificationRepository(db)
        notification = notification_repo.get_for_user(notification_id, user_id)
        if notification is None:
            raise NotificationNotFoundException()
        if not notification.read:
            notification.read = True
            notification_repo.update(notification)
        return notification

    @staticmethod
    def mark_all_read(db: Session, user_id: int) -> int:
        return NotificationRepository(db).mark_all_read(user_id)

    # =========================================================================
    # Preferences
    # =========================================================================

    @staticmethod
    def get_preferences(db: Session, user_id: int) -> db_models.NotificationPreference:
        return NotificationPreferenceRepository(db).get_or_create(user_id)

    @staticmethod
    def update_preferences(
        db: Session, user_id: int, data: schemas.NotificationPreferencesUpdate
    ) -> db_models.NotificationPreference:
        """Apply the fields present in data; omitted fields keep their value."""
        preference_repo = NotificationPreferenceRepository(db)
        preferences = preference_repo.get_or_create(user_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(preferences, field, value)
        return preference_repo.update(preferences)
