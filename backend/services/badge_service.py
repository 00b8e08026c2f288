"""
Badge and recognition service.
"""

from typing import List

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_plain_text, sanitize_url
from models.config import settings
from models.exceptions import (
    BadgeAlreadyAssignedException,
    BadgeNotFoundException,
    UserNotFoundException,
    ValidationException,
)
from repositories.badge_repository import BadgeRepository, RecognitionRepository
from repositories.user_repository import UserRepository

# Badges created by init_db.py on a fresh install
DEFAULT_BADGES = (
    ("Tutor destacado", "Impartió asesorías a sus compañeros", "#2563eb"),
    ("Colaborador", "Compartió material en la biblioteca", "#16a34a"),
    ("Líder de club", "Coordina un club escolar", "#d97706"),
)


class BadgeService:
    """Service for badge business logic."""

    @staticmethod
    def list_badges(db: Session) -> List[db_models.Badge]:
        return BadgeRepository(db).list_badges()

    @staticmethod
    def create_badge(db: Session, data: schemas.BadgeCreate) -> db_models.Badge:
        badge = BadgeRepository(db).create(
            db_models.Badge(
                name=sanitize_plain_text(data.name) or data.name.strip(),
                description=sanitize_plain_text(data.description),
                icon_url=sanitize_url(data.icon_url) or None,
                color=data.color,
            )
        )
        logger.info(f"Badge {badge.id} '{badge.name}' created")
        return badge

    @staticmethod
    def ensure_default_badges(db: Session) -> int:
        """Create DEFAULT_BADGES that do not exist yet. Returns how many were added."""
        badge_repo = BadgeRepository(db)
        added = 0
        for name, description, color in DEFAULT_BADGES:
            if badge_repo.get_by_name(name) is None:
                badge_repo.add(db_models.Badge(name=name, description=description, color=color))
                added += 1
        badge_repo.commit()
        return added

    @staticmethod
    def assign_badge(db: Session, user_id: int, badge_id: int) -> db_models.UserBadge:
        """
        Award a badge to a user.

        Raises:
            UserNotFoundException: If the user does not exist
            BadgeNotFoundException: If the badge does not exist
            BadgeAlreadyAssignedException: If the user already holds it
        """
        if not UserRepository(db).exists(user_id):
            raise UserNotFoundException()
        badge_repo = BadgeRepository(db)
        if not badge_repo.exists(badge_id):
            raise BadgeNotFoundException()
        if badge_repo.get_user_badge(user_id, badge_id) is not None:
            raise BadgeAlreadyAssignedException()

        user_badge = db_models.UserBadge(user_id=user_id, badge_id=badge_id)
        badge_repo.add(user_badge)
        try:
            badge_repo.commit()
        except IntegrityError:
            badge_repo.rollback()
            raise BadgeAlreadyAssignedException()
        badge_repo.refresh(user_badge)
        logger.info(f"Badge {badge_id} assigned to user {user_id}")
        return user_badge

    @staticmethod
    def list_user_badges(db: Session, user_id: int) -> List[db_models.UserBadge]:
        if not UserRepository(db).exists(user_id):
            raise UserNotFoundException()
        return BadgeRepository(db).list_for_user(user_id)


class RecognitionService:
    """Service for public recognitions."""

    @staticmethod
    def list_recognitions(db: Session) -> List[db_models.Recognition]:
        return RecognitionRepository(db).list_latest(settings.RECOGNITIONS_LIMIT)

    @staticmethod
    def create_recognition(
        db: Session, author_id: int, data: schemas.RecognitionCreate
    ) -> db_models.Recognition:
        """
        Publish a recognition for another user.

        Raises:
            UserNotFoundException: If the recipient does not exist
            ValidationException: If the content is empty after sanitisation
        """
        if not UserRepository(db).exists(data.recipient_id):
            raise UserNotFoundException("Recipient not found")
        content = sanitize_plain_text(data.content)
        if not content:
            raise ValidationException("Recognition cannot be empty")

        recognition = RecognitionRepository(db).create(
            db_models.Recognition(
                created_by=author_id,
                recipient_id=data.recipient_id,
                content=content,
                image_url=sanitize_url(data.image_url) or None,
            )
        )
        logger.info(
            f"Recognition {recognition.id} from user {author_id} to {data.recipient_id}"
        )
        return recognition
