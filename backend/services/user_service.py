"""
User service: directory, profiles, and account moderation.
"""

from typing import List

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_plain_text, sanitize_url
from models.exceptions import CannotModerateSelfException, UserNotFoundException
from repositories.user_repository import UserRepository


class UserService:
    """Service for user-related business logic."""

    @staticmethod
    def get_user(db: Session, user_id: int) -> db_models.User:
        user = UserRepository(db).get_by_id(user_id)
        if user is None:
            raise UserNotFoundException()
        return user

    @staticmethod
    def list_users(db: Session, skip: int = 0, limit: int = 100) -> List[db_models.User]:
        return UserRepository(db).list_users(skip, limit)

    @staticmethod
    def update_profile(
        db: Session, user_id: int, data: schemas.UserProfileUpdate
    ) -> db_models.User:
        """
        Update the caller's own profile. Omitted fields are left unchanged.

        Args:
            db: Database session
            user_id: Caller's user ID
            data: Fields to change

        Returns:
            Updated user
        """
        user_repo = UserRepository(db)
        user = UserService.get_user(db, user_id)
        updates = data.model_dump(exclude_unset=True)

        for field in ("first_name", "last_name", "grade", "bio"):
            if field in updates and updates[field] is not None:
                setattr(user, field, sanitize_plain_text(updates[field]))
        if updates.get("interests") is not None:
            interests = (sanitize_plain_text(i) for i in updates["interests"])
            user.interests = [i for i in interests if i][:20]
        if "profile_image_url" in updates:
            user.profile_image_url = sanitize_url(updates["profile_image_url"]) or None

        return user_repo.update(user)

    # =========================================================================
    # Admin console
    # =========================================================================

    @staticmethod
    def list_users_for_admin(
        db: Session, skip: int = 0, limit: int = 100
    ) -> List[db_models.User]:
        return UserRepository(db).list_newest(skip, limit)

    @staticmethod
    def verify_user(db: Session, user_id: int) -> db_models.User:
        """Mark an account as verified. Verifying twice is harmless."""
        user_repo = UserRepository(db)
        user = UserService.get_user(db, user_id)
        if not user.verified:
            user.verified = True
            user_repo.update(user)
            logger.info(f"User {user_id} verified")
        return user

    @staticmethod
    def toggle_block(db: Session, user_id: int, admin_id: int) -> db_models.User:
        """
        Block an account, or unblock it if already blocked.

        Raises:
            UserNotFoundException: If the user does not exist
            CannotModerateSelfException: If the admin targets themselves
        """
        if user_id == admin_id:
            raise CannotModerateSelfException()
        user_repo = UserRepository(db)
        user = UserService.get_user(db, user_id)
        user.blocked = not user.blocked
        user_repo.update(user)
        logger.info(
            f"User {user_id} {'blocked' if user.blocked else 'unblocked'} by admin {admin_id}"
        )
        return user

    @staticmethod
    def change_role(
        db: Session, user_id: int, role: db_models.UserRole, admin_id: int
    ) -> db_models.User:
        """
        Change an account's role.

        Raises:
            UserNotFoundException: If the user does not exist
            CannotModerateSelfException: If an admin tries to demote themselves
        """
        if user_id == admin_id and role != db_models.UserRole.ADMIN:
            raise CannotModerateSelfException()
        user_repo = UserRepository(db)
        user = UserService.get_user(db, user_id)
        user.role = role
        user_repo.update(user)
        logger.info(f"User {user_id} role set to {role.value} by admin {admin_id}")
        return user
