"""
Unit tests for UserService profiles and account moderation.
"""

import pytest
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.exceptions import CannotModerateSelfException, UserNotFoundException
from services.user_service import UserService


class TestUpdateProfile:
    """Tests for UserService.update_profile."""

    def test_partial_update_is_sanitized(
        self, db_session: Session, test_user: db_models.User
    ):
        updated = UserService.update_profile(
            db_session,
            test_user.id,
            schemas.UserProfileUpdate(bio="<b>Me gusta</b> la química", grade="3°B"),
        )

        assert updated.bio == "Me gusta la química"
        assert updated.grade == "3°B"
        assert updated.first_name == "Ana"

    def test_interests_are_capped(self, db_session: Session, test_user: db_models.User):
        interests = [f"tema {i}" for i in range(25)] + ["<i></i>"]

        updated = UserService.update_profile(
            db_session, test_user.id, schemas.UserProfileUpdate(interests=interests)
        )

        assert len(updated.interests) == 20
        assert updated.interests[0] == "tema 0"

    def test_unsafe_image_url_dropped(self, db_session: Session, test_user: db_models.User):
        updated = UserService.update_profile(
            db_session,
            test_user.id,
            schemas.UserProfileUpdate(profile_image_url="javascript:alert(1)"),
        )
        assert updated.profile_image_url is None


class TestModeration:
    """Tests for verify_user, toggle_block and change_role."""

    def test_verify(self, db_session: Session, unverified_user: db_models.User):
        assert UserService.verify_user(db_session, unverified_user.id).verified is True
        assert UserService.verify_user(db_session, unverified_user.id).verified is True

    def test_toggle_block(
        self, db_session: Session, admin_user: db_models.User, test_user: db_models.User
    ):
        assert UserService.toggle_block(db_session, test_user.id, admin_user.id).blocked is True
        assert UserService.toggle_block(db_session, test_user.id, admin_user.id).blocked is False

    def test_cannot_block_self(self, db_session: Session, admin_user: db_models.User):
        with pytest.raises(CannotModerateSelfException):
            UserService.toggle_block(db_session, admin_user.id, admin_user.id)

    def test_block_missing_user(self, db_session: Session, admin_user: db_models.User):
        with pytest.raises(UserNotFoundException):
            UserService.toggle_block(db_session, 999, admin_user.id)

    def test_change_role(
        self, db_session: Session, admin_user: db_models.User, test_user: db_models.User
    ):
        updated = UserService.change_role(
            db_session, test_user.id, db_models.UserRole.TEACHER, admin_user.id
        )
        assert updated.role == db_models.UserRole.TEACHER

    def test_admin_cannot_demote_self(self, db_session: Session, admin_user: db_models.User):
        with pytest.raises(CannotModerateSelfException):
            UserService.change_role(
                db_session, admin_user.id, db_models.UserRole.STUDENT, admin_user.id
            )
