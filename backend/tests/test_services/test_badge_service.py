"""
Unit tests for BadgeService, RecognitionService and StatsService.
"""

from datetime import timedelta

import pytest
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.exceptions import (
    BadgeAlreadyAssignedException,
    BadgeNotFoundException,
    UserNotFoundException,
    ValidationException,
)
from services.badge_service import DEFAULT_BADGES, BadgeService, RecognitionService
from services.stats_service import StatsService


class TestBadges:
    """Tests for BadgeService."""

    def test_default_badges_are_seeded_once(self, db_session: Session):
        assert BadgeService.ensure_default_badges(db_session) == len(DEFAULT_BADGES)
        assert BadgeService.ensure_default_badges(db_session) == 0
        assert len(BadgeService.list_badges(db_session)) == len(DEFAULT_BADGES)

    def test_assign_badge(self, db_session: Session, test_user: db_models.User):
        badge = BadgeService.create_badge(
            db_session, schemas.BadgeCreate(name="Olimpiada", color="#000000")
        )

        BadgeService.assign_badge(db_session, test_user.id, badge.id)

        held = BadgeService.list_user_badges(db_session, test_user.id)
        assert [ub.badge_id for ub in held] == [badge.id]

    def test_assign_twice_conflicts(self, db_session: Session, test_user: db_models.User):
        badge = BadgeService.create_badge(db_session, schemas.BadgeCreate(name="Olimpiada"))
        BadgeService.assign_badge(db_session, test_user.id, badge.id)

        with pytest.raises(BadgeAlreadyAssignedException):
            BadgeService.assign_badge(db_session, test_user.id, badge.id)

    def test_assign_missing(self, db_session: Session, test_user: db_models.User):
        with pytest.raises(BadgeNotFoundException):
            BadgeService.assign_badge(db_session, test_user.id, 999)
        with pytest.raises(UserNotFoundException):
            BadgeService.assign_badge(db_session, 999, 1)


class TestRecognitions:
    """Tests for RecognitionService."""

    def test_create_and_list(
        self, db_session: Session, teacher_user: db_models.User, test_user: db_models.User
    ):
        recognition = RecognitionService.create_recognition(
            db_session,
            teacher_user.id,
            schemas.RecognitionCreate(recipient_id=test_user.id, content="¡Gran proyecto!"),
        )

        assert recognition.created_by == teacher_user.id
        assert [r.id for r in RecognitionService.list_recognitions(db_session)] == [
            recognition.id
        ]

    def test_unknown_recipient(self, db_session: Session, teacher_user: db_models.User):
        with pytest.raises(UserNotFoundException):
            RecognitionService.create_recognition(
                db_session,
                teacher_user.id,
                schemas.RecognitionCreate(recipient_id=999, content="Bravo"),
            )

    def test_markup_only_content(
        self, db_session: Session, teacher_user: db_models.User, test_user: db_models.User
    ):
        with pytest.raises(ValidationException):
            RecognitionService.create_recognition(
                db_session,
                teacher_user.id,
                schemas.RecognitionCreate(recipient_id=test_user.id, content="<p></p>"),
            )


class TestStats:
    """Tests for StatsService."""

    def test_public_stats_skip_expired_events(
        self,
        db_session: Session,
        teacher_user: db_models.User,
        test_post: db_models.Post,
        test_group: db_models.Group,
        make_event,
    ):
        make_event(teacher_user)
        make_event(teacher_user, starts_in=timedelta(hours=-3))

        stats = StatsService.get_public_stats(db_session)

        assert stats.total_users == 2
        assert stats.total_posts == 1
        assert stats.total_groups == 1
        assert stats.total_events == 1

    def test_admin_stats(
        self,
        db_session: Session,
        test_user: db_models.User,
        unverified_user: db_models.User,
        test_post: db_models.Post,
    ):
        db_session.add(
            db_models.Report(
                reporter_id=unverified_user.id,
                target_type=db_models.ReportTargetType.POST,
                target_id=test_post.id,
                reason="Spam",
            )
        )
        db_session.commit()

        stats = StatsService.get_admin_stats(db_session)

        assert stats.total_users == 2
        assert stats.pending_verifications == 1
        assert stats.total_posts == 1
        assert stats.pending_reports == 1
        assert stats.pending_files == 0
