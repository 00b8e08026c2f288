"""
Unit tests for NotificationService: fan-out, triggers, inbox and preferences.
"""

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.exceptions import NotificationNotFoundException
from models.notification_types import NotificationKind
from repositories.notification_repository import NotificationRepository
from services.notification_service import NotificationService


def _notifications_for(db: Session, user_id: int) -> list[db_models.Notification]:
    return (
        db.query(db_models.Notification)
        .filter(db_models.Notification.user_id == user_id)
        .all()
    )


class TestFanOut:
    """Tests for NotificationService.fan_out."""

    def test_one_unread_row_per_recipient(
        self, db_session: Session, test_user: db_models.User, other_user: db_models.User
    ):
        written = NotificationService.fan_out(
            db_session,
            [test_user.id, other_user.id],
            NotificationKind.POST,
            "Nuevo anuncio",
            "Alguien hizo un nuevo anuncio",
            related_id=7,
        )

        assert written == 2
        rows = db_session.query(db_models.Notification).all()
        assert len(rows) == 2
        assert {r.user_id for r in rows} == {test_user.id, other_user.id}
        assert all(r.type == "post" and r.related_id == 7 and not r.read for r in rows)

    def test_empty_audience(self, db_session: Session):
        assert NotificationService.fan_out(
            db_session, [], NotificationKind.EVENT, "t", "m"
        ) == 0

    def test_failed_recipient_is_skipped(
        self,
        db_session: Session,
        monkeypatch: pytest.MonkeyPatch,
        user_factory,
    ):
        """A failing insert is rolled back and the loop goes on; earlier rows stay."""
        recipients = [user_factory(f"r{i}@loyola.edu.mx") for i in range(3)]
        original_commit = NotificationRepository.commit
        calls = {"n": 0}

        def flaky_commit(self):
            calls["n"] += 1
            if calls["n"] == 2:
                raise SQLAlchemyError("disk I/O error")
            original_commit(self)

        monkeypatch.setattr(NotificationRepository, "commit", flaky_commit)

        written = NotificationService.fan_out(
            db_session,
            [u.id for u in recipients],
            NotificationKind.MESSAGE,
            "Nuevo mensaje",
            "Ana escribió en un grupo",
        )

        assert written == 2
        assert len(_notifications_for(db_session, recipients[0].id)) == 1
        assert len(_notifications_for(db_session, recipients[1].id)) == 0
        assert len(_notifications_for(db_session, recipients[2].id)) == 1


class TestTriggers:
    """Tests for the notify_new_* triggers."""

    def test_new_post_notifies_everyone_but_author(
        self,
        db_session: Session,
        test_user: db_models.User,
        other_user: db_models.User,
        teacher_user: db_models.User,
        test_post: db_models.Post,
    ):
        written = NotificationService.notify_new_post(db_session, test_post)

        assert written == 2
        assert _notifications_for(db_session, test_user.id) == []
        received = _notifications_for(db_session, other_user.id)
        assert len(received) == 1
        assert received[0].title == "Nuevo anuncio"
        assert received[0].message == "Ana hizo un nuevo anuncio"
        assert received[0].related_id == test_post.id

    def test_group_post_is_not_announced(
        self,
        db_session: Session,
        test_user: db_models.User,
        other_user: db_models.User,
        test_group: db_models.Group,
    ):
        post = db_models.Post(author_id=test_user.id, group_id=test_group.id, content="Tarea")
        db_session.add(post)
        db_session.commit()

        assert NotificationService.notify_new_post(db_session, post) == 0
        assert db_session.query(db_models.Notification).count() == 0

    def test_new_message_reaches_other_members_only(
        self,
        db_session: Session,
        test_user: db_models.User,
        other_user: db_models.User,
        teacher_user: db_models.User,
        test_group: db_models.Group,
    ):
        """Members except the sender are notified; non-members are not."""
        db_session.add(db_models.GroupMember(group_id=test_group.id, user_id=other_user.id))
        message = db_models.Message(
            group_id=test_group.id, sender_id=test_user.id, content="¿Mañana hay examen?"
        )
        db_session.add(message)
        db_session.commit()

        written = NotificationService.notify_new_message(db_session, message)

        assert written == 1
        received = _notifications_for(db_session, other_user.id)
        assert received[0].type == "message"
        assert received[0].related_id == test_group.id
        assert _notifications_for(db_session, teacher_user.id) == []
        assert _notifications_for(db_session, test_user.id) == []


class TestInbox:
    """Tests for listing and marking notifications."""

    @pytest.fixture
    def inbox(self, db_session: Session, test_user: db_models.User):
        NotificationService.fan_out(
            db_session, [test_user.id] * 3, NotificationKind.POST, "Nuevo anuncio", "x"
        )
        return _notifications_for(db_session, test_user.id)

    def test_mark_read_is_monotonic(
        self, db_session: Session, test_user: db_models.User, inbox
    ):
        """Marking twice keeps it read; the unread count only goes down."""
        target = inbox[0]
        assert NotificationService.count_unread(db_session, test_user.id) == 3

        NotificationService.mark_read(db_session, target.id, test_user.id)
        NotificationService.mark_read(db_session, target.id, test_user.id)

        db_session.refresh(target)
        assert target.read is True
        assert NotificationService.count_unread(db_session, test_user.id) == 2

    def test_mark_read_of_someone_elses_notification(
        self, db_session: Session, other_user: db_models.User, inbox
    ):
        with pytest.raises(NotificationNotFoundException):
            NotificationService.mark_read(db_session, inbox[0].id, other_user.id)
        db_session.refresh(inbox[0])
        assert inbox[0].read is False

    def test_mark_all_read(self, db_session: Session, test_user: db_models.User, inbox):
        assert NotificationService.mark_all_read(db_session, test_user.id) == 3
        assert NotificationService.count_unread(db_session, test_user.id) == 0
        assert NotificationService.mark_all_read(db_session, test_user.id) == 0

    def test_list_is_newest_first(
        self, db_session: Session, test_user: db_models.User, inbox
    ):
        listed = NotificationService.list_notifications(db_session, test_user.id)
        assert [n.id for n in listed] == sorted((n.id for n in inbox), reverse=True)


class TestPreferences:
    """Tests for notification preferences."""

    def test_defaults_are_created_on_first_read(
        self, db_session: Session, test_user: db_models.User
    ):
        preferences = NotificationService.get_preferences(db_session, test_user.id)
        assert preferences.email_new_post is True
        assert preferences.push_enabled is False

    def test_partial_update(self, db_session: Session, test_user: db_models.User):
        """Omitted fields keep their value."""
        updated = NotificationService.update_preferences(
            db_session,
            test_user.id,
            schemas.NotificationPreferencesUpdate(push_enabled=True),
        )
        assert updated.push_enabled is True
        assert updated.email_new_post is True
