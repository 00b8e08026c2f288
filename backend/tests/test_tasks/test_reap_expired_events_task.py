"""
Tests for the standalone expired-event sweep task.
"""

from datetime import timedelta

import pytest
from sqlalchemy.orm import Session

import repositories.db_models as db_models
from helpers.time_utils import utc_now
from services.event_service import EventService
from tasks.reap_expired_events import reap_expired_events


class TestReapExpiredEventsTask:
    """Tests for tasks.reap_expired_events."""

    def test_removes_events_and_bookings(
        self,
        db_session: Session,
        teacher_user: db_models.User,
        test_user: db_models.User,
        make_event,
    ):
        ended = make_event(teacher_user, starts_in=timedelta(hours=-3))
        db_session.add(db_models.EventParticipant(event_id=ended.id, user_id=test_user.id))
        db_session.commit()
        upcoming = make_event(teacher_user)

        assert reap_expired_events(db=db_session) == {"deleted_count": 1}
        assert [e.id for e in db_session.query(db_models.Event).all()] == [upcoming.id]
        assert db_session.query(db_models.EventParticipant).count() == 0

    def test_reference_time(
        self, db_session: Session, teacher_user: db_models.User, make_event
    ):
        """An event ending exactly at the cut-off is kept."""
        event = make_event(teacher_user, starts_in=timedelta(hours=1), duration=timedelta(hours=1))
        end = event.end_time

        assert reap_expired_events(db=db_session, now=end) == {"deleted_count": 0}
        assert reap_expired_events(
            db=db_session, now=end + timedelta(seconds=1)
        ) == {"deleted_count": 1}

    def test_nothing_to_do(self, db_session: Session):
        assert reap_expired_events(db=db_session, now=utc_now()) == {"deleted_count": 0}

    def test_errors_propagate(self, db_session: Session, monkeypatch: pytest.MonkeyPatch):
        def broken(db, now=None):
            raise RuntimeError("sin conexión")

        monkeypatch.setattr(EventService, "reap_expired_events", staticmethod(broken))

        with pytest.raises(RuntimeError):
            reap_expired_events(db=db_session)
