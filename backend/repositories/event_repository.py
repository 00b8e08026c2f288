"""
Event and booking repository.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, insert, literal, select
from sqlalchemy.orm import Session, joinedload

import repositories.db_models as db_models
from .base import BaseRepository


class EventRepository(BaseRepository[db_models.Event]):
    """Repository for Event and EventParticipant rows."""

    def __init__(self, db: Session):
        super().__init__(db_models.Event, db)

    def _listing_query(self):
        return self.db.query(db_models.Event).options(
            joinedload(db_models.Event.host)
        )

    def get_with_host(self, event_id: int) -> Optional[db_models.Event]:
        return self._listing_query().filter(db_models.Event.id == event_id).first()

    def get_for_update(self, event_id: int) -> Optional[db_models.Event]:
        """
        Load an event and lock its row until the transaction ends.

        On PostgreSQL this is SELECT ... FOR UPDATE, which serialises
        concurrent bookings of the same event. SQLite ignores the clause,
        so bookings with a capacity go through add_participant_within_capacity.

        Args:
            event_id: Event ID

        Returns:
            Event if found, None otherwise
        """
        return (
            self.db.query(db_models.Event)
            .filter(db_models.Event.id == event_id)
            .with_for_update()
            .first()
        )

    def list_all(self) -> List[db_models.Event]:
        return (
            self._listing_query()
            .order_by(db_models.Event.start_time.desc(), db_models.Event.id.desc())
            .all()
        )

    def list_by_host(self, host_id: int) -> List[db_models.Event]:
        return (
            self._listing_query()
            .filter(db_models.Event.host_id == host_id)
            .order_by(db_models.Event.start_time.desc(), db_models.Event.id.desc())
            .all()
        )

    def list_booked_by(self, user_id: int) -> List[db_models.Event]:
        """Events the user holds a booking for."""
        return (
            self._listing_query()
            .join(
                db_models.EventParticipant,
                db_models.EventParticipant.event_id == db_models.Event.id,
            )
            .filter(db_models.EventParticipant.user_id == user_id)
            .order_by(db_models.Event.start_time.desc(), db_models.Event.id.desc())
            .all()
        )

    def delete_expired(self, now: datetime) -> int:
        """
        Delete every event whose end_time is strictly before now.

        Participants are deleted explicitly first: bulk deletes bypass ORM
        cascades, and SQLite does not enforce ON DELETE CASCADE unless
        foreign keys are switched on. Does not commit.

        Args:
            now: Cut-off as a naive UTC datetime

        Returns:
            Number of events deleted
        """
        expired_ids = [
            row[0]
            for row in self.db.query(db_models.Event.id)
            .filter(db_models.Event.end_time < now)
            .all()
        ]
        if not expired_ids:
            return 0

        self.db.query(db_models.EventParticipant).filter(
            db_models.EventParticipant.event_id.in_(expired_ids)
        ).delete(synchronize_session=False)
        deleted = (
            self.db.query(db_models.Event)
            .filter(db_models.Event.id.in_(expired_ids))
            .delete(synchronize_session=False)
        )
        # Drop stale identity-map entries for the removed rows
        self.db.expire_all()
        return deleted

    # Participants

    def count_participants(self, event_id: int) -> int:
        return (
            self.db.query(func.count(db_models.EventParticipant.id))
            .filter(db_models.EventParticipant.event_id == event_id)
            .scalar()
            or 0
        )

    def participant_counts(self, event_ids: List[int]) -> dict[int, int]:
        """
        Count participants for several events in one query.

        Args:
            event_ids: Events to count

        Returns:
            Mapping of event ID to participant count (missing means 0)
        """
        if not event_ids:
            return {}
        rows = (
            self.db.query(
                db_models.EventParticipant.event_id,
                func.count(db_models.EventParticipant.id),
            )
            .filter(db_models.EventParticipant.event_id.in_(event_ids))
            .group_by(db_models.EventParticipant.event_id)
            .all()
        )
        return {event_id: count for event_id, count in rows}

    def get_participant(
        self, event_id: int, user_id: int
    ) -> Optional[db_models.EventParticipant]:
        return (
            self.db.query(db_models.EventParticipant)
            .filter(
                db_models.EventParticipant.event_id == event_id,
                db_models.EventParticipant.user_id == user_id,
            )
            .first()
        )

    def add_participant(self, event_id: int, user_id: int) -> db_models.EventParticipant:
        """Stage a confirmed booking. The caller commits."""
        participant = db_models.EventParticipant(
            event_id=event_id,
            user_id=user_id,
            status=db_models.BookingStatus.CONFIRMED,
        )
        self.db.add(participant)
        return participant

    def add_participant_within_capacity(
        self, event_id: int, user_id: int, max_participants: int
    ) -> bool:
        """
        Insert a confirmed booking only while the event has a free seat.

        The seat count and the insert are a single INSERT ... SELECT, so the
        database evaluates the count under the same write lock that covers
        the new row. Does not commit.

        Args:
            event_id: Event ID
            user_id: Booking user's ID
            max_participants: Event capacity

        Returns:
            True if the row was inserted, False if the event is full
        """
        participants = db_models.EventParticipant.__table__
        booked = (
            select(func.count(participants.c.id))
            .where(participants.c.event_id == event_id)
            .scalar_subquery()
        )
        seat = select(
            literal(event_id),
            literal(user_id),
            literal(
                db_models.BookingStatus.CONFIRMED, type_=participants.c.status.type
            ),
        ).where(booked < max_participants)
        result = self.db.execute(
            insert(participants).from_select(
                ["event_id", "user_id", "status"], seat
            )
        )
        return result.rowcount == 1

    def delete_participant(self, event_id: int, user_id: int) -> int:
        """Delete a booking if present and commit. Returns rows removed."""
        deleted = (
            self.db.query(db_models.EventParticipant)
            .filter(
                db_models.EventParticipant.event_id == event_id,
                db_models.EventParticipant.user_id == user_id,
            )
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted
