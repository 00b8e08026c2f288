"""
Event (tutoring session) lifecycle: creation, expiry sweep, booking, cancellation.

Rules enforced here:
- start_time < end_time for every stored event.
- At most one booking per (event, user); the unique constraint backs this.
- Participant count never exceeds max_participants (null = unlimited).
- A host cannot book their own event.
- An event whose end_time has passed is deleted, with its bookings, before
  any listing is read.
"""

from datetime import datetime
from typing import List, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.time_utils import ensure_utc, to_db_datetime, utc_now
from models.exceptions import (
    AlreadyBookedException,
    CannotBookOwnEventException,
    DomainException,
    EventFullException,
    EventNotFoundException,
    InvalidEventWindowException,
    NotEventHostException,
    PostNotFoundException,
)
from repositories.event_repository import EventRepository
from repositories.post_repository import PostRepository
from services.notification_service import NotificationService


class EventService:
    """Service for event and booking business logic."""

    @staticmethod
    def _to_schema(event: db_models.Event, participant_count: int) -> schemas.Event:
        is_full = (
            event.max_participants is not None
            and participant_count >= event.max_participants
        )
        return schemas.Event.model_validate(event).model_copy(
            update={"participant_count": participant_count, "is_full": is_full}
        )

    @staticmethod
    def _to_schemas(db: Session, events: List[db_models.Event]) -> List[schemas.Event]:
        counts = EventRepository(db).participant_counts([e.id for e in events])
        return [EventService._to_schema(e, counts.get(e.id, 0)) for e in events]

    @staticmethod
    def reap_expired_events(db: Session, now: Optional[datetime] = None) -> int:
        """
        Delete every event whose end_time is strictly before now.

        Bookings of those events are deleted with them. Safe to call
        concurrently: a second sweep simply finds nothing left.

        Args:
            db: Database session
            now: Reference time (defaults to the current UTC time)

        Returns:
            Number of events deleted
        """
        cutoff = to_db_datetime(now or utc_now())
        event_repo = EventRepository(db)
        removed = event_repo.delete_expired(cutoff)
        event_repo.commit()
        if removed:
            logger.info(f"Reaped {removed} expired event(s) (cutoff {cutoff.isoformat()})")
        return removed

    @staticmethod
    def list_events(db: Session, now: Optional[datetime] = None) -> List[schemas.Event]:
        """
        Get every live event, latest start first.

        Expired events are swept before reading.

        Args:
            db: Database session
            now: Reference time for the sweep

        Returns:
            List of events with host, participant_count and is_full
        """
        EventService.reap_expired_events(db, now)
        return EventService._to_schemas(db, EventRepository(db).list_all())

    @staticmethod
    def list_hosted_events(
        db: Session, host_id: int, now: Optional[datetime] = None
    ) -> List[schemas.Event]:
        """Live events hosted by host_id, after a sweep."""
        EventService.reap_expired_events(db, now)
        return EventService._to_schemas(db, EventRepository(db).list_by_host(host_id))

    @staticmethod
    def list_booked_events(
        db: Session, user_id: int, now: Optional[datetime] = None
    ) -> List[schemas.Event]:
        """Live events user_id holds a booking for, after a sweep."""
        EventService.reap_expired_events(db, now)
        return EventService._to_schemas(
            db, EventRepository(db).list_booked_by(user_id)
        )

    @staticmethod
    def get_event(db: Session, event_id: int) -> schemas.Event:
        """
        Get a single event.

        Raises:
            EventNotFoundException: If the event does not exist
        """
        event_repo = EventRepository(db)
        event = event_repo.get_with_host(event_id)
        if event is None:
            raise EventNotFoundException()
        return EventService._to_schema(event, event_repo.count_participants(event_id))

    @staticmethod
    def create_event(
        db: Session, host_id: int, data: schemas.EventCreate
    ) -> schemas.Event:
        """
        Create an event hosted by the caller and announce it.

        Args:
            db: Database session
            host_id: Caller's user ID (always the host)
            data: Event fields

        Returns:
            The created event

        Raises:
            InvalidEventWindowException: If start_time is not before end_time
        """
        start_time = ensure_utc(data.start_time)
        end_time = ensure_utc(data.end_time)
        if start_time >= end_time:
            raise InvalidEventWindowException()

        event = EventRepository(db).create(
            db_models.Event(
                title=data.title,
                description=data.description,
                host_id=host_id,
                subject=data.subject,
                start_time=to_db_datetime(start_time),
                end_time=to_db_datetime(end_time),
                location_url=data.location_url,
                image_url=data.image_url,
                max_participants=data.max_participants,
            )
        )
        logger.info(
            f"Event {event.id} created by user {host_id} "
            f"(capacity {event.max_participants or 'unlimited'})"
        )

        NotificationService.notify_new_event(db, event)
        return EventService._to_schema(event, 0)

    @staticmethod
    def delete_event(db: Session, event_id: int, user_id: int) -> None:
        """
        Delete an event and its bookings.

        Raises:
            EventNotFoundException: If the event does not exist
            NotEventHostException: If the caller is not the host
        """
        event_repo = EventRepository(db)
        event = event_repo.get_by_id(event_id)
        if event is None:
            raise EventNotFoundException()
        if event.host_id != user_id:
            raise NotEventHostException()
        event_repo.delete(event)
        logger.info(f"Event {event_id} deleted by host {user_id}")

    @staticmethod
    def book_event(
        db: Session, event_id: int, user_id: int, now: Optional[datetime] = None
    ) -> int:
        """
        Book one seat for the caller.

        The event row is locked for the duration of the transaction and the
        capacity check runs inside the INSERT itself, so two bookings of the
        last seat cannot both succeed. A duplicate that slips past the check
        is caught by the (event_id, user_id) unique constraint.

        Args:
            db: Database session
            event_id: Event ID
            user_id: Caller's user ID
            now: Reference time; an event already past its end is treated
                as gone

        Returns:
            Participant count after the booking

        Raises:
            EventNotFoundException: If the event does not exist or has ended
            CannotBookOwnEventException: If the caller hosts the event
            AlreadyBookedException: If the caller already holds a booking
            EventFullException: If the event is at capacity
        """
        event_repo = EventRepository(db)
        try:
            event = event_repo.get_for_update(event_id)
            if event is None:
                raise EventNotFoundException()
            if ensure_utc(event.end_time) < ensure_utc(now or utc_now()):
                raise EventNotFoundException()
            if event.host_id == user_id:
                raise CannotBookOwnEventException()
            if event_repo.get_participant(event_id, user_id) is not None:
                raise AlreadyBookedException()

            if event.max_participants is None:
                event_repo.add_participant(event_id, user_id)
            elif not event_repo.add_participant_within_capacity(
                event_id, user_id, event.max_participants
            ):
                raise EventFullException()
            event_repo.commit()
        except DomainException:
            # Release the row lock before surfacing the rejection
            event_repo.rollback()
            raise
        except IntegrityError:
            event_repo.rollback()
            raise AlreadyBookedException()

        count = event_repo.count_participants(event_id)
        logger.info(f"User {user_id} booked event {event_id} ({count} booked)")
        return count

    @staticmethod
    def cancel_booking(db: Session, event_id: int, user_id: int) -> None:
        """
        Remove the caller's booking if there is one.

        Never fails: a missing booking or a missing event is a no-op.
        """
        removed = EventRepository(db).delete_participant(event_id, user_id)
        if removed:
            logger.info(f"User {user_id} cancelled booking for event {event_id}")

    @staticmethod
    def convert_post_to_event(
        db: Session, post_id: int, host_id: int, data: schemas.PostToEvent
    ) -> schemas.Event:
        """
        Open an event from an existing post.

        The post content is used as the description unless one is supplied.
        Creation goes through create_event, so window validation and the
        fan-out apply as usual.

        Raises:
            PostNotFoundException: If the post does not exist
            InvalidEventWindowException: If start_time is not before end_time
        """
        post = PostRepository(db).get_by_id(post_id)
        if post is None:
            raise PostNotFoundException()

        event_data = schemas.EventCreate(
            title=data.title,
            description=data.description or post.content,
            subject=data.subject,
            start_time=data.start_time,
            end_time=data.end_time,
            location_url=data.location_url,
            image_url=data.image_url,
            max_participants=data.max_participants,
        )
        return EventService.create_event(db, host_id, event_data)
