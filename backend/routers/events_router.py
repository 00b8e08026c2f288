"""
Tutoring event (asesoría) endpoints.

Every listing sweeps expired events first, so clients never see an event
whose end time has passed.
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services.event_service import EventService

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=List[schemas.Event])
def list_events(
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> List[schemas.Event]:
    """All live events, latest start first."""
    return EventService.list_events(db)


@router.get("/my", response_model=List[schemas.Event])
def list_my_events(
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> List[schemas.Event]:
    """Live events hosted by the caller."""
    user_id: int = current_user.id  # type: ignore[assignment]
    return EventService.list_hosted_events(db, user_id)


@router.get("/booked", response_model=List[schemas.Event])
def list_booked_events(
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> List[schemas.Event]:
    """Live events the caller has booked."""
    user_id: int = current_user.id  # type: ignore[assignment]
    return EventService.list_booked_events(db, user_id)


@router.get("/{event_id}", response_model=schemas.Event)
def get_event(
    event_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> schemas.Event:
    """Single event with participant count."""
    return EventService.get_event(db, event_id)


@router.post("", response_model=schemas.Event, status_code=status.HTTP_201_CREATED)
def create_event(
    event: schemas.EventCreate,
    current_user: db_models.User = Depends(auth.get_verified_user),
    db: Session = Depends(get_db),
) -> schemas.Event:
    """
    Open a new event hosted by the caller. Every other user is notified.

    Domain exceptions are caught by centralized exception handlers.
    """
    user_id: int = current_user.id  # type: ignore[assignment]
    return EventService.create_event(db, user_id, event)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> Response:
    """Delete an event and its bookings. Host only."""
    user_id: int = current_user.id  # type: ignore[assignment]
    EventService.delete_event(db, event_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{event_id}/book", response_model=schemas.BookingResult)
def book_event(
    event_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> schemas.BookingResult:
    """
    Book a seat.

    409 when already booked or full, 400 for the host.
    """
    user_id: int = current_user.id  # type: ignore[assignment]
    participant_count = EventService.book_event(db, event_id, user_id)
    return schemas.BookingResult(success=True, participant_count=participant_count)


@router.delete("/{event_id}/book", response_model=schemas.CancelBookingResult)
def cancel_booking(
    event_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> schemas.CancelBookingResult:
    """Cancel the caller's booking. Always succeeds."""
    user_id: int = current_user.id  # type: ignore[assignment]
    EventService.cancel_booking(db, event_id, user_id)
    return schemas.CancelBookingResult(success=True)
