"""
In-app notification endpoints.

Notifications are only ever created by the server-side fan-out; clients can
read them and mark them read.
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import PaginationSkip
from models.config import settings
from repositories.database import get_db
from services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=List[schemas.Notification])
async def list_notifications(
    skip: PaginationSkip = 0,
    limit: int = Query(default=settings.NOTIFICATIONS_LIMIT, ge=1, le=200),
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> List[db_models.Notification]:
    """The caller's notifications, newest first."""
    user_id: int = current_user.id  # type: ignore[assignment]
    return NotificationService.list_notifications(db, user_id, skip, limit)


@router.get("/unread-count", response_model=schemas.UnreadCount)
async def unread_count(
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> schemas.UnreadCount:
    user_id: int = current_user.id  # type: ignore[assignment]
    return schemas.UnreadCount(count=NotificationService.count_unread(db, user_id))


@router.post("/read-all")
async def mark_all_read(
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict[str, int]:
    """Mark every notification of the caller as read."""
    user_id: int = current_user.id  # type: ignore[assignment]
    return {"updated": NotificationService.mark_all_read(db, user_id)}


@router.get("/preferences", response_model=schemas.NotificationPreferences)
async def get_preferences(
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> db_models.NotificationPreference:
    user_id: int = current_user.id  # type: ignore[assignment]
    return NotificationService.get_preferences(db, user_id)


@router.patch("/preferences", response_model=schemas.NotificationPreferences)
async def update_preferences(
    preferences: schemas.NotificationPreferencesUpdate,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> db_models.NotificationPreference:
    """Change some of the caller's notification toggles."""
    user_id: int = current_user.id  # type: ignore[assignment]
    return NotificationService.update_preferences(db, user_id, preferences)


@router.post("/{notification_id}/read", response_model=schemas.Notification)
async def mark_read(
    notification_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> db_models.Notification:
    """
    Mark one of the caller's notifications as read. Idempotent.

    Domain exceptions are caught by centralized exception handlers.
    """
    user_id: int = current_user.id  # type: ignore[assignment]
    return NotificationService.mark_read(db, notification_id, user_id)
