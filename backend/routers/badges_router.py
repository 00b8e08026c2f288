"""Badge catalogue and public recognitions."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services.badge_service import BadgeService, RecognitionService

router = APIRouter(prefix="/badges", tags=["badges"])

recognitions_router = APIRouter(prefix="/recognitions", tags=["recognitions"])


@router.get("", response_model=List[schemas.Badge])
async def list_badges(
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> List[db_models.Badge]:
    return BadgeService.list_badges(db)


@router.post("", response_model=schemas.Badge, status_code=status.HTTP_201_CREATED)
async def create_badge(
    badge: schemas.BadgeCreate,
    current_user: db_models.User = Depends(auth.get_moderator_user),
    db: Session = Depends(get_db),
) -> db_models.Badge:
    """Add a badge to the catalogue. Teachers and admins only."""
    return BadgeService.create_badge(db, badge)


@recognitions_router.get("", response_model=List[schemas.Recognition])
async def list_recognitions(db: Session = Depends(get_db)) -> List[db_models.Recognition]:
    """Latest recognitions. Public, shown on the landing page."""
    return RecognitionService.list_recognitions(db)


@recognitions_router.post(
    "", response_model=schemas.Recognition, status_code=status.HTTP_201_CREATED
)
async def create_recognition(
    recognition: schemas.RecognitionCreate,
    current_user: db_models.User = Depends(auth.get_verified_user),
    db: Session = Depends(get_db),
) -> db_models.Recognition:
    """
    Publicly recognise another member.

    Domain exceptions are caught by centralized exception handlers.
    """
    user_id: int = current_user.id  # type: ignore[assignment]
    return RecognitionService.create_recognition(db, user_id, recognition)
