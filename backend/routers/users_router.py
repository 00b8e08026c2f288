"""User directory and profile endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import PaginationLimitLarge, PaginationSkip
from repositories.database import get_db
from services.badge_service import BadgeService
from services.file_service import FileService
from services.post_service import PostService
from services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[schemas.User])
async def list_users(
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 100,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> List[db_models.User]:
    """List community members."""
    return UserService.list_users(db, skip, limit)


@router.patch("/me", response_model=schemas.User)
async def update_me(
    profile_update: schemas.UserProfileUpdate,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> db_models.User:
    """Update the caller's profile (name, grade, bio, interests, picture)."""
    user_id: int = current_user.id  # type: ignore[assignment]
    return UserService.update_profile(db, user_id, profile_update)


@router.get("/{user_id}", response_model=schemas.User)
async def get_user(
    user_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> db_models.User:
    """Get a user's profile."""
    return UserService.get_user(db, user_id)


@router.get("/{user_id}/posts", response_model=List[schemas.Post])
async def get_user_posts(
    user_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> List[schemas.Post]:
    """Posts written by a user, newest first."""
    viewer_id: int = current_user.id  # type: ignore[assignment]
    return PostService.get_user_posts(db, user_id, viewer_id)


@router.get("/{user_id}/files", response_model=List[schemas.LibraryFile])
async def get_user_files(
    user_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> List[db_models.LibraryFile]:
    """Approved library files uploaded by a user."""
    UserService.get_user(db, user_id)
    return FileService.list_user_files(db, user_id)


@router.get("/{user_id}/badges", response_model=List[schemas.UserBadge])
async def get_user_badges(
    user_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> List[db_models.UserBadge]:
    """Badges a user has earned, most recent first."""
    return BadgeService.list_user_badges(db, user_id)


@router.post(
    "/{user_id}/badges/{badge_id}",
    response_model=schemas.UserBadge,
    status_code=status.HTTP_201_CREATED,
)
async def assign_badge(
    user_id: int,
    badge_id: int,
    current_user: db_models.User = Depends(auth.get_moderator_user),
    db: Session = Depends(get_db),
) -> db_models.UserBadge:
    """
    Award a badge to a user. Teachers and admins only.

    Domain exceptions are caught by centralized exception handlers.
    """
    return BadgeService.assign_badge(db, user_id, badge_id)
