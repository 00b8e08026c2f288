"""Main feed posts, reactions and comments."""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services.event_service import EventService
from services.post_service import PostService

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=List[schemas.Post])
async def get_feed(
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> List[schemas.Post]:
    """Main feed: pinned posts first, then newest."""
    user_id: int = current_user.id  # type: ignore[assignment]
    return PostService.get_feed(db, user_id)


@router.post("", response_model=schemas.Post, status_code=status.HTTP_201_CREATED)
async def create_post(
    post: schemas.PostCreate,
    current_user: db_models.User = Depends(auth.get_verified_user),
    db: Session = Depends(get_db),
) -> schemas.Post:
    """Publish a post to the main feed. Every other user is notified."""
    user_id: int = current_user.id  # type: ignore[assignment]
    return PostService.create_post(db, user_id, post)


@router.get("/{post_id}", response_model=schemas.Post)
async def get_post(
    post_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> schemas.Post:
    user_id: int = current_user.id  # type: ignore[assignment]
    return PostService.get_post(db, post_id, user_id)


@router.patch("/{post_id}", response_model=schemas.Post)
async def update_post(
    post_id: int,
    post_update: schemas.PostUpdate,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> schemas.Post:
    """
    Edit or pin a post. Author or admin only.

    Domain exceptions are caught by centralized exception handlers.
    """
    return PostService.update_post(db, post_id, current_user, post_update)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> Response:
    """Delete a post with its comments and reactions. Author or admin only."""
    PostService.delete_post(db, post_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{post_id}/reactions", response_model=schemas.ReactionToggleResult)
async def toggle_reaction(
    post_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> schemas.ReactionToggleResult:
    """Like a post, or remove the caller's like."""
    user_id: int = current_user.id  # type: ignore[assignment]
    return PostService.toggle_reaction(db, post_id, user_id)


@router.get("/{post_id}/comments", response_model=List[schemas.Comment])
async def get_comments(
    post_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> List[db_models.Comment]:
    """Comments on a post, oldest first."""
    return PostService.get_comments(db, post_id)


@router.post(
    "/{post_id}/comments",
    response_model=schemas.Comment,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    post_id: int,
    comment: schemas.CommentCreate,
    current_user: db_models.User = Depends(auth.get_verified_user),
    db: Session = Depends(get_db),
) -> db_models.Comment:
    user_id: int = current_user.id  # type: ignore[assignment]
    return PostService.create_comment(db, post_id, user_id, comment)


@router.post(
    "/{post_id}/convert-to-event",
    response_model=schemas.Event,
    status_code=status.HTTP_201_CREATED,
)
def convert_to_event(
    post_id: int,
    event: schemas.PostToEvent,
    current_user: db_models.User = Depends(auth.get_verified_user),
    db: Session = Depends(get_db),
) -> schemas.Event:
    """Open an event from a post; the caller hosts it."""
    user_id: int = current_user.id  # type: ignore[assignment]
    return EventService.convert_post_to_event(db, post_id, user_id, event)

