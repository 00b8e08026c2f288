"""Groups (courses and clubs): membership, forum and chat."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from repositories.database import get_db
from services.group_service import GroupService

router = APIRouter(prefix="/groups", tags=["groups"])


@router.get("", response_model=List[schemas.Group])
async def list_groups(
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> List[schemas.Group]:
    return GroupService.list_groups(db)


@router.get("/my", response_model=List[schemas.Group])
async def list_my_groups(
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> List[schemas.Group]:
    """Groups the caller belongs to."""
    user_id: int = current_user.id  # type: ignore[assignment]
    return GroupService.list_user_groups(db, user_id)


@router.post("", response_model=schemas.Group, status_code=status.HTTP_201_CREATED)
async def create_group(
    group: schemas.GroupCreate,
    current_user: db_models.User = Depends(auth.get_verified_user),
    db: Session = Depends(get_db),
) -> schemas.Group:
    """Create a course or club. The caller becomes its group admin."""
    user_id: int = current_user.id  # type: ignore[assignment]
    return GroupService.create_group(db, user_id, group)


@router.get("/{group_id}", response_model=schemas.Group)
async def get_group(
    group_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> schemas.Group:
    return GroupService.get_group(db, group_id)


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_group(
    group_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> Response:
    """Delete a group with its forum and chat. Creator or admin only."""
    GroupService.delete_group(db, group_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{group_id}/join")
async def join_group(
    group_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict[str, str]:
    """
    Join a group. 409 if already a member.

    Domain exceptions are caught by centralized exception handlers.
    """
    user_id: int = current_user.id  # type: ignore[assignment]
    GroupService.join_group(db, group_id, user_id)
    return {"message": "Joined group"}


@router.post("/{group_id}/leave")
async def leave_group(
    group_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> dict[str, str]:
    """Leave a group. Always succeeds."""
    user_id: int = current_user.id  # type: ignore[assignment]
    GroupService.leave_group(db, group_id, user_id)
    return {"message": "Left group"}


@router.get("/{group_id}/members", response_model=List[schemas.GroupMember])
async def list_members(
    group_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> List[db_models.GroupMember]:
    return GroupService.list_members(db, group_id)


@router.get("/{group_id}/posts", response_model=List[schemas.Post])
async def get_group_posts(
    group_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> List[schemas.Post]:
    """Forum posts of a group. Members only."""
    user_id: int = current_user.id  # type: ignore[assignment]
    return GroupService.get_group_posts(db, group_id, user_id)


@router.post(
    "/{group_id}/posts",
    response_model=schemas.Post,
    status_code=status.HTTP_201_CREATED,
)
async def create_group_post(
    group_id: int,
    post: schemas.PostCreate,
    current_user: db_models.User = Depends(auth.get_verified_user),
    db: Session = Depends(get_db),
) -> schemas.Post:
    """Post in a group forum. Members only."""
    user_id: int = current_user.id  # type: ignore[assignment]
    return GroupService.create_group_post(db, group_id, user_id, post)


@router.get("/{group_id}/messages", response_model=List[schemas.Message])
async def get_messages(
    group_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> List[db_models.Message]:
    """Latest chat messages, oldest first. Members only."""
    user_id: int = current_user.id  # type: ignore[assignment]
    return GroupService.get_messages(db, group_id, user_id)


@router.post(
    "/{group_id}/messages",
    response_model=schemas.Message,
    status_code=status.HTTP_201_CREATED,
)
def send_message(
    group_id: int,
    content: str = Form(default=""),
    media: Optional[UploadFile] = File(default=None),
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> db_models.Message:
    """
    Send a chat message with optional voice note, image or document.

    The other members are notified. Members only.
    """
    user_id: int = current_user.id  # type: ignore[assignment]
    return GroupService.send_message(db, group_id, user_id, content, media)


@router.delete(
    "/{group_id}/messages/{message_id}", status_code=status.HTTP_204_NO_CONTENT
)
async def delete_message(
    group_id: int,
    message_id: int,
    current_user: db_models.User = Depends(auth.get_moderator_user),
    db: Session = Depends(get_db),
) -> Response:
    """Remove a chat message. Teachers and admins only."""
    GroupService.delete_message(db, group_id, message_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
