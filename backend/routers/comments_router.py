"""Comment endpoints that are not nested under a post."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

import authentication.auth as auth
import repositories.db_models as db_models
from repositories.database import get_db
from services.post_service import PostService

router = APIRouter(prefix="/comments", tags=["comments"])


@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    comment_id: int,
    current_user: db_models.User = Depends(auth.get_current_active_user),
    db: Session = Depends(get_db),
) -> Response:
    """
    Delete a comment. Author or admin only.

    Domain exceptions are caught by centralized exception handlers.
    """
    PostService.delete_comment(db, comment_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
