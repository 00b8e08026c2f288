"""
Post service: main feed, group forums, reactions and comments.
"""

from typing import List, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_plain_text, sanitize_url
from models.config import settings
from models.exceptions import (
    CommentNotFoundException,
    NotContentOwnerException,
    PostNotFoundException,
    UserNotFoundException,
    ValidationException,
)
from repositories.post_repository import (
    CommentRepository,
    PostRepository,
    ReactionRepository,
)
from repositories.user_repository import UserRepository
from services.notification_service import NotificationService


def _can_modify(user: db_models.User, author_id: int) -> bool:
    return user.is_admin or user.id == author_id


class PostService:
    """Service for post-related business logic."""

    @staticmethod
    def _to_schemas(
        db: Session, posts: List[db_models.Post], viewer_id: Optional[int]
    ) -> List[schemas.Post]:
        """Attach comment/reaction counts and the viewer's reaction flag."""
        post_ids = [p.id for p in posts]
        comment_counts = CommentRepository(db).counts_for_posts(post_ids)
        reaction_repo = ReactionRepository(db)
        reaction_counts = reaction_repo.counts_for_posts(post_ids)
        reacted = (
            reaction_repo.post_ids_reacted_by(viewer_id, post_ids)
            if viewer_id is not None
            else set()
        )
        return [
            schemas.Post.model_validate(post).model_copy(
                update={
                    "comment_count": comment_counts.get(post.id, 0),
                    "reaction_count": reaction_counts.get(post.id, 0),
                    "user_has_reacted": post.id in reacted,
                }
            )
            for post in posts
        ]

    @staticmethod
    def get_feed(db: Session, viewer_id: Optional[int] = None) -> List[schemas.Post]:
        """
        Get the main feed.

        Only posts outside groups, pinned first then newest, capped at
        settings.FEED_LIMIT.
        """
        posts = PostRepository(db).get_feed(settings.FEED_LIMIT)
        return PostService._to_schemas(db, posts, viewer_id)

    @staticmethod
    def get_post(db: Session, post_id: int, viewer_id: Optional[int] = None) -> schemas.Post:
        post = PostRepository(db).get_with_author(post_id)
        if post is None:
            raise PostNotFoundException()
        return PostService._to_schemas(db, [post], viewer_id)[0]

    @staticmethod
    def get_user_posts(
        db: Session, user_id: int, viewer_id: Optional[int] = None
    ) -> List[schemas.Post]:
        if not UserRepository(db).exists(user_id):
            raise UserNotFoundException()
        posts = PostRepository(db).get_by_author(user_id, settings.FEED_LIMIT)
        return PostService._to_schemas(db, posts, viewer_id)

    @staticmethod
    def get_group_posts(
        db: Session, group_id: int, viewer_id: Optional[int] = None
    ) -> List[schemas.Post]:
        posts = PostRepository(db).get_group_posts(group_id, settings.FEED_LIMIT)
        return PostService._to_schemas(db, posts, viewer_id)

    @staticmethod
    def create_post(
        db: Session,
        author_id: int,
        data: schemas.PostCreate,
        group_id: Optional[int] = None,
    ) -> schemas.Post:
        """
        Create a post. Main-feed posts are announced to every other user.

        Args:
            db: Database session
            author_id: Caller's user ID
            data: Post content and media links
            group_id: Group forum to post in, or None for the main feed

        Returns:
            The created post

        Raises:
            ValidationException: If the content is empty after sanitisation
        """
        content = sanitize_plain_text(data.content)
        if not content:
            raise ValidationException("Post content cannot be empty")
        media = [url for url in (sanitize_url(m) for m in data.media) if url]

        post = PostRepository(db).create(
            db_models.Post(
                author_id=author_id,
                group_id=group_id,
                content=content,
                media=media,
                pinned=False,
            )
        )
        logger.info(
            f"Post {post.id} created by user {author_id}"
            + (f" in group {group_id}" if group_id is not None else "")
        )

        NotificationService.notify_new_post(db, post)
        return PostService.get_post(db, post.id, author_id)

    @staticmethod
    def update_post(
        db: Session, post_id: int, user: db_models.User, data: schemas.PostUpdate
    ) -> schemas.Post:
        """
        Edit a post's content or pinned flag.

        Raises:
            PostNotFoundException: If the post does not exist
            NotContentOwnerException: If the caller is neither author nor admin
        """
        post_repo = PostRepository(db)
        post = post_repo.get_by_id(post_id)
        if post is None:
            raise PostNotFoundException()
        if not _can_modify(user, post.author_id):
            raise NotContentOwnerException()

        if data.content is not None:
            content = sanitize_plain_text(data.content)
            if not content:
                raise ValidationException("Post content cannot be empty")
            post.content = content
        if data.pinned is not None:
            post.pinned = data.pinned
        post_repo.update(post)
        return PostService.get_post(db, post_id, user.id)

    @staticmethod
    def delete_post(db: Session, post_id: int, user: db_models.User) -> None:
        """Delete a post with its comments and reactions (author or admin)."""
        post_repo = PostRepository(db)
        post = post_repo.get_by_id(post_id)
        if post is None:
            raise PostNotFoundException()
        if not _can_modify(user, post.author_id):
            raise NotContentOwnerException()
        post_repo.delete(post)
        logger.info(f"Post {post_id} deleted by user {user.id}")

    @staticmethod
    def toggle_reaction(
        db: Session, post_id: int, user_id: int
    ) -> schemas.ReactionToggleResult:
        """
        Like the post, or remove the like if the caller already gave one.

        Returns:
            Whether the caller now reacts, and the post's reaction count
        """
        if not PostRepository(db).exists(post_id):
            raise PostNotFoundException()

        reaction_repo = ReactionRepository(db)
        existing = reaction_repo.get_by_post_and_user(post_id, user_id)
        if existing is not None:
            reaction_repo.delete(existing)
            reacted = False
        else:
            try:
                reaction_repo.create(db_models.Reaction(post_id=post_id, user_id=user_id))
            except IntegrityError:
                # Concurrent double-click: the other request already liked it
                reaction_repo.rollback()
            reacted = True

        return schemas.ReactionToggleResult(
            reacted=reacted, reaction_count=reaction_repo.count_for_post(post_id)
        )

    # =========================================================================
    # Comments
    # =========================================================================

    @staticmethod
    def get_comments(db: Session, post_id: int) -> List[db_models.Comment]:
        if not PostRepository(db).exists(post_id):
            raise PostNotFoundException()
        return CommentRepository(db).get_for_post(post_id)

    @staticmethod
    def create_comment(
        db: Session, post_id: int, author_id: int, data: schemas.CommentCreate
    ) -> db_models.Comment:
        """
        Comment on a post.

        Raises:
            PostNotFoundException: If the post does not exist
            ValidationException: If the content is empty after sanitisation
        """
        if not PostRepository(db).exists(post_id):
            raise PostNotFoundException()
        content = sanitize_plain_text(data.content)
        if not content:
            raise ValidationException("Comment cannot be empty")
        comment = CommentRepository(db).create(
            db_models.Comment(post_id=post_id, author_id=author_id, content=content)
        )
        logger.info(f"Comment {comment.id} added to post {post_id} by user {author_id}")
        return comment

    @staticmethod
    def delete_comment(db: Session, comment_id: int, user: db_models.User) -> None:
        comment_repo = CommentRepository(db)
        comment = comment_repo.get_by_id(comment_id)
        if comment is None:
            raise CommentNotFoundException()
        if not _can_modify(user, comment.author_id):
            raise NotContentOwnerException()
        comment_repo.delete(comment)
        logger.info(f"Comment {comment_id} deleted by user {user.id}")
