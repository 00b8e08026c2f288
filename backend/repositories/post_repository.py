"""
Post, comment and reaction repositories.
"""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

import repositories.db_models as db_models
from .base import BaseRepository


class PostRepository(BaseRepository[db_models.Post]):
    """Repository for Post entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Post, db)

    def get_with_author(self, post_id: int) -> Optional[db_models.Post]:
        return (
            self.db.query(db_models.Post)
            .options(joinedload(db_models.Post.author))
            .filter(db_models.Post.id == post_id)
            .first()
        )

    def get_feed(self, limit: int = 50) -> List[db_models.Post]:
        """
        Get the main feed: posts outside any group, pinned first, then newest.

        Args:
            limit: Maximum number of posts

        Returns:
            List of posts with authors loaded
        """
        return (
            self.db.query(db_models.Post)
            .options(joinedload(db_models.Post.author))
            .filter(db_models.Post.group_id.is_(None))
            .order_by(
                db_models.Post.pinned.desc(),
                db_models.Post.created_at.desc(),
                db_models.Post.id.desc(),
            )
            .limit(limit)
            .all()
        )

    def get_group_posts(self, group_id: int, limit: int = 50) -> List[db_models.Post]:
        return (
            self.db.query(db_models.Post)
            .options(joinedload(db_models.Post.author))
            .filter(db_models.Post.group_id == group_id)
            .order_by(db_models.Post.created_at.desc(), db_models.Post.id.desc())
            .limit(limit)
            .all()
        )

    def get_by_author(self, author_id: int, limit: int = 50) -> List[db_models.Post]:
        return (
            self.db.query(db_models.Post)
            .options(joinedload(db_models.Post.author))
            .filter(db_models.Post.author_id == author_id)
            .order_by(db_models.Post.created_at.desc(), db_models.Post.id.desc())
            .limit(limit)
            .all()
        )

    def count_for_group(self, group_id: int) -> int:
        return (
            self.db.query(db_models.Post)
            .filter(db_models.Post.group_id == group_id)
            .count()
        )


class CommentRepository(BaseRepository[db_models.Comment]):
    """Repository for Comment entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db_models.Comment, db)

    def get_for_post(self, post_id: int) -> List[db_models.Comment]:
        """Comments on a post, oldest first, with authors loaded."""
        return (
            self.db.query(db_models.Comment)
            .options(joinedload(db_models.Comment.author))
            .filter(db_models.Comment.post_id == post_id)
            .order_by(db_models.Comment.created_at.asc(), db_models.Comment.id.asc())
            .all()
        )

    def counts_for_posts(self, post_ids: List[int]) -> dict[int, int]:
        if not post_ids:
            return {}
        rows = (
            self.db.query(db_models.Comment.post_id, func.count(db_models.Comment.id))
            .filter(db_models.Comment.post_id.in_(post_ids))
            .group_by(db_models.Comment.post_id)
            .all()
        )
        return {post_id: count for post_id, count in rows}


class ReactionRepository(BaseRepository[db_models.Reaction]):
    """Repository for Reaction (like) rows."""

    def __init__(self, db: Session):
        super().__init__(db_models.Reaction, db)

    def get_by_post_and_user(
        self, post_id: int, user_id: int
    ) -> Optional[db_models.Reaction]:
        return (
            self.db.query(db_models.Reaction)
            .filter(
                db_models.Reaction.post_id == post_id,
                db_models.Reaction.user_id == user_id,
            )
            .first()
        )

    def count_for_post(self, post_id: int) -> int:
        return (
            self.db.query(db_models.Reaction)
            .filter(db_models.Reaction.post_id == post_id)
            .count()
        )

    def counts_for_posts(self, post_ids: List[int]) -> dict[int, int]:
        if not post_ids:
            return {}
        rows = (
            self.db.query(
                db_models.Reaction.post_id, func.count(db_models.Reaction.id)
            )
            .filter(db_models.Reaction.post_id.in_(post_ids))
            .group_by(db_models.Reaction.post_id)
            .all()
        )
        return {post_id: count for post_id, count in rows}

    def post_ids_reacted_by(self, user_id: int, post_ids: List[int]) -> set[int]:
        """Subset of post_ids the user has reacted to."""
        if not post_ids:
            return set()
        rows = (
            self.db.query(db_models.Reaction.post_id)
            .filter(
                db_models.Reaction.user_id == user_id,
                db_models.Reaction.post_id.in_(post_ids),
            )
            .all()
        )
        return {row[0] for row in rows}
