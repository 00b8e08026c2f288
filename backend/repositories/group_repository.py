"""
Group, membership and group chat repositories.
"""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

import repositories.db_models as db_models
from .base import BaseRepository


class GroupRepository(BaseRepository[db_models.Group]):
    """Repository for Group and GroupMember rows."""

    def __init__(self, db: Session):
        super().__init__(db_models.Group, db)

    def list_groups(self) -> List[db_models.Group]:
        return self.db.query(db_models.Group).order_by(db_models.Group.name).all()

    def list_for_user(self, user_id: int) -> List[db_models.Group]:
        """Groups the user belongs to, by name."""
        return (
            self.db.query(db_models.Group)
            .join(
                db_models.GroupMember,
                db_models.GroupMember.group_id == db_models.Group.id,
            )
            .filter(db_models.GroupMember.user_id == user_id)
            .order_by(db_models.Group.name)
            .all()
        )

    def get_member(
        self, group_id: int, user_id: int
    ) -> Optional[db_models.GroupMember]:
        return (
            self.db.query(db_models.GroupMember)
            .filter(
                db_models.GroupMember.group_id == group_id,
                db_models.GroupMember.user_id == user_id,
            )
            .first()
        )

    def is_member(self, group_id: int, user_id: int) -> bool:
        return self.get_member(group_id, user_id) is not None

    def list_members(self, group_id: int) -> List[db_models.GroupMember]:
        return (
            self.db.query(db_models.GroupMember)
            .options(joinedload(db_models.GroupMember.user))
            .filter(db_models.GroupMember.group_id == group_id)
            .order_by(db_models.GroupMember.joined_at.asc(), db_models.GroupMember.id)
            .all()
        )

    def member_ids_except(self, group_id: int, excluded_user_id: int) -> List[int]:
        """
        Get the IDs of a group's members, leaving one user out.

        Args:
            group_id: Group ID
            excluded_user_id: User to leave out (usually the sender)

        Returns:
            List of user IDs
        """
        rows = (
            self.db.query(db_models.GroupMember.user_id)
            .filter(
                db_models.GroupMember.group_id == group_id,
                db_models.GroupMember.user_id != excluded_user_id,
            )
            .order_by(db_models.GroupMember.user_id)
            .all()
        )
        return [row[0] for row in rows]

    def member_counts(self, group_ids: List[int]) -> dict[int, int]:
        if not group_ids:
            return {}
        rows = (
            self.db.query(
                db_models.GroupMember.group_id, func.count(db_models.GroupMember.id)
            )
            .filter(db_models.GroupMember.group_id.in_(group_ids))
            .group_by(db_models.GroupMember.group_id)
            .all()
        )
        return {group_id: count for group_id, count in rows}

    def post_counts(self, group_ids: List[int]) -> dict[int, int]:
        if not group_ids:
            return {}
        rows = (
            self.db.query(db_models.Post.group_id, func.count(db_models.Post.id))
            .filter(db_models.Post.group_id.in_(group_ids))
            .group_by(db_models.Post.group_id)
            .all()
        )
        return {group_id: count for group_id, count in rows}

    def add_member(
        self,
        group_id: int,
        user_id: int,
        role: db_models.GroupMemberRole = db_models.GroupMemberRole.MEMBER,
    ) -> db_models.GroupMember:
        """Stage a membership. The caller commits."""
        member = db_models.GroupMember(group_id=group_id, user_id=user_id, role=role)
        self.db.add(member)
        return member


class MessageRepository(BaseRepository[db_models.Message]):
    """Repository for group chat messages."""

    def __init__(self, db: Session):
        super().__init__(db_models.Message, db)

    def list_for_group(self, group_id: int, limit: int = 100) -> List[db_models.Message]:
        """
        Get the latest messages of a group, returned oldest first.

        Args:
            group_id: Group ID
            limit: Maximum number of messages

        Returns:
            List of messages with senders loaded
        """
        latest = (
            self.db.query(db_models.Message)
            .options(joinedload(db_models.Message.sender))
            .filter(db_models.Message.group_id == group_id)
            .order_by(db_models.Message.created_at.desc(), db_models.Message.id.desc())
            .limit(limit)
            .all()
        )
        return list(reversed(latest))

    def get_in_group(
        self, group_id: int, message_id: int
    ) -> Optional[db_models.Message]:
        return (
            self.db.query(db_models.Message)
            .filter(
                db_models.Message.id == message_id,
                db_models.Message.group_id == group_id,
            )
            .first()
        )
