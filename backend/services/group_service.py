"""
Group service: courses and clubs, membership, forum posts and chat.
"""

from typing import List, Optional

from fastapi import UploadFile
from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_plain_text, sanitize_url
from models.config import settings
from models.exceptions import (
    AlreadyGroupMemberException,
    GroupNotFoundException,
    InsufficientPermissionsException,
    MessageNotFoundException,
    NotGroupMemberException,
    ValidationException,
)
from repositories.group_repository import GroupRepository, MessageRepository
from services.file_service import MEDIA_SUBDIR, FileService, file_extension
from services.notification_service import NotificationService
from services.post_service import PostService

# Chat attachments: extension -> media_type shown by the client
MESSAGE_MEDIA_TYPES = {
    "mp3": "voice",
    "wav": "voice",
    "m4a": "voice",
    "ogg": "voice",
    "webm": "voice",
    "jpg": "image",
    "jpeg": "image",
    "png": "image",
    "gif": "image",
    "pdf": "document",
    "doc": "document",
    "docx": "document",
}


class GroupService:
    """Service for group-related business logic."""

    @staticmethod
    def _to_schemas(db: Session, groups: List[db_models.Group]) -> List[schemas.Group]:
        group_repo = GroupRepository(db)
        group_ids = [g.id for g in groups]
        member_counts = group_repo.member_counts(group_ids)
        post_counts = group_repo.post_counts(group_ids)
        return [
            schemas.Group.model_validate(group).model_copy(
                update={
                    "member_count": member_counts.get(group.id, 0),
                    "post_count": post_counts.get(group.id, 0),
                }
            )
            for group in groups
        ]

    @staticmethod
    def _get_or_404(db: Session, group_id: int) -> db_models.Group:
        group = GroupRepository(db).get_by_id(group_id)
        if group is None:
            raise GroupNotFoundException()
        return group

    @staticmethod
    def _require_member(db: Session, group_id: int, user_id: int) -> None:
        GroupService._get_or_404(db, group_id)
        if not GroupRepository(db).is_member(group_id, user_id):
            raise NotGroupMemberException()

    @staticmethod
    def list_groups(db: Session) -> List[schemas.Group]:
        return GroupService._to_schemas(db, GroupRepository(db).list_groups())

    @staticmethod
    def list_user_groups(db: Session, user_id: int) -> List[schemas.Group]:
        return GroupService._to_schemas(db, GroupRepository(db).list_for_user(user_id))

    @staticmethod
    def get_group(db: Session, group_id: int) -> schemas.Group:
        return GroupService._to_schemas(db, [GroupService._get_or_404(db, group_id)])[0]

    @staticmethod
    def create_group(
        db: Session, creator_id: int, data: schemas.GroupCreate
    ) -> schemas.Group:
        """
        Create a group; the creator joins it as group admin.

        Group and membership are written in one commit.
        """
        group_repo = GroupRepository(db)
        group = db_models.Group(
            name=sanitize_plain_text(data.name) or data.name.strip(),
            description=sanitize_plain_text(data.description),
            type=data.type,
            grade=data.grade,
            cover_image_url=sanitize_url(data.cover_image_url) or None,
            created_by=creator_id,
        )
        group_repo.add(group)
        group_repo.flush()
        group_repo.add_member(group.id, creator_id, db_models.GroupMemberRole.ADMIN)
        group_repo.commit()
        group_repo.refresh(group)
        logger.info(f"Group {group.id} ({group.type.value}) created by user {creator_id}")
        return GroupService.get_group(db, group.id)

    @staticmethod
    def join_group(db: Session, group_id: int, user_id: int) -> None:
        """
        Join a group.

        Raises:
            GroupNotFoundException: If the group does not exist
            AlreadyGroupMemberException: If the caller is already a member
        """
        GroupService._get_or_404(db, group_id)
        group_repo = GroupRepository(db)
        if group_repo.is_member(group_id, user_id):
            raise AlreadyGroupMemberException()
        group_repo.add_member(group_id, user_id)
        try:
            group_repo.commit()
        except IntegrityError:
            group_repo.rollback()
            raise AlreadyGroupMemberException()
        logger.info(f"User {user_id} joined group {group_id}")

    @staticmethod
    def leave_group(db: Session, group_id: int, user_id: int) -> None:
        """Leave a group. Leaving a group you are not in is a no-op."""
        group_repo = GroupRepository(db)
        member = group_repo.get_member(group_id, user_id)
        if member is not None:
            group_repo.delete(member)
            logger.info(f"User {user_id} left group {group_id}")

    @staticmethod
    def list_members(db: Session, group_id: int) -> List[db_models.GroupMember]:
        GroupService._get_or_404(db, group_id)
        return GroupRepository(db).list_members(group_id)

    @staticmethod
    def delete_group(db: Session, group_id: int, user: db_models.User) -> None:
        """
        Delete a group with its members, posts and messages.

        Library files shared in the group stay in the library. Only the
        creator or an admin may delete.
        """
        group = GroupService._get_or_404(db, group_id)
        if not (user.is_admin or group.created_by == user.id):
            raise InsufficientPermissionsException()
        GroupRepository(db).delete(group)
        logger.info(f"Group {group_id} deleted by user {user.id}")

    # =========================================================================
    # Forum
    # =========================================================================

    @staticmethod
    def get_group_posts(
        db: Session, group_id: int, user_id: int
    ) -> List[schemas.Post]:
        GroupService._require_member(db, group_id, user_id)
        return PostService.get_group_posts(db, group_id, user_id)

    @staticmethod
    def create_group_post(
        db: Session, group_id: int, user_id: int, data: schemas.PostCreate
    ) -> schemas.Post:
        """Post in the group forum. Members only; no fan-out."""
        GroupService._require_member(db, group_id, user_id)
        return PostService.create_post(db, user_id, data, group_id=group_id)

    # =========================================================================
    # Chat
    # =========================================================================

    @staticmethod
    def get_messages(db: Session, group_id: int, user_id: int) -> List[db_models.Message]:
        """Latest settings.MESSAGES_LIMIT messages, oldest first. Members only."""
        GroupService._require_member(db, group_id, user_id)
        return MessageRepository(db).list_for_group(group_id, settings.MESSAGES_LIMIT)

    @staticmethod
    def send_message(
        db: Session,
        group_id: int,
        sender_id: int,
        content: Optional[str],
        media: Optional[UploadFile] = None,
    ) -> db_models.Message:
        """
        Post a chat message, optionally with a voice note, image or document.

        The other members are notified.

        Raises:
            GroupNotFoundException: If the group does not exist
            NotGroupMemberException: If the caller is not a member
            ValidationException: If there is neither text nor media
            InvalidUploadException: If the attachment is rejected
        """
        GroupService._require_member(db, group_id, sender_id)
        text = sanitize_plain_text(content) or ""

        media_url = None
        media_type = None
        if media is not None and media.filename:
            stored = FileService.store_upload(
                media, MEDIA_SUBDIR, MESSAGE_MEDIA_TYPES.keys()
            )
            media_url = f"/{stored.storage_key}"
            media_type = MESSAGE_MEDIA_TYPES[file_extension(stored.storage_key)]

        if not text and media_url is None:
            raise ValidationException("Message must have text or an attachment")

        message = MessageRepository(db).create(
            db_models.Message(
                group_id=group_id,
                sender_id=sender_id,
                content=text,
                media_url=media_url,
                media_type=media_type,
            )
        )
        logger.info(f"Message {message.id} sent to group {group_id} by user {sender_id}")

        NotificationService.notify_new_message(db, message)
        return message

    @staticmethod
    def delete_message(db: Session, group_id: int, message_id: int) -> None:
        """Delete a chat message. Callers are moderators (checked by the router)."""
        message_repo = MessageRepository(db)
        message = message_repo.get_in_group(group_id, message_id)
        if message is None:
            raise MessageNotFoundException()
        media_url = message.media_url
        message_repo.delete(message)
        if media_url:
            FileService.remove_stored_file(media_url.lstrip("/"))
        logger.info(f"Message {message_id} deleted from group {group_id}")
