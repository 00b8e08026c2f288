"""
Repository pattern implementation for data access layer.
"""

from .badge_repository import BadgeRepository, RecognitionRepository
from .base import BaseRepository
from .event_repository import EventRepository
from .file_repository import FileRepository
from .group_repository import GroupRepository, MessageRepository
from .notification_repository import (
    NotificationPreferenceRepository,
    NotificationRepository,
)
from .post_repository import CommentRepository, PostRepository, ReactionRepository
from .question_repository import AnswerRepository, QaVoteRepository, QuestionRepository
from .report_repository import ReportRepository
from .user_repository import UserRepository

__all__ = [
    "AnswerRepository",
    "BadgeRepository",
    "BaseRepository",
    "CommentRepository",
    "EventRepository",
    "FileRepository",
    "GroupRepository",
    "MessageRepository",
    "NotificationPreferenceRepository",
    "NotificationRepository",
    "PostRepository",
    "QaVoteRepository",
    "QuestionRepository",
    "ReactionRepository",
    "RecognitionRepository",
    "ReportRepository",
    "UserRepository",
]
