"""
Services layer for business logic.

Each service is a class of static methods taking a SQLAlchemy session.
Services raise domain exceptions (models.exceptions) and never HTTP errors.
"""

from .admin_alert_service import AdminAlertService
from .auth_service import AuthService
from .badge_service import BadgeService, RecognitionService
from .event_service import EventService
from .file_service import FileService
from .group_service import GroupService
from .notification_service import NotificationService
from .post_service import PostService
from .question_service import QuestionService
from .report_service import ReportService
from .stats_service import StatsService
from .user_service import UserService

__all__ = [
    "AdminAlertService",
    "AuthService",
    "BadgeService",
    "EventService",
    "FileService",
    "GroupService",
    "NotificationService",
    "PostService",
    "QuestionService",
    "RecognitionService",
    "ReportService",
    "StatsService",
    "UserService",
]
