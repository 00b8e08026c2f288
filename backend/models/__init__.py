"""Models package - Pydantic schemas and domain types."""

from .notification_types import AdminAlertType, AlertConfig, NotificationKind

__all__ = [
    "AdminAlertType",
    "AlertConfig",
    "NotificationKind",
]
