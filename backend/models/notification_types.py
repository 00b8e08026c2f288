"""Notification kinds: in-app notifications and ntfy admin alerts."""

from enum import Enum
from typing import NamedTuple


class NotificationKind(str, Enum):
    """Value stored in Notification.type. Clients branch on it for deep links."""

    POST = "post"
    EVENT = "event"
    MESSAGE = "message"


class AlertConfig(NamedTuple):
    """Routing for one admin alert type."""

    topic_suffix: str
    default_priority: str  # min, low, default, high, urgent, max
    tags: str  # comma-separated emoji shortcodes


class AdminAlertType(Enum):
    """
    Admin alert types with their ntfy topic suffix, priority and tags.

    Admins subscribe to `<NTFY_TOPIC_PREFIX>-<suffix>` for the queues they
    handle.
    """

    REPORT = AlertConfig("reports", "urgent", "rotating_light,report")
    FILE_PENDING = AlertConfig("files", "default", "page_facing_up,new")
    USER_PENDING = AlertConfig("users", "default", "bust_in_silhouette,new")

    @property
    def topic_suffix(self) -> str:
        return self.value.topic_suffix

    @property
    def default_priority(self) -> str:
        return self.value.default_priority

    @property
    def tags(self) -> str:
        return self.value.tags
