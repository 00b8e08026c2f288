"""
Admin push alerts through a self-hosted ntfy server.

Moderators get a phone push when something lands in one of their queues
(a new report, a library file waiting for approval, an account waiting for
verification). Delivery is fire-and-forget: failures are logged and never
reach the request that triggered them.
"""

import asyncio

import httpx
from loguru import logger

from models.config import settings
from models.notification_types import AdminAlertType


class AdminAlertService:
    """Fire-and-forget ntfy publisher. Nothing here raises."""

    @classmethod
    def _get_topic(cls, alert_type: AdminAlertType) -> str:
        prefix = settings.NTFY_TOPIC_PREFIX or "loyola-admin"
        return f"{prefix}-{alert_type.topic_suffix}"

    @classmethod
    def is_enabled(cls) -> bool:
        return bool(settings.NTFY_URL) and settings.NTFY_ENABLED

    @classmethod
    async def _send_async(
        cls,
        alert_type: AdminAlertType,
        title: str,
        message: str,
        click_url: str | None = None,
    ) -> bool:
        """
        Publish one alert.

        Args:
            alert_type: Determines topic, priority and tags
            title: Alert title
            message: Alert body
            click_url: URL opened when the alert is tapped

        Returns:
            True if ntfy accepted the message, False otherwise
        """
        if not cls.is_enabled():
            logger.debug("Ntfy not configured or disabled, skipping alert")
            return False

        topic = cls._get_topic(alert_type)
        headers: dict[str, str] = {
            "Title": title,
            "Priority": alert_type.default_priority,
            "Tags": alert_type.tags,
        }
        if settings.NTFY_AUTH_TOKEN:
            headers["Authorization"] = f"Bearer {settings.NTFY_AUTH_TOKEN}"
        if click_url:
            headers["Click"] = click_url
            headers["Actions"] = f"view, Open, {click_url}"

        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                response = await client.post(
                    f"{settings.NTFY_URL}/{topic}",
                    headers=headers,
                    content=message.encode("utf-8"),
                )
                response.raise_for_status()
        except httpx.TimeoutException:
            logger.warning(f"Ntfy timeout sending to {topic}: {title}")
            return False
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"Ntfy HTTP error {e.response.status_code} for {topic}: {title}"
            )
            return False
        except httpx.HTTPError as e:
            logger.warning(f"Ntfy error sending to {topic}: {e}")
            return False

        logger.info(f"Admin alert sent to {topic}: {title}")
        return True

    @classmethod
    def send_fire_and_forget(
        cls,
        alert_type: AdminAlertType,
        title: str,
        message: str,
        click_url: str | None = None,
    ) -> None:
        """
        Send an alert without waiting for it.

        Inside a running event loop the send becomes a background task.
        Sync route handlers run in a worker thread with no loop, so the send
        runs to completion there (bounded by the 5 s client timeout).
        """
        if not cls.is_enabled():
            return
        coro = cls._send_async(alert_type, title, message, click_url)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(coro)
            return
        loop.create_task(coro)

    @classmethod
    def notify_new_report(
        cls, report_id: int, target_type: str, target_id: int, reason: str
    ) -> None:
        cls.send_fire_and_forget(
            AdminAlertType.REPORT,
            "Nuevo reporte",
            f"{target_type} #{target_id}\n\n{reason[:300]}\nID: {report_id}",
            f"{settings.APP_URL}/admin?tab=reports",
        )

    @classmethod
    def notify_file_pending(
        cls, file_id: int, file_name: str, uploader_name: str
    ) -> None:
        cls.send_fire_and_forget(
            AdminAlertType.FILE_PENDING,
            "Archivo pendiente de aprobación",
            f"{file_name}\nSubido por: {uploader_name}\nID: {file_id}",
            f"{settings.APP_URL}/admin?tab=files",
        )

    @classmethod
    def notify_user_pending(cls, user_id: int, full_name: str, role: str) -> None:
        cls.send_fire_and_forget(
            AdminAlertType.USER_PENDING,
            "Cuenta pendiente de verificación",
            f"{full_name} ({role})\nID: {user_id}",
            f"{settings.APP_URL}/admin?tab=users",
        )
