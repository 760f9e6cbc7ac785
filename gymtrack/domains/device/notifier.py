# gymtrack/domains/device/notifier.py
"""Local notification display shared by the push receiver and the reminder job."""

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from gymtrack.core.config import settings
from gymtrack.core.constants import (
    CHANNEL_ID,
    POST_NOTIFICATIONS,
    PRIORITY_DEFAULT,
    SDK_NOTIFICATION_PERMISSION,
)
from gymtrack.core.database import AsyncSessionLocal
from gymtrack.domains.device.models import DeviceNotification
from gymtrack.domains.device.repository import notification_repository, permission_repository

logger = logging.getLogger(__name__)


@dataclass
class ContentIntent:
    """Tap action: open target, with task-stack flags"""
    target: str
    flags: list = field(default_factory=list)

    def to_json(self) -> str:
        return json.dumps({"target": self.target, "flags": self.flags}, ensure_ascii=False)


@dataclass
class LocalNotification:
    channel_id: str
    title: str
    body: str
    priority: int = PRIORITY_DEFAULT
    auto_cancel: bool = True
    content_intent: Optional[ContentIntent] = None


def requires_runtime_permission(sdk_version: int) -> bool:
    return sdk_version >= SDK_NOTIFICATION_PERMISSION


def new_notification_id() -> int:
    """Time based id so notifications stack instead of replacing each other"""
    return time.time_ns() // 1000 % 2**31


class LocalNotifier:

    def __init__(self, session_factory=None, sdk_version: int = None):
        self.session_factory = session_factory or AsyncSessionLocal
        self.sdk_version = settings.PLATFORM_SDK_VERSION if sdk_version is None else sdk_version

    async def can_display(self, db) -> bool:
        """Older platforms show unconditionally, newer ones need POST_NOTIFICATIONS"""
        if not requires_runtime_permission(self.sdk_version):
            return True
        return await permission_repository.is_granted(db, POST_NOTIFICATIONS)

    async def notify(self, notification: LocalNotification, notification_id: int = None) -> Optional[int]:
        """
        Show a notification if the permission gate allows it.

        Returns:
            the platform notification id, or None when suppressed or failed
        """
        try:
            async with self.session_factory() as db:
                if not await self.can_display(db):
                    logger.info(f"Notification '{notification.title}' dropped: permission not granted")
                    return None

                row = DeviceNotification(
                    notification_id=notification_id if notification_id is not None else new_notification_id(),
                    channel_id=notification.channel_id,
                    title=notification.title,
                    message=notification.body,
                    priority=notification.priority,
                    auto_cancel=notification.auto_cancel,
                    content_intent=notification.content_intent.to_json() if notification.content_intent else None,
                )
                await notification_repository.post(db, row)
                return row.notification_id
        except Exception as e:
            logger.error(f"❌ Failed to show notification: {str(e)}", exc_info=True)
            return None


def channel_notification(title: str, body: str, **kwargs) -> LocalNotification:
    return LocalNotification(channel_id=CHANNEL_ID, title=title, body=body, **kwargs)
