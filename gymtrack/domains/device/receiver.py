# gymtrack/domains/device/receiver.py

import logging
from typing import Optional

from gymtrack.core.constants import PRIORITY_HIGH
from gymtrack.domains.device.notifier import LocalNotifier, channel_notification
from gymtrack.domains.device.schemas import RemoteMessage

logger = logging.getLogger(__name__)


class NotificationReceiver:
    """Turns inbound push messages into local notifications"""

    def __init__(self, notifier: LocalNotifier = None):
        self.notifier = notifier or LocalNotifier()

    async def on_message_received(self, message: RemoteMessage) -> Optional[int]:
        """
        Show the message, if it has something to show and the gate allows it.
        Returns the displayed notification id or None. Never raises.
        """
        title, body = message.display_fields()
        if not title or not body:
            logger.info(f"Push {message.message_id or '-'} has no title/body, nothing shown")
            return None

        notification = channel_notification(
            title,
            body,
            priority=PRIORITY_HIGH,
            auto_cancel=True,
        )
        return await self.notifier.notify(notification)


notification_receiver = NotificationReceiver()
