# gymtrack/domains/device/registrar.py

import logging

from gymtrack.core.config import settings
from gymtrack.core.constants import (
    CHANNEL_DESCRIPTION,
    CHANNEL_ID,
    CHANNEL_NAME,
    IMPORTANCE_DEFAULT,
    NEW_ROUTINES_TOPIC,
    POST_NOTIFICATIONS,
    SDK_NOTIFICATION_CHANNELS,
)
from gymtrack.core.database import AsyncSessionLocal
from gymtrack.core.scheduler import schedule_daily_reminder
from gymtrack.domains.device.notifier import requires_runtime_permission
from gymtrack.domains.device.repository import (
    channel_repository,
    permission_repository,
    registration_repository,
)
from gymtrack.utils.fcm_service import fcm_service

logger = logging.getLogger(__name__)


class NotificationRegistrar:
    """
    Startup preparation for notifications:
    1. permission prompt  2. channel  3. topic subscription  4. daily reminder.
    Each step fails on its own; the app keeps working without push.
    """

    def __init__(self, scheduler=None, session_factory=None, messaging=None, sdk_version: int = None):
        self.scheduler = scheduler
        self.session_factory = session_factory or AsyncSessionLocal
        self.messaging = messaging or fcm_service
        self.sdk_version = settings.PLATFORM_SDK_VERSION if sdk_version is None else sdk_version

    async def run(self):
        for step in (
            self.request_permission,
            self.create_channel,
            self.subscribe_to_topic,
            self.schedule_reminder,
        ):
            try:
                await step()
            except Exception as e:
                logger.error(f"❌ Notification setup step {step.__name__} failed: {str(e)}", exc_info=True)

    async def request_permission(self) -> bool:
        """Prompt for POST_NOTIFICATIONS where the platform needs it. True if a prompt was recorded."""
        if not requires_runtime_permission(self.sdk_version):
            return False

        async with self.session_factory() as db:
            if await permission_repository.is_granted(db, POST_NOTIFICATIONS):
                return False
            await permission_repository.mark_requested(db, POST_NOTIFICATIONS)

        logger.info(f"🔔 Permission {POST_NOTIFICATIONS} requested")
        return True

    async def create_channel(self):
        if self.sdk_version < SDK_NOTIFICATION_CHANNELS:
            return None

        async with self.session_factory() as db:
            return await channel_repository.create_channel(
                db,
                CHANNEL_ID,
                CHANNEL_NAME,
                CHANNEL_DESCRIPTION,
                IMPORTANCE_DEFAULT,
            )

    async def subscribe_to_topic(self) -> bool:
        async with self.session_factory() as db:
            token = await registration_repository.get_token(db)
            if not token:
                logger.warning("⚠️ No FCM token registered yet, topic subscription skipped")
                return False

            subscribed = await self.messaging.subscribe_to_topic(token, NEW_ROUTINES_TOPIC)
            if subscribed:
                await registration_repository.set_subscribed_topic(db, NEW_ROUTINES_TOPIC)
                logger.info(f"✅ Subscribed to topic {NEW_ROUTINES_TOPIC}")
            else:
                logger.error(f"❌ Error subscribing to topic {NEW_ROUTINES_TOPIC}")
            return subscribed

    async def schedule_reminder(self):
        if self.scheduler is None:
            logger.warning("⚠️ No scheduler, daily reminder not scheduled")
            return None
        return schedule_daily_reminder(self.scheduler)
