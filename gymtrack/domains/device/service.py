# gymtrack/domains/device/service.py

from sqlalchemy.ext.asyncio import AsyncSession
from gymtrack.core.config import settings
from gymtrack.core.constants import NEW_ROUTINES_TOPIC, POST_NOTIFICATIONS
from gymtrack.domains.device.notifier import LocalNotifier, requires_runtime_permission
from gymtrack.domains.device.repository import permission_repository, registration_repository
from gymtrack.utils.fcm_service import fcm_service
import logging

logger = logging.getLogger(__name__)


class DeviceService:

    def __init__(self, messaging=None, sdk_version: int = None):
        self.messaging = messaging or fcm_service
        self.sdk_version = settings.PLATFORM_SDK_VERSION if sdk_version is None else sdk_version

    async def register_token(self, db: AsyncSession, fcm_token: str) -> bool:
        """
        Store a (new) registration token and subscribe it to the broadcast topic.

        Returns:
            bool: subscription succeeded
        """
        await registration_repository.save_token(db, fcm_token)

        subscribed = await self.messaging.subscribe_to_topic(fcm_token, NEW_ROUTINES_TOPIC)
        if subscribed:
            await registration_repository.set_subscribed_topic(db, NEW_ROUTINES_TOPIC)
        else:
            logger.info("FCM token stored, topic subscription failed")
        return subscribed

    async def get_permission(self, db: AsyncSession) -> dict:
        permission = await permission_repository.get(db, POST_NOTIFICATIONS)
        return {
            "permission": POST_NOTIFICATIONS,
            "required": requires_runtime_permission(self.sdk_version),
            "granted": bool(permission and permission.granted),
            # same gate the receiver and the reminder go through
            "can_display": await LocalNotifier(sdk_version=self.sdk_version).can_display(db),
            "requested_at": permission.requested_at if permission else None,
        }

    async def answer_permission(self, db: AsyncSession, granted: bool) -> dict:
        """User's answer to the permission prompt"""
        await permission_repository.set_granted(db, POST_NOTIFICATIONS, granted)
        logger.info(f"🔔 Permission {POST_NOTIFICATIONS} {'granted' if granted else 'denied'}")
        return await self.get_permission(db)


device_service = DeviceService()
