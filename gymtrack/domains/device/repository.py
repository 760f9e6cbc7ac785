# gymtrack/domains/device/repository.py

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, desc, delete
from sqlalchemy.sql import func
from gymtrack.domains.device.models import (
    DeviceNotification,
    DevicePermission,
    DeviceRegistration,
    NotificationChannel,
    get_now_utc,
)
from typing import List, Optional

REGISTRATION_ROW_ID = 1


class NotificationRepository:

    async def post(self, db: AsyncSession, notification: DeviceNotification) -> DeviceNotification:
        """Show a notification. An existing row with the same notification_id is replaced."""
        await db.execute(
            delete(DeviceNotification).where(
                DeviceNotification.notification_id == notification.notification_id
            )
        )
        db.add(notification)
        await db.commit()
        await db.refresh(notification)
        return notification

    async def get_all(
        self,
        db: AsyncSession,
        limit: int = 50,
        offset: int = 0
    ) -> List[DeviceNotification]:
        """Notifications, newest first"""
        result = await db.execute(
            select(DeviceNotification)
            .order_by(desc(DeviceNotification.created_at), desc(DeviceNotification.id))
            .limit(limit)
            .offset(offset)
        )
        return result.scalars().all()

    async def count(self, db: AsyncSession) -> int:
        result = await db.execute(select(func.count()).select_from(DeviceNotification))
        return result.scalar() or 0

    async def get_unread_count(self, db: AsyncSession) -> int:
        result = await db.execute(
            select(func.count())
            .select_from(DeviceNotification)
            .where(DeviceNotification.is_read == False)
        )
        return result.scalar() or 0

    async def mark_as_read(self, db: AsyncSession, notification_id: int) -> bool:
        result = await db.execute(
            update(DeviceNotification)
            .where(DeviceNotification.id == notification_id)
            .values(is_read=True, read_at=get_now_utc())
        )
        await db.commit()
        return result.rowcount > 0

    async def mark_all_as_read(self, db: AsyncSession) -> int:
        result = await db.execute(
            update(DeviceNotification)
            .where(DeviceNotification.is_read == False)
            .values(is_read=True, read_at=get_now_utc())
        )
        await db.commit()
        return result.rowcount

    async def delete_notification(self, db: AsyncSession, notification_id: int) -> bool:
        notification = await db.get(DeviceNotification, notification_id)
        if notification:
            await db.delete(notification)
            await db.commit()
            return True
        return False

    async def delete_all_notifications(self, db: AsyncSession) -> int:
        result = await db.execute(delete(DeviceNotification))
        await db.commit()
        return result.rowcount


class ChannelRepository:

    async def create_channel(
        self,
        db: AsyncSession,
        channel_id: str,
        name: str,
        description: str,
        importance: int
    ) -> NotificationChannel:
        """Create the channel. Same id again is a no-op and returns the stored one."""
        existing = await db.get(NotificationChannel, channel_id)
        if existing:
            return existing

        channel = NotificationChannel(
            id=channel_id,
            name=name,
            description=description,
            importance=importance,
        )
        db.add(channel)
        await db.commit()
        await db.refresh(channel)
        return channel

    async def get_channel(self, db: AsyncSession, channel_id: str) -> Optional[NotificationChannel]:
        return await db.get(NotificationChannel, channel_id)

    async def get_all(self, db: AsyncSession) -> List[NotificationChannel]:
        result = await db.execute(select(NotificationChannel).order_by(NotificationChannel.id))
        return result.scalars().all()


class PermissionRepository:

    async def get(self, db: AsyncSession, name: str) -> Optional[DevicePermission]:
        return await db.get(DevicePermission, name)

    async def is_granted(self, db: AsyncSession, name: str) -> bool:
        permission = await self.get(db, name)
        return bool(permission and permission.granted)

    async def set_granted(self, db: AsyncSession, name: str, granted: bool) -> DevicePermission:
        permission = await self.get(db, name)
        if permission is None:
            permission = DevicePermission(name=name, granted=granted)
            db.add(permission)
        else:
            permission.granted = granted
        await db.commit()
        await db.refresh(permission)
        return permission

    async def mark_requested(self, db: AsyncSession, name: str) -> DevicePermission:
        """Record that the user was prompted. The grant flag is left untouched."""
        permission = await self.get(db, name)
        if permission is None:
            permission = DevicePermission(name=name, granted=False)
            db.add(permission)
        permission.requested_at = get_now_utc()
        await db.commit()
        await db.refresh(permission)
        return permission


class RegistrationRepository:

    async def get(self, db: AsyncSession) -> Optional[DeviceRegistration]:
        return await db.get(DeviceRegistration, REGISTRATION_ROW_ID)

    async def get_token(self, db: AsyncSession) -> Optional[str]:
        registration = await self.get(db)
        return registration.fcm_token if registration else None

    async def save_token(self, db: AsyncSession, fcm_token: str) -> DeviceRegistration:
        """Store the registration token, replacing the previous one"""
        registration = await self.get(db)
        if registration is None:
            registration = DeviceRegistration(id=REGISTRATION_ROW_ID)
            db.add(registration)
        if registration.fcm_token != fcm_token:
            registration.subscribed_topic = None
        registration.fcm_token = fcm_token
        await db.commit()
        await db.refresh(registration)
        return registration

    async def set_subscribed_topic(self, db: AsyncSession, topic: str):
        await db.execute(
            update(DeviceRegistration)
            .where(DeviceRegistration.id == REGISTRATION_ROW_ID)
            .values(subscribed_topic=topic)
        )
        await db.commit()


# singleton instances
notification_repository = NotificationRepository()
channel_repository = ChannelRepository()
permission_repository = PermissionRepository()
registration_repository = RegistrationRepository()
