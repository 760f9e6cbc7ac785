# gymtrack/domains/device/models.py

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, BigInteger
from gymtrack.core.database import Base
from datetime import datetime, timezone


def get_now_utc():
    return datetime.now(timezone.utc)


class NotificationChannel(Base):
    """Local notification channel. Created once per installation."""
    __tablename__ = "notification_channels"

    id = Column(String(64), primary_key=True)
    name = Column(String(100), nullable=False)
    description = Column(String(255), nullable=True)
    importance = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=get_now_utc)


class DeviceNotification(Base):
    """
    Notifications shown on this device
    - push messages about new predefined routines
    - daily reminders
    """
    __tablename__ = "device_notifications"

    id = Column(Integer, primary_key=True, index=True)

    # platform id; posting again with the same id replaces the row
    notification_id = Column(BigInteger, unique=True, nullable=False, index=True)

    channel_id = Column(String(64), nullable=False)

    title = Column(String(200), nullable=False)

    message = Column(Text, nullable=False)

    priority = Column(Integer, nullable=False, default=0)

    # dismissed when tapped
    auto_cancel = Column(Boolean, default=True)

    # tap action (JSON: target + flags)
    content_intent = Column(Text, nullable=True)

    is_read = Column(Boolean, default=False)

    created_at = Column(DateTime(timezone=True), default=get_now_utc)

    read_at = Column(DateTime(timezone=True), nullable=True)


class DevicePermission(Base):
    """Runtime permission state as answered by the user"""
    __tablename__ = "device_permissions"

    name = Column(String(100), primary_key=True)
    granted = Column(Boolean, nullable=False, default=False)
    requested_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), default=get_now_utc, onupdate=get_now_utc)


class DeviceRegistration(Base):
    """FCM registration token of this installation"""
    __tablename__ = "device_registrations"

    id = Column(Integer, primary_key=True)
    fcm_token = Column(String(255), nullable=True)
    subscribed_topic = Column(String(100), nullable=True)
    updated_at = Column(DateTime(timezone=True), default=get_now_utc, onupdate=get_now_utc)
