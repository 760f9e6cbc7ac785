# gymtrack/domains/device/schemas.py

from pydantic import BaseModel
from datetime import datetime
from typing import Optional, Any


class RemoteNotification(BaseModel):
    title: Optional[str] = None
    body: Optional[str] = None


class RemoteMessage(BaseModel):
    """Inbound push as delivered by FCM"""
    notification: Optional[RemoteNotification] = None
    data: dict[str, str] = {}
    message_id: Optional[str] = None

    def display_fields(self) -> tuple[Optional[str], Optional[str]]:
        """Title/body from the notification block, or the data duplicate for data-only pushes"""
        if self.notification is not None:
            return self.notification.title, self.notification.body
        return self.data.get("title"), self.data.get("body")


class NotificationResponse(BaseModel):
    id: int
    notification_id: int
    channel_id: str
    title: str
    message: str
    content_intent: Optional[Any] = None
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ChannelResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    importance: int

    class Config:
        from_attributes = True


class FCMTokenUpdate(BaseModel):
    fcm_token: str


class PermissionUpdate(BaseModel):
    granted: bool


class PermissionResponse(BaseModel):
    permission: str
    required: bool
    granted: bool
    can_display: bool
    requested_at: Optional[datetime] = None
