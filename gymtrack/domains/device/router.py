# gymtrack/domains/device/router.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from gymtrack.core.database import get_db
from gymtrack.domains.device.schemas import (
    ChannelResponse,
    FCMTokenUpdate,
    NotificationResponse,
    PermissionResponse,
    PermissionUpdate,
    RemoteMessage,
)
from gymtrack.domains.device.receiver import notification_receiver
from gymtrack.domains.device.repository import channel_repository, notification_repository
from gymtrack.domains.device.service import device_service
import json

router = APIRouter()
push_router = APIRouter()


@router.get("/", response_model=list[NotificationResponse])
async def get_notifications(
    limit: int = 50,
    offset: int = 0,
    db: AsyncSession = Depends(get_db)
):
    """
    Notifications shown on this device

    - newest first
    - 50 by default, page with offset
    """
    notifications = await notification_repository.get_all(db, limit, offset)

    result = []
    for noti in notifications:
        result.append({
            "id": noti.id,
            "notification_id": noti.notification_id,
            "channel_id": noti.channel_id,
            "title": noti.title,
            "message": noti.message,
            "content_intent": json.loads(noti.content_intent) if noti.content_intent else None,
            "is_read": noti.is_read,
            "created_at": noti.created_at,
        })

    return result


@router.get("/unread-count")
async def get_unread_count(db: AsyncSession = Depends(get_db)):
    count = await notification_repository.get_unread_count(db)
    return {"unread_count": count}


@router.patch("/read-all")
async def mark_all_notifications_as_read(db: AsyncSession = Depends(get_db)):
    count = await notification_repository.mark_all_as_read(db)
    return {"status": "success", "marked_count": count}


@router.patch("/{notification_id}/read")
async def mark_notification_as_read(
    notification_id: int,
    db: AsyncSession = Depends(get_db)
):
    success = await notification_repository.mark_as_read(db, notification_id)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found."
        )
    return {"status": "success"}


@router.delete("/delete-all")
async def delete_all_notifications(db: AsyncSession = Depends(get_db)):
    count = await notification_repository.delete_all_notifications(db)
    return {"status": "success", "deleted_count": count}


@router.get("/permission", response_model=PermissionResponse)
async def get_permission(db: AsyncSession = Depends(get_db)):
    return await device_service.get_permission(db)


@router.put("/permission", response_model=PermissionResponse)
async def answer_permission(
    body: PermissionUpdate,
    db: AsyncSession = Depends(get_db)
):
    """User's answer to the notification permission prompt"""
    return await device_service.answer_permission(db, body.granted)


@router.get("/channels", response_model=list[ChannelResponse])
async def get_channels(db: AsyncSession = Depends(get_db)):
    return await channel_repository.get_all(db)


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: int,
    db: AsyncSession = Depends(get_db)
):
    success = await notification_repository.delete_notification(db, notification_id)
    if not success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found."
        )
    return {"status": "success"}


@push_router.post("/token")
async def register_fcm_token(
    body: FCMTokenUpdate,
    db: AsyncSession = Depends(get_db)
):
    """
    Register / refresh the FCM token

    - called on first launch and whenever FCM rotates the token
    - subscribes the token to the new-routines topic
    """
    subscribed = await device_service.register_token(db, body.fcm_token)
    return {
        "status": "success",
        "subscribed": subscribed,
    }


@push_router.post("/messages")
async def receive_push(message: RemoteMessage):
    """Inbound push delivery"""
    notification_id = await notification_receiver.on_message_received(message)
    return {
        "displayed": notification_id is not None,
        "notification_id": notification_id,
    }
