# gymtrack/domains/broadcast/schemas.py

from pydantic import BaseModel
from typing import Optional, Any


class PredefinedRoutineCreatedEvent(BaseModel):
    """Document created under rutinasPredefinidas"""
    document_id: str
    fields: dict[str, Any] = {}


class NotificationPayload(BaseModel):
    """Message handed to FCM for one topic broadcast"""
    title: str
    body: str
    topic: str

    def to_message(self) -> dict:
        """Wire shape: title/body under notification and data, plus the topic"""
        return {
            "notification": {"title": self.title, "body": self.body},
            "data": {"title": self.title, "body": self.body},
            "topic": self.topic,
        }


class BroadcastResult(BaseModel):
    sent: bool
    message_id: Optional[str] = None
    skipped_duplicate: bool = False
