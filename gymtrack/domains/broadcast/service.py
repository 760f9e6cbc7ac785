# gymtrack/domains/broadcast/service.py

from gymtrack.core.config import settings
from gymtrack.core.constants import (
    FIELD_ROUTINE_NAME,
    NEW_ROUTINE_BODY,
    NEW_ROUTINE_TITLE,
    NEW_ROUTINES_TOPIC,
    ROUTINE_NAME_PLACEHOLDER,
)
from gymtrack.domains.broadcast.schemas import (
    BroadcastResult,
    NotificationPayload,
    PredefinedRoutineCreatedEvent,
)
from gymtrack.utils.fcm_service import fcm_service
import logging

logger = logging.getLogger(__name__)


def build_payload(fields: dict) -> NotificationPayload:
    """Payload for a new predefined routine. Missing or empty name falls back to the placeholder."""
    name = (fields or {}).get(FIELD_ROUTINE_NAME) or ROUTINE_NAME_PLACEHOLDER
    return NotificationPayload(
        title=NEW_ROUTINE_TITLE,
        body=NEW_ROUTINE_BODY.format(name=name),
        topic=NEW_ROUTINES_TOPIC,
    )


class BroadcastService:

    def __init__(self, gateway=None, ledger=None, deduplicate: bool = None):
        self.gateway = gateway or fcm_service
        self.ledger = ledger
        self.deduplicate = settings.DEDUPLICATE_TRIGGER_EVENTS if deduplicate is None else deduplicate

    def notify_new_predefined_routine(self, event: PredefinedRoutineCreatedEvent) -> BroadcastResult:
        """
        Publish "new routine" to every subscribed device.

        One send per call. Send failures are logged and reported in the result,
        never raised: the document write already happened.
        """
        payload = build_payload(event.fields)

        if self.deduplicate and not self._claim(event.document_id):
            logger.info(f"Routine {event.document_id} already announced, skipping")
            return BroadcastResult(sent=False, skipped_duplicate=True)

        message = payload.to_message()
        try:
            message_id = self.gateway.send_to_topic(
                payload.topic,
                payload.title,
                payload.body,
                data=message["data"],
            )
        except Exception as e:
            logger.error(f"❌ Error sending notification: {str(e)}")
            message_id = None

        if message_id is None:
            logger.error(f"❌ Broadcast for routine {event.document_id} not delivered to {payload.topic}")
            return BroadcastResult(sent=False)

        return BroadcastResult(sent=True, message_id=message_id)

    def _claim(self, document_id: str) -> bool:
        if self.ledger is None:
            from gymtrack.domains.broadcast.repository import SentNotificationLedger
            self.ledger = SentNotificationLedger()
        try:
            return self.ledger.claim(document_id)
        except Exception as e:
            # ledger down: fall back to plain at-least-once
            logger.error(f"❌ Idempotency ledger unavailable: {str(e)}")
            return True


broadcast_service = BroadcastService()
