# gymtrack/domains/broadcast/repository.py

from firebase_admin import firestore
from google.api_core.exceptions import AlreadyExists
from gymtrack.core.constants import COLLECTION_SENT_NOTIFICATIONS


class SentNotificationLedger:
    """
    Idempotency key store for the trigger function.
    One document per predefined routine id that already produced a broadcast.
    """

    def __init__(self, client=None):
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = firestore.client()
        return self._client

    def claim(self, document_id: str) -> bool:
        """Record the id. False if an earlier invocation already recorded it."""
        ref = self.client.collection(COLLECTION_SENT_NOTIFICATIONS).document(document_id)
        try:
            ref.create({"documentId": document_id, "sentAt": firestore.SERVER_TIMESTAMP})
        except AlreadyExists:
            return False
        return True
