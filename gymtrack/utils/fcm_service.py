# gymtrack/utils/fcm_service.py

import firebase_admin
from firebase_admin import credentials, messaging
from gymtrack.core.config import settings
import logging

logger = logging.getLogger(__name__)


def init_firebase() -> bool:
    """Initialize the default Firebase app once. Returns False if it could not be set up."""
    try:
        firebase_admin.get_app()
        return True
    except ValueError:
        pass

    try:
        if settings.FIREBASE_CREDENTIALS_PATH:
            cred = credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH)
            firebase_admin.initialize_app(cred)
        else:
            # application default credentials (Cloud Functions, gcloud auth)
            firebase_admin.initialize_app()
        logger.info("✅ Firebase Admin SDK initialized")
        return True
    except Exception as e:
        logger.error(f"❌ Firebase initialization failed: {str(e)}")
        return False


class FCMService:
    """Firebase Cloud Messaging: topic broadcast and topic subscription"""

    _initialized = False

    def __init__(self):
        if FCMService._initialized:
            return

        if not settings.FIREBASE_CREDENTIALS_PATH:
            # an app may already exist (cloud function entry point initializes it)
            try:
                firebase_admin.get_app()
                FCMService._initialized = True
            except ValueError:
                logger.warning("⚠️ FIREBASE_CREDENTIALS_PATH not set. FCM disabled")
            return

        FCMService._initialized = init_firebase()

    def is_available(self) -> bool:
        """FCM usable or not"""
        if not FCMService._initialized:
            # the app may have been initialized after this service was created
            try:
                firebase_admin.get_app()
                FCMService._initialized = True
            except ValueError:
                pass
        return FCMService._initialized

    def send_to_topic(self, topic: str, title: str, body: str, data: dict = None):
        """
        Publish one message to every device subscribed to a topic.

        Args:
            topic: FCM topic name
            title: notification title
            body: notification body
            data: extra data (values are sent as strings)

        Returns:
            message id on success, None on any failure
        """
        if not self.is_available():
            logger.warning("⚠️ FCM disabled, message to topic %s not sent", topic)
            return None

        try:
            # FCM data values must be strings
            str_data = {}
            if data:
                for key, value in data.items():
                    str_data[key] = str(value) if value is not None else ""

            message = messaging.Message(
                notification=messaging.Notification(
                    title=title,
                    body=body,
                ),
                data=str_data,
                topic=topic,
            )

            response = messaging.send(message)
            logger.info(f"✅ Notification sent: {response}")
            return response

        except Exception as e:
            logger.error(f"❌ Error sending notification: {str(e)}")
            return None

    async def subscribe_to_topic(self, token: str, topic: str) -> bool:
        """
        Subscribe one registration token to a topic.
        Already-subscribed tokens are accepted by FCM without error.
        """
        if not self.is_available():
            logger.warning("⚠️ FCM disabled, topic subscription skipped")
            return False

        try:
            response = messaging.subscribe_to_topic([token], topic)
            if response.failure_count:
                reason = response.errors[0].reason if response.errors else "unknown"
                logger.error(f"❌ Error subscribing to {topic}: {reason}")
                return False
            logger.info(f"✅ Subscribed to topic {topic}")
            return True
        except Exception as e:
            logger.error(f"❌ Error subscribing to {topic}: {str(e)}")
            return False


# singleton instance
fcm_service = FCMService()
