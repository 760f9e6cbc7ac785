# gymtrack/domains/device/reminder.py

import logging
import random

from gymtrack.core.config import settings
from gymtrack.core.constants import FLAG_ACTIVITY_CLEAR_TASK, FLAG_ACTIVITY_NEW_TASK, PRIORITY_DEFAULT
from gymtrack.domains.device.notifier import ContentIntent, LocalNotifier, channel_notification

logger = logging.getLogger(__name__)

JOB_SUCCESS = "success"

DAILY_TIPS = [
    "La constancia vence al talento",
    "Hoy puede ser un gran día para empezar una nueva rutina",
    "El progreso viene del hábito, no de la perfección",
]


def reminder_messages(rng=random) -> list[tuple[str, str]]:
    return [
        ("¿Hoy entrenas?", "No olvides revisar tus rutinas favoritas"),
        ("¿Ya cronometraste tu descanso?", "Recuerda usar el temporizador para optimizar tus entrenos"),
        ("Consejo del día", rng.choice(DAILY_TIPS)),
    ]


def pick_reminder_message(rng=random) -> tuple[str, str]:
    return rng.choice(reminder_messages(rng))


def main_entry_intent() -> ContentIntent:
    """Open the app's main entry point on a fresh task"""
    return ContentIntent(
        target=settings.MAIN_ENTRY_POINT,
        flags=[FLAG_ACTIVITY_NEW_TASK, FLAG_ACTIVITY_CLEAR_TASK],
    )


async def run_reminder_job(notifier: LocalNotifier = None, rng=random) -> str:
    """
    Daily motivational reminder, run by the scheduler.
    Reports success even when the permission gate suppressed the notification.
    """
    title, body = pick_reminder_message(rng)
    notification = channel_notification(
        title,
        body,
        priority=PRIORITY_DEFAULT,
        auto_cancel=True,
        content_intent=main_entry_intent(),
    )

    notification_id = await (notifier or LocalNotifier()).notify(notification)
    if notification_id is None:
        logger.info("⏰ [Reminder Job] nothing shown")
    else:
        logger.info(f"⏰ [Reminder Job] shown: {title}")
    return JOB_SUCCESS
