# gymtrack/functions.py
"""
Cloud Functions entry point.

notify_new_predefined_routine runs on every document created under
rutinasPredefinidas and broadcasts it to the nuevas_rutinas topic.
"""

import logging

from firebase_functions import firestore_fn

from gymtrack.core.constants import COLLECTION_PREDEFINED_ROUTINES
from gymtrack.core.logger import setup_logging
from gymtrack.domains.broadcast.schemas import BroadcastResult, PredefinedRoutineCreatedEvent
from gymtrack.domains.broadcast.service import BroadcastService
from gymtrack.utils.fcm_service import init_firebase

# the functions runtime captures stdout, no log files there
setup_logging(to_file=False)
init_firebase()

logger = logging.getLogger(__name__)
broadcast = BroadcastService()


def handle_document_created(event, service: BroadcastService = None) -> BroadcastResult:
    snapshot = event.data
    fields = snapshot.to_dict() if snapshot is not None else None
    document_id = event.params.get("docId") or (snapshot.id if snapshot is not None else "")

    created = PredefinedRoutineCreatedEvent(document_id=document_id, fields=fields or {})
    return (service or broadcast).notify_new_predefined_routine(created)


@firestore_fn.on_document_created(document=f"{COLLECTION_PREDEFINED_ROUTINES}/{{docId}}")
def notify_new_predefined_routine(
    event: firestore_fn.Event[firestore_fn.DocumentSnapshot | None],
) -> None:
    handle_document_created(event)
