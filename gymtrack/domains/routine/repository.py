# gymtrack/domains/routine/repository.py

from firebase_admin import firestore_async
from google.api_core.exceptions import GoogleAPIError, NotFound
from google.auth.exceptions import GoogleAuthError
from google.cloud.firestore_v1.base_query import FieldFilter
from gymtrack.core.constants import COLLECTION_PREDEFINED_ROUTINES, COLLECTION_ROUTINES
from gymtrack.core.result import Ok, Result, backend_error, not_found
from gymtrack.utils.fcm_service import init_firebase
from typing import Callable, Optional
import logging

logger = logging.getLogger(__name__)

# RetryError is a GoogleAPIError but not a GoogleAPICallError;
# missing credentials surface from the lazy client as GoogleAuthError
BACKEND_ERRORS = (GoogleAPIError, GoogleAuthError, ValueError)


def get_firestore_client():
    init_firebase()
    return firestore_async.client()


class FirestoreRepository:
    """
    CRUD over one Firestore collection.
    Every method returns Ok(value) or Err(RepositoryError); nothing raises.
    """

    def __init__(self, collection: str, client=None):
        self.collection_name = collection
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = get_firestore_client()
        return self._client

    @property
    def collection(self):
        return self.client.collection(self.collection_name)

    async def add(self, data: dict) -> Result:
        try:
            _, ref = await self.collection.add(data)
            logger.info(f"✅ {self.collection_name}/{ref.id} created")
            return Ok(ref.id)
        except BACKEND_ERRORS as e:
            logger.error(f"❌ Error creating document in {self.collection_name}: {str(e)}")
            return backend_error(str(e))

    async def get(self, doc_id: str) -> Result:
        try:
            snapshot = await self.collection.document(doc_id).get()
        except BACKEND_ERRORS as e:
            logger.error(f"❌ Error reading {self.collection_name}/{doc_id}: {str(e)}")
            return backend_error(str(e))

        if not snapshot.exists:
            return not_found(f"{self.collection_name}/{doc_id} does not exist")
        return Ok(snapshot.to_dict() or {})

    async def list(self, where: Optional[tuple] = None) -> Result:
        """All documents as (id, data) pairs. where = (field, op, value)"""
        try:
            query = self.collection
            if where is not None:
                field, op, value = where
                query = query.where(filter=FieldFilter(field, op, value))
            documents = [(doc.id, doc.to_dict() or {}) async for doc in query.stream()]
        except BACKEND_ERRORS as e:
            logger.error(f"❌ Error listing {self.collection_name}: {str(e)}")
            return backend_error(str(e))
        return Ok(documents)

    async def find_first(self, field: str, value) -> Result:
        result = await self.list(where=(field, "==", value))
        if not result.ok:
            return result
        if not result.value:
            return not_found(f"No document in {self.collection_name} with {field} == {value!r}")
        return Ok(result.value[0])

    async def update(self, doc_id: str, fields: dict) -> Result:
        try:
            await self.collection.document(doc_id).update(fields)
            return Ok(None)
        except NotFound:
            return not_found(f"{self.collection_name}/{doc_id} does not exist")
        except BACKEND_ERRORS as e:
            logger.error(f"❌ Error updating {self.collection_name}/{doc_id}: {str(e)}")
            return backend_error(str(e))

    async def mutate(self, doc_id: str, change: Callable[[dict], Result]) -> Result:
        """
        Read-modify-write of one document inside a transaction.

        Args:
            doc_id: document to change
            change: current data -> Ok(fields to write) or Err (nothing is written)

        Firestore retries the transaction when another write lands in between,
        so concurrent edits of the same document do not overwrite each other.
        """
        try:
            doc_ref = self.collection.document(doc_id)
            transaction = self.client.transaction()

            @firestore_async.async_transactional
            async def read_and_write(transaction):
                snapshot = await doc_ref.get(transaction=transaction)
                if not snapshot.exists:
                    return not_found(f"{self.collection_name}/{doc_id} does not exist")
                outcome = change(snapshot.to_dict() or {})
                if outcome.ok:
                    transaction.update(doc_ref, outcome.value)
                return outcome

            outcome = await read_and_write(transaction)
        except NotFound:
            return not_found(f"{self.collection_name}/{doc_id} does not exist")
        except BACKEND_ERRORS as e:
            logger.error(f"❌ Error in transaction on {self.collection_name}/{doc_id}: {str(e)}")
            return backend_error(str(e))

        return Ok(None) if outcome.ok else outcome

    async def delete(self, doc_id: str) -> Result:
        try:
            await self.collection.document(doc_id).delete()
            logger.info(f"🗑️ {self.collection_name}/{doc_id} deleted")
            return Ok(None)
        except BACKEND_ERRORS as e:
            logger.error(f"❌ Error deleting {self.collection_name}/{doc_id}: {str(e)}")
            return backend_error(str(e))


def routine_repository(client=None) -> FirestoreRepository:
    return FirestoreRepository(COLLECTION_ROUTINES, client)


def predefined_routine_repository(client=None) -> FirestoreRepository:
    return FirestoreRepository(COLLECTION_PREDEFINED_ROUTINES, client)
