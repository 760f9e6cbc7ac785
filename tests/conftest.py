"""Shared fixtures: throwaway device store, fake FCM, fake Firestore."""
from __future__ import annotations

import asyncio
import os
import tempfile
from itertools import count

_tmp = tempfile.mkdtemp(prefix="gymtrack-test-")
os.environ.setdefault("LOG_DIR", os.path.join(_tmp, "logs"))
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{os.path.join(_tmp, 'device.db')}")
os.environ.setdefault("SCHEDULER_JOBSTORE_URL", f"sqlite:///{os.path.join(_tmp, 'jobs.db')}")
os.environ.setdefault("FIREBASE_CREDENTIALS_PATH", "")

import pytest
from firebase_admin import firestore_async
from google.api_core.exceptions import NotFound
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from gymtrack.core.constants import POST_NOTIFICATIONS
from gymtrack.core.database import Base
from gymtrack.domains.device import models  # noqa: F401
from gymtrack.domains.device.notifier import LocalNotifier
from gymtrack.domains.device.repository import notification_repository, permission_repository


def run(coro):
    return asyncio.run(coro)


@pytest.fixture()
def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'device.db'}", poolclass=NullPool)

    async def create_tables():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    run(create_tables())
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    run(engine.dispose())


def set_permission(session_factory, granted: bool):
    async def scenario():
        async with session_factory() as db:
            await permission_repository.set_granted(db, POST_NOTIFICATIONS, granted)
    run(scenario())


def shown_notifications(session_factory):
    async def scenario():
        async with session_factory() as db:
            return await notification_repository.get_all(db)
    return run(scenario())


@pytest.fixture()
def notifier(session_factory):
    return LocalNotifier(session_factory=session_factory, sdk_version=34)


class FakeGateway:
    """Stands in for FCMService.send_to_topic"""

    def __init__(self, result="projects/gymtrack/messages/1", error: Exception = None):
        self.result = result
        self.error = error
        self.sent = []

    def send_to_topic(self, topic, title, body, data=None):
        self.sent.append({"topic": topic, "title": title, "body": body, "data": data})
        if self.error:
            raise self.error
        return self.result


class FakeMessaging:
    """Stands in for FCMService.subscribe_to_topic"""

    def __init__(self, result=True, error: Exception = None):
        self.result = result
        self.error = error
        self.subscriptions = []

    async def subscribe_to_topic(self, token, topic):
        self.subscriptions.append((token, topic))
        if self.error:
            raise self.error
        return self.result


@pytest.fixture()
def gateway():
    return FakeGateway()


@pytest.fixture()
def messaging():
    return FakeMessaging()


# ---------- Firestore ----------

class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeDocument:
    def __init__(self, collection, doc_id):
        self.collection = collection
        self.id = doc_id

    async def get(self, transaction=None):
        # a network round trip: other tasks run before the read completes
        await asyncio.sleep(0)
        return FakeSnapshot(self.id, self.collection.docs.get(self.id))

    async def update(self, fields):
        if self.id not in self.collection.docs:
            raise NotFound(f"No document to update: {self.id}")
        self.collection.docs[self.id].update(fields)

    async def delete(self):
        self.collection.docs.pop(self.id, None)


class FakeQuery:
    def __init__(self, collection, filters):
        self.collection = collection
        self.filters = filters

    def where(self, filter=None):
        return FakeQuery(self.collection, self.filters + [filter])

    async def stream(self):
        for doc_id, data in list(self.collection.docs.items()):
            if all(data.get(f.field_path) == f.value for f in self.filters):
                yield FakeSnapshot(doc_id, data)


class FakeCollection(FakeQuery):
    _ids = count(1)

    def __init__(self):
        self.docs = {}
        super().__init__(self, [])

    async def add(self, data):
        doc_id = f"doc{next(self._ids)}"
        self.docs[doc_id] = dict(data)
        return None, FakeDocument(self, doc_id)

    def document(self, doc_id):
        return FakeDocument(self, doc_id)


class FakeTransaction:
    """Buffers writes until commit, like a Firestore transaction"""

    def __init__(self, firestore):
        self.firestore = firestore
        self.writes = []

    def update(self, ref, fields):
        self.writes.append((ref, fields))

    async def commit(self):
        for ref, fields in self.writes:
            await ref.update(fields)
        self.writes = []


def fake_async_transactional(func):
    """Serializes transactions on one client, the outcome Firestore reaches by retrying"""
    async def run_in_transaction(transaction, *args, **kwargs):
        async with transaction.firestore.lock():
            result = await func(transaction, *args, **kwargs)
            await transaction.commit()
            return result
    return run_in_transaction


class FakeFirestore:
    def __init__(self):
        self.collections = {}
        self._locks = {}

    def collection(self, name):
        return self.collections.setdefault(name, FakeCollection())

    def transaction(self):
        return FakeTransaction(self)

    def lock(self):
        # one lock per event loop, tests run each scenario in a fresh loop
        return self._locks.setdefault(asyncio.get_running_loop(), asyncio.Lock())


@pytest.fixture()
def firestore_client(monkeypatch):
    monkeypatch.setattr(firestore_async, "async_transactional", fake_async_transactional, raising=False)
    return FakeFirestore()
