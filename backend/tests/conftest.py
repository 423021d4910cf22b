"""
TourAvels Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   HTTP tests run against a real MongoStore wired to an in-memory driver
       double, so no MongoDB server is needed.
How:   FakeClientFactory stands in for AsyncMongoClient. It hands out clients
       whose collections implement the five calls RecordService makes
       (find().to_list, find_one, insert_one, update_one, delete_one).

Fixture Hierarchy:
    ├── test_settings:   Settings pointing at a dummy URI, one connect attempt
    ├── client_factory:  FakeClientFactory (set .failures to simulate outages)
    ├── store:           Connected MongoStore over the fake driver
    ├── test_client:     HTTPX AsyncClient against create_app(store)
    └── offline_client:  Same, but the store never connected
"""

import os
from types import SimpleNamespace
from typing import Any, Dict, List

import bson
import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from pymongo.errors import ServerSelectionTimeoutError

# Override settings for testing BEFORE any app imports
os.environ["MONGODB_URI"] = "mongodb://localhost:27017/touravels_test"
os.environ["DB_CONNECT_ATTEMPTS"] = "1"
os.environ["DB_CONNECT_MIN_WAIT"] = "0"
os.environ["LOG_LEVEL"] = "WARNING"

from touravels.config import Settings  # noqa: E402
from touravels.database import MongoStore  # noqa: E402
from touravels.main import create_app  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# In-Memory Driver Double
# ══════════════════════════════════════════════════════════════════════════

def _matches(document: Dict[str, Any], query: Dict[str, Any]) -> bool:
    return all(document.get(key) == value for key, value in query.items())


class FakeCursor:
    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents

    async def to_list(self, length=None):
        return list(self._documents if length is None else self._documents[:length])


class FakeCollection:
    """
    Dict-backed collection with pymongo-shaped results.

    Writes are BSON-encoded first, as the driver does, so payloads the
    server could never store fail here the same way.
    """

    def __init__(self, name: str):
        self.name = name
        self.documents: Dict[ObjectId, Dict[str, Any]] = {}

    def find(self, query=None):
        query = query or {}
        return FakeCursor(
            [dict(doc) for doc in self.documents.values() if _matches(doc, query)]
        )

    async def find_one(self, query):
        for doc in self.documents.values():
            if _matches(doc, query):
                return dict(doc)
        return None

    async def insert_one(self, document):
        document.setdefault("_id", ObjectId())
        bson.encode(document)
        self.documents[document["_id"]] = dict(document)
        return SimpleNamespace(acknowledged=True, inserted_id=document["_id"])

    async def update_one(self, query, update):
        bson.encode(update)
        for doc in self.documents.values():
            if _matches(doc, query):
                changes = update.get("$set", {})
                modified = any(doc.get(k, object()) != v for k, v in changes.items())
                doc.update(changes)
                return SimpleNamespace(
                    acknowledged=True,
                    matched_count=1,
                    modified_count=1 if modified else 0,
                    upserted_id=None,
                )
        return SimpleNamespace(
            acknowledged=True, matched_count=0, modified_count=0, upserted_id=None
        )

    async def delete_one(self, query):
        for key, doc in list(self.documents.items()):
            if _matches(doc, query):
                del self.documents[key]
                return SimpleNamespace(acknowledged=True, deleted_count=1)
        return SimpleNamespace(acknowledged=True, deleted_count=0)


class FakeDatabase:
    def __init__(self):
        self.collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection(name))


class FakeAdmin:
    def __init__(self, client: "FakeMongoClient"):
        self._client = client

    async def command(self, name: str):
        if self._client.reachable is False:
            raise ServerSelectionTimeoutError("No servers found yet")
        return {"ok": 1.0}


class FakeMongoClient:
    def __init__(self, factory: "FakeClientFactory", reachable: bool):
        self.factory = factory
        self.reachable = reachable
        self.closed = False
        self.admin = FakeAdmin(self)

    def __getitem__(self, name: str) -> FakeDatabase:
        return self.factory.databases.setdefault(name, FakeDatabase())

    async def close(self):
        self.closed = True


class FakeClientFactory:
    """
    Callable with AsyncMongoClient's signature.

    `failures` clients are built unreachable before reachable ones are
    handed out; data lives on the factory so reconnects see the same records.
    """

    def __init__(self, failures: int = 0):
        self.failures = failures
        self.clients: List[FakeMongoClient] = []
        self.calls: List[Dict[str, Any]] = []
        self.databases: Dict[str, FakeDatabase] = {}

    def __call__(self, uri, **kwargs):
        self.calls.append({"uri": uri, **kwargs})
        reachable = self.failures <= 0
        self.failures -= 1
        client = FakeMongoClient(self, reachable)
        self.clients.append(client)
        return client


# ══════════════════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings():
    """Settings for tests: dummy URI, single attempt, no backoff."""
    return Settings(
        mongodb_uri="mongodb://localhost:27017/touravels_test",
        db_connect_attempts=1,
        db_connect_min_wait=0,
        log_level="WARNING",
    )


@pytest.fixture
def client_factory():
    return FakeClientFactory()


@pytest_asyncio.fixture
async def store(test_settings, client_factory):
    """A connected MongoStore over the in-memory driver."""
    mongo_store = MongoStore(test_settings, client_factory=client_factory)
    await mongo_store.connect()
    yield mongo_store
    await mongo_store.close()


@pytest_asyncio.fixture
async def test_client(store):
    """
    HTTPX AsyncClient talking to the app in-process.

    ASGITransport does not run the lifespan; the store fixture is already
    connected, which is what the lifespan would have done.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    app = create_app(store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def offline_client(test_settings):
    """Client for an app whose store never connected (cluster unreachable)."""
    factory = FakeClientFactory(failures=1000)
    app = create_app(MongoStore(test_settings, client_factory=factory))
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
