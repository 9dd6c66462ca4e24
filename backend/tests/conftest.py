# shared fixtures for backend tests
# provides an in-memory motor-like database, a store bound to it, seeded
# users/plants/notes, auth tokens, and httpx test clients

import copy

import pytest
import pytest_asyncio
from unittest.mock import MagicMock
from bson import ObjectId

from httpx import AsyncClient, ASGITransport

from plantjournal.main import app
from plantjournal.services.db import Database
from plantjournal.services.store import JournalStore, get_store
from plantjournal.services.auth_service import create_access_token


# test ids
USER_OID = ObjectId()
OTHER_USER_OID = ObjectId()
PLANT_1_OID = ObjectId()
PLANT_2_OID = ObjectId()
NOTE_A_OID = ObjectId()
NOTE_B_OID = ObjectId()
USER_ID = str(USER_OID)
OTHER_USER_ID = str(OTHER_USER_OID)
PLANT_1_ID = str(PLANT_1_OID)
PLANT_2_ID = str(PLANT_2_OID)
NOTE_A_ID = str(NOTE_A_OID)
NOTE_B_ID = str(NOTE_B_OID)


# documents as they'd appear in mongodb

USER_DOC = {
    "_id": USER_OID,
    "name": "Guy Ellis",
    "email": "guy@example.com",
    "facebook": {"id": "fb-1001", "name": "Guy Ellis"},
    "createdAt": "2016-01-01T00:00:00+00:00",
}

OTHER_USER_DOC = {
    "_id": OTHER_USER_OID,
    "name": "Other Gardener",
    "facebook": {"id": "fb-2002", "name": "Other Gardener"},
    "createdAt": "2016-02-01T00:00:00+00:00",
}

PLANT_1_DOC = {
    "_id": PLANT_1_OID,
    "userId": USER_OID,
    "title": "Fig",
    "botanicalName": "Ficus carica",
}

PLANT_2_DOC = {
    "_id": PLANT_2_OID,
    "userId": USER_OID,
    "title": "Lemon",
}

# note A only references plant 1, note B references plants 1 and 2
NOTE_A_DOC = {
    "_id": NOTE_A_OID,
    "userId": USER_OID,
    "plantIds": [PLANT_1_OID],
    "date": "2016-03-01",
    "note": "Pruned the fig",
}

NOTE_B_DOC = {
    "_id": NOTE_B_OID,
    "userId": USER_OID,
    "plantIds": [PLANT_1_OID, PLANT_2_OID],
    "date": "2016-03-02",
    "note": "Fertilized both",
}


# in-memory motor stand-ins

def _get_path(doc, key):
    """resolve a dotted key like facebook.id"""
    value = doc
    for part in key.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _value_matches(doc_val, value):
    # array fields match when any element matches, like mongodb
    if isinstance(doc_val, list) and not isinstance(value, list):
        return value in doc_val
    return doc_val == value


class AsyncCursorMock:
    """mock for motor's async cursor - supports async for and chained methods"""

    def __init__(self, data=None):
        self._data = data or []
        self._index = 0

    def sort(self, key_or_list, direction=None):
        keys = key_or_list if isinstance(key_or_list, list) else [(key_or_list, direction or 1)]
        for key, order in reversed(keys):
            self._data = sorted(
                self._data,
                key=lambda d: (_get_path(d, key) is None, _get_path(d, key) or ""),
                reverse=order == -1,
            )
        return self

    def skip(self, n):
        self._data = self._data[n:]
        return self

    def limit(self, n):
        self._data = self._data[:n]
        return self

    def __aiter__(self):
        self._index = 0
        return self

    async def __anext__(self):
        if self._index >= len(self._data):
            raise StopAsyncIteration
        item = self._data[self._index]
        self._index += 1
        return item

    async def to_list(self, length=None):
        if length is not None:
            return self._data[:length]
        return self._data


class MockCollection:
    """mock for a motor collection with async methods. returns copies so
    callers can't mutate stored documents, the way a real round trip behaves."""

    def __init__(self, data=None):
        self._data = data or []
        self.inserted = []
        self.calls = []

    def find(self, query=None, projection=None):
        self.calls.append(("find", query))
        results = self._data
        if query:
            results = [d for d in results if self._matches(d, query)]
        return AsyncCursorMock([copy.deepcopy(d) for d in results])

    async def find_one(self, query=None, projection=None):
        for doc in self._data:
            if not query or self._matches(doc, query):
                return copy.deepcopy(doc)
        return None

    async def insert_one(self, doc):
        self.calls.append(("insert_one", doc))
        oid = doc.get("_id") or ObjectId()
        doc["_id"] = oid
        self._data.append(copy.deepcopy(doc))
        self.inserted.append(doc)
        result = MagicMock()
        result.inserted_id = oid
        return result

    async def update_one(self, query, update, upsert=False):
        self.calls.append(("update_one", query))
        result = MagicMock()
        result.matched_count = 0
        result.modified_count = 0
        for doc in self._data:
            if self._matches(doc, query):
                if "$set" in update:
                    doc.update(copy.deepcopy(update["$set"]))
                result.matched_count = 1
                result.modified_count = 1
                break
        return result

    async def bulk_write(self, requests, ordered=True):
        self.calls.append(("bulk_write", requests))
        matched = modified = 0
        for op in requests:
            single = await self.update_one(op._filter, op._doc)
            matched += single.matched_count
            modified += single.modified_count
        result = MagicMock()
        result.matched_count = matched
        result.modified_count = modified
        return result

    async def delete_many(self, query):
        self.calls.append(("delete_many", query))
        keep = [d for d in self._data if not self._matches(d, query)]
        result = MagicMock()
        result.deleted_count = len(self._data) - len(keep)
        self._data = keep
        return result

    def ops(self, name):
        return [args for op, args in self.calls if op == name]

    def _matches(self, doc, query):
        """basic mongodb query matching for tests"""
        for key, value in query.items():
            doc_val = _get_path(doc, key)
            if isinstance(value, dict) and "$in" in value:
                candidates = doc_val if isinstance(doc_val, list) else [doc_val]
                if not any(c in value["$in"] for c in candidates):
                    return False
            elif not _value_matches(doc_val, value):
                return False
        return True


class MockDatabase:
    """mock motor database - collections are created on first access"""

    def __init__(self, collections=None):
        self.collections = {name: MockCollection(docs) for name, docs in (collections or {}).items()}
        self.admin = MagicMock()

    def __getitem__(self, name):
        if name not in self.collections:
            self.collections[name] = MockCollection([])
        return self.collections[name]

    @property
    def user(self):
        return self["user"]

    @property
    def plant(self):
        return self["plant"]

    @property
    def note(self):
        return self["note"]


def seeded_collections():
    return {
        "user": [copy.deepcopy(USER_DOC), copy.deepcopy(OTHER_USER_DOC)],
        "plant": [copy.deepcopy(PLANT_1_DOC), copy.deepcopy(PLANT_2_DOC)],
        "note": [copy.deepcopy(NOTE_A_DOC), copy.deepcopy(NOTE_B_DOC)],
    }


@pytest.fixture
def mock_db():
    """fresh seeded mock database for each test"""
    return MockDatabase(seeded_collections())


@pytest.fixture
def store(mock_db):
    """journal store whose connection manager already holds the mock database"""
    database = Database("mongodb://test/plant", "plant")
    database.db = mock_db
    return JournalStore(database)


@pytest.fixture
def user_token():
    """jwt access token for the seeded user"""
    return create_access_token({"sub": USER_ID})


@pytest.fixture
def other_user_token():
    return create_access_token({"sub": OTHER_USER_ID})


@pytest_asyncio.fixture
async def client(store):
    """httpx async test client with the store overridden"""

    async def override_get_store():
        return store

    app.dependency_overrides[get_store] = override_get_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def user_client(client, user_token):
    """client authenticated as the seeded user"""
    client.headers["Authorization"] = f"Bearer {user_token}"
    yield client


@pytest_asyncio.fixture
async def other_user_client(client, other_user_token):
    client.headers["Authorization"] = f"Bearer {other_user_token}"
    yield client
