"""
Pytest configuration and fixtures
"""
import copy
from datetime import timedelta
from typing import Any, Dict, List, Optional

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from core.database import set_database
from services.portfolio_normalization import utcnow


USER_ID = "user-123"
OTHER_USER_ID = "user-456"
SESSION_TOKEN = "test-session-token"
OTHER_SESSION_TOKEN = "other-session-token"


# ------------------------------
# In-memory stand-in for the async MongoDB collections
# ------------------------------

class FakeInsertResult:
    def __init__(self, inserted_id):
        self.inserted_id = inserted_id


class FakeDeleteResult:
    def __init__(self, deleted_count: int):
        self.deleted_count = deleted_count


def _matches(doc: Dict[str, Any], filter_dict: Dict[str, Any]) -> bool:
    return all(key in doc and doc[key] == value for key, value in filter_dict.items())


class FakeCursor:
    def __init__(self, docs: List[Dict[str, Any]]):
        self._docs = docs

    def sort(self, key: str, direction: int = 1):
        self._docs = sorted(self._docs, key=lambda doc: doc.get(key), reverse=direction < 0)
        return self

    def skip(self, count: int):
        self._docs = self._docs[count:]
        return self

    def limit(self, count: int):
        if count:
            self._docs = self._docs[:count]
        return self

    async def to_list(self, length: Optional[int] = None):
        docs = self._docs if length is None else self._docs[:length]
        return [copy.deepcopy(doc) for doc in docs]


class FakeCollection:
    def __init__(self):
        self.docs: List[Dict[str, Any]] = []
        self.fail_with: Optional[Exception] = None

    def _check_failure(self):
        if self.fail_with is not None:
            raise self.fail_with

    async def find_one(self, filter_dict: Dict[str, Any], projection: Optional[Dict[str, Any]] = None):
        self._check_failure()
        for doc in self.docs:
            if _matches(doc, filter_dict):
                if projection:
                    return {key: doc[key] for key in projection if key in doc}
                return copy.deepcopy(doc)
        return None

    def find(self, filter_dict: Dict[str, Any]):
        self._check_failure()
        return FakeCursor([doc for doc in self.docs if _matches(doc, filter_dict)])

    async def insert_one(self, document: Dict[str, Any]):
        self._check_failure()
        stored = copy.deepcopy(document)
        stored.setdefault("_id", ObjectId())
        self.docs.append(stored)
        return FakeInsertResult(stored["_id"])

    async def find_one_and_update(self, filter_dict, update, return_document=None):
        self._check_failure()
        for doc in self.docs:
            if _matches(doc, filter_dict):
                for key, value in update.get("$set", {}).items():
                    doc[key] = copy.deepcopy(value)
                for key, amount in update.get("$inc", {}).items():
                    doc[key] = doc.get(key, 0) + amount
                return copy.deepcopy(doc)
        return None

    async def delete_one(self, filter_dict: Dict[str, Any]):
        self._check_failure()
        for index, doc in enumerate(self.docs):
            if _matches(doc, filter_dict):
                del self.docs[index]
                return FakeDeleteResult(1)
        return FakeDeleteResult(0)


class FakeDatabase:
    def __init__(self):
        self.collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())

    async def list_collection_names(self):
        return list(self.collections)


# ------------------------------
# Fixtures
# ------------------------------

@pytest.fixture(autouse=True)
def fake_db():
    """Every test gets a fresh in-memory database with two live sessions."""
    database = FakeDatabase()
    expires = utcnow() + timedelta(days=1)
    database["sessions"].docs.extend(
        [
            {"_id": ObjectId(), "sessionToken": SESSION_TOKEN, "userId": USER_ID, "expires": expires},
            {"_id": ObjectId(), "sessionToken": OTHER_SESSION_TOKEN, "userId": OTHER_USER_ID, "expires": expires},
        ]
    )
    set_database(database)
    yield database
    set_database(None)


@pytest.fixture
def portfolios(fake_db) -> FakeCollection:
    return fake_db["portfolios"]


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {SESSION_TOKEN}"}


@pytest.fixture
def other_auth_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {OTHER_SESSION_TOKEN}"}


@pytest.fixture
def client() -> TestClient:
    from main import app

    return TestClient(app)
