"""
docshelf test fixtures.

Provides an in-memory stand-in for the slice of the motor API the repository
uses, plus a controllable clock.
"""

from __future__ import annotations

import copy
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import bson
import pytest
from bson import ObjectId
from pydantic import Field
from pymongo.errors import OperationFailure
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult

from docshelf.configs.settings import MongoSettings
from docshelf.crud.base import SoftDeleteRepository
from docshelf.databases.mongodb import MongoDB
from docshelf.models import BaseDocument

_MISSING = object()


def _lookup(doc: Dict[str, Any], path: str) -> Any:
    value: Any = doc
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _matches(doc: Dict[str, Any], query: Dict[str, Any]) -> bool:
    for key, expected in query.items():
        if key == "$and":
            if not all(_matches(doc, sub) for sub in expected):
                return False
            continue
        value = _lookup(doc, key)
        if expected is None:
            # Mongo semantics: null matches both null and missing
            if value is not _MISSING and value is not None:
                return False
        elif value is _MISSING or value != expected:
            return False
    return True


def _encodable(doc: Dict[str, Any]) -> Dict[str, Any]:
    # Raises InvalidDocument for values the driver could not send
    bson.encode(doc)
    return doc


def _set(doc: Dict[str, Any], path: str, value: Any) -> None:
    *parents, leaf = path.split(".")
    target = doc
    for part in parents:
        if not isinstance(target.get(part), dict):
            target[part] = {}
        target = target[part]
    target[leaf] = copy.deepcopy(value)


class FakeCursor:
    def __init__(self, docs: List[Dict[str, Any]]):
        self._docs = docs
        self._skip = 0
        self._limit = 0

    def skip(self, n: int) -> "FakeCursor":
        self._skip = n
        return self

    def limit(self, n: int) -> "FakeCursor":
        self._limit = n
        return self

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        docs = self._docs[self._skip:]
        if self._limit:
            docs = docs[: self._limit]
        if length is not None:
            docs = docs[:length]
        return [copy.deepcopy(doc) for doc in docs]


class FakeCollection:
    """Documents kept in insertion order, which stands in for natural order."""

    def __init__(self, name: str):
        self.name = name
        self.docs: List[Dict[str, Any]] = []
        self.failing_ids: set = set()

    def _first(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        _encodable(query)
        return next((doc for doc in self.docs if _matches(doc, query)), None)

    async def insert_one(self, document: Dict[str, Any], session=None) -> InsertOneResult:
        document.setdefault("_id", ObjectId())
        _encodable(document)
        self.docs.append(copy.deepcopy(document))
        return InsertOneResult(document["_id"], True)

    async def find_one(self, query: Dict[str, Any], session=None) -> Optional[Dict[str, Any]]:
        doc = self._first(query)
        return copy.deepcopy(doc) if doc is not None else None

    def find(self, query: Dict[str, Any], session=None) -> FakeCursor:
        _encodable(query)
        return FakeCursor([doc for doc in self.docs if _matches(doc, query)])

    async def update_one(self, query: Dict[str, Any], update: Dict[str, Any], session=None) -> UpdateResult:
        _encodable(update)
        doc = self._first(query)
        if doc is None:
            return UpdateResult({"n": 0, "nModified": 0}, True)
        if doc["_id"] in self.failing_ids:
            raise OperationFailure(f"write failed for {doc['_id']}")
        for path, value in update.get("$set", {}).items():
            _set(doc, path, value)
        return UpdateResult({"n": 1, "nModified": 1}, True)

    async def delete_one(self, query: Dict[str, Any], session=None) -> DeleteResult:
        doc = self._first(query)
        if doc is None:
            return DeleteResult({"n": 0}, True)
        self.docs.remove(doc)
        return DeleteResult({"n": 1}, True)

    async def delete_many(self, query: Dict[str, Any], session=None) -> DeleteResult:
        doomed = [doc for doc in self.docs if _matches(doc, query)]
        self.docs = [doc for doc in self.docs if not _matches(doc, query)]
        return DeleteResult({"n": len(doomed)}, True)

    async def count_documents(self, query: Dict[str, Any], session=None) -> int:
        _encodable(query)
        return sum(1 for doc in self.docs if _matches(doc, query))

    def raw(self, id: Any) -> Optional[Dict[str, Any]]:
        """Direct store-level lookup, bypassing the repository"""
        return self._first({"_id": id})


class FakeDatabase:
    def __init__(self, name: str):
        self.name = name
        self.collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection(name))


class FakeSession:
    def __init__(self, client: "FakeClient"):
        self.client = client

    async def end_session(self) -> None:
        self.client.sessions_ended += 1


class FakeClient:
    def __init__(self):
        self.databases: Dict[str, FakeDatabase] = {}
        self.sessions_started = 0
        self.sessions_ended = 0
        self.closed = False

    def __getitem__(self, name: str) -> FakeDatabase:
        return self.databases.setdefault(name, FakeDatabase(name))

    async def start_session(self) -> FakeSession:
        self.sessions_started += 1
        return FakeSession(self)

    def close(self) -> None:
        self.closed = True


class Item(BaseDocument):
    name: str
    price: int = 0
    tags: List[str] = Field(default_factory=list)


@pytest.fixture
def mongo_settings():
    return MongoSettings(MONGO_DB="test_db")


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def mongodb(mongo_settings, fake_client):
    return MongoDB(mongo_settings, client=fake_client)


@pytest.fixture
def repository(mongodb):
    return SoftDeleteRepository(mongodb)


@pytest.fixture
def items(fake_client) -> FakeCollection:
    """The raw "items" collection behind the repository"""
    return fake_client["test_db"]["items"]


@pytest.fixture
def clock(monkeypatch):
    """Replace the repository clock with one that advances a second per call."""

    class Clock:
        def __init__(self):
            self.now = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

        def __call__(self) -> datetime:
            self.now += timedelta(seconds=1)
            return self.now

    fake = Clock()
    monkeypatch.setattr("docshelf.crud.base.utc_now", fake)
    return fake
