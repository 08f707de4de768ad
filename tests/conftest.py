"""
Shared fixtures: an in-memory stand-in for ``pymongo.MongoClient``.

The fake understands just what the service uses:
``find(filter).sort(key, direction).limit(n)`` with ``{}``,
``{field: {"$gt": value}}`` and ``{"$or": [...]}`` filters,
``admin.command("ping")`` and ``close()``. Like MongoDB, ``$gt`` only
matches values of the same type bracket and sorting groups by bracket.
"""

import pytest
from bson import ObjectId
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

import connection


def _bracket(value):
    if value is None:
        return 0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return 1
    if isinstance(value, str):
        return 2
    if isinstance(value, ObjectId):
        return 3
    return 4


def _matches(doc, query):
    for field, condition in query.items():
        if field == "$or":
            if not any(_matches(doc, branch) for branch in condition):
                return False
            continue
        if field not in doc:
            return False
        value, lower = doc[field], condition["$gt"]
        if _bracket(value) != _bracket(lower) or not value > lower:
            return False
    return True


class FakeCursor:
    def __init__(self, collection, docs):
        self._collection = collection
        self._docs = list(docs)

    def sort(self, key, direction=1):
        self._collection.sorts.append((key, direction))
        self._docs.sort(
            key=lambda d: (_bracket(d.get(key)), d.get(key)), reverse=direction == -1
        )
        return self

    def limit(self, n):
        self._collection.limits.append(n)
        if n:
            self._docs = self._docs[:n]
        return self

    def __iter__(self):
        return iter(self._docs)


class FakeCollection:
    def __init__(self, store, docs):
        self._store = store
        self.docs = list(docs)
        self.queries = []
        self.sorts = []
        self.limits = []

    def find(self, query=None):
        query = query or {}
        self.queries.append(query)
        if self._store.fail_query:
            raise OperationFailure("not authorized on test to execute command")
        return FakeCursor(self, [d for d in self.docs if _matches(d, query)])


class FakeDatabase:
    def __init__(self, store, name):
        self._store = store
        self.name = name

    def __getitem__(self, collection_name):
        if collection_name not in self._store.collections:
            self._store.add(collection_name, [])
        return self._store.collections[collection_name]


class FakeAdmin:
    def __init__(self, store):
        self._store = store

    def command(self, name):
        if self._store.fail_connect:
            raise ServerSelectionTimeoutError("localhost:27017: [Errno 111] Connection refused")
        return {"ok": 1.0}


class FakeMongoClient:
    def __init__(self, store, uri, **options):
        self._store = store
        self.uri = uri
        self.options = options
        self.closed = False
        self.admin = FakeAdmin(store)

    def __getitem__(self, database_name):
        return FakeDatabase(self._store, database_name)

    def close(self):
        self.closed = True


class FakeStore:
    """Holds collections by name and every client handed out."""

    def __init__(self):
        self.collections = {}
        self.clients = []
        self.fail_connect = False
        self.fail_query = False

    def add(self, name, docs):
        self.collections[name] = FakeCollection(self, docs)
        return self.collections[name]

    def client_factory(self, uri, **options):
        client = FakeMongoClient(self, uri, **options)
        self.clients.append(client)
        return client


@pytest.fixture
def mongo_store(monkeypatch):
    store = FakeStore()
    monkeypatch.setattr(connection, "MongoClient", store.client_factory)
    return store


@pytest.fixture
def db_config():
    return {
        "MONGODB_HOST": "localhost",
        "MONGODB_PORT": "27017",
        "MONGODB_USERNAME": "",
        "MONGODB_PASSWORD": "",
        "MONGODB_NAME": "test",
        "TABLE_NAME": "users",
    }
