"""
Shared fixtures: an in-memory stand-in for the MongoDB helpers used by main.py.
"""
from types import SimpleNamespace

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pydantic import BaseModel

import database
import main


class MemoryStore:
    def __init__(self):
        self.collections = {}

    def _coll(self, name):
        return self.collections.setdefault(name, {})

    def create_document(self, collection_name, data):
        doc = data.model_dump() if isinstance(data, BaseModel) else dict(data)
        oid = ObjectId()
        doc["_id"] = oid
        self._coll(collection_name)[str(oid)] = doc
        return str(oid)

    def get_documents(self, collection_name, filter_dict=None, limit=None):
        filter_dict = filter_dict or {}
        docs = [
            dict(d) for d in self._coll(collection_name).values()
            if all(d.get(k) == v for k, v in filter_dict.items())
        ]
        return docs[:limit] if limit else docs

    def get_document(self, collection_name, document_id):
        doc = self._coll(collection_name).get(document_id)
        return dict(doc) if doc else None

    def update_document(self, collection_name, document_id, data):
        coll = self._coll(collection_name)
        if document_id not in coll:
            return False
        doc = data.model_dump() if isinstance(data, BaseModel) else dict(data)
        coll[document_id].update(doc)
        return True

    def delete_document(self, collection_name, document_id):
        return self._coll(collection_name).pop(document_id, None) is not None


@pytest.fixture
def store(monkeypatch):
    memory = MemoryStore()
    for name in ("create_document", "get_documents", "get_document", "update_document", "delete_document"):
        monkeypatch.setattr(main, name, getattr(memory, name))
    return memory


@pytest.fixture
def client(store):
    return TestClient(main.app)


class FakeCursor(list):
    def limit(self, n):
        return FakeCursor(self[:n])


class FakeCollection:
    """Just enough of a pymongo Collection for the database helpers."""

    def __init__(self):
        self.docs = {}
        self.updates = []

    def insert_one(self, doc):
        doc["_id"] = ObjectId()
        self.docs[doc["_id"]] = doc
        return SimpleNamespace(inserted_id=doc["_id"])

    def find(self, filter_dict):
        return FakeCursor(
            dict(d) for d in self.docs.values()
            if all(d.get(k) == v for k, v in filter_dict.items())
        )

    def find_one(self, filter_dict):
        doc = self.docs.get(filter_dict["_id"])
        return dict(doc) if doc else None

    def update_one(self, filter_dict, update):
        self.updates.append(update)
        doc = self.docs.get(filter_dict["_id"])
        if doc is not None:
            doc.update(update["$set"])
        return SimpleNamespace(matched_count=1 if doc is not None else 0)

    def delete_one(self, filter_dict):
        removed = self.docs.pop(filter_dict["_id"], None)
        return SimpleNamespace(deleted_count=1 if removed is not None else 0)


class FakeDatabase(dict):
    def __missing__(self, name):
        self[name] = FakeCollection()
        return self[name]


@pytest.fixture
def fake_db(monkeypatch):
    fake = FakeDatabase()
    monkeypatch.setattr(database, "db", fake)
    return fake


@pytest.fixture
def db_client(fake_db):
    """Client whose routes go through the real database helpers."""
    return TestClient(main.app)
