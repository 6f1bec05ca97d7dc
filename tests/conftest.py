# tests/conftest.py
import copy
import queue
import threading
import time
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from bson import ObjectId
from pymongo.errors import AutoReconnect

import superadmin.db.mongodb as mongodb_mod
from superadmin.models.session import AdminSession


# ============================================================
# In-memory stand-in for the slice of pymongo the store touches
# ============================================================

def _matches(doc, query):
    for field, expected in query.items():
        if isinstance(expected, dict) and "$gte" in expected:
            value = doc.get(field)
            if value is None or value < expected["$gte"]:
                return False
        elif isinstance(expected, dict) and "$in" in expected:
            if doc.get(field) not in expected["$in"]:
                return False
        elif doc.get(field) != expected:
            return False
    return True


class FakeChangeStream:
    def __init__(self, collection, max_await_time_ms=None):
        self.collection = collection
        self.events = queue.Queue()
        # keep the watcher thread responsive in tests
        self.wait = min((max_await_time_ms or 1000) / 1000.0, 0.05)
        self.closed = False

    def try_next(self):
        if self.closed:
            return None
        try:
            return self.events.get(timeout=self.wait)
        except queue.Empty:
            return None

    def close(self):
        self.closed = True
        self.collection.drop_stream(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class FakeCollection:
    def __init__(self, db, name):
        self.db = db
        self.name = name
        self.docs = {}
        self.indexes = []
        self.streams = []
        self.write_log = []
        self._failures = []

    # ---- failure injection ----

    def fail_next(self, *errors):
        """Queue errors raised by the next writes, one per write."""
        self._failures.extend(errors or [AutoReconnect("connection reset by peer")])

    def _check_failure(self, operation, payload):
        self.write_log.append((operation, copy.deepcopy(payload)))
        if self._failures:
            raise self._failures.pop(0)

    def _notify(self, operation_type):
        for stream in list(self.streams):
            stream.events.put({"operationType": operation_type, "ns": {"coll": self.name}})

    def drop_stream(self, stream):
        with self.db.lock:
            if stream in self.streams:
                self.streams.remove(stream)

    # ---- reads ----

    def find(self, query=None):
        with self.db.lock:
            return [copy.deepcopy(d) for d in self.docs.values() if _matches(d, query or {})]

    def find_one(self, query=None):
        found = self.find(query)
        return found[0] if found else None

    def count_documents(self, query):
        return len(self.find(query))

    # ---- writes ----

    def insert_one(self, doc):
        with self.db.lock:
            self._check_failure("insert", doc)
            stored = copy.deepcopy(doc)
            stored.setdefault("_id", ObjectId())
            self.docs[stored["_id"]] = stored
            self._notify("insert")
            return SimpleNamespace(inserted_id=stored["_id"])

    def update_one(self, query, update):
        with self.db.lock:
            self._check_failure("update", update.get("$set", {}))
            for doc in self.docs.values():
                if _matches(doc, query):
                    doc.update(copy.deepcopy(update.get("$set", {})))
                    self._notify("update")
                    return SimpleNamespace(matched_count=1, modified_count=1)
            return SimpleNamespace(matched_count=0, modified_count=0)

    def delete_one(self, query):
        with self.db.lock:
            self._check_failure("delete", query)
            for key, doc in list(self.docs.items()):
                if _matches(doc, query):
                    del self.docs[key]
                    self._notify("delete")
                    return SimpleNamespace(deleted_count=1)
            return SimpleNamespace(deleted_count=0)

    def delete_many(self, query):
        with self.db.lock:
            doomed = [k for k, d in self.docs.items() if _matches(d, query)]
            for key in doomed:
                del self.docs[key]
            if doomed:
                self._notify("delete")
            return SimpleNamespace(deleted_count=len(doomed))

    def create_index(self, keys, **kwargs):
        self.indexes.append((keys, kwargs))
        return str(keys)

    def watch(self, max_await_time_ms=None):
        stream = FakeChangeStream(self, max_await_time_ms)
        with self.db.lock:
            self.streams.append(stream)
        return stream


class FakeDatabase:
    def __init__(self):
        self.lock = threading.RLock()
        self.collections = {}

    def __getitem__(self, name):
        with self.lock:
            if name not in self.collections:
                self.collections[name] = FakeCollection(self, name)
            return self.collections[name]

    def command(self, name):
        return {"ok": 1.0}


# ============================================================
# Fixtures
# ============================================================

@pytest.fixture
def fake_db(monkeypatch):
    db = FakeDatabase()
    monkeypatch.setattr(mongodb_mod, "_db", db)
    return db


def make_session(can_attribute=True, role="superadmin", user_id="admin-1", **overrides):
    now = datetime.now(timezone.utc)
    fields = dict(
        session_id="session-1",
        user_id=user_id,
        email="admin@example.com",
        display_name="Super Admin",
        role=role,
        can_attribute=can_attribute,
        created_at=now,
        expires_at=now + timedelta(hours=1),
    )
    fields.update(overrides)
    return AdminSession(**fields)


@pytest.fixture
def admin_session():
    return make_session()


@pytest.fixture
def plain_session():
    """A session whose role may not stamp createdBy / updatedBy."""
    return make_session(can_attribute=False, role="faculty", user_id="faculty-1")


@pytest.fixture
def client(fake_db):
    from fastapi.testclient import TestClient
    from superadmin.main import app

    with TestClient(app) as test_client:
        yield test_client


def login_headers(client, email, password):
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    from superadmin.services.session_service import register_account

    register_account("root@example.com", "secret-pass")
    return login_headers(client, "root@example.com", "secret-pass")


@pytest.fixture
def faculty_headers(client, auth_headers):
    """A faculty member created by the super admin, then signed in."""
    resp = client.post("/api/faculty", headers=auth_headers, json={
        "name": "Dr. Rao", "email": "rao@example.com", "password": "faculty-pass",
    })
    assert resp.status_code == 201, resp.text
    return login_headers(client, "rao@example.com", "faculty-pass")


def wait_for(condition, timeout=3.0):
    """Poll until condition() is truthy (subscription deliveries run on a thread)."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return bool(condition())
