"""
Document Store Adapter - one uniform wrapper per MongoDB collection.

Every dashboard collection is reached through a DocumentStore:
    list()            -> all documents
    get(id)           -> one document (NotFoundError if missing)
    find(**equals)    -> documents matching equality predicates
    count(**equals)   -> number of matching documents
    create(payload)   -> new id
    update(id, data)  -> updated document
    delete(id)        -> None (NotFoundError if missing)
    subscribe(cb)     -> SnapshotSubscription

The adapter never validates payload shape. Documents come back as plain
dicts with the ObjectId exposed as a string `id`.

Realtime:
    subscribe() opens a change stream, delivers the full collection right
    away, then re-delivers the full collection after every change anywhere
    in it (never deltas). Call unsubscribe() on teardown.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from bson import ObjectId
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from superadmin.core.config import get_settings
from superadmin.core.errors import NotFoundError
from superadmin.db.mongodb import get_collection, COLLECTIONS

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[List[dict]], Any]
Projection = Callable[[List[dict]], List[dict]]

# Subscription callbacks never run in parallel with each other
_dispatch_lock = threading.RLock()


# ============================================================
# HELPER: Convert ObjectId to string id for JSON serialization
# ============================================================

def serialize_doc(doc: dict) -> Optional[dict]:
    """Convert MongoDB document to a plain dict with a string `id`."""
    if doc is None:
        return None
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    return doc


def serialize_docs(docs) -> List[dict]:
    return [serialize_doc(doc) for doc in docs]


def _clean_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    # ids are assigned by the store, never written by callers
    return {k: v for k, v in payload.items() if k not in ("_id", "id")}


# ============================================================
# DOCUMENT STORE
# ============================================================

class DocumentStore:
    """CRUD + snapshot subscriptions for one named collection."""

    def __init__(self, name: str, label: Optional[str] = None):
        self.name = name
        self.label = label or name

    @property
    def collection(self) -> Collection:
        return get_collection(self.name)

    def object_id(self, doc_id) -> ObjectId:
        if isinstance(doc_id, ObjectId):
            return doc_id
        if not doc_id or not ObjectId.is_valid(str(doc_id)):
            raise NotFoundError(f"{self.label} document doesn't exist")
        return ObjectId(str(doc_id))

    def list(self) -> List[dict]:
        return serialize_docs(self.collection.find({}))

    def find(self, **equals) -> List[dict]:
        return serialize_docs(self.collection.find(equals))

    def count(self, **equals) -> int:
        return self.collection.count_documents(equals)

    def get(self, doc_id) -> dict:
        doc = self.collection.find_one({"_id": self.object_id(doc_id)})
        if doc is None:
            raise NotFoundError(f"{self.label} document doesn't exist")
        return serialize_doc(doc)

    def exists(self, doc_id) -> bool:
        try:
            self.get(doc_id)
        except NotFoundError:
            return False
        return True

    def create(self, payload: Dict[str, Any]) -> str:
        # insert_one adds `_id` to the dict it is given; keep the caller's copy clean
        result = self.collection.insert_one(_clean_payload(payload))
        return str(result.inserted_id)

    def update(self, doc_id, payload: Dict[str, Any]) -> dict:
        oid = self.object_id(doc_id)
        result = self.collection.update_one({"_id": oid}, {"$set": _clean_payload(payload)})
        if result.matched_count == 0:
            raise NotFoundError(f"{self.label} document doesn't exist")
        return self.get(oid)

    def delete(self, doc_id) -> None:
        result = self.collection.delete_one({"_id": self.object_id(doc_id)})
        if result.deleted_count == 0:
            raise NotFoundError(f"{self.label} document doesn't exist")

    def subscribe(
        self,
        on_change: SnapshotCallback,
        projection: Optional[Projection] = None,
        poll_seconds: Optional[float] = None,
    ) -> "SnapshotSubscription":
        subscription = SnapshotSubscription(self, on_change, projection, poll_seconds)
        return subscription.start()

    def __repr__(self) -> str:
        return f"DocumentStore({self.name!r})"


# ============================================================
# SNAPSHOT SUBSCRIPTION
# ============================================================

class SnapshotSubscription:
    """
    Watches one collection and pushes the whole materialized collection to
    `on_change` on start and after every change.

    A daemon thread polls the change stream with try_next(); each event
    triggers a full re-read (plus the optional projection step).
    """

    def __init__(
        self,
        store: DocumentStore,
        on_change: SnapshotCallback,
        projection: Optional[Projection] = None,
        poll_seconds: Optional[float] = None,
    ):
        self.store = store
        self.on_change = on_change
        self.projection = projection
        self.poll_seconds = poll_seconds or get_settings().subscription_poll_seconds
        self._stream = None
        self._thread: Optional[threading.Thread] = None
        self._cancelled = threading.Event()

    @property
    def active(self) -> bool:
        return self._thread is not None and not self._cancelled.is_set()

    def start(self) -> "SnapshotSubscription":
        # Open the stream before reading, so a write landing between the
        # first snapshot and the watch is still reported.
        stream = self.store.collection.watch(
            max_await_time_ms=int(self.poll_seconds * 1000)
        )
        self._stream = stream
        try:
            self._deliver()
        except PyMongoError:
            stream.close()
            raise
        # unsubscribed while starting (start() may run on a worker thread)
        if self._cancelled.is_set():
            stream.close()
            return self
        self._thread = threading.Thread(
            target=self._run,
            name=f"snapshot-{self.store.name}",
            daemon=True,
        )
        self._thread.start()
        return self

    def snapshot(self) -> List[dict]:
        docs = self.store.list()
        if self.projection is not None:
            docs = self.projection(docs)
        return docs

    def _deliver(self) -> None:
        docs = self.snapshot()
        with _dispatch_lock:
            if self._cancelled.is_set():
                return
            try:
                self.on_change(docs)
            except Exception:
                logger.exception("Snapshot callback for %s raised", self.store.name)

    def _run(self) -> None:
        stream = self._stream
        try:
            while not self._cancelled.is_set():
                change = stream.try_next()
                if change is None or self._cancelled.is_set():
                    continue
                self._deliver()
        except PyMongoError as e:
            if not self._cancelled.is_set():
                logger.error("Snapshot subscription on %s stopped: %s", self.store.name, e)
                self._cancelled.set()
        finally:
            stream.close()

    def unsubscribe(self, wait: bool = True) -> None:
        """
        Stop watching and release the change stream. Safe to call twice.

        With wait=False the call never blocks: the watcher thread closes the
        stream itself within one poll interval.
        """
        already_cancelled = self._cancelled.is_set()
        self._cancelled.set()
        if not already_cancelled:
            logger.debug("Unsubscribed from %s", self.store.name)
        thread = self._thread
        if thread is not None and thread.is_alive():
            if not wait or thread is threading.current_thread():
                return
            thread.join(timeout=self.poll_seconds * 2 + 1)
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.unsubscribe()


# ============================================================
# REGISTRY: one store per dashboard collection
# ============================================================

STORE_LABELS = {
    "faculty": "Faculty",
    "students": "Student",
    "internships": "Internship",
    "applications": "Application",
    "tests": "Test",
    "test_assignments": "Test assignment",
    "users": "Account",
    "sessions": "Session",
}

_stores: Dict[str, DocumentStore] = {}


def get_store(key: str) -> DocumentStore:
    """
    Get the DocumentStore for a collection key from COLLECTIONS.

    Usage:
        get_store("faculty").list()
    """
    if key not in COLLECTIONS:
        raise KeyError(f"Unknown collection: {key}")
    if key not in _stores:
        _stores[key] = DocumentStore(COLLECTIONS[key], STORE_LABELS.get(key))
    return _stores[key]
