"""
Resilient Mutation Wrapper

Every create/update in the dashboard goes through ResilientWriter.write():

1. Fail fast with AuthorizationError when there is no valid session.
2. Build the enriched payload:
       payload + timestamp (createdAt / updatedAt)
               + status="active" on create (unless given)
               + attribution (createdBy / updatedBy) when the session may attribute
3. Attempt the write.
4. If it fails, log it and retry ONCE with the attribution field removed.
5. If the retry fails too, raise WriteError.

At most two physical writes per logical write. The attribution field is
best-effort and never required for success.

Whether a session may attribute is decided once at sign-in from the
account role (AdminSession.can_attribute). A store error that says the
caller is unauthorized is raised at once as WritePermissionError instead of
being retried as if the attribution field were the problem.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from pymongo.errors import OperationFailure, PyMongoError

from superadmin.core.errors import AuthorizationError, WriteError, WritePermissionError
from superadmin.models.session import AdminSession
from superadmin.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

CREATE = "create"
UPDATE = "update"

# MongoDB "Unauthorized"
UNAUTHORIZED_CODE = 13


@dataclass(frozen=True)
class StampFields:
    """Names of the fields a write is stamped with."""
    timestamp: str
    attribution: str
    default_status: Optional[str] = None


CREATE_FIELDS = StampFields("createdAt", "createdBy", "active")
UPDATE_FIELDS = StampFields("updatedAt", "updatedBy")
ASSIGN_FIELDS = StampFields("assignedAt", "assignedBy", "assigned")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def require_session(session: Optional[AdminSession]) -> AdminSession:
    """Raise AuthorizationError unless `session` is present and still valid."""
    if session is None or not session.is_valid():
        raise AuthorizationError()
    return session


class ResilientWriter:
    """Performs attributed writes on behalf of one admin session."""

    def __init__(self, session: Optional[AdminSession], clock: Callable[[], datetime] = utcnow):
        self.session = session
        self.clock = clock

    def require_session(self) -> AdminSession:
        return require_session(self.session)

    def create(self, store: DocumentStore, payload: Dict[str, Any], fields: StampFields = CREATE_FIELDS) -> str:
        return self.write(store, CREATE, payload, fields=fields)

    def update(self, store: DocumentStore, doc_id: str, payload: Dict[str, Any]) -> dict:
        return self.write(store, UPDATE, payload, doc_id=doc_id)

    def enrich(self, operation: str, payload: Dict[str, Any], fields: StampFields) -> Dict[str, Any]:
        """payload + timestamp (+ default status on create). No attribution."""
        data = dict(payload)
        data[fields.timestamp] = self.clock()
        if operation == CREATE and fields.default_status:
            data.setdefault("status", fields.default_status)
        return data

    def write(
        self,
        store: DocumentStore,
        operation: str,
        payload: Dict[str, Any],
        doc_id: Optional[str] = None,
        fields: Optional[StampFields] = None,
    ):
        """
        Run one logical write. Returns the new id for create and the
        updated document for update.
        """
        session = self.require_session()
        if operation not in (CREATE, UPDATE):
            raise ValueError(f"Unsupported operation: {operation}")
        if operation == UPDATE:
            if doc_id is None:
                raise ValueError("update requires a document id")
            # NotFoundError here is surfaced as-is, no retry
            store.get(doc_id)

        fields = fields or (CREATE_FIELDS if operation == CREATE else UPDATE_FIELDS)
        data = self.enrich(operation, payload, fields)
        attributed = dict(data)
        if session.can_attribute:
            attributed[fields.attribution] = session.user_id

        last_error = None
        for attempt, body in enumerate((attributed, data), start=1):
            try:
                return self._apply(store, operation, body, doc_id)
            except OperationFailure as e:
                if e.code == UNAUTHORIZED_CODE:
                    raise WritePermissionError(
                        f"Not allowed to {operation} {store.label}: {e}"
                    ) from e
                last_error = e
            except PyMongoError as e:
                last_error = e
            if attempt == 1:
                logger.warning(
                    "Could not %s %s with %s, trying without it: %s",
                    operation, store.name, fields.attribution, last_error,
                )

        logger.error("Failed to %s %s after retry: %s", operation, store.name, last_error)
        raise WriteError(f"Failed to {operation} {store.label}: {last_error}") from last_error

    @staticmethod
    def _apply(store: DocumentStore, operation: str, body: Dict[str, Any], doc_id: Optional[str]):
        if operation == CREATE:
            return store.create(body)
        return store.update(doc_id, body)
