"""
Session Service - accounts and admin sessions.

Accounts live in the `users` collection, sessions in `sessions`.

    register_account()  -> create an email/password account
    sign_in()           -> check credentials, open a session, issue a JWT
    resolve_session()   -> JWT -> AdminSession (rejects revoked/expired)
    sign_out()          -> revoke the session

The JWT carries the session id (`sid`), so signing out takes effect
immediately even though the token itself has not expired.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from pymongo.errors import DuplicateKeyError

from superadmin.core.auth import create_access_token, decode_token, hash_password, verify_password
from superadmin.core.config import get_settings
from superadmin.core.errors import (
    AuthenticationError, AuthorizationError, DuplicateAccountError, NotFoundError,
)
from superadmin.models.session import AdminSession
from superadmin.services.document_store import get_store

logger = logging.getLogger(__name__)


def register_account(
    email: str,
    password: str,
    display_name: Optional[str] = None,
    role: Optional[str] = None,
) -> dict:
    """Create an account. Returns the stored account without its hash."""
    settings = get_settings()
    users = get_store("users")
    email = email.strip().lower()
    if users.find(email=email):
        raise DuplicateAccountError(f"Failed to create account: {email} is already registered")

    try:
        account_id = users.create({
            "email": email,
            "password_hash": hash_password(password),
            "displayName": display_name or settings.default_display_name,
            "role": role or settings.default_role,
            "is_active": True,
            "createdAt": datetime.now(timezone.utc),
        })
    except DuplicateKeyError:
        # registered concurrently, caught by the unique email index
        raise DuplicateAccountError(f"Failed to create account: {email} is already registered")
    logger.info("Created account %s (%s)", email, role or settings.default_role)
    account = users.get(account_id)
    account.pop("password_hash", None)
    return account


def can_attribute(role: str) -> bool:
    """Capability check: may writes by this role carry createdBy/updatedBy?"""
    return role in get_settings().attribution_roles


def sign_in(email: str, password: str) -> Tuple[AdminSession, str]:
    """Verify credentials and open a session. Returns (session, token)."""
    settings = get_settings()
    matches = get_store("users").find(email=email.strip().lower())
    account = matches[0] if matches else None
    if not account or not verify_password(password, account.get("password_hash", "")):
        raise AuthenticationError("Invalid email or password")
    if not account.get("is_active", True):
        raise AuthorizationError("Account deactivated")

    now = datetime.now(timezone.utc)
    role = account.get("role") or settings.default_role
    record = {
        "userId": account["id"],
        "role": role,
        "canAttribute": can_attribute(role),
        "createdAt": now,
        "expiresAt": now + timedelta(minutes=settings.jwt_expire_minutes),
        "revokedAt": None,
    }
    session_id = get_store("sessions").create(record)
    session = _build_session(session_id, record, account)

    token = create_access_token(
        data={"sub": account["id"], "sid": session_id, "role": role},
        expires_at=session.expires_at,
    )
    logger.info("Signed in %s", account["email"])
    return session, token


def resolve_session(token: str) -> AdminSession:
    """Turn a bearer token back into a live AdminSession."""
    payload = decode_token(token)
    if not payload or not payload.get("sid"):
        raise AuthenticationError("Invalid or expired token")

    try:
        record = get_store("sessions").get(payload["sid"])
        account = get_store("users").get(record["userId"])
    except NotFoundError:
        raise AuthenticationError("Session not found")

    if record.get("revokedAt"):
        raise AuthenticationError("Session has been signed out")
    if not account.get("is_active", True):
        raise AuthorizationError("Account deactivated")

    session = _build_session(record["id"], record, account)
    if not session.is_valid():
        raise AuthenticationError("Session expired")
    return session


def sign_out(session: AdminSession) -> None:
    """Revoke the session. The session object is invalid afterwards."""
    get_store("sessions").update(session.session_id, {"revokedAt": datetime.now(timezone.utc)})
    session.invalidate()
    logger.info("Signed out %s", session.email)


def _build_session(session_id: str, record: dict, account: dict) -> AdminSession:
    return AdminSession(
        session_id=session_id,
        user_id=account["id"],
        email=account["email"],
        display_name=account.get("displayName") or get_settings().default_display_name,
        role=record["role"],
        can_attribute=record.get("canAttribute", False),
        created_at=_aware(record["createdAt"]),
        expires_at=_aware(record["expiresAt"]),
        revoked=bool(record.get("revokedAt")),
    )


def _aware(value: datetime) -> datetime:
    # Documents read without tz_aware come back naive (UTC)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
