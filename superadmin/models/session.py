"""
Admin session - the explicit "who is acting" object.

A session is created on sign-in and handed to every service that writes.
It stops being valid when it is revoked (sign-out) or when it expires.
`can_attribute` is decided once, at sign-in, from the account's role.
"""

import json
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel


class AdminSession(BaseModel):
    session_id: str
    user_id: str
    email: str
    display_name: str
    role: str
    can_attribute: bool = False
    created_at: datetime
    expires_at: datetime
    revoked: bool = False

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return not self.revoked and now < self.expires_at

    def invalidate(self) -> None:
        self.revoked = True

    def to_client_record(self) -> dict:
        """The record a browser caches under its single local key."""
        return {
            "id": self.user_id,
            "email": self.email,
            "displayName": self.display_name,
            "role": self.role,
        }

    def to_client_json(self) -> str:
        return json.dumps(self.to_client_record())
