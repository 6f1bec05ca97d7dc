"""
Error taxonomy for the dashboard.

Every caller-facing failure is a DashboardError carrying a provider-style
`code`. The code prefix decides the message shown to the admin
(see describe_error) and the HTTP status returned by the API.

    auth/...            -> authentication problems
    permission-denied   -> no session / not allowed
    store/...           -> document store problems
"""

from typing import Optional


class DashboardError(Exception):
    """Base class for all dashboard errors."""

    code = "unknown"
    status_code = 500

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class AuthenticationError(DashboardError):
    """Bad credentials, or a token/session that is unknown, revoked or expired."""

    code = "auth/invalid-credentials"
    status_code = 401


class DuplicateAccountError(DashboardError):
    code = "auth/email-already-in-use"
    status_code = 400


class AuthorizationError(DashboardError):
    """No authenticated session. Raised before any network attempt."""

    code = "permission-denied"
    status_code = 403

    def __init__(self, message: str = "You must be logged in to perform this action"):
        super().__init__(message)


class WritePermissionError(AuthorizationError):
    """The store itself refused the write. Never retried."""


class WriteError(DashboardError):
    """A mutation failed after the unattributed retry."""

    code = "store/write-failed"
    status_code = 502


class NotFoundError(DashboardError):
    code = "store/not-found"
    status_code = 404


class ApplicationNotFoundError(DashboardError):
    """A test assignment has no Application for its (student, internship) pair."""

    code = "store/failed-precondition"
    status_code = 400


class AggregateSyncError(DashboardError):
    """Recounting a derived field failed. Logged and swallowed by callers."""

    code = "store/aggregate-sync"


# Message selection by code prefix
PERMISSION_MESSAGE = (
    "You don't have permission to perform this action. "
    "Please contact your administrator."
)
GENERIC_MESSAGE = "An unexpected error occurred. Please try again."


def describe_error(error: Exception) -> str:
    """Pick a human-readable message for an error, matching on its code prefix."""
    code = getattr(error, "code", None) or ""
    message = getattr(error, "message", None) or str(error)

    if code == "permission-denied":
        return PERMISSION_MESSAGE
    if code.startswith("auth/"):
        return f"Authentication error: {message}"
    if code.startswith("store/"):
        return f"Database error: {message}"
    return message or GENERIC_MESSAGE
