"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing (PBKDF2-SHA256 through passlib)
- JWT token creation/verification
- FastAPI dependencies for protected routes
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from superadmin.core.config import get_settings
from superadmin.core.errors import AuthorizationError, DashboardError
from superadmin.models.session import AdminSession

# Password hashing
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# Bearer token extractor
bearer_scheme = HTTPBearer()

SUPERADMIN_ROLE = "superadmin"


def hash_password(password: str) -> str:
    """Hash password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_at: Optional[datetime] = None) -> str:
    """Create JWT access token."""
    settings = get_settings()
    to_encode = data.copy()
    expire = expires_at or (datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


async def get_current_session(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> AdminSession:
    """
    FastAPI dependency - Get the current admin session.

    Usage:
        @app.get("/protected")
        async def route(session: AdminSession = Depends(get_current_session)):
            return session.to_client_record()
    """
    # imported here: session_service depends on this module for hashing
    from superadmin.services.session_service import resolve_session

    try:
        return resolve_session(credentials.credentials)
    except DashboardError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )


def require_superadmin(session: AdminSession) -> AdminSession:
    """Raise AuthorizationError unless the session belongs to a super admin."""
    if session.role != SUPERADMIN_ROLE:
        raise AuthorizationError("Super admins only")
    return session


async def get_current_superadmin(session: AdminSession = Depends(get_current_session)) -> AdminSession:
    """Dependency - Require the superadmin role (faculty accounts get 403)."""
    return require_superadmin(session)
