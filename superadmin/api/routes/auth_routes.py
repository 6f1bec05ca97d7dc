"""
Authentication Routes

POST /auth/register - Create an account (super admins only)
POST /auth/login - Sign in, open a session and get a JWT token
POST /auth/logout - Sign out (revokes the session behind the token)
GET /auth/me - Get the cached client record for the current session
"""

from fastapi import APIRouter, Depends

from superadmin.core.auth import get_current_session, get_current_superadmin
from superadmin.models.session import AdminSession
from superadmin.services.session_service import register_account, sign_in, sign_out
from superadmin.schemas.schemas import (
    RegisterRequest, LoginRequest, TokenResponse, ClientRecord, MessageResponse
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(request: RegisterRequest, session: AdminSession = Depends(get_current_superadmin)):
    """
    Create an account on behalf of a signed-in super admin.

    The first super admin is created with scripts/create_superadmin.py.
    After registration, the new account logs in to get an access token.
    """
    register_account(
        email=request.email,
        password=request.password,
        display_name=request.displayName,
        role=request.role.value,
    )
    return MessageResponse(message=f"Registered successfully as {request.role.value}. Please login.")


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    The returned `user` record is what the dashboard keeps in local storage.
    """
    session, token = sign_in(request.email, request.password)
    return TokenResponse(access_token=token, user=ClientRecord(**session.to_client_record()))


@router.post("/logout", response_model=MessageResponse)
async def logout(session: AdminSession = Depends(get_current_session)):
    """Sign out. The token stops working immediately."""
    sign_out(session)
    return MessageResponse(message="You have been successfully logged out.")


@router.get("/me", response_model=ClientRecord)
async def get_me(session: AdminSession = Depends(get_current_session)):
    """Get current authenticated admin's record."""
    return ClientRecord(**session.to_client_record())
