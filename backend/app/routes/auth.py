"""
Kavin's Catalog Backend — Auth Route Handlers
===============================================

What:  Login, logout and the current user.
How:   See AuthService for the online → VIP → offline login chain. A 409
       answer means the credentials match a built-in account and the client
       may retry with `allow_offline=true` after asking the user.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_bearer_token, get_current_user
from app.schemas.common import ErrorResponse
from app.schemas.user import LoginRequest, LoginResponse, MessageResponse, SessionUser
from app.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"description": "Invalid credentials", "model": ErrorResponse},
        403: {"description": "Email confirmation pending", "model": ErrorResponse},
        409: {"description": "Offline mode available", "model": ErrorResponse},
        429: {"description": "Too many attempts", "model": ErrorResponse},
    },
    summary="Sign in",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    return await auth_service.login(db, body.email, body.password, allow_offline=body.allow_offline)


@router.post("/logout", response_model=MessageResponse, summary="Sign out")
async def logout(token: Optional[str] = Depends(get_bearer_token)) -> MessageResponse:
    if token:
        auth_service.logout(token)
    return MessageResponse(message="Signed out")


@router.get(
    "/me",
    response_model=SessionUser,
    responses={401: {"description": "Not signed in", "model": ErrorResponse}},
    summary="Current user",
)
async def me(user: SessionUser = Depends(get_current_user)) -> SessionUser:
    return user
