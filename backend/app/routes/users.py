"""
Kavin's Catalog Backend — Admin User Route Handlers
=====================================================

What:  User management for administrators.
How:   Offline admin sessions may list (the built-in accounts) but not write.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import require_admin, require_online_admin
from app.schemas.common import ErrorResponse
from app.schemas.user import SessionUser, User, UserCreate, UserListResponse
from app.services.user_service import user_service

router = APIRouter(
    prefix="/api/admin/users",
    tags=["Admin users"],
    responses={
        401: {"description": "Not signed in", "model": ErrorResponse},
        403: {"description": "Not an administrator, or offline session", "model": ErrorResponse},
    },
)


@router.get("", response_model=UserListResponse, summary="List users")
async def list_users(
    db: AsyncSession = Depends(get_db_session),
    admin: SessionUser = Depends(require_admin),
) -> UserListResponse:
    users = await user_service.list_users(db, offline=admin.offline)
    return UserListResponse(users=users, offline=admin.offline)


@router.post(
    "",
    response_model=User,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Rejected by the auth provider", "model": ErrorResponse}},
    summary="Create a user",
)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db_session),
    _admin: SessionUser = Depends(require_online_admin),
) -> User:
    return await user_service.add_user(db, body)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Delete a user profile",
)
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
    _admin: SessionUser = Depends(require_online_admin),
) -> Response:
    await user_service.delete_user(db, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
