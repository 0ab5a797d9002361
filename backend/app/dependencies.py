"""
Kavin's Catalog Backend — Request Dependencies
================================================

What:  FastAPI dependencies resolving the caller from the bearer token and
       enforcing role access.
How:   The token is either an offline session token (in-process store) or an
       access token issued by the auth provider; AuthService tells them apart.

Access levels:
    get_optional_user      anonymous visitors allowed (catalog)
    get_current_user       any signed-in user                 → else 401
    require_admin          ADMIN, online or offline           → else 403
    require_online_admin   ADMIN with an online session       → else 403
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import AuthenticationError, PermissionDeniedError
from app.schemas.user import SessionUser, UserRole
from app.services.auth_service import auth_service

bearer_scheme = HTTPBearer(auto_error=False)


async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    return credentials.credentials if credentials else None


async def get_optional_user(
    token: Optional[str] = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[SessionUser]:
    if not token:
        return None
    return await auth_service.resolve_user(db, token)


async def get_current_user(
    user: Optional[SessionUser] = Depends(get_optional_user),
) -> SessionUser:
    if user is None:
        raise AuthenticationError(message="Sign in to continue.")
    return user


async def require_admin(user: SessionUser = Depends(get_current_user)) -> SessionUser:
    if user.role != UserRole.ADMIN:
        raise PermissionDeniedError(
            message="Only administrators can access this area.",
            context={"role": user.role.value},
        )
    return user


async def require_online_admin(user: SessionUser = Depends(require_admin)) -> SessionUser:
    if user.offline:
        raise PermissionDeniedError(
            message="Offline mode is view only. Sign in online to make changes.",
            context={"offline": True},
        )
    return user
