"""
Kavin's Catalog Backend — User Management Service
===================================================

What:  Lists, creates and removes catalog accounts for the admin screen.
How:   Accounts are created at the auth provider (sign-up) and described
       by a `profiles` row holding name, email and role. Offline sessions
       cannot reach either, so they are shown the built-in accounts.
Who:   Admin user routes.
"""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    AuthProviderError,
    DatabaseError,
    ExternalServiceError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitExceededError,
    ValidationError,
)
from app.models.profile import Profile
from app.schemas.user import User, UserCreate, UserRole
from app.seed import INITIAL_USERS
from app.services.supabase_gateway import SupabaseGateway, require_platform, supabase_gateway

logger = logging.getLogger(__name__)


def _to_user(profile: Profile) -> User:
    return User(id=profile.id, name=profile.name, email=profile.email, role=UserRole.from_stored(profile.role))


class UserService:

    def __init__(self, gateway: SupabaseGateway = supabase_gateway):
        self.gateway = gateway

    async def list_users(self, db: AsyncSession, offline: bool = False) -> List[User]:
        if offline:
            return [User(**u.model_dump(exclude={"password"})) for u in INITIAL_USERS]

        try:
            result = await db.execute(select(Profile).order_by(Profile.name))
            return [_to_user(p) for p in result.scalars().all()]
        except Exception as e:
            logger.error("Database error listing profiles: %s", str(e))
            raise DatabaseError(message="Could not load the users. Please try again.")

    async def add_user(self, db: AsyncSession, data: UserCreate) -> User:
        """
        Create an account at the provider, then its profile with the chosen role.

        The provider may hold the account until its email is confirmed; the
        profile is written either way so the role applies on first sign-in.
        """
        require_platform()
        try:
            result = await self.gateway.sign_up(data.email, data.password, data.name)
        except AuthProviderError as e:
            if e.is_rate_limited:
                raise RateLimitExceededError(
                    retry_after=60,
                    message="Too many sign-ups. Please wait a minute and try again.",
                )
            raise ValidationError(message=e.provider_message, field="email")

        if not result.user_id:
            raise ExternalServiceError(
                message="The account could not be created. Please try again.",
                context={"email": data.email},
            )

        user = User(id=result.user_id, name=data.name, email=data.email, role=data.role)
        try:
            await db.merge(
                Profile(id=user.id, name=user.name, email=user.email, role=user.role.value)
            )
            await db.flush()
        except Exception as e:
            logger.error("Profile insert failed for %s: %s", data.email, str(e), exc_info=True)
            raise DatabaseError(
                message="The account was created but its profile could not be saved.",
                context={"user_id": user.id},
            )

        logger.info("User created: %s (%s)", user.email, user.role.value)
        return user

    async def delete_user(self, db: AsyncSession, user_id: str) -> None:
        """
        Remove a profile. The provider account stays; without a profile it
        signs in as GUEST and sees no prices.
        """
        try:
            profile = await db.get(Profile, user_id)
        except Exception as e:
            logger.error("Database error fetching profile %s: %s", user_id, str(e))
            raise DatabaseError(message="Could not load the user. Please try again.")

        if profile is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        if profile.role == UserRole.ADMIN.value:
            raise PermissionDeniedError(message="Administrator accounts cannot be deleted.")

        try:
            await db.delete(profile)
            await db.flush()
        except Exception as e:
            logger.error("Delete error for profile %s: %s", user_id, str(e))
            raise DatabaseError(message="Error deleting the user.", context={"user_id": user_id})
        logger.info("User deleted: %s", profile.email)


user_service = UserService()
