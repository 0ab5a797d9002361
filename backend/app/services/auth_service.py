"""
Kavin's Catalog Backend — Auth Service
========================================

What:  Sign-in, session resolution and profile loading.
How:   Delegates credentials to the auth provider (Supabase) and keeps only
       the `profiles` row locally. Offline sessions, which exist when the
       provider is unreachable, live in an in-process store.
Who:   Auth routes and the `get_current_user` dependency.

Login fallback chain:
    1. sign_in(email, password)                            → online session
    2. "Invalid login credentials" + VIP email
         → sign_up + profile upsert                        → online session
         → no session returned (email confirmation pending) → 403
         → provider rate limit                             → 429
    3. "Email not confirmed"                               → 403
    4. anything else → built-in account with same email/password?
         → allow_offline                                   → offline session
         → not yet                                         → 409 (ask the user)
         → no match                                        → 401
"""

import logging
import secrets
import time
from typing import Dict, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import (
    AccountConfirmationRequiredError,
    AuthenticationError,
    AuthProviderError,
    CatalogError,
    OfflineModeAvailableError,
    RateLimitExceededError,
)
from app.models.profile import Profile
from app.schemas.user import LoginResponse, SessionUser, User, UserRole
from app.seed import find_seed_user, find_vip
from app.services.product_service import rollback_quietly
from app.services.supabase_gateway import AuthSession, SupabaseGateway, supabase_gateway

logger = logging.getLogger(__name__)

GUEST_NAME = "Usuário"


class OfflineSessionStore:
    """Bearer tokens of offline (view-only) sessions, with expiry."""

    def __init__(self, ttl_seconds: int):
        self.ttl_seconds = ttl_seconds
        self._sessions: Dict[str, Tuple[SessionUser, float]] = {}

    def open(self, user: User) -> str:
        now = time.time()
        self._purge(now)
        token = f"offline-{secrets.token_urlsafe(32)}"
        session_user = SessionUser(**user.model_dump(include={"id", "name", "email", "role"}), offline=True)
        self._sessions[token] = (session_user, now + self.ttl_seconds)
        return token

    def get(self, token: str) -> Optional[SessionUser]:
        entry = self._sessions.get(token)
        if entry is None:
            return None
        user, expires_at = entry
        if time.time() >= expires_at:
            del self._sessions[token]
            return None
        return user

    def close(self, token: str) -> bool:
        return self._sessions.pop(token, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)

    def _purge(self, now: float) -> None:
        expired = [token for token, (_, expires_at) in self._sessions.items() if now >= expires_at]
        for token in expired:
            del self._sessions[token]
        if expired:
            logger.debug("Dropped %d expired offline sessions", len(expired))


class AuthService:

    def __init__(
        self,
        gateway: SupabaseGateway = supabase_gateway,
        offline_sessions: Optional[OfflineSessionStore] = None,
    ):
        self.gateway = gateway
        self.offline_sessions = offline_sessions or OfflineSessionStore(settings.offline_session_ttl)

    # ── Login ─────────────────────────────────────────────────────────────

    async def login(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        allow_offline: bool = False,
    ) -> LoginResponse:
        try:
            session = await self.gateway.sign_in(email, password)
        except AuthProviderError as e:
            logger.info("Online sign-in failed for %s: %s", email, e.provider_message)
            return await self._recover_sign_in(db, email, password, allow_offline, e)

        user = await self.load_profile(db, session.user_id, session.email)
        logger.info("User %s signed in online as %s", email, user.role.value)
        return LoginResponse(user=user, access_token=session.access_token, offline=False)

    async def _recover_sign_in(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        allow_offline: bool,
        error: AuthProviderError,
    ) -> LoginResponse:
        vip = find_vip(email)
        if error.is_invalid_credentials and vip:
            response = await self._provision_vip(db, email, password, vip, allow_offline)
            if response is not None:
                return response
        elif error.is_email_not_confirmed:
            raise AccountConfirmationRequiredError(email=email)

        return self._offline_login(email, password, allow_offline, error.provider_message)

    async def _provision_vip(
        self,
        db: AsyncSession,
        email: str,
        password: str,
        vip: Dict[str, object],
        allow_offline: bool,
    ) -> Optional[LoginResponse]:
        """
        Create the account of a known email on its first sign-in.

        Returns None when the provider created no user, so the caller falls
        back to offline mode.
        """
        role = vip["role"]
        name = str(vip["name"])
        logger.info("VIP account %s (%s) not found, signing it up", email, role.value)

        try:
            result = await self.gateway.sign_up(email, password, name)
        except AuthProviderError as e:
            if e.is_rate_limited:
                raise RateLimitExceededError(
                    retry_after=60,
                    message="Too many attempts. Please wait a minute and try again.",
                    context={"email": email},
                )
            logger.warning("VIP sign-up failed for %s: %s", email, e.provider_message)
            return self._offline_login(email, password, allow_offline, e.provider_message)

        if not result.user_id:
            return None

        user = User(id=result.user_id, name=name, email=email, role=role)
        await self._upsert_profile(db, user)

        if not result.access_token:
            # The error response rolls the request session back; keep the profile
            await db.commit()
            raise AccountConfirmationRequiredError(
                email=email,
                message=(
                    f"{role.value} account created. Confirm the email sent to {email} "
                    "before signing in."
                ),
            )
        return LoginResponse(user=user, access_token=result.access_token, offline=False)

    def _offline_login(
        self,
        email: str,
        password: str,
        allow_offline: bool,
        provider_message: str,
    ) -> LoginResponse:
        seed_user = find_seed_user(email, password)
        if seed_user is None or not settings.offline_fallback_enabled:
            raise AuthenticationError(
                message=provider_message or "Unknown login error",
                context={"email": email},
            )
        if not allow_offline:
            raise OfflineModeAvailableError(email=email)

        token = self.offline_sessions.open(seed_user)
        user = User(**seed_user.model_dump(exclude={"password"}))
        logger.warning("User %s entered OFFLINE mode (view only)", email)
        return LoginResponse(user=user, access_token=token, offline=True)

    # ── Profiles ──────────────────────────────────────────────────────────

    async def load_profile(self, db: AsyncSession, user_id: str, email: str) -> User:
        """
        Profile row for an authenticated account.

        A missing profile is created for VIP emails; anyone else is a GUEST.
        """
        try:
            result = await db.execute(select(Profile).where(Profile.id == user_id))
            profile = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Error loading profile %s: %s", user_id, str(e))
            await rollback_quietly(db)
            profile = None

        if profile is not None:
            return User(
                id=profile.id,
                name=profile.name,
                email=profile.email,
                role=UserRole.from_stored(profile.role),
            )

        vip = find_vip(email)
        if vip:
            logger.info("Profile %s not found, creating it from the VIP list", email)
            user = User(id=user_id, name=str(vip["name"]), email=email, role=vip["role"])
            await self._upsert_profile(db, user)
            return user

        return User(id=user_id, name=GUEST_NAME, email=email, role=UserRole.GUEST)

    async def _upsert_profile(self, db: AsyncSession, user: User) -> None:
        try:
            async with db.begin_nested():
                await db.merge(
                    Profile(id=user.id, name=user.name, email=user.email, role=user.role.value)
                )
        except Exception as e:
            # The account exists at the provider; the profile is retried on next sign-in
            logger.warning("Could not upsert profile for %s: %s", user.email, str(e))

    # ── Sessions ──────────────────────────────────────────────────────────

    async def resolve_user(self, db: AsyncSession, token: str) -> Optional[SessionUser]:
        offline_user = self.offline_sessions.get(token)
        if offline_user is not None:
            return offline_user

        try:
            session: Optional[AuthSession] = await self.gateway.get_user(token)
        except CatalogError as e:
            logger.warning("Token validation unavailable: %s", e.message)
            return None
        if session is None:
            return None

        user = await self.load_profile(db, session.user_id, session.email)
        return SessionUser(**user.model_dump(), offline=False)

    def logout(self, token: str) -> None:
        if self.offline_sessions.close(token):
            logger.info("Offline session closed")


auth_service = AuthService()
