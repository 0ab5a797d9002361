"""
Kavin's Catalog Backend — Supabase Gateway
============================================

What:  Thin wrapper over the Supabase Python client for auth and storage.
How:   Every SDK call is blocking, so each one runs in Starlette's threadpool.
       Auth calls use a fresh client per call: the SDK keeps the signed-in
       session on the client object, and the server signs in many users.
       SDK exceptions are translated into AuthProviderError /
       ExternalServiceError so callers never import SDK types.
Who:   AuthService, UserService and ImageService.

Not implemented here (owned by the platform):
    password storage, email confirmation, token issuing, row-level security,
    object storage and public URL serving.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from starlette.concurrency import run_in_threadpool
from supabase import Client, create_client

from app.config import settings
from app.exceptions import AuthProviderError, ExternalServiceError, FileStorageError

logger = logging.getLogger(__name__)


@dataclass
class AuthSession:
    user_id: str
    email: str
    access_token: str


@dataclass
class SignUpResult:
    user_id: Optional[str]
    email: str
    # None while the account waits for email confirmation
    access_token: Optional[str]


def _error_message(exc: Exception) -> str:
    return getattr(exc, "message", None) or str(exc)


class SupabaseGateway:

    def __init__(self) -> None:
        self._storage_client: Optional[Client] = None

    @property
    def configured(self) -> bool:
        return settings.supabase_configured

    def _new_client(self) -> Client:
        if not self.configured:
            raise AuthProviderError(
                "Auth platform is not configured (SUPABASE_URL / SUPABASE_ANON_KEY missing)"
            )
        return create_client(settings.supabase_url, settings.supabase_anon_key)

    def _storage(self) -> Client:
        if not self.configured:
            raise FileStorageError(
                message="Image storage is not configured.",
                context={"bucket": settings.storage_bucket},
            )
        if self._storage_client is None:
            self._storage_client = create_client(settings.supabase_url, settings.supabase_anon_key)
        return self._storage_client

    # ── Auth ──────────────────────────────────────────────────────────────

    async def sign_in(self, email: str, password: str) -> AuthSession:
        def _call() -> AuthSession:
            client = self._new_client()
            try:
                response = client.auth.sign_in_with_password(
                    {"email": email, "password": password}
                )
            except Exception as exc:
                raise AuthProviderError(_error_message(exc), context={"email": email})
            if response.user is None or response.session is None:
                raise AuthProviderError("Invalid login credentials", context={"email": email})
            return AuthSession(
                user_id=str(response.user.id),
                email=response.user.email or email,
                access_token=response.session.access_token,
            )

        return await run_in_threadpool(_call)

    async def sign_up(self, email: str, password: str, name: str) -> SignUpResult:
        def _call() -> SignUpResult:
            client = self._new_client()
            try:
                response = client.auth.sign_up(
                    {
                        "email": email,
                        "password": password,
                        "options": {"data": {"name": name}},
                    }
                )
            except Exception as exc:
                raise AuthProviderError(_error_message(exc), context={"email": email})
            return SignUpResult(
                user_id=str(response.user.id) if response.user else None,
                email=email,
                access_token=response.session.access_token if response.session else None,
            )

        return await run_in_threadpool(_call)

    async def get_user(self, access_token: str) -> Optional[AuthSession]:
        """Validates a bearer token with the provider. None when it is not valid."""
        def _call() -> Optional[AuthSession]:
            client = self._new_client()
            try:
                response = client.auth.get_user(access_token)
            except Exception as exc:
                logger.info("Token rejected by auth provider: %s", _error_message(exc))
                return None
            if response is None or response.user is None:
                return None
            return AuthSession(
                user_id=str(response.user.id),
                email=response.user.email or "",
                access_token=access_token,
            )

        return await run_in_threadpool(_call)

    # ── Storage ───────────────────────────────────────────────────────────

    async def upload_image(self, path: str, content: bytes, content_type: str = "image/jpeg") -> str:
        """Uploads bytes to the product bucket and returns the public URL."""
        def _call() -> str:
            bucket = self._storage().storage.from_(settings.storage_bucket)
            try:
                bucket.upload(path, content, {"content-type": content_type})
            except Exception as exc:
                raise FileStorageError(
                    message="Failed to upload image. Please try again.",
                    context={"path": path, "error": _error_message(exc)},
                )
            return bucket.get_public_url(path)

        url = await run_in_threadpool(_call)
        logger.info("Image uploaded: %s (%d bytes)", path, len(content))
        return url

    async def health_check(self) -> bool:
        return self.configured


supabase_gateway = SupabaseGateway()


def require_platform() -> None:
    """Raises ExternalServiceError when auth/storage credentials are missing."""
    if not supabase_gateway.configured:
        raise ExternalServiceError(
            message="The account platform is not configured on this server.",
        )
