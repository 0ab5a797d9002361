"""
Kavin's Catalog Backend — Auth Service Tests
==============================================

What:  The online → VIP → offline login chain, profiles and sessions.
How:   The Supabase gateway is an AsyncMock; AuthProviderError carries the
       provider message the service branches on.

What we test:
    ✅ Online sign-in loads the profile role
    ✅ VIP auto-provisioning (session, pending confirmation, rate limit)
    ✅ Email not confirmed → AccountConfirmationRequiredError
    ✅ Offline fallback: 409 first, session after opt-in, 401 when no match
    ✅ Missing profile → GUEST "Usuário"; VIP profile recreated
    ✅ Offline session store expiry and logout
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.exceptions import (
    AccountConfirmationRequiredError,
    AuthenticationError,
    AuthProviderError,
    ExternalServiceError,
    OfflineModeAvailableError,
    RateLimitExceededError,
)
from app.models.profile import Profile
from app.schemas.user import User, UserRole
from app.services.auth_service import AuthService, OfflineSessionStore
from app.services.supabase_gateway import AuthSession, SignUpResult


def profile_result(profile):
    result = MagicMock()
    result.scalar_one_or_none.return_value = profile
    return result


class TestOfflineSessionStore:

    def test_open_and_get(self):
        store = OfflineSessionStore(ttl_seconds=60)
        token = store.open(User(id="u1", name="Ana", email="ana@sacola.com", role=UserRole.SACOLEIRA))

        user = store.get(token)

        assert token.startswith("offline-")
        assert user.offline is True
        assert user.role == UserRole.SACOLEIRA
        assert len(store) == 1

    def test_expired_session(self):
        store = OfflineSessionStore(ttl_seconds=60)
        token = store.open(User(id="u1", name="Ana", email="ana@sacola.com", role=UserRole.SACOLEIRA))

        with patch("app.services.auth_service.time.time", return_value=10**12):
            assert store.get(token) is None
        assert len(store) == 0

    def test_close(self):
        store = OfflineSessionStore(ttl_seconds=60)
        token = store.open(User(id="u1", name="Ana", email="ana@sacola.com", role=UserRole.SACOLEIRA))

        assert store.close(token) is True
        assert store.close(token) is False
        assert store.get(token) is None

    def test_unknown_token(self):
        assert OfflineSessionStore(ttl_seconds=60).get("nope") is None

    def test_opening_a_session_drops_expired_ones(self):
        store = OfflineSessionStore(ttl_seconds=60)
        ana = User(id="u1", name="Ana", email="ana@sacola.com", role=UserRole.SACOLEIRA)

        with patch("app.services.auth_service.time.time", return_value=1000):
            abandoned = [store.open(ana) for _ in range(500)]
        with patch("app.services.auth_service.time.time", return_value=10000):
            fresh = store.open(ana)
            assert store.get(fresh) is not None

        assert len(store) == 1
        assert all(store.get(token) is None for token in abandoned)


class TestLoginChain:

    def setup_method(self):
        self.gateway = MagicMock()
        self.gateway.sign_in = AsyncMock()
        self.gateway.sign_up = AsyncMock()
        self.gateway.get_user = AsyncMock()
        self.service = AuthService(gateway=self.gateway, offline_sessions=OfflineSessionStore(60))

    @pytest.mark.asyncio
    async def test_online_sign_in_uses_profile_role(self, mock_db_session):
        self.gateway.sign_in.return_value = AuthSession(
            user_id="uid-1", email="maria@rep.com", access_token="jwt-token"
        )
        mock_db_session.execute.return_value = profile_result(
            Profile(id="uid-1", name="Maria", email="maria@rep.com", role="REPRESENTANTE")
        )

        response = await self.service.login(mock_db_session, "maria@rep.com", "secret")

        assert response.offline is False
        assert response.access_token == "jwt-token"
        assert response.user.role == UserRole.REPRESENTANTE
        assert response.user.name == "Maria"

    @pytest.mark.asyncio
    async def test_vip_is_provisioned_on_invalid_credentials(self, mock_db_session):
        self.gateway.sign_in.side_effect = AuthProviderError("Invalid login credentials")
        self.gateway.sign_up.return_value = SignUpResult(
            user_id="uid-vip", email="representante@kavins.com", access_token="jwt-new"
        )

        response = await self.service.login(mock_db_session, "representante@kavins.com", "pw123456")

        assert response.access_token == "jwt-new"
        assert response.user.role == UserRole.REPRESENTANTE
        self.gateway.sign_up.assert_awaited_once_with(
            "representante@kavins.com", "pw123456", "Representante Kavin"
        )
        profile = mock_db_session.merge.call_args[0][0]
        assert profile.id == "uid-vip"
        assert profile.role == "REPRESENTANTE"

    @pytest.mark.asyncio
    async def test_vip_pending_confirmation_keeps_profile(self, mock_db_session):
        self.gateway.sign_in.side_effect = AuthProviderError("Invalid login credentials")
        self.gateway.sign_up.return_value = SignUpResult(
            user_id="uid-vip", email="sacoleira@kavins.com", access_token=None
        )

        with pytest.raises(AccountConfirmationRequiredError) as exc_info:
            await self.service.login(mock_db_session, "sacoleira@kavins.com", "pw123456")

        assert "SACOLEIRA account created" in exc_info.value.message
        mock_db_session.merge.assert_awaited_once()
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_vip_sign_up_rate_limited(self, mock_db_session):
        self.gateway.sign_in.side_effect = AuthProviderError("Invalid login credentials")
        self.gateway.sign_up.side_effect = AuthProviderError("Email rate limit exceeded")

        with pytest.raises(RateLimitExceededError) as exc_info:
            await self.service.login(mock_db_session, "admin@kavins.com", "whatever")

        assert exc_info.value.retry_after == 60

    @pytest.mark.asyncio
    async def test_vip_already_registered_falls_back_to_offline(self, mock_db_session):
        self.gateway.sign_in.side_effect = AuthProviderError("Invalid login credentials")
        self.gateway.sign_up.side_effect = AuthProviderError("User already registered")

        with pytest.raises(OfflineModeAvailableError):
            await self.service.login(mock_db_session, "admin@kavins.com", "admin123")

    @pytest.mark.asyncio
    async def test_invalid_credentials_for_regular_user(self, mock_db_session):
        self.gateway.sign_in.side_effect = AuthProviderError("Invalid login credentials")

        with pytest.raises(AuthenticationError) as exc_info:
            await self.service.login(mock_db_session, "someone@example.com", "bad")

        assert exc_info.value.message == "Invalid login credentials"
        self.gateway.sign_up.assert_not_called()

    @pytest.mark.asyncio
    async def test_email_not_confirmed(self, mock_db_session):
        self.gateway.sign_in.side_effect = AuthProviderError("Email not confirmed")

        with pytest.raises(AccountConfirmationRequiredError) as exc_info:
            await self.service.login(mock_db_session, "maria@rep.com", "123")

        assert exc_info.value.email == "maria@rep.com"

    @pytest.mark.asyncio
    async def test_offline_mode_is_offered_first(self, mock_db_session):
        self.gateway.sign_in.side_effect = AuthProviderError("Failed to fetch")

        with pytest.raises(OfflineModeAvailableError) as exc_info:
            await self.service.login(mock_db_session, "ana@sacola.com", "123")

        assert exc_info.value.context["offline_available"] is True
        assert len(self.service.offline_sessions) == 0

    @pytest.mark.asyncio
    async def test_offline_session_after_opt_in(self, mock_db_session):
        self.gateway.sign_in.side_effect = AuthProviderError("Failed to fetch")

        response = await self.service.login(
            mock_db_session, "ana@sacola.com", "123", allow_offline=True
        )

        assert response.offline is True
        assert response.user.id == "user-003"
        resolved = await self.service.resolve_user(mock_db_session, response.access_token)
        assert resolved.offline is True
        assert resolved.role == UserRole.SACOLEIRA
        self.gateway.get_user.assert_not_called()

    @pytest.mark.asyncio
    async def test_offline_wrong_password(self, mock_db_session):
        self.gateway.sign_in.side_effect = AuthProviderError("Failed to fetch")

        with pytest.raises(AuthenticationError) as exc_info:
            await self.service.login(mock_db_session, "ana@sacola.com", "wrong", allow_offline=True)

        assert exc_info.value.message == "Failed to fetch"

    @pytest.mark.asyncio
    async def test_offline_fallback_disabled(self, mock_db_session):
        self.gateway.sign_in.side_effect = AuthProviderError("Failed to fetch")

        with patch("app.services.auth_service.settings") as mock_settings:
            mock_settings.offline_fallback_enabled = False
            with pytest.raises(AuthenticationError):
                await self.service.login(mock_db_session, "ana@sacola.com", "123", allow_offline=True)


class TestProfilesAndSessions:

    def setup_method(self):
        self.gateway = MagicMock()
        self.gateway.get_user = AsyncMock()
        self.service = AuthService(gateway=self.gateway, offline_sessions=OfflineSessionStore(60))

    @pytest.mark.asyncio
    async def test_missing_profile_is_guest(self, mock_db_session):
        mock_db_session.execute.return_value = profile_result(None)

        user = await self.service.load_profile(mock_db_session, "uid-9", "new@example.com")

        assert user.role == UserRole.GUEST
        assert user.name == "Usuário"
        mock_db_session.merge.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_stored_role_reads_as_guest(self, mock_db_session):
        mock_db_session.execute.return_value = profile_result(
            Profile(id="uid-7", name="Caio", email="caio@example.com", role="VENDEDOR")
        )

        user = await self.service.load_profile(mock_db_session, "uid-7", "caio@example.com")

        assert user.role == UserRole.GUEST
        assert user.name == "Caio"

    @pytest.mark.asyncio
    async def test_missing_vip_profile_is_recreated(self, mock_db_session):
        mock_db_session.execute.return_value = profile_result(None)

        user = await self.service.load_profile(mock_db_session, "uid-1", "Admin@Kavins.com")

        assert user.role == UserRole.ADMIN
        mock_db_session.merge.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_profile_read_error_counts_as_missing(self, mock_db_session):
        mock_db_session.execute.side_effect = Exception("relation does not exist")

        user = await self.service.load_profile(mock_db_session, "uid-9", "new@example.com")

        assert user.role == UserRole.GUEST
        mock_db_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_profile_upsert_failure_is_not_fatal(self, mock_db_session):
        mock_db_session.execute.return_value = profile_result(None)
        mock_db_session.merge.side_effect = Exception("permission denied")

        user = await self.service.load_profile(mock_db_session, "uid-1", "admin@kavins.com")

        assert user.role == UserRole.ADMIN

    @pytest.mark.asyncio
    async def test_resolve_online_token(self, mock_db_session):
        self.gateway.get_user.return_value = AuthSession(
            user_id="uid-1", email="maria@rep.com", access_token="jwt"
        )
        mock_db_session.execute.return_value = profile_result(
            Profile(id="uid-1", name="Maria", email="maria@rep.com", role="REPRESENTANTE")
        )

        user = await self.service.resolve_user(mock_db_session, "jwt")

        assert user.offline is False
        assert user.role == UserRole.REPRESENTANTE

    @pytest.mark.asyncio
    async def test_resolve_invalid_token(self, mock_db_session):
        self.gateway.get_user.return_value = None
        assert await self.service.resolve_user(mock_db_session, "expired") is None

    @pytest.mark.asyncio
    async def test_resolve_when_platform_unavailable(self, mock_db_session):
        self.gateway.get_user.side_effect = ExternalServiceError("down")
        assert await self.service.resolve_user(mock_db_session, "jwt") is None

    def test_logout_closes_offline_session(self):
        token = self.service.offline_sessions.open(
            User(id="admin-001", name="Admin", email="admin@kavins.com", role=UserRole.ADMIN)
        )

        self.service.logout(token)

        assert self.service.offline_sessions.get(token) is None
