"""
Kavin's Catalog Backend — Rate Limiting Tests
===============================================

What we test:
    ✅ Sliding window admits up to the limit, then reports retry-after
    ✅ Old hits leave the window
    ✅ Keys are independent
    ✅ Login attempts are throttled with a 429 JSON body and Retry-After
"""

import pytest
from httpx import ASGITransport, AsyncClient

from app.config import settings
from app.database import get_db_session
from app.middleware.rate_limit import SlidingWindow


class TestSlidingWindow:

    def test_allows_up_to_limit(self):
        window = SlidingWindow("test")
        results = [window.hit("1.2.3.4", limit=3, window=60, now=1000 + i) for i in range(3)]
        assert results == [None, None, None]

    def test_rejects_with_retry_after(self):
        window = SlidingWindow("test")
        for i in range(3):
            window.hit("1.2.3.4", limit=3, window=60, now=1000 + i)

        retry_after = window.hit("1.2.3.4", limit=3, window=60, now=1010)

        # The oldest hit (t=1000) leaves the window at t=1060
        assert retry_after == 51

    def test_window_slides(self):
        window = SlidingWindow("test")
        for i in range(3):
            window.hit("1.2.3.4", limit=3, window=60, now=1000 + i)

        assert window.hit("1.2.3.4", limit=3, window=60, now=1061) is None

    def test_keys_are_independent(self):
        window = SlidingWindow("test")
        window.hit("a", limit=1, window=60, now=1000)

        assert window.hit("a", limit=1, window=60, now=1001) is not None
        assert window.hit("b", limit=1, window=60, now=1001) is None


class TestLoginThrottling:

    @pytest.mark.asyncio
    async def test_login_attempts_are_limited(self, monkeypatch, mock_db_session):
        from app.main import create_app

        monkeypatch.setattr(settings, "login_rate_limit_requests", 2)
        app = create_app()

        async def _db():
            yield mock_db_session

        app.dependency_overrides[get_db_session] = _db
        credentials = {"email": "nobody@example.com", "password": "wrong"}

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            first = await client.post("/api/auth/login", json=credentials)
            second = await client.post("/api/auth/login", json=credentials)
            third = await client.post("/api/auth/login", json=credentials)
            other = await client.get("/api/products/not-a-uuid")

        assert first.status_code == second.status_code == 401
        assert third.status_code == 429
        assert third.json()["error"] == "rate_limit_exceeded"
        assert int(third.headers["Retry-After"]) > 0
        assert other.status_code == 404
