"""
Kavin's Catalog Backend — Rate Limiting Middleware
====================================================

What:  Per-IP sliding window rate limiter with two buckets.
How:   Each bucket keeps, per client IP, the timestamps of requests inside
       its window. A request is rejected with 429 when the bucket is full.

Buckets:
    login   POST /api/auth/login     login_rate_limit_requests / login_rate_limit_window
    api     every other API path     rate_limit_requests / rate_limit_window

    A login attempt counts against both buckets.

In-memory and per process: with several workers each one enforces its own
limits.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.config import settings
from app.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

LOGIN_PATH = "/api/auth/login"


class SlidingWindow:
    """Timestamps per key, trimmed to the last `window` seconds on every hit."""

    def __init__(self, name: str):
        self.name = name
        self._hits: Dict[str, List[float]] = defaultdict(list)

    def hit(self, key: str, limit: int, window: int, now: Optional[float] = None) -> Optional[int]:
        """
        Record a request for `key`.

        Returns None when allowed, otherwise the seconds until a slot frees up
        (the rejected request is not recorded).
        """
        now = now if now is not None else time.time()
        window_start = now - window
        hits = [ts for ts in self._hits[key] if ts > window_start]
        self._hits[key] = hits

        if len(hits) >= limit:
            return int(hits[0] + window - now) + 1

        hits.append(now)
        if sum(len(v) for v in self._hits.values()) % 1000 == 0:
            self._cleanup(window_start)
        return None

    def _cleanup(self, window_start: float) -> None:
        inactive = [
            key for key, hits in self._hits.items()
            if not hits or hits[-1] < window_start
        ]
        for key in inactive:
            del self._hits[key]
        if inactive:
            logger.debug("Cleaned up %d inactive %s rate-limit entries", len(inactive), self.name)


class RateLimitMiddleware(BaseHTTPMiddleware):

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self.api_bucket = SlidingWindow("api")
        self.login_bucket = SlidingWindow("login")

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in self.EXCLUDED_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        client_ip = (
            getattr(request.client, "host", "unknown")
            if request.client
            else "unknown"
        )

        if path == LOGIN_PATH and request.method == "POST":
            retry_after = self.login_bucket.hit(
                client_ip,
                settings.login_rate_limit_requests,
                settings.login_rate_limit_window,
            )
            if retry_after is not None:
                logger.warning("Login rate limit exceeded for IP %s", client_ip)
                return self._reject(
                    retry_after,
                    f"Too many login attempts. Please wait {retry_after} seconds.",
                )

        retry_after = self.api_bucket.hit(
            client_ip,
            settings.rate_limit_requests,
            settings.rate_limit_window,
        )
        if retry_after is not None:
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                settings.rate_limit_requests,
                settings.rate_limit_window,
            )
            return self._reject(
                retry_after,
                f"Too many requests. Please wait {retry_after} seconds before retrying.",
            )

        return await call_next(request)

    @staticmethod
    def _reject(retry_after: int, message: str) -> JSONResponse:
        return JSONResponse(
            status_code=429,
            content={
                "error": "rate_limit_exceeded",
                "message": message,
                "details": {"retry_after": retry_after},
                "request_id": request_id_var.get(""),
            },
            headers={"Retry-After": str(retry_after)},
        )
