"""In-memory sliding-window rate limiter.

Requests are counted per authenticated Clerk user, falling back to the
client IP for anonymous routes.  State lives in the process, so limits are
per instance.
"""

from __future__ import annotations

import time
from collections import defaultdict
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.config import Settings, get_settings

EXEMPT_PATHS: set[str] = {"/health"}


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-user (or per-IP) sliding window rate limiter."""

    def __init__(
        self,
        app: Any,
        settings: Settings | None = None,
        window_seconds: int = 60,
    ) -> None:
        super().__init__(app)
        s = settings or get_settings()
        self._max_requests = s.rate_limit_per_minute
        self._window_seconds = window_seconds
        # client key -> request timestamps inside the window
        self._requests: dict[str, list[float]] = defaultdict(list)

    @staticmethod
    def client_key(request: Request) -> str:
        auth = getattr(request.state, "auth", None)
        if auth is not None and auth.user_id:
            return f"user:{auth.user_id}"
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return f"ip:{forwarded.split(',')[0].strip()}"
        return f"ip:{request.client.host if request.client else 'unknown'}"

    def _prune(self, key: str, now: float) -> list[float]:
        cutoff = now - self._window_seconds
        recent = [t for t in self._requests[key] if t > cutoff]
        self._requests[key] = recent
        return recent

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        key = self.client_key(request)
        now = time.monotonic()
        recent = self._prune(key, now)

        if len(recent) >= self._max_requests:
            retry_after = int(self._window_seconds - (now - recent[0]))
            return Response(
                content='{"detail":"Rate limit exceeded"}',
                status_code=429,
                media_type="application/json",
                headers={"Retry-After": str(max(retry_after, 1))},
            )

        recent.append(now)
        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(self._max_requests)
        response.headers["X-RateLimit-Remaining"] = str(
            max(self._max_requests - len(recent), 0)
        )
        return response
