"""HTTP middleware: security headers and Redis-backed rate limiting."""

from __future__ import annotations

import logging
import time

from fastapi import Request
from redis import Redis
from redis.exceptions import RedisError
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from inventory_api.api.errors import error_response
from inventory_api.core.errors import RateLimited

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "X-XSS-Protection": "0",
}

RATE_LIMIT_PREFIX = "ratelimit:"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window request counter per client IP.

    Only paths under ``path_prefix`` are counted. When Redis is unreachable
    the request is let through.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        redis_client: Redis,
        max_requests: int,
        window_seconds: int,
        path_prefix: str = "/api",
    ) -> None:
        super().__init__(app)
        self.redis = redis_client
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.path_prefix = path_prefix

    def _key(self, client_ip: str) -> str:
        window = int(time.time()) // self.window_seconds
        return f"{RATE_LIMIT_PREFIX}{client_ip}:{window}"

    def _hit(self, client_ip: str) -> int | None:
        key = self._key(client_ip)
        try:
            count = self.redis.incr(key)
            if count == 1:
                self.redis.expire(key, self.window_seconds)
            return int(count)
        except RedisError as e:
            logger.warning(f"Rate limiter unavailable, allowing request: {e}")
            return None

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        # Sync redis client, run off the event loop.
        count = await run_in_threadpool(self._hit, client_ip)
        if count is not None and count > self.max_requests:
            logger.info(f"Rate limit exceeded for {client_ip}")
            exc = RateLimited()
            return error_response(
                exc.status_code,
                exc.message,
                headers={"Retry-After": str(self.window_seconds)},
            )

        response = await call_next(request)
        if count is not None:
            response.headers["X-RateLimit-Limit"] = str(self.max_requests)
            response.headers["X-RateLimit-Remaining"] = str(max(0, self.max_requests - count))
        return response
