"""
Rate limiting middleware for the Saddle Order API
Uses in-memory storage with sliding window algorithm
"""
import hashlib
import logging
import time
from typing import Dict, Tuple
from collections import defaultdict

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from app.core.config import settings

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    In-memory rate limiter using sliding window algorithm.

    State is per process; several workers each keep their own windows.
    """

    def __init__(self, cleanup_interval: int = 60):
        # {identifier: [timestamp, ...]}
        self._requests: Dict[str, list] = defaultdict(list)
        self._last_cleanup = time.time()
        self._cleanup_interval = cleanup_interval

    def _cleanup_old_entries(self, window_seconds: int = 60):
        """Drop identifiers whose requests all fell out of the window"""
        now = time.time()

        if now - self._last_cleanup < self._cleanup_interval:
            return

        cutoff = now - window_seconds * 2

        for identifier in list(self._requests.keys()):
            self._requests[identifier] = [ts for ts in self._requests[identifier] if ts > cutoff]
            if not self._requests[identifier]:
                del self._requests[identifier]

        self._last_cleanup = now

    def is_allowed(
        self,
        identifier: str,
        max_requests: int,
        window_seconds: int = 60
    ) -> Tuple[bool, int, int]:
        """
        Check if a request is allowed under the rate limit.

        Returns:
            Tuple of (is_allowed, remaining_requests, retry_after_seconds)
        """
        self._cleanup_old_entries(window_seconds)

        now = time.time()
        window_start = now - window_seconds

        requests_in_window = [ts for ts in self._requests[identifier] if ts > window_start]
        self._requests[identifier] = requests_in_window

        if len(requests_in_window) >= max_requests:
            oldest_timestamp = min(requests_in_window) if requests_in_window else now
            retry_after = max(int(oldest_timestamp + window_seconds - now) + 1, 1)
            return False, 0, retry_after

        requests_in_window.append(now)
        remaining = max_requests - len(requests_in_window)
        return True, remaining, 0

    def reset(self):
        self._requests.clear()


# Global rate limiter instance
rate_limiter = RateLimiter()


RATE_LIMITS = {
    "authenticated": settings.RATE_LIMIT_AUTHENTICATED,
    "unauthenticated": settings.RATE_LIMIT_UNAUTHENTICATED,
}

# Paths that are exempt from rate limiting
EXEMPT_PATHS = {
    "/",
    "/health",
    "/docs",
    "/openapi.json",
    "/redoc",
}


def get_client_ip(request: Request) -> str:
    """Get the client IP, considering proxies"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # First IP in the chain is the original client
        return forwarded_for.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"


def get_identifier_and_limit(request: Request) -> Tuple[str, int]:
    """
    Determine the rate limit identifier and limit based on auth status.

    Bearer tokens are keyed by a digest of the token, everything else by IP.
    """
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token_hash = hashlib.sha256(auth_header.encode()).hexdigest()[:32]
        return f"jwt:{token_hash}", RATE_LIMITS["authenticated"]

    return f"ip:{get_client_ip(request)}", RATE_LIMITS["unauthenticated"]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Middleware that applies rate limiting based on authentication status.

    Headers returned:
    - X-RateLimit-Limit: Maximum requests per window
    - X-RateLimit-Remaining: Remaining requests in current window
    - X-RateLimit-Reset: Seconds until the window resets (when limited)
    """

    def __init__(self, app, limiter: RateLimiter = None, window_seconds: int = 60):
        super().__init__(app)
        self.limiter = limiter or rate_limiter
        self.window_seconds = window_seconds

    async def dispatch(self, request: Request, call_next):
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        # CORS preflight
        if request.method == "OPTIONS":
            return await call_next(request)

        identifier, limit = get_identifier_and_limit(request)

        is_allowed, remaining, retry_after = self.limiter.is_allowed(
            identifier=identifier,
            max_requests=limit,
            window_seconds=self.window_seconds
        )

        if not is_allowed:
            logger.warning(f"Rate limit exceeded for {identifier} on {request.url.path}")
            # Returned rather than raised so the response still passes through CORS
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"detail": "Rate limit exceeded. Please slow down."},
                headers={
                    "X-RateLimit-Limit": str(limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(retry_after),
                    "Retry-After": str(retry_after),
                }
            )

        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(remaining)

        return response
