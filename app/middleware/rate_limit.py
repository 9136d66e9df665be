"""Rate limiting for public write endpoints.

Public forms (lead capture, PCP lookup) and email sends are reachable without
authentication, so they are limited per client IP with a fixed window. State is
kept in process memory. Each worker enforces its own limits.
"""

import logging
import re
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


@dataclass
class RateLimitConfig:
    """Configuration for a rate limit rule."""

    requests: int  # Number of allowed requests
    window_seconds: int  # Time window in seconds
    key_func: Callable[[Request], str] | None = None  # Custom key function


@dataclass
class RateLimitEntry:
    """Tracking entry for rate limit state."""

    count: int = 0
    window_start: float = field(default_factory=time.time)


def get_client_ip(request: Request) -> str:
    """Extract client IP address from request.

    Handles X-Forwarded-For header for reverse proxy scenarios.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Take the first IP in the chain (original client)
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"


def referral_email_key(request: Request) -> str:
    """Approval and decline sends share one limit per client."""
    return f"referral-email:{get_client_ip(request)}"


# Default rate limits by endpoint
DEFAULT_RATE_LIMITS: dict[tuple[str, str], RateLimitConfig] = {
    # Lead capture - spam protection
    ("POST", "/api/v1/leads"): RateLimitConfig(
        requests=10, window_seconds=3600  # 10 per hour
    ),
    # PCP lookup - fires while typing, debounced, still paid per call upstream
    ("POST", "/api/v1/pcp/lookup"): RateLimitConfig(
        requests=30, window_seconds=60
    ),
    # Referral decision emails
    ("POST", "/api/v1/referrals/approval-email"): RateLimitConfig(
        requests=20, window_seconds=60, key_func=referral_email_key
    ),
    ("POST", "/api/v1/referrals/decline-email"): RateLimitConfig(
        requests=20, window_seconds=60, key_func=referral_email_key
    ),
    # Staff outreach logging, shared across leads
    ("POST", "/api/v1/leads/{id}/contact-attempts"): RateLimitConfig(
        requests=30, window_seconds=60
    ),
}

_UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)


def normalize_path(path: str) -> str:
    """Normalize path by replacing UUIDs with placeholders."""
    return _UUID_PATTERN.sub("{id}", path.rstrip("/") or "/")


class InMemoryRateLimitStorage:
    """In-memory fixed-window counters keyed by client and endpoint."""

    def __init__(self) -> None:
        self._storage: dict[str, RateLimitEntry] = defaultdict(RateLimitEntry)
        self._last_cleanup = time.time()
        self._cleanup_interval = 300  # 5 minutes

    def _cleanup_expired(self, max_window: int = 3600) -> None:
        """Remove expired entries to prevent memory growth."""
        now = time.time()
        if now - self._last_cleanup < self._cleanup_interval:
            return

        expired_keys = [
            key
            for key, entry in self._storage.items()
            if now - entry.window_start > max_window
        ]

        for key in expired_keys:
            del self._storage[key]

        self._last_cleanup = now

    def check_and_increment(
        self, key: str, limit: int, window_seconds: int
    ) -> tuple[bool, int, int]:
        """Check rate limit and increment counter.

        Returns:
            Tuple of (is_allowed, remaining_requests, reset_seconds)
        """
        self._cleanup_expired()

        now = time.time()
        entry = self._storage[key]

        if now - entry.window_start > window_seconds:
            entry.count = 1
            entry.window_start = now
            return True, limit - 1, window_seconds

        reset = max(int(window_seconds - (now - entry.window_start)), 1)
        if entry.count < limit:
            entry.count += 1
            return True, limit - entry.count, reset

        return False, 0, reset


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rate limiting middleware for FastAPI.

    Applies rate limits to configured endpoints based on client IP.
    Returns 429 Too Many Requests when limits are exceeded.
    """

    def __init__(
        self,
        app,
        rate_limits: dict[tuple[str, str], RateLimitConfig] | None = None,
        storage: InMemoryRateLimitStorage | None = None,
        enabled: bool = True,
    ) -> None:
        super().__init__(app)
        self.rate_limits = rate_limits or DEFAULT_RATE_LIMITS
        self.storage = storage or InMemoryRateLimitStorage()
        self.enabled = enabled

    def _get_rate_limit_config(self, method: str, path: str) -> RateLimitConfig | None:
        """Get rate limit configuration for a method/path combination."""
        normalized = normalize_path(path)
        return self.rate_limits.get((method, path)) or self.rate_limits.get(
            (method, normalized)
        )

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process request and apply rate limiting."""
        if not self.enabled:
            return await call_next(request)

        method = request.method
        path = request.url.path

        config = self._get_rate_limit_config(method, path)
        if not config:
            return await call_next(request)

        client_ip = get_client_ip(request)
        if config.key_func:
            key = config.key_func(request)
        else:
            key = f"{method}:{normalize_path(path)}:{client_ip}"

        is_allowed, remaining, reset = self.storage.check_and_increment(
            key, config.requests, config.window_seconds
        )

        if not is_allowed:
            logger.warning(f"Rate limit exceeded: {method} {path} from {client_ip}")

            return JSONResponse(
                status_code=429,
                content={
                    "error": "Too many requests. Please try again later.",
                    "retry_after": reset,
                },
                headers={
                    "Retry-After": str(reset),
                    "X-RateLimit-Limit": str(config.requests),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(reset),
                },
            )

        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(config.requests)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        response.headers["X-RateLimit-Reset"] = str(reset)

        return response
