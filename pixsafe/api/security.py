"""
Security dependencies for the API.
"""

import time
import logging
import secrets
from collections import deque
from typing import Deque, Dict, Optional

from fastapi import HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader

from pixsafe.config import settings

logger = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name=settings.api_token_header, auto_error=False)


async def verify_api_token(
    request: Request,
    api_key: Optional[str] = Security(api_key_header),
):
    """
    Require the configured API token.

    With no token configured (dev mode) every request is let through.
    """
    if not settings.api_token:
        if settings.is_production:
            logger.warning("API token not configured in production mode!")
        return None

    client_host = request.client.host if request.client else "unknown"

    if not api_key:
        logger.warning(f"Missing API key from {client_host}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing API key. Provide {settings.api_token_header} header.",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if not secrets.compare_digest(api_key.encode("utf-8"), settings.api_token.encode("utf-8")):
        logger.warning(f"Invalid API key attempt from {client_host}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key.",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    return api_key


class RateLimiter:
    """
    Sliding-window request counter per key.
    In-memory only; each worker process keeps its own counts.

    Keys whose window has emptied are dropped, so idle clients do not
    accumulate.
    """

    def __init__(self):
        self._requests: Dict[str, Deque[float]] = {}
        self._last_sweep = 0.0

    def _expire(self, key: str, now: float, window: int) -> Optional[Deque[float]]:
        timestamps = self._requests.get(key)
        if timestamps is None:
            return None
        while timestamps and now - timestamps[0] >= window:
            timestamps.popleft()
        if not timestamps:
            del self._requests[key]
            return None
        return timestamps

    def _sweep(self, now: float, window: int):
        """Drop every idle key, at most once per window."""
        if now - self._last_sweep < window:
            return
        for key in list(self._requests):
            self._expire(key, now, window)
        self._last_sweep = now

    def is_allowed(self, key: str, limit: int, window: int) -> tuple[bool, int]:
        """
        Record a request if it fits in the window.

        Returns:
            (allowed, remaining)
        """
        now = time.time()
        self._sweep(now, window)

        timestamps = self._expire(key, now, window)
        current_count = len(timestamps) if timestamps else 0
        if current_count >= limit:
            return False, 0

        self._requests.setdefault(key, deque()).append(now)
        return True, limit - current_count - 1

    def get_retry_after(self, key: str, window: int) -> int:
        """Seconds until the oldest request leaves the window."""
        timestamps = self._requests.get(key)
        if not timestamps:
            return 0
        return max(0, int(window - (time.time() - timestamps[0])))

    def __len__(self) -> int:
        return len(self._requests)

    def reset(self):
        self._requests.clear()
        self._last_sweep = 0.0


rate_limiter = RateLimiter()


async def check_rate_limit(request: Request):
    """Per-IP rate limit for lookups and reports."""
    if not settings.rate_limit_requests:
        return

    client_ip = request.client.host if request.client else "unknown"

    allowed, remaining = rate_limiter.is_allowed(
        key=client_ip,
        limit=settings.rate_limit_requests,
        window=settings.rate_limit_window,
    )

    request.state.rate_limit_remaining = remaining
    request.state.rate_limit_limit = settings.rate_limit_requests

    if not allowed:
        retry_after = rate_limiter.get_retry_after(client_ip, settings.rate_limit_window)
        logger.warning(f"Rate limit exceeded for {client_ip}")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Rate limit exceeded. Try again in {retry_after} seconds.",
            headers={
                "Retry-After": str(retry_after),
                "X-RateLimit-Limit": str(settings.rate_limit_requests),
                "X-RateLimit-Remaining": "0",
            },
        )
