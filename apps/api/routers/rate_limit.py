"""Per-client rate limiting dependencies backed by in-process limiters."""

from __future__ import annotations

from typing import Callable, Dict

from fastapi import HTTPException, Request

from config import settings
from services.rate_limiter import RateLimiter


def client_identifier(request: Request) -> str:
    """
    Identify the caller for rate limiting.

    Keys on the socket peer. ``X-Forwarded-For`` is only read when
    ``TRUSTED_PROXY_HOPS`` proxies sit in front of the app, and then the
    entry appended by the outermost trusted proxy is used, never the
    client-supplied leftmost one.
    """
    hops = settings.TRUSTED_PROXY_HOPS
    if hops > 0:
        forwarded = [
            entry.strip()
            for entry in request.headers.get("x-forwarded-for", "").split(",")
            if entry.strip()
        ]
        if len(forwarded) >= hops:
            return forwarded[-hops]
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def get_submission_rate_limiter(request: Request) -> RateLimiter:
    """Return the limiter shared by all submission requests in this process."""
    return request.app.state.submission_rate_limiter


def rate_limit(prefix: str, limit: int, window_seconds: int) -> Callable[[Request], None]:
    """Return a FastAPI dependency that enforces per-client request quotas."""

    async def _dependency(request: Request):
        if getattr(request.app.state, "disable_rate_limits", False):
            return

        limiters: Dict[str, RateLimiter] = request.app.state.rate_limiters
        limiter = limiters.get(prefix)
        if limiter is None:
            limiter = limiters.setdefault(prefix, RateLimiter(limit, window_seconds))

        if not await limiter.consume(client_identifier(request)):
            raise HTTPException(
                status_code=429,
                detail=f"Rate limit exceeded for {prefix}. Try again later.",
            )

    return _dependency
