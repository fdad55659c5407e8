"""
Per-caller request throttling for the MarketDesk API

Callers are identified by API key, by the user id of a correctly signed
Supabase access token, or by client IP. The reporting routes aggregate whole
tables in memory, so they count against a separate, smaller bucket per caller.
Limits come from Settings (RATE_LIMIT_*).
"""
import hashlib
import logging
import time
from collections import defaultdict, deque
from typing import Callable, Deque, Dict, NamedTuple, Optional, Tuple

from fastapi import Request, status
from jose import jwt, JWTError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from marketdesk.core.auth import AuthConfig
from marketdesk.core.config import settings

logger = logging.getLogger(__name__)

EXEMPT_PATHS = frozenset({"/", "/health", "/docs", "/openapi.json", "/redoc"})

REPORT_PREFIXES = (
    "/api/v1/revenue",
    "/api/v1/reports",
    "/api/v1/analytics",
    "/api/v1/statistics",
    "/api/v1/delivery/statistics",
    "/api/v1/accounting/statements",
)


class Quota(NamedTuple):
    """Bucket a request is counted in and the bucket's size"""
    key: str
    limit: int


class RateLimiter:
    """
    Sliding window counter keyed by bucket

    Each bucket keeps the timestamps of its requests inside the window.
    Buckets without recent requests are dropped on a periodic sweep. State
    is per process.
    """

    def __init__(self, sweep_interval: float = 60.0, clock: Callable[[], float] = time.monotonic):
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._sweep_interval = sweep_interval
        self._clock = clock
        self._last_sweep = clock()

    def _sweep(self, now: float, window_seconds: int) -> None:
        if now - self._last_sweep < self._sweep_interval:
            return
        idle = [key for key, hits in self._hits.items() if not hits or hits[-1] <= now - window_seconds]
        for key in idle:
            del self._hits[key]
        self._last_sweep = now

    def hit(self, key: str, limit: int, window_seconds: int) -> Tuple[bool, int, int]:
        """
        Count a request against `key` if the window has room

        Returns:
            (allowed, remaining, retry_after_seconds)
        """
        now = self._clock()
        self._sweep(now, window_seconds)

        hits = self._hits[key]
        while hits and hits[0] <= now - window_seconds:
            hits.popleft()

        if len(hits) >= limit:
            retry_after = int(hits[0] + window_seconds - now) + 1 if hits else window_seconds
            return False, 0, max(retry_after, 1)

        hits.append(now)
        return True, limit - len(hits), 0

    def reset(self) -> None:
        self._hits.clear()


rate_limiter = RateLimiter()


def token_subject(token: str) -> Optional[str]:
    """User id (`sub`) of a correctly signed access token, None otherwise"""
    try:
        claims = jwt.decode(
            token,
            AuthConfig.get_jwt_secret(),
            algorithms=[AuthConfig.get_jwt_algorithm()],
            options={"verify_aud": False}
        )
    except (JWTError, ValueError):
        return None
    return claims.get("sub")


def client_ip(request: Request) -> str:
    """Client address, preferring the first X-Forwarded-For hop"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def resolve_quota(request: Request) -> Quota:
    """
    Pick the bucket for a request

    1. X-API-Key with the configured prefix
    2. Bearer token signed by Supabase Auth, keyed by user id so every
       session of one user shares a bucket
    3. Client IP (also used for invalid or expired tokens)

    Reporting routes use `<caller>:reports` capped at RATE_LIMIT_REPORTS.
    """
    api_key = request.headers.get("X-API-Key")
    auth_header = request.headers.get("Authorization", "")

    if api_key and api_key.startswith(settings.API_KEY_PREFIX):
        digest = hashlib.sha256(api_key.encode()).hexdigest()[:16]
        caller, limit = f"api_key:{digest}", settings.RATE_LIMIT_API_KEY
    else:
        subject = token_subject(auth_header[len("Bearer "):]) if auth_header.startswith("Bearer ") else None
        if subject:
            caller, limit = f"user:{subject}", settings.RATE_LIMIT_AUTHENTICATED
        else:
            caller, limit = f"ip:{client_ip(request)}", settings.RATE_LIMIT_ANONYMOUS

    if request.url.path.startswith(REPORT_PREFIXES):
        return Quota(f"{caller}:reports", min(limit, settings.RATE_LIMIT_REPORTS))
    return Quota(caller, limit)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Applies the caller's quota to every non-exempt request

    Headers returned:
    - X-RateLimit-Limit: size of the bucket the request was counted in
    - X-RateLimit-Remaining: requests left in the current window
    - X-RateLimit-Reset / Retry-After: seconds to wait (429 only)
    """

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        quota = resolve_quota(request)
        allowed, remaining, retry_after = rate_limiter.hit(
            quota.key, quota.limit, settings.RATE_LIMIT_WINDOW_SECONDS
        )

        if not allowed:
            logger.warning(f"Rate limit exceeded for {quota.key} on {request.url.path}")
            # A response (not an exception) so it still passes through CORS
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"detail": "Rate limit exceeded. Please slow down."},
                headers={
                    "X-RateLimit-Limit": str(quota.limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(retry_after),
                    "Retry-After": str(retry_after),
                }
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(quota.limit)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response
