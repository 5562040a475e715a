"""Request gate: rate limiting for public routes, origin checks for internal ones."""

import logging
import math
from typing import Iterable, Mapping, Optional

from fastapi import Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware

from haulquote.rate_limiter import RateLimiter, RateLimitResult

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/api/public"
API_PREFIX = "/api"
FALLBACK_IDENTIFIER = "127.0.0.1"

PUBLIC = "public"
INTERNAL = "internal"
PASSTHROUGH = "passthrough"


def _under(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def classify_path(path: str) -> str:
    """Return ``"public"``, ``"internal"`` or ``"passthrough"`` for *path*."""
    if _under(path, PUBLIC_PREFIX):
        return PUBLIC
    if _under(path, API_PREFIX):
        return INTERNAL
    return PASSTHROUGH


def client_identifier(headers: Mapping[str, str]) -> str:
    """Best-effort client address from proxy headers.

    Checks ``X-Forwarded-For`` (first hop), ``X-Real-IP`` and
    ``CF-Connecting-IP`` in that order.
    """
    forwarded = headers.get("x-forwarded-for")
    if forwarded and forwarded.split(",")[0].strip():
        return forwarded.split(",")[0].strip()

    for name in ("x-real-ip", "cf-connecting-ip"):
        value = headers.get(name)
        if value and value.strip():
            return value.strip()

    return FALLBACK_IDENTIFIER


def origin_allowed(headers: Mapping[str, str], allowed_origins: Iterable[str]) -> bool:
    """True if ``Origin`` is allow-listed or ``Referer`` starts with an allowed origin."""
    allowed = list(allowed_origins)
    origin = headers.get("origin")
    if origin and origin in allowed:
        return True
    referer = headers.get("referer")
    if referer and any(referer.startswith(a) for a in allowed):
        return True
    return False


def rate_limit_headers(result: RateLimitResult,
                       now_ms: Optional[int] = None) -> dict[str, str]:
    """``X-RateLimit-*`` headers for *result*.

    Passing *now_ms* (the limiter's clock) adds ``Retry-After``: whole
    seconds until ``reset_time``, rounded up and never negative.
    """
    headers = {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(result.reset_time),
    }
    if now_ms is not None:
        retry = max(0, math.ceil((result.reset_time - now_ms) / 1000))
        headers["Retry-After"] = str(retry)
    return headers


class RequestGateMiddleware(BaseHTTPMiddleware):
    """Apply exactly one policy per request before it reaches a route.

    Public paths are rate limited per client identifier. Other ``/api`` paths
    must come from an allow-listed origin. Everything else passes through.
    The origin check trusts client-supplied headers and only discourages
    hotlinking; it is not authentication.
    """

    def __init__(self, app, limiter: RateLimiter,
                 allowed_origins: Iterable[str] = (),
                 exempt_identifiers: Iterable[str] = ()) -> None:
        super().__init__(app)
        self.limiter = limiter
        self.allowed_origins = tuple(allowed_origins)
        self.exempt_identifiers = frozenset(exempt_identifiers)

    async def dispatch(self, request: Request, call_next):
        kind = classify_path(request.url.path)

        if kind == PUBLIC:
            return await self._rate_limited(request, call_next)

        if kind == INTERNAL and not origin_allowed(request.headers, self.allowed_origins):
            logger.warning("Rejected %s %s: origin not allowed",
                           request.method, request.url.path)
            return PlainTextResponse("Forbidden", status_code=403)

        return await call_next(request)

    async def _rate_limited(self, request: Request, call_next):
        # CORS preflight never counts against the quota.
        if request.method == "OPTIONS":
            return await call_next(request)

        identifier = client_identifier(request.headers)
        if identifier in self.exempt_identifiers:
            result = self.limiter.exempt_result()
        else:
            result = self.limiter.check(identifier)

        if not result.allowed:
            logger.warning("Rate limit exceeded for %s on %s",
                           identifier, request.url.path)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "Too Many Requests",
                    "message": "Rate limit exceeded. Please try again later.",
                    "statusCode": 429,
                },
                headers=rate_limit_headers(result, now_ms=self.limiter.now()),
            )

        response = await call_next(request)
        response.headers.update(rate_limit_headers(result))
        return response
