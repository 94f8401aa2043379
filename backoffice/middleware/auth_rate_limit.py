from __future__ import annotations

import logging
from typing import Mapping

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from backoffice.core.config import (
    AUTH_RATE_LIMIT_ENABLED,
    AUTH_RATE_LIMIT_MAX,
    AUTH_RATE_LIMIT_WINDOW_SECONDS,
    LOGIN_RATE_LIMIT_MAX,
    TRUST_FORWARDED_FOR,
)
from backoffice.core.rate_limiter import InMemoryRateLimiterService, RateLimiterService

logger = logging.getLogger(__name__)

DEFAULT_LIMITS: dict[str, int] = {
    "/auth/register-admin": AUTH_RATE_LIMIT_MAX,
    "/auth/validate-product-key": AUTH_RATE_LIMIT_MAX,
    "/auth/login": LOGIN_RATE_LIMIT_MAX,
    "/auth/token": LOGIN_RATE_LIMIT_MAX,
}

_MESSAGES = {
    "/auth/login": "Muitas tentativas de login. Tente novamente mais tarde.",
    "/auth/token": "Muitas tentativas de login. Tente novamente mais tarde.",
}
_DEFAULT_MESSAGE = "Muitas tentativas de autenticação. Tente novamente mais tarde."


class AuthRateLimitMiddleware(BaseHTTPMiddleware):
    """Throttle por endereço do cliente nas rotas públicas de autenticação."""

    def __init__(
        self,
        app,
        *,
        rate_limiter: RateLimiterService | None = None,
        limits: Mapping[str, int] | None = None,
        enabled: bool = AUTH_RATE_LIMIT_ENABLED,
        trust_forwarded_for: bool = TRUST_FORWARDED_FOR,
    ) -> None:
        super().__init__(app)
        self._rate_limiter = rate_limiter or InMemoryRateLimiterService(window_seconds=AUTH_RATE_LIMIT_WINDOW_SECONDS)
        self._limits = dict(limits if limits is not None else DEFAULT_LIMITS)
        self._enabled = enabled
        self._trust_forwarded_for = trust_forwarded_for

    async def dispatch(self, request: Request, call_next):
        endpoint = request.url.path.rstrip("/") or "/"
        limit = self._limits.get(endpoint)
        if not self._enabled or limit is None or request.method != "POST":
            return await call_next(request)

        client_key = extract_client_address(request, trust_forwarded_for=self._trust_forwarded_for)
        decision = self._rate_limiter.check(client_key=client_key, endpoint=endpoint, limit=limit)
        if not decision.allowed:
            logger.warning("Rate limit exceeded client=%s endpoint=%s", client_key, endpoint)
            return JSONResponse(
                status_code=429,
                content={
                    "success": False,
                    "message": _MESSAGES.get(endpoint, _DEFAULT_MESSAGE),
                    "error_code": "RATE_LIMITED",
                },
                headers={
                    "Retry-After": str(decision.retry_after_seconds),
                    "X-RateLimit-Limit": str(decision.limit),
                    "X-RateLimit-Remaining": str(decision.remaining),
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(decision.limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        return response


def extract_client_address(request: Request, *, trust_forwarded_for: bool = TRUST_FORWARDED_FOR) -> str:
    """IP do socket; X-Forwarded-For só vale quando o proxy na frente é confiável."""
    if trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded and forwarded.split(",")[0].strip():
            return forwarded.split(",")[0].strip()
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"
