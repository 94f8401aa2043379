from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from backoffice.core.request_context import clear_request_context, set_request_context
from backoffice.middleware.auth_rate_limit import extract_client_address

logger = logging.getLogger(__name__)


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        set_request_context(request_id=request_id, client_ip=extract_client_address(request))

        status_code = 500
        endpoint = request.url.path
        method = request.method
        response = None

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            identity = getattr(request.state, "identity", None)
            duration_ms = round((time.perf_counter() - start) * 1000, 2)

            logger.info(
                "request completed",
                extra={
                    "request_id": request_id,
                    "user_id": identity.user_id if identity is not None else None,
                    "restaurant_id": identity.restaurant_id if identity is not None else None,
                    "endpoint": endpoint,
                    "method": method,
                    "status_code": status_code,
                    "duration_ms": duration_ms,
                },
            )

            if response is not None:
                response.headers["X-Request-ID"] = request_id

            clear_request_context()
