"""Request/response logging middleware."""

import logging
import time
from typing import Any, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from cookstep.core.request_id import generate_request_id, set_request_id

logger = logging.getLogger(__name__)

SENSITIVE_KEYS = ("api_key", "password", "token", "secret", "auth")

# Health-check paths; logged at DEBUG.
HEALTH_PATHS = frozenset({"/health", "/health/ready"})


def mask_sensitive_data(data: Any) -> Any:
    """Recursively mask sensitive fields in data."""
    if isinstance(data, dict):
        return {
            key: "***" if any(s in key.lower() for s in SENSITIVE_KEYS) else mask_sensitive_data(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [mask_sensitive_data(item) for item in data]
    return data


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id and logs it, its outcome and its duration."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)
        request.state.request_id = request_id

        start = time.perf_counter()
        method, path = request.method, request.url.path
        level = logging.DEBUG if path in HEALTH_PATHS else logging.INFO
        context = {"request_id": request_id, "method": method, "path": path}

        logger.log(
            level,
            f"API Request: {method} {path}",
            extra={
                **context,
                "query": mask_sensitive_data(dict(request.query_params)),
                "client_ip": request.client.host if request.client else None,
                "user_agent": request.headers.get("user-agent", "Unknown"),
            },
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"API Error: {method} {path} - {e}",
                extra={**context, "process_time_ms": _elapsed_ms(start)},
                exc_info=True,
            )
            raise

        logger.log(
            level,
            f"API Response: {method} {path} - {response.status_code}",
            extra={**context, "status_code": response.status_code, "process_time_ms": _elapsed_ms(start)},
        )
        response.headers["X-Request-ID"] = request_id
        return response
