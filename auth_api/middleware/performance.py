"""Request timing middleware."""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from auth_api.config import settings
from auth_api.middleware.rate_limit import client_ip
from auth_api.utils.logger import logger


class PerformanceMiddleware(BaseHTTPMiddleware):
    """Measure request processing time.

    Every response gets an X-Process-Time header. Requests slower than
    ``SLOW_REQUEST_SECONDS`` are logged as warnings with the client address
    and, for authenticated routes, the user id.
    """

    EXCLUDED_PATHS = {
        "/health",
        "/",
        "/docs",
        "/openapi.json",
    }

    def __init__(self, app, slow_request_seconds: float | None = None):
        super().__init__(app)
        if slow_request_seconds is None:
            slow_request_seconds = settings.slow_request_seconds
        self.slow_request_seconds = slow_request_seconds

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        process_time = time.perf_counter() - start_time

        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        path = request.url.path
        if path in self.EXCLUDED_PATHS:
            return response

        summary = (
            f"{request.method} {path} {response.status_code} - {process_time:.3f}s "
            f"ip={client_ip(request)} user={getattr(request.state, 'user_id', '-')}"
        )
        if process_time >= self.slow_request_seconds:
            logger.warning(f"[SLOW REQUEST] {summary}")
        else:
            logger.debug(f"[REQUEST] {summary}")

        return response
