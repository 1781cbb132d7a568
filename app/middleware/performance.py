"""Request timing middleware."""

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class PerformanceMiddleware(BaseHTTPMiddleware):
    """Log each request's duration and expose it as X-Process-Time.

    Requests slower than SLOW_REQUEST_THRESHOLD are logged as warnings.
    Health and docs endpoints are not logged.
    """

    SLOW_REQUEST_THRESHOLD = 0.5  # seconds

    EXCLUDED_PATHS = {
        "/health",
        "/",
        "/docs",
        "/redoc",
        "/openapi.json",
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = time.perf_counter() - start_time
        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        path = request.url.path
        if path not in self.EXCLUDED_PATHS:
            line = f"{request.method} {path} {response.status_code} - {process_time:.3f}s"
            if process_time >= self.SLOW_REQUEST_THRESHOLD:
                logger.warning(f"[SLOW REQUEST] {line}")
            else:
                logger.debug(f"[REQUEST] {line}")

        return response
