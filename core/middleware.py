"""
Application Middleware for the Novel Comments service.

Key Middleware Components:
- `CorrelationMiddleware`: assigns a correlation ID to every incoming request
  (or reuses the caller's `X-Correlation-ID` / `X-Request-ID`), exposes it to
  the logging system and echoes it in the response headers.
- `PerformanceMiddleware`: logs the start and end of each request, adds an
  `X-Process-Time` header (milliseconds) and warns about slow requests.
- `ErrorHandlingMiddleware`: turns any exception that escaped the exception
  handlers into the service's JSON 500 body, so no request ever ends in a
  plain-text error page.

All are built on Starlette's `BaseHTTPMiddleware`. `CorrelationMiddleware`
must be added last so it runs first and the ID is available to everything
downstream.
"""

import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .exceptions import StoreError, to_error_response
from .logging_config import set_correlation_id, get_logger

logger = get_logger("core.middleware")

SLOW_REQUEST_SECONDS = 1.0


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Middleware to add correlation IDs to requests"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = (
            request.headers.get("X-Correlation-ID")
            or request.headers.get("X-Request-ID")
            or str(uuid.uuid4())
        )

        set_correlation_id(correlation_id)
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers["X-Correlation-ID"] = correlation_id

        return response


class PerformanceMiddleware(BaseHTTPMiddleware):
    """Middleware for performance monitoring and logging"""

    def __init__(self, app: ASGIApp, slow_request_seconds: float = SLOW_REQUEST_SECONDS):
        super().__init__(app)
        self.slow_request_seconds = slow_request_seconds

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        logger.debug(
            f"Request started: {request.method} {request.url.path}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "client_ip": request.client.host if request.client else None,
            },
        )

        response = await call_next(request)

        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(round(process_time * 1000, 2))

        logger.info(
            f"Request completed: {request.method} {request.url.path} - {response.status_code}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "process_time_ms": round(process_time * 1000, 2),
            },
        )

        if process_time > self.slow_request_seconds:
            logger.warning(
                f"Slow request detected: {request.method} {request.url.path}",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "process_time_ms": round(process_time * 1000, 2),
                    "threshold_exceeded": True,
                },
            )

        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware mapping unexpected errors to the JSON error body"""

    def __init__(self, app: ASGIApp, redact: bool = False):
        super().__init__(app)
        self.redact = redact

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(
                f"Unexpected error: {str(e)}",
                extra={
                    "error_type": type(e).__name__,
                    "path": request.url.path,
                    "method": request.method,
                },
                exc_info=True,
            )
            return to_error_response(StoreError("unexpected", str(e)), redact=self.redact)
