"""HTTP request/response logging middleware for FastAPI."""

import logging
import time
from typing import Callable, Optional, Set

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ....infrastructure.logging import (
    clear_correlation_id,
    generate_correlation_id,
    get_logger,
    set_correlation_id,
)

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

# Sensitive headers, logged as [REDACTED]
EXCLUDED_HEADERS = {
    'authorization',
    'cookie',
    'set-cookie',
    'x-api-key',
    'x-auth-token',
    'proxy-authorization',
}

# Body fields never written to logs
SENSITIVE_BODY_MARKERS = ('password', 'token')

EXCLUDED_CONTENT_TYPES = (
    'application/octet-stream',
    'image/',
    'multipart/form-data',
)


class RequestResponseLoggingMiddleware(BaseHTTPMiddleware):
    """Log HTTP requests and responses under a per-request correlation ID."""

    def __init__(
        self,
        app: ASGIApp,
        log_request_body: bool = False,
        max_body_size: int = 1024,
        exclude_paths: Optional[Set[str]] = None
    ):
        super().__init__(app)
        self.log_request_body = log_request_body
        self.max_body_size = max_body_size
        self.exclude_paths = exclude_paths or {'/docs', '/redoc', '/openapi.json', '/favicon.ico'}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.exclude_paths:
            return await call_next(request)

        correlation_id = request.headers.get(CORRELATION_HEADER) or generate_correlation_id()
        set_correlation_id(correlation_id)
        start_time = time.perf_counter()

        try:
            await self._log_request(request)
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start_time) * 1000

            response.headers[CORRELATION_HEADER] = correlation_id
            self._log_response(request, response, duration_ms)
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                extra={
                    "request_method": request.method,
                    "request_path": request.url.path,
                    "request_query": str(request.query_params),
                    "duration_ms": round(duration_ms, 2),
                    "error": str(exc),
                    "error_type": type(exc).__name__
                },
                exc_info=True
            )
            raise

        finally:
            clear_correlation_id()

    async def _log_request(self, request: Request) -> None:
        request_body = await self._get_request_body(request) if self.log_request_body else None
        client_host = request.client.host if request.client else 'unknown'

        logger.info(
            f"HTTP Request: {request.method} {request.url.path}",
            extra={
                "request_method": request.method,
                "request_path": request.url.path,
                "request_query": str(request.query_params) if request.query_params else None,
                "request_headers": sanitize_headers(dict(request.headers)),
                "request_body": request_body,
                "client_host": client_host,
                "user_agent": request.headers.get('user-agent', 'unknown'),
            }
        )

    def _log_response(self, request: Request, response: Response, duration_ms: float) -> None:
        if response.status_code >= 500:
            log_level = logging.ERROR
        elif response.status_code >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            f"HTTP Response: {request.method} {request.url.path} -> {response.status_code} ({duration_ms:.2f}ms)",
            extra={
                "request_method": request.method,
                "request_path": request.url.path,
                "response_status": response.status_code,
                "duration_ms": round(duration_ms, 2),
                "content_type": response.headers.get('content-type'),
            }
        )

    async def _get_request_body(self, request: Request) -> Optional[str]:
        content_type = request.headers.get('content-type', '').lower()
        if any(excluded in content_type for excluded in EXCLUDED_CONTENT_TYPES):
            return "[BINARY_CONTENT]"

        body = await request.body()
        if len(body) > self.max_body_size:
            return f"[BODY_TOO_LARGE:{len(body)}_bytes]"
        try:
            text = body.decode('utf-8')
        except UnicodeDecodeError:
            return "[BINARY_CONTENT]"
        if any(marker in text.lower() for marker in SENSITIVE_BODY_MARKERS):
            return "[REDACTED]"
        return text


def sanitize_headers(headers: dict) -> dict:
    """Replace sensitive header values with a placeholder."""
    return {
        key: "[REDACTED]" if key.lower() in EXCLUDED_HEADERS else value
        for key, value in headers.items()
    }
