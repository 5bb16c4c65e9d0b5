"""Request logging middleware using structlog."""

import logging
import time
import uuid

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from api.config.settings import settings

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"

# Load balancer and uptime check traffic, logged at debug
QUIET_PATH_PREFIXES = ("/health", "/api/v1/health")


def configure_logging() -> None:
    """Configure structlog for JSON logs at the configured level."""
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def route_name(request: Request) -> str | None:
    """Endpoint function name of the matched route, e.g. ``run_batch_analysis``."""
    route = request.scope.get("route")
    return getattr(route, "name", None)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request and ties pipeline log lines to it.

    The request id (taken from ``X-Request-ID`` when the dashboard sends one)
    is bound to the structlog context, so batch progress lines logged by the
    processors carry the id of the HTTP call that started the run.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        quiet = request.url.path.startswith(QUIET_PATH_PREFIXES)
        start_time = time.perf_counter()

        if not quiet:
            logger.info("Request started", method=request.method, path=request.url.path)

        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)

        if quiet:
            log_method = logger.debug
        elif response.status_code >= 500:
            log_method = logger.error
        elif response.status_code >= 400:
            log_method = logger.warning
        else:
            log_method = logger.info

        log_method(
            "Request completed",
            method=request.method,
            path=request.url.path,
            endpoint=route_name(request),
            status_code=response.status_code,
            duration_ms=duration_ms,
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
