"""Global exception handlers for the API.

Every error response has the body ``{"error": "<message>"}``.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from processor.errors import (
    ClassificationError,
    ConfigurationError,
    ConversationNotFoundError,
    PersistenceError,
    SentimentPipelineError,
    ValidationError,
)

logger = structlog.get_logger()

# Most specific first; the first matching class wins
PIPELINE_ERROR_STATUS = (
    (ValidationError, 400),
    (ConversationNotFoundError, 404),
    (ClassificationError, 502),
    (ConfigurationError, 503),
    (PersistenceError, 500),
)


class APIError(Exception):
    """Base exception for API errors."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(APIError):
    """Resource not found."""

    def __init__(self, resource: str, identifier: str | int):
        super().__init__(
            message=f"{resource} {identifier} not found",
            status_code=404,
        )


def error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def status_for_pipeline_error(exc: SentimentPipelineError) -> int:
    """HTTP status for a pipeline error category."""
    for error_class, status_code in PIPELINE_ERROR_STATUS:
        if isinstance(exc, error_class):
            return status_code
    return 500


def request_validation_message(exc: RequestValidationError) -> str:
    """Summarize a request validation failure in one sentence."""
    errors = exc.errors()
    first_error = errors[0] if errors else {}
    loc = [str(part) for part in first_error.get("loc", ()) if part != "body"]

    if first_error.get("type") == "json_invalid" or not loc:
        return "Invalid JSON body"
    if first_error.get("type") == "missing":
        return f"Missing required field: {loc[-1]}"
    return f"Invalid value for {'.'.join(loc)}: {first_error.get('msg', 'validation error')}"


def setup_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
        """Handle custom API errors."""
        logger.warning(
            "API error",
            status_code=exc.status_code,
            message=exc.message,
            path=request.url.path,
        )
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Handle routing errors (unknown path, wrong method) and HTTPException."""
        logger.warning(
            "HTTP error",
            status_code=exc.status_code,
            message=str(exc.detail),
            path=request.url.path,
        )
        return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Handle malformed or incomplete request bodies."""
        message = request_validation_message(exc)
        logger.warning(
            "Validation error",
            message=message,
            path=request.url.path,
        )
        return error_response(400, message)

    @app.exception_handler(SentimentPipelineError)
    async def pipeline_error_handler(request: Request, exc: SentimentPipelineError) -> JSONResponse:
        """Handle sentiment pipeline errors by category."""
        status_code = status_for_pipeline_error(exc)
        log_method = logger.warning if status_code < 500 else logger.error
        log_method(
            "Sentiment pipeline error",
            error=str(exc),
            error_type=type(exc).__name__,
            status_code=status_code,
            path=request.url.path,
        )
        return error_response(status_code, str(exc))

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        """Handle database errors."""
        logger.error(
            "Database error",
            error=str(exc),
            path=request.url.path,
        )
        return error_response(500, "A database error occurred")

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected errors."""
        logger.exception(
            "Unexpected error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return error_response(500, "An unexpected error occurred")
