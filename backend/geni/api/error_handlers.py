"""Error Handlers: global exception handlers for the Geni API.

Invariants:
    - GeniError -> structured JSON with error code, message, severity and its HTTP status
    - RequestValidationError -> 400 with field-level error details
    - Exception (catch-all) -> 500, never leaks internal details
    - Request bodies are never logged (uploads carry genotype data)

Design Decisions:
    - Three-layer handler: domain (GeniError), validation (Pydantic), catch-all (Exception)
    - Kept out of main.py so tests can build an app with the same handlers
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from geni.core.errors import GeniError, ErrorSeverity

logger = logging.getLogger(__name__)

_WARNING_SEVERITIES = (ErrorSeverity.INFO, ErrorSeverity.WARNING)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_geni_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_geni_error_handler(app: FastAPI) -> None:

    @app.exception_handler(GeniError)
    async def geni_error_handler(request: Request, exc: GeniError):
        """Handle all Geni domain/infrastructure errors."""
        log = logger.warning if exc.severity in _WARNING_SEVERITIES else logger.error
        log(
            f"GeniError: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "user_id": exc.context.user_id,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        fields = [".".join(str(loc) for loc in e["loc"]) for e in exc.errors()]
        logger.warning(f"Validation error on {request.url.path}: {fields}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all: never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
