"""Error Handlers - global exception handlers for the Scaffold API.

Invariants:
    - ScaffoldError -> its own envelope and HTTP status
    - RequestValidationError -> 400 {"error": "Invalid request data", "details": [...]}
    - Exception (catch-all) -> 500, never leaks internal details

Design Decisions:
    - Extracted from main.py so the app module only wires things together
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from scaffold_ai.core.errors import ErrorSeverity, ScaffoldError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_scaffold_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_scaffold_error_handler(app: FastAPI) -> None:

    @app.exception_handler(ScaffoldError)
    async def scaffold_error_handler(request: Request, exc: ScaffoldError):
        """Handle all Scaffold domain/infrastructure errors."""
        log = logger.warning if exc.http_status < 500 else logger.error
        log(
            f"ScaffoldError [{exc.category.value}/{exc.severity.value}]: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                **exc.context.log_fields(),
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
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all - never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
                "severity": ErrorSeverity.CRITICAL.value,
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    return {
        "error": "Invalid request data",
        "code": "VALIDATION_ERROR",
        "details": [
            {
                "field": ".".join(str(loc) for loc in e["loc"]),
                "message": e["msg"],
                "type": e["type"],
            }
            for e in exc.errors()
        ],
    }
