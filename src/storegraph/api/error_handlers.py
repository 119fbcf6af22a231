"""
Global exception handlers for the Storegraph API.

- StoregraphError -> status from the error class, structured JSON body
- RequestValidationError -> 422 with field-level details
- Exception (catch-all) -> 500, never leaks internal details
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..core.errors import DanglingReferenceError, StoregraphError, ValidationError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(StoregraphError)
    async def storegraph_error_handler(request: Request, exc: StoregraphError):
        log = logger.warning if exc.http_status < 500 else logger.error
        log(f"{exc.code} on {request.url.path}: {exc}")
        error = {"code": exc.code, "message": str(exc)}
        if isinstance(exc, ValidationError):
            error["details"] = exc.errors
        elif isinstance(exc, DanglingReferenceError):
            error["details"] = exc.missing
        return JSONResponse(status_code=exc.http_status, content={"error": error})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=422,
            content={
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Invalid request data",
                    "details": [
                        f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}"
                        for e in exc.errors()
                    ],
                },
            },
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": {"code": "INTERNAL_ERROR", "message": "An unexpected error occurred"}},
        )
