"""FastAPI exception handlers for pagination errors."""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .problem_details import (
    ProblemDetailException,
    create_problem_response
)

logger = logging.getLogger(__name__)


async def problem_detail_exception_handler(
    request: Request,
    exc: ProblemDetailException
) -> JSONResponse:
    """Handle ProblemDetailException instances."""
    log = logger.error if exc.status >= 500 else logger.info
    log(
        f"Problem detail exception: {exc.status} - {exc.title}",
        extra={
            "status_code": exc.status,
            "path": str(request.url.path),
            "method": request.method,
            "detail": exc.detail
        }
    )
    return exc.to_response(request)


async def pagination_request_validation_handler(
    request: Request,
    exc: ValidationError
) -> JSONResponse:
    """Handle page request models that failed validation."""
    logger.info(
        f"Pagination request validation error: {exc.error_count()} errors",
        extra={
            "path": str(request.url.path),
            "method": request.method,
        }
    )

    error_messages = []
    for error in exc.errors():
        loc = " -> ".join(str(x) for x in error["loc"])
        msg = error["msg"]
        error_messages.append(f"{loc}: {msg}" if loc else msg)

    detail = "Invalid pagination request: " + "; ".join(error_messages)

    return create_problem_response(
        status=400,
        title="Validation Error",
        detail=detail,
        request=request
    )


def register_exception_handlers(app):
    """Register pagination exception handlers with a FastAPI app."""
    app.add_exception_handler(ProblemDetailException, problem_detail_exception_handler)
    app.add_exception_handler(ValidationError, pagination_request_validation_handler)
