"""Error handling module for the pagination engine."""

from .problem_details import (
    ProblemDetail,
    ProblemDetailException,
    UnprocessableEntityError,
    InternalServerError,
    InvalidCursorError,
    ContractViolationError,
    create_problem_response
)
from .handlers import register_exception_handlers

__all__ = [
    "ProblemDetail",
    "ProblemDetailException",
    "UnprocessableEntityError",
    "InternalServerError",
    "InvalidCursorError",
    "ContractViolationError",
    "create_problem_response",
    "register_exception_handlers"
]
