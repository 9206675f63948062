"""Problem Details (RFC 9457) errors raised by the pagination engine."""

from typing import Optional, Any
from pydantic import BaseModel, Field
from fastapi import Request
from fastapi.responses import JSONResponse


class ProblemDetail(BaseModel):
    """Problem Details as defined in RFC 9457."""

    type: str = Field(default="about:blank", description="A URI reference that identifies the problem type")
    title: str = Field(description="A short, human-readable summary of the problem type")
    status: int = Field(description="The HTTP status code")
    detail: Optional[str] = Field(default=None, description="A human-readable explanation specific to this occurrence")
    instance: Optional[str] = Field(default=None, description="A URI reference that identifies the specific occurrence")

    # Allow additional properties for extensions
    model_config = {"extra": "allow"}


class ProblemDetailException(Exception):
    """Base exception for Problem Details responses."""

    def __init__(
        self,
        status: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: str = "about:blank",
        instance: Optional[str] = None,
        **extensions: Any
    ):
        self.status = status
        self.title = title
        self.detail = detail
        self.type_uri = type_uri
        self.instance = instance
        self.extensions = extensions
        super().__init__(detail or title)

    def to_problem_detail(self, request: Optional[Request] = None) -> ProblemDetail:
        """Convert to ProblemDetail model."""
        instance = self.instance
        if instance is None and request:
            instance = str(request.url.path)

        problem = ProblemDetail(
            type=self.type_uri,
            title=self.title,
            status=self.status,
            detail=self.detail,
            instance=instance
        )

        for key, value in self.extensions.items():
            setattr(problem, key, value)

        return problem

    def to_response(self, request: Optional[Request] = None) -> JSONResponse:
        """Convert to JSONResponse with Problem Details format."""
        problem = self.to_problem_detail(request)
        return JSONResponse(
            status_code=self.status,
            content=problem.model_dump(exclude_none=True),
            headers={"Content-Type": "application/problem+json"}
        )


class UnprocessableEntityError(ProblemDetailException):
    """422 Unprocessable Entity error."""

    def __init__(self, detail: str, title: str = "Unprocessable Entity", **extensions: Any):
        super().__init__(
            status=422,
            title=title,
            detail=detail,
            **extensions
        )


class InternalServerError(ProblemDetailException):
    """500 Internal Server Error."""

    def __init__(
        self,
        detail: str = "Internal server error",
        title: str = "Internal Server Error",
        **extensions: Any
    ):
        super().__init__(
            status=500,
            title=title,
            detail=detail,
            **extensions
        )


class InvalidCursorError(UnprocessableEntityError):
    """Cursor token is malformed, tampered with, or does not fit the sort keys.

    This is a client input error: the same token will never succeed, so it
    must not be retried.
    """

    def __init__(self, detail: str = "Invalid cursor", **extensions: Any):
        super().__init__(detail=detail, title="Invalid Cursor", **extensions)


class ContractViolationError(InternalServerError):
    """Caller broke the pagination contract.

    Raised for inputs the request-validation layer should have rejected,
    such as both `starting_after` and `ending_before`, or a page size out of
    bounds.
    """

    def __init__(self, detail: str, **extensions: Any):
        super().__init__(detail=detail, title="Pagination Contract Violation", **extensions)


def create_problem_response(
    status: int,
    title: str,
    detail: Optional[str] = None,
    type_uri: str = "about:blank",
    instance: Optional[str] = None,
    request: Optional[Request] = None,
    **extensions: Any
) -> JSONResponse:
    """Create a Problem Details response."""
    exc = ProblemDetailException(
        status=status,
        title=title,
        detail=detail,
        type_uri=type_uri,
        instance=instance,
        **extensions
    )
    return exc.to_response(request)
