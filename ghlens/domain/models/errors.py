"""Typed failures raised by the GitHub resilience layer.

Each error carries an ErrorKind assigned where the failure happens, so
callers never have to infer the cause from message text.
"""

import enum
from datetime import datetime
from typing import Optional


class ErrorKind(str, enum.Enum):
    """Classification of a failed GitHub API call."""
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    TRANSPORT_FAILURE = "transport_failure"
    RETRIES_EXHAUSTED = "retries_exhausted"


class GitHubApiError(Exception):
    """Base class for all failures surfaced by the fetcher."""
    kind: ErrorKind = ErrorKind.SERVER_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(GitHubApiError):
    """The requested user or resource does not exist (HTTP 404)."""
    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str = "404: resource not found"):
        super().__init__(message, status_code=404)


class InvalidInputError(GitHubApiError):
    """The request was malformed, e.g. an invalid username (HTTP 422)."""
    kind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str = "422: invalid input", status_code: Optional[int] = 422):
        super().__init__(message, status_code=status_code)


class RateLimitedError(GitHubApiError):
    """The API refused the request because of rate limiting (HTTP 403).

    reset_at is set when GitHub reported an exhausted quota together with
    its reset time; retrying before then cannot succeed.
    """
    kind = ErrorKind.RATE_LIMITED

    def __init__(self, reset_at: Optional[datetime] = None):
        self.reset_at = reset_at
        if reset_at is not None:
            message = f"403: rate limit exhausted until {reset_at.isoformat()}"
        else:
            message = "403: rate limited"
        super().__init__(message, status_code=403)


class ServerError(GitHubApiError):
    """Any other non-success status after retries were used up."""
    kind = ErrorKind.SERVER_ERROR

    def __init__(self, status_code: int, message: Optional[str] = None):
        super().__init__(message or f"{status_code}: server error", status_code=status_code)


class TransportFailure(GitHubApiError):
    """The request never produced a response (DNS, connect, timeout...)."""
    kind = ErrorKind.TRANSPORT_FAILURE

    def __init__(self, message: str):
        super().__init__(message)


class MaxRetryError(GitHubApiError):
    """Exception raised when max retries are exceeded."""
    kind = ErrorKind.RETRIES_EXHAUSTED

    def __init__(self, attempts: int, last_error: Optional[Exception] = None):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Max retries ({attempts}) exceeded. Last error: {last_error}")
