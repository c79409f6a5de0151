"""Maps failures to stable, user-facing messages."""

from typing import Optional

from ghlens.domain.models.errors import ErrorKind, GitHubApiError, RateLimitedError

FRIENDLY_MESSAGES = {
    ErrorKind.NOT_FOUND: "User not found on GitHub",
    ErrorKind.INVALID_INPUT: "Invalid username",
    ErrorKind.RATE_LIMITED: "GitHub API rate limit reached. Try again later",
    ErrorKind.TRANSPORT_FAILURE: "Connection error. Check your internet connection",
    ErrorKind.RETRIES_EXHAUSTED: "GitHub did not respond after several attempts",
}

# Fallback for errors raised outside the GitHubApiError hierarchy
_SUBSTRING_KINDS = (
    ("404", ErrorKind.NOT_FOUND),
    ("403", ErrorKind.RATE_LIMITED),
    ("422", ErrorKind.INVALID_INPUT),
    ("failed to fetch", ErrorKind.TRANSPORT_FAILURE),
    ("connection", ErrorKind.TRANSPORT_FAILURE),
)

UNKNOWN_ERROR = "Unknown error"


def _rate_limited_message(error: RateLimitedError) -> str:
    if error.reset_at is None:
        return FRIENDLY_MESSAGES[ErrorKind.RATE_LIMITED]
    local_reset = error.reset_at.astimezone()
    return f"GitHub API rate limit reached. Try again after {local_reset.strftime('%H:%M:%S')}"


def classify_message(message: str) -> Optional[ErrorKind]:
    lowered = message.lower()
    for needle, kind in _SUBSTRING_KINDS:
        if needle in lowered:
            return kind
    return None


def friendly_error_message(error: BaseException) -> str:
    """Returns the text shown to users for a failed lookup.

    Typed errors map by kind; other exceptions are matched on known
    substrings and otherwise pass through their raw message.
    """
    if isinstance(error, RateLimitedError):
        return _rate_limited_message(error)
    if isinstance(error, GitHubApiError):
        if error.kind is ErrorKind.SERVER_ERROR:
            return f"GitHub server error ({error.status_code})"
        return FRIENDLY_MESSAGES[error.kind]

    message = str(error)
    kind = classify_message(message)
    if kind is not None:
        return FRIENDLY_MESSAGES[kind]
    return message or UNKNOWN_ERROR
