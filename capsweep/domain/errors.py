"""Exception hierarchy for capsweep.

Fatal errors (authentication, exhausted retries while collecting videos)
propagate to the command handler. Everything below the per-video boundary
is caught and counted instead.
"""

from typing import Optional


class CapsweepError(Exception):
    """Base class for every error raised deliberately by capsweep."""


class ConfigurationError(CapsweepError):
    """Required configuration (e.g. API_KEY) is missing or invalid."""


class TransportError(CapsweepError):
    """A request failed before any HTTP response was received."""

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        self.original_exception = original_exception
        super().__init__(message)


class RetriesExhaustedError(CapsweepError):
    """Exception raised when every attempt allowed for a request was used up."""

    def __init__(
        self,
        request_description: str,
        attempts: int,
        last_error: Optional[Exception] = None,
        last_status: Optional[int] = None,
    ):
        self.request_description = request_description
        self.attempts = attempts
        self.last_error = last_error
        self.last_status = last_status
        if last_error is not None:
            cause = f"Last error: {last_error}"
        else:
            cause = f"Last status: {last_status}"
        super().__init__(f"{request_description} failed after {attempts} attempt(s). {cause}")


class ApiStatusError(CapsweepError):
    """The API answered with a status the caller cannot treat as success."""

    def __init__(self, message: str, status_code: int, url: str = ""):
        self.status_code = status_code
        self.url = url
        super().__init__(f"{message}: {status_code}")


class AuthenticationError(ApiStatusError):
    """The API key was rejected, or the bearer token stopped being accepted."""


class DeletionAbortedError(CapsweepError):
    """A batch of deletions was stopped by a fatal error part way through.

    `deleted` holds the deletions confirmed before the abort, so the caller
    can still report them.
    """

    def __init__(self, deleted: int, cause: Exception):
        self.deleted = deleted
        self.cause = cause
        super().__init__(f"Deletion aborted after {deleted} success(es): {cause}")
