"""Exceptions raised by the request executor.

Every terminal failure crosses the executor boundary as a RequestFailure
carrying the same RequestError that is written into the executor state.
"""

from typing import Any, Optional

from tubeflow.domain.models.request_state import RequestError


class RequestFailure(Exception):
    """Base class for a request that settled in a failure state."""

    def __init__(
        self,
        message: str,
        http_status: Optional[int] = None,
        is_timeout: bool = False,
        data: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.http_status = http_status
        self.is_timeout = is_timeout
        # Decoded error body, when the server sent one
        self.data = data

    @property
    def error(self) -> RequestError:
        return RequestError(
            message=self.message,
            http_status=self.http_status,
            is_timeout=self.is_timeout,
        )


class RequestTimeoutError(RequestFailure):
    """An attempt exceeded the configured timeout."""

    def __init__(self, message: str = "Request timeout"):
        super().__init__(message, is_timeout=True)


class NetworkFailure(RequestFailure):
    """Transport-level failure: no response was received."""

    def __init__(self, message: str, retryable: bool = True):
        super().__init__(message)
        self.retryable = retryable


class HttpStatusError(RequestFailure):
    """The server answered with a non-2xx status."""


class DecodeFailure(RequestFailure):
    """The response body could not be parsed as its declared content type."""


class AuthenticationRequiredError(RequestFailure):
    """No credential was available for an authenticated request."""
