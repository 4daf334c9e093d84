"""Retry classification and exponential backoff for outbound requests.

Transient failures (timeouts, network errors, 5xx responses) are retried
up to ``max_retries`` times. The delay before retry ``n`` (0-indexed) is
``retry_delay_ms * retry_delay_multiplier ** n``.
"""

import asyncio
import logging
from typing import Optional

import httpx

from tubeflow.domain.models.common import RETRYABLE_STATUS_CODES
from tubeflow.infrastructure.resilience.errors import (
    NetworkFailure,
    RequestFailure,
    RequestTimeoutError,
)

logger = logging.getLogger(__name__)

# Transport errors that mean "no response arrived, the server may be fine next time"
RETRYABLE_TRANSPORT_ERRORS = (
    httpx.NetworkError,        # ConnectError, ReadError, WriteError, CloseError
    httpx.RemoteProtocolError,
    httpx.ProxyError,
)

TIMEOUT_ERRORS = (
    asyncio.TimeoutError,
    httpx.TimeoutException,
)

# Legacy message signatures of network failures raised by other transports
RETRY_ERROR_SIGNATURES = (
    "Failed to fetch",
    "NetworkError",
    "TypeError: Failed to fetch",
)


def matches_network_signature(message: str) -> bool:
    """True if an error message looks like a network failure."""
    return any(signature in message for signature in RETRY_ERROR_SIGNATURES)


class RetryPolicy:
    """Decides whether an attempt is retried and how long to wait first."""

    def __init__(
        self,
        max_retries: int = 3,
        retry_delay_ms: float = 1000,
        retry_delay_multiplier: float = 2,
    ):
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")
        if retry_delay_ms < 0:
            raise ValueError(f"retry_delay_ms must be >= 0, got {retry_delay_ms}")
        self.max_retries = max_retries
        self.retry_delay_ms = retry_delay_ms
        self.retry_delay_multiplier = retry_delay_multiplier

    def get_retry_delay_ms(self, attempt: int) -> float:
        """Delay before the retry that follows attempt ``attempt`` (0-indexed)."""
        return self.retry_delay_ms * (self.retry_delay_multiplier ** attempt)

    def has_retries_left(self, attempt: int) -> bool:
        return attempt < self.max_retries

    def should_retry_status(self, status_code: int, attempt: int) -> bool:
        """A response is retried only for a transient 5xx status."""
        if not self.has_retries_left(attempt):
            return False
        return status_code in RETRYABLE_STATUS_CODES

    def should_retry_error(self, error: BaseException, attempt: int) -> bool:
        """Classifies an exception raised before any response arrived.

        Args:
            error: The failure of attempt ``attempt``.
            attempt: 0-indexed attempt number.

        Returns:
            True if another attempt should be made.
        """
        if not self.has_retries_left(attempt):
            return False

        if isinstance(error, RequestFailure):
            if error.is_timeout:
                return True
            if isinstance(error, NetworkFailure):
                return error.retryable
            # HTTP, decode and auth failures are settled outcomes
            if error.http_status is not None:
                return False
            return matches_network_signature(error.message)

        if isinstance(error, TIMEOUT_ERRORS):
            return True
        if isinstance(error, RETRYABLE_TRANSPORT_ERRORS):
            return True
        return matches_network_signature(str(error))

    def __repr__(self) -> str:
        return (
            f"RetryPolicy(max_retries={self.max_retries}, "
            f"retry_delay_ms={self.retry_delay_ms}, "
            f"retry_delay_multiplier={self.retry_delay_multiplier})"
        )


def classify_transport_error(error: Exception) -> Optional[RequestFailure]:
    """Maps an httpx/asyncio exception onto the executor's failure types.

    Returns None for exceptions that are not transport failures.
    """
    if isinstance(error, TIMEOUT_ERRORS):
        return RequestTimeoutError()
    if isinstance(error, httpx.TransportError):
        retryable = isinstance(error, RETRYABLE_TRANSPORT_ERRORS)
        message = str(error) or type(error).__name__
        return NetworkFailure(message, retryable=retryable)
    if isinstance(error, httpx.InvalidURL):
        return NetworkFailure(str(error), retryable=False)
    return None
