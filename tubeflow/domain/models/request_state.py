"""Value objects describing the lifecycle of a single outbound request.

A RequestState is the snapshot callers read to decide what to render:
idle, loading, success (with data), or error/timeout (with a RequestError).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class RequestStatus(str, Enum):
    """Mutually exclusive lifecycle statuses of a request executor."""
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"
    TIMEOUT = "timeout"


TERMINAL_FAILURE_STATUSES = (RequestStatus.ERROR, RequestStatus.TIMEOUT)


@dataclass(frozen=True)
class RequestError:
    """Structured failure info for a settled request."""
    message: str
    http_status: Optional[int] = None
    is_timeout: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "status": self.http_status,
            "isTimeout": self.is_timeout,
        }


@dataclass
class RequestState:
    """Snapshot of an executor's current request.

    Exactly one of data/error is set once a call settles; both stay empty
    while idle or loading.
    """
    status: RequestStatus = RequestStatus.IDLE
    data: Any = None
    error: Optional[RequestError] = None
    retry_count: int = 0
    # Monotonic per-executor call counter, used only for log correlation
    call_id: int = field(default=0, compare=False)

    @property
    def is_idle(self) -> bool:
        return self.status is RequestStatus.IDLE

    @property
    def is_loading(self) -> bool:
        return self.status is RequestStatus.LOADING

    @property
    def is_success(self) -> bool:
        return self.status is RequestStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status is RequestStatus.ERROR

    @property
    def is_timeout(self) -> bool:
        return self.status is RequestStatus.TIMEOUT

    @property
    def is_terminal_failure(self) -> bool:
        return self.status in TERMINAL_FAILURE_STATUSES

    def to_dict(self) -> Dict[str, Any]:
        """Renders the snapshot in the shape screens consume."""
        return {
            "status": self.status.value,
            "data": self.data,
            "error": self.error.to_dict() if self.error else None,
            "isLoading": self.is_loading,
            "retryCount": self.retry_count,
        }
