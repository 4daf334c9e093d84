"""Domain Events related to outbound requests and resilience.

Examples include events for when requests start, are retried, fail, or succeed.
"""

from dataclasses import dataclass, field
import time
from typing import Optional


@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass


@dataclass
class RequestStarted(DomainEvent):
    """Event triggered when an attempt is about to be made."""
    method: str
    target: str
    attempt_number: int
    call_id: Optional[int] = None
    timestamp: float = field(default_factory=time.time)


@dataclass
class RequestSucceeded(DomainEvent):
    """Event triggered when a request settles successfully."""
    method: str
    target: str
    http_status: int
    latency_ms: float
    retries: int = 0
    call_id: Optional[int] = None
    timestamp: float = field(default_factory=time.time)


@dataclass
class RequestFailed(DomainEvent):
    """Event triggered when a request fails definitively (after retries)."""
    method: str
    target: str
    error_type: str
    error_message: str
    http_status: Optional[int] = None
    is_timeout: bool = False
    retries: int = 0
    call_id: Optional[int] = None
    timestamp: float = field(default_factory=time.time)


@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when a retry is scheduled for a failed attempt."""
    method: str
    target: str
    attempt_number: int
    delay_seconds: float
    reason: str
    call_id: Optional[int] = None
    timestamp: float = field(default_factory=time.time)
