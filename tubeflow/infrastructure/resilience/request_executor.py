"""Service for executing HTTP requests with timeouts and automatic retries.

Wraps one logical request: every attempt is bounded by a timeout,
transient failures (timeouts, network errors, 5xx responses) are retried
with exponential backoff, and the outcome is exposed through a single
RequestState snapshot (idle / loading / success / error / timeout).

Calls on one executor are not queued. Each ``execute`` returns its own
result to its caller, but the shared ``state`` reflects whichever call
settled last. Use one executor per independent operation.
"""

import asyncio
import dataclasses
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

import httpx

from tubeflow.domain.events.api_events import (
    DomainEvent, RequestFailed, RequestStarted, RequestSucceeded, RetryScheduled
)
from tubeflow.domain.interfaces.notifier import ErrorNotifier
from tubeflow.domain.models.common import JSON_CONTENT_TYPE, HttpMethod, RequestOptions, RequestTarget
from tubeflow.domain.models.request_state import RequestState, RequestStatus
from tubeflow.infrastructure.notifications.notifiers import (
    LoggingErrorNotifier, select_error_message
)
from tubeflow.infrastructure.resilience.errors import (
    DecodeFailure, HttpStatusError, NetworkFailure, RequestFailure
)
from tubeflow.infrastructure.resilience.retry_policy import RetryPolicy, classify_transport_error

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "tubeflow-client"


@dataclass
class ExecutorConfig:
    """Tunables for a RequestExecutor. Times are in milliseconds."""
    timeout_ms: float = 10000
    max_retries: int = 3
    retry_delay_ms: float = 1000
    retry_delay_multiplier: float = 2
    notify_on_error: bool = True


@dataclass
class _Call:
    """Bookkeeping for one ``execute`` invocation."""
    call_id: int
    method: HttpMethod
    target: str
    options: RequestOptions
    retries: int = 0
    started_at: float = dataclasses.field(default_factory=time.perf_counter)


def dispatch_event(event: DomainEvent) -> None:
    logger.debug(f"EVENT: {event}")


class RequestExecutor:
    """Executes requests with per-attempt timeouts, retries and a lifecycle state."""

    def __init__(
        self,
        config: Optional[ExecutorConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = "",
        notifier: Optional[ErrorNotifier] = None,
        default_headers: Optional[Mapping[str, str]] = None,
    ):
        """Initializes the RequestExecutor.

        Args:
            config: Timeout/retry settings; defaults to ExecutorConfig().
            client: Optional pre-built httpx.AsyncClient. When omitted the
                executor creates (and later closes) its own.
            base_url: Base URL that relative request targets resolve against.
                Ignored when ``client`` is given.
            notifier: Sink for user-facing failure messages.
            default_headers: Headers sent with every request.
        """
        self.config = config or ExecutorConfig()
        if self.config.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {self.config.timeout_ms}")
        self.retry_policy = RetryPolicy(
            max_retries=self.config.max_retries,
            retry_delay_ms=self.config.retry_delay_ms,
            retry_delay_multiplier=self.config.retry_delay_multiplier,
        )
        self.notifier = notifier or LoggingErrorNotifier()

        self._owns_client = client is None
        if client is None:
            headers = {"User-Agent": DEFAULT_USER_AGENT}
            headers.update(default_headers or {})
            # Attempts are bounded by asyncio.wait_for, not by httpx
            client = httpx.AsyncClient(
                base_url=base_url, headers=headers, timeout=None, follow_redirects=True
            )
        elif default_headers:
            client.headers.update(default_headers)
        self.client = client

        self._state = RequestState()
        self._call_counter = 0

        logger.debug(f"RequestExecutor initialized: {self.config}, base_url='{self.client.base_url}'")

    # --- State ---

    @property
    def state(self) -> RequestState:
        """Current snapshot. Replaced (never mutated) on every transition."""
        return self._state

    @property
    def is_idle(self) -> bool:
        return self._state.is_idle

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def is_success(self) -> bool:
        return self._state.is_success

    @property
    def is_error(self) -> bool:
        return self._state.is_error

    @property
    def is_timeout(self) -> bool:
        return self._state.is_timeout

    def reset(self) -> None:
        """Forces the state back to idle.

        An in-flight call is not cancelled and will still write its result
        when it settles.
        """
        self._state = RequestState()

    # --- Execution ---

    async def execute(self, target: str, options: Optional[RequestOptions] = None) -> Any:
        """Performs one logical request, retrying transient failures.

        Args:
            target: Absolute URL, or a path relative to the client's base URL.
            options: Method, headers, body and query params.

        Returns:
            The decoded response body (JSON value or text).

        Raises:
            RequestFailure: The request settled in the error or timeout state.
        """
        options = options or {}
        self._call_counter += 1
        call = _Call(
            call_id=self._call_counter,
            method=HttpMethod(str(options.get("method") or "GET").upper()),
            target=RequestTarget(target),
            options=options,
        )
        self._state = RequestState(status=RequestStatus.LOADING, call_id=call.call_id)

        try:
            data, http_status = await self._run_attempts(call)
        except RequestFailure as failure:
            self._settle_failure(call, failure)
            raise

        latency_ms = (time.perf_counter() - call.started_at) * 1000
        self._state = RequestState(
            status=RequestStatus.SUCCESS,
            data=data,
            retry_count=0,
            call_id=call.call_id,
        )
        dispatch_event(RequestSucceeded(
            method=call.method, target=call.target, http_status=http_status,
            latency_ms=latency_ms, retries=call.retries, call_id=call.call_id,
        ))
        return data

    async def retry(self, target: str, options: Optional[RequestOptions] = None) -> Any:
        """Re-runs a failed request with a fresh set of attempts.

        Does nothing (returns None) unless the state is error or timeout.
        """
        if not self._state.is_terminal_failure:
            logger.debug(f"retry() ignored, state is '{self._state.status.value}'")
            return None
        return await self.execute(target, options)

    # --- Convenience methods ---

    async def get(self, target: str, options: Optional[RequestOptions] = None) -> Any:
        return await self.execute(target, {**(options or {}), "method": "GET"})

    async def post(self, target: str, data: Any = None, options: Optional[RequestOptions] = None) -> Any:
        return await self.execute(target, self._json_options("POST", data, options))

    async def put(self, target: str, data: Any = None, options: Optional[RequestOptions] = None) -> Any:
        return await self.execute(target, self._json_options("PUT", data, options))

    async def delete(self, target: str, options: Optional[RequestOptions] = None) -> Any:
        return await self.execute(target, {**(options or {}), "method": "DELETE"})

    @staticmethod
    def _json_options(method: str, data: Any, options: Optional[RequestOptions]) -> RequestOptions:
        options = options or {}
        headers: Dict[str, str] = {"Content-Type": JSON_CONTENT_TYPE}
        headers.update(options.get("headers") or {})
        json_options: RequestOptions = {**options, "method": method, "headers": headers}
        if data:
            json_options["body"] = json.dumps(data)
        return json_options

    # --- Attempts ---

    async def _run_attempts(self, call: _Call) -> Tuple[Any, int]:
        """Runs attempts until one settles. Returns (decoded body, HTTP status)."""
        for attempt in range(self.retry_policy.max_retries + 1):
            dispatch_event(RequestStarted(
                method=call.method, target=call.target,
                attempt_number=attempt + 1, call_id=call.call_id,
            ))
            try:
                response = await self._send(call)
            except Exception as e:
                failure = classify_transport_error(e)
                if failure is None:
                    logger.error(
                        f"Unexpected error calling {call.method} {call.target} "
                        f"on attempt {attempt + 1}: {e}", exc_info=True
                    )
                    failure = RequestFailure(str(e) or type(e).__name__)
                if self.retry_policy.should_retry_error(failure, attempt):
                    await self._backoff(call, attempt, reason=type(failure).__name__)
                    continue
                raise failure from e

            if self.retry_policy.should_retry_status(response.status_code, attempt):
                await self._backoff(call, attempt, reason=f"HTTP {response.status_code}")
                continue

            return self._decode_response(response), response.status_code

        # Every attempt ends in return, raise or continue; the last attempt
        # has no retries left so it never continues.
        raise RuntimeError("retry loop exited without a result")

    async def _send(self, call: _Call) -> httpx.Response:
        """Issues a single attempt bounded by the configured timeout."""
        options = call.options
        request = self.client.build_request(
            call.method,
            call.target,
            headers=options.get("headers"),
            content=options.get("body"),
            params=options.get("params"),
        )
        # The timeout cancels the pending send, so a late response is dropped
        return await asyncio.wait_for(
            self.client.send(request, follow_redirects=True),
            timeout=self.config.timeout_ms / 1000,
        )

    async def _backoff(self, call: _Call, attempt: int, reason: str) -> None:
        delay_ms = self.retry_policy.get_retry_delay_ms(attempt)
        logger.warning(
            f"Retryable failure ({reason}) calling {call.method} {call.target} on attempt "
            f"{attempt + 1}/{self.retry_policy.max_retries + 1}. Waiting {delay_ms / 1000:.2f}s..."
        )
        dispatch_event(RetryScheduled(
            method=call.method, target=call.target, attempt_number=attempt + 1,
            delay_seconds=delay_ms / 1000, reason=reason, call_id=call.call_id,
        ))
        await self._sleep(delay_ms / 1000)
        call.retries = attempt + 1
        if self._state.call_id == call.call_id and self._state.is_loading:
            self._state = dataclasses.replace(self._state, retry_count=call.retries)

    async def _sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    def _decode_response(self, response: httpx.Response) -> Any:
        """Decodes the body (JSON or text) and raises for non-2xx statuses."""
        content_type = response.headers.get("content-type", "")
        if JSON_CONTENT_TYPE in content_type:
            if not response.content:
                data = None
            else:
                try:
                    data = response.json()
                except ValueError as e:
                    raise DecodeFailure(
                        f"Invalid JSON response: {e}", http_status=response.status_code
                    ) from e
        else:
            data = response.text

        if not response.is_success:
            message = None
            if isinstance(data, dict):
                message = data.get("message")
            raise HttpStatusError(
                str(message) if message else f"HTTP error! status: {response.status_code}",
                http_status=response.status_code,
                data=data,
            )
        return data

    # --- Settlement ---

    def _settle_failure(self, call: _Call, failure: RequestFailure) -> None:
        status = RequestStatus.TIMEOUT if failure.is_timeout else RequestStatus.ERROR
        self._state = RequestState(
            status=status,
            error=failure.error,
            retry_count=0,
            call_id=call.call_id,
        )
        logger.error(
            f"{call.method} {call.target} failed after {call.retries + 1} attempt(s): "
            f"{type(failure).__name__}: {failure.message}"
        )
        dispatch_event(RequestFailed(
            method=call.method, target=call.target, error_type=type(failure).__name__,
            error_message=failure.message, http_status=failure.http_status,
            is_timeout=failure.is_timeout, retries=call.retries, call_id=call.call_id,
        ))

        if not self.config.notify_on_error:
            return
        is_network_failure = isinstance(failure, NetworkFailure) and failure.retryable
        message = select_error_message(failure.error, is_network_failure=is_network_failure)
        try:
            self.notifier.notify_error(message, failure.error)
        except Exception as e:
            logger.error(f"Error notifier {type(self.notifier).__name__} failed: {e}", exc_info=True)

    # --- Resource management ---

    async def aclose(self) -> None:
        """Closes the underlying HTTP client if this executor created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "RequestExecutor":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
