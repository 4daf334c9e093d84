"""Request executor that attaches a bearer token to every call.

The credential is supplied explicitly as a token provider at construction
time and queried before each request, so a refreshed token is always used.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from tubeflow.domain.models.common import BearerToken, RequestOptions
from tubeflow.domain.models.request_state import RequestState, RequestStatus
from tubeflow.infrastructure.resilience.errors import AuthenticationRequiredError
from tubeflow.infrastructure.resilience.request_executor import RequestExecutor

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Union[Optional[str], Awaitable[Optional[str]]]]


def static_token(token: Optional[str]) -> TokenProvider:
    """Wraps a fixed token (or None) as a token provider."""
    def provider() -> Optional[str]:
        return token
    return provider


class AuthenticatedRequestExecutor(RequestExecutor):
    """RequestExecutor that sends ``Authorization: Bearer <token>``."""

    def __init__(self, token_provider: Optional[TokenProvider], **kwargs: Any):
        """Initializes the executor.

        Args:
            token_provider: Sync or async callable returning the current token,
                or None when the user is not signed in.
            **kwargs: Passed through to RequestExecutor.
        """
        super().__init__(**kwargs)
        self.token_provider = token_provider

    @property
    def is_authenticated(self) -> bool:
        return self.token_provider is not None

    async def _get_token(self) -> Optional[BearerToken]:
        if self.token_provider is None:
            return None
        token = self.token_provider()
        if inspect.isawaitable(token):
            token = await token
        return BearerToken(token) if token else None

    async def execute(self, target: str, options: Optional[RequestOptions] = None) -> Any:
        if self.token_provider is None:
            self._fail_unauthenticated("User not authenticated")

        try:
            token = await self._get_token()
        except Exception as e:
            self._fail_unauthenticated(f"Failed to obtain authentication token: {e}", cause=e)
        if not token:
            self._fail_unauthenticated("Failed to obtain authentication token")

        options = options or {}
        headers = dict(options.get("headers") or {})
        headers["Authorization"] = f"Bearer {token}"
        return await super().execute(target, {**options, "headers": headers})

    def _fail_unauthenticated(self, message: str, cause: Optional[BaseException] = None) -> None:
        """Settles the state as an error without touching the network."""
        failure = AuthenticationRequiredError(message)
        logger.error(f"Authentication error: {message}")
        self._state = RequestState(status=RequestStatus.ERROR, error=failure.error)
        raise failure from cause
