"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), builds a request
executor per command and reports the response body and the settled
request state through the UserInterface.
"""

import logging
from typing import Any, Callable, Optional

from tubeflow.domain.interfaces.user_interface import UserInterface
from tubeflow.domain.models.request_state import RequestState
from tubeflow.infrastructure.config.endpoints import API_ENDPOINTS, get_api_url
from tubeflow.infrastructure.resilience.errors import RequestFailure
from tubeflow.infrastructure.resilience.request_executor import RequestExecutor

logger = logging.getLogger(__name__)

# Builds a fresh executor; the argument is an optional bearer token
ExecutorFactory = Callable[[Optional[str]], RequestExecutor]

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE")


class CommandHandler:
    """Handles incoming commands and delegates to a request executor."""

    def __init__(self, executor_factory: ExecutorFactory, ui: UserInterface, base_url: str):
        self.executor_factory = executor_factory
        self.ui = ui
        self.base_url = base_url

    async def handle_request(
        self,
        method: str,
        path: str,
        data: Any = None,
        token: Optional[str] = None,
    ) -> RequestState:
        """Handles the 'request' command.

        Args:
            method: HTTP method, one of SUPPORTED_METHODS.
            path: Endpoint name ('leads'), path ('/api/leads/42') or absolute URL.
            data: JSON-serializable body for POST/PUT.
            token: Bearer token; when set an authenticated executor is used.

        Returns:
            The executor state after the request settled.
        """
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        target = path if path.startswith(("http://", "https://")) else get_api_url(path)
        logger.info(f"Handling 'request' command: {method} {target}")

        async with self.executor_factory(token) as executor:
            try:
                if method == "GET":
                    result = await executor.get(target)
                elif method == "POST":
                    result = await executor.post(target, data)
                elif method == "PUT":
                    result = await executor.put(target, data)
                else:
                    result = await executor.delete(target)
            except RequestFailure as e:
                # The executor's notifier has already shown the failure
                logger.debug(f"Request command failed: {e}")
                if e.is_timeout:
                    self.ui.display_warning(
                        f"No response within {executor.config.timeout_ms:g} ms after "
                        f"{executor.retry_policy.max_retries + 1} attempt(s). Try --timeout-ms to allow longer."
                    )
            else:
                self.ui.display_output(result, title=f"{method} {target}")
            self.ui.display_state(executor.state)
            return executor.state

    async def handle_health(self) -> RequestState:
        """Handles the 'health' command."""
        logger.info("Handling 'health' command.")
        return await self.handle_request("GET", "health")

    def handle_list_endpoints(self) -> None:
        """Handles the 'endpoints' command."""
        rows = {name: get_api_url(path, self.base_url) for name, path in API_ENDPOINTS.items()}
        self.ui.display_table("API endpoints", rows, key_header="Endpoint", value_header="URL")
        self.ui.display_info(f"Base URL: {self.base_url}")
