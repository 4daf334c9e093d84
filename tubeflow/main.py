"""Main entry point for the tubeflow application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import json
import logging
from typing import Any, Coroutine, Dict, Optional

import typer
from typing_extensions import Annotated

from tubeflow.core.command_handler import SUPPORTED_METHODS, CommandHandler
from tubeflow.domain.models.request_state import RequestState
from tubeflow.infrastructure.cli.display import ConsoleDisplay
from tubeflow.infrastructure.config.settings import (
    get_api_base_url, get_api_token, get_config, get_executor_config, load_configuration, set_config
)
from tubeflow.infrastructure.monitoring.logger_setup import resolve_log_level, setup_logging
from tubeflow.infrastructure.notifications.notifiers import DisplayErrorNotifier
from tubeflow.infrastructure.resilience.authenticated_executor import (
    AuthenticatedRequestExecutor, static_token
)
from tubeflow.infrastructure.resilience.request_executor import RequestExecutor

logger = logging.getLogger(__name__)

# --- Dependency Injection Container (Manual) ---

def create_dependencies() -> Dict[str, Any]:
    """Creates and wires up all dependencies for the application.

    This acts as the Composition Root.
    """
    load_configuration()
    setup_logging(
        log_level=resolve_log_level(get_config('logging.level')),
        log_file=get_config('logging.file'),
        log_format=get_config('logging.format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s'),
    )

    dependencies: Dict[str, Any] = {}
    dependencies['ui'] = ConsoleDisplay()
    dependencies['notifier'] = DisplayErrorNotifier(ui=dependencies['ui'])
    dependencies['base_url'] = get_api_base_url()
    dependencies['executor_config'] = get_executor_config()

    def executor_factory(token: Optional[str] = None) -> RequestExecutor:
        kwargs = dict(
            config=dependencies['executor_config'],
            base_url=dependencies['base_url'],
            notifier=dependencies['notifier'],
        )
        effective_token = token or get_api_token()
        if effective_token:
            return AuthenticatedRequestExecutor(token_provider=static_token(effective_token), **kwargs)
        return RequestExecutor(**kwargs)

    dependencies['executor_factory'] = executor_factory
    dependencies['command_handler'] = CommandHandler(
        executor_factory=executor_factory,
        ui=dependencies['ui'],
        base_url=dependencies['base_url'],
    )
    logger.info(f"Dependencies initialized. API base URL: {dependencies['base_url']}")
    return dependencies


_dependencies: Optional[Dict[str, Any]] = None


def get_command_handler() -> CommandHandler:
    """Builds the dependency graph on first use and returns the handler."""
    global _dependencies
    if _dependencies is None:
        _dependencies = create_dependencies()
    return _dependencies['command_handler']

# --- Typer App Definition ---
app = typer.Typer(
    name="tubeflow",
    help="tubeflow: resilient client for the steel-tube back-office API (leads, quotations, POs, dispatch, invoices).",
    add_completion=False,
)


def run_async(coro: Coroutine[Any, Any, RequestState]) -> RequestState:
    """Runs an async command handler from a sync Typer command."""
    return asyncio.run(coro)


def exit_for_state(state: RequestState) -> None:
    if not state.is_success:
        raise typer.Exit(code=1)

# --- CLI Commands ---

@app.command()
def request(
    method: Annotated[str, typer.Argument(help=f"HTTP method: {', '.join(SUPPORTED_METHODS)}.")],
    path: Annotated[str, typer.Argument(help="Endpoint name (e.g. 'leads'), API path, or absolute URL.")],
    data: Annotated[Optional[str], typer.Option("--data", "-d", help="JSON request body for POST/PUT.")] = None,
    token: Annotated[Optional[str], typer.Option("--token", "-t", help="Bearer token for authenticated calls.")] = None,
):
    """Send one request through the resilient executor."""
    if method.upper() not in SUPPORTED_METHODS:
        raise typer.BadParameter(f"must be one of {', '.join(SUPPORTED_METHODS)}", param_hint="METHOD")
    body = None
    if data is not None:
        try:
            body = json.loads(data)
        except json.JSONDecodeError as e:
            raise typer.BadParameter(f"invalid JSON: {e}", param_hint="--data") from e

    handler = get_command_handler()
    exit_for_state(run_async(handler.handle_request(method, path, body, token)))


@app.command()
def health():
    """Check the API health endpoint."""
    handler = get_command_handler()
    exit_for_state(run_async(handler.handle_health()))


@app.command()
def endpoints():
    """List the known API endpoints."""
    get_command_handler().handle_list_endpoints()


@app.callback()
def main_callback(
    timeout_ms: Annotated[Optional[int], typer.Option("--timeout-ms", min=1, help="Per-attempt timeout in milliseconds.")] = None,
    max_retries: Annotated[Optional[int], typer.Option("--max-retries", min=0, help="Retries after the first attempt.")] = None,
    base_url: Annotated[Optional[str], typer.Option("--base-url", help="API base URL.")] = None,
):
    """Resilient API client with timeouts, retries and backoff."""
    set_config('api.timeout_ms', timeout_ms)
    set_config('api.max_retries', max_retries)
    set_config('api.url', base_url)

# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
