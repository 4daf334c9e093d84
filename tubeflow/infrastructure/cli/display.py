import json
import logging
from typing import Any, Mapping, Optional

from rich.box import HEAVY, ROUNDED, SIMPLE
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from tubeflow.domain.interfaces.user_interface import UserInterface
from tubeflow.domain.models.request_state import RequestState, RequestStatus

logger = logging.getLogger(__name__)

STATUS_STYLES = {
    RequestStatus.IDLE: "dim",
    RequestStatus.LOADING: "cyan",
    RequestStatus.SUCCESS: "bold green",
    RequestStatus.ERROR: "bold red",
    RequestStatus.TIMEOUT: "bold yellow",
}


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console()

    @property
    def console(self) -> Console:
        """Get the Rich console instance for direct operations."""
        return self._console

    def display_output(self, output: Any, **kwargs: Any) -> None:
        """Displays a response body, pretty-printing JSON values.

        Args:
            output: Decoded body (dict/list/scalar from JSON, or text).
            **kwargs: title - panel title (default: "Response").
        """
        title = kwargs.get("title", "Response")
        if isinstance(output, str):
            renderable = Text(output) if output else Text("<empty body>", style="dim")
        else:
            try:
                renderable = JSON(json.dumps(output, default=str))
            except (TypeError, ValueError) as e:
                # Fallback if the value can't be rendered as JSON
                logger.error(f"Error rendering response as JSON: {e}")
                renderable = Text(repr(output))

        panel = Panel(
            renderable,
            title=f"[bold white]{title}[/bold white]",
            title_align="left",
            border_style="green",
            box=ROUNDED,
            padding=(0, 1),
        )
        self.console.print(panel)

    def display_state(self, state: RequestState, **kwargs: Any) -> None:
        """Displays the executor state as a compact table."""
        table = Table(title=kwargs.get("title", "Request state"), box=SIMPLE, show_header=False)
        table.add_column("Field", style="bold")
        table.add_column("Value")

        style = STATUS_STYLES.get(state.status, "white")
        table.add_row("status", Text(state.status.value, style=style))
        table.add_row("retryCount", str(state.retry_count))
        if state.error is not None:
            table.add_row("error", state.error.message)
            if state.error.http_status is not None:
                table.add_row("httpStatus", str(state.error.http_status))
            table.add_row("isTimeout", str(state.error.is_timeout))
        self.console.print(table)

    def display_table(self, title: str, rows: Mapping[str, str], **kwargs: Any) -> None:
        table = Table(title=title, box=ROUNDED)
        table.add_column(kwargs.get("key_header", "Name"), style="bold cyan")
        table.add_column(kwargs.get("value_header", "Value"))
        for key, value in rows.items():
            table.add_row(key, value)
        self.console.print(table)

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message in a distinct style.

        Args:
            error_message: The error message to display.
        """
        panel = Panel(
            Text(error_message, style="white"),
            title="[bold red]Error[/bold red]",
            border_style="red",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        panel = Panel(
            Text(info_message, style="white"),
            title="[bold blue]Info[/bold blue]",
            border_style="blue",
            box=SIMPLE,
            padding=(0, 1)
        )
        self.console.print(panel)

    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        logger.warning(f"Display warning: {warning_message}")
        panel = Panel(
            Text(warning_message, style="white"),
            title="[bold yellow]Warning[/bold yellow]",
            border_style="yellow",
            box=HEAVY,
            padding=(0, 1)
        )
        self.console.print(panel)
