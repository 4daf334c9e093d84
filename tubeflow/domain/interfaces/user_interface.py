"""Interface for interacting with the user (output only).

Defines the contract for displaying response bodies, request state,
errors, warnings and informational messages, allowing different UI
implementations (e.g., console, GUI).
"""

import abc
from typing import Any, Mapping

from tubeflow.domain.models.request_state import RequestState


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_output(self, output: Any, **kwargs: Any) -> None:
        """Displays a decoded response body to the user.

        Args:
            output: JSON value or text returned by a request.
            **kwargs: Additional arguments for formatting (e.g., title).
        """
        pass

    @abc.abstractmethod
    def display_state(self, state: RequestState, **kwargs: Any) -> None:
        """Displays the settled state of a request executor."""
        pass

    @abc.abstractmethod
    def display_table(self, title: str, rows: Mapping[str, str], **kwargs: Any) -> None:
        """Displays a two-column key/value table."""
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays an error message to the user.

        Args:
            error_message: The error message string.
            **kwargs: Additional arguments for formatting.
        """
        pass

    @abc.abstractmethod
    def display_warning(self, warning_message: str, **kwargs: Any) -> None:
        """Displays a warning message to the user."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass
