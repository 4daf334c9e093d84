"""Error notification sinks and user-facing message selection.

Each terminal request failure maps to exactly one message, chosen by a
fixed priority: timeout, network, server error (5xx), 404, 401, 403,
then a generic fallback.
"""

import logging

from tubeflow.domain.interfaces.notifier import ErrorNotifier
from tubeflow.domain.interfaces.user_interface import UserInterface
from tubeflow.domain.models.request_state import RequestError
from tubeflow.infrastructure.resilience.retry_policy import matches_network_signature

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Request timed out. Please check your connection and try again."
NETWORK_MESSAGE = "Network error. Please check your internet connection."
SERVER_ERROR_MESSAGE = "Server error. Please try again in a moment."
NOT_FOUND_MESSAGE = "Requested resource not found."
UNAUTHORIZED_MESSAGE = "Authentication required. Please log in again."
FORBIDDEN_MESSAGE = "You do not have permission to perform this action."
GENERIC_MESSAGE = "An unexpected error occurred. Please try again."


def select_error_message(error: RequestError, is_network_failure: bool = False) -> str:
    """Picks the user-facing message for a settled failure.

    Args:
        error: Structured failure info from the executor state.
        is_network_failure: True when no response was received at all.

    Returns:
        One of the fixed user-facing messages.
    """
    if error.is_timeout:
        return TIMEOUT_MESSAGE
    if is_network_failure or matches_network_signature(error.message):
        return NETWORK_MESSAGE
    status = error.http_status
    if status is not None and status >= 500:
        return SERVER_ERROR_MESSAGE
    if status == 404:
        return NOT_FOUND_MESSAGE
    if status == 401:
        return UNAUTHORIZED_MESSAGE
    if status == 403:
        return FORBIDDEN_MESSAGE
    return GENERIC_MESSAGE


class LoggingErrorNotifier(ErrorNotifier):
    """Default sink: writes the message to the application log."""

    def __init__(self, notifier_logger: logging.Logger = logger):
        self._logger = notifier_logger

    def notify_error(self, message: str, error: RequestError) -> None:
        self._logger.error(f"API Error: {message} ({error.to_dict()})")


class DisplayErrorNotifier(ErrorNotifier):
    """Routes failure messages to the user's console."""

    def __init__(self, ui: UserInterface):
        self.ui = ui

    def notify_error(self, message: str, error: RequestError) -> None:
        logger.debug(f"Displaying API error notification: {message}")
        detail = error.message if error.message and error.message != message else None
        if detail:
            self.ui.display_error(f"{message}\n{detail}")
        else:
            self.ui.display_error(message)
