"""Interface for user-facing error notifications.

The request executor selects a human-readable message for a failed call
and hands it to a notifier. Where the message ends up (log, console,
toast) is up to the implementation.
"""

import abc

from tubeflow.domain.models.request_state import RequestError


class ErrorNotifier(abc.ABC):
    """Abstract Base Class for error notification sinks."""

    @abc.abstractmethod
    def notify_error(self, message: str, error: RequestError) -> None:
        """Surfaces a terminal request failure to the user.

        Args:
            message: The human-readable message selected for the failure.
            error: The structured failure the message was derived from.
        """
        pass
