"""User-facing notifications for client call outcomes."""

from typing import Protocol

import structlog


logger = structlog.get_logger(__name__)


class Notifier(Protocol):
    """Receives success and error messages (e.g. a toast UI)."""

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LogNotifier:
    """Default notifier: writes notifications to the structured log."""

    def success(self, message: str) -> None:
        logger.info("client_notification", notification="success", message=message)

    def error(self, message: str) -> None:
        logger.warning("client_notification", notification="error", message=message)
