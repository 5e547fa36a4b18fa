"""Transient user notifications raised by the lesson player."""

from typing import Protocol

import structlog


logger = structlog.get_logger(__name__)


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggingNotifier:
    """Default notifier: writes notifications to the log."""

    def success(self, message: str) -> None:
        logger.info("player_notification", level="success", message=message)

    def error(self, message: str) -> None:
        logger.warning("player_notification", level="error", message=message)


class RecordingNotifier:
    """Keeps notifications in memory, newest last."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    @property
    def errors(self) -> list[str]:
        return [message for level, message in self.messages if level == "error"]
