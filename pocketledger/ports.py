"""
User-facing ports.

The ledger store never talks to a UI directly. It reports outcomes through
a Notifier and asks for destructive-action approval through a Confirmer;
the front end supplies implementations of both.
"""

from abc import ABC, abstractmethod
from enum import Enum

import structlog


class NotificationKind(str, Enum):
    """How a message should be presented."""
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class Notifier(ABC):
    """Transient user notifications (toasts)."""

    @abstractmethod
    def notify(self, kind: NotificationKind, message: str) -> None:
        pass


class Confirmer(ABC):
    """Synchronous yes/no prompt for destructive actions."""

    @abstractmethod
    def confirm(self, message: str) -> bool:
        pass


class LoggingNotifier(Notifier):
    """Writes notifications to the structured log. Default for headless use."""

    def __init__(self):
        self._logger = structlog.get_logger(__name__)

    def notify(self, kind: NotificationKind, message: str) -> None:
        kind = NotificationKind(kind)
        if kind == NotificationKind.ERROR:
            self._logger.warning("notification", kind=kind.value, message=message)
        else:
            self._logger.info("notification", kind=kind.value, message=message)


class AlwaysConfirm(Confirmer):
    def confirm(self, message: str) -> bool:
        return True


class NeverConfirm(Confirmer):
    def confirm(self, message: str) -> bool:
        return False
