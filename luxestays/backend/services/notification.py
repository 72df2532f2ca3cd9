"""Notification surface for guest-facing outcome messages."""
from abc import ABC, abstractmethod
from typing import List
import logging
from luxestays.backend.schemas.payment import Notification, NotificationKind


class Notifier(ABC):
    """Abstract notification surface."""
    
    @abstractmethod
    def notify(self, kind: NotificationKind, title: str, detail: str = "") -> None:
        """
        Report a human-readable message to the guest.
        
        Args:
            kind: success, info, warning or error
            title: Short headline
            detail: Longer description
        """
        pass


class LoggingNotifier(Notifier):
    """Notifier that only writes to the application log."""
    
    LEVELS = {
        NotificationKind.SUCCESS: logging.INFO,
        NotificationKind.INFO: logging.INFO,
        NotificationKind.WARNING: logging.WARNING,
        NotificationKind.ERROR: logging.ERROR,
    }
    
    def __init__(self, logger_name: str = __name__):
        self.logger = logging.getLogger(logger_name)
    
    def notify(self, kind: NotificationKind, title: str, detail: str = "") -> None:
        self.logger.log(self.LEVELS[NotificationKind(kind)], "%s: %s", title, detail)


class CollectingNotifier(LoggingNotifier):
    """Notifier that logs and keeps messages until the client collects them."""
    
    def __init__(self, logger_name: str = __name__):
        super().__init__(logger_name)
        self.messages: List[Notification] = []
    
    def notify(self, kind: NotificationKind, title: str, detail: str = "") -> None:
        super().notify(kind, title, detail)
        self.messages.append(Notification(kind=kind, title=title, detail=detail))
    
    def drain(self) -> List[Notification]:
        """Return pending messages and clear them."""
        messages, self.messages = self.messages, []
        return messages
