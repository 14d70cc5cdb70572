"""User-visible notification records (rendering is up to the host UI)"""
import logging
import threading
from datetime import datetime
from typing import List, Optional

logger = logging.getLogger('bizpanel.client.notifications')

ERROR = 'error'
WARNING = 'warning'
INFO = 'info'
SUCCESS = 'success'

_LOG_LEVELS = {
    ERROR: logging.ERROR,
    WARNING: logging.WARNING,
    INFO: logging.INFO,
    SUCCESS: logging.INFO,
}


class Notification:
    def __init__(self, level: str, message: str, code: Optional[str] = None, details=None):
        self.level = level
        self.message = message
        self.code = code
        self.details = list(details or [])
        self.created_at = datetime.now()

    def __repr__(self):
        return f"Notification({self.level!r}, {self.message!r})"


class NotificationCenter:
    """Collects notifications in order and mirrors each one to the log"""

    def __init__(self):
        self._items: List[Notification] = []
        self._lock = threading.Lock()

    def notify(self, level: str, message: str, code: Optional[str] = None, details=None) -> Notification:
        notification = Notification(level, message, code, details)
        with self._lock:
            self._items.append(notification)
        logger.log(_LOG_LEVELS.get(level, logging.INFO), f"[{level}] {message}" + (f" ({code})" if code else ''))
        return notification

    def error(self, message, code=None, details=None):
        return self.notify(ERROR, message, code, details)

    def success(self, message):
        return self.notify(SUCCESS, message)

    def from_error(self, prefix: str, error) -> Notification:
        """Error notification carrying the server's message, code and details verbatim"""
        return self.error(
            f"{prefix}: {error.message}",
            code=getattr(error, 'code', None),
            details=getattr(error, 'details', None),
        )

    @property
    def items(self) -> List[Notification]:
        with self._lock:
            return list(self._items)

    @property
    def errors(self) -> List[Notification]:
        return [item for item in self.items if item.level == ERROR]

    def clear(self):
        with self._lock:
            self._items.clear()

    def __len__(self):
        return len(self._items)
