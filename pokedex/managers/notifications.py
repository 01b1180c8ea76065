"""
Notification Queue - Transient messages that expire on their own.

Each notification gets a timer handle keyed by its id. Dismissing cancels
the handle; the expiry callback removes by id, so a timer that fires after
a dismissal finds nothing and does nothing.
"""
import asyncio
import logging
import uuid
from typing import Dict, List

from ..config import NOTIFICATION_TIMEOUT, SEVERITIES
from ..models import Notification, Severity

logger = logging.getLogger(__name__)


class NotificationQueue:
    """Live notifications in creation order."""

    def __init__(self, timeout: float = NOTIFICATION_TIMEOUT):
        self.timeout = timeout
        self._items: Dict[str, Notification] = {}  # insertion order = creation order
        self._timers: Dict[str, asyncio.TimerHandle] = {}

    @property
    def items(self) -> List[Notification]:
        return list(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, notification_id: str) -> bool:
        return notification_id in self._items

    def post(self, message: str, severity: Severity = 'info') -> Notification:
        """Add a notification and schedule its expiry. Needs a running loop."""
        if severity not in SEVERITIES:
            raise ValueError(f'Unknown severity: {severity}')

        notification = Notification(id=uuid.uuid4().hex, message=message, severity=severity)
        self._items[notification.id] = notification

        loop = asyncio.get_running_loop()
        self._timers[notification.id] = loop.call_later(self.timeout, self._expire, notification.id)

        log = logger.warning if severity == 'error' else logger.info
        log(f'Notification [{severity}]: {message}')
        return notification

    def dismiss(self, notification_id: str) -> bool:
        """Remove a notification now. Returns False if it was already gone."""
        timer = self._timers.pop(notification_id, None)
        if timer:
            timer.cancel()
        return self._items.pop(notification_id, None) is not None

    def clear(self):
        """Remove everything and cancel pending timers."""
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._items.clear()

    def _expire(self, notification_id: str):
        self._timers.pop(notification_id, None)
        if self._items.pop(notification_id, None) is not None:
            logger.debug(f'Notification {notification_id[:8]} expired')
