"""Transient user-facing messages raised by mutations and imports."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from .models import local_now

logger = logging.getLogger(__name__)

__all__ = ["Notification", "Notifier", "NOTIFICATION_KINDS"]

NOTIFICATION_KINDS = ("success", "error", "warning", "info")

_LOG_LEVELS = {
    "success": logging.DEBUG,
    "info": logging.DEBUG,
    "warning": logging.INFO,
    "error": logging.INFO,
}


@dataclass(frozen=True)
class Notification:
    id: int
    kind: str
    message: str
    created_at: datetime

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "kind": self.kind,
            "message": self.message,
            "createdAt": self.created_at.isoformat(),
        }


class Notifier:
    """Keeps recently posted notifications until they expire or are dismissed."""

    def __init__(
        self,
        ttl: timedelta = timedelta(seconds=5),
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._ttl = ttl
        self._clock = clock or local_now
        self._ids = itertools.count(1)
        self._items: List[Notification] = []
        self._listeners: List[Callable[[Notification], None]] = []

    def post(self, kind: str, message: str) -> Notification:
        if kind not in NOTIFICATION_KINDS:
            kind = "info"
        notification = Notification(
            id=next(self._ids), kind=kind, message=message, created_at=self._clock()
        )
        self._items.append(notification)
        logger.log(_LOG_LEVELS[kind], "%s: %s", kind, message)
        for listener in self._listeners:
            listener(notification)
        return notification

    def success(self, message: str) -> Notification:
        return self.post("success", message)

    def error(self, message: str) -> Notification:
        return self.post("error", message)

    def active(self, now: Optional[datetime] = None) -> List[Notification]:
        """Return the notifications that are still on screen, pruning expired ones."""
        now = now or self._clock()
        self._items = [item for item in self._items if now - item.created_at < self._ttl]
        return list(self._items)

    def dismiss(self, notification_id: int) -> None:
        self._items = [item for item in self._items if item.id != notification_id]

    def subscribe(self, listener: Callable[[Notification], None]) -> None:
        self._listeners.append(listener)
