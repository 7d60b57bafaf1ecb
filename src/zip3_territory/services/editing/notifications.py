"""Auto-dismissing operator notifications."""

from __future__ import annotations

import itertools
import time
from typing import Callable

from ...config import settings
from ...models.domain import Notification

INFO = "info"
ERROR = "error"


class NotificationCenter:
    def __init__(self, ttl_seconds: float | None = None, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = settings.notification_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._ids = itertools.count(1)
        self._items: list[Notification] = []

    def push(self, message: str, level: str = INFO) -> Notification:
        now = self._clock()
        expires_at = now + self.ttl_seconds if self.ttl_seconds > 0 else None
        notification = Notification(id=next(self._ids), message=message, level=level, created_at=now, expires_at=expires_at)
        self._items = [*self._prune(now), notification]
        return notification

    def info(self, message: str) -> Notification:
        return self.push(message, INFO)

    def error(self, message: str) -> Notification:
        return self.push(message, ERROR)

    def _prune(self, now: float) -> list[Notification]:
        return [item for item in self._items if item.expires_at is None or item.expires_at > now]

    def active(self) -> list[Notification]:
        self._items = self._prune(self._clock())
        return list(self._items)

    def dismiss(self, notification_id: int) -> None:
        self._items = [item for item in self._items if item.id != notification_id]
