"""Per-resource request tickets so a slow, older response never overwrites a newer one."""

from __future__ import annotations

import itertools
import logging
import threading

logger = logging.getLogger(__name__)


class ResponseSequencer:
    """Hands out increasing tickets per resource and accepts each response at most once.

    A response is applied only when its ticket is newer than the last applied
    ticket for the same resource.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._applied: dict[str, int] = {}
        self._lock = threading.Lock()

    def issue(self, resource: str) -> int:
        with self._lock:
            return next(self._counter)

    def accept(self, resource: str, ticket: int) -> bool:
        with self._lock:
            if ticket <= self._applied.get(resource, 0):
                logger.warning("Discarding stale %s response (ticket %d)", resource, ticket)
                return False
            self._applied[resource] = ticket
            return True
