"""Map interaction surface the selection engine subscribes to."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

CLICK = "click"
POINTER_DOWN = "pointerdown"
POINTER_MOVE = "pointermove"
POINTER_UP = "pointerup"
POINTER_EVENTS = (CLICK, POINTER_DOWN, POINTER_MOVE, POINTER_UP)


@dataclass(slots=True, frozen=True)
class PointerEvent:
    """A pointer position and, when the client already knows it, the region under it."""

    lon: Optional[float] = None
    lat: Optional[float] = None
    region_id: Optional[str] = None

    @property
    def has_position(self) -> bool:
        return self.lon is not None and self.lat is not None


Handler = Callable[[PointerEvent], None]


class MapSurface(Protocol):
    dragging_enabled: bool
    cursor: Optional[str]

    def on(self, event: str, handler: Handler) -> None: ...

    def off(self, event: str, handler: Handler) -> None: ...

    def set_dragging(self, enabled: bool) -> None: ...

    def set_cursor(self, cursor: Optional[str]) -> None: ...


class InteractionSurface:
    """Headless map surface: keeps handler lists and interaction flags, dispatches events."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {event: [] for event in POINTER_EVENTS}
        self.dragging_enabled = True
        self.cursor: Optional[str] = None

    def on(self, event: str, handler: Handler) -> None:
        if event not in self._handlers:
            raise ValueError(f"Unknown surface event '{event}'.")
        self._handlers[event].append(handler)

    def off(self, event: str, handler: Handler) -> None:
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def handler_count(self, event: str | None = None) -> int:
        if event is not None:
            return len(self._handlers.get(event, []))
        return sum(len(handlers) for handlers in self._handlers.values())

    def set_dragging(self, enabled: bool) -> None:
        self.dragging_enabled = enabled

    def set_cursor(self, cursor: Optional[str]) -> None:
        self.cursor = cursor

    def dispatch(self, event: str, pointer: PointerEvent) -> None:
        # Handlers may detach themselves while running.
        for handler in list(self._handlers.get(event, [])):
            handler(pointer)
