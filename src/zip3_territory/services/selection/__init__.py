"""Region selection: modes, gestures and the map surface they listen on."""

from .engine import DrawnShape, SelectionEngine, SelectionMode
from .surface import InteractionSurface, MapSurface, PointerEvent

__all__ = [
    "DrawnShape",
    "InteractionSurface",
    "MapSurface",
    "PointerEvent",
    "SelectionEngine",
    "SelectionMode",
]
