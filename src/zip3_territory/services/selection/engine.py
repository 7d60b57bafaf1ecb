"""Selection engine: turns clicks and drawn gestures into sets of region ids."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ...errors import ValidationError
from ...models.domain import BoundingBox, normalize_region_id
from ..catalog import RegionCatalog
from ..geospatial import bounding_box_of_points
from .surface import CLICK, POINTER_DOWN, POINTER_MOVE, POINTER_UP, Handler, MapSurface, PointerEvent

logger = logging.getLogger(__name__)

DRAWING_CURSORS = {
    "freehand": "drawing-freehand",
    "polygon": "drawing-polygon",
    "rectangle": "drawing-polygon",
}
MIN_VERTICES = {"polygon": 3, "rectangle": 2}


class SelectionMode(str, enum.Enum):
    INSPECT = "inspect"
    EDIT_TOGGLE = "edit_toggle"
    EDIT_SHAPE = "edit_shape"

    @property
    def is_edit(self) -> bool:
        return self is not SelectionMode.INSPECT


@dataclass(slots=True, frozen=True)
class DrawnShape:
    """A completed gesture kept on the map as a marker."""

    kind: str
    points: tuple[tuple[float, float], ...]
    bounding_box: BoundingBox


@dataclass(slots=True)
class Gesture:
    kind: str
    points: list[tuple[float, float]] = field(default_factory=list)
    pointer_down: bool = False
    subscriptions: list[tuple[str, Handler]] = field(default_factory=list)


class SelectionEngine:
    """Owns the selection mode, the SelectionSet, the Inspect focus and gesture listeners.

    ``start(surface)`` attaches the engine's click handler; gestures attach
    their own pointer handlers for their lifetime only. ``stop()`` detaches
    everything and leaves the surface draggable with the default cursor.
    """

    def __init__(self, catalog: RegionCatalog) -> None:
        self.catalog = catalog
        self._mode = SelectionMode.INSPECT
        self._selection: frozenset[str] = frozenset()
        self._focused: Optional[str] = None
        self._drawn: tuple[DrawnShape, ...] = ()
        self._gesture: Optional[Gesture] = None
        self._surface: Optional[MapSurface] = None
        self._subscriptions: list[tuple[str, Handler]] = []

    @property
    def mode(self) -> SelectionMode:
        return self._mode

    @property
    def selection(self) -> frozenset[str]:
        return self._selection

    @property
    def focused_region(self) -> Optional[str]:
        return self._focused

    @property
    def drawn_shapes(self) -> tuple[DrawnShape, ...]:
        return self._drawn

    @property
    def active_gesture(self) -> Optional[str]:
        return self._gesture.kind if self._gesture else None

    @property
    def surface(self) -> Optional[MapSurface]:
        return self._surface

    # lifecycle

    def start(self, surface: MapSurface) -> None:
        if self._surface is not None:
            self.stop()
        self._surface = surface
        self._subscribe(self._subscriptions, CLICK, self.handle_click)

    def stop(self) -> None:
        self.cancel_gesture()
        if self._surface is not None:
            self._unsubscribe(self._subscriptions)
            self._restore_interactivity()
        self._surface = None

    def _subscribe(self, bucket: list[tuple[str, Handler]], event: str, handler: Handler) -> None:
        if self._surface is None:
            return
        self._surface.on(event, handler)
        bucket.append((event, handler))

    def _unsubscribe(self, bucket: list[tuple[str, Handler]]) -> None:
        while bucket:
            event, handler = bucket.pop()
            if self._surface is not None:
                self._surface.off(event, handler)

    def _restore_interactivity(self) -> None:
        if self._surface is not None:
            self._surface.set_dragging(True)
            self._surface.set_cursor(None)

    # modes

    def set_mode(self, mode: SelectionMode | str) -> SelectionMode:
        mode = SelectionMode(mode)
        if mode is self._mode:
            return mode
        self.cancel_gesture()
        if not mode.is_edit:
            self._selection = frozenset()
            self._drawn = ()
        elif not self._mode.is_edit:
            self._focused = None
        logger.debug("Selection mode %s -> %s", self._mode.value, mode.value)
        self._mode = mode
        return mode

    # clicks

    def _region_for(self, event: PointerEvent) -> Optional[str]:
        if event.region_id is not None:
            try:
                region_id = normalize_region_id(event.region_id)
            except ValidationError:
                return None
            return region_id if region_id in self.catalog.ids else None
        if event.has_position:
            return self.catalog.region_at(event.lon, event.lat)
        return None

    def handle_click(self, event: PointerEvent) -> None:
        if self._gesture is not None:
            if self._gesture.kind != "freehand" and event.has_position:
                self._gesture.points.append((event.lon, event.lat))
            return

        region_id = self._region_for(event)
        if self._mode is SelectionMode.INSPECT:
            self._focused = region_id
        elif self._mode is SelectionMode.EDIT_TOGGLE and region_id is not None:
            self.toggle(region_id)

    def focus(self, region_id: Optional[str]) -> Optional[str]:
        """Set or clear the Inspect single selection."""
        if region_id is None:
            self._focused = None
            return None
        self._focused = self.catalog.get(region_id).id
        return self._focused

    def toggle(self, region_id: str) -> frozenset[str]:
        key = self.catalog.get(region_id).id
        if key in self._selection:
            self._selection = self._selection - {key}
        else:
            self._selection = self._selection | {key}
        return self._selection

    def add_to_selection(self, region_ids: Iterable[str]) -> frozenset[str]:
        known = {self.catalog.get(region_id).id for region_id in region_ids}
        self._selection = self._selection | known
        return self._selection

    def clear_selection(self) -> None:
        self.cancel_gesture()
        self._selection = frozenset()
        self._drawn = ()

    # gestures

    def _require_shape_mode(self) -> None:
        if self._mode is not SelectionMode.EDIT_SHAPE:
            raise ValidationError("Drawing is only available in shape-select mode.")

    def _begin(self, kind: str) -> Gesture:
        self._require_shape_mode()
        self.cancel_gesture()
        gesture = Gesture(kind=kind)
        self._gesture = gesture
        if self._surface is not None:
            self._surface.set_dragging(False)
            self._surface.set_cursor(DRAWING_CURSORS[kind])
        return gesture

    def begin_freehand(self) -> None:
        gesture = self._begin("freehand")
        self._subscribe(gesture.subscriptions, POINTER_DOWN, self._freehand_down)
        self._subscribe(gesture.subscriptions, POINTER_MOVE, self._freehand_move)
        self._subscribe(gesture.subscriptions, POINTER_UP, self._freehand_up)

    def begin_shape(self, kind: str = "polygon") -> None:
        if kind not in MIN_VERTICES:
            raise ValidationError(f"Unknown shape kind '{kind}'.")
        self._begin(kind)

    def _freehand_down(self, event: PointerEvent) -> None:
        gesture = self._gesture
        if gesture is None or gesture.pointer_down or not event.has_position:
            return
        gesture.pointer_down = True
        gesture.points = [(event.lon, event.lat)]

    def _freehand_move(self, event: PointerEvent) -> None:
        gesture = self._gesture
        if gesture is not None and gesture.pointer_down and event.has_position:
            gesture.points.append((event.lon, event.lat))

    def _freehand_up(self, event: PointerEvent) -> None:
        gesture = self._gesture
        if gesture is None or not gesture.pointer_down:
            return
        if event.has_position:
            gesture.points.append((event.lon, event.lat))
        self.complete_gesture()

    def add_point(self, lon: float, lat: float) -> None:
        if self._gesture is None:
            raise ValidationError("No drawing in progress.")
        self._gesture.points.append((lon, lat))

    def complete_gesture(self) -> frozenset[str]:
        """Finish the active gesture and union every region whose box meets the drawn box."""
        gesture = self._gesture
        if gesture is None:
            raise ValidationError("No drawing in progress.")
        required = MIN_VERTICES.get(gesture.kind, 1)
        if len(gesture.points) < required:
            raise ValidationError(f"A {gesture.kind} needs at least {required} point(s).")

        bbox = bounding_box_of_points(gesture.points)
        hits = self.catalog.regions_intersecting(bbox)
        self._selection = self._selection | frozenset(hits)
        self._drawn = (*self._drawn, DrawnShape(kind=gesture.kind, points=tuple(gesture.points), bounding_box=bbox))
        self._end_gesture()
        logger.debug("%s gesture selected %d region(s)", gesture.kind, len(hits))
        return self._selection

    def select_shape(self, kind: str, points: Iterable[tuple[float, float]]) -> frozenset[str]:
        """Draw a whole polygon/rectangle/freehand path in one call."""
        if kind == "freehand":
            self._begin("freehand")
        else:
            self.begin_shape(kind)
        try:
            for lon, lat in points:
                self.add_point(lon, lat)
            return self.complete_gesture()
        except ValidationError:
            self.cancel_gesture()
            raise

    def cancel_gesture(self) -> None:
        if self._gesture is None:
            return
        self._end_gesture()

    def _end_gesture(self) -> None:
        gesture = self._gesture
        self._gesture = None
        if gesture is not None:
            self._unsubscribe(gesture.subscriptions)
        self._restore_interactivity()
