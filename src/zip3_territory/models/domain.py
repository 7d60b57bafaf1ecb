"""Domain models for regions, reps, assignments and drafts."""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from ..errors import ValidationError

REGION_ID_LENGTH = 3
_LEADING_JUNK = string.punctuation + string.whitespace


def normalize_region_id(value: Any) -> str:
    """Return the canonical 3-character form of a ZIP3 code.

    ``"5"``, ``"005"``, ``"'005"`` and ``" 005 "`` all become ``"005"``.
    """

    if value is None:
        raise ValidationError("Region id is required.")
    text = str(value).strip().lstrip(_LEADING_JUNK).strip()
    if not text:
        raise ValidationError(f"Region id {value!r} is empty after normalization.")
    canonical = text.rjust(REGION_ID_LENGTH, "0")
    if len(canonical) != REGION_ID_LENGTH:
        raise ValidationError(f"Region id {value!r} is longer than {REGION_ID_LENGTH} characters.")
    if not (canonical.isascii() and canonical.isdigit()):
        raise ValidationError(f"Region id {value!r} must be numeric.")
    return canonical


@dataclass(slots=True, frozen=True)
class BoundingBox:
    """Axis-aligned lon/lat box; edges count as intersecting."""

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def __post_init__(self) -> None:
        if self.min_lon > self.max_lon or self.min_lat > self.max_lat:
            raise ValidationError(f"Inverted bounding box: {self!r}")

    @classmethod
    def from_bounds(cls, bounds: tuple[float, float, float, float]) -> "BoundingBox":
        min_lon, min_lat, max_lon, max_lat = bounds
        return cls(float(min_lon), float(min_lat), float(max_lon), float(max_lat))

    def intersects(self, other: "BoundingBox") -> bool:
        return (
            self.min_lon <= other.max_lon
            and other.min_lon <= self.max_lon
            and self.min_lat <= other.max_lat
            and other.min_lat <= self.max_lat
        )

    def as_list(self) -> list[float]:
        return [self.min_lon, self.min_lat, self.max_lon, self.max_lat]


@dataclass(slots=True, frozen=True)
class Region:
    """A ZIP3 area with its boundary geometry (shapely Polygon or MultiPolygon)."""

    id: str
    geometry: Any = field(compare=False, repr=False)
    bounding_box: BoundingBox


@dataclass(slots=True, frozen=True)
class Assignment:
    """One region owned by one rep. The region id is canonical after construction."""

    region_id: str
    rep_name: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "region_id", normalize_region_id(self.region_id))
        object.__setattr__(self, "rep_name", (self.rep_name or "").strip())


@dataclass(slots=True, frozen=True)
class Rep:
    """Sales representative; ``name`` is the identity and never changes."""

    name: str
    email: str = ""
    phone: str = ""

    def __post_init__(self) -> None:
        name = (self.name or "").strip()
        if not name:
            raise ValidationError("Rep name is required.")
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "email", (self.email or "").strip())
        object.__setattr__(self, "phone", (self.phone or "").strip())


def collapse_assignments(assignments: Iterable[Assignment]) -> tuple[Assignment, ...]:
    """One row per region id: the last row wins, at the position of the first."""
    by_region: dict[str, Assignment] = {}
    for assignment in assignments:
        by_region[assignment.region_id] = assignment
    return tuple(by_region.values())


@dataclass(slots=True, frozen=True)
class LedgerSnapshot:
    """Immutable (assignments, roster) pair: a working draft, a baseline or a draft body."""

    assignments: tuple[Assignment, ...] = ()
    reps: tuple[Rep, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "assignments", collapse_assignments(self.assignments))
        object.__setattr__(self, "reps", tuple({rep.name: rep for rep in self.reps}.values()))

    def assignment_map(self) -> dict[str, str]:
        return {assignment.region_id: assignment.rep_name for assignment in self.assignments}

    def rep_names(self) -> list[str]:
        return [rep.name for rep in self.reps]


@dataclass(slots=True, frozen=True)
class DraftSummary:
    id: str
    name: str
    timestamp: int


@dataclass(slots=True, frozen=True)
class Draft:
    """A persisted, named snapshot. ``timestamp`` is epoch milliseconds."""

    id: str
    name: str
    timestamp: int
    snapshot: LedgerSnapshot

    @property
    def summary(self) -> DraftSummary:
        return DraftSummary(id=self.id, name=self.name, timestamp=self.timestamp)


@dataclass(slots=True)
class Notification:
    """Operator-facing message that disappears after ``expires_at`` (monotonic seconds)."""

    id: int
    message: str
    level: str
    created_at: float
    expires_at: Optional[float] = None
