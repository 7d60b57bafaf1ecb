"""Geospatial helper functions."""

from __future__ import annotations

from typing import Any, Iterator, Mapping, Sequence

from shapely.geometry import MultiPoint, Point, shape
from shapely.geometry.base import BaseGeometry

from ..models.domain import BoundingBox

POLYGONAL_TYPES = ("Polygon", "MultiPolygon")


def iter_rings(geometry: Mapping[str, Any]) -> Iterator[Sequence[Sequence[float]]]:
    """Yield every linear ring of a GeoJSON Polygon or MultiPolygon mapping."""

    geom_type = geometry.get("type")
    coordinates = geometry.get("coordinates") or []
    if geom_type == "Polygon":
        yield from coordinates
    elif geom_type == "MultiPolygon":
        for polygon in coordinates:
            yield from polygon


def longitude_span(ring: Sequence[Sequence[float]]) -> float:
    """Return the longitude range covered by a ring of ``[lon, lat]`` positions."""

    lons = [float(position[0]) for position in ring if position]
    if not lons:
        return 0.0
    return max(lons) - min(lons)


def widest_longitude_span(geometry: Mapping[str, Any]) -> float:
    return max((longitude_span(ring) for ring in iter_rings(geometry)), default=0.0)


def geometry_from_geojson(geometry: Mapping[str, Any]) -> BaseGeometry:
    """Build a shapely geometry, rejecting anything that is not a non-empty polygon."""

    if geometry.get("type") not in POLYGONAL_TYPES:
        raise ValueError(f"Unsupported geometry type '{geometry.get('type')}'.")
    polygon = shape(geometry)
    if polygon.is_empty:
        raise ValueError("Geometry is empty.")
    return polygon


def bounding_box_of(geometry: BaseGeometry) -> BoundingBox:
    return BoundingBox.from_bounds(geometry.bounds)


def bounding_box_of_points(points: Sequence[tuple[float, float]]) -> BoundingBox:
    """Bounding box of a drawn path given as ``(lon, lat)`` points."""

    if not points:
        raise ValueError("At least one point is required.")
    return BoundingBox.from_bounds(MultiPoint([Point(lon, lat) for lon, lat in points]).bounds)


def contains_point(geometry: BaseGeometry, lon: float, lat: float) -> bool:
    """Return True if the point lies inside or on the boundary of ``geometry``."""

    return geometry.intersects(Point(lon, lat))
