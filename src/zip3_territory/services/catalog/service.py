"""Region catalog: filters raw GeoJSON features into canonical ZIP3 regions."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, Mapping, Sequence

from shapely.errors import GEOSException

from ...config import settings
from ...errors import CatalogLoadError, NotFoundError, ValidationError
from ...models.domain import BoundingBox, Region, normalize_region_id
from ..geospatial import (
    bounding_box_of,
    contains_point,
    geometry_from_geojson,
    widest_longitude_span,
)

logger = logging.getLogger(__name__)


class RegionCatalog:
    """Immutable, id-keyed collection of regions built once per session."""

    def __init__(self, regions: Sequence[Region]) -> None:
        if not regions:
            raise CatalogLoadError("Region catalog is empty; the map cannot be shown.")
        self._regions: dict[str, Region] = {region.id: region for region in regions}

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self) -> Iterator[Region]:
        return iter(self._regions.values())

    def __contains__(self, region_id: object) -> bool:
        try:
            return normalize_region_id(region_id) in self._regions
        except ValidationError:
            return False

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(self._regions)

    def get(self, region_id: Any) -> Region:
        try:
            key = normalize_region_id(region_id)
        except ValidationError as exc:
            raise NotFoundError("region", str(region_id)) from exc
        region = self._regions.get(key)
        if region is None:
            raise NotFoundError("region", key)
        return region

    def regions_intersecting(self, bbox: BoundingBox) -> list[str]:
        """Ids of every region whose bounding box touches ``bbox``."""
        return [region.id for region in self._regions.values() if region.bounding_box.intersects(bbox)]

    def region_at(self, lon: float, lat: float) -> str | None:
        """Id of the region containing the point, or None for empty space."""
        for region in self._regions.values():
            if not region.bounding_box.intersects(BoundingBox(lon, lat, lon, lat)):
                continue
            if contains_point(region.geometry, lon, lat):
                return region.id
        return None


def _feature_region(
    feature: Mapping[str, Any],
    *,
    id_property: str,
    excluded: frozenset[str],
    max_longitude_span: float,
) -> Region | None:
    geometry = feature.get("geometry")
    if not isinstance(geometry, Mapping) or not geometry.get("coordinates"):
        logger.debug("Dropping feature without geometry: %s", feature.get("properties"))
        return None

    properties = feature.get("properties") or {}
    raw_id = properties.get(id_property)
    if raw_id is None or str(raw_id).strip() == "":
        logger.debug("Dropping feature without '%s' property", id_property)
        return None
    try:
        region_id = normalize_region_id(raw_id)
    except ValidationError as exc:
        logger.debug("Dropping feature with unusable id %r: %s", raw_id, exc)
        return None

    if region_id in excluded:
        logger.debug("Excluding region %s", region_id)
        return None

    span = widest_longitude_span(geometry)
    if span > max_longitude_span:
        logger.info("Excluding region %s with excessive longitude range (%.1f degrees)", region_id, span)
        return None

    try:
        polygon = geometry_from_geojson(geometry)
    except (ValueError, TypeError, IndexError, GEOSException) as exc:
        logger.debug("Dropping region %s with invalid geometry: %s", region_id, exc)
        return None

    return Region(id=region_id, geometry=polygon, bounding_box=bounding_box_of(polygon))


def load_region_catalog(
    raw_features: Iterable[Mapping[str, Any]],
    *,
    excluded_ids: Iterable[str] | None = None,
    id_property: str | None = None,
    max_longitude_span: float | None = None,
) -> RegionCatalog:
    """Build a catalog from raw GeoJSON features, silently dropping unusable ones.

    Raises:
        CatalogLoadError: when no feature survives filtering.
    """

    excluded = frozenset(
        normalize_region_id(value)
        for value in (settings.excluded_region_ids if excluded_ids is None else excluded_ids)
    )
    id_property = id_property or settings.region_id_property
    max_span = settings.max_longitude_span if max_longitude_span is None else max_longitude_span

    regions: list[Region] = []
    seen: set[str] = set()
    total = 0
    for feature in raw_features:
        total += 1
        if not isinstance(feature, Mapping):
            continue
        region = _feature_region(
            feature,
            id_property=id_property,
            excluded=excluded,
            max_longitude_span=max_span,
        )
        if region is None:
            continue
        if region.id in seen:
            logger.warning("Duplicate region id %s in catalog source; keeping the first feature", region.id)
            continue
        seen.add(region.id)
        regions.append(region)

    if not regions:
        raise CatalogLoadError(f"No valid regions found among {total} feature(s).")

    logger.info("Loaded %d region(s) from %d feature(s)", len(regions), total)
    return RegionCatalog(regions)
