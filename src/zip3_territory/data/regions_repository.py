"""Data access helpers for loading ZIP3 region geometry."""

from __future__ import annotations

import functools
import json
import logging
from pathlib import Path
from typing import Any, Optional

import httpx

from ..config import settings
from ..errors import CatalogLoadError
from ..services.catalog import RegionCatalog, load_region_catalog

logger = logging.getLogger(__name__)


def _features_from_payload(payload: Any, source: str) -> list[dict]:
    if not isinstance(payload, dict) or not isinstance(payload.get("features"), list):
        raise CatalogLoadError(f"Invalid GeoJSON structure in '{source}'.")
    return payload["features"]


def _fetch_remote_features(url: str) -> list[dict]:
    try:
        with httpx.Client(timeout=httpx.Timeout(settings.region_catalog_timeout_seconds, connect=10.0)) as client:
            response = client.get(url)
            response.raise_for_status()
            payload = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        raise CatalogLoadError(f"Failed to load region GeoJSON from '{url}': {exc}") from exc
    return _features_from_payload(payload, url)


def _read_local_features(path: Path) -> list[dict]:
    if not path.exists():
        raise CatalogLoadError(f"Region GeoJSON not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        raise CatalogLoadError(f"Failed to read region GeoJSON '{path}': {exc}") from exc
    return _features_from_payload(payload, str(path))


def fetch_region_catalog(source: Optional[Path] = None) -> list[dict]:
    """Return the raw features of the region FeatureCollection.

    A configured ``region_catalog_url`` wins over the local file unless an
    explicit ``source`` path is given.
    """

    if source is None and settings.region_catalog_url:
        logger.info("Fetching region GeoJSON from %s", settings.region_catalog_url)
        return _fetch_remote_features(settings.region_catalog_url)
    path = source or settings.resolve_data_path(settings.region_geojson_file)
    return _read_local_features(path)


@functools.lru_cache(maxsize=1)
def get_region_catalog(source: Optional[Path] = None) -> RegionCatalog:
    """Load and filter the catalog once per process."""

    return load_region_catalog(fetch_region_catalog(source))
