"""Region catalog services."""

from .service import RegionCatalog, load_region_catalog

__all__ = ["RegionCatalog", "load_region_catalog"]
