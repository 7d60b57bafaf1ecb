"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...errors import CatalogLoadError

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/catalog", status_code=status.HTTP_200_OK)
def health_catalog() -> dict:
    """Check that the region catalog can be loaded."""
    from ...data.regions_repository import get_region_catalog

    try:
        catalog = get_region_catalog()
    except CatalogLoadError as exc:
        return {"service": "catalog", "healthy": False, "error": str(exc)}
    return {"service": "catalog", "healthy": True, "regions": len(catalog)}
