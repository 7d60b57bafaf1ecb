"""Region catalog endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Query, status

from ...data.regions_repository import get_region_catalog
from ...errors import TerritoryError
from ...models.domain import BoundingBox
from ...schemas.regions import RegionInfoModel, RegionModel
from ...services.editing.registry import locked_session
from ..errors import to_http_exception

router = APIRouter(prefix="/regions", tags=["regions"])


@router.get("", response_model=List[RegionModel], status_code=status.HTTP_200_OK)
def list_regions(
    min_lon: float | None = Query(default=None, ge=-180.0, le=180.0),
    min_lat: float | None = Query(default=None, ge=-90.0, le=90.0),
    max_lon: float | None = Query(default=None, ge=-180.0, le=180.0),
    max_lat: float | None = Query(default=None, ge=-90.0, le=90.0),
) -> List[RegionModel]:
    """List regions, optionally only those whose bounding box meets the given box."""
    bounds = (min_lon, min_lat, max_lon, max_lat)
    try:
        catalog = get_region_catalog()
        if all(value is not None for value in bounds):
            wanted = set(catalog.regions_intersecting(BoundingBox.from_bounds(bounds)))
            regions = [region for region in catalog if region.id in wanted]
        else:
            regions = list(catalog)
    except TerritoryError as exc:
        raise to_http_exception(exc) from exc
    return [RegionModel.from_domain(region) for region in regions]


@router.get("/{region_id}", response_model=RegionInfoModel, status_code=status.HTTP_200_OK)
def get_region(region_id: str) -> RegionInfoModel:
    """Region id and the rep owning it in the working draft, for tooltips."""
    try:
        with locked_session() as session:
            info = session.region_info(region_id)
    except TerritoryError as exc:
        raise to_http_exception(exc) from exc
    return RegionInfoModel(region_id=info.region_id, rep_name=info.rep_name, assigned=info.is_assigned)
