"""Region catalog schemas."""

from __future__ import annotations

from pydantic import BaseModel

from ..models.domain import Region


class RegionModel(BaseModel):
    id: str
    bbox: list[float]

    @classmethod
    def from_domain(cls, region: Region) -> "RegionModel":
        return cls(id=region.id, bbox=region.bounding_box.as_list())


class RegionInfoModel(BaseModel):
    region_id: str
    rep_name: str
    assigned: bool
