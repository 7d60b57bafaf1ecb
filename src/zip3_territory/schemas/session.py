"""Schemas for the interactive editing session."""

from __future__ import annotations

from typing import List, Literal, Optional, Sequence

from pydantic import BaseModel, Field, field_validator

from ..services.selection import SelectionMode
from .drafts import PendingPublishModel


class ModeRequest(BaseModel):
    mode: SelectionMode


class PointerEventModel(BaseModel):
    lon: Optional[float] = Field(default=None, ge=-180.0, le=180.0)
    lat: Optional[float] = Field(default=None, ge=-90.0, le=90.0)
    region_id: Optional[str] = Field(default=None, description="Region under the pointer, when the client knows it.")


class PointerRequest(PointerEventModel):
    event: Literal["pointerdown", "pointermove", "pointerup"]


class GestureStartRequest(BaseModel):
    kind: Literal["polygon", "rectangle"] = "polygon"


class ShapeRequest(BaseModel):
    kind: Literal["freehand", "polygon", "rectangle"]
    points: Sequence[tuple[float, float]] = Field(..., description="(lon, lat) vertices in drawing order.")


class AssignRequest(BaseModel):
    rep_name: str = Field(..., description="Rep to assign; empty clears the assignment.")
    region_ids: Optional[List[str]] = Field(
        default=None, description="Explicit regions; the current selection is used when omitted."
    )
    keep_selection: bool = False


class AssignResponse(BaseModel):
    rep_name: str
    region_ids: List[str]


class DraftNameRequest(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def require_name(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Draft name is required")
        return value.strip()


class ConfirmPublishRequest(BaseModel):
    token: str


class DrawnShapeModel(BaseModel):
    kind: str
    points: List[tuple[float, float]]
    bbox: List[float]


class NotificationModel(BaseModel):
    id: int
    message: str
    level: str


class SessionStateResponse(BaseModel):
    mode: SelectionMode
    selection: List[str]
    focused_region: Optional[str] = None
    focused_rep: Optional[str] = None
    active_gesture: Optional[str] = None
    drawn_shapes: List[DrawnShapeModel] = Field(default_factory=list)
    dragging_enabled: bool = True
    cursor: Optional[str] = None
    current_draft_id: Optional[str] = None
    current_draft_name: str
    has_unpublished_changes: bool
    pending_publish: Optional[PendingPublishModel] = None
    notifications: List[NotificationModel] = Field(default_factory=list)
