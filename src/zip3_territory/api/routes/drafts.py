"""Draft endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Query, status

from ...errors import TerritoryError
from ...schemas.drafts import (
    DraftCreateRequest,
    DraftModel,
    DraftSavedResponse,
    DraftSummaryModel,
    PendingPublishModel,
)
from ...services.editing.registry import get_draft_store, locked_session
from ..errors import to_http_exception

router = APIRouter(prefix="/drafts", tags=["drafts"])


@router.get("", response_model=List[DraftSummaryModel], status_code=status.HTTP_200_OK)
def list_drafts(include_direct: bool = Query(default=False, description="Include direct-publish drafts.")) -> List[DraftSummaryModel]:
    summaries = get_draft_store().list(include_direct=include_direct)
    return [DraftSummaryModel.from_domain(summary) for summary in summaries]


@router.get("/{draft_id}", response_model=DraftModel, status_code=status.HTTP_200_OK)
def get_draft(draft_id: str) -> DraftModel:
    try:
        draft = get_draft_store().load(draft_id)
    except TerritoryError as exc:
        raise to_http_exception(exc) from exc
    return DraftModel.from_domain(draft)


@router.post("", response_model=DraftSavedResponse, status_code=status.HTTP_201_CREATED)
def create_draft(payload: DraftCreateRequest) -> DraftSavedResponse:
    try:
        draft_id = get_draft_store().save(payload.name, payload.to_snapshot())
    except TerritoryError as exc:
        raise to_http_exception(exc) from exc
    return DraftSavedResponse(id=draft_id)


@router.delete("/{draft_id}", status_code=status.HTTP_200_OK)
def delete_draft(draft_id: str) -> dict:
    try:
        get_draft_store().delete(draft_id)
    except TerritoryError as exc:
        raise to_http_exception(exc) from exc
    return {"success": True}


@router.post("/{draft_id}/publish", response_model=PendingPublishModel, status_code=status.HTTP_200_OK)
def publish_draft(draft_id: str) -> PendingPublishModel:
    """Stage a publish of a stored draft; confirm it with ``POST /session/publish/confirm``."""
    try:
        get_draft_store().load(draft_id)
        with locked_session() as session:
            pending = session.publisher.request_publish(draft_id)
    except TerritoryError as exc:
        raise to_http_exception(exc) from exc
    return PendingPublishModel(
        token=pending.token,
        kind=pending.kind.value,
        draft_id=pending.draft_id,
        discards_edits=pending.discards_edits,
    )
