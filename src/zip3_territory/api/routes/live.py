"""Endpoints that read and edit the live assignment and roster files directly."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Query, status

from ...errors import TerritoryError
from ...models.domain import LedgerSnapshot
from ...persistence.live_store import LiveDataStore
from ...schemas.live import (
    AssignmentModel,
    AssignmentUpsertRequest,
    RepCreateRequest,
    RepDeleteResponse,
    RepModel,
    RepUpdateRequest,
)
from ...services.editing.registry import get_live_store, sync_live_data
from ...services.ledger import AssignmentLedger
from ..errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["live"])


def _live_ledger(store: LiveDataStore) -> AssignmentLedger:
    snapshot = LedgerSnapshot(
        assignments=tuple(store.fetch_live_assignments()),
        reps=tuple(store.fetch_live_reps()),
    )
    return AssignmentLedger(snapshot, baseline=snapshot)


@router.get("/zip3", response_model=List[AssignmentModel], status_code=status.HTTP_200_OK)
def list_live_assignments() -> List[AssignmentModel]:
    return [AssignmentModel.from_domain(item) for item in get_live_store().fetch_live_assignments()]


@router.post("/zip3", response_model=AssignmentModel, status_code=status.HTTP_200_OK)
def upsert_live_assignment(payload: AssignmentUpsertRequest) -> AssignmentModel:
    try:
        assignment = get_live_store().upsert_live_assignment(payload.region_id, payload.rep_name)
    except TerritoryError as exc:
        raise to_http_exception(exc) from exc
    sync_live_data()
    return AssignmentModel.from_domain(assignment)


@router.delete("/zip3/{zipcode}", status_code=status.HTTP_200_OK)
def delete_live_assignment(zipcode: str) -> dict:
    try:
        get_live_store().delete_live_assignment(zipcode)
    except TerritoryError as exc:
        raise to_http_exception(exc) from exc
    sync_live_data()
    return {"success": True}


@router.get("/reps", response_model=List[RepModel], status_code=status.HTTP_200_OK)
def list_live_reps() -> List[RepModel]:
    return [RepModel.from_domain(rep) for rep in get_live_store().fetch_live_reps()]


@router.post("/reps", response_model=RepModel, status_code=status.HTTP_201_CREATED)
def create_live_rep(payload: RepCreateRequest) -> RepModel:
    store = get_live_store()
    ledger = _live_ledger(store)
    rep = payload.to_domain()
    try:
        ledger.add_rep(rep)
    except TerritoryError as exc:
        raise to_http_exception(exc) from exc
    store.persist_live_reps(ledger.reps)
    sync_live_data()
    logger.info("Added rep %s to the live roster", rep.name)
    return RepModel.from_domain(rep)


@router.put("/reps/{name}", response_model=RepModel, status_code=status.HTTP_200_OK)
def update_live_rep(name: str, payload: RepUpdateRequest) -> RepModel:
    store = get_live_store()
    ledger = _live_ledger(store)
    try:
        rep = ledger.update_rep(name, email=payload.email, phone=payload.phone)
    except TerritoryError as exc:
        raise to_http_exception(exc) from exc
    store.persist_live_reps(ledger.reps)
    sync_live_data()
    return RepModel.from_domain(rep)


@router.delete("/reps/{name}", response_model=RepDeleteResponse, status_code=status.HTTP_200_OK)
def delete_live_rep(
    name: str,
    reassign_to: Optional[str] = Query(default=None, description="Rep taking over the deleted rep's regions."),
) -> RepDeleteResponse:
    store = get_live_store()
    ledger = _live_ledger(store)
    try:
        moved = ledger.delete_rep(name, reassign_to=reassign_to)
    except TerritoryError as exc:
        raise to_http_exception(exc) from exc
    if moved:
        store.persist_live_assignments(ledger.assignments)
    store.persist_live_reps(ledger.reps)
    sync_live_data()
    logger.info("Deleted rep %s from the live roster (%d region(s) reassigned)", name, len(moved))
    return RepDeleteResponse(deleted=name, reassigned_regions=moved, reassigned_to=reassign_to if moved else None)
