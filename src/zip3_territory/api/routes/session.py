"""Interactive editing session endpoints.

The map client forwards clicks and pointer events here; selection, the
working draft and the publish gate live server-side in the single
:class:`EditingSession`.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List, Optional

from fastapi import APIRouter, Query, status

from ...errors import TerritoryError
from ...schemas.drafts import DraftSavedResponse, DraftSummaryModel, PendingPublishModel, PublishResponse
from ...schemas.live import RepCreateRequest, RepDeleteResponse, RepModel, RepUpdateRequest
from ...schemas.session import (
    AssignRequest,
    AssignResponse,
    ConfirmPublishRequest,
    DraftNameRequest,
    DrawnShapeModel,
    GestureStartRequest,
    ModeRequest,
    NotificationModel,
    PointerEventModel,
    PointerRequest,
    SessionStateResponse,
    ShapeRequest,
)
from ...services.editing import EditingSession
from ...services.editing.registry import get_session
from ...services.selection import PointerEvent
from ...services.selection.surface import CLICK
from ..errors import to_http_exception

router = APIRouter(prefix="/session", tags=["session"])


@contextmanager
def _locked_session() -> Iterator[EditingSession]:
    try:
        session = get_session()
    except TerritoryError as exc:
        raise to_http_exception(exc) from exc
    with session.lock:
        yield session


def _pending_model(session: EditingSession) -> PendingPublishModel | None:
    pending = session.publisher.pending
    if pending is None:
        return None
    return PendingPublishModel(
        token=pending.token,
        kind=pending.kind.value,
        draft_id=pending.draft_id,
        discards_edits=pending.discards_edits,
    )


def _state(session: EditingSession) -> SessionStateResponse:
    engine = session.selection
    focused = engine.focused_region
    return SessionStateResponse(
        mode=engine.mode,
        selection=sorted(engine.selection),
        focused_region=focused,
        focused_rep=session.region_info(focused).rep_name if focused else None,
        active_gesture=engine.active_gesture,
        drawn_shapes=[
            DrawnShapeModel(kind=shape.kind, points=list(shape.points), bbox=shape.bounding_box.as_list())
            for shape in engine.drawn_shapes
        ],
        dragging_enabled=session.surface.dragging_enabled,
        cursor=session.surface.cursor,
        current_draft_id=session.current_draft_id,
        current_draft_name=session.current_draft_name,
        has_unpublished_changes=session.has_unpublished_changes,
        pending_publish=_pending_model(session),
        notifications=[
            NotificationModel(id=item.id, message=item.message, level=item.level)
            for item in session.notifications.active()
        ],
    )


def _pointer(payload: PointerEventModel) -> PointerEvent:
    return PointerEvent(lon=payload.lon, lat=payload.lat, region_id=payload.region_id)


@router.get("", response_model=SessionStateResponse, status_code=status.HTTP_200_OK)
def get_state() -> SessionStateResponse:
    with _locked_session() as session:
        return _state(session)


@router.put("/mode", response_model=SessionStateResponse, status_code=status.HTTP_200_OK)
def set_mode(payload: ModeRequest) -> SessionStateResponse:
    with _locked_session() as session:
        session.set_mode(payload.mode)
        return _state(session)


@router.post("/click", response_model=SessionStateResponse, status_code=status.HTTP_200_OK)
def click(payload: PointerEventModel) -> SessionStateResponse:
    with _locked_session() as session:
        session.surface.dispatch(CLICK, _pointer(payload))
        return _state(session)


@router.post("/pointer", response_model=SessionStateResponse, status_code=status.HTTP_200_OK)
def pointer(payload: PointerRequest) -> SessionStateResponse:
    with _locked_session() as session:
        session.surface.dispatch(payload.event, _pointer(payload))
        return _state(session)


@router.delete("/focus", response_model=SessionStateResponse, status_code=status.HTTP_200_OK)
def clear_focus() -> SessionStateResponse:
    with _locked_session() as session:
        session.clear_focus()
        return _state(session)


@router.delete("/selection", response_model=SessionStateResponse, status_code=status.HTTP_200_OK)
def clear_selection() -> SessionStateResponse:
    with _locked_session() as session:
        session.selection.clear_selection()
        return _state(session)


@router.post("/gestures/freehand", response_model=SessionStateResponse, status_code=status.HTTP_200_OK)
def begin_freehand() -> SessionStateResponse:
    with _locked_session() as session:
        try:
            session.selection.begin_freehand()
        except TerritoryError as exc:
            raise to_http_exception(exc) from exc
        return _state(session)


@router.post("/gestures/shape", response_model=SessionStateResponse, status_code=status.HTTP_200_OK)
def begin_shape(payload: GestureStartRequest) -> SessionStateResponse:
    with _locked_session() as session:
        try:
            session.selection.begin_shape(payload.kind)
        except TerritoryError as exc:
            raise to_http_exception(exc) from exc
        return _state(session)


@router.post("/gestures/complete", response_model=SessionStateResponse, status_code=status.HTTP_200_OK)
def complete_gesture() -> SessionStateResponse:
    with _locked_session() as session:
        try:
            session.selection.complete_gesture()
        except TerritoryError as exc:
            raise to_http_exception(exc) from exc
        return _state(session)


@router.post("/gestures/cancel", response_model=SessionStateResponse, status_code=status.HTTP_200_OK)
def cancel_gesture() -> SessionStateResponse:
    with _locked_session() as session:
        session.selection.cancel_gesture()
        return _state(session)


@router.post("/shapes", response_model=SessionStateResponse, status_code=status.HTTP_200_OK)
def select_shape(payload: ShapeRequest) -> SessionStateResponse:
    """Draw a complete shape in one request."""
    with _locked_session() as session:
        try:
            session.selection.select_shape(payload.kind, payload.points)
        except TerritoryError as exc:
            raise to_http_exception(exc) from exc
        return _state(session)


@router.post("/assignments", response_model=AssignResponse, status_code=status.HTTP_200_OK)
def assign(payload: AssignRequest) -> AssignResponse:
    with _locked_session() as session:
        try:
            if payload.region_ids is None:
                region_ids = session.assign_selection(payload.rep_name, keep_selection=payload.keep_selection)
            else:
                region_ids = sorted({session.catalog.get(region_id).id for region_id in payload.region_ids})
                session.ledger.assign_many(region_ids, payload.rep_name)
        except TerritoryError as exc:
            raise to_http_exception(exc) from exc
    return AssignResponse(rep_name=payload.rep_name.strip(), region_ids=region_ids)


@router.get("/reps", response_model=List[RepModel], status_code=status.HTTP_200_OK)
def list_reps() -> List[RepModel]:
    with _locked_session() as session:
        reps = session.ledger.reps
    return [RepModel.from_domain(rep) for rep in reps]


@router.post("/reps", response_model=RepModel, status_code=status.HTTP_201_CREATED)
def add_rep(payload: RepCreateRequest) -> RepModel:
    with _locked_session() as session:
        try:
            rep = session.add_rep(payload.to_domain())
        except TerritoryError as exc:
            raise to_http_exception(exc) from exc
    return RepModel.from_domain(rep)


@router.put("/reps/{name}", response_model=RepModel, status_code=status.HTTP_200_OK)
def update_rep(name: str, payload: RepUpdateRequest) -> RepModel:
    with _locked_session() as session:
        try:
            rep = session.update_rep(name, email=payload.email, phone=payload.phone)
        except TerritoryError as exc:
            raise to_http_exception(exc) from exc
    return RepModel.from_domain(rep)


@router.delete("/reps/{name}", response_model=RepDeleteResponse, status_code=status.HTTP_200_OK)
def delete_rep(
    name: str,
    reassign_to: Optional[str] = Query(default=None, description="Rep taking over the deleted rep's regions."),
) -> RepDeleteResponse:
    with _locked_session() as session:
        try:
            moved = session.delete_rep(name, reassign_to)
        except TerritoryError as exc:
            raise to_http_exception(exc) from exc
    return RepDeleteResponse(deleted=name, reassigned_regions=moved, reassigned_to=reassign_to if moved else None)


@router.get("/drafts", response_model=List[DraftSummaryModel], status_code=status.HTTP_200_OK)
def list_drafts() -> List[DraftSummaryModel]:
    with _locked_session() as session:
        summaries = session.list_drafts()
    return [DraftSummaryModel.from_domain(summary) for summary in summaries]


@router.post("/drafts", response_model=DraftSavedResponse, status_code=status.HTTP_201_CREATED)
def save_draft(payload: DraftNameRequest) -> DraftSavedResponse:
    with _locked_session() as session:
        try:
            draft_id = session.save_draft(payload.name)
        except TerritoryError as exc:
            raise to_http_exception(exc) from exc
    return DraftSavedResponse(id=draft_id)


@router.post("/drafts/{draft_id}/load", response_model=SessionStateResponse, status_code=status.HTTP_200_OK)
def load_draft(draft_id: str) -> SessionStateResponse:
    with _locked_session() as session:
        try:
            session.load_draft(draft_id)
        except TerritoryError as exc:
            raise to_http_exception(exc) from exc
        return _state(session)


@router.delete("/drafts/{draft_id}", response_model=SessionStateResponse, status_code=status.HTTP_200_OK)
def delete_draft(draft_id: str) -> SessionStateResponse:
    with _locked_session() as session:
        try:
            session.delete_draft(draft_id)
        except TerritoryError as exc:
            raise to_http_exception(exc) from exc
        return _state(session)


@router.post("/revert", response_model=SessionStateResponse, status_code=status.HTTP_200_OK)
def revert() -> SessionStateResponse:
    with _locked_session() as session:
        session.revert()
        return _state(session)


@router.post("/publish", response_model=PendingPublishModel, status_code=status.HTTP_200_OK)
def request_publish() -> PendingPublishModel:
    """Stage a publish; nothing is written until it is confirmed."""
    with _locked_session() as session:
        session.request_publish()
        return _pending_model(session)


@router.delete("/publish", response_model=SessionStateResponse, status_code=status.HTTP_200_OK)
def cancel_publish() -> SessionStateResponse:
    with _locked_session() as session:
        session.cancel_publish()
        return _state(session)


@router.post("/publish/confirm", response_model=PublishResponse, status_code=status.HTTP_200_OK)
def confirm_publish(payload: ConfirmPublishRequest) -> PublishResponse:
    with _locked_session() as session:
        try:
            result = session.confirm_publish(payload.token)
        except TerritoryError as exc:
            raise to_http_exception(exc) from exc
    return PublishResponse(
        draft_id=result.draft_id,
        kind=result.kind.value,
        assignments=len(result.snapshot.assignments),
        reps=len(result.snapshot.reps),
    )


@router.delete("/notifications/{notification_id}", response_model=SessionStateResponse, status_code=status.HTTP_200_OK)
def dismiss_notification(notification_id: int) -> SessionStateResponse:
    with _locked_session() as session:
        session.notifications.dismiss(notification_id)
        return _state(session)
