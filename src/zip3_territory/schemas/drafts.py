"""Draft and publish schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import Draft, DraftSummary, LedgerSnapshot
from .live import AssignmentModel, RepModel


class DraftSummaryModel(BaseModel):
    id: str
    name: str
    timestamp: int

    @classmethod
    def from_domain(cls, summary: DraftSummary) -> "DraftSummaryModel":
        return cls(id=summary.id, name=summary.name, timestamp=summary.timestamp)


class DraftBody(BaseModel):
    zip3Assignments: List[AssignmentModel] = Field(default_factory=list)
    repsList: List[RepModel] = Field(default_factory=list)

    def to_snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            assignments=tuple(item.to_domain() for item in self.zip3Assignments if item.rep_name.strip()),
            reps=tuple(item.to_domain() for item in self.repsList),
        )


class DraftCreateRequest(DraftBody):
    name: str


class DraftModel(DraftBody):
    id: str
    name: str
    timestamp: int

    @classmethod
    def from_domain(cls, draft: Draft) -> "DraftModel":
        return cls(
            id=draft.id,
            name=draft.name,
            timestamp=draft.timestamp,
            zip3Assignments=[AssignmentModel.from_domain(item) for item in draft.snapshot.assignments],
            repsList=[RepModel.from_domain(item) for item in draft.snapshot.reps],
        )


class DraftSavedResponse(BaseModel):
    success: bool = True
    id: str


class PublishResponse(BaseModel):
    success: bool = True
    draft_id: str
    kind: str
    assignments: int
    reps: int


class PendingPublishModel(BaseModel):
    token: str
    kind: str
    draft_id: Optional[str] = None
    discards_edits: bool = False
