"""One operator's editing session: selection, working draft, drafts and publishing."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Iterable, Optional

from ...config import settings
from ...errors import NotFoundError, PublishFailedError, TerritoryError
from ...models.domain import Draft, DraftSummary, LedgerSnapshot, Rep
from ...persistence.filesystem import FileStorage
from ...persistence.live_store import LiveDataStore
from ..catalog import RegionCatalog
from ..drafts import DraftStore
from ..ledger import AssignmentLedger, snapshots_equal
from ..publishing import PendingPublish, PublishCoordinator, PublishKind, PublishResult
from ..selection import InteractionSurface, SelectionEngine, SelectionMode
from ..sequencer import ResponseSequencer
from .notifications import NotificationCenter

logger = logging.getLogger(__name__)

UNASSIGNED = "Unassigned"
DRAFT_RESOURCE = "draft"


@dataclass(slots=True, frozen=True)
class RegionInfo:
    region_id: str
    rep_name: str

    @property
    def is_assigned(self) -> bool:
        return self.rep_name != UNASSIGNED


class EditingSession:
    """Composes the catalog, selection engine, ledger, draft store and publisher.

    The working draft starts as a copy of the live data, which is also the
    first published baseline. Callers sharing one session across threads hold
    ``lock`` around each operation.
    """

    def __init__(
        self,
        catalog: RegionCatalog,
        *,
        drafts: DraftStore,
        live: LiveDataStore,
        notifications: NotificationCenter | None = None,
        surface: InteractionSurface | None = None,
    ) -> None:
        self.catalog = catalog
        self.drafts = drafts
        self.live = live
        self.notifications = notifications or NotificationCenter()
        self.sequencer = ResponseSequencer()
        self.lock = threading.RLock()

        initial = LedgerSnapshot(
            assignments=tuple(live.fetch_live_assignments()),
            reps=tuple(live.fetch_live_reps()),
        )
        self.ledger = AssignmentLedger(initial, baseline=initial)
        self.publisher = PublishCoordinator(self.ledger, drafts, live, sequencer=self.sequencer)

        self.surface = surface or InteractionSurface()
        self.selection = SelectionEngine(catalog)
        self.selection.start(self.surface)

        self.current_draft_id: Optional[str] = None
        self.current_draft_name: str = settings.unsaved_draft_label
        self._loaded_snapshot: Optional[LedgerSnapshot] = None

    @classmethod
    def open(cls, catalog: RegionCatalog, storage: FileStorage | None = None) -> "EditingSession":
        storage = storage or FileStorage()
        return cls(catalog, drafts=DraftStore(storage), live=LiveDataStore(storage))

    def close(self) -> None:
        self.selection.stop()

    @property
    def has_unpublished_changes(self) -> bool:
        return self.ledger.is_dirty()

    # regions and selection

    def region_info(self, region_id: str) -> RegionInfo:
        region = self.catalog.get(region_id)
        rep_name = self.ledger.rep_for(region.id)
        if not rep_name or not self.ledger.has_rep(rep_name):
            rep_name = UNASSIGNED
        return RegionInfo(region_id=region.id, rep_name=rep_name)

    def set_mode(self, mode: SelectionMode | str) -> SelectionMode:
        return self.selection.set_mode(mode)

    def clear_focus(self) -> None:
        self.selection.focus(None)

    # assignments

    def assign_region(self, region_id: str, rep_name: str) -> None:
        self.ledger.assign_one(region_id, rep_name)

    def assign_selection(self, rep_name: str, *, keep_selection: bool = False) -> list[str]:
        region_ids = sorted(self.selection.selection)
        if not region_ids:
            return []
        self.ledger.assign_many(region_ids, rep_name)
        if not keep_selection:
            self.selection.clear_selection()
        return region_ids

    # roster

    def add_rep(self, rep: Rep) -> Rep:
        self.ledger.add_rep(rep)
        return rep

    def update_rep(self, name: str, **fields: Optional[str]) -> Rep:
        return self.ledger.update_rep(name, **fields)

    def delete_rep(self, name: str, reassign_to: Optional[str] = None) -> list[str]:
        return self.ledger.delete_rep(name, reassign_to=reassign_to)

    # drafts

    def _report(self, action: str, exc: TerritoryError | OSError) -> None:
        logger.warning("%s failed: %s", action, exc)
        self.notifications.error(f"Error {action.lower()}: {exc}")

    def list_drafts(self, *, include_direct: bool = False) -> list[DraftSummary]:
        return self.drafts.list(include_direct=include_direct)

    def save_draft(self, name: str) -> str:
        try:
            draft_id = self.drafts.save(name, self.ledger.snapshot)
        except (TerritoryError, OSError) as exc:
            self._report("Saving draft", exc)
            raise
        self.notifications.info("Draft saved.")
        return draft_id

    def load_draft(self, draft_id: str) -> Draft:
        ticket = self.sequencer.issue(DRAFT_RESOURCE)
        try:
            draft = self.drafts.load(draft_id)
        except (TerritoryError, OSError) as exc:
            self._report("Loading draft", exc)
            raise
        if not self.sequencer.accept(DRAFT_RESOURCE, ticket):
            return draft
        self.ledger.replace(draft.snapshot)
        self.current_draft_id = draft.id
        self.current_draft_name = draft.name
        self._loaded_snapshot = draft.snapshot
        self.notifications.info("Draft loaded.")
        return draft

    def delete_draft(self, draft_id: str) -> None:
        try:
            self.drafts.delete(draft_id)
        except (TerritoryError, OSError) as exc:
            self._report("Deleting draft", exc)
            raise
        if self.current_draft_id == draft_id:
            self._forget_loaded_draft()
        self.notifications.info("Draft deleted.")

    def _forget_loaded_draft(self) -> None:
        self.current_draft_id = None
        self.current_draft_name = settings.unsaved_draft_label
        self._loaded_snapshot = None

    def revert(self) -> LedgerSnapshot:
        """Throw away working edits and return to the last published state."""
        return self.ledger.revert()

    def sync_live(self) -> bool:
        """Take live files written outside the session as the new published baseline.

        A working draft without unpublished edits follows the live data; pending
        edits are kept and compared against the new baseline. Returns True when
        the working draft was replaced.
        """
        with self.lock:
            was_dirty = self.ledger.is_dirty()
            live_snapshot = LedgerSnapshot(
                assignments=tuple(self.live.fetch_live_assignments()),
                reps=tuple(self.live.fetch_live_reps()),
            )
            self.ledger.mark_published(live_snapshot)
            if was_dirty:
                logger.info("Live data changed; keeping unpublished edits against the new baseline")
                return False
            return self.publisher.refresh_from_live()

    # publishing

    def request_publish(self) -> PendingPublish:
        if self.current_draft_id is not None:
            try:
                self.drafts.load(self.current_draft_id)
            except NotFoundError:
                logger.info("Loaded draft %s no longer exists; publishing the working draft", self.current_draft_id)
                self._forget_loaded_draft()
        discards_edits = self._loaded_snapshot is not None and not snapshots_equal(
            self._loaded_snapshot, self.ledger.snapshot
        )
        return self.publisher.request_publish(self.current_draft_id, discards_edits=discards_edits)

    def cancel_publish(self) -> None:
        self.publisher.cancel()

    def confirm_publish(self, token: str) -> PublishResult:
        try:
            result = self.publisher.confirm(token)
        except (PublishFailedError, NotFoundError) as exc:
            self._report("Publishing", exc)
            raise
        if result.draft_id == self.current_draft_id:
            self._loaded_snapshot = self.ledger.snapshot
        self.notifications.info("Draft published." if result.kind is PublishKind.DRAFT else "Changes published.")
        return result

    def assigned_regions(self, rep_names: Iterable[str]) -> dict[str, list[str]]:
        return {name: self.ledger.regions_for_rep(name) for name in rep_names}
