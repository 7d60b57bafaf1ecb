"""Publish protocol: promote a draft (or the unsaved working draft) to live data."""

from __future__ import annotations

import csv
import enum
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ...errors import PublishFailedError, ValidationError
from ...models.domain import LedgerSnapshot
from ...persistence.live_store import LiveDataStore
from ..drafts import DraftStore
from ..ledger import AssignmentLedger
from ..sequencer import ResponseSequencer

logger = logging.getLogger(__name__)

LIVE_RESOURCE = "live"


class PublishKind(str, enum.Enum):
    DRAFT = "draft"
    DIRECT = "direct"


@dataclass(slots=True, frozen=True)
class PendingPublish:
    """A publish the operator asked for but has not confirmed yet."""

    token: str
    kind: PublishKind
    draft_id: Optional[str]
    requested_at: float
    discards_edits: bool = False


@dataclass(slots=True, frozen=True)
class PublishResult:
    draft_id: str
    kind: PublishKind
    snapshot: LedgerSnapshot


class PublishCoordinator:
    """Confirmation gate in front of the single publish primitive.

    ``request_publish`` records what would be published; nothing is written
    until ``confirm`` is called with the returned token. Both triggers end in
    :meth:`publish_draft`, which overwrites the live assignments file and then
    the live roster file.
    """

    def __init__(
        self,
        ledger: AssignmentLedger,
        drafts: DraftStore,
        live: LiveDataStore,
        *,
        sequencer: ResponseSequencer | None = None,
        direct_publish_name: str | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ledger = ledger
        self.drafts = drafts
        self.live = live
        self.sequencer = sequencer or ResponseSequencer()
        self.direct_publish_name = direct_publish_name or drafts.direct_publish_name
        self._clock = clock
        self._pending: Optional[PendingPublish] = None

    @property
    def pending(self) -> Optional[PendingPublish]:
        return self._pending

    def request_publish(self, draft_id: Optional[str] = None, *, discards_edits: bool = False) -> PendingPublish:
        """Stage a publish of ``draft_id``, or of the working draft when it is None.

        ``discards_edits`` flags a loaded draft whose working copy changed after
        loading: confirming publishes the stored draft, not those edits.
        """
        kind = PublishKind.DRAFT if draft_id else PublishKind.DIRECT
        self._pending = PendingPublish(
            token=secrets.token_urlsafe(16),
            kind=kind,
            draft_id=draft_id,
            requested_at=self._clock(),
            discards_edits=discards_edits and kind is PublishKind.DRAFT,
        )
        return self._pending

    def cancel(self) -> None:
        self._pending = None

    def confirm(self, token: str) -> PublishResult:
        pending = self._pending
        if pending is None or not secrets.compare_digest(pending.token, token or ""):
            raise ValidationError("There is no publish awaiting this confirmation.")
        # One confirmation, one attempt: a failure needs a new request.
        self._pending = None

        if pending.kind is PublishKind.DRAFT:
            return self.publish_draft(pending.draft_id, confirmed=True)

        try:
            draft_id = self.drafts.save(self.direct_publish_name, self.ledger.snapshot)
        except OSError as exc:
            logger.exception("Failed to save temporary draft for direct publish")
            raise PublishFailedError("<unsaved>", f"could not save temporary draft: {exc}") from exc
        result = self.publish_draft(draft_id, confirmed=True)
        return PublishResult(draft_id=result.draft_id, kind=PublishKind.DIRECT, snapshot=result.snapshot)

    def publish_draft(self, draft_id: str, *, confirmed: bool = False) -> PublishResult:
        """Overwrite live data with a stored draft.

        Raises:
            ValidationError: ``confirmed`` was not given.
            NotFoundError: the draft does not exist.
            PublishFailedError: either live file could not be written.
        """
        if not confirmed:
            raise ValidationError("Publishing overwrites live data and must be confirmed.")
        draft = self.drafts.load(draft_id)
        snapshot = draft.snapshot

        try:
            self.live.persist_live_assignments(snapshot.assignments)
        except (OSError, csv.Error) as exc:
            logger.exception("Writing live assignments failed for draft %s", draft_id)
            raise PublishFailedError(draft_id, f"assignments file: {exc}") from exc
        try:
            self.live.persist_live_reps(snapshot.reps)
        except (OSError, csv.Error) as exc:
            logger.error(
                "Writing live roster failed for draft %s after assignments were written; "
                "live files are out of step until the next publish",
                draft_id,
            )
            raise PublishFailedError(draft_id, f"roster file: {exc}", assignments_written=True) from exc

        self.ledger.mark_published(snapshot)
        self.refresh_from_live()
        logger.info("Published draft %s (%d assignments, %d reps)", draft_id, len(snapshot.assignments), len(snapshot.reps))
        return PublishResult(draft_id=draft_id, kind=PublishKind.DRAFT, snapshot=snapshot)

    def refresh_from_live(self) -> bool:
        """Reload the working draft from the live files; False if a newer refresh already won."""
        ticket = self.sequencer.issue(LIVE_RESOURCE)
        live_snapshot = LedgerSnapshot(
            assignments=tuple(self.live.fetch_live_assignments()),
            reps=tuple(self.live.fetch_live_reps()),
        )
        if not self.sequencer.accept(LIVE_RESOURCE, ticket):
            return False
        self.ledger.replace(live_snapshot)
        return True
