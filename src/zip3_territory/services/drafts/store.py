"""Named, timestamped draft snapshots stored as one JSON file each."""

from __future__ import annotations

import json
import logging
import re
import time
from pathlib import Path
from typing import Any, Callable, Mapping

from ...config import settings
from ...errors import NotFoundError, ValidationError
from ...models.domain import Assignment, Draft, DraftSummary, LedgerSnapshot, Rep
from ...persistence.filesystem import FileStorage

logger = logging.getLogger(__name__)

_SLUG_PATTERN = re.compile(r"[^a-z0-9_-]")
_DRAFT_ID_PATTERN = re.compile(r"^[a-z0-9_-]+$")


def slugify(name: str) -> str:
    return _SLUG_PATTERN.sub("_", name.lower())


def _now_ms() -> int:
    return int(time.time() * 1000)


def snapshot_to_payload(snapshot: LedgerSnapshot) -> dict[str, list[dict[str, str]]]:
    return {
        "zip3Assignments": [
            {"Zipcode": assignment.region_id, "Sales_Rep": assignment.rep_name}
            for assignment in snapshot.assignments
        ],
        "repsList": [
            {"Name": rep.name, "Email": rep.email, "Phone Number": rep.phone}
            for rep in snapshot.reps
        ],
    }


def snapshot_from_payload(payload: Mapping[str, Any]) -> LedgerSnapshot:
    assignments = [
        Assignment(region_id=row.get("Zipcode"), rep_name=row.get("Sales_Rep", ""))
        for row in payload.get("zip3Assignments") or []
        if (row.get("Sales_Rep") or "").strip()
    ]
    reps = [
        Rep(name=row.get("Name", ""), email=row.get("Email", ""), phone=row.get("Phone Number", ""))
        for row in payload.get("repsList") or []
    ]
    return LedgerSnapshot(assignments=tuple(assignments), reps=tuple(reps))


class DraftStore:
    """Create/list/load/delete drafts under ``drafts_dir``. Drafts are never updated in place."""

    def __init__(
        self,
        storage: FileStorage | None = None,
        *,
        directory: Path | None = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self.storage = storage or FileStorage()
        self.directory = self.storage.ensure_directory(directory or settings.drafts_dir)
        self._clock = clock
        self.direct_publish_name = settings.direct_publish_draft_name

    def _path(self, draft_id: str) -> Path:
        if not draft_id or not _DRAFT_ID_PATTERN.match(draft_id):
            raise NotFoundError("draft", draft_id)
        return self.directory / f"{draft_id}.json"

    def save(self, name: str, snapshot: LedgerSnapshot) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Draft name is required.")
        timestamp = self._clock()
        slug = slugify(name)
        draft_id = f"{slug}_{timestamp}"
        while (self.directory / f"{draft_id}.json").exists():
            timestamp += 1
            draft_id = f"{slug}_{timestamp}"
        body = {"name": name, "timestamp": timestamp, **snapshot_to_payload(snapshot)}
        self.storage.write_json(self.directory / f"{draft_id}.json", body)
        logger.info("Saved draft %s (%d assignments, %d reps)", draft_id, len(snapshot.assignments), len(snapshot.reps))
        return draft_id

    def list(self, *, include_direct: bool = True) -> list[DraftSummary]:
        """Summaries ordered by timestamp; ``include_direct=False`` hides direct-publish drafts."""
        summaries: list[DraftSummary] = []
        for path in self.directory.glob("*.json"):
            try:
                body = self.storage.read_json(path)
                summaries.append(DraftSummary(id=path.stem, name=str(body["name"]), timestamp=int(body["timestamp"])))
            except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping unreadable draft file %s: %s", path.name, exc)
        if not include_direct:
            summaries = [summary for summary in summaries if summary.name != self.direct_publish_name]
        return sorted(summaries, key=lambda summary: (summary.timestamp, summary.id))

    def load(self, draft_id: str) -> Draft:
        path = self._path(draft_id)
        if not path.exists():
            raise NotFoundError("draft", draft_id)
        body = self.storage.read_json(path)
        return Draft(
            id=draft_id,
            name=str(body.get("name", "")),
            timestamp=int(body.get("timestamp", 0)),
            snapshot=snapshot_from_payload(body),
        )

    def delete(self, draft_id: str) -> None:
        path = self._path(draft_id)
        if not path.exists():
            raise NotFoundError("draft", draft_id)
        path.unlink()
        logger.info("Deleted draft %s", draft_id)
