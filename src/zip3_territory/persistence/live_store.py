"""Live (published) assignment and roster files.

The CSV layout is an external contract shared with other tools:

- assignments: ``Zipcode,Sales_Rep``; zip codes may carry a leading ``'``
  added by spreadsheet software.
- roster: ``Name,Email,Phone Number``.
"""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Sequence

from ..config import settings
from ..errors import ValidationError
from ..models.domain import Assignment, Rep, collapse_assignments
from .filesystem import FileStorage

ASSIGNMENT_COLUMNS = ("Zipcode", "Sales_Rep")
REP_COLUMNS = ("Name", "Email", "Phone Number")

logger = logging.getLogger(__name__)


def _read_rows(path: Path) -> list[dict[str, str]]:
    if not path.exists():
        logger.info("Live file %s does not exist yet; treating it as empty", path)
        return []
    with path.open(mode="r", encoding="utf-8-sig", newline="") as handle:
        reader = csv.DictReader(handle)
        return [{(key or "").strip(): (value or "").strip() for key, value in row.items()} for row in reader]


def _render_rows(columns: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(columns)
    writer.writerows(rows)
    return buffer.getvalue()


class LiveDataStore:
    """Reads and overwrites the two live CSV files."""

    def __init__(
        self,
        storage: FileStorage | None = None,
        *,
        assignments_file: Path | None = None,
        reps_file: Path | None = None,
    ) -> None:
        self.storage = storage or FileStorage()
        self.assignments_path = self.storage.resolve(assignments_file or settings.assignments_file)
        self.reps_path = self.storage.resolve(reps_file or settings.reps_file)

    def fetch_live_assignments(self) -> list[Assignment]:
        assignments: list[Assignment] = []
        for row in _read_rows(self.assignments_path):
            zipcode = row.get("Zipcode", "")
            rep_name = row.get("Sales_Rep", "")
            if not rep_name:
                continue
            try:
                assignments.append(Assignment(region_id=zipcode, rep_name=rep_name))
            except ValidationError as exc:
                logger.warning("Skipping live assignment row %r: %s", row, exc)
        collapsed = collapse_assignments(assignments)
        if len(collapsed) != len(assignments):
            logger.warning(
                "Live assignments list %d duplicate region row(s); keeping the last row for each region",
                len(assignments) - len(collapsed),
            )
        return list(collapsed)

    def fetch_live_reps(self) -> list[Rep]:
        reps: list[Rep] = []
        for row in _read_rows(self.reps_path):
            try:
                reps.append(Rep(name=row.get("Name", ""), email=row.get("Email", ""), phone=row.get("Phone Number", "")))
            except ValidationError as exc:
                logger.warning("Skipping live rep row %r: %s", row, exc)
        return reps

    def persist_live_assignments(self, assignments: Sequence[Assignment]) -> None:
        content = _render_rows(
            ASSIGNMENT_COLUMNS,
            [(assignment.region_id, assignment.rep_name) for assignment in assignments],
        )
        self.storage.write_csv(self.assignments_path, content)

    def persist_live_reps(self, reps: Sequence[Rep]) -> None:
        content = _render_rows(REP_COLUMNS, [(rep.name, rep.email, rep.phone) for rep in reps])
        self.storage.write_csv(self.reps_path, content)

    def upsert_live_assignment(self, region_id: str, rep_name: str) -> Assignment:
        """Replace or append one live row, keeping the order of the others."""
        updated = Assignment(region_id=region_id, rep_name=rep_name)
        rows = self.fetch_live_assignments()
        for index, existing in enumerate(rows):
            if existing.region_id == updated.region_id:
                rows[index] = updated
                break
        else:
            rows.append(updated)
        self.persist_live_assignments(rows)
        return updated

    def delete_live_assignment(self, region_id: str) -> None:
        target = Assignment(region_id=region_id, rep_name="").region_id
        rows = [row for row in self.fetch_live_assignments() if row.region_id != target]
        self.persist_live_assignments(rows)
