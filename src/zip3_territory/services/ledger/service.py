"""In-memory working draft: region assignments plus the rep roster."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ...errors import DuplicateRepError, NotFoundError, ReassignmentRequiredError, ValidationError
from ...models.domain import Assignment, LedgerSnapshot, Rep, normalize_region_id

logger = logging.getLogger(__name__)

EDITABLE_REP_FIELDS = ("email", "phone")


def _upsert(assignments: list[Assignment], region_id: str, rep_name: str) -> None:
    """Set ``region_id`` to ``rep_name`` in place; an empty name removes the row."""
    rep_name = (rep_name or "").strip()
    for index, existing in enumerate(assignments):
        if existing.region_id == region_id:
            if rep_name:
                assignments[index] = Assignment(region_id=region_id, rep_name=rep_name)
            else:
                del assignments[index]
            return
    if rep_name:
        assignments.append(Assignment(region_id=region_id, rep_name=rep_name))


def snapshots_equal(left: LedgerSnapshot | None, right: LedgerSnapshot | None) -> bool:
    """Membership comparison: the same region→rep pairs and the same reps, in any order."""
    if left is None or right is None:
        return left is right
    if left.assignment_map() != right.assignment_map():
        return False
    return {rep.name: rep for rep in left.reps} == {rep.name: rep for rep in right.reps}


class AssignmentLedger:
    """Working draft with replace-on-write semantics.

    Every mutation builds a fresh :class:`LedgerSnapshot` and swaps it in as a
    whole, so a failed operation leaves the previous state untouched.
    """

    def __init__(self, snapshot: LedgerSnapshot | None = None, *, baseline: LedgerSnapshot | None = None) -> None:
        self._current = snapshot or LedgerSnapshot()
        self._baseline = baseline if baseline is not None else self._current

    @property
    def snapshot(self) -> LedgerSnapshot:
        return self._current

    @property
    def baseline(self) -> LedgerSnapshot:
        return self._baseline

    @property
    def assignments(self) -> tuple[Assignment, ...]:
        return self._current.assignments

    @property
    def reps(self) -> tuple[Rep, ...]:
        return self._current.reps

    def _swap(self, assignments: Iterable[Assignment], reps: Iterable[Rep]) -> LedgerSnapshot:
        self._current = LedgerSnapshot(assignments=tuple(assignments), reps=tuple(reps))
        return self._current

    def rep_for(self, region_id: str) -> Optional[str]:
        key = normalize_region_id(region_id)
        for assignment in self._current.assignments:
            if assignment.region_id == key:
                return assignment.rep_name
        return None

    def regions_for_rep(self, name: str) -> list[str]:
        return [a.region_id for a in self._current.assignments if a.rep_name == name]

    def get_rep(self, name: str) -> Rep:
        for rep in self._current.reps:
            if rep.name == name:
                return rep
        raise NotFoundError("rep", name)

    def has_rep(self, name: str) -> bool:
        return any(rep.name == name for rep in self._current.reps)

    def assign_one(self, region_id: str, rep_name: str) -> LedgerSnapshot:
        return self.assign_many([region_id], rep_name)

    def assign_many(self, region_ids: Iterable[str], rep_name: str) -> LedgerSnapshot:
        keys = [normalize_region_id(region_id) for region_id in region_ids]
        if not keys:
            return self._current
        updated = list(self._current.assignments)
        for key in dict.fromkeys(keys):
            _upsert(updated, key, rep_name)
        logger.debug("Assigned %d region(s) to %r", len(keys), rep_name)
        return self._swap(updated, self._current.reps)

    def add_rep(self, rep: Rep) -> LedgerSnapshot:
        if self.has_rep(rep.name):
            raise DuplicateRepError(rep.name)
        return self._swap(self._current.assignments, [*self._current.reps, rep])

    def update_rep(self, name: str, **fields: Optional[str]) -> Rep:
        current = self.get_rep(name)
        new_name = fields.pop("name", None)
        if new_name is not None and new_name.strip() != current.name:
            raise ValidationError("Rep names cannot be changed.")
        unknown = set(fields) - set(EDITABLE_REP_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown rep field(s): {', '.join(sorted(unknown))}")
        # Blank values leave the stored field unchanged.
        changes = {key: value for key, value in fields.items() if value}
        updated = Rep(
            name=current.name,
            email=changes.get("email", current.email),
            phone=changes.get("phone", current.phone),
        )
        self._swap(
            self._current.assignments,
            [updated if rep.name == name else rep for rep in self._current.reps],
        )
        return updated

    def delete_rep(self, name: str, reassign_to: Optional[str] = None) -> list[str]:
        """Remove a rep, first moving its regions to ``reassign_to``.

        Returns the ids of the regions that were reassigned.

        Raises:
            NotFoundError: the rep or the reassignment target is not on the roster.
            ReassignmentRequiredError: the rep owns regions and no target was given.
            ValidationError: the target is the rep being deleted.
        """
        self.get_rep(name)
        affected = self.regions_for_rep(name)
        target = (reassign_to or "").strip()
        if affected:
            if not target:
                raise ReassignmentRequiredError(name, affected)
            if target == name:
                raise ValidationError("A rep cannot take over its own regions on deletion.")
            self.get_rep(target)

        updated = list(self._current.assignments)
        for region_id in affected:
            _upsert(updated, region_id, target)
        self._swap(updated, [rep for rep in self._current.reps if rep.name != name])
        logger.info("Deleted rep %r (%d region(s) moved to %r)", name, len(affected), target or None)
        return affected

    def is_dirty(self) -> bool:
        return not snapshots_equal(self._current, self._baseline)

    def replace(self, snapshot: LedgerSnapshot) -> None:
        """Swap in a whole snapshot (draft load or refresh); the baseline is kept."""
        self._current = snapshot

    def mark_published(self, snapshot: LedgerSnapshot) -> None:
        self._baseline = snapshot

    def revert(self) -> LedgerSnapshot:
        self._current = self._baseline
        return self._current
