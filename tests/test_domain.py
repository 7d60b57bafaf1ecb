import pytest

from zip3_territory.errors import ValidationError
from zip3_territory.models.domain import (
    Assignment,
    BoundingBox,
    LedgerSnapshot,
    Rep,
    collapse_assignments,
    normalize_region_id,
)


@pytest.mark.parametrize("raw", ["5", "005", "'005", " 005 ", 5])
def test_normalize_region_id_pads_and_strips(raw) -> None:
    assert normalize_region_id(raw) == "005"


def test_normalize_region_id_keeps_three_digit_codes() -> None:
    assert normalize_region_id("100") == "100"
    assert normalize_region_id("'969") == "969"


@pytest.mark.parametrize("raw", ["", "   ", "'", None, "1234", "abc", "1a", "-1"])
def test_normalize_region_id_rejects_unusable_values(raw) -> None:
    with pytest.raises(ValidationError):
        normalize_region_id(raw)


def test_assignment_normalizes_region_id_and_rep_name() -> None:
    assignment = Assignment(region_id="'7", rep_name="  Alice ")

    assert assignment.region_id == "007"
    assert assignment.rep_name == "Alice"
    assert assignment == Assignment(region_id="007", rep_name="Alice")


def test_rep_requires_a_name() -> None:
    with pytest.raises(ValidationError):
        Rep(name="  ")

    rep = Rep(name=" Bob ", email=" bob@example.com ", phone="555-000-1111")
    assert rep.name == "Bob"
    assert rep.email == "bob@example.com"


def test_bounding_box_intersection_counts_shared_edges() -> None:
    left = BoundingBox(0.0, 0.0, 1.0, 1.0)

    assert left.intersects(BoundingBox(1.0, 0.5, 2.0, 2.0))
    assert left.intersects(BoundingBox(0.25, 0.25, 0.5, 0.5))
    assert not left.intersects(BoundingBox(1.01, 0.0, 2.0, 1.0))


def test_bounding_box_rejects_inverted_bounds() -> None:
    with pytest.raises(ValidationError):
        BoundingBox(1.0, 0.0, 0.0, 1.0)


def test_ledger_snapshot_views() -> None:
    snapshot = LedgerSnapshot(
        assignments=[Assignment("100", "Alice"), Assignment("101", "Bob")],
        reps=[Rep("Alice"), Rep("Bob")],
    )

    assert isinstance(snapshot.assignments, tuple)
    assert snapshot.assignment_map() == {"100": "Alice", "101": "Bob"}
    assert snapshot.rep_names() == ["Alice", "Bob"]


def test_ledger_snapshot_keeps_one_row_per_region() -> None:
    snapshot = LedgerSnapshot(
        assignments=[Assignment("100", "Alice"), Assignment("101", "Bob"), Assignment("'100", "Carol")],
        reps=[Rep("Alice"), Rep("Alice", email="a@example.com")],
    )

    assert snapshot.assignments == (Assignment("100", "Carol"), Assignment("101", "Bob"))
    assert snapshot.reps == (Rep("Alice", email="a@example.com"),)
    assert collapse_assignments([]) == ()
