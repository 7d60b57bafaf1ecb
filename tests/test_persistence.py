from pathlib import Path

import pytest

from zip3_territory.models.domain import Assignment, Rep
from zip3_territory.persistence.filesystem import FileStorage
from zip3_territory.persistence.live_store import LiveDataStore


def test_file_storage_writes_json_and_csv(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)

    storage.write_json(Path("nested/summary.json"), {"hello": "world"})
    storage.write_csv(Path("rows.csv"), "a,b\n1,2\n")

    assert (tmp_path / "nested" / "summary.json").read_text(encoding="utf-8") == '{\n  "hello": "world"\n}'
    assert (tmp_path / "rows.csv").read_text(encoding="utf-8") == "a,b\n1,2\n"
    assert storage.read_json(Path("nested/summary.json")) == {"hello": "world"}


def test_failed_write_keeps_previous_file_and_no_temp_files(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    storage = FileStorage(root=tmp_path)
    storage.write_csv(Path("rows.csv"), "old\n")

    def _boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("zip3_territory.persistence.filesystem.os.replace", _boom)

    with pytest.raises(OSError):
        storage.write_csv(Path("rows.csv"), "new\n")

    assert (tmp_path / "rows.csv").read_text(encoding="utf-8") == "old\n"
    assert [path.name for path in tmp_path.iterdir()] == ["rows.csv"]


def test_live_store_reads_and_normalizes_rows(tmp_path: Path) -> None:
    (tmp_path / "zip3_rep.csv").write_text(
        "\ufeffZipcode,Sales_Rep\n'005,Alice\n100,Bob\n101,\n12345,Carol\n",
        encoding="utf-8",
    )
    (tmp_path / "rep_contact.csv").write_text(
        "Name,Email,Phone Number\nAlice,alice@example.com,555-010-0001\n,nobody@example.com,\n",
        encoding="utf-8",
    )
    store = LiveDataStore(FileStorage(root=tmp_path))

    assert store.fetch_live_assignments() == [Assignment("005", "Alice"), Assignment("100", "Bob")]
    assert store.fetch_live_reps() == [Rep("Alice", "alice@example.com", "555-010-0001")]


def test_live_store_missing_files_read_as_empty(tmp_path: Path) -> None:
    store = LiveDataStore(FileStorage(root=tmp_path))

    assert store.fetch_live_assignments() == []
    assert store.fetch_live_reps() == []


def test_live_store_persists_csv_contract(tmp_path: Path) -> None:
    store = LiveDataStore(FileStorage(root=tmp_path))

    store.persist_live_assignments([Assignment("100", "Alice"), Assignment("7", "Smith, Jr.")])
    store.persist_live_reps([Rep("Alice", "alice@example.com", "555-010-0001")])

    assert (tmp_path / "zip3_rep.csv").read_text(encoding="utf-8") == (
        'Zipcode,Sales_Rep\n100,Alice\n007,"Smith, Jr."\n'
    )
    assert (tmp_path / "rep_contact.csv").read_text(encoding="utf-8") == (
        "Name,Email,Phone Number\nAlice,alice@example.com,555-010-0001\n"
    )
    assert store.fetch_live_assignments()[1].rep_name == "Smith, Jr."


def test_live_single_row_upsert_and_delete(tmp_path: Path) -> None:
    store = LiveDataStore(FileStorage(root=tmp_path))
    store.persist_live_assignments([Assignment("100", "Alice"), Assignment("101", "Bob")])

    store.upsert_live_assignment("100", "Carol")
    store.upsert_live_assignment("'5", "Alice")
    assert store.fetch_live_assignments() == [
        Assignment("100", "Carol"),
        Assignment("101", "Bob"),
        Assignment("005", "Alice"),
    ]

    store.delete_live_assignment("101")
    assert [row.region_id for row in store.fetch_live_assignments()] == ["100", "005"]


def test_live_store_collapses_duplicate_region_rows(tmp_path: Path) -> None:
    (tmp_path / "zip3_rep.csv").write_text("Zipcode,Sales_Rep\n'100,Alice\n101,Alice\n100,Bob\n", encoding="utf-8")
    store = LiveDataStore(FileStorage(root=tmp_path))

    assert store.fetch_live_assignments() == [Assignment("100", "Bob"), Assignment("101", "Alice")]
