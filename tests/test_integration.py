import json
import threading
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from zip3_territory.config import settings
from zip3_territory.data.regions_repository import get_region_catalog
from zip3_territory.main import create_app
from zip3_territory.services.editing.registry import get_session, reset_session


def _square(postal: str, lon: float, lat: float) -> dict:
    ring = [[lon, lat], [lon + 1, lat], [lon + 1, lat + 1], [lon, lat + 1], [lon, lat]]
    return {"type": "Feature", "properties": {"Postal": postal}, "geometry": {"type": "Polygon", "coordinates": [ring]}}


def _write_fixture_data(root: Path) -> None:
    features = [_square("100", 0, 0), _square("101", 2, 0), _square("102", 4, 0), _square("969", 6, 0)]
    (root / "usa_zip3_codes_geo_optimized.geojson").write_text(
        json.dumps({"type": "FeatureCollection", "features": features}),
        encoding="utf-8",
    )
    (root / "zip3_rep.csv").write_text("Zipcode,Sales_Rep\n'100,Alice\n", encoding="utf-8")
    (root / "rep_contact.csv").write_text(
        "Name,Email,Phone Number\nAlice,alice@example.com,555-010-0001\nBob,bob@example.com,555-010-0002\n",
        encoding="utf-8",
    )


@pytest.fixture
def api_client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    _write_fixture_data(tmp_path)
    monkeypatch.setattr(settings, "data_root", tmp_path)
    monkeypatch.setattr(settings, "region_catalog_url", None)
    get_region_catalog.cache_clear()
    reset_session()
    yield TestClient(create_app())
    reset_session()
    get_region_catalog.cache_clear()


def test_health_and_regions(api_client: TestClient) -> None:
    assert api_client.get("/api/health").json() == {"status": "ok"}
    assert api_client.get("/api/health/catalog").json()["regions"] == 3

    regions = api_client.get("/api/regions").json()
    assert [region["id"] for region in regions] == ["100", "101", "102"]
    assert regions[0]["bbox"] == [0.0, 0.0, 1.0, 1.0]

    boxed = api_client.get("/api/regions", params={"min_lon": 0.5, "min_lat": 0.5, "max_lon": 2.5, "max_lat": 0.7})
    assert [region["id"] for region in boxed.json()] == ["100", "101"]

    info = api_client.get("/api/regions/100").json()
    assert info == {"region_id": "100", "rep_name": "Alice", "assigned": True}
    assert api_client.get("/api/regions/101").json()["rep_name"] == "Unassigned"
    assert api_client.get("/api/regions/969").status_code == 404


def test_live_assignment_endpoints(api_client: TestClient) -> None:
    assert api_client.get("/api/zip3").json() == [{"Zipcode": "100", "Sales_Rep": "Alice"}]

    response = api_client.post("/api/zip3", json={"Zipcode": "5", "Sales_Rep": "Bob"})
    assert response.status_code == 200
    assert response.json() == {"Zipcode": "005", "Sales_Rep": "Bob"}

    assert api_client.post("/api/zip3", json={"Zipcode": "101", "Sales_Rep": ""}).status_code == 422
    assert api_client.post("/api/zip3", json={"Zipcode": "12345", "Sales_Rep": "Bob"}).status_code == 400

    assert api_client.delete("/api/zip3/100").json() == {"success": True}
    assert api_client.get("/api/zip3").json() == [{"Zipcode": "005", "Sales_Rep": "Bob"}]


def test_live_rep_endpoints(api_client: TestClient) -> None:
    created = api_client.post(
        "/api/reps",
        json={"Name": "Carol", "Email": "carol@example.com", "Phone Number": "(555) 010 0003"},
    )
    assert created.status_code == 201
    assert created.json()["Phone Number"] == "555-010-0003"

    duplicate = api_client.post(
        "/api/reps",
        json={"Name": "Carol", "Email": "c@example.com", "Phone Number": "5550100003"},
    )
    assert duplicate.status_code == 409
    assert api_client.post("/api/reps", json={"Name": "Dan", "Email": "", "Phone Number": "1"}).status_code == 422

    updated = api_client.put("/api/reps/Carol", json={"Email": "carol@corp.example.com"})
    assert updated.json() == {"Name": "Carol", "Email": "carol@corp.example.com", "Phone Number": "555-010-0003"}
    assert api_client.put("/api/reps/Nobody", json={"Email": "x@example.com"}).status_code == 404

    blocked = api_client.delete("/api/reps/Alice")
    assert blocked.status_code == 400
    assert blocked.json()["detail"]["region_ids"] == ["100"]

    moved = api_client.delete("/api/reps/Alice", params={"reassign_to": "Bob"})
    assert moved.json() == {"deleted": "Alice", "reassigned_regions": ["100"], "reassigned_to": "Bob"}
    assert api_client.get("/api/zip3").json() == [{"Zipcode": "100", "Sales_Rep": "Bob"}]
    assert [rep["Name"] for rep in api_client.get("/api/reps").json()] == ["Bob", "Carol"]


def test_draft_endpoints(api_client: TestClient) -> None:
    body = {
        "name": "West",
        "zip3Assignments": [{"Zipcode": "101", "Sales_Rep": "Bob"}],
        "repsList": [{"Name": "Bob", "Email": "bob@example.com", "Phone Number": "555-010-0002"}],
    }
    created = api_client.post("/api/drafts", json=body)
    assert created.status_code == 201
    draft_id = created.json()["id"]
    assert draft_id.startswith("west_")

    listed = api_client.get("/api/drafts").json()
    assert [item["id"] for item in listed] == [draft_id]
    assert api_client.get(f"/api/drafts/{draft_id}").json()["zip3Assignments"] == body["zip3Assignments"]

    pending = api_client.post(f"/api/drafts/{draft_id}/publish")
    assert pending.status_code == 200
    assert pending.json()["kind"] == "draft"
    assert pending.json()["draft_id"] == draft_id
    assert api_client.get("/api/zip3").json() == [{"Zipcode": "100", "Sales_Rep": "Alice"}]
    assert api_client.post("/api/drafts/missing_1/publish").status_code == 404

    published = api_client.post("/api/session/publish/confirm", json={"token": pending.json()["token"]})
    assert published.json()["assignments"] == 1
    assert published.json()["kind"] == "draft"
    assert api_client.get("/api/zip3").json() == body["zip3Assignments"]

    assert api_client.delete(f"/api/drafts/{draft_id}").json() == {"success": True}
    assert api_client.delete(f"/api/drafts/{draft_id}").status_code == 404
    assert api_client.get("/api/drafts/missing_1").status_code == 404


def test_session_selection_and_publish_flow(api_client: TestClient) -> None:
    state = api_client.get("/api/session").json()
    assert state["mode"] == "inspect"
    assert state["current_draft_name"] == "Unsaved changes"
    assert state["has_unpublished_changes"] is False

    state = api_client.post("/api/session/click", json={"lon": 0.5, "lat": 0.5}).json()
    assert state["focused_region"] == "100"
    assert state["focused_rep"] == "Alice"

    state = api_client.put("/api/session/mode", json={"mode": "edit_shape"}).json()
    assert state["focused_region"] is None

    api_client.post("/api/session/gestures/freehand")
    for event, lon in (("pointerdown", 0.5), ("pointermove", 1.5), ("pointerup", 2.5)):
        state = api_client.post("/api/session/pointer", json={"event": event, "lon": lon, "lat": 0.5}).json()
    assert state["selection"] == ["100", "101"]
    assert state["dragging_enabled"] is True
    assert len(state["drawn_shapes"]) == 1

    assigned = api_client.post("/api/session/assignments", json={"rep_name": "Bob"}).json()
    assert assigned == {"rep_name": "Bob", "region_ids": ["100", "101"]}
    assert api_client.get("/api/session").json()["has_unpublished_changes"] is True

    pending = api_client.post("/api/session/publish").json()
    assert pending["kind"] == "direct"
    assert api_client.post("/api/session/publish/confirm", json={"token": "nope"}).status_code == 400

    result = api_client.post("/api/session/publish/confirm", json={"token": pending["token"]})
    assert result.status_code == 200
    assert result.json()["kind"] == "direct"

    state = api_client.get("/api/session").json()
    assert state["has_unpublished_changes"] is False
    assert state["notifications"][-1]["message"] == "Changes published."
    assert api_client.get("/api/zip3").json() == [
        {"Zipcode": "100", "Sales_Rep": "Bob"},
        {"Zipcode": "101", "Sales_Rep": "Bob"},
    ]
    assert api_client.get("/api/session/drafts").json() == []


def test_session_drafts_roster_and_revert(api_client: TestClient) -> None:
    api_client.post("/api/session/assignments", json={"rep_name": "Bob", "region_ids": ["'102"]})
    saved = api_client.post("/api/session/drafts", json={"name": "Plan B"})
    assert saved.status_code == 201
    draft_id = saved.json()["id"]

    state = api_client.post("/api/session/revert").json()
    assert state["has_unpublished_changes"] is False

    state = api_client.post(f"/api/session/drafts/{draft_id}/load").json()
    assert state["current_draft_name"] == "Plan B"
    assert api_client.get("/api/regions/102").json()["rep_name"] == "Bob"

    blocked = api_client.delete("/api/session/reps/Bob")
    assert blocked.status_code == 400
    moved = api_client.delete("/api/session/reps/Bob", params={"reassign_to": "Alice"}).json()
    assert moved["reassigned_regions"] == ["102"]

    added = api_client.post(
        "/api/session/reps",
        json={"Name": "Erin", "Email": "erin@example.com", "Phone Number": "555.010.0009"},
    )
    assert added.status_code == 201
    assert [rep["Name"] for rep in api_client.get("/api/session/reps").json()] == ["Alice", "Erin"]

    assert api_client.post("/api/session/assignments", json={"rep_name": "Bob", "region_ids": ["999"]}).status_code == 404
    assert api_client.post("/api/session/drafts/missing_1/load").status_code == 404

    state = api_client.delete(f"/api/session/drafts/{draft_id}").json()
    assert state["current_draft_name"] == "Unsaved changes"


def test_live_edits_rebase_the_open_session(api_client: TestClient) -> None:
    assert api_client.get("/api/regions/101").json()["rep_name"] == "Unassigned"

    api_client.post("/api/zip3", json={"Zipcode": "101", "Sales_Rep": "Bob"})

    assert api_client.get("/api/regions/101").json()["rep_name"] == "Bob"
    assert api_client.get("/api/session").json()["has_unpublished_changes"] is False

    api_client.post("/api/session/assignments", json={"rep_name": "Bob", "region_ids": ["102"]})
    api_client.put("/api/reps/Bob", json={"Email": "bob@corp.example.com"})
    assert api_client.get("/api/session").json()["has_unpublished_changes"] is True
    assert api_client.get("/api/regions/102").json()["rep_name"] == "Bob"

    pending = api_client.post("/api/session/publish").json()
    api_client.post("/api/session/publish/confirm", json={"token": pending["token"]})

    assert api_client.get("/api/zip3").json() == [
        {"Zipcode": "100", "Sales_Rep": "Alice"},
        {"Zipcode": "101", "Sales_Rep": "Bob"},
        {"Zipcode": "102", "Sales_Rep": "Bob"},
    ]


def test_session_requests_wait_for_the_session_lock(api_client: TestClient) -> None:
    session = get_session()
    results = []

    def _click() -> None:
        results.append(api_client.post("/api/session/click", json={"lon": 0.5, "lat": 0.5}).json())

    with session.lock:
        worker = threading.Thread(target=_click)
        worker.start()
        worker.join(timeout=0.3)
        assert worker.is_alive()
        assert results == []

    worker.join(timeout=5)
    assert not worker.is_alive()
    assert results[0]["focused_region"] == "100"
