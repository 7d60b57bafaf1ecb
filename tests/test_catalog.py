import json
from pathlib import Path

import pytest

from zip3_territory.data.regions_repository import fetch_region_catalog, get_region_catalog
from zip3_territory.errors import CatalogLoadError, NotFoundError
from zip3_territory.models.domain import BoundingBox
from zip3_territory.services.catalog import load_region_catalog


def _square(postal, lon: float, lat: float, size: float = 1.0) -> dict:
    ring = [[lon, lat], [lon + size, lat], [lon + size, lat + size], [lon, lat + size], [lon, lat]]
    return {
        "type": "Feature",
        "properties": {"Postal": postal},
        "geometry": {"type": "Polygon", "coordinates": [ring]},
    }


def _wide(postal) -> dict:
    ring = [[-100.0, 10.0], [100.0, 10.0], [100.0, 11.0], [-100.0, 11.0], [-100.0, 10.0]]
    return {
        "type": "Feature",
        "properties": {"Postal": postal},
        "geometry": {"type": "Polygon", "coordinates": [ring]},
    }


@pytest.fixture(autouse=True)
def clear_catalog_cache():
    get_region_catalog.cache_clear()
    yield
    get_region_catalog.cache_clear()


def test_load_filters_excluded_and_antimeridian_features() -> None:
    features = [_square("100", 0, 0), _square("101", 2, 0), _square("969", 4, 0), _wide("102")]

    catalog = load_region_catalog(features)

    assert catalog.ids == frozenset({"100", "101"})
    assert "969" not in catalog
    assert "102" not in catalog
    assert len(catalog) == 2


def test_load_drops_features_without_geometry_or_id() -> None:
    features = [
        _square("100", 0, 0),
        {"type": "Feature", "properties": {"Postal": "200"}, "geometry": None},
        {"type": "Feature", "properties": {"Postal": "201"}, "geometry": {"type": "Polygon", "coordinates": []}},
        {"type": "Feature", "properties": {}, "geometry": _square("x", 5, 5)["geometry"]},
        "not a feature",
    ]

    catalog = load_region_catalog(features)

    assert catalog.ids == frozenset({"100"})


def test_load_normalizes_ids_and_keeps_first_duplicate() -> None:
    catalog = load_region_catalog([_square("'5", 0, 0), _square("005", 10, 10), _square(12, 2, 2)])

    assert catalog.ids == frozenset({"005", "012"})
    assert catalog.get("5").bounding_box == BoundingBox(0.0, 0.0, 1.0, 1.0)


def test_load_honours_custom_exclusions_and_id_property() -> None:
    feature = _square("300", 0, 0)
    feature["properties"] = {"ZIP3": "300"}

    catalog = load_region_catalog([feature, _square("301", 2, 0)], excluded_ids=[], id_property="ZIP3")

    assert catalog.ids == frozenset({"300"})


def test_load_raises_when_nothing_survives() -> None:
    with pytest.raises(CatalogLoadError):
        load_region_catalog([_square("969", 0, 0), _wide("100")])

    with pytest.raises(CatalogLoadError):
        load_region_catalog([])


def test_lookup_and_spatial_queries() -> None:
    catalog = load_region_catalog([_square("100", 0, 0), _square("101", 2, 0), _square("102", 0, 5)])

    with pytest.raises(NotFoundError):
        catalog.get("999")

    assert sorted(catalog.regions_intersecting(BoundingBox(0.5, 0.5, 2.5, 0.75))) == ["100", "101"]
    assert catalog.region_at(0.5, 0.5) == "100"
    assert catalog.region_at(2.5, 0.5) == "101"
    assert catalog.region_at(1.5, 0.5) is None
    assert [region.id for region in catalog] == ["100", "101", "102"]


def test_fetch_region_catalog_reads_local_file(tmp_path: Path) -> None:
    source = tmp_path / "regions.geojson"
    source.write_text(
        json.dumps({"type": "FeatureCollection", "features": [_square("100", 0, 0)]}),
        encoding="utf-8",
    )

    features = fetch_region_catalog(source)
    catalog = get_region_catalog(source)

    assert len(features) == 1
    assert catalog.ids == frozenset({"100"})
    assert get_region_catalog(source) is catalog


def test_fetch_region_catalog_reports_missing_or_invalid_file(tmp_path: Path) -> None:
    with pytest.raises(CatalogLoadError):
        fetch_region_catalog(tmp_path / "missing.geojson")

    broken = tmp_path / "broken.geojson"
    broken.write_text(json.dumps({"type": "FeatureCollection"}), encoding="utf-8")
    with pytest.raises(CatalogLoadError):
        fetch_region_catalog(broken)
