#!/usr/bin/env python3
"""Helper script to check the data files the API needs and create a template .env file."""

from pathlib import Path
import sys

TEMPLATE = """# Data Paths (relative paths resolve against ZIP3_DATA_ROOT)
ZIP3_DATA_ROOT=./data
ZIP3_ASSIGNMENTS_FILE=zip3_rep.csv
ZIP3_REPS_FILE=rep_contact.csv
ZIP3_DRAFTS_DIR=drafts
ZIP3_REGION_GEOJSON_FILE=usa_zip3_codes_geo_optimized.geojson

# Remote region GeoJSON (optional, overrides the local file)
# ZIP3_REGION_CATALOG_URL=https://example.com/usa_zip3_codes_geo_optimized.geojson

# API Configuration
ZIP3_API_PREFIX=/api
# ZIP3_FRONTEND_ALLOWED_ORIGINS - JSON array or comma-separated list
# ZIP3_EXCLUDED_REGION_IDS=006,007,008,009,969
"""


def main() -> int:
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("ZIP3 Territory environment checker")
    print("=" * 60)

    if not env_file.exists():
        env_file.write_text(TEMPLATE, encoding="utf-8")
        print(f"Created template .env file at: {env_file}")
    else:
        print(f"Found .env file at: {env_file}")

    sys.path.insert(0, str(project_root / "src"))
    from zip3_territory.config import settings

    print(f"Data root: {settings.data_root}")
    missing = 0
    for label, path in (
        ("Region GeoJSON", settings.resolve_data_path(settings.region_geojson_file)),
        ("Live assignments", settings.resolve_data_path(settings.assignments_file)),
        ("Live roster", settings.resolve_data_path(settings.reps_file)),
    ):
        if path.exists():
            print(f"  OK       {label}: {path}")
        else:
            missing += 1
            print(f"  MISSING  {label}: {path}")

    if settings.region_catalog_url:
        print(f"Region GeoJSON will be fetched from {settings.region_catalog_url}")
    elif not settings.resolve_data_path(settings.region_geojson_file).exists():
        print("The map cannot be shown until the region GeoJSON file is present.")
        return 1
    if missing:
        print("Missing live files are created on the first publish.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
