"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ZIP3_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "ZIP3 Territory Manager API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for live data and drafts.")
    assignments_file: Path = Field(
        default=Path("zip3_rep.csv"),
        description="Live ZIP3 to sales rep assignments (Zipcode,Sales_Rep).",
    )
    reps_file: Path = Field(
        default=Path("rep_contact.csv"),
        description="Live rep roster (Name,Email,Phone Number).",
    )
    drafts_dir: Path = Field(default=Path("drafts"), description="Directory holding one JSON file per draft.")
    region_geojson_file: Path = Field(
        default=Path("usa_zip3_codes_geo_optimized.geojson"),
        description="GeoJSON FeatureCollection with one feature per ZIP3 region.",
    )
    region_catalog_url: Optional[str] = Field(
        default=None,
        description="Remote GeoJSON source; takes precedence over region_geojson_file when set.",
    )
    region_catalog_timeout_seconds: float = Field(default=30.0, gt=0.0)
    region_id_property: str = Field(default="Postal", description="Feature property carrying the ZIP3 code.")
    excluded_region_ids: tuple[str, ...] = Field(
        default=("006", "007", "008", "009", "969"),
        description="Region ids never shown on the map.",
    )
    max_longitude_span: float = Field(
        default=180.0,
        gt=0.0,
        description="Rings spanning more longitude than this are treated as anti-meridian artifacts.",
    )
    direct_publish_draft_name: str = "Direct Publish"
    unsaved_draft_label: str = "Unsaved changes"
    notification_ttl_seconds: float = Field(default=5.0, ge=0.0)
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("data_root", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("assignments_file", "reps_file", "drafts_dir", "region_geojson_file", mode="before")
    @classmethod
    def _expand_relative_path(cls, value: Any) -> Path:
        # Relative paths are resolved against data_root when the path is used.
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser()

    @field_validator("frontend_allowed_origins", "excluded_region_ids", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    def resolve_data_path(self, path: Path) -> Path:
        """Return ``path`` anchored at ``data_root`` unless it is already absolute."""
        return path if path.is_absolute() else (self.data_root / path).resolve()


settings = Settings()
