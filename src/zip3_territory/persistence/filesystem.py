"""File-based persistence helpers for live data and drafts."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from ..config import settings


class FileStorage:
    """Thin wrapper around the data root for storing JSON and CSV files."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.data_root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def resolve(self, path: Path) -> Path:
        return path if path.is_absolute() else self.root / path

    def ensure_directory(self, path: Path) -> Path:
        directory = self.resolve(path)
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    def write_json(self, path: Path, data: Any, *, indent: int = 2) -> None:
        self.write_text(path, json.dumps(data, ensure_ascii=False, indent=indent))

    def read_json(self, path: Path) -> Any:
        with self.resolve(path).open("r", encoding="utf-8") as handle:
            return json.load(handle)

    def write_csv(self, path: Path, content: str) -> None:
        self.write_text(path, content)

    def write_text(self, path: Path, content: str) -> None:
        """Write ``content`` through a sibling temp file so readers never see a torn file."""
        target = self.resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                handle.write(content)
            os.replace(temp_name, target)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise
