"""Draft snapshot storage."""

from .store import DraftStore, slugify, snapshot_from_payload, snapshot_to_payload

__all__ = ["DraftStore", "slugify", "snapshot_from_payload", "snapshot_to_payload"]
