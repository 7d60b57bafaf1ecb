"""Domain error taxonomy shared by the services and the API layer."""

from __future__ import annotations

from typing import Sequence


class TerritoryError(Exception):
    """Base class for every error raised by the territory services."""


class ValidationError(TerritoryError, ValueError):
    """A required field is missing or a value is malformed."""


class DuplicateRepError(TerritoryError):
    """A rep with the same name is already on the roster."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Rep with name '{name}' already exists.")
        self.name = name


class NotFoundError(TerritoryError, LookupError):
    """A rep, draft or region lookup missed."""

    def __init__(self, kind: str, key: str) -> None:
        super().__init__(f"{kind.capitalize()} '{key}' not found.")
        self.kind = kind
        self.key = key


class ReassignmentRequiredError(TerritoryError):
    """A rep still owns regions and no reassignment target was supplied."""

    def __init__(self, name: str, region_ids: Sequence[str]) -> None:
        super().__init__(
            f"Rep '{name}' is assigned to {len(region_ids)} region(s); "
            f"choose a rep to take them over before deleting."
        )
        self.name = name
        self.region_ids = tuple(region_ids)


class PublishFailedError(TerritoryError):
    """Writing the live assignment or roster file failed.

    ``assignments_written`` is True when the assignments half of the publish
    reached disk before the roster write failed, leaving the live pair out of
    step until the next successful publish.
    """

    def __init__(self, draft_id: str, reason: str, *, assignments_written: bool = False) -> None:
        super().__init__(f"Failed to publish draft '{draft_id}': {reason}")
        self.draft_id = draft_id
        self.reason = reason
        self.assignments_written = assignments_written


class CatalogLoadError(TerritoryError):
    """No usable region survived catalog loading; the map cannot be shown."""
