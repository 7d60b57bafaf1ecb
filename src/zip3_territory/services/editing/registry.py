"""Process-wide singletons used by the HTTP layer."""

from __future__ import annotations

import contextlib
import functools
import logging
from typing import Iterator

from ...data.regions_repository import get_region_catalog
from ...persistence.filesystem import FileStorage
from ...persistence.live_store import LiveDataStore
from ..drafts import DraftStore
from .session import EditingSession

logger = logging.getLogger(__name__)


@functools.lru_cache(maxsize=1)
def get_storage() -> FileStorage:
    return FileStorage()


def get_live_store() -> LiveDataStore:
    return LiveDataStore(get_storage())


def get_draft_store() -> DraftStore:
    return DraftStore(get_storage())


@functools.lru_cache(maxsize=1)
def get_session() -> EditingSession:
    """The single operator session; built on first use from the region catalog and live files."""
    session = EditingSession.open(get_region_catalog(), get_storage())
    logger.info("Editing session opened with %d region(s)", len(session.catalog))
    return session


@contextlib.contextmanager
def locked_session() -> Iterator[EditingSession]:
    """The session with its lock held for the duration of the block."""
    session = get_session()
    with session.lock:
        yield session


def sync_live_data() -> None:
    """Rebase an already opened session after a direct write to the live files."""
    if get_session.cache_info().currsize:
        get_session().sync_live()


def reset_session() -> None:
    if get_session.cache_info().currsize:
        get_session().close()
    get_session.cache_clear()
    get_storage.cache_clear()
