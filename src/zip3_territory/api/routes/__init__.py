"""Route group exports."""

from . import drafts, health, live, regions, session

__all__ = ["drafts", "health", "live", "regions", "session"]
