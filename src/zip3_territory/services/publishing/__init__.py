"""Publish coordination."""

from .coordinator import PendingPublish, PublishCoordinator, PublishKind, PublishResult

__all__ = ["PendingPublish", "PublishCoordinator", "PublishKind", "PublishResult"]
