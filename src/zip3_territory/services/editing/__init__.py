"""Operator editing sessions."""

from .notifications import NotificationCenter
from .session import UNASSIGNED, EditingSession, RegionInfo

__all__ = ["EditingSession", "NotificationCenter", "RegionInfo", "UNASSIGNED"]
