"""Working-draft ledger."""

from .service import AssignmentLedger, snapshots_equal

__all__ = ["AssignmentLedger", "snapshots_equal"]
