"""Core services: catalog, selection, ledger, drafts, publishing and sessions."""
