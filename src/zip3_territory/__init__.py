"""ZIP3 territory assignment service."""
