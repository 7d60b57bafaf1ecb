"""File-backed persistence."""
