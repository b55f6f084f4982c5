"""Territory persistence."""
