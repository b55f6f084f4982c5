"""Territory catalog, assignment and access-control services."""
