"""Assigned-zipcode cache, territory validation and validated mutations."""
