"""Readers and record access over the users table."""
