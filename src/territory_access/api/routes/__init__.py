"""Route group exports."""

from . import access, admins, health, locations

__all__ = ["access", "admins", "health", "locations"]
