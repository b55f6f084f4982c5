"""Location catalog derived from registered users."""

from .service import LocationCatalog, LocationHierarchy

__all__ = ["LocationCatalog", "LocationHierarchy"]
