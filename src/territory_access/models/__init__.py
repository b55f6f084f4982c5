"""Domain models."""

from .domain import (
    AdministratorPrincipal,
    AvailabilityStats,
    LocationOption,
    Role,
    ZipcodeAssignmentIndex,
    ZipcodeHolder,
)
from .territory import (
    AssignmentLevel,
    CityTerritory,
    CountryTerritory,
    LocationSelection,
    RealZipcode,
    StateTerritory,
    SyntheticZipcode,
    Territory,
    ZipcodeTerritory,
    build_territory,
    classify_zipcode,
    is_synthetic,
    parse_territory_blob,
    territory_to_blob,
)

__all__ = [
    "AdministratorPrincipal",
    "AssignmentLevel",
    "AvailabilityStats",
    "CityTerritory",
    "CountryTerritory",
    "LocationOption",
    "LocationSelection",
    "RealZipcode",
    "Role",
    "StateTerritory",
    "SyntheticZipcode",
    "Territory",
    "ZipcodeAssignmentIndex",
    "ZipcodeHolder",
    "ZipcodeTerritory",
    "build_territory",
    "classify_zipcode",
    "is_synthetic",
    "parse_territory_blob",
    "territory_to_blob",
]
