"""Territory variants, zipcode classification and the stored blob codec.

A territory is one of four variants keyed by assignment level. Each variant
carries exactly the fields valid at that level, so a city without a state or a
zipcode without a city cannot be represented. Loosely shaped caller input is
held in :class:`LocationSelection` until :func:`build_territory` accepts it.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Mapping, Optional, Union

from ..errors import TerritoryValidationError

logger = logging.getLogger(__name__)

SYNTHETIC_ZIPCODE_PATTERN = re.compile(r"^[A-Z]{3}\d{3}$")

COUNTRY_REQUIRED = "Please provide at least a country for validation."
STATE_LEVEL_REQUIRED = "State-level assignment requires country and state."
CITY_LEVEL_REQUIRED = "City-level assignment requires country, state, and city."
ZIPCODE_LEVEL_REQUIRED = "Zipcode-level assignment requires country, state, city, and zipcode."


class AssignmentLevel(str, Enum):
    COUNTRY = "country"
    STATE = "state"
    CITY = "city"
    ZIPCODE = "zipcode"


@dataclass(frozen=True, slots=True)
class RealZipcode:
    """A postal code observed on real user records."""

    value: str


@dataclass(frozen=True, slots=True)
class SyntheticZipcode:
    """A generated placeholder such as ``PUN001``; never present on user records."""

    value: str


Zipcode = Union[RealZipcode, SyntheticZipcode]


def is_synthetic(value: Optional[str]) -> bool:
    return bool(value) and SYNTHETIC_ZIPCODE_PATTERN.match(value) is not None


def classify_zipcode(value: str) -> Zipcode:
    if is_synthetic(value):
        return SyntheticZipcode(value)
    return RealZipcode(value)


@dataclass(frozen=True, slots=True)
class CountryTerritory:
    country: str
    streets: tuple[str, ...] = ()

    assignment_level: ClassVar[AssignmentLevel] = AssignmentLevel.COUNTRY

    @property
    def state(self) -> None:
        return None

    @property
    def city(self) -> None:
        return None

    @property
    def zipcode(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class StateTerritory:
    country: str
    state: str
    streets: tuple[str, ...] = ()

    assignment_level: ClassVar[AssignmentLevel] = AssignmentLevel.STATE

    @property
    def city(self) -> None:
        return None

    @property
    def zipcode(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class CityTerritory:
    country: str
    state: str
    city: str
    streets: tuple[str, ...] = ()

    assignment_level: ClassVar[AssignmentLevel] = AssignmentLevel.CITY

    @property
    def zipcode(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class ZipcodeTerritory:
    """Zipcode-level territory.

    ``zipcode_field`` names the user column the zipcode was read from; it is
    unset for synthetic zipcodes and for territories stored before it existed.
    """

    country: str
    state: str
    city: str
    zipcode: str
    streets: tuple[str, ...] = ()
    zipcode_field: Optional[str] = None

    assignment_level: ClassVar[AssignmentLevel] = AssignmentLevel.ZIPCODE

    @property
    def zipcode_kind(self) -> Zipcode:
        return classify_zipcode(self.zipcode)


Territory = Union[CountryTerritory, StateTerritory, CityTerritory, ZipcodeTerritory]


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _clean_streets(value: Any) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(street for street in (_clean(item) for item in value) if street)


@dataclass(frozen=True, slots=True)
class LocationSelection:
    """Unvalidated location input as submitted by a caller."""

    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    zipcode: Optional[str] = None
    streets: tuple[str, ...] = ()
    zipcode_field: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LocationSelection":
        """Build a selection from a dict, accepting ``district`` as the legacy name of ``state``."""
        return cls(
            country=_clean(data.get("country")),
            state=_clean(data.get("state")) or _clean(data.get("district")),
            city=_clean(data.get("city")),
            zipcode=_clean(data.get("zipcode")),
            streets=_clean_streets(data.get("streets")),
            zipcode_field=_clean(data.get("zipcodeField")),
        )

    @property
    def deepest_level(self) -> Optional[AssignmentLevel]:
        if self.zipcode:
            return AssignmentLevel.ZIPCODE
        if self.city:
            return AssignmentLevel.CITY
        if self.state:
            return AssignmentLevel.STATE
        if self.country:
            return AssignmentLevel.COUNTRY
        return None


def check_hierarchy(selection: LocationSelection) -> None:
    """Raise :class:`TerritoryValidationError` when a level is set without its ancestors."""
    if not selection.country:
        raise TerritoryValidationError(COUNTRY_REQUIRED)
    if selection.zipcode and not (selection.state and selection.city):
        raise TerritoryValidationError(ZIPCODE_LEVEL_REQUIRED)
    if selection.city and not selection.state:
        raise TerritoryValidationError(CITY_LEVEL_REQUIRED)


def build_territory(selection: LocationSelection) -> Territory:
    check_hierarchy(selection)
    if selection.zipcode:
        return ZipcodeTerritory(
            country=selection.country,
            state=selection.state,
            city=selection.city,
            zipcode=selection.zipcode,
            streets=selection.streets,
            zipcode_field=selection.zipcode_field,
        )
    if selection.city:
        return CityTerritory(
            country=selection.country,
            state=selection.state,
            city=selection.city,
            streets=selection.streets,
        )
    if selection.state:
        return StateTerritory(country=selection.country, state=selection.state, streets=selection.streets)
    return CountryTerritory(country=selection.country, streets=selection.streets)


def territory_to_selection(territory: Territory) -> LocationSelection:
    return LocationSelection(
        country=territory.country,
        state=territory.state,
        city=territory.city,
        zipcode=territory.zipcode,
        streets=territory.streets,
        zipcode_field=getattr(territory, "zipcode_field", None),
    )


def parse_territory_blob(raw: Any) -> Optional[Territory]:
    """Read a stored territory blob, normalizing older shapes.

    Accepts a dict or its JSON string. The older ``district`` key is read as
    ``state``, a missing ``streets`` list becomes empty and any stored
    ``assignmentLevel`` is ignored in favour of the derived one. Blobs that
    break the hierarchy are unreadable and yield ``None``.
    """
    if raw is None or raw == "":
        return None
    data = raw
    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning(f"Unreadable territory blob {raw!r}: {exc}")
            return None
    if not isinstance(data, Mapping):
        logger.warning(f"Ignoring territory blob of type {type(data).__name__}")
        return None
    selection = LocationSelection.from_mapping(data)
    if selection.deepest_level is None:
        return None
    try:
        return build_territory(selection)
    except TerritoryValidationError as exc:
        logger.warning(f"Stored territory {dict(data)} is not a valid hierarchy: {exc.reason}")
        return None


def territory_to_blob(territory: Territory) -> dict[str, Any]:
    blob: dict[str, Any] = {"country": territory.country}
    if territory.state:
        blob["state"] = territory.state
    if territory.city:
        blob["city"] = territory.city
    if territory.zipcode:
        blob["zipcode"] = territory.zipcode
    if getattr(territory, "zipcode_field", None):
        blob["zipcodeField"] = territory.zipcode_field
    blob["streets"] = list(territory.streets)
    blob["assignmentLevel"] = territory.assignment_level.value
    return blob


def describe_territory(territory: Optional[Territory]) -> str:
    """Human-readable territory, most specific part first."""
    if territory is None:
        return "Global Access"

    parts: list[str] = []
    if territory.streets:
        parts.append(territory.streets[0] if len(territory.streets) == 1 else f"{len(territory.streets)} streets")
    for value in (territory.zipcode, territory.city, territory.state, territory.country):
        if value:
            parts.append(value)
    return ", ".join(parts)


def describe_territory_compact(territory: Optional[Territory]) -> str:
    if territory is None:
        return "Global Access"
    deepest = getattr(territory, territory.assignment_level.value)
    return f"{deepest} ({territory.assignment_level.value})"
