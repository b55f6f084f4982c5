"""Location catalog derived from the live user population.

Every value the catalog offers comes from registered users (rows with a name
and an email); there is no static geography table. Public methods are
best-effort: a failed read is logged and answered with an empty result. The
``scan_*`` and ``count_users`` methods raise :class:`DataAccessError` instead,
so callers that must tell "nothing there" from "could not look" can.
"""

from __future__ import annotations

import functools
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Optional, TypeVar

from ...config import Settings, settings as default_settings
from ...data.users_repository import PopulationReader
from ...errors import DataAccessError
from ...models.domain import AvailabilityStats, LocationOption, ZipcodeAssignmentIndex, ZipcodeHolder
from ..access.filters import ILIKE, FilterCondition, LocationFilter, location_filter
from ..assignments.cache import ZipcodeAssignmentCache
from .zipcodes import locate_real_zipcode, real_zipcode, synthetic_code_count, synthetic_zipcode, zipcode_sort_key

logger = logging.getLogger(__name__)

T = TypeVar("T")

SuggestionLevel = Literal["country", "city", "zipcode"]
MIN_SUGGESTION_QUERY = 2


def best_effort(default: Callable[[], Any]) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Log :class:`DataAccessError` and return ``default()`` instead."""

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return func(*args, **kwargs)
            except DataAccessError as exc:
                logger.warning(f"{func.__name__} degraded to empty result: {exc}")
                return default()

        return wrapper

    return decorator


@dataclass(slots=True)
class ZipcodeScan:
    """Zipcodes observed among the users of one city."""

    population: int
    real_counts: dict[str, int]
    fields: dict[str, str] = field(default_factory=dict)

    @property
    def has_real_zipcodes(self) -> bool:
        return bool(self.real_counts)


@dataclass(slots=True)
class LocationHierarchy:
    countries: list[LocationOption] = field(default_factory=list)
    states: list[LocationOption] = field(default_factory=list)
    cities: list[LocationOption] = field(default_factory=list)
    zipcodes: list[LocationOption] = field(default_factory=list)


def _to_options(counts: dict[str, int]) -> list[LocationOption]:
    return [
        LocationOption.of(value, count)
        for value, count in sorted(counts.items(), key=lambda item: (item[0].casefold(), item[0]))
    ]


class LocationCatalog:
    def __init__(
        self,
        population: PopulationReader,
        cache: ZipcodeAssignmentCache,
        config: Settings = default_settings,
    ) -> None:
        self.population = population
        self.cache = cache
        self.config = config

    # Raising scans -----------------------------------------------------------------

    def scan_values(self, column: str, scope: Optional[LocationFilter] = None) -> dict[str, int]:
        """Count users per distinct trimmed value of ``column`` within ``scope``."""
        rows = self.population.select_users(column, scope, require_values=(column,))
        counts: dict[str, int] = {}
        for row in rows:
            value = row.get(column)
            if value is None:
                continue
            value = str(value).strip()
            if value:
                counts[value] = counts.get(value, 0) + 1
        return counts

    def scan_zipcodes(self, country: str, city: str) -> ZipcodeScan:
        rows = self.population.select_users("*", location_filter(country=country, city=city))
        counts: dict[str, int] = {}
        fields: dict[str, str] = {}
        for row in rows:
            located = locate_real_zipcode(row, self.config.zipcode_candidate_fields)
            if located is None:
                continue
            column, zipcode = located
            counts[zipcode] = counts.get(zipcode, 0) + 1
            fields.setdefault(zipcode, column)
        return ZipcodeScan(population=len(rows), real_counts=counts, fields=fields)

    def zipcode_source(self, country: str, city: str, zipcode: str) -> Optional[str]:
        """User column carrying ``zipcode`` in the city, or ``None`` when no user has it."""
        return self.scan_zipcodes(country, city).fields.get(zipcode)

    def count_users(
        self,
        country: Optional[str] = None,
        state: Optional[str] = None,
        city: Optional[str] = None,
    ) -> int:
        return self.population.count_users(location_filter(country, state, city))

    # Best-effort queries -----------------------------------------------------------

    @best_effort(list)
    def list_countries(self) -> list[LocationOption]:
        return _to_options(self.scan_values("country"))

    @best_effort(list)
    def list_states(self, country: str) -> list[LocationOption]:
        if not country:
            return []
        return _to_options(self.scan_values("state", location_filter(country=country)))

    @best_effort(list)
    def list_cities(self, country: str, state: Optional[str] = None) -> list[LocationOption]:
        if not country:
            return []
        return _to_options(self.scan_values("city", location_filter(country=country, state=state)))

    @best_effort(list)
    def list_zipcodes(
        self,
        country: str,
        city: str,
        excluding_admin_id: Optional[str] = None,
    ) -> list[LocationOption]:
        """Zipcodes in a city that no other admin holds.

        When no user in the city carries a real zipcode, deterministic
        placeholders (``PUN001``, ``PUN002``, ...) stand in, sharing the city's
        users evenly. ``excluding_admin_id`` keeps that admin's own zipcode
        selectable while editing their assignment.
        """
        if not country or not city:
            return []

        scan = self.scan_zipcodes(country, city)
        if scan.population == 0:
            logger.info(f"No users found in {city}, {country}")
            return []

        index = self.cache.get()
        if scan.has_real_zipcodes:
            available = {
                zipcode: count
                for zipcode, count in scan.real_counts.items()
                if not index.is_claimed(zipcode, excluding_admin_id)
            }
        else:
            available = self._synthetic_available(city, scan.population, index, excluding_admin_id)
            logger.info(f"Generated {len(available)} representative zipcodes for {city}")

        return [
            LocationOption.of(zipcode, available[zipcode])
            for zipcode in sorted(available, key=zipcode_sort_key)
        ]

    def synthetic_shares(self, city: str, population: int) -> dict[str, int]:
        """Placeholder codes for a city in sequence order, each with its share of users.

        Code ``n`` covers users ``(n - 1) * per_code`` onwards; codes left with
        no users are dropped.
        """
        code_count = synthetic_code_count(
            population, self.config.users_per_synthetic_zipcode, self.config.max_synthetic_zipcodes
        )
        if code_count == 0:
            return {}
        users_per_code = math.ceil(population / code_count)

        shares: dict[str, int] = {}
        for sequence in range(1, code_count + 1):
            count = min(users_per_code, population - (sequence - 1) * users_per_code)
            if count <= 0:
                break
            shares[synthetic_zipcode(city, sequence)] = count
        return shares

    def _synthetic_available(
        self,
        city: str,
        population: int,
        index: ZipcodeAssignmentIndex,
        excluding_admin_id: Optional[str],
    ) -> dict[str, int]:
        listed: dict[str, int] = {}
        for zipcode, count in self.synthetic_shares(city, population).items():
            if len(listed) >= self.config.max_listed_synthetic_zipcodes:
                break
            if not index.is_claimed(zipcode, excluding_admin_id):
                listed[zipcode] = count
        return listed

    @best_effort(AvailabilityStats)
    def availability_stats(
        self,
        country: str,
        city: str,
        excluding_admin_id: Optional[str] = None,
    ) -> AvailabilityStats:
        if not country or not city:
            return AvailabilityStats()

        scan = self.scan_zipcodes(country, city)
        if scan.population == 0:
            return AvailabilityStats()

        if scan.has_real_zipcodes:
            zipcodes = list(scan.real_counts)
        else:
            zipcodes = list(self.synthetic_shares(city, scan.population))

        index = self.cache.get()
        assigned = sum(1 for zipcode in zipcodes if index.is_claimed(zipcode, excluding_admin_id))
        return AvailabilityStats(total=len(zipcodes), available=len(zipcodes) - assigned, assigned=assigned)

    @best_effort(int)
    def user_count(
        self,
        country: Optional[str] = None,
        state: Optional[str] = None,
        city: Optional[str] = None,
    ) -> int:
        return self.count_users(country, state, city)

    @best_effort(list)
    def suggest(
        self,
        level: SuggestionLevel,
        query: str,
        country: Optional[str] = None,
        city: Optional[str] = None,
    ) -> list[LocationOption]:
        """Autocomplete values at ``level`` containing ``query``."""
        query = (query or "").strip()
        if len(query) < MIN_SUGGESTION_QUERY:
            return []

        if level == "zipcode":
            rows = self.population.select_users("*", location_filter(country=country, city=city))
            counts: dict[str, int] = {}
            needle = query.casefold()
            for row in rows:
                zipcode = real_zipcode(row, self.config.zipcode_candidate_fields)
                if zipcode and needle in zipcode.casefold():
                    counts[zipcode] = counts.get(zipcode, 0) + 1
        else:
            scope = location_filter(country=country if level == "city" else None)
            scope = LocationFilter(conditions=scope.conditions + (FilterCondition(level, ILIKE, query),))
            counts = self.scan_values(level, scope)

        return _to_options(counts)[: self.config.suggestion_limit]

    def hierarchy(
        self,
        country: Optional[str] = None,
        state: Optional[str] = None,
        city: Optional[str] = None,
        excluding_admin_id: Optional[str] = None,
    ) -> LocationHierarchy:
        """Options for every level of a cascading selector in one call."""
        result = LocationHierarchy(countries=self.list_countries())
        if country:
            result.states = self.list_states(country)
            result.cities = self.list_cities(country, state)
        if country and city:
            result.zipcodes = self.list_zipcodes(country, city, excluding_admin_id)
        return result

    def zipcode_holder(self, zipcode: str) -> Optional[ZipcodeHolder]:
        return self.cache.get().holder_of(zipcode)
