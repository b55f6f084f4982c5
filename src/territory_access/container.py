"""Wiring of the territory services around one population reader and record store."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from .config import Settings, settings as default_settings
from .data.users_repository import PopulationReader, SupabaseUsersRepository, UserRecordStore
from .persistence.assignments import AssignmentStore, load_zipcode_holders
from .services.access.gateway import AccessGateway
from .services.assignments.cache import ZipcodeAssignmentCache
from .services.assignments.service import AssignmentService
from .services.assignments.validator import AssignmentValidator
from .services.catalog.service import LocationCatalog


@dataclass(slots=True)
class TerritoryServices:
    cache: ZipcodeAssignmentCache
    store: AssignmentStore
    catalog: LocationCatalog
    validator: AssignmentValidator
    assignments: AssignmentService
    gateway: AccessGateway


def build_services(
    population: PopulationReader,
    records: UserRecordStore,
    config: Settings = default_settings,
    cache_ttl_seconds: Optional[float] = None,
) -> TerritoryServices:
    """Build the services; the cache is owned here, not shared across containers."""
    cache = ZipcodeAssignmentCache(
        lambda: load_zipcode_holders(records, config.territory_column),
        ttl_seconds=config.zipcode_cache_ttl_seconds if cache_ttl_seconds is None else cache_ttl_seconds,
    )
    store = AssignmentStore(records, cache=cache, territory_column=config.territory_column)
    catalog = LocationCatalog(population, cache, config)
    validator = AssignmentValidator(catalog, cache)
    return TerritoryServices(
        cache=cache,
        store=store,
        catalog=catalog,
        validator=validator,
        assignments=AssignmentService(validator, store),
        gateway=AccessGateway(store, population),
    )


@lru_cache(maxsize=1)
def get_services() -> TerritoryServices:
    """Process-wide services backed by the configured Supabase project."""
    repository = SupabaseUsersRepository()
    return build_services(population=repository, records=repository)
