"""Principal-scoped entry point for every location-restricted read.

A super admin is unrestricted. An admin sees only data matching the territory
stored on their row, and an admin without a territory sees nothing. Any other
role is rejected with :class:`PrincipalNotAllowedError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, TypeVar, Union

from ...data.users_repository import PopulationReader
from ...errors import DataAccessError, PrincipalNotAllowedError
from ...models.domain import AdministratorPrincipal, Role
from ...models.territory import Territory, describe_territory
from ...persistence.assignments import AssignmentStore
from . import filters
from .filters import MATCH_NOTHING, LocationFilter

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=Mapping[str, Any])


@dataclass(frozen=True, slots=True)
class Unrestricted:
    pass


@dataclass(frozen=True, slots=True)
class Restricted:
    territory: Territory
    location_filter: LocationFilter


@dataclass(frozen=True, slots=True)
class NoAccess:
    reason: str = "No Location Assigned"


AccessScope = Union[Unrestricted, Restricted, NoAccess]


class AccessGateway:
    def __init__(self, store: AssignmentStore, population: PopulationReader) -> None:
        self.store = store
        self.population = population

    def load_principal(self, principal_id: str) -> Optional[AdministratorPrincipal]:
        return self.store.get_principal(principal_id)

    def resolve_territory(self, principal: AdministratorPrincipal) -> Optional[Territory]:
        """``None`` for super admins (unrestricted) and for unassigned admins (no access)."""
        if principal.role is Role.ADMIN:
            return self.store.get(principal.id)
        return None

    def _require_admin(self, principal: AdministratorPrincipal) -> None:
        if principal.role not in (Role.ADMIN, Role.SUPER_ADMIN):
            raise PrincipalNotAllowedError(principal.id, principal.role.value)

    def scope_for(self, principal: AdministratorPrincipal) -> AccessScope:
        self._require_admin(principal)
        if principal.role is Role.SUPER_ADMIN:
            return Unrestricted()
        territory = self.resolve_territory(principal)
        if territory is None:
            return NoAccess()
        return Restricted(territory=territory, location_filter=filters.compile_filter(territory))

    def compile_filter(self, territory: Territory) -> LocationFilter:
        return filters.compile_filter(territory)

    def effective_filter(self, principal: AdministratorPrincipal) -> LocationFilter:
        scope = self.scope_for(principal)
        if isinstance(scope, Unrestricted):
            return LocationFilter()
        if isinstance(scope, NoAccess):
            return MATCH_NOTHING
        return scope.location_filter

    def can_access(self, principal: AdministratorPrincipal, location: Mapping[str, Any]) -> bool:
        self._require_admin(principal)
        if principal.role is Role.SUPER_ADMIN:
            return True
        return self.effective_filter(principal).matches(location)

    def filter_records(self, principal: AdministratorPrincipal, records: Iterable[RecordT]) -> list[RecordT]:
        """Scope an already-materialized collection."""
        return self.effective_filter(principal).select(records)

    def apply_scope(self, principal: AdministratorPrincipal, query):
        """Add the principal's conditions to a Supabase query builder."""
        return self.effective_filter(principal).apply(query)

    def user_id_scope(self, principal: AdministratorPrincipal) -> Optional[list[str]]:
        """Matching user ids, or ``None`` when the principal is unrestricted."""
        scope = self.scope_for(principal)
        if isinstance(scope, Unrestricted):
            return None
        if isinstance(scope, NoAccess):
            return []
        try:
            return self.population.select_user_ids(scope.location_filter)
        except DataAccessError as exc:
            logger.warning(f"Could not resolve user ids for {principal.id}: {exc}")
            return []

    def filtered_user_ids(self, principal: AdministratorPrincipal) -> list[str]:
        """Matching user ids; empty both when unrestricted and when nothing matches.

        Use :meth:`user_id_scope` or :meth:`scope_for` to tell the two apart.
        """
        return self.user_id_scope(principal) or []

    def managed_user_count(self, principal: AdministratorPrincipal) -> int:
        scope = self.scope_for(principal)
        if isinstance(scope, NoAccess):
            return 0
        filter_ = None if isinstance(scope, Unrestricted) else scope.location_filter
        try:
            return self.population.count_users(filter_)
        except DataAccessError as exc:
            logger.warning(f"Could not count users managed by {principal.id}: {exc}")
            return 0

    def location_summary(self, principal: AdministratorPrincipal) -> str:
        scope = self.scope_for(principal)
        if isinstance(scope, Unrestricted):
            return "Global Access"
        if isinstance(scope, NoAccess):
            return scope.reason
        return describe_territory(scope.territory)
