"""Acceptance rules for a candidate admin territory."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from ...errors import DataAccessError, TerritoryValidationError, ZipcodeConflictError
from ...models.domain import ZipcodeHolder
from ...models.territory import (
    AssignmentLevel,
    LocationSelection,
    RealZipcode,
    Territory,
    ZipcodeTerritory,
    build_territory,
    territory_to_selection,
)
from ..catalog.service import LocationCatalog
from .cache import ZipcodeAssignmentCache

logger = logging.getLogger(__name__)

NO_USERS_MESSAGES = {
    AssignmentLevel.COUNTRY: "No users found in the selected country. Please choose a different location.",
    AssignmentLevel.STATE: "No users found in the selected state. Please choose a different location.",
    AssignmentLevel.CITY: "No users found in the selected city. Please choose a different location.",
    AssignmentLevel.ZIPCODE: "No users found in the selected location. Please choose a different location.",
}
VALIDATION_UNAVAILABLE = "Error validating location assignment. Please try again."


@dataclass(frozen=True, slots=True)
class ValidationResult:
    is_valid: bool
    error: Optional[str] = None
    assigned_to: Optional[ZipcodeHolder] = None
    territory: Optional[Territory] = None

    @property
    def is_conflict(self) -> bool:
        return self.assigned_to is not None

    @classmethod
    def accepted(cls, territory: Territory) -> "ValidationResult":
        return cls(is_valid=True, territory=territory)

    @classmethod
    def rejected(cls, error: str, assigned_to: Optional[ZipcodeHolder] = None) -> "ValidationResult":
        return cls(is_valid=False, error=error, assigned_to=assigned_to)


class AssignmentValidator:
    """Checks hierarchy completeness, population and zipcode exclusivity, in that order.

    The zipcode check reads a freshly rebuilt assignment index, but nothing
    holds it between validation and the store write that follows.
    """

    def __init__(self, catalog: LocationCatalog, cache: ZipcodeAssignmentCache) -> None:
        self.catalog = catalog
        self.cache = cache

    def validate(
        self,
        selection: LocationSelection | Territory,
        excluding_admin_id: Optional[str] = None,
    ) -> ValidationResult:
        if not isinstance(selection, LocationSelection):
            selection = territory_to_selection(selection)

        try:
            territory = build_territory(selection)
        except TerritoryValidationError as exc:
            return ValidationResult.rejected(exc.reason)

        try:
            population = self.catalog.count_users(territory.country, territory.state, territory.city)
        except DataAccessError as exc:
            logger.warning(f"Population check failed for {selection}: {exc}")
            return ValidationResult.rejected(VALIDATION_UNAVAILABLE)
        if population == 0:
            return ValidationResult.rejected(NO_USERS_MESSAGES[territory.assignment_level])

        if isinstance(territory, ZipcodeTerritory) and isinstance(territory.zipcode_kind, RealZipcode):
            try:
                column = self.catalog.zipcode_source(territory.country, territory.city, territory.zipcode)
            except DataAccessError as exc:
                logger.warning(f"Zipcode column lookup failed for {territory.zipcode}: {exc}")
                return ValidationResult.rejected(VALIDATION_UNAVAILABLE)
            if column:
                territory = replace(territory, zipcode_field=column)

        if territory.zipcode:
            try:
                index = self.cache.refresh()
            except DataAccessError as exc:
                logger.warning(f"Zipcode availability check failed for {territory.zipcode}: {exc}")
                return ValidationResult.rejected(VALIDATION_UNAVAILABLE)
            if index.is_claimed(territory.zipcode, excluding_admin_id):
                holder = index.holder_of(territory.zipcode, excluding_admin_id)
                logger.info(f"Zipcode {territory.zipcode} already held by {holder.admin_id if holder else 'unknown'}")
                return ValidationResult.rejected(
                    f"Zipcode {territory.zipcode} is already assigned to another admin.",
                    assigned_to=holder,
                )

        return ValidationResult.accepted(territory)

    def ensure_valid(
        self,
        selection: LocationSelection | Territory,
        excluding_admin_id: Optional[str] = None,
    ) -> Territory:
        """Return the accepted territory or raise the matching error."""
        result = self.validate(selection, excluding_admin_id)
        if result.is_valid:
            return result.territory
        if result.is_conflict:
            raise ZipcodeConflictError(selection.zipcode or "", result.assigned_to)
        if result.error == VALIDATION_UNAVAILABLE:
            raise DataAccessError("validate territory", result.error)
        raise TerritoryValidationError(result.error or "Location validation failed")
