"""Validated territory mutations: promote, reassign and demote."""

from __future__ import annotations

import logging
from typing import Optional

from ...errors import PrincipalNotAllowedError, PrincipalNotFoundError
from ...models.domain import AdministratorPrincipal, Role
from ...models.territory import LocationSelection, Territory
from ...persistence.assignments import AssignmentStore
from .validator import AssignmentValidator, ValidationResult

logger = logging.getLogger(__name__)


class AssignmentService:
    """Runs the role check and the validator before every store write.

    Only plain users can be promoted, and only admins can be reassigned or
    demoted; anything else raises :class:`PrincipalNotFoundError` or
    :class:`PrincipalNotAllowedError`. Validation raises
    :class:`TerritoryValidationError` or :class:`ZipcodeConflictError`. In
    both cases the store is left untouched. A failed write returns ``None``
    from :meth:`promote` and :meth:`reassign`. Two sessions may still both
    pass validation for the same zipcode before either writes.
    """

    def __init__(self, validator: AssignmentValidator, store: AssignmentStore) -> None:
        self.validator = validator
        self.store = store

    def _require_role(self, user_id: str, role: Role, action: str) -> AdministratorPrincipal:
        principal = self.store.get_principal(user_id)
        if principal is None:
            raise PrincipalNotFoundError(user_id)
        if principal.role is not role:
            logger.warning(f"Refused to {action} {user_id}: role is {principal.role.value}")
            raise PrincipalNotAllowedError(user_id, principal.role.value, action)
        return principal

    def validate(
        self,
        selection: LocationSelection | Territory,
        excluding_admin_id: Optional[str] = None,
    ) -> ValidationResult:
        return self.validator.validate(selection, excluding_admin_id)

    def promote(self, user_id: str, selection: LocationSelection | Territory) -> Optional[Territory]:
        self._require_role(user_id, Role.USER, "be promoted")
        territory = self.validator.ensure_valid(selection)
        logger.info(f"Promoting {user_id} with {territory.assignment_level.value}-level territory")
        return territory if self.store.promote(user_id, territory) else None

    def reassign(self, admin_id: str, selection: LocationSelection | Territory) -> Optional[Territory]:
        self._require_role(admin_id, Role.ADMIN, "be assigned a territory")
        territory = self.validator.ensure_valid(selection, excluding_admin_id=admin_id)
        logger.info(f"Reassigning {admin_id} to {territory.assignment_level.value}-level territory")
        return territory if self.store.set(admin_id, territory) else None

    def demote(self, admin_id: str) -> bool:
        self._require_role(admin_id, Role.ADMIN, "be demoted")
        return self.store.demote(admin_id)
