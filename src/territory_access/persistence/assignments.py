"""Territory persistence: one territory blob per administrator row."""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..config import settings
from ..data.users_repository import UserRecordStore
from ..errors import DataAccessError
from ..models.domain import AdministratorPrincipal, Role, ZipcodeHolder
from ..models.territory import Territory, parse_territory_blob, territory_to_blob
from ..services.assignments.cache import ZipcodeAssignmentCache

logger = logging.getLogger(__name__)


def _principal_columns(territory_column: str) -> str:
    return f"id, full_name, email, role, {territory_column}, created_at, updated_at"


def principal_from_row(row: dict[str, Any], territory_column: Optional[str] = None) -> AdministratorPrincipal:
    column = territory_column or settings.territory_column
    role = Role.parse(row.get("role"))
    territory = parse_territory_blob(row.get(column)) if role is Role.ADMIN else None
    return AdministratorPrincipal(
        id=str(row["id"]),
        role=role,
        name=row.get("full_name"),
        email=row.get("email"),
        territory=territory,
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def load_zipcode_holders(
    records: UserRecordStore,
    territory_column: Optional[str] = None,
) -> dict[str, list[ZipcodeHolder]]:
    """Scan every ``admin`` row and index the zipcodes their territories hold.

    Super admins are unrestricted and never hold a zipcode. A zipcode held by
    more than one admin keeps all of its holders. Raises
    :class:`DataAccessError` when the scan fails.
    """
    column = territory_column or settings.territory_column
    rows = records.list_users_with_roles(
        [Role.ADMIN.value],
        columns=f"id, full_name, email, {column}",
        require_values=(column,),
    )

    holders: dict[str, list[ZipcodeHolder]] = {}
    for row in rows:
        territory = parse_territory_blob(row.get(column))
        if territory is None or not territory.zipcode:
            continue
        holder = ZipcodeHolder(
            admin_id=str(row["id"]),
            admin_name=row.get("full_name") or "Unknown Admin",
            admin_email=row.get("email") or "Unknown Email",
        )
        existing = holders.setdefault(territory.zipcode, [])
        if existing:
            logger.warning(
                f"Zipcode {territory.zipcode} is held by {holder.admin_id} and "
                f"{', '.join(other.admin_id for other in existing)}"
            )
        existing.append(holder)
    return holders


class AssignmentStore:
    """Reads and writes the territory blob stored on each principal row.

    Every successful write invalidates the zipcode assignment cache. Writes
    report failure as ``False`` and never raise; a failed write leaves the row
    untouched because role and territory travel in a single update. Only
    ``user`` rows can be promoted, and only ``admin`` rows can have their
    territory set or be demoted.
    """

    def __init__(
        self,
        records: UserRecordStore,
        cache: Optional[ZipcodeAssignmentCache] = None,
        territory_column: Optional[str] = None,
    ) -> None:
        self.records = records
        self.cache = cache
        self.territory_column = territory_column or settings.territory_column

    def fetch(self, admin_id: str) -> Optional[Territory]:
        """Like :meth:`get` but raises :class:`DataAccessError` instead of degrading."""
        row = self.records.get_user(admin_id, columns=f"id, {self.territory_column}")
        if row is None:
            return None
        return parse_territory_blob(row.get(self.territory_column))

    def get(self, admin_id: str) -> Optional[Territory]:
        try:
            return self.fetch(admin_id)
        except DataAccessError as exc:
            logger.warning(f"Could not read territory for {admin_id}: {exc}")
            return None

    def get_principal(self, user_id: str) -> Optional[AdministratorPrincipal]:
        row = self.records.get_user(user_id, columns=_principal_columns(self.territory_column))
        if row is None:
            return None
        return principal_from_row(row, self.territory_column)

    def list_admins(self) -> list[AdministratorPrincipal]:
        try:
            rows = self.records.list_users_with_roles(
                [Role.ADMIN.value, Role.SUPER_ADMIN.value],
                columns=_principal_columns(self.territory_column),
            )
        except DataAccessError as exc:
            logger.warning(f"Could not list admins: {exc}")
            return []

        admins = [principal_from_row(row, self.territory_column) for row in rows]
        admins.sort(key=lambda admin: admin.created_at or "", reverse=True)
        admins.sort(key=lambda admin: admin.role is not Role.SUPER_ADMIN)
        return admins

    def _current_role(self, user_id: str) -> Optional[Role]:
        row = self.records.get_user(user_id, columns="id, role")
        return Role.parse(row.get("role")) if row is not None else None

    def _write(self, user_id: str, required: Role, values: dict[str, Any], operation: str) -> bool:
        """Update the row only while it still has the ``required`` role."""
        try:
            role = self._current_role(user_id)
            if role is not required:
                found = role.value if role else "no row"
                logger.warning(f"Refused to {operation} for {user_id}: expected role {required.value}, found {found}")
                return False
            self.records.update_user(user_id, values)
        except DataAccessError as exc:
            logger.error(f"Failed to {operation} for {user_id}: {exc}")
            return False

        if self.cache is not None:
            self.cache.invalidate()
        logger.info(f"{operation.capitalize()} succeeded for {user_id}")
        return True

    def set(self, admin_id: str, territory: Territory) -> bool:
        return self._write(
            admin_id,
            Role.ADMIN,
            {self.territory_column: territory_to_blob(territory)},
            "set territory",
        )

    def promote(self, user_id: str, territory: Territory) -> bool:
        return self._write(
            user_id,
            Role.USER,
            {"role": Role.ADMIN.value, self.territory_column: territory_to_blob(territory)},
            "promote to admin",
        )

    def demote(self, admin_id: str) -> bool:
        return self._write(
            admin_id,
            Role.ADMIN,
            {"role": Role.USER.value, self.territory_column: None},
            "demote to user",
        )
