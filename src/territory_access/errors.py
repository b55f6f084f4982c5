"""Exceptions raised by the territory services."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models.domain import ZipcodeHolder


class TerritoryError(Exception):
    """Base class for territory assignment and access-control errors."""


class DataAccessError(TerritoryError):
    """A read or write against the users table failed."""

    def __init__(self, operation: str, cause: Exception | str | None = None) -> None:
        self.operation = operation
        self.cause = cause
        message = f"{operation} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class TerritoryValidationError(TerritoryError):
    """A candidate territory breaks the hierarchy or covers no users."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class ZipcodeConflictError(TerritoryError):
    """A zipcode is already held by another administrator."""

    def __init__(self, zipcode: str, holder: "ZipcodeHolder | None" = None) -> None:
        self.zipcode = zipcode
        self.holder = holder
        super().__init__(f"Zipcode {zipcode} is already assigned to another admin.")


class PrincipalNotAllowedError(TerritoryError):
    """The principal's role does not permit the requested operation."""

    def __init__(self, principal_id: str, role: str, action: str | None = None) -> None:
        self.principal_id = principal_id
        self.role = role
        self.action = action
        if action:
            message = f"Principal '{principal_id}' with role '{role}' cannot {action}"
        else:
            message = f"Principal '{principal_id}' with role '{role}' has no administrative access"
        super().__init__(message)


class PrincipalNotFoundError(TerritoryError):
    """No users row exists for the principal."""

    def __init__(self, principal_id: str) -> None:
        self.principal_id = principal_id
        super().__init__(f"Principal '{principal_id}' not found")
