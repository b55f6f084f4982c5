"""Principal-scoped access endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ...container import TerritoryServices, get_services
from ...errors import DataAccessError, PrincipalNotAllowedError
from ...models.domain import AdministratorPrincipal
from ...schemas.access import (
    AccessScopeResponse,
    CanAccessRequest,
    CanAccessResponse,
    FilterConditionModel,
    UserIdsResponse,
)
from ...schemas.admins import TerritoryModel
from ...services.access.gateway import NoAccess, Unrestricted

router = APIRouter(prefix="/access", tags=["access"])


def _load_principal(principal_id: str, services: TerritoryServices) -> AdministratorPrincipal:
    try:
        principal = services.gateway.load_principal(principal_id)
    except DataAccessError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Could not load principal: {exc}",
        ) from exc
    if principal is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Principal '{principal_id}' not found")
    return principal


def _forbidden(exc: PrincipalNotAllowedError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))


@router.get("/{principal_id}/scope", response_model=AccessScopeResponse, status_code=status.HTTP_200_OK)
def get_scope(principal_id: str, services: TerritoryServices = Depends(get_services)) -> AccessScopeResponse:
    principal = _load_principal(principal_id, services)
    try:
        scope = services.gateway.scope_for(principal)
    except PrincipalNotAllowedError as exc:
        raise _forbidden(exc) from exc

    if isinstance(scope, Unrestricted):
        kind, territory, triples = "unrestricted", None, []
    elif isinstance(scope, NoAccess):
        kind, territory, triples = "none", None, []
    else:
        kind, territory, triples = "restricted", scope.territory, scope.location_filter.as_filter_list()

    return AccessScopeResponse(
        principal_id=principal.id,
        role=principal.role.value,
        scope=kind,
        territory=TerritoryModel.from_territory(territory),
        filters=[FilterConditionModel(column=c, operator=o, operand=v) for c, o, v in triples],
        summary=services.gateway.location_summary(principal),
    )


@router.get("/{principal_id}/user-ids", response_model=UserIdsResponse, status_code=status.HTTP_200_OK)
def get_user_ids(principal_id: str, services: TerritoryServices = Depends(get_services)) -> UserIdsResponse:
    """User ids the principal may see; ``unrestricted`` means no id list applies."""
    principal = _load_principal(principal_id, services)
    try:
        user_ids = services.gateway.user_id_scope(principal)
    except PrincipalNotAllowedError as exc:
        raise _forbidden(exc) from exc
    return UserIdsResponse(
        principal_id=principal.id,
        unrestricted=user_ids is None,
        user_ids=user_ids or [],
    )


@router.post("/{principal_id}/can-access", response_model=CanAccessResponse, status_code=status.HTTP_200_OK)
def can_access(
    principal_id: str,
    payload: CanAccessRequest,
    services: TerritoryServices = Depends(get_services),
) -> CanAccessResponse:
    principal = _load_principal(principal_id, services)
    try:
        allowed = services.gateway.can_access(principal, payload.model_dump())
    except PrincipalNotAllowedError as exc:
        raise _forbidden(exc) from exc
    return CanAccessResponse(principal_id=principal.id, allowed=allowed)
