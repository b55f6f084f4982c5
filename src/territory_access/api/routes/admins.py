"""API routes for admin territory assignment."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from ...container import TerritoryServices, get_services
from ...errors import (
    DataAccessError,
    PrincipalNotAllowedError,
    PrincipalNotFoundError,
    TerritoryValidationError,
    ZipcodeConflictError,
)
from ...models.domain import Role
from ...models.territory import Territory
from ...schemas.admins import (
    AdminSummaryModel,
    AssignedAdminModel,
    MutationResponse,
    TerritoryModel,
    TerritoryPayload,
    ValidateTerritoryRequest,
    ValidationResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admins", tags=["admins"])


def _rejection(exc: TerritoryValidationError | ZipcodeConflictError) -> HTTPException:
    if isinstance(exc, ZipcodeConflictError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=ValidationResponse(
                is_valid=False,
                error=str(exc),
                assigned_to=AssignedAdminModel.from_holder(exc.holder),
            ).model_dump(),
        )
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=ValidationResponse(is_valid=False, error=exc.reason).model_dump(),
    )


def _unavailable(exc: DataAccessError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"Location data is unavailable: {exc}",
    )


def _refused(exc: PrincipalNotFoundError | PrincipalNotAllowedError) -> HTTPException:
    if isinstance(exc, PrincipalNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))


@router.get("", response_model=List[AdminSummaryModel], status_code=status.HTTP_200_OK)
def list_admins(services: TerritoryServices = Depends(get_services)) -> List[AdminSummaryModel]:
    return [AdminSummaryModel.from_principal(admin) for admin in services.store.list_admins()]


@router.post("/validate", response_model=ValidationResponse, status_code=status.HTTP_200_OK)
def validate_territory(
    payload: ValidateTerritoryRequest,
    services: TerritoryServices = Depends(get_services),
) -> ValidationResponse:
    """Dry-run the checks a promotion or reassignment would run."""
    result = services.assignments.validate(payload.to_selection(), payload.exclude_admin_id)
    return ValidationResponse(
        is_valid=result.is_valid,
        error=result.error,
        assigned_to=AssignedAdminModel.from_holder(result.assigned_to),
        assignment_level=result.territory.assignment_level.value if result.territory else None,
    )


def _mutate(operation: str, user_id: str, action: Callable[[], Optional[Territory]]) -> Territory:
    try:
        territory = action()
    except (PrincipalNotFoundError, PrincipalNotAllowedError) as exc:
        logger.info(f"Refused to {operation} {user_id}: {exc}")
        raise _refused(exc) from exc
    except (TerritoryValidationError, ZipcodeConflictError) as exc:
        logger.info(f"Refused to {operation} {user_id}: {exc}")
        raise _rejection(exc) from exc
    except DataAccessError as exc:
        raise _unavailable(exc) from exc

    if territory is None:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to {operation} {user_id}. Please try again.",
        )
    return territory


@router.post("/{user_id}/promote", response_model=MutationResponse, status_code=status.HTTP_200_OK)
def promote_user(
    user_id: str,
    payload: TerritoryPayload,
    services: TerritoryServices = Depends(get_services),
) -> MutationResponse:
    territory = _mutate("promote", user_id, lambda: services.assignments.promote(user_id, payload.to_selection()))
    return MutationResponse(
        success=True,
        user_id=user_id,
        role=Role.ADMIN.value,
        territory=TerritoryModel.from_territory(territory),
    )


@router.put("/{admin_id}/territory", response_model=MutationResponse, status_code=status.HTTP_200_OK)
def reassign_territory(
    admin_id: str,
    payload: TerritoryPayload,
    services: TerritoryServices = Depends(get_services),
) -> MutationResponse:
    """Replace an admin's territory; the admin's own zipcode stays available to them."""
    territory = _mutate(
        "update territory for",
        admin_id,
        lambda: services.assignments.reassign(admin_id, payload.to_selection()),
    )
    return MutationResponse(
        success=True,
        user_id=admin_id,
        role=Role.ADMIN.value,
        territory=TerritoryModel.from_territory(territory),
    )


@router.post("/{admin_id}/demote", response_model=MutationResponse, status_code=status.HTTP_200_OK)
def demote_admin(
    admin_id: str,
    services: TerritoryServices = Depends(get_services),
) -> MutationResponse:
    try:
        demoted = services.assignments.demote(admin_id)
    except (PrincipalNotFoundError, PrincipalNotAllowedError) as exc:
        logger.info(f"Refused to demote {admin_id}: {exc}")
        raise _refused(exc) from exc
    except DataAccessError as exc:
        raise _unavailable(exc) from exc

    if not demoted:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to demote {admin_id}. Please try again.",
        )
    return MutationResponse(success=True, user_id=admin_id, role=Role.USER.value, territory=None)
