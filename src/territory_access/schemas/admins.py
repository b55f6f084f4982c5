"""Admin assignment API schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import AdministratorPrincipal, ZipcodeHolder
from ..models.territory import LocationSelection, Territory, territory_to_blob


class TerritoryPayload(BaseModel):
    """Territory as submitted by a caller; ``district`` is accepted for ``state``."""

    country: Optional[str] = None
    state: Optional[str] = None
    district: Optional[str] = None
    city: Optional[str] = None
    zipcode: Optional[str] = None
    streets: List[str] = Field(default_factory=list)

    def to_selection(self) -> LocationSelection:
        return LocationSelection.from_mapping(self.model_dump())


class TerritoryModel(BaseModel):
    country: str
    state: Optional[str] = None
    city: Optional[str] = None
    zipcode: Optional[str] = None
    streets: List[str] = Field(default_factory=list)
    assignmentLevel: str
    zipcodeField: Optional[str] = None

    @classmethod
    def from_territory(cls, territory: Optional[Territory]) -> Optional["TerritoryModel"]:
        if territory is None:
            return None
        return cls(**territory_to_blob(territory))


class ValidateTerritoryRequest(TerritoryPayload):
    exclude_admin_id: Optional[str] = None


class AssignedAdminModel(BaseModel):
    id: str
    name: str
    email: str

    @classmethod
    def from_holder(cls, holder: Optional[ZipcodeHolder]) -> Optional["AssignedAdminModel"]:
        if holder is None:
            return None
        return cls(id=holder.admin_id, name=holder.admin_name, email=holder.admin_email)


class ValidationResponse(BaseModel):
    is_valid: bool
    error: Optional[str] = None
    assigned_to: Optional[AssignedAdminModel] = None
    assignment_level: Optional[str] = None


class AdminSummaryModel(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: str
    territory: Optional[TerritoryModel] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_principal(cls, principal: AdministratorPrincipal) -> "AdminSummaryModel":
        return cls(
            id=principal.id,
            name=principal.name,
            email=principal.email,
            role=principal.role.value,
            territory=TerritoryModel.from_territory(principal.territory),
            created_at=principal.created_at,
            updated_at=principal.updated_at,
        )


class MutationResponse(BaseModel):
    success: bool
    user_id: str
    role: str
    territory: Optional[TerritoryModel] = None
