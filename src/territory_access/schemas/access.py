"""Access-control API schemas."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel

from .admins import TerritoryModel


class FilterConditionModel(BaseModel):
    column: str
    operator: str
    operand: str


class AccessScopeResponse(BaseModel):
    principal_id: str
    role: str
    scope: Literal["unrestricted", "restricted", "none"]
    territory: Optional[TerritoryModel] = None
    filters: List[FilterConditionModel]
    summary: str


class UserIdsResponse(BaseModel):
    principal_id: str
    unrestricted: bool
    user_ids: List[str]


class CanAccessRequest(BaseModel):
    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    zipcode: Optional[str] = None


class CanAccessResponse(BaseModel):
    principal_id: str
    allowed: bool
