"""Location catalog API schemas."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel

from ..models.domain import AvailabilityStats, LocationOption


class LocationOptionModel(BaseModel):
    value: str
    label: str
    count: int

    @classmethod
    def from_option(cls, option: LocationOption) -> "LocationOptionModel":
        return cls(value=option.value, label=option.label, count=option.count)


class AvailabilityStatsModel(BaseModel):
    total: int
    available: int
    assigned: int

    @classmethod
    def from_stats(cls, stats: AvailabilityStats) -> "AvailabilityStatsModel":
        return cls(total=stats.total, available=stats.available, assigned=stats.assigned)


class LocationHierarchyResponse(BaseModel):
    countries: List[LocationOptionModel]
    states: List[LocationOptionModel]
    cities: List[LocationOptionModel]
    zipcodes: List[LocationOptionModel]


class UserCountResponse(BaseModel):
    count: int
