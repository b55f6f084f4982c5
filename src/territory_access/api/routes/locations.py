"""Location catalog endpoints."""

from __future__ import annotations

from typing import List, Literal

from fastapi import APIRouter, Depends, Query, status

from ...container import TerritoryServices, get_services
from ...schemas.locations import (
    AvailabilityStatsModel,
    LocationHierarchyResponse,
    LocationOptionModel,
    UserCountResponse,
)

router = APIRouter(prefix="/locations", tags=["locations"])


def _options(options) -> List[LocationOptionModel]:
    return [LocationOptionModel.from_option(option) for option in options]


@router.get("/countries", response_model=List[LocationOptionModel], status_code=status.HTTP_200_OK)
def list_countries(services: TerritoryServices = Depends(get_services)) -> List[LocationOptionModel]:
    return _options(services.catalog.list_countries())


@router.get("/states", response_model=List[LocationOptionModel], status_code=status.HTTP_200_OK)
def list_states(
    country: str = Query(..., min_length=1),
    services: TerritoryServices = Depends(get_services),
) -> List[LocationOptionModel]:
    return _options(services.catalog.list_states(country))


@router.get("/cities", response_model=List[LocationOptionModel], status_code=status.HTTP_200_OK)
def list_cities(
    country: str = Query(..., min_length=1),
    state: str | None = Query(default=None, description="Optional state/district filter"),
    services: TerritoryServices = Depends(get_services),
) -> List[LocationOptionModel]:
    return _options(services.catalog.list_cities(country, state))


@router.get("/zipcodes", response_model=List[LocationOptionModel], status_code=status.HTTP_200_OK)
def list_zipcodes(
    country: str = Query(..., min_length=1),
    city: str = Query(..., min_length=1),
    exclude_admin_id: str | None = Query(default=None, description="Admin whose own zipcode stays selectable"),
    services: TerritoryServices = Depends(get_services),
) -> List[LocationOptionModel]:
    return _options(services.catalog.list_zipcodes(country, city, exclude_admin_id))


@router.get("/zipcodes/availability", response_model=AvailabilityStatsModel, status_code=status.HTTP_200_OK)
def zipcode_availability(
    country: str = Query(..., min_length=1),
    city: str = Query(..., min_length=1),
    exclude_admin_id: str | None = Query(default=None),
    services: TerritoryServices = Depends(get_services),
) -> AvailabilityStatsModel:
    return AvailabilityStatsModel.from_stats(services.catalog.availability_stats(country, city, exclude_admin_id))


@router.get("/suggestions", response_model=List[LocationOptionModel], status_code=status.HTTP_200_OK)
def suggest_locations(
    level: Literal["country", "city", "zipcode"] = Query(...),
    q: str = Query(..., description="Partial value, at least two characters"),
    country: str | None = Query(default=None),
    city: str | None = Query(default=None),
    services: TerritoryServices = Depends(get_services),
) -> List[LocationOptionModel]:
    return _options(services.catalog.suggest(level, q, country, city))


@router.get("/hierarchy", response_model=LocationHierarchyResponse, status_code=status.HTTP_200_OK)
def location_hierarchy(
    country: str | None = Query(default=None),
    state: str | None = Query(default=None),
    city: str | None = Query(default=None),
    exclude_admin_id: str | None = Query(default=None),
    services: TerritoryServices = Depends(get_services),
) -> LocationHierarchyResponse:
    hierarchy = services.catalog.hierarchy(country, state, city, exclude_admin_id)
    return LocationHierarchyResponse(
        countries=_options(hierarchy.countries),
        states=_options(hierarchy.states),
        cities=_options(hierarchy.cities),
        zipcodes=_options(hierarchy.zipcodes),
    )


@router.get("/user-count", response_model=UserCountResponse, status_code=status.HTTP_200_OK)
def user_count(
    country: str | None = Query(default=None),
    state: str | None = Query(default=None),
    city: str | None = Query(default=None),
    services: TerritoryServices = Depends(get_services),
) -> UserCountResponse:
    return UserCountResponse(count=services.catalog.user_count(country, state, city))
