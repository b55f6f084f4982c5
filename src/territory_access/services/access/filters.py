"""Compile territories into predicates for queries and in-memory records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Literal, Mapping, Optional, TypeVar

from ...config import settings
from ...models.territory import RealZipcode, Territory, ZipcodeTerritory

ILIKE = "ilike"
EQ = "eq"

RecordT = TypeVar("RecordT", bound=Mapping[str, Any])


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass(frozen=True, slots=True)
class FilterCondition:
    column: str
    operator: Literal["ilike", "eq"]
    value: str

    @property
    def pattern(self) -> str:
        if self.operator == ILIKE:
            return f"%{_escape_like(self.value)}%"
        return self.value

    def apply(self, query):
        if self.operator == ILIKE:
            return query.ilike(self.column, self.pattern)
        return query.eq(self.column, self.value)

    def matches(self, record: Mapping[str, Any]) -> bool:
        field = record.get(self.column)
        if field is None:
            return False
        if self.operator == ILIKE:
            return self.value.casefold() in str(field).casefold()
        return str(field).strip() == self.value


@dataclass(frozen=True, slots=True)
class LocationFilter:
    """An AND of conditions; ``match_nothing`` short-circuits to an empty result."""

    conditions: tuple[FilterCondition, ...] = ()
    match_nothing: bool = False
    id_column: str = "id"

    @property
    def is_unrestricted(self) -> bool:
        return not self.conditions and not self.match_nothing

    def apply(self, query):
        """Add the conditions to a Supabase/PostgREST query builder."""
        if self.match_nothing:
            return query.in_(self.id_column, [])
        for condition in self.conditions:
            query = condition.apply(query)
        return query

    def matches(self, record: Mapping[str, Any]) -> bool:
        if self.match_nothing:
            return False
        return all(condition.matches(record) for condition in self.conditions)

    def select(self, records: Iterable[RecordT]) -> list[RecordT]:
        return [record for record in records if self.matches(record)]

    def as_filter_list(self) -> list[tuple[str, str, str]]:
        """Raw ``(column, operator, operand)`` triples for callers building their own queries."""
        if self.match_nothing:
            return [(self.id_column, "in", "()")]
        return [(condition.column, condition.operator, condition.pattern) for condition in self.conditions]


MATCH_NOTHING = LocationFilter(match_nothing=True)


def location_filter(
    country: Optional[str] = None,
    state: Optional[str] = None,
    city: Optional[str] = None,
) -> LocationFilter:
    """Substring filter over whichever of the three levels are given."""
    conditions = []
    if country:
        conditions.append(FilterCondition("country", ILIKE, country))
    if state:
        conditions.append(FilterCondition("state", ILIKE, state))
    if city:
        conditions.append(FilterCondition("city", ILIKE, city))
    return LocationFilter(conditions=tuple(conditions))


def compile_filter(territory: Territory, zipcode_column: Optional[str] = None) -> LocationFilter:
    """Turn a territory into the predicate every scoped read applies.

    Country, state (district) and city are case-insensitive substring matches.
    A zipcode is matched exactly unless it is synthetic: generated codes never
    appear on user records, so the city and country conditions carry the scope.
    A real zipcode is matched on the column it was read from when the territory
    records one, otherwise on ``zipcode_column``.
    """
    compiled = location_filter(territory.country, territory.state, territory.city)
    if isinstance(territory, ZipcodeTerritory) and isinstance(territory.zipcode_kind, RealZipcode):
        column = territory.zipcode_field or zipcode_column or settings.zipcode_column
        compiled = LocationFilter(conditions=compiled.conditions + (FilterCondition(column, EQ, territory.zipcode),))
    return compiled


def matches(record: Mapping[str, Any], territory: Territory) -> bool:
    return compile_filter(territory).matches(record)
