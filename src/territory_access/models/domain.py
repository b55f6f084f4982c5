"""Domain models for principals, catalog entries and zipcode assignments."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .territory import Territory


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Role":
        try:
            return cls(value)
        except ValueError:
            return cls.USER


@dataclass(slots=True)
class AdministratorPrincipal:
    """A row of the users table seen through its role and territory."""

    id: str
    role: Role
    name: Optional[str] = None
    email: Optional[str] = None
    territory: Optional[Territory] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(frozen=True, slots=True)
class LocationOption:
    """One distinct value observed at a hierarchy level, with its user count."""

    value: str
    label: str
    count: int

    @classmethod
    def of(cls, value: str, count: int) -> "LocationOption":
        return cls(value=value, label=f"{value} ({count} users)", count=count)


@dataclass(frozen=True, slots=True)
class AvailabilityStats:
    total: int = 0
    available: int = 0
    assigned: int = 0


@dataclass(frozen=True, slots=True)
class ZipcodeHolder:
    admin_id: str
    admin_name: str
    admin_email: str


@dataclass(frozen=True, slots=True)
class ZipcodeAssignmentIndex:
    """Point-in-time copy of the zipcodes held by active admins.

    A zipcode normally has one holder. Concurrent assignments can leave it with
    several, and every one of them keeps it claimed.
    """

    zipcodes: frozenset[str] = frozenset()
    holders: dict[str, tuple[ZipcodeHolder, ...]] = field(default_factory=dict)
    built_at: float = 0.0

    def holders_of(self, zipcode: str) -> tuple[ZipcodeHolder, ...]:
        return self.holders.get(zipcode, ())

    def holder_of(self, zipcode: str, excluding_admin_id: Optional[str] = None) -> Optional[ZipcodeHolder]:
        """First holder of ``zipcode`` other than ``excluding_admin_id``."""
        for holder in self.holders_of(zipcode):
            if holder.admin_id != excluding_admin_id:
                return holder
        return None

    def is_claimed(self, zipcode: str, excluding_admin_id: Optional[str] = None) -> bool:
        """True when any admin other than ``excluding_admin_id`` holds ``zipcode``."""
        if zipcode not in self.zipcodes:
            return False
        return self.holder_of(zipcode, excluding_admin_id) is not None
