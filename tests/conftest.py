from __future__ import annotations

from typing import Any, Optional, Sequence

import pytest
from fastapi.testclient import TestClient

from territory_access.container import TerritoryServices, build_services, get_services
from territory_access.errors import DataAccessError
from territory_access.main import create_app
from territory_access.services.access.filters import LocationFilter


def _columns(row: dict[str, Any], columns: str) -> dict[str, Any]:
    if columns.strip() == "*":
        return dict(row)
    names = [name.strip() for name in columns.split(",")]
    return {name: row.get(name) for name in names}


class FakeUsers:
    """In-memory users table standing in for Supabase in both reader and store roles."""

    def __init__(self, rows: Optional[list[dict[str, Any]]] = None) -> None:
        self.rows: list[dict[str, Any]] = [dict(row) for row in rows or []]
        self.fail_reads = False
        self.fail_writes = False
        self.role_scans = 0

    def add(self, **row: Any) -> dict[str, Any]:
        row.setdefault("id", f"u{len(self.rows) + 1}")
        row.setdefault("full_name", f"User {row['id']}")
        row.setdefault("email", f"{row['id']}@example.com")
        row.setdefault("role", "user")
        self.rows.append(row)
        return row

    def add_population(self, count: int, **location: Any) -> None:
        for _ in range(count):
            self.add(**location)

    def _check_read(self, operation: str) -> None:
        if self.fail_reads:
            raise DataAccessError(operation, "connection refused")

    def _real(self) -> list[dict[str, Any]]:
        return [row for row in self.rows if row.get("full_name") is not None and row.get("email") is not None]

    # PopulationReader

    def select_users(
        self,
        columns: str = "*",
        location_filter: Optional[LocationFilter] = None,
        require_values: Sequence[str] = (),
    ) -> list[dict[str, Any]]:
        self._check_read("select users")
        rows = self._real()
        rows = [row for row in rows if all(row.get(column) not in (None, "") for column in require_values)]
        if location_filter is not None:
            rows = location_filter.select(rows)
        return [_columns(row, columns) for row in rows]

    def count_users(self, location_filter: Optional[LocationFilter] = None) -> int:
        self._check_read("count users")
        rows = self._real()
        if location_filter is not None:
            rows = location_filter.select(rows)
        return len(rows)

    def select_user_ids(self, location_filter: LocationFilter) -> list[str]:
        self._check_read("select user ids")
        return [str(row["id"]) for row in location_filter.select(self.rows)]

    # UserRecordStore

    def get_user(self, user_id: str, columns: str = "*") -> Optional[dict[str, Any]]:
        self._check_read("read user")
        for row in self.rows:
            if row["id"] == user_id:
                return _columns(row, columns)
        return None

    def update_user(self, user_id: str, values: dict[str, Any]) -> None:
        if self.fail_writes:
            raise DataAccessError(f"update user {user_id}", "write rejected")
        for row in self.rows:
            if row["id"] == user_id:
                row.update(values)
                return
        raise DataAccessError(f"update user {user_id}", "no matching row")

    def list_users_with_roles(
        self,
        roles: Sequence[str],
        columns: str = "*",
        require_values: Sequence[str] = (),
    ) -> list[dict[str, Any]]:
        self._check_read("list users by role")
        self.role_scans += 1
        rows = [row for row in self.rows if row.get("role") in roles]
        rows = [row for row in rows if all(row.get(column) is not None for column in require_values)]
        return [_columns(row, columns) for row in rows]


@pytest.fixture
def users() -> FakeUsers:
    return FakeUsers()


@pytest.fixture
def services(users: FakeUsers) -> TerritoryServices:
    return build_services(population=users, records=users, cache_ttl_seconds=30.0)


@pytest.fixture
def api_client(services: TerritoryServices):
    app = create_app()
    app.dependency_overrides[get_services] = lambda: services
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
