"""Read and write access to the ``users`` table.

Two narrow interfaces sit on top of the table: the population reader used by
the location catalog and the access gateway, and the record store holding each
administrator's role and territory blob. Both raise :class:`DataAccessError`
on any failure; callers decide how to degrade.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Optional, Protocol, Sequence

from ..config import settings
from ..db.supabase import get_supabase_client
from ..errors import DataAccessError

if TYPE_CHECKING:
    from supabase import Client

    from ..services.access.filters import LocationFilter

logger = logging.getLogger(__name__)

PAGE_SIZE = 1000


class PopulationReader(Protocol):
    """Rows of registered users carrying ``country``, ``state``, ``city`` and zipcode-like fields."""

    def select_users(
        self,
        columns: str = "*",
        location_filter: Optional["LocationFilter"] = None,
        require_values: Sequence[str] = (),
    ) -> list[dict[str, Any]]:
        ...

    def count_users(self, location_filter: Optional["LocationFilter"] = None) -> int:
        ...

    def select_user_ids(self, location_filter: "LocationFilter") -> list[str]:
        ...


class UserRecordStore(Protocol):
    """Key-value style access to single user rows."""

    def get_user(self, user_id: str, columns: str = "*") -> Optional[dict[str, Any]]:
        ...

    def update_user(self, user_id: str, values: dict[str, Any]) -> None:
        ...

    def list_users_with_roles(
        self,
        roles: Sequence[str],
        columns: str = "*",
        require_values: Sequence[str] = (),
    ) -> list[dict[str, Any]]:
        ...


class SupabaseUsersRepository:
    """Population reader and record store backed by a Supabase table."""

    def __init__(
        self,
        client_factory: Callable[[], Optional["Client"]] = get_supabase_client,
        table: Optional[str] = None,
        page_size: int = PAGE_SIZE,
        order_column: str = "id",
    ) -> None:
        self._client_factory = client_factory
        self.table = table or settings.users_table
        self.page_size = page_size
        self.order_column = order_column

    def _client(self) -> "Client":
        client = self._client_factory()
        if client is None:
            raise DataAccessError(f"access to table '{self.table}'", "Supabase is not configured")
        return client

    def _real_users(self, columns: str, **select_kwargs: Any):
        """Base query over users that have a name and an email."""
        return (
            self._client()
            .table(self.table)
            .select(columns, **select_kwargs)
            .not_.is_("full_name", "null")
            .not_.is_("email", "null")
        )

    def _fetch_all(self, build_query: Callable[[], Any], operation: str) -> list[dict[str, Any]]:
        """Page through ``build_query`` ordered by a stable key so no row is skipped or repeated."""
        rows: list[dict[str, Any]] = []
        offset = 0
        while True:
            try:
                response = build_query().order(self.order_column).range(offset, offset + self.page_size - 1).execute()
            except DataAccessError:
                raise
            except Exception as exc:
                raise DataAccessError(operation, exc) from exc
            batch = response.data or []
            rows.extend(batch)
            if len(batch) < self.page_size:
                return rows
            offset += self.page_size

    @staticmethod
    def _require(query, columns: Sequence[str]):
        for column in columns:
            query = query.not_.is_(column, "null").neq(column, "")
        return query

    def select_users(
        self,
        columns: str = "*",
        location_filter: Optional["LocationFilter"] = None,
        require_values: Sequence[str] = (),
    ) -> list[dict[str, Any]]:
        def build():
            query = self._require(self._real_users(columns), require_values)
            if location_filter is not None:
                query = location_filter.apply(query)
            return query

        rows = self._fetch_all(build, f"select {columns} from {self.table}")
        logger.debug(f"Fetched {len(rows)} user rows ({columns})")
        return rows

    def count_users(self, location_filter: Optional["LocationFilter"] = None) -> int:
        try:
            query = self._real_users("id", count="exact")
            if location_filter is not None:
                query = location_filter.apply(query)
            response = query.limit(1).execute()
        except DataAccessError:
            raise
        except Exception as exc:
            raise DataAccessError(f"count users in {self.table}", exc) from exc
        return response.count or 0

    def select_user_ids(self, location_filter: "LocationFilter") -> list[str]:
        def build():
            return location_filter.apply(self._client().table(self.table).select("id"))

        rows = self._fetch_all(build, f"select ids from {self.table}")
        return [str(row["id"]) for row in rows if row.get("id") is not None]

    def get_user(self, user_id: str, columns: str = "*") -> Optional[dict[str, Any]]:
        try:
            response = (
                self._client().table(self.table).select(columns).eq("id", user_id).limit(1).execute()
            )
        except DataAccessError:
            raise
        except Exception as exc:
            raise DataAccessError(f"read user {user_id}", exc) from exc
        rows = response.data or []
        return rows[0] if rows else None

    def update_user(self, user_id: str, values: dict[str, Any]) -> None:
        try:
            response = self._client().table(self.table).update(values).eq("id", user_id).execute()
        except DataAccessError:
            raise
        except Exception as exc:
            raise DataAccessError(f"update user {user_id}", exc) from exc
        if not response.data:
            raise DataAccessError(f"update user {user_id}", "no matching row")

    def list_users_with_roles(
        self,
        roles: Sequence[str],
        columns: str = "*",
        require_values: Sequence[str] = (),
    ) -> list[dict[str, Any]]:
        def build():
            query = self._client().table(self.table).select(columns).in_("role", list(roles))
            for column in require_values:
                query = query.not_.is_(column, "null")
            return query

        return self._fetch_all(build, f"list {','.join(roles)} users")
