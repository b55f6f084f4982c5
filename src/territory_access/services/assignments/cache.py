"""Time-boxed index of the zipcodes currently held by admins."""

from __future__ import annotations

import logging
import time
from typing import Callable, Mapping, Optional, Sequence

from ...config import settings
from ...errors import DataAccessError
from ...models.domain import ZipcodeAssignmentIndex, ZipcodeHolder

logger = logging.getLogger(__name__)

HoldersLoader = Callable[[], Mapping[str, Sequence[ZipcodeHolder]]]


class ZipcodeAssignmentCache:
    """Holds a rebuildable copy of ``zipcode -> holders`` for all active admins.

    The cache owns no canonical state. ``get`` rebuilds from ``loader`` once the
    TTL has elapsed or when forced; ``invalidate`` makes the next ``get``
    rebuild regardless of age. Rebuilds are pure recomputations, so concurrent
    callers racing to rebuild end with equivalent indexes.
    """

    def __init__(
        self,
        loader: HoldersLoader,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self.ttl_seconds = settings.zipcode_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._index: Optional[ZipcodeAssignmentIndex] = None
        self._built_at = float("-inf")

    @property
    def built_at(self) -> float:
        return self._built_at

    def is_fresh(self) -> bool:
        return self._index is not None and (self._clock() - self._built_at) < self.ttl_seconds

    def refresh(self) -> ZipcodeAssignmentIndex:
        """Rebuild now; raises :class:`DataAccessError` and keeps the old index on failure."""
        now = self._clock()
        holders = {zipcode: tuple(found) for zipcode, found in self._loader().items() if found}
        index = ZipcodeAssignmentIndex(zipcodes=frozenset(holders), holders=holders, built_at=now)
        self._index = index
        self._built_at = now
        logger.debug(f"Rebuilt zipcode assignment index with {len(holders)} zipcodes")
        return index

    def get(self, force_refresh: bool = False) -> ZipcodeAssignmentIndex:
        if not force_refresh and self.is_fresh():
            return self._index
        try:
            return self.refresh()
        except DataAccessError as exc:
            # Claimed zipcodes must stay hidden while the store is unreachable.
            logger.warning(f"Zipcode assignment rebuild failed, serving previous index: {exc}")
            return self._index if self._index is not None else ZipcodeAssignmentIndex()

    def invalidate(self) -> None:
        self._built_at = float("-inf")
        logger.debug("Zipcode assignment cache invalidated")
