"""In-process holder of the latest snapshot, backed by the tiered store."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from pydantic import ValidationError

from deskquery.store import TieredStore

from .models import Snapshot, utc_now
from .sources import SnapshotSource

logger = logging.getLogger(__name__)


@dataclass
class RefreshResult:
    """Outcome of a snapshot refresh."""

    success: bool
    item_count: int
    message: str
    error: str | None = None


class SnapshotCache:
    """Holds the live snapshot and keeps it in step with the tiered store.

    The store is the source of truth. The in-memory copy is trusted for
    ``reload_seconds`` and then re-read, so refreshes made by other
    processes become visible here.
    """

    def __init__(
        self,
        store: TieredStore,
        clock: Callable[[], datetime] = utc_now,
        reload_seconds: float = 60.0,
    ):
        self.store = store
        self.clock = clock
        self.reload_seconds = reload_seconds
        self._snapshot: Snapshot | None = None
        self._checked_at: datetime | None = None

    def _is_fresh(self, now: datetime) -> bool:
        if self._snapshot is None or self._checked_at is None:
            return False
        return (now - self._checked_at).total_seconds() < self.reload_seconds

    async def current(self) -> Snapshot | None:
        """Return the live snapshot, re-reading storage when the copy is old."""
        now = self.clock()
        if self._is_fresh(now):
            return self._snapshot

        self._checked_at = now
        data = await self.store.load()
        if data is None:
            if self._snapshot is None:
                logger.info("No snapshot found in storage")
            return self._snapshot

        try:
            snapshot = Snapshot.from_blob(data)
        except ValidationError as e:
            logger.error(f"Stored snapshot is malformed: {e}")
            return self._snapshot

        # Never move backwards to an older copy left in a lower tier
        if self._snapshot is not None and snapshot.last_updated < self._snapshot.last_updated:
            return self._snapshot

        if self._snapshot is None or snapshot.last_updated != self._snapshot.last_updated:
            logger.info(f"Loaded snapshot with {snapshot.item_count} items ({snapshot.last_updated.isoformat()})")
        self._snapshot = snapshot
        return snapshot

    async def replace(self, snapshot: Snapshot) -> bool:
        """Persist a prebuilt snapshot and make it live.

        Returns:
            False if no storage tier accepted the write; the live copy is
            left unchanged in that case
        """
        if not await self.store.save(snapshot.to_blob()):
            return False

        self._snapshot = snapshot
        self._checked_at = self.clock()
        return True

    async def refresh(self, source: SnapshotSource) -> RefreshResult:
        """Fetch the full dataset from ``source`` and store a new snapshot."""
        logger.info("Starting snapshot refresh")
        try:
            items = await source.fetch_items()
        except Exception as e:
            logger.error(f"Snapshot refresh failed while fetching: {e}", exc_info=True)
            return RefreshResult(
                success=False,
                item_count=0,
                message="Failed to fetch tickets",
                error=str(e),
            )

        snapshot = Snapshot.build(items, self.clock())
        if not await self.replace(snapshot):
            return RefreshResult(
                success=False,
                item_count=0,
                message="Failed to save snapshot",
                error="Write error",
            )

        return RefreshResult(
            success=True,
            item_count=snapshot.item_count,
            message=f"Successfully refreshed snapshot with {snapshot.item_count} items",
        )

    def clear(self) -> None:
        """Drop the in-memory copy so the next read goes to storage."""
        self._snapshot = None
        self._checked_at = None
