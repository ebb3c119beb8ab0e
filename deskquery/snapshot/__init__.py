"""Ticket/conversation snapshot module."""

from .cache import RefreshResult, SnapshotCache
from .models import AgeBuckets, Aggregates, ItemKind, Snapshot, SnapshotItem, utc_now
from .sources import FileSnapshotSource, SnapshotSource

__all__ = [
    "AgeBuckets",
    "Aggregates",
    "FileSnapshotSource",
    "ItemKind",
    "RefreshResult",
    "Snapshot",
    "SnapshotCache",
    "SnapshotItem",
    "SnapshotSource",
    "utc_now",
]
