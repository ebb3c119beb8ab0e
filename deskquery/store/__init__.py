"""Tiered persistent storage module."""

from .tiered import TieredStore, create_tiered_store
from .tiers import EdgeConfigClient, FileSystemTier, KeyValueClient, RemoteKVTier, StorageTier

__all__ = [
    "EdgeConfigClient",
    "FileSystemTier",
    "KeyValueClient",
    "RemoteKVTier",
    "StorageTier",
    "TieredStore",
    "create_tiered_store",
]
