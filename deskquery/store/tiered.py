"""Ordered fallback chain over storage tiers."""

import logging
from typing import Any, TypeVar

from deskquery.config import Settings
from deskquery.store.tiers import EdgeConfigClient, FileSystemTier, RemoteKVTier, StorageTier

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TieredStore:
    """Durable key/value persistence that falls through an ordered list of tiers.

    Neither ``load`` nor ``save`` raises: a failing tier is logged and the
    next one is tried.
    """

    def __init__(self, tiers: list[StorageTier]):
        if not tiers:
            raise ValueError("TieredStore requires at least one tier")
        self.tiers = list(tiers)

    async def load(self, default: T | None = None) -> Any | T | None:
        """Load from the first tier holding a usable value.

        Args:
            default: Returned when every tier is empty or failing

        Returns:
            Stored value or ``default``
        """
        for tier in self.tiers:
            try:
                data = await tier.load()
            except Exception as e:
                logger.warning(f"Load from {tier.name} tier failed: {e}")
                continue

            if data is not None:
                logger.debug(f"Loaded snapshot blob from {tier.name} tier")
                return data
            logger.debug(f"No data in {tier.name} tier")

        return default

    async def save(self, data: Any) -> bool:
        """Save to the first tier that accepts the write.

        Returns:
            True if some tier stored the data, False if all failed
        """
        for tier in self.tiers:
            try:
                await tier.save(data)
            except Exception as e:
                logger.warning(f"Save to {tier.name} tier failed: {e}")
                continue

            logger.info(f"Saved snapshot blob to {tier.name} tier")
            return True

        logger.error(f"All storage tiers failed to save ({self.describe()})")
        return False

    async def close(self) -> None:
        for tier in self.tiers:
            try:
                await tier.close()
            except Exception as e:
                logger.warning(f"Closing {tier.name} tier failed: {e}")

    def describe(self) -> str:
        """Human-readable tier chain for logs and health checks."""
        return " -> ".join(tier.name for tier in self.tiers)


def create_tiered_store(settings: Settings) -> TieredStore:
    """Build the store chain for the current environment.

    The remote tier is only used inside a deployment with Edge Config
    credentials; local development always lands on the filesystem tier.
    """
    tiers: list[StorageTier] = []

    if settings.is_deployed and settings.remote_store_configured:
        client = EdgeConfigClient(
            config_id=settings.edge_config_id,
            read_token=settings.edge_config_token,
            api_token=settings.vercel_token,
        )
        tiers.append(RemoteKVTier(client, settings.store_key))
    elif settings.is_deployed:
        logger.warning("Running in a deployment without Edge Config credentials")

    tiers.append(FileSystemTier(settings.snapshot_file))

    store = TieredStore(tiers)
    logger.info(f"Storage tiers: {store.describe()}")
    return store
