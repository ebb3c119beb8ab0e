"""Storage tiers for the snapshot blob."""

import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import httpx

from deskquery.errors import StoreError

logger = logging.getLogger(__name__)

EDGE_CONFIG_READ_BASE = "https://edge-config.vercel.com"
VERCEL_API_BASE = "https://api.vercel.com/v1/edge-config"


class StorageTier(ABC):
    """One candidate backend in a tiered store."""

    name: str = "tier"

    @abstractmethod
    async def load(self) -> Any | None:
        """Load the stored value.

        Returns:
            The decoded value, or None when nothing is stored

        Raises:
            StoreError: If the tier cannot be read
        """
        pass

    @abstractmethod
    async def save(self, data: Any) -> None:
        """Persist a value, replacing whatever was stored.

        Raises:
            StoreError: If the tier cannot be written
        """
        pass

    async def close(self) -> None:
        """Release any held connections."""
        pass


class KeyValueClient(ABC):
    """Whole-blob key-value service."""

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """Fetch the blob for a key, None when absent."""
        pass

    @abstractmethod
    async def set(self, key: str, value: bytes) -> bool:
        """Upsert the blob for a key, returning whether it succeeded."""
        pass

    async def close(self) -> None:
        pass


class EdgeConfigClient(KeyValueClient):
    """Vercel Edge Config REST client.

    Reads go through the Edge Config read endpoint with a read token,
    writes go through the Vercel management API with an API token.
    """

    def __init__(
        self,
        config_id: str,
        read_token: str | None = None,
        api_token: str | None = None,
        timeout: float = 10.0,
    ):
        self.config_id = config_id
        self.read_token = read_token or api_token
        self.api_token = api_token
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def get(self, key: str) -> bytes | None:
        if not self.read_token:
            raise StoreError("Edge Config read token is not configured")

        client = await self._get_client()
        try:
            response = await client.get(
                f"{EDGE_CONFIG_READ_BASE}/{self.config_id}/item/{key}",
                params={"token": self.read_token},
            )
        except httpx.HTTPError as e:
            raise StoreError(f"Edge Config read failed: {e}") from e

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise StoreError(f"Edge Config read error: {response.status_code} - {response.text}")
        return response.content

    async def set(self, key: str, value: bytes) -> bool:
        if not self.api_token:
            logger.warning("Edge Config write skipped: no API token configured")
            return False

        client = await self._get_client()
        body = {"items": [{"operation": "upsert", "key": key, "value": json.loads(value)}]}
        try:
            response = await client.patch(
                f"{VERCEL_API_BASE}/{self.config_id}/items",
                json=body,
                headers={"Authorization": f"Bearer {self.api_token}"},
            )
        except httpx.HTTPError as e:
            logger.warning(f"Edge Config write exception: {e}")
            return False

        if not response.is_success:
            logger.warning(
                f"Edge Config write error: {response.status_code} {response.reason_phrase} - {response.text}"
            )
            return False
        return True

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None


class RemoteKVTier(StorageTier):
    """Tier backed by a remote key-value service holding one JSON blob."""

    name = "remote"

    def __init__(self, client: KeyValueClient, key: str):
        self.client = client
        self.key = key

    async def load(self) -> Any | None:
        raw = await self.client.get(self.key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            raise StoreError(f"Remote value for '{self.key}' is not valid JSON: {e}") from e

    async def save(self, data: Any) -> None:
        payload = json.dumps(data).encode("utf-8")
        if not await self.client.set(self.key, payload):
            raise StoreError(f"Remote store rejected write for '{self.key}'")

    async def close(self) -> None:
        await self.client.close()


class FileSystemTier(StorageTier):
    """Tier backed by a JSON file on local disk."""

    name = "filesystem"

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> Any | None:
        if not self.path.exists():
            return None
        with self.path.open(encoding="utf-8") as f:
            return json.load(f)

    def _write(self, data: Any) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, self.path)

    async def load(self) -> Any | None:
        try:
            return await asyncio.to_thread(self._read)
        except (OSError, ValueError) as e:
            raise StoreError(f"Failed to read {self.path}: {e}") from e

    async def save(self, data: Any) -> None:
        try:
            await asyncio.to_thread(self._write, data)
        except (OSError, TypeError, ValueError) as e:
            raise StoreError(f"Failed to write {self.path}: {e}") from e
