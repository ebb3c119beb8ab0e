"""Sources that supply raw ticket/conversation records for a snapshot refresh."""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from .models import SnapshotItem

logger = logging.getLogger(__name__)


class SnapshotSource(ABC):
    """Supplier of the full ticket/conversation dataset."""

    @abstractmethod
    async def fetch_items(self) -> list[SnapshotItem]:
        """Fetch every record to include in the next snapshot."""
        pass


class FileSnapshotSource(SnapshotSource):
    """Reads records from a JSON export.

    The file holds either a list of records or an object with ``items``,
    ``tickets`` and/or ``conversations`` lists.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_records(self) -> list[dict]:
        with self.path.open(encoding="utf-8") as f:
            data = json.load(f)

        if isinstance(data, list):
            return data

        records: list[dict] = list(data.get("items", []))
        records.extend(data.get("tickets", []))
        records.extend({**c, "kind": "conversation"} for c in data.get("conversations", []))
        return records

    async def fetch_items(self) -> list[SnapshotItem]:
        records = await asyncio.to_thread(self._read_records)
        items = [SnapshotItem.from_record(record) for record in records]
        logger.info(f"Read {len(items)} records from {self.path}")
        return items
