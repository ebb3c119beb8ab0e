"""Tests for snapshot models, sources and the snapshot cache."""

import json
from datetime import timedelta

import pytest

from deskquery.snapshot import (
    Aggregates,
    FileSnapshotSource,
    ItemKind,
    Snapshot,
    SnapshotCache,
    SnapshotItem,
)
from deskquery.store import FileSystemTier, TieredStore
from tests.conftest import NOW, StaticSource, make_item


class TestSnapshotModel:
    """Test snapshot construction and derived aggregates."""

    def test_aggregates_derived(self, sample_snapshot):
        aggregates = sample_snapshot.aggregates

        assert aggregates.by_state == {"open": 3, "pending": 1, "solved": 1}
        assert aggregates.by_priority == {"urgent": 1, "high": 2, "normal": 1, "low": 1}
        assert aggregates.by_kind == {"ticket": 4, "conversation": 1}
        assert aggregates.by_age.less_than_24h == 2
        assert aggregates.by_age.less_than_7d == 1
        assert aggregates.by_age.less_than_30d == 1
        assert aggregates.by_age.older_than_30d == 1

    def test_counts_sum_to_item_count(self, sample_snapshot):
        """Test every breakdown accounts for every item exactly once."""
        aggregates = sample_snapshot.aggregates

        assert sum(aggregates.by_state.values()) == sample_snapshot.item_count
        assert sum(aggregates.by_priority.values()) == sample_snapshot.item_count
        assert aggregates.by_age.total() == sample_snapshot.item_count
        assert sample_snapshot.is_consistent()

    def test_empty_snapshot(self):
        snapshot = Snapshot.build([], NOW)

        assert snapshot.item_count == 0
        assert snapshot.aggregates == Aggregates()
        assert snapshot.is_consistent()

    def test_count_by_kind(self, sample_snapshot):
        assert sample_snapshot.count_by_kind(ItemKind.TICKET) == 4
        assert sample_snapshot.count_by_kind(ItemKind.CONVERSATION) == 1

    def test_boolean_priority_labels(self):
        assert make_item(1, timedelta(hours=1), priority=True).priority_label == "high"
        assert make_item(2, timedelta(hours=1), priority=False).priority_label == "normal"
        assert make_item(3, timedelta(hours=1), priority=None).priority_label == "normal"
        assert make_item(4, timedelta(hours=1), priority="URGENT").priority_label == "urgent"

    def test_blob_uses_camel_case(self, sample_snapshot):
        blob = sample_snapshot.to_blob()

        assert blob["lastUpdated"].startswith("2025-03-01T12:00:00")
        assert blob["itemCount"] == 5
        assert blob["aggregates"]["byAge"] == {
            "lessThan24h": 2,
            "lessThan7d": 1,
            "lessThan30d": 1,
            "olderThan30d": 1,
        }
        assert "bodyPreview" in blob["items"][0]
        assert "createdAt" in blob["items"][0]
        json.dumps(blob)

    def test_blob_round_trip(self, sample_snapshot):
        restored = Snapshot.from_blob(sample_snapshot.to_blob())

        assert restored == sample_snapshot

    def test_drifted_aggregates_recomputed(self, sample_snapshot, caplog):
        """Test stored aggregates are never trusted over the items."""
        blob = sample_snapshot.to_blob()
        blob["aggregates"]["byState"] = {"open": 99}

        restored = Snapshot.from_blob(blob)

        assert restored.aggregates.by_state == {"open": 3, "pending": 1, "solved": 1}
        assert "drifted" in caplog.text

    def test_naive_timestamps_are_utc(self):
        snapshot = Snapshot.from_blob({"lastUpdated": "2025-03-01T12:00:00", "items": []})

        assert snapshot.last_updated == NOW


class TestSnapshotItemFromRecord:
    """Test conversion of raw vendor records."""

    def test_ticket_record(self):
        item = SnapshotItem.from_record(
            {
                "id": 473,
                "subject": "Cannot reset password",
                "description": "The reset email never arrives",
                "status": "open",
                "priority": "high",
                "tags": ["password", "email"],
                "created_at": "2025-02-28T09:00:00Z",
                "updated_at": "2025-03-01T08:00:00Z",
                "assignee_id": 12,
            }
        )

        assert item.id == "473"
        assert item.kind == ItemKind.TICKET
        assert item.title == "Cannot reset password"
        assert item.body_preview == "The reset email never arrives"
        assert item.state == "open"
        assert item.assignee == "12"
        assert item.organization is None

    def test_conversation_record(self):
        item = SnapshotItem.from_record(
            {
                "id": "c-9",
                "state": "snoozed",
                "priority": True,
                "source": {"subject": "Billing question", "body": "Charged twice"},
                "tags": {"tags": [{"name": "billing"}, {"name": "vip"}]},
                "createdAt": "2025-03-01T10:00:00Z",
            }
        )

        assert item.kind == ItemKind.CONVERSATION
        assert item.title == "Billing question"
        assert item.body_preview == "Charged twice"
        assert item.priority_label == "high"
        assert item.tags == ["billing", "vip"]
        assert item.updated_at == item.created_at

    def test_missing_title(self):
        item = SnapshotItem.from_record({"id": 1, "created_at": "2025-03-01T10:00:00Z"})

        assert item.title == "Untitled"
        assert item.state == "unknown"


class TestFileSnapshotSource:
    """Test reading records from a JSON export."""

    @pytest.mark.asyncio
    async def test_list_export(self, tmp_path):
        path = tmp_path / "export.json"
        path.write_text(json.dumps([{"id": 1, "subject": "A", "created_at": "2025-03-01T10:00:00Z"}]))

        items = await FileSnapshotSource(path).fetch_items()

        assert [item.id for item in items] == ["1"]

    @pytest.mark.asyncio
    async def test_split_export(self, tmp_path):
        path = tmp_path / "export.json"
        path.write_text(
            json.dumps(
                {
                    "tickets": [{"id": 1, "subject": "A", "created_at": "2025-03-01T10:00:00Z"}],
                    "conversations": [{"id": 2, "title": "B", "created_at": "2025-03-01T10:00:00Z"}],
                }
            )
        )

        items = await FileSnapshotSource(path).fetch_items()

        assert [(item.id, item.kind) for item in items] == [
            ("1", ItemKind.TICKET),
            ("2", ItemKind.CONVERSATION),
        ]

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            await FileSnapshotSource(tmp_path / "missing.json").fetch_items()


class TestSnapshotCache:
    """Test the live snapshot holder."""

    @pytest.mark.asyncio
    async def test_empty_store(self, snapshot_cache):
        assert await snapshot_cache.current() is None

    @pytest.mark.asyncio
    async def test_replace_persists(self, snapshot_cache, sample_snapshot, store):
        assert await snapshot_cache.replace(sample_snapshot) is True

        assert await snapshot_cache.current() is sample_snapshot
        assert (await store.load())["itemCount"] == 5

    @pytest.mark.asyncio
    async def test_loads_from_store(self, store, clock, sample_snapshot):
        await store.save(sample_snapshot.to_blob())
        cache = SnapshotCache(store, clock=clock)

        snapshot = await cache.current()

        assert snapshot.item_count == 5
        assert snapshot.last_updated == NOW

    @pytest.mark.asyncio
    async def test_reload_after_interval(self, store, clock, sample_snapshot, sample_items):
        """Test another process's refresh becomes visible after the reload interval."""
        cache = SnapshotCache(store, clock=clock, reload_seconds=60)
        await cache.replace(sample_snapshot)

        newer = Snapshot.build(sample_items[:2], NOW + timedelta(minutes=5))
        await store.save(newer.to_blob())

        clock.advance(seconds=30)
        assert (await cache.current()).item_count == 5

        clock.advance(seconds=31)
        assert (await cache.current()).item_count == 2

    @pytest.mark.asyncio
    async def test_never_moves_backwards(self, store, clock, sample_snapshot, sample_items):
        cache = SnapshotCache(store, clock=clock, reload_seconds=0)
        await cache.replace(sample_snapshot)

        older = Snapshot.build(sample_items[:1], NOW - timedelta(hours=1))
        await store.save(older.to_blob())

        assert (await cache.current()).item_count == 5

    @pytest.mark.asyncio
    async def test_malformed_blob_keeps_memory(self, store, clock, sample_snapshot):
        cache = SnapshotCache(store, clock=clock, reload_seconds=0)
        await cache.replace(sample_snapshot)
        await store.save({"items": "not a list"})

        assert await cache.current() is sample_snapshot

    @pytest.mark.asyncio
    async def test_replace_failure_leaves_memory(self, tmp_path, clock, sample_snapshot):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = TieredStore([FileSystemTier(blocker / "snapshot.json")])
        cache = SnapshotCache(store, clock=clock)

        assert await cache.replace(sample_snapshot) is False
        assert cache._snapshot is None

    @pytest.mark.asyncio
    async def test_refresh_success(self, snapshot_cache, sample_items):
        source = StaticSource(sample_items)

        result = await snapshot_cache.refresh(source)

        assert result.success
        assert result.item_count == 5
        assert result.message == "Successfully refreshed snapshot with 5 items"
        assert result.error is None
        assert (await snapshot_cache.current()).last_updated == NOW

    @pytest.mark.asyncio
    async def test_refresh_fetch_failure(self, snapshot_cache, sample_snapshot):
        await snapshot_cache.replace(sample_snapshot)

        result = await snapshot_cache.refresh(StaticSource(error=ConnectionError("vendor down")))

        assert not result.success
        assert result.message == "Failed to fetch tickets"
        assert result.error == "vendor down"
        assert await snapshot_cache.current() is sample_snapshot

    @pytest.mark.asyncio
    async def test_refresh_save_failure(self, tmp_path, clock, sample_items):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        cache = SnapshotCache(TieredStore([FileSystemTier(blocker / "snapshot.json")]), clock=clock)

        result = await cache.refresh(StaticSource(sample_items))

        assert not result.success
        assert result.message == "Failed to save snapshot"
        assert result.error == "Write error"

    @pytest.mark.asyncio
    async def test_clear(self, snapshot_cache, sample_snapshot, store):
        await snapshot_cache.replace(sample_snapshot)
        snapshot_cache.clear()

        reloaded = await snapshot_cache.current()

        assert reloaded is not sample_snapshot
        assert reloaded.item_count == 5
