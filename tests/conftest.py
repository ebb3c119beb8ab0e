"""Shared fixtures for the test suite."""

from datetime import datetime, timedelta, timezone

import pytest

from deskquery.config import LLMProvider as LLMProviderEnum
from deskquery.config import Settings
from deskquery.errors import ModelError
from deskquery.llm.base import LLMProvider, ResponseResult
from deskquery.snapshot import Snapshot, SnapshotCache, SnapshotItem, SnapshotSource
from deskquery.store import FileSystemTier, TieredStore

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeLLMProvider(LLMProvider):
    """Provider returning canned replies and recording every call."""

    def __init__(self, replies: list[str] | None = None, error: Exception | None = None):
        self.replies = list(replies or [])
        self.error = error
        self.calls: list[dict] = []

    async def generate_response(self, prompt, system_prompt=None, temperature=None, max_tokens=None):
        self.calls.append(
            {
                "prompt": prompt,
                "system_prompt": system_prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        if self.error is not None:
            raise self.error
        content = self.replies.pop(0) if self.replies else ""
        return ResponseResult(content=content, model="fake-model")

    async def health_check(self) -> bool:
        return self.error is None


class FakeClock:
    """Settable clock."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class StaticSource(SnapshotSource):
    def __init__(self, items: list[SnapshotItem] | None = None, error: Exception | None = None):
        self.items = items or []
        self.error = error
        self.fetches = 0

    async def fetch_items(self) -> list[SnapshotItem]:
        self.fetches += 1
        if self.error is not None:
            raise self.error
        return list(self.items)


def make_item(item_id, age: timedelta, state="open", priority="normal", **kwargs) -> SnapshotItem:
    created = NOW - age
    return SnapshotItem(
        id=item_id,
        title=kwargs.pop("title", f"Ticket {item_id}"),
        body_preview=kwargs.pop("body_preview", "Customer cannot log in after the update"),
        state=state,
        priority=priority,
        created_at=created,
        updated_at=created,
        **kwargs,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sample_items():
    return [
        make_item(1, timedelta(hours=2), state="open", priority="urgent", tags=["login"]),
        make_item(2, timedelta(days=3), state="open", priority="high"),
        make_item(3, timedelta(days=10), state="pending", priority="normal"),
        make_item(4, timedelta(days=45), state="solved", priority="low"),
        make_item(5, timedelta(hours=5), state="open", priority=True, kind="conversation", title="Chat about billing"),
    ]


@pytest.fixture
def sample_snapshot(sample_items):
    return Snapshot.build(sample_items, NOW)


@pytest.fixture
def store(tmp_path):
    return TieredStore([FileSystemTier(tmp_path / "snapshot.json")])


@pytest.fixture
def snapshot_cache(store, clock):
    return SnapshotCache(store, clock=clock, reload_seconds=60)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        llm_provider=LLMProviderEnum.OLLAMA,
        cache_dir=tmp_path / "cache",
    )


@pytest.fixture
def model_error():
    return ModelError("provider down")
