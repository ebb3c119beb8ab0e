"""Tests for engine wiring."""

import pytest

from deskquery.config import LLMProvider as LLMProviderEnum
from deskquery.config import Settings
from deskquery.engine import create_engine
from deskquery.llm.ollama import OllamaProvider
from deskquery.snapshot import FileSnapshotSource
from tests.conftest import FakeLLMProvider, StaticSource


@pytest.fixture(autouse=True)
def _no_credentials(monkeypatch):
    for name in ("OPENAI_API_KEY", "GEMINI_API_KEY", "ANTHROPIC_API_KEY", "VERCEL", "VERCEL_ENV"):
        monkeypatch.delenv(name, raising=False)


class TestCreateEngine:
    """Test building isolated engines from settings."""

    def test_provider_from_settings(self, settings):
        engine = create_engine(settings)

        assert isinstance(engine.llm_provider, OllamaProvider)
        assert engine.ai_available
        assert engine.processor.answerer is not None
        assert engine.store.describe() == "filesystem"

    def test_pattern_only_without_credentials(self, tmp_path):
        """Test a missing API key disables the AI path instead of failing."""
        settings = Settings(_env_file=None, llm_provider=LLMProviderEnum.OPENAI, cache_dir=tmp_path)

        engine = create_engine(settings)

        assert engine.llm_provider is None
        assert not engine.ai_available
        assert engine.orchestrator.interpreter is None
        assert engine.processor.answerer is None

    def test_settings_flow_into_components(self, tmp_path):
        settings = Settings(
            _env_file=None,
            llm_provider=LLMProviderEnum.OLLAMA,
            cache_dir=tmp_path,
            interpretation_cache_max_size=10,
            context_preview_chars=40,
            snapshot_reload_seconds=5,
            interpret_temperature=0.1,
            answer_max_tokens=800,
        )

        engine = create_engine(settings, llm_provider=FakeLLMProvider())

        assert engine.interpretation_cache.max_size == 10
        assert engine.orchestrator.cache is engine.interpretation_cache
        assert engine.context_builder.preview_chars == 40
        assert engine.snapshot_cache.reload_seconds == 5
        assert engine.orchestrator.interpreter.temperature == 0.1
        assert engine.processor.answerer.max_tokens == 800

    def test_file_source_from_settings(self, tmp_path):
        export = tmp_path / "export.json"
        settings = Settings(
            _env_file=None,
            llm_provider=LLMProviderEnum.OLLAMA,
            cache_dir=tmp_path,
            snapshot_source_path=export,
        )

        engine = create_engine(settings)

        assert isinstance(engine.snapshot_source, FileSnapshotSource)
        assert engine.processor.snapshot_source is engine.snapshot_source

    @pytest.mark.asyncio
    async def test_engines_are_isolated(self, tmp_path, clock, sample_items):
        """Test two engines share no cache state."""
        first = create_engine(
            Settings(_env_file=None, cache_dir=tmp_path / "a"),
            llm_provider=FakeLLMProvider(),
            snapshot_source=StaticSource(sample_items),
            clock=clock,
        )
        second = create_engine(
            Settings(_env_file=None, cache_dir=tmp_path / "b"),
            llm_provider=FakeLLMProvider(),
            clock=clock,
        )

        await first.processor.process_query("How many tickets are open?")
        await first.processor.refresh()

        assert first.interpretation_cache.size == 1
        assert second.interpretation_cache.size == 0
        assert await second.snapshot_cache.current() is None

    @pytest.mark.asyncio
    async def test_clear_caches(self, settings, clock, sample_items):
        engine = create_engine(
            settings, llm_provider=FakeLLMProvider(), snapshot_source=StaticSource(sample_items), clock=clock
        )
        await engine.processor.refresh()
        await engine.context_builder.get_context()
        await engine.orchestrator.interpret("help")

        engine.clear_caches()

        assert engine.interpretation_cache.size == 0
        assert engine.context_stats() == {"cached": False, "itemsInContext": 0, "cacheAgeMs": 0}

    @pytest.mark.asyncio
    async def test_end_to_end(self, settings, clock, sample_items):
        """Test refresh then an instant answer through a fresh engine on the same storage."""
        writer = create_engine(settings, llm_provider=FakeLLMProvider(), snapshot_source=StaticSource(sample_items))
        success, _ = await writer.processor.refresh()
        assert success

        reader = create_engine(settings, llm_provider=FakeLLMProvider(), clock=clock)
        result = await reader.processor.process_query("How many tickets are open?")

        assert result.answer == "There are **3** open items."
