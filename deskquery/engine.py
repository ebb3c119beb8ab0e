"""Wiring of the query engine's components."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from deskquery.config import Settings, get_settings
from deskquery.context import ContextBuilder
from deskquery.llm import LLMProvider, create_llm_provider
from deskquery.query import (
    FallbackOrchestrator,
    GroundedAnswerer,
    InterpretationCache,
    ModelInterpreter,
    QueryProcessor,
)
from deskquery.snapshot import FileSnapshotSource, SnapshotCache, SnapshotSource, utc_now
from deskquery.store import TieredStore, create_tiered_store

logger = logging.getLogger(__name__)


@dataclass
class QueryEngine:
    """One fully wired engine; every instance owns its own caches."""

    settings: Settings
    store: TieredStore
    snapshot_cache: SnapshotCache
    context_builder: ContextBuilder
    interpretation_cache: InterpretationCache
    orchestrator: FallbackOrchestrator
    processor: QueryProcessor
    llm_provider: LLMProvider | None = None
    snapshot_source: SnapshotSource | None = None

    @property
    def ai_available(self) -> bool:
        return self.llm_provider is not None

    def clear_caches(self) -> None:
        """Drop the interpretation cache and the memoized AI context."""
        self.orchestrator.clear_cache()
        self.context_builder.invalidate()

    async def close(self) -> None:
        """Release network clients held by the storage tiers."""
        await self.store.close()

    def context_stats(self) -> dict[str, Any]:
        stats = self.context_builder.stats()
        return {
            "cached": stats.cached,
            "itemsInContext": stats.items_in_context,
            "cacheAgeMs": stats.cache_age_ms,
        }


def create_engine(
    settings: Settings | None = None,
    llm_provider: LLMProvider | None = None,
    snapshot_source: SnapshotSource | None = None,
    clock: Callable[[], datetime] | None = None,
    store: TieredStore | None = None,
) -> QueryEngine:
    """Build an isolated engine.

    Args:
        settings: Configuration, defaults to the global settings
        llm_provider: Model provider; built from settings when omitted
        snapshot_source: Source used by refresh; a FileSnapshotSource when
            ``settings.snapshot_source_path`` is set
        clock: Time source for snapshots and context age
        store: Storage chain, built from settings when omitted

    Returns:
        Ready-to-use engine. Without LLM credentials it runs pattern-only.
    """
    settings = settings or get_settings()
    clock = clock or utc_now
    store = store or create_tiered_store(settings)

    if llm_provider is None:
        try:
            llm_provider = create_llm_provider(settings=settings)
        except ValueError as e:
            logger.warning(f"AI path unavailable, running pattern-only: {e}")

    if snapshot_source is None and settings.snapshot_source_path is not None:
        snapshot_source = FileSnapshotSource(settings.snapshot_source_path)

    snapshot_cache = SnapshotCache(store, clock=clock, reload_seconds=settings.snapshot_reload_seconds)
    context_builder = ContextBuilder(snapshot_cache, clock=clock, preview_chars=settings.context_preview_chars)
    interpretation_cache = InterpretationCache(max_size=settings.interpretation_cache_max_size)

    interpreter = None
    answerer = None
    if llm_provider is not None:
        interpreter = ModelInterpreter(
            llm_provider,
            context_builder=context_builder,
            temperature=settings.interpret_temperature,
            max_tokens=settings.interpret_max_tokens,
        )
        answerer = GroundedAnswerer(
            llm_provider,
            context_builder,
            temperature=settings.answer_temperature,
            max_tokens=settings.answer_max_tokens,
        )

    orchestrator = FallbackOrchestrator(interpreter, interpretation_cache)
    processor = QueryProcessor(
        orchestrator,
        snapshot_cache,
        context_builder,
        answerer=answerer,
        snapshot_source=snapshot_source,
    )

    logger.info(
        f"Engine ready (storage: {store.describe()}, "
        f"AI: {type(llm_provider).__name__ if llm_provider else 'disabled'})"
    )
    return QueryEngine(
        settings=settings,
        store=store,
        snapshot_cache=snapshot_cache,
        context_builder=context_builder,
        interpretation_cache=interpretation_cache,
        orchestrator=orchestrator,
        processor=processor,
        llm_provider=llm_provider,
        snapshot_source=snapshot_source,
    )
