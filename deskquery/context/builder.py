"""Grounding context for AI answers, memoized per snapshot version."""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from deskquery.errors import SnapshotUnavailableError
from deskquery.snapshot import Snapshot, SnapshotCache, SnapshotItem, utc_now

logger = logging.getLogger(__name__)


@dataclass
class CachedContext:
    """Serialized snapshot text ready to embed in a system prompt."""

    summary_text: str
    stats_summary: str
    built_at: datetime
    source_timestamp: datetime
    item_count: int


@dataclass
class ContextStats:
    """Health information about the memoized context."""

    cached: bool
    items_in_context: int
    cache_age_ms: int


def format_item_line(item: SnapshotItem, preview_chars: int = 150) -> str:
    """Render one item as a single context line."""
    preview = re.sub(r"\s+", " ", item.body_preview).strip()[:preview_chars]
    tags = f" [{', '.join(item.tags)}]" if item.tags else ""
    return (
        f"{item.kind.value.upper()} #{item.id} [{item.priority_label}/{item.state}]{tags} "
        f'"{item.title}" - {preview}...'
    )


def _join_counts(counts: dict[str, int]) -> str:
    return " | ".join(f"{key}:{value}" for key, value in counts.items())


def format_stats_summary(snapshot: Snapshot) -> str:
    """Render the aggregate block embedded above the item lines."""
    aggregates = snapshot.aggregates
    by_age = aggregates.by_age
    return "\n".join(
        [
            "SUPPORT STATISTICS:",
            f"- Total: {snapshot.item_count}",
            f"- By Kind: {_join_counts(aggregates.by_kind)}",
            f"- By State: {_join_counts(aggregates.by_state)}",
            f"- By Priority: {_join_counts(aggregates.by_priority)}",
            f"- By Age: <24h:{by_age.less_than_24h} | <7d:{by_age.less_than_7d} "
            f"| <30d:{by_age.less_than_30d} | >30d:{by_age.older_than_30d}",
        ]
    )


class ContextBuilder:
    """Builds and memoizes the serialized snapshot for AI grounding.

    The memo is keyed on the snapshot's ``last_updated``; a newer snapshot
    triggers exactly one rebuild even under concurrent callers.
    """

    def __init__(
        self,
        snapshot_cache: SnapshotCache,
        clock: Callable[[], datetime] = utc_now,
        preview_chars: int = 150,
    ):
        self.snapshot_cache = snapshot_cache
        self.clock = clock
        self.preview_chars = preview_chars
        self._context: CachedContext | None = None

    def _is_current(self, snapshot: Snapshot) -> bool:
        return self._context is not None and self._context.source_timestamp == snapshot.last_updated

    def _build(self, snapshot: Snapshot) -> CachedContext:
        lines = [format_item_line(item, self.preview_chars) for item in snapshot.items]
        return CachedContext(
            summary_text="\n".join(lines),
            stats_summary=format_stats_summary(snapshot),
            built_at=self.clock(),
            source_timestamp=snapshot.last_updated,
            item_count=len(lines),
        )

    async def get_context(self) -> CachedContext:
        """Return the context for the current snapshot, rebuilding if stale.

        Raises:
            SnapshotUnavailableError: If no snapshot has been stored yet
        """
        snapshot = await self.snapshot_cache.current()
        if snapshot is None:
            raise SnapshotUnavailableError("Unable to load ticket snapshot for context building")

        if self._is_current(snapshot):
            logger.debug("Using existing context (snapshot unchanged)")
            return self._context

        # No await between the check above and the assignment, so concurrent
        # callers cannot interleave here and a snapshot is built once
        self._context = self._build(snapshot)
        logger.info(f"Context built with {self._context.item_count} items")
        return self._context

    def invalidate(self) -> None:
        """Drop the memoized context."""
        self._context = None
        logger.info("Context invalidated")

    def stats(self) -> ContextStats:
        if self._context is None:
            return ContextStats(cached=False, items_in_context=0, cache_age_ms=0)

        age = self.clock() - self._context.built_at
        return ContextStats(
            cached=True,
            items_in_context=self._context.item_count,
            cache_age_ms=int(age.total_seconds() * 1000),
        )

    async def build_system_prompt(self) -> str:
        """System prompt that grounds question answering in the snapshot."""
        context = await self.get_context()

        return f"""You are a helpful support analytics assistant. Answer questions about support tickets and conversations based on the provided data.

Be concise and direct. If asked for statistics, provide specific numbers. If asked to analyze, provide actionable insights.

CURRENT SUPPORT DATA (automatically updated):
{context.stats_summary}

ALL ITEMS (kind, id, priority/state, tags, title, description preview):
{context.summary_text}

INSTRUCTIONS:
- Answer the user's question based only on the provided data
- Be accurate with numbers: count carefully and report exact counts, never estimates
- Never invent tickets, conversations or numbers that are not in the data
- When referencing a specific item, always include its title; never list raw IDs alone
- If you don't have data to answer a question, say so clearly

RESPONSE FORMATTING:
- Use markdown formatting (**, ##, bullets) for structure and readability
- Keep individual lines under 250 characters
- Use bullet points for lists of 3+ items
- Use domain language: say "ticket" not "record" or "entry"
- Avoid technical implementation terms: don't mention "cache", "database", "API", "JSON", "query", or code-specific terminology
- Start with the answer immediately, then provide supporting details"""
