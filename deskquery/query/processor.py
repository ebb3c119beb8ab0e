"""Query answering pipeline: instant answers from aggregates, AI for the rest."""

import logging
import time

from deskquery.context import ContextBuilder
from deskquery.errors import ModelError, SnapshotUnavailableError
from deskquery.snapshot import Snapshot, SnapshotCache, SnapshotSource

from .interpreter import GroundedAnswerer
from .models import ConversationContext, Intent, InterpretationMethod, InterpretationResult, QueryResult
from .orchestrator import FallbackOrchestrator
from .patterns import PATTERN_LIBRARY, get_pattern

logger = logging.getLogger(__name__)

SOURCE_CACHE = "cache"
SOURCE_AI = "ai"

AI_ANSWER_CONFIDENCE = 0.85

INSTANT_INTENTS = {
    Intent.TICKET_COUNT,
    Intent.TICKET_STATUS,
    Intent.PRIORITY_BREAKDOWN,
    Intent.AGE_ANALYSIS,
    Intent.ANALYTICS,
}

# Phrasings that would change tickets; recognized but never executed
MUTATION_CATEGORIES = {
    "reply",
    "merge",
    "bulk",
    "deletion",
    "status",
    "priority",
    "assignment",
    "tags",
    "collaboration",
    "creation",
}

# Filters the aggregates can answer; any other filter needs the full data
_AGGREGATE_FILTER_KEYS = {"status", "priority"}

NO_DATA_ANSWER = "No tickets loaded yet.\n\nTry 'refresh' to sync the latest ticket data."


def _bold_counts(counts: dict[str, int]) -> str:
    return " | ".join(f"**{key}**: {value}" for key, value in counts.items())


def format_stats(snapshot: Snapshot) -> str:
    """Render the snapshot's aggregates as a plain-text statistics table."""
    aggregates = snapshot.aggregates
    lines = ["SUPPORT STATISTICS", "=================="]

    for title, counts in (
        ("BY KIND", aggregates.by_kind),
        ("BY STATE", aggregates.by_state),
        ("BY PRIORITY", aggregates.by_priority),
    ):
        if counts:
            lines.append("")
            lines.append(f"{title}:")
            lines.extend(f"  {key:<12} {value}" for key, value in counts.items())

    by_age = aggregates.by_age
    lines.extend(
        [
            "",
            "BY AGE:",
            f"  < 24 hours      {by_age.less_than_24h}",
            f"  < 7 days        {by_age.less_than_7d}",
            f"  < 30 days       {by_age.less_than_30d}",
            f"  > 30 days       {by_age.older_than_30d}",
            "",
            f"LAST UPDATED: {snapshot.last_updated.isoformat()}",
            f"TOTAL ITEMS: {snapshot.item_count}",
        ]
    )
    return "\n".join(lines)


def help_text() -> str:
    """Help message listing what the assistant can answer."""
    read_only = [
        p for p in PATTERN_LIBRARY if p.category in ("analytics", "retrieval", "users", "organization")
    ]
    examples = "\n".join(f"- {p.description}" for p in read_only)
    return f"""**SUPPORT QUERY ASSISTANT - HELP**

Ask natural language questions about your support tickets and conversations.
Simple counts are answered instantly; everything else is analyzed by AI.

**WHAT YOU CAN ASK:**
{examples}

**EXAMPLES TO TRY:**
- How many tickets are open?
- What's the priority distribution?
- Show urgent tickets from the last 7 days
- What are the most common problems?

**SYSTEM COMMANDS:**
- Type "refresh" to sync the latest ticket data"""


def instant_answer(interpretation: InterpretationResult, snapshot: Snapshot) -> str | None:
    """Answer straight from aggregates, or None when the full data is needed."""
    filters = interpretation.filters
    if set(filters) - _AGGREGATE_FILTER_KEYS:
        return None
    if "status" in filters and "priority" in filters:
        return None

    aggregates = snapshot.aggregates
    intent = interpretation.intent

    if "status" in filters and intent in (Intent.TICKET_COUNT, Intent.TICKET_STATUS):
        status = filters["status"]
        return f"There are **{aggregates.by_state.get(status, 0)}** {status} items."

    if "priority" in filters and intent in (Intent.TICKET_COUNT, Intent.PRIORITY_BREAKDOWN):
        priority = filters["priority"]
        return f"There are **{aggregates.by_priority.get(priority, 0)}** {priority} priority items."

    if intent == Intent.TICKET_COUNT:
        if aggregates.by_kind.get("conversation"):
            return f"We have **{snapshot.item_count}** items in total ({_bold_counts(aggregates.by_kind)})."
        return f"We have **{snapshot.item_count}** tickets in total."

    if intent == Intent.TICKET_STATUS:
        return f"Status breakdown: {_bold_counts(aggregates.by_state)}"

    if intent == Intent.PRIORITY_BREAKDOWN:
        return f"Priority breakdown: {_bold_counts(aggregates.by_priority)}"

    if intent == Intent.AGE_ANALYSIS:
        by_age = aggregates.by_age
        return (
            "Age breakdown:\n"
            f"- Less than 24 hours: **{by_age.less_than_24h}**\n"
            f"- Less than 7 days: **{by_age.less_than_7d}**\n"
            f"- Less than 30 days: **{by_age.less_than_30d}**\n"
            f"- Older than 30 days: **{by_age.older_than_30d}**"
        )

    if intent == Intent.ANALYTICS:
        return format_stats(snapshot)

    return None


class QueryProcessor:
    """Turns a user question into an answer."""

    def __init__(
        self,
        orchestrator: FallbackOrchestrator,
        snapshot_cache: SnapshotCache,
        context_builder: ContextBuilder,
        answerer: GroundedAnswerer | None = None,
        snapshot_source: SnapshotSource | None = None,
    ):
        """Initialize query processor.

        Args:
            orchestrator: Interprets queries, patterns first
            snapshot_cache: Live ticket snapshot
            context_builder: Grounding context, invalidated on refresh
            answerer: AI answering path; None runs pattern-only
            snapshot_source: Where refreshes fetch data from
        """
        self.orchestrator = orchestrator
        self.snapshot_cache = snapshot_cache
        self.context_builder = context_builder
        self.answerer = answerer
        self.snapshot_source = snapshot_source

    async def refresh(self) -> tuple[bool, str]:
        """Refresh the snapshot from the configured source.

        Returns:
            Success flag and a user-facing message
        """
        if self.snapshot_source is None:
            return False, "Failed to refresh\n\nNo ticket source is configured."

        result = await self.snapshot_cache.refresh(self.snapshot_source)
        self.context_builder.invalidate()
        if result.success:
            return True, f"Refreshed successfully!\n\nUpdated with {result.item_count} items.\n{result.message}"
        return False, f"Failed to refresh\n\nError: {result.error}\n{result.message}"

    async def _answer(
        self,
        query: str,
        interpretation: InterpretationResult,
        conversation: ConversationContext | None,
    ) -> tuple[str, str, float]:
        if interpretation.intent == Intent.HELP:
            return help_text(), SOURCE_CACHE, 1.0

        if interpretation.intent == Intent.REFRESH:
            success, message = await self.refresh()
            return message, SOURCE_CACHE, 1.0 if success else 0.0

        pattern = get_pattern(interpretation.intent)
        if pattern is not None and pattern.category in MUTATION_CATEGORIES:
            return (
                f"{pattern.description} is not available here: this assistant only reads ticket data.",
                SOURCE_CACHE,
                interpretation.confidence,
            )

        if (
            interpretation.intent in INSTANT_INTENTS
            and interpretation.method == InterpretationMethod.PATTERN_MATCH
            and not interpretation.degraded
        ):
            snapshot = await self.snapshot_cache.current()
            if snapshot is None or snapshot.item_count == 0:
                return NO_DATA_ANSWER, SOURCE_CACHE, 0.0
            answer = instant_answer(interpretation, snapshot)
            if answer is not None:
                logger.info(f"Instant answer for {interpretation.intent.value}")
                return answer, SOURCE_CACHE, interpretation.confidence

        if self.answerer is None:
            return (
                "AI analysis is not configured, so only simple counts can be answered.\n\n"
                "Try 'help' to see what you can ask.",
                SOURCE_CACHE,
                0.0,
            )

        logger.info("Falling back to AI analysis with cached context")
        try:
            answer = await self.answerer.answer(query, conversation)
        except SnapshotUnavailableError:
            return NO_DATA_ANSWER, SOURCE_CACHE, 0.0
        except ModelError as e:
            logger.error(f"AI answer failed ({e.kind.value}): {e}")
            return (
                "Sorry, I couldn't analyze that right now. Please try again in a moment.",
                SOURCE_AI,
                0.0,
            )
        return answer, SOURCE_AI, AI_ANSWER_CONFIDENCE

    async def process_query(
        self,
        query: str,
        conversation: ConversationContext | None = None,
    ) -> QueryResult:
        """Answer a query end to end.

        Args:
            query: Validated user query
            conversation: Optional previous turn for follow-up questions

        Returns:
            Complete query result
        """
        start_time = time.time()
        text = query.strip() if query else ""

        if not text:
            return QueryResult(
                query=query,
                answer=help_text(),
                source=SOURCE_CACHE,
                confidence=1.0,
                processing_time=time.time() - start_time,
            )

        logger.info(f"Processing query: {text}")
        interpretation = await self.orchestrator.interpret(text)
        answer, source, confidence = await self._answer(text, interpretation, conversation)

        processing_time = time.time() - start_time
        logger.info(f"Query processed in {processing_time:.2f}s from {source} with {confidence:.0%} confidence")
        return QueryResult(
            query=query,
            answer=answer,
            source=source,
            confidence=confidence,
            processing_time=processing_time,
            interpretation=interpretation,
        )

    async def health_check(self) -> dict[str, bool]:
        """Check health of query processing components."""
        health = {"snapshot": await self.snapshot_cache.current() is not None}
        if self.answerer is not None:
            health["llm"] = await self.answerer.llm_provider.health_check()
        health["overall"] = all(health.values())
        return health
