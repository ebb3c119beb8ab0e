"""Query interpretation models and data structures."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Confidence assigned to every pattern match; matching is all-or-nothing.
PATTERN_CONFIDENCE = 0.9

# Pattern results at or above this confidence skip the model entirely.
CONFIDENCE_THRESHOLD = 0.8

# Reported confidence for a pattern result returned because the model path
# failed. It marks the answer as best-effort and unverified; it is not a
# measure of how well the classifier matched.
DEGRADED_CONFIDENCE_FLOOR = 0.3


class Intent(str, Enum):
    """What a user's query is asking for."""

    # System commands
    HELP = "help"
    REFRESH = "refresh"

    # Mutation phrasings, recognized but never executed here
    GENERATE_REPLY = "generate_reply"
    MERGE_TICKETS = "merge_tickets"
    BULK_UPDATE = "bulk_update"
    BULK_ASSIGN = "bulk_assign"
    DELETE_TICKET = "delete_ticket"
    MARK_SPAM = "mark_spam"
    RESTORE_TICKET = "restore_ticket"
    UPDATE_STATUS = "update_status"
    UPDATE_PRIORITY = "update_priority"
    ASSIGN_TO_GROUP = "assign_to_group"
    ASSIGN_TICKET = "assign_ticket"
    REMOVE_TAGS = "remove_tags"
    ADD_TAGS = "add_tags"
    REMOVE_CC = "remove_cc"
    ADD_CC = "add_cc"
    CREATE_TICKET = "create_ticket"

    # Analytics
    PRIORITY_BREAKDOWN = "priority_breakdown"
    TICKET_STATUS = "ticket_status"
    TICKET_COUNT = "ticket_count"
    AGE_ANALYSIS = "age_analysis"
    ANALYTICS = "analytics"
    PROBLEM_AREAS = "problem_areas"

    # Retrieval
    TICKET_BY_ID = "ticket_by_id"
    RAW_DATA = "raw_data"
    RECENT_TICKETS = "recent_tickets"
    TICKET_FILTER = "ticket_filter"
    TICKET_LIST = "ticket_list"
    USER_QUERY = "user_query"
    ORGANIZATION_QUERY = "organization_query"
    CHAT_QUERY = "chat_query"
    CALL_QUERY = "call_query"
    HELP_ARTICLE = "help_article"
    AUTOMATION = "automation"

    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "Intent":
        """Map a free-form string onto the enum, falling back to UNKNOWN."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN


class InterpretationMethod(str, Enum):
    """How an interpretation was produced."""

    PATTERN_MATCH = "pattern_match"
    AI = "ai"


@dataclass(frozen=True)
class QueryPattern:
    """One entry of the pattern library.

    Entries are tried in descending ``priority``; within an entry every
    regex is tested and any match selects the entry.
    """

    intent: Intent
    category: str
    patterns: tuple[re.Pattern, ...]
    priority: int
    description: str
    requires_context: bool = False
    requires_confirmation: bool = False

    def matches(self, query: str) -> bool:
        return any(pattern.search(query) for pattern in self.patterns)


@dataclass
class InterpretationResult:
    """Structured interpretation of a query."""

    intent: Intent
    filters: dict[str, Any] = field(default_factory=dict)
    confidence: float = 0.0
    method: InterpretationMethod = InterpretationMethod.PATTERN_MATCH
    reasoning: str | None = None
    degraded: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "intent": self.intent.value,
            "filters": dict(self.filters),
            "confidence": self.confidence,
            "method": self.method.value,
            "reasoning": self.reasoning,
            "degraded": self.degraded,
        }


@dataclass
class ConversationContext:
    """What the user saw in the previous turn, for follow-up questions."""

    previous_query: str
    item_ids: list[str] = field(default_factory=list)


@dataclass
class QueryResult:
    """Complete result of answering a query."""

    query: str
    answer: str
    source: str
    confidence: float
    processing_time: float
    interpretation: InterpretationResult | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "answer": self.answer,
            "source": self.source,
            "confidence": self.confidence,
            "processingTime": self.processing_time,
            "interpretation": self.interpretation.to_dict() if self.interpretation else None,
        }
