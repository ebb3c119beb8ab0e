"""Pattern library mapping query phrasings to intents."""

import re

from .models import Intent, QueryPattern


def _compile(*patterns: str) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns)


_ENTRIES = [
    # System commands
    QueryPattern(
        intent=Intent.HELP,
        category="system",
        patterns=_compile(
            r"^\s*(help|commands|what can (you|i) do|show commands|list commands|available commands)\b",
            r"\bavailable\s+(commands?|operations?|features?)\b",
        ),
        priority=100,
        description="Show help and available commands",
    ),
    QueryPattern(
        intent=Intent.REFRESH,
        category="system",
        patterns=_compile(
            r"^\s*(refresh|reload|sync)\b",
            r"^\s*(update|fetch|pull)\s+(the\s+)?(data|cache|tickets)\s*$",
            r"\bget\s+latest\s+(data|tickets?)\b",
            r"\bupdate\s+cache\b",
        ),
        priority=95,
        description="Refresh the ticket snapshot",
    ),
    # Mutation phrasings: specific actions before generic listing
    QueryPattern(
        intent=Intent.GENERATE_REPLY,
        category="reply",
        patterns=_compile(
            r"\b(build|create|generate|write|compose|draft)\s+(a\s+)?(reply|response|answer|message)\b",
            r"\b(send|post)\s+(a\s+)?(reply|response|comment)\b",
            r"\breply\s+to\s+(ticket|this|that)\b",
            r"\brespond\s+to\s+(ticket|customer|user)\b",
        ),
        priority=92,
        description="Draft a reply to a ticket",
        requires_context=True,
    ),
    QueryPattern(
        intent=Intent.MERGE_TICKETS,
        category="merge",
        patterns=_compile(
            r"\b(merge|combine|consolidate)\s+(tickets?|issues?)\b",
            r"\bmerge\s+(ticket\s*)?#?\d+\s+(into|with|to)\s+#?\d+",
            r"\bcombine\s+(multiple\s+)?tickets?\b",
        ),
        priority=90,
        description="Merge multiple tickets into one",
        requires_context=True,
        requires_confirmation=True,
    ),
    QueryPattern(
        intent=Intent.BULK_UPDATE,
        category="bulk",
        patterns=_compile(
            r"\b(update|change|modify)\s+(all|multiple|many|these|those)\s+tickets?\b",
            r"\bbulk\s+(update|change|modify)\b",
            r"\b(close|solve|delete)\s+(all|multiple|many)\b",
        ),
        priority=88,
        description="Bulk update multiple tickets",
        requires_context=True,
        requires_confirmation=True,
    ),
    QueryPattern(
        intent=Intent.BULK_ASSIGN,
        category="bulk",
        patterns=_compile(
            r"\bassign\s+(all|multiple|many|these|those)\s+(to|tickets)\b",
            r"\bbulk\s+assign\b",
            r"\bmove\s+(all|multiple|many)\s+to\s+\w+",
        ),
        priority=88,
        description="Bulk assign multiple tickets",
        requires_context=True,
        requires_confirmation=True,
    ),
    QueryPattern(
        intent=Intent.DELETE_TICKET,
        category="deletion",
        patterns=_compile(
            r"\b(delete|remove|trash)\s+(the\s+)?(ticket|issue)\b",
            r"\b(get rid of|discard)\s+(the\s+)?(ticket|issue)\b",
        ),
        priority=86,
        description="Delete a ticket",
        requires_context=True,
        requires_confirmation=True,
    ),
    QueryPattern(
        intent=Intent.MARK_SPAM,
        category="deletion",
        patterns=_compile(
            r"\b(mark|flag|label)\s+(as\s+)?spam\b",
            r"\b(spam|junk)\s+(ticket|this)\b",
            r"\bis\s+spam\b",
        ),
        priority=86,
        description="Mark a ticket as spam",
        requires_context=True,
        requires_confirmation=True,
    ),
    QueryPattern(
        intent=Intent.RESTORE_TICKET,
        category="deletion",
        patterns=_compile(
            r"\b(restore|recover|undelete|bring back)\s+(the\s+)?(ticket|issue)\b",
        ),
        priority=86,
        description="Restore a deleted ticket",
    ),
    QueryPattern(
        intent=Intent.UPDATE_STATUS,
        category="status",
        patterns=_compile(
            r"\b(close|solve|resolve|finish|complete)\s+(the\s+)?(ticket|issue)\b",
            r"\b(mark|set|update|change)\s+(as|to|status)\s+(closed|solved|open|pending|new)\b",
            r"\b(reopen|re-open)\s+(the\s+)?(ticket|issue)\b",
            r"\bset\s+status\s+(to|as)\s+\w+",
            r"\bstatus\s+(to|should be)\s+\w+",
        ),
        priority=84,
        description="Change a ticket's status",
        requires_context=True,
    ),
    QueryPattern(
        intent=Intent.UPDATE_PRIORITY,
        category="priority",
        patterns=_compile(
            r"\b(set|change|update|mark)\s+(priority|importance|urgency)\s+(to|as)\s+(urgent|high|normal|low)\b",
            r"\b(make|mark)\s+(it\s+)?(urgent|high|normal|low)\s+priority\b",
            r"\bpriority\s+(to|should be)\s+(urgent|high|normal|low)\b",
            r"\b(escalate|raise|increase|bump)\s+(the\s+)?priority\b",
            r"\b(de-escalate|lower|decrease|reduce)\s+(the\s+)?priority\b",
        ),
        priority=84,
        description="Change a ticket's priority",
        requires_context=True,
    ),
    QueryPattern(
        intent=Intent.ASSIGN_TO_GROUP,
        category="assignment",
        patterns=_compile(
            r"\bassign\s+to\s+(the\s+)?(\w+\s+)?group\b",
            r"\bset\s+group\s+(to|as)\b",
            r"\bmove\s+to\s+(\w+\s+)?group\b",
        ),
        priority=83,
        description="Assign a ticket to an agent group",
        requires_context=True,
    ),
    QueryPattern(
        intent=Intent.ASSIGN_TICKET,
        category="assignment",
        patterns=_compile(
            r"\b(assign|delegate|transfer)\s+(it\s+|this\s+|ticket\s+)?to\b",
            r"\bset\s+assignee\s+(to|as)\b",
            r"\bmake\s+\w+\s+(the\s+)?assignee\b",
        ),
        priority=82,
        description="Assign a ticket to an agent",
        requires_context=True,
    ),
    QueryPattern(
        intent=Intent.REMOVE_TAGS,
        category="tags",
        patterns=_compile(
            r"\b(remove|delete|untag|clear)\s+(the\s+)?(tag|label)s?\b",
        ),
        priority=81,
        description="Remove tags from a ticket",
        requires_context=True,
    ),
    QueryPattern(
        intent=Intent.ADD_TAGS,
        category="tags",
        patterns=_compile(
            r"\b(add|attach|apply|include)\s+(the\s+)?(tag|label)s?\b",
            r"^\s*tag\s+(it\s+|this\s+)?(with|as)\b",
            r"\b(label|tag)\s+(it|this|that)\s+(as|with)\b",
        ),
        priority=80,
        description="Add tags to a ticket",
        requires_context=True,
    ),
    QueryPattern(
        intent=Intent.REMOVE_CC,
        category="collaboration",
        patterns=_compile(
            r"\b(remove|delete)\s+(cc|collaborator)\b",
            r"\buncc\s",
            r"\bremove\s+\S+@\S+\s+from\s+(cc|collaborators?)",
        ),
        priority=79,
        description="Remove a CC from a ticket",
        requires_context=True,
    ),
    QueryPattern(
        intent=Intent.ADD_CC,
        category="collaboration",
        patterns=_compile(
            r"\b(add|include|cc)\s+(user|email|person|someone)\b",
            r"\bcc\s+\S+@\S+",
            r"\badd\s+collaborator\b",
        ),
        priority=78,
        description="Add a CC to a ticket",
        requires_context=True,
    ),
    QueryPattern(
        intent=Intent.CREATE_TICKET,
        category="creation",
        patterns=_compile(
            r"\b(create|make|submit)\s+(a\s+)?(new\s+)?(ticket|issue)\b",
            r"\b(file|log|report)\s+(a\s+)?(ticket|bug|problem)\b",
        ),
        priority=77,
        description="Create a new ticket",
    ),
    # Retrieval by identifier
    QueryPattern(
        intent=Intent.TICKET_BY_ID,
        category="retrieval",
        patterns=_compile(
            r"\b(show|display|get|view|find|open)\s+(ticket\s*)?#?\d+\b",
            r"\bticket\s*#?\d+\b",
            r"(?<!\w)#\d+\b",
        ),
        priority=70,
        description="Look up a ticket by ID (e.g. 'show ticket #473')",
    ),
    # Analytics answered from aggregates
    QueryPattern(
        intent=Intent.PRIORITY_BREAKDOWN,
        category="analytics",
        patterns=_compile(
            r"\bpriority\s+(breakdown|summary|distribution|stats)\b",
            r"\bhow many\s+(urgent|high|normal|low)\b",
            r"\bcount\s+by\s+priority\b",
        ),
        priority=65,
        description="Break tickets down by priority",
    ),
    QueryPattern(
        intent=Intent.TICKET_STATUS,
        category="analytics",
        patterns=_compile(
            r"\bhow many\s+(tickets?\s+are\s+)?(open|closed|pending|solved|new)\b",
            r"^(how many|count|total)\b.*\b(tickets?|issues?)\b.*\b(open|closed?|pending|solved|on.hold|new)\b",
            r"\b(status|ticket)\s+(breakdown|summary|distribution|stats|statistics)\b",
            r"\bcount\s+by\s+status\b",
        ),
        priority=64,
        description="Count tickets by status (e.g. 'how many tickets are open?')",
    ),
    QueryPattern(
        intent=Intent.TICKET_COUNT,
        category="analytics",
        patterns=_compile(
            r"\bhow many\s+(total\s+)?(tickets?|issues?|conversations?)\b",
            r"\b(ticket|issue)\s+count\b",
            r"\bnumber of\s+(tickets?|conversations?)\b",
            r"\bcount\s+(all\s+)?(tickets?|issues?)\b",
        ),
        priority=62,
        description="Total ticket count",
    ),
    QueryPattern(
        intent=Intent.AGE_ANALYSIS,
        category="analytics",
        patterns=_compile(
            r"\b(old|oldest|aging|stale)\s+(tickets?|issues?)\b",
            r"\btickets?\s+older than\b",
            r"\b(age|aging)\s+(analysis|report|breakdown)\b",
            r"\bhow long\s+have\s+tickets\s+been\s+open\b",
        ),
        priority=60,
        description="Analyze ticket age",
    ),
    QueryPattern(
        intent=Intent.ANALYTICS,
        category="analytics",
        patterns=_compile(
            r"^(show|what's|whats|what is|display)\b.*\b(statistics?|metrics?|average|totals?|counts?|performance|analytics|summary)\b",
            r"^\s*(stats|statistics|overview|dashboard)\s*$",
        ),
        priority=55,
        description="Overall statistics and metrics",
    ),
    QueryPattern(
        intent=Intent.PROBLEM_AREAS,
        category="analytics",
        patterns=_compile(
            r"\b(areas?|topics?|categor(y|ies))\b.*\b(need|attention|focus|issues?|problems?)\b",
            r"\b(common|top|recurring|biggest)\s+(issues?|problems?|complaints?)\b",
        ),
        priority=54,
        description="Find areas that need attention",
    ),
    # Retrieval
    QueryPattern(
        intent=Intent.RAW_DATA,
        category="retrieval",
        patterns=_compile(
            r"^(show|display|return)\s+(me\s+)?(the\s+)?(raw|json)\b",
            r"\braw\s+(data|json|response)\b",
        ),
        priority=53,
        description="Show raw data",
    ),
    QueryPattern(
        intent=Intent.RECENT_TICKETS,
        category="retrieval",
        patterns=_compile(
            r"^(show|get|list)\s+(me\s+)?(the\s+)?(last|recent|latest|newest)\b.*\b(convos?|conversations?|tickets?|messages?|activity|updates?)\b",
            r"^(last|recent|latest|newest)\b.*\b(convos?|conversations?|tickets?|messages?|activity|updates?)\b",
        ),
        priority=50,
        description="Most recent tickets or conversations",
    ),
    QueryPattern(
        intent=Intent.TICKET_FILTER,
        category="retrieval",
        patterns=_compile(
            r"^(show|list|get|display|find)\s+(me\s+)?(all\s+)?(urgent|high|normal|low|open|closed|pending|solved|new)\b.*\b(tickets?|issues?)\b",
            r"\b(search|find|filter|lookup)\s+(for\s+)?(tickets?|issues?)\b",
            r"\btickets?\s+(with|containing|about|regarding|matching|tagged)\b",
            r"\b(urgent|high|low|normal)\s+priority\s+tickets?\b",
            r"\b(open|closed|pending|solved)\s+tickets?\b",
            r"\btickets?\b.*\b(status|priority|type|assignee|tag|organization)\b",
        ),
        priority=45,
        description="Tickets matching filters (status, priority, tags, ...)",
    ),
    QueryPattern(
        intent=Intent.TICKET_LIST,
        category="retrieval",
        patterns=_compile(
            r"\b(show|list|display|get|view|find)\s+(all\s+)?(my\s+)?(support\s+)?(tickets?|issues?)\b",
            r"\b(what|which)\s+tickets?\b",
            r"\btop\s+\d+\s+tickets?\b",
        ),
        priority=40,
        description="List tickets",
    ),
    QueryPattern(
        intent=Intent.USER_QUERY,
        category="users",
        patterns=_compile(
            r"\b(find|show|list)\b.*\b(users?|agents?|contacts?)\b",
            r"\bwho\s+(are|is)\s+(the\s+)?(users?|agents?)\b",
        ),
        priority=35,
        description="Support agents and users",
    ),
    QueryPattern(
        intent=Intent.ORGANIZATION_QUERY,
        category="organization",
        patterns=_compile(
            r"\b(find|show|list)\b.*\b(organizations?|orgs?|customers?|accounts?|compan(y|ies))\b",
            r"\bwhat\s+organizations?\b",
        ),
        priority=34,
        description="Customer organizations",
    ),
    QueryPattern(
        intent=Intent.CHAT_QUERY,
        category="channels",
        patterns=_compile(r"\b(chat|conversation|message)s?\b.*\b(session|history|active)\b"),
        priority=33,
        description="Chat sessions and history",
    ),
    QueryPattern(
        intent=Intent.CALL_QUERY,
        category="channels",
        patterns=_compile(r"\b(call|phone|voice)s?\b.*\b(log|history|missed|incoming|outgoing)\b"),
        priority=32,
        description="Call logs",
    ),
    QueryPattern(
        intent=Intent.HELP_ARTICLE,
        category="knowledge",
        patterns=_compile(r"\b(find|search)\b.*\b(articles?|knowledge|docs?|faqs?)\b"),
        priority=31,
        description="Help center articles",
    ),
    QueryPattern(
        intent=Intent.AUTOMATION,
        category="automation",
        patterns=_compile(r"\b(show|list|create)\b.*\b(automations?|rules?|workflows?|macros?)\b"),
        priority=30,
        description="Automations, rules and macros",
    ),
]

# Highest priority first; sorted() is stable so equal priorities keep source order.
PATTERN_LIBRARY: tuple[QueryPattern, ...] = tuple(sorted(_ENTRIES, key=lambda entry: -entry.priority))


def get_pattern(intent: Intent) -> QueryPattern | None:
    """Return the library entry for ``intent``, if any."""
    for entry in PATTERN_LIBRARY:
        if entry.intent == intent:
            return entry
    return None
