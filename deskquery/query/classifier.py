"""Pattern-based query classification and filter extraction.

Everything in this module is pure: no I/O and no exceptions for any string
input. Validation of untrusted input is a separate step, see
:func:`validate_query`.
"""

import re
from collections.abc import Callable
from typing import Any

from deskquery.errors import ValidationError

from .models import PATTERN_CONFIDENCE, Intent, InterpretationResult, QueryPattern
from .patterns import PATTERN_LIBRARY

MIN_QUERY_LENGTH = 3
DEFAULT_MAX_QUERY_LENGTH = 500

_INJECTION_CHARS = re.compile(r"[;'\"`<>]")
_WHITESPACE = re.compile(r"\s+")

# Words that follow "from" in date phrases rather than organization names
_NOT_AN_ORGANIZATION = r"(?:the|last|past|this|next|today|yesterday|previous|recent|me|my|us|our|\d+)\b"
_NAME_WORD = r"[a-z][\w&.-]*"
_ORGANIZATION_AFTER_FROM = re.compile(
    rf"\bfrom\s+(?!{_NOT_AN_ORGANIZATION})({_NAME_WORD}(?:\s+(?!{_NOT_AN_ORGANIZATION}|"
    rf"(?:in|on|at|with|for|since|and|or|tickets?|issues?)\b){_NAME_WORD})?)",
    re.IGNORECASE,
)

_CONTAINS_STOP_WORDS = {"from", "in", "on", "with", "for", "since", "that", "and", "or", "last", "this", "today"}

_EMAIL = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")


def collapse_whitespace(query: str) -> str:
    """Trim and collapse runs of whitespace to a single space."""
    return _WHITESPACE.sub(" ", query.strip())


def normalize_query(query: str) -> str:
    """Lowercase, trim and collapse internal whitespace."""
    return collapse_whitespace(query).lower()


def check_query_length(query: str, max_length: int = DEFAULT_MAX_QUERY_LENGTH) -> str:
    """Reject non-strings and queries outside the accepted length range.

    Returns:
        The stripped query
    """
    if not isinstance(query, str):
        raise ValidationError("Query must be a string")

    stripped = query.strip()
    if len(stripped) < MIN_QUERY_LENGTH:
        raise ValidationError("Query too short")
    if len(stripped) > max_length:
        raise ValidationError(f"Query too long (max {max_length} characters)")
    return stripped


def validate_query(query: str, max_length: int = DEFAULT_MAX_QUERY_LENGTH) -> str:
    """Check untrusted input before it reaches the engine.

    Stricter than :func:`check_query_length`: apostrophes and quotes are
    rejected too, so this is not suitable for natural-language questions
    arriving over HTTP.

    Returns:
        The stripped query

    Raises:
        ValidationError: If the query is too short, too long or contains
            characters associated with injection attempts
    """
    stripped = check_query_length(query, max_length)
    if _INJECTION_CHARS.search(stripped):
        raise ValidationError("Query contains suspicious characters")
    return stripped


def _extract_ticket_id(query: str) -> int | None:
    match = re.search(r"(?:\bticket\s*#?|(?<!\w)#)(\d+)\b", query, re.IGNORECASE)
    return int(match.group(1)) if match else None


def _extract_status(query: str) -> str | None:
    match = re.search(r"\b(open|closed|pending|solved|on[- ]hold)\b", query, re.IGNORECASE)
    if not match:
        return None
    status = match.group(1).lower()
    return "hold" if status.startswith("on") else status


def _extract_priority(query: str) -> str | None:
    match = re.search(r"\b(urgent|high|normal|low)[\s-]+priority\b", query, re.IGNORECASE)
    if match:
        return match.group(1).lower()

    match = re.search(r"\bpriority\s*(?:is|of|=|:)?\s*(urgent|high|normal|low)\b", query, re.IGNORECASE)
    if match:
        return match.group(1).lower()

    if re.search(r"\b(urgent|critical)\b", query, re.IGNORECASE):
        return "urgent"

    # Bare "high"/"low" only when qualifying the items themselves
    match = re.search(r"\b(high|normal|low)\s+(tickets?|issues?|conversations?)\b", query, re.IGNORECASE)
    if match:
        return match.group(1).lower()
    return None


def _extract_type(query: str) -> str | None:
    match = re.search(r"\b(problem|incident|question|task)\b", query, re.IGNORECASE)
    return match.group(1).lower() if match else None


def _extract_assignee(query: str) -> str | None:
    if re.search(r"\b(assigned to me|my tickets|for me)\b", query, re.IGNORECASE):
        return "me"
    match = re.search(r"\bassigned to\s+(\w+)", query, re.IGNORECASE)
    return match.group(1) if match else None


def _extract_organization(query: str) -> str | None:
    match = re.search(r"\borganization:\s*(\S+)", query, re.IGNORECASE)
    if match:
        return match.group(1)
    match = _ORGANIZATION_AFTER_FROM.search(query)
    return match.group(1) if match else None


def _extract_created_date(query: str) -> str | None:
    if re.search(r"\b(today|(last|past)\s+24\s+hours?)\b", query, re.IGNORECASE):
        return "today"
    if re.search(r"\b(this\s+week|(last|past)\s+(7\s+days?|week)|7d)\b", query, re.IGNORECASE):
        return "this_week"
    if re.search(r"\b(this\s+month|(last|past)\s+(30\s+days?|month)|30d)\b", query, re.IGNORECASE):
        return "this_month"
    return None


def _extract_age_filter(query: str) -> str | None:
    match = re.search(
        r"\b(older than|not updated (?:in|for))\s+\d+\s*(hours?|days?|weeks?|months?)\b",
        query,
        re.IGNORECASE,
    )
    return match.group(0).lower() if match else None


def _extract_tags(query: str) -> list[str] | None:
    match = re.search(r"\btag(?:ged)?\s+(?:with|as)\s+[\"']?([\w-]+)", query, re.IGNORECASE)
    if match:
        return [match.group(1).lower()]
    match = re.search(r"\btag(?:ged|s)?\s*[:=]\s*([\w,-]+)", query, re.IGNORECASE)
    if match:
        return [tag.lower() for tag in match.group(1).split(",") if tag]
    return None


def _extract_contains(query: str) -> str | None:
    match = re.search(r"[\"']([^\"']+)[\"']", query)
    if match:
        return match.group(1)

    match = re.search(r"\b(?:mentioning|containing|about|regarding)\s+(\w+(?:\s+\w+)?)", query, re.IGNORECASE)
    if not match:
        return None
    words = match.group(1).split()
    while words and words[-1].lower() in _CONTAINS_STOP_WORDS:
        words.pop()
    return " ".join(words) or None


def _extract_emails(query: str) -> list[str] | None:
    return _EMAIL.findall(query) or None


# Order matters only within a key; each key takes its first successful extractor.
FILTER_EXTRACTORS: tuple[tuple[str, Callable[[str], Any]], ...] = (
    ("ticket_id", _extract_ticket_id),
    ("status", _extract_status),
    ("priority", _extract_priority),
    ("type", _extract_type),
    ("assignee", _extract_assignee),
    ("organization", _extract_organization),
    ("created_date", _extract_created_date),
    ("age_filter", _extract_age_filter),
    ("tags", _extract_tags),
    ("contains", _extract_contains),
    ("emails", _extract_emails),
)


def extract_filters(query: str) -> dict[str, Any]:
    """Pull structured filters out of a query, independent of its intent."""
    filters: dict[str, Any] = {}
    for key, extractor in FILTER_EXTRACTORS:
        if key in filters:
            continue
        value = extractor(query)
        if value is not None:
            filters[key] = value
    return filters


def match_patterns(query: str) -> list[QueryPattern]:
    """Every library entry that matches ``query``, highest priority first."""
    if not isinstance(query, str):
        return []
    text = collapse_whitespace(query)
    return [entry for entry in PATTERN_LIBRARY if entry.matches(text)]


def classify(query: str) -> InterpretationResult:
    """Classify a query against the pattern library.

    The first matching entry (by priority) wins with a fixed confidence;
    no match yields ``unknown`` with confidence 0. Filters are extracted
    either way so they can serve as hints for the model path.
    """
    text = collapse_whitespace(query) if isinstance(query, str) else ""
    filters = extract_filters(text)

    for entry in PATTERN_LIBRARY:
        if entry.matches(text):
            return InterpretationResult(
                intent=entry.intent,
                filters=filters,
                confidence=PATTERN_CONFIDENCE,
                reasoning=f"Pattern match for {entry.intent.value}",
            )

    return InterpretationResult(
        intent=Intent.UNKNOWN,
        filters=filters,
        confidence=0.0,
        reasoning="No pattern matched",
    )
