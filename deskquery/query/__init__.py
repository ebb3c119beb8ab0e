"""Query interpretation and answering module."""

from .cache import InterpretationCache
from .classifier import (
    check_query_length,
    classify,
    collapse_whitespace,
    extract_filters,
    match_patterns,
    normalize_query,
    validate_query,
)
from .interpreter import GroundedAnswerer, ModelInterpretation, ModelInterpreter
from .models import (
    CONFIDENCE_THRESHOLD,
    DEGRADED_CONFIDENCE_FLOOR,
    PATTERN_CONFIDENCE,
    ConversationContext,
    Intent,
    InterpretationMethod,
    InterpretationResult,
    QueryPattern,
    QueryResult,
)
from .orchestrator import FallbackOrchestrator
from .patterns import PATTERN_LIBRARY, get_pattern
from .processor import QueryProcessor, format_stats

__all__ = [
    "CONFIDENCE_THRESHOLD",
    "DEGRADED_CONFIDENCE_FLOOR",
    "PATTERN_CONFIDENCE",
    "PATTERN_LIBRARY",
    "ConversationContext",
    "FallbackOrchestrator",
    "GroundedAnswerer",
    "Intent",
    "InterpretationCache",
    "InterpretationMethod",
    "InterpretationResult",
    "ModelInterpretation",
    "ModelInterpreter",
    "QueryPattern",
    "QueryProcessor",
    "QueryResult",
    "check_query_length",
    "classify",
    "collapse_whitespace",
    "extract_filters",
    "format_stats",
    "get_pattern",
    "match_patterns",
    "normalize_query",
    "validate_query",
]
