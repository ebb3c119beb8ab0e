"""Two-tier interpretation: patterns first, the model only when they are unsure."""

import logging
from collections.abc import Callable

from deskquery.errors import ModelError

from .cache import InterpretationCache
from .classifier import classify, collapse_whitespace
from .interpreter import ModelInterpreter
from .models import (
    CONFIDENCE_THRESHOLD,
    DEGRADED_CONFIDENCE_FLOOR,
    InterpretationMethod,
    InterpretationResult,
)

logger = logging.getLogger(__name__)


class FallbackOrchestrator:
    """Routes each query to the cheapest interpretation that can be trusted.

    Cached results are returned as-is. Confident pattern matches are cached
    and returned without touching the model. Everything else goes to the
    model; if that fails, the pattern result is returned with a floored
    confidence and is not cached, so the model is tried again next time.
    """

    def __init__(
        self,
        interpreter: ModelInterpreter | None,
        cache: InterpretationCache | None = None,
        threshold: float = CONFIDENCE_THRESHOLD,
        degraded_floor: float = DEGRADED_CONFIDENCE_FLOOR,
        classifier: Callable[[str], InterpretationResult] = classify,
    ):
        self.interpreter = interpreter
        self.cache = cache if cache is not None else InterpretationCache()
        self.threshold = threshold
        self.degraded_floor = degraded_floor
        self.classifier = classifier

    def _degrade(self, pattern_result: InterpretationResult, why: str) -> InterpretationResult:
        return InterpretationResult(
            intent=pattern_result.intent,
            filters=pattern_result.filters,
            confidence=max(self.degraded_floor, pattern_result.confidence),
            method=InterpretationMethod.PATTERN_MATCH,
            reasoning=f"Pattern match ({why}) for {pattern_result.intent.value}",
            degraded=True,
        )

    async def interpret(self, query: str) -> InterpretationResult:
        cached = self.cache.get(query)
        if cached is not None:
            return cached

        # Classify the same spelling the cache key is derived from
        pattern_result = self.classifier(collapse_whitespace(query))
        if pattern_result.confidence >= self.threshold:
            pattern_result.method = InterpretationMethod.PATTERN_MATCH
            self.cache.put(query, pattern_result)
            return pattern_result

        if self.interpreter is None:
            return self._degrade(pattern_result, "model unavailable")

        logger.info(f"Pattern match confidence low ({pattern_result.confidence}), asking the model")
        try:
            interpretation = await self.interpreter.ask_model(query)
        except ModelError as e:
            logger.warning(f"Model interpretation failed ({e.kind.value}): {e}")
            return self._degrade(pattern_result, "model fallback")

        # Model filters win; pattern filters fill the gaps
        result = InterpretationResult(
            intent=interpretation.intent,
            filters={**pattern_result.filters, **interpretation.filters},
            confidence=interpretation.confidence,
            method=InterpretationMethod.AI,
            reasoning=interpretation.reasoning,
        )
        self.cache.put(query, result)
        return result

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Interpretation cache cleared")
