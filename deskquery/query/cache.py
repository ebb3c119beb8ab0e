"""Process-local cache of query interpretations."""

import logging
from collections import OrderedDict

from .classifier import normalize_query
from .models import InterpretationResult

logger = logging.getLogger(__name__)


class InterpretationCache:
    """Interpretations keyed on the normalized query string.

    Unbounded unless ``max_size`` is given, in which case the least recently
    used entry is evicted once the cache is full.
    """

    def __init__(self, max_size: int | None = None) -> None:
        if max_size is not None and max_size < 1:
            raise ValueError("max_size must be positive")
        self._max_size = max_size
        self._store: OrderedDict[str, InterpretationResult] = OrderedDict()

    @staticmethod
    def key_for(query: str) -> str:
        return f"query:{normalize_query(query)}"

    def get(self, query: str) -> InterpretationResult | None:
        key = self.key_for(query)
        result = self._store.get(key)
        if result is None:
            return None
        if self._max_size is not None:
            self._store.move_to_end(key)
        logger.debug(f"Interpretation cache hit for '{query[:60]}'")
        return result

    def put(self, query: str, result: InterpretationResult) -> None:
        key = self.key_for(query)
        self._store[key] = result
        if self._max_size is None:
            return
        self._store.move_to_end(key)
        while len(self._store) > self._max_size:
            self._store.popitem(last=False)

    def clear(self) -> None:
        self._store.clear()

    @property
    def size(self) -> int:
        return len(self._store)

    @property
    def max_size(self) -> int | None:
        return self._max_size
