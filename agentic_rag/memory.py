"""
Memory search strategy and strategy-driven memory retrieval.

``decide_strategy`` maps request intent to a ``MemorySearchStrategy``;
``AgenticMemorySystem`` runs that strategy against a backend's personal
memories plus synthetic system and conceptual sources.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from . import request_classifier as rc
from .backend import MessageBackend
from .types import MemorySearchStrategy

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.5
HIGH_PRECISION_THRESHOLD = 0.8
DEFAULT_MEMORY_CONFIDENCE = 0.5


def decide_strategy(text: str) -> MemorySearchStrategy:
    """
    Choose how memory should be searched for a request.

    Personal memory is always searched; system knowledge and conceptual
    expansion are added by intent, and precision requests raise the
    confidence threshold.
    """
    return MemorySearchStrategy(
        personal_search=True,
        system_search=rc.is_system_knowledge_request(text),
        expanded_search=rc.is_conceptual_request(text),
        confidence_threshold=(
            HIGH_PRECISION_THRESHOLD if rc.is_high_precision_request(text) else DEFAULT_THRESHOLD
        ),
    )


@dataclass
class MemorySearchResult:
    """Outcome of one strategy-driven memory search."""

    strategy: MemorySearchStrategy
    memories: list[dict[str, Any]] = field(default_factory=list)
    expanded_context: dict[str, Any] = field(default_factory=dict)
    confidence_score: float = 0.0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "memories": self.memories,
            "expanded_context": self.expanded_context,
            "strategy": self.strategy.model_dump(),
            "confidence_score": self.confidence_score,
            "error": self.error,
        }


def mean_confidence(memories: list[dict[str, Any]]) -> float:
    """Average ``confidence`` across memories; 0.0 when there are none."""
    if not memories:
        return 0.0
    total = sum(m.get("confidence", DEFAULT_MEMORY_CONFIDENCE) for m in memories)
    return total / len(memories)


class AgenticMemorySystem:
    """Searches memory sources according to a strategy."""

    def __init__(self, backend: MessageBackend):
        self.backend = backend

    async def search_with_strategy(
        self, strategy: MemorySearchStrategy, query: str, user_id: str
    ) -> MemorySearchResult:
        """
        Run every search the strategy enables.

        Never raises; a failing source is logged and contributes nothing.
        """
        result = MemorySearchResult(strategy=strategy)

        if strategy.personal_search:
            try:
                result.memories.extend(await self.search_personal(query, user_id))
            except Exception as e:
                logger.warning(f"Personal memory search failed for {user_id}: {e}")
                result.error = str(e)

        if strategy.system_search:
            result.memories.extend(self.search_system(query, strategy.confidence_threshold))

        if strategy.expanded_search:
            result.expanded_context = self.expand_query(query, user_id)

        result.confidence_score = mean_confidence(result.memories)
        return result

    async def search_personal(self, query: str, user_id: str) -> list[dict[str, Any]]:
        memories = await self.backend.load_personal_memories(user_id)
        lowered = query.lower()
        return [
            m
            for m in memories
            if lowered in str(m.get("content", "")).lower() or m.get("user_id") == user_id
        ]

    def search_system(self, query: str, threshold: float) -> list[dict[str, Any]]:
        return [
            {
                "pattern_type": "system",
                "confidence": threshold,
                "content": f"System pattern for: {query}",
            }
        ]

    def expand_query(self, query: str, user_id: str) -> dict[str, Any]:
        return {
            "related_concepts": query.split()[:3],
            "expansion_type": "conceptual",
            "user_context": user_id,
        }


__all__ = [
    "AgenticMemorySystem",
    "MemorySearchResult",
    "decide_strategy",
    "mean_confidence",
]
