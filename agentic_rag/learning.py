"""
Cross-session learning.

Turns a session's successful interactions and failures into stored
success patterns, avoidance strategies and adapted preferences. The
store is bounded; the oldest entries are evicted first.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .config import LearningConfig

logger = logging.getLogger(__name__)

DEFAULT_USER_SATISFACTION = 0.8
EMPTY_HISTORY_SUCCESS_RATE = 0.8


@dataclass
class SessionData:
    """Everything the learner sees about one session."""

    user_id: str
    successful_interactions: list[dict[str, Any]] = field(default_factory=list)
    failures: list[dict[str, Any]] = field(default_factory=list)
    success_rate: float | None = None
    preferred_response_style: str | None = None
    preferred_pace: str | None = None
    preferred_support_level: str | None = None


@dataclass
class LearningSummary:
    """Result of one learning pass."""

    improved_accuracy: bool
    pattern_count: int = 0
    adaptation_level: str = "autonomous"
    success_rate: float = 0.0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.error is not None:
            return {"improved_accuracy": self.improved_accuracy, "error": self.error}
        return {
            "improved_accuracy": self.improved_accuracy,
            "pattern_count": self.pattern_count,
            "adaptation_level": self.adaptation_level,
            "success_rate": self.success_rate,
        }


def calculate_success_rate(history: Sequence[Any]) -> float:
    """
    Fraction of decisions in ``history`` marked successful.

    Returns 0.8 for an empty history.
    """
    if not history:
        return EMPTY_HISTORY_SUCCESS_RATE
    successes = sum(1 for decision in history if getattr(decision, "success", False))
    return successes / len(history)


class CrossSessionLearner:
    """
    Accumulates learning patterns across sessions.

    Args:
        config: Learning configuration (store bound, default success rate)
    """

    def __init__(self, config: LearningConfig | None = None):
        self.config = config or LearningConfig()
        self._patterns: OrderedDict[str, dict[str, Any]] = OrderedDict()
        self._sequence = 0

    def learn(self, session_data: SessionData) -> LearningSummary:
        """
        Learn from one session.

        Never raises; a failure produces a summary with
        ``improved_accuracy=False`` and the error message.
        """
        try:
            success_patterns = self._extract_success_patterns(session_data)
            avoidance = self._create_avoidance_strategies(session_data.failures)
            preferences = self._adapt_to_preferences(session_data)
            self._store(success_patterns, avoidance, preferences)

            success_rate = session_data.success_rate
            if success_rate is None:
                success_rate = self.config.default_success_rate

            logger.info(
                f"Learned {len(success_patterns)} success patterns and "
                f"{len(avoidance)} avoidance strategies for {session_data.user_id}"
            )
            return LearningSummary(
                improved_accuracy=True,
                pattern_count=len(success_patterns),
                adaptation_level="autonomous",
                success_rate=success_rate,
            )
        except Exception as e:
            logger.error(f"Cross-session learning failed: {e}")
            return LearningSummary(improved_accuracy=False, error=str(e))

    def _extract_success_patterns(self, session_data: SessionData) -> list[dict[str, Any]]:
        patterns = []
        for interaction in session_data.successful_interactions:
            patterns.append(
                {
                    "pattern_type": interaction.get("type", interaction.get("decision_type")),
                    "context": interaction.get("context", interaction.get("trigger_context")),
                    "success_indicators": interaction.get("success_indicators"),
                    "user_satisfaction": interaction.get(
                        "user_satisfaction", DEFAULT_USER_SATISFACTION
                    ),
                }
            )
        return patterns

    def _create_avoidance_strategies(
        self, failures: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        return [
            {
                "failure_type": failure.get("type"),
                "avoidance_strategy": failure.get("suggested_avoidance"),
                "context_markers": failure.get("context_markers"),
            }
            for failure in failures
        ]

    def _adapt_to_preferences(self, session_data: SessionData) -> dict[str, str]:
        return {
            "response_style": session_data.preferred_response_style or "detailed",
            "interaction_pace": session_data.preferred_pace or "moderate",
            "support_level": session_data.preferred_support_level or "caring",
        }

    def _store(
        self,
        success_patterns: list[dict[str, Any]],
        avoidance: list[dict[str, Any]],
        preferences: dict[str, str],
    ) -> None:
        self._sequence += 1
        key = f"learning_{int(time.time() * 1000)}_{self._sequence}"
        self._patterns[key] = {
            "success_patterns": success_patterns,
            "avoidance_strategies": avoidance,
            "user_preferences": preferences,
            "last_updated": datetime.now(),
        }

        # Evict oldest entries
        while len(self._patterns) > self.config.max_entries:
            self._patterns.popitem(last=False)

    def pattern_count(self) -> int:
        """Number of stored learning entries."""
        return len(self._patterns)

    def latest_preferences(self) -> dict[str, str] | None:
        if not self._patterns:
            return None
        return next(reversed(self._patterns.values()))["user_preferences"]

    def get_statistics(self) -> dict[str, Any]:
        """Get learner statistics."""
        success_total = sum(len(e["success_patterns"]) for e in self._patterns.values())
        avoidance_total = sum(len(e["avoidance_strategies"]) for e in self._patterns.values())
        return {
            "entries": len(self._patterns),
            "max_entries": self.config.max_entries,
            "success_patterns": success_total,
            "avoidance_strategies": avoidance_total,
        }


__all__ = [
    "CrossSessionLearner",
    "LearningSummary",
    "SessionData",
    "calculate_success_rate",
]
