"""
Signal-driven model selection.

Routes a request to an ordered list of specialist models from the
registry based on:
- Reasoning, speed and creativity signals
- Context size requirements
- Code and integration signals

The orchestrator model always leads the list.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from . import request_classifier as rc
from .config import RoutingConfig
from .model_registry import (
    CODE_MODEL,
    CONTEXT_MODEL,
    CREATIVE_MODEL,
    DEEP_THINKER_MODEL,
    INTEGRATION_MODEL,
    MODEL_REGISTRY,
    ORCHESTRATOR_MODEL,
    SPEED_MODEL,
    ModelProfile,
    available_models,
    fastest_models,
    get_model,
    models_by_capability,
    most_capable_models,
)
from .types import ModelCapability, UnknownModelError

logger = logging.getLogger(__name__)

# Signal -> model, in routing priority order
ROUTING_PRIORITY: tuple[tuple[str, Callable[[str], bool], str], ...] = (
    ("reasoning", rc.needs_complex_reasoning, DEEP_THINKER_MODEL),
    ("speed", rc.needs_speed, SPEED_MODEL),
    ("creativity", rc.needs_creativity, CREATIVE_MODEL),
    ("large_context", rc.needs_large_context, CONTEXT_MODEL),
    ("code", rc.needs_code_specialist, CODE_MODEL),
    ("integration", rc.needs_integration, INTEGRATION_MODEL),
)

# Strategy phrase per model, in description order
ORCHESTRA_STRATEGIES: tuple[tuple[str, str], ...] = (
    (ORCHESTRATOR_MODEL, "Strategic orchestration"),
    (DEEP_THINKER_MODEL, "Complex reasoning analysis"),
    (SPEED_MODEL, "Ultra-fast processing"),
    (CREATIVE_MODEL, "Creative solution generation"),
    (CONTEXT_MODEL, "Massive context processing"),
    (CODE_MODEL, "Precision code analysis"),
    (INTEGRATION_MODEL, "System integration planning"),
)

DEFAULT_SATISFACTION = 0.85


@dataclass
class ModelPerformance:
    """Running performance averages for one model."""

    total_requests: int = 0
    average_response_time_ms: float = 0.0
    average_satisfaction: float = 0.0
    last_updated: datetime | None = None

    def record(self, response_time_ms: float, satisfaction: float) -> None:
        self.total_requests += 1
        n = self.total_requests
        self.average_response_time_ms += (response_time_ms - self.average_response_time_ms) / n
        self.average_satisfaction += (satisfaction - self.average_satisfaction) / n
        self.last_updated = datetime.now()

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_requests": self.total_requests,
            "average_response_time_ms": self.average_response_time_ms,
            "average_satisfaction": self.average_satisfaction,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
        }


class IntelligentModelRouter:
    """
    Select specialist models for a request.

    Considers:
    - Classifier signals in a fixed priority order
    - A maximum list size
    - Observed per-model performance (reported, not yet used for ranking)
    """

    def __init__(self, config: RoutingConfig | None = None):
        self.config = config or RoutingConfig()
        self._performance: dict[str, ModelPerformance] = {}
        self._routing_history: deque[dict[str, Any]] = deque(
            maxlen=self.config.routing_history_limit
        )
        self._total_routes = 0
        self._by_model: dict[str, int] = {}
        self._by_signal: dict[str, int] = {}

    def matched_signals(self, request: str) -> list[str]:
        """Names of routing signals that fire for a request."""
        return [name for name, predicate, _ in ROUTING_PRIORITY if predicate(request)]

    def select_models(
        self,
        request: str,
        context: dict[str, Any] | None = None,
        max_models: int | None = None,
    ) -> list[str]:
        """
        Select models for a request.

        Args:
            request: The request text
            context: Optional request context (unused by the heuristics)
            max_models: Cap on list size; defaults to the configured cap

        Returns:
            Non-empty, duplicate-free list starting with the orchestrator model
        """
        limit = self.config.max_models if max_models is None else max_models
        limit = max(1, limit)

        selected = [ORCHESTRATOR_MODEL]
        for _, predicate, model in ROUTING_PRIORITY:
            if predicate(request):
                selected.append(model)

        unique = list(dict.fromkeys(selected))[:limit]
        signals = self.matched_signals(request)

        self._total_routes += 1
        for model in unique:
            self._by_model[model] = self._by_model.get(model, 0) + 1
        for signal in signals:
            self._by_signal[signal] = self._by_signal.get(signal, 0) + 1
        self._routing_history.append(
            {"request": request[:100], "models": unique, "signals": signals}
        )
        logger.debug(f"Routed request to {', '.join(unique)}")
        return unique

    def update_performance_metrics(
        self, model_key: str, response_time_ms: float, satisfaction: float
    ) -> None:
        """Fold one observation into the model's running averages."""
        self._performance.setdefault(model_key, ModelPerformance()).record(
            response_time_ms, satisfaction
        )

    def get_model_performance(self, model_key: str) -> dict[str, Any]:
        return self._performance.get(model_key, ModelPerformance()).to_dict()

    def get_all_performance_metrics(self) -> dict[str, dict[str, Any]]:
        return {key: perf.to_dict() for key, perf in self._performance.items()}

    def recent_routes(self) -> list[dict[str, Any]]:
        """Most recent routing entries, oldest first, up to the configured limit."""
        return list(self._routing_history)

    def get_statistics(self) -> dict[str, Any]:
        """Get routing statistics; counts cover every route, not just recent ones."""
        if not self._total_routes:
            return {"total_routes": 0}

        return {
            "total_routes": self._total_routes,
            "by_model": dict(self._by_model),
            "by_signal": dict(self._by_signal),
            "recent_routes": len(self._routing_history),
        }


def orchestra_strategy(models: list[str]) -> str:
    """Describe the combined strategy of a model selection."""
    return " + ".join(phrase for key, phrase in ORCHESTRA_STRATEGIES if key in models)


class OrchestraManager:
    """Coordinates the router and the registry for one-shot routing."""

    def __init__(self, router: IntelligentModelRouter | None = None):
        self.router = router or IntelligentModelRouter()
        self.registry = MODEL_REGISTRY
        logger.info(f"Orchestra manager initialized with {len(self.registry)} models")

    def process_with_orchestra(
        self, request: str, context: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """
        Route a request and describe the resulting orchestra.

        Never raises; failures produce an error dict naming the fallback model.
        """
        context = context or {}
        start = time.time()

        try:
            models = self.router.select_models(request, context)
            details = []
            for key in models:
                profile = self.registry.get(key)
                details.append(
                    {
                        "id": key,
                        "model": profile.to_dict() if profile else None,
                        "specialty": profile.specialty if profile else "general",
                    }
                )

            logger.info(f"Orchestra selected models: {', '.join(models)}")

            elapsed_ms = (time.time() - start) * 1000
            for key in models:
                self.router.update_performance_metrics(key, elapsed_ms, DEFAULT_SATISFACTION)

            return {
                "message": f"Orchestra processed the request with {len(models)} specialized models",
                "models_used": models,
                "model_details": details,
                "orchestra_strategy": orchestra_strategy(models),
                "processing_time_ms": elapsed_ms,
                "context_applied": len(context) > 0,
            }

        except Exception as e:
            logger.error(f"Orchestra processing failed: {e}")
            return {
                "error": "Orchestra processing failed",
                "message": str(e),
                "fallback_model": ORCHESTRATOR_MODEL,
            }

    def get_model_registry(self) -> dict[str, ModelProfile]:
        return dict(self.registry)

    def get_available_models(self) -> list[str]:
        return available_models()

    def get_model(self, model_key: str) -> ModelProfile | None:
        try:
            return get_model(model_key)
        except UnknownModelError:
            return None

    def get_models_by_capability(self, capability: ModelCapability) -> list[str]:
        return models_by_capability(capability)

    def get_orchestra_performance(self) -> dict[str, dict[str, Any]]:
        return self.router.get_all_performance_metrics()

    def get_fastest_models(self) -> list[str]:
        return fastest_models()

    def get_most_capable_models(self) -> list[str]:
        return most_capable_models()


# Convenience function
def select_models(request: str, max_models: int = 3) -> list[str]:
    """Select models for a request with a fresh router."""
    return IntelligentModelRouter().select_models(request, max_models=max_models)


__all__ = [
    "IntelligentModelRouter",
    "ModelPerformance",
    "ORCHESTRA_STRATEGIES",
    "OrchestraManager",
    "ROUTING_PRIORITY",
    "orchestra_strategy",
    "select_models",
]
