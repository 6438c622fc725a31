"""
Agentic RAG decision orchestrator.

Runs one request through a fixed sequence of states:

    Idle -> Deciding -> Executing -> ModelSelecting -> Delegating
         -> Learning -> [Predicting] -> Done

Deciding produces retrieval decisions, Executing gathers the enhanced
context they call for, ModelSelecting picks the specialist models, and
Delegating hands everything to the message backend. Learning and
Predicting only update internal state. ``process_request`` never raises;
the worst case is a clearly-labeled error envelope.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from . import request_classifier as rc
from .backend import MessageBackend
from .config import AgenticRAGConfig
from .decision_log import DecisionLogConfig, DecisionLogger
from .decisions import (
    Decision,
    EnhancedContext,
    ExecutorRegistry,
    decide_context_expansion,
    decide_cross_session_learning,
    decide_memory_search,
    decide_tool_routing,
    fallback_decision,
    new_request_id,
)
from .learning import CrossSessionLearner, calculate_success_rate
from .memory import AgenticMemorySystem
from .model_registry import (
    CODE_MODEL,
    CONTEXT_MODEL,
    CREATIVE_MODEL,
    DEEP_THINKER_MODEL,
    ORCHESTRATOR_MODEL,
)
from .model_router import DEFAULT_SATISFACTION, IntelligentModelRouter
from .predictive import PredictiveContextEngine
from .types import (
    DecisionExecutionError,
    DecisionType,
    DelegationError,
    IntelligenceLevel,
)

logger = logging.getLogger(__name__)

# Context buckets above which the deep thinker joins
RICH_CONTEXT_SOURCES = 3

FALLBACK_MESSAGE = (
    "Your request was processed with fallback handling because the response "
    "backend was unavailable."
)


class OrchestrationState(Enum):
    """Stages of a single request."""

    IDLE = "idle"
    DECIDING = "deciding"
    EXECUTING = "executing"
    MODEL_SELECTING = "model_selecting"
    DELEGATING = "delegating"
    LEARNING = "learning"
    PREDICTING = "predicting"
    DONE = "done"


@dataclass
class RAGMetrics:
    """Counters accumulated across requests."""

    total_decisions: int = 0
    successful_decisions: int = 0
    requests_processed: int = 0
    cache_hits: int = 0
    satisfaction_scores: list[float] = field(default_factory=list)
    average_processing_ms: float = 0.0

    def record_request(self, decisions: list[Decision], processing_ms: float) -> None:
        self.total_decisions += len(decisions)
        self.successful_decisions += sum(1 for d in decisions if d.success)
        self.requests_processed += 1
        n = self.requests_processed
        self.average_processing_ms += (processing_ms - self.average_processing_ms) / n

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["satisfaction_scores"] = list(self.satisfaction_scores)
        return data


@dataclass
class AgenticResponse:
    """Envelope returned for every request."""

    response: Any
    request_id: str
    rag_decisions_made: int = 0
    context_sources_used: int = 0
    models_optimized: list[str] = field(default_factory=list)
    processing_time_ms: float = 0.0
    intelligence_level: str = ""
    error: bool = False

    @classmethod
    def failure(cls, request_id: str, message: str) -> AgenticResponse:
        return cls(
            response={"error": "Agentic processing failed", "message": message},
            request_id=request_id,
            error=True,
        )

    def to_dict(self) -> dict[str, Any]:
        if self.error:
            enhancements: dict[str, Any] = {"error": True, "request_id": self.request_id}
        else:
            enhancements = {
                "rag_decisions_made": self.rag_decisions_made,
                "context_sources_used": self.context_sources_used,
                "models_optimized": list(self.models_optimized),
                "processing_time_ms": self.processing_time_ms,
                "intelligence_level": self.intelligence_level,
                "error": False,
                "request_id": self.request_id,
            }
        return {"response": self.response, "agentic_enhancements": enhancements}


class AgenticRAGOrchestrator:
    """
    Decides what context to retrieve for a request, gathers it, picks the
    models and delegates the final answer.

    Args:
        backend: Message backend used for delegation and personal memories
        config: Configuration (defaults to ``AgenticRAGConfig()``)
        router: Model router (only its performance metrics are fed here)
        learner: Cross-session learner
        predictive_engine: Predictive context engine
        memory_system: Memory system (defaults to one over ``backend``)
        executors: Executor registry (defaults to the four built-in executors)
        decision_logger: Optional JSONL decision logger

    ``state`` is shared by every request on this instance: it holds the
    most recent transition of whichever request moved last, so
    overlapping ``process_request`` calls overwrite each other's value.
    """

    def __init__(
        self,
        backend: MessageBackend,
        config: AgenticRAGConfig | None = None,
        router: IntelligentModelRouter | None = None,
        learner: CrossSessionLearner | None = None,
        predictive_engine: PredictiveContextEngine | None = None,
        memory_system: AgenticMemorySystem | None = None,
        executors: ExecutorRegistry | None = None,
        decision_logger: DecisionLogger | None = None,
    ):
        self.backend = backend
        self.config = config or AgenticRAGConfig()
        self.router = router or IntelligentModelRouter(self.config.routing)
        self.learner = learner or CrossSessionLearner(self.config.learning)
        if predictive_engine is None:
            predictive_engine = PredictiveContextEngine(self.config.prediction)
        self.predictive_engine = predictive_engine
        self.memory_system = memory_system or AgenticMemorySystem(backend)
        self.executors = executors or ExecutorRegistry.default(
            self.memory_system, self.learner, lambda: self.decision_history
        )

        if decision_logger is None and self.config.logging.decision_log_enabled:
            decision_logger = DecisionLogger(
                DecisionLogConfig(log_path=self.config.logging.decision_log_path)
            )
        self.decision_logger = decision_logger

        self._intelligence_level = IntelligenceLevel.parse(
            self.config.orchestrator.intelligence_level
        )
        self._history: deque[Decision] = deque(maxlen=self.config.orchestrator.history_limit)
        self._metrics = RAGMetrics()
        self._background: set[asyncio.Task[Any]] = set()
        self.state = OrchestrationState.IDLE

        logger.info(
            f"Agentic RAG orchestrator initialized at level {self._intelligence_level.name}"
        )

    def _transition(self, state: OrchestrationState) -> None:
        logger.debug(f"{self.state.value} -> {state.value}")
        self.state = state

    async def process_request(
        self,
        request: str,
        user_id: str,
        session_context: Mapping[str, Any] | None = None,
    ) -> AgenticResponse:
        """
        Process one request end to end.

        Args:
            request: The user request text
            user_id: Requesting user
            session_context: Optional session state; more than three keys
                forces context expansion

        Returns:
            AgenticResponse; ``error`` is set only if the pipeline itself broke
        """
        session_context = session_context or {}
        request_id = new_request_id()
        start = time.perf_counter()
        self.state = OrchestrationState.IDLE

        try:
            self._transition(OrchestrationState.DECIDING)
            self._check_prediction_cache(request, user_id)
            decisions = self.make_decisions(request, user_id, session_context)

            self._transition(OrchestrationState.EXECUTING)
            context = await self.execute_decisions(decisions, user_id)

            self._transition(OrchestrationState.MODEL_SELECTING)
            models = self.select_optimal_models(request, context)

            self._transition(OrchestrationState.DELEGATING)
            result = await self.delegate(request, context, models)

            processing_ms = (time.perf_counter() - start) * 1000

            self._transition(OrchestrationState.LEARNING)
            self.learn_from_interaction(decisions, models, request_id, user_id, processing_ms)

            if self._intelligence_level >= IntelligenceLevel.PREDICTIVE:
                self._transition(OrchestrationState.PREDICTING)
                self.prepare_next_context(request, user_id)

            self._transition(OrchestrationState.DONE)
            return AgenticResponse(
                response=result,
                request_id=request_id,
                rag_decisions_made=len(decisions),
                context_sources_used=context.source_count(),
                models_optimized=models,
                processing_time_ms=processing_ms,
                intelligence_level=self._intelligence_level.name,
            )

        except Exception as e:
            logger.error(f"Agentic request processing failed for {request_id}: {e}")
            self._transition(OrchestrationState.DONE)
            return AgenticResponse.failure(request_id, str(e))

    # Deciding

    def make_decisions(
        self,
        request: str,
        user_id: str,
        session_context: Mapping[str, Any],
    ) -> list[Decision]:
        """
        Make this request's decisions in a fixed order.

        Cross-session learning is only decided at AUTONOMOUS and above. A
        decision maker that fails is replaced by a safe-mode fallback.
        """
        expansion_keys = self.config.routing.session_context_expansion_keys
        makers: list[tuple[DecisionType, Callable[[], Decision]]] = [
            (DecisionType.MEMORY_SEARCH, lambda: decide_memory_search(request, user_id)),
            (
                DecisionType.CONTEXT_EXPANSION,
                lambda: decide_context_expansion(request, session_context, expansion_keys),
            ),
        ]
        if self._intelligence_level >= IntelligenceLevel.AUTONOMOUS:
            makers.append(
                (
                    DecisionType.CROSS_SESSION_LEARNING,
                    lambda: decide_cross_session_learning(request, user_id),
                )
            )
        makers.append(
            (DecisionType.TOOL_ROUTING, lambda: decide_tool_routing(request, session_context))
        )

        decisions = []
        for decision_type, make in makers:
            try:
                decisions.append(make())
            except Exception as e:
                logger.warning(f"Decision maker for {decision_type.value} failed: {e}")
                decisions.append(fallback_decision(decision_type, request, user_id))
        return decisions

    # Executing

    async def execute_decisions(self, decisions: list[Decision], user_id: str) -> EnhancedContext:
        """Execute decisions in order; one failure never stops the rest."""
        context = EnhancedContext()

        for decision in decisions:
            started = time.perf_counter()
            error: str | None = None
            try:
                executor = self.executors[decision.decision_type]
                result = await executor.execute(decision, user_id)
                executor.apply(result, context)
            except Exception as e:
                failure = DecisionExecutionError(
                    decision.decision_id, decision.decision_type, str(e) or type(e).__name__
                )
                logger.error(str(failure))
                error = failure.cause

            elapsed_ms = (time.perf_counter() - started) * 1000
            decision.mark_executed(error is None, elapsed_ms, error)

        return context

    # ModelSelecting

    def select_optimal_models(self, request: str, context: EnhancedContext) -> list[str]:
        """
        Final model list for delegation.

        Starts with the orchestrator model, adds specialists by complexity,
        context richness and intent, always includes the context model,
        and caps the list. When the cap would drop the context model it
        takes the last slot instead.
        """
        routing = self.config.routing
        cap = max(2, routing.agentic_max_models)
        selected = [ORCHESTRATOR_MODEL]

        if (
            rc.complexity_score(request) > routing.complexity_threshold
            or context.source_count() > RICH_CONTEXT_SOURCES
        ):
            selected.append(DEEP_THINKER_MODEL)
        if rc.is_code_request(request):
            selected.append(CODE_MODEL)
        if rc.is_creative_request(request):
            selected.append(CREATIVE_MODEL)
        if CONTEXT_MODEL not in selected:
            selected.append(CONTEXT_MODEL)

        capped = selected[:cap]
        if CONTEXT_MODEL not in capped:
            capped[-1] = CONTEXT_MODEL
        return capped

    # Delegating

    async def delegate(
        self, request: str, context: EnhancedContext, models: list[str]
    ) -> Any:
        """Hand the request to the backend; substitute a fallback on failure."""
        try:
            reply = await self.backend.send_message(
                request,
                enhanced_context=context.to_dict(),
                selected_models=models,
                agentic_mode=True,
            )
            if not reply.success:
                raise DelegationError(reply.error or "backend reported failure")
            for model in models:
                self.router.update_performance_metrics(
                    model, reply.processing_time_ms, DEFAULT_SATISFACTION
                )
            return reply.response if reply.response is not None else asdict(reply)
        except Exception as e:
            logger.error(f"Enhanced processing failed: {e}")
            return {
                "message": FALLBACK_MESSAGE,
                "enhanced_with": "agentic_rag",
                "models_used": list(models),
                "context_applied": not context.is_empty(),
            }

    # Learning

    def learn_from_interaction(
        self,
        decisions: list[Decision],
        models: list[str],
        request_id: str,
        user_id: str,
        processing_ms: float,
    ) -> None:
        """Record decisions in history and metrics; failures are only logged."""
        try:
            self._history.extend(decisions)
            self._metrics.record_request(decisions, processing_ms)
            if self.decision_logger is not None:
                self.decision_logger.log_decisions(decisions, request_id, user_id, models)

            successful = sum(1 for d in decisions if d.success)
            logger.info(
                f"Learned from interaction: {successful}/{len(decisions)} successful decisions"
            )
        except Exception as e:
            logger.error(f"Learning from interaction failed: {e}")

    # Predicting

    def _check_prediction_cache(self, request: str, user_id: str) -> None:
        if self._intelligence_level < IntelligenceLevel.PREDICTIVE:
            return
        try:
            cached = self.predictive_engine.get_cached(request, user_id)
        except Exception as e:
            logger.debug(f"Prediction cache lookup failed: {e}")
            return
        if cached is not None:
            self._metrics.cache_hits += 1

    def prepare_next_context(self, request: str, user_id: str) -> None:
        """Start predictive preparation without waiting for it."""
        if not self.config.orchestrator.enable_predictions:
            return
        task = asyncio.get_running_loop().create_task(self._predict(request, user_id))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _predict(self, request: str, user_id: str) -> None:
        try:
            await self.predictive_engine.predict_next_context_needs(request, user_id)
        except Exception as e:
            logger.debug(f"Predictive context preparation failed: {e}")

    async def drain_background(self) -> None:
        """Wait for every pending predictive task."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # Public accessors

    @property
    def decision_history(self) -> tuple[Decision, ...]:
        return tuple(self._history)

    def success_rate(self) -> float:
        return calculate_success_rate(self._history)

    def get_metrics(self) -> dict[str, Any]:
        return self._metrics.to_dict()

    def record_satisfaction(self, score: float) -> None:
        """Record a user satisfaction score, clamped to [0, 1]."""
        self._metrics.satisfaction_scores.append(min(max(float(score), 0.0), 1.0))

    def set_intelligence_level(self, level: IntelligenceLevel | int | str) -> None:
        self._intelligence_level = IntelligenceLevel.parse(level)
        logger.info(f"Intelligence level set to: {self._intelligence_level.name}")

    def get_intelligence_level(self) -> str:
        return self._intelligence_level.name

    def get_statistics(self) -> dict[str, Any]:
        """Get orchestration statistics across components."""
        metrics = self._metrics
        return {
            **metrics.to_dict(),
            "intelligence_level": self._intelligence_level.name,
            "history_size": len(self._history),
            "success_rate": self.success_rate(),
            "pending_background_tasks": len(self._background),
            "routing": self.router.get_statistics(),
            "learning": self.learner.get_statistics(),
            "prediction": self.predictive_engine.get_statistics(),
        }


__all__ = [
    "AgenticRAGOrchestrator",
    "AgenticResponse",
    "OrchestrationState",
    "RAGMetrics",
]
