"""
Retrieval decisions: what to fetch for a request, and how to fetch it.

Decision makers are pure functions of the request and its context.
Each ``DecisionType`` has exactly one ``DecisionExecutor``; the
``ExecutorRegistry`` refuses to build unless every type is covered.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from . import request_classifier as rc
from .learning import CrossSessionLearner, SessionData, calculate_success_rate
from .memory import AgenticMemorySystem, decide_strategy
from .model_registry import (
    CONTEXT_MODEL,
    DEEP_THINKER_MODEL,
    INTEGRATION_MODEL,
    ORCHESTRATOR_MODEL,
    SPEED_MODEL,
)
from .types import (
    DecisionAlreadyExecutedError,
    DecisionType,
    MemorySearchStrategy,
)

logger = logging.getLogger(__name__)

SESSION_CONTEXT_EXPANSION_KEYS = 3

EXPANDED_CONCEPTS = ["AI", "development", "VS Code"]
AVAILABLE_TOOLS = ["file_operations", "web_search", "code_analysis"]


def _new_id(prefix: str) -> str:
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def new_decision_id() -> str:
    return _new_id("dec")


def new_request_id() -> str:
    return _new_id("req")


@dataclass
class Decision:
    """
    One retrieval decision made for a request.

    ``execution_time_ms`` and ``success`` stay ``None`` until the decision
    is executed; ``mark_executed`` may be called only once.
    """

    decision_type: DecisionType
    trigger_context: dict[str, Any]
    reasoning: str
    confidence_score: float
    selected_models: list[str]
    execution_plan: list[dict[str, Any]]
    decision_id: str = field(default_factory=new_decision_id)
    timestamp: datetime = field(default_factory=datetime.now)
    execution_time_ms: float | None = None
    success: bool | None = None
    error: str | None = None

    @property
    def executed(self) -> bool:
        return self.success is not None

    @property
    def plan(self) -> dict[str, Any]:
        """First step of the execution plan, or an empty dict."""
        return self.execution_plan[0] if self.execution_plan else {}

    def mark_executed(self, success: bool, elapsed_ms: float, error: str | None = None) -> None:
        if self.executed:
            raise DecisionAlreadyExecutedError(self.decision_id)
        self.success = success
        self.execution_time_ms = elapsed_ms
        self.error = error

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        plan = []
        for step in self.execution_plan:
            step = dict(step)
            if isinstance(step.get("strategy"), MemorySearchStrategy):
                step["strategy"] = step["strategy"].model_dump()
            plan.append(step)
        return {
            "decision_id": self.decision_id,
            "decision_type": self.decision_type.value,
            "trigger_context": self.trigger_context,
            "reasoning": self.reasoning,
            "confidence_score": self.confidence_score,
            "selected_models": self.selected_models,
            "execution_plan": plan,
            "timestamp": self.timestamp.isoformat(),
            "execution_time_ms": self.execution_time_ms,
            "success": self.success,
            "error": self.error,
        }


# Decision makers


def decide_memory_search(request: str, user_id: str) -> Decision:
    strategy = decide_strategy(request)
    return Decision(
        decision_type=DecisionType.MEMORY_SEARCH,
        trigger_context={"user_request": request, "user_id": user_id},
        reasoning=f"Memory search strategy: {json.dumps(strategy.model_dump())}",
        confidence_score=0.8,
        selected_models=[CONTEXT_MODEL],
        execution_plan=[{"action": "memory_search", "strategy": strategy}],
    )


def needs_context_expansion(
    request: str,
    session_context: Mapping[str, Any],
    max_session_keys: int = SESSION_CONTEXT_EXPANSION_KEYS,
) -> bool:
    """Complex requests and busy sessions both call for expansion."""
    return rc.is_complex_request(request) or len(session_context) > max_session_keys


def decide_context_expansion(
    request: str,
    session_context: Mapping[str, Any],
    max_session_keys: int = SESSION_CONTEXT_EXPANSION_KEYS,
) -> Decision:
    expand = needs_context_expansion(request, session_context, max_session_keys)
    return Decision(
        decision_type=DecisionType.CONTEXT_EXPANSION,
        trigger_context={"user_request": request, "session_context": dict(session_context)},
        reasoning=(
            "Complex request requires context expansion"
            if expand
            else "Simple request, minimal context needed"
        ),
        confidence_score=0.9 if expand else 0.6,
        selected_models=[DEEP_THINKER_MODEL] if expand else [SPEED_MODEL],
        execution_plan=[{"action": "context_expansion", "expand": expand}],
    )


def decide_cross_session_learning(request: str, user_id: str) -> Decision:
    return Decision(
        decision_type=DecisionType.CROSS_SESSION_LEARNING,
        trigger_context={"user_request": request, "user_id": user_id},
        reasoning="Applying cross-session learning patterns for improved responses",
        confidence_score=0.7,
        selected_models=[DEEP_THINKER_MODEL],
        execution_plan=[{"action": "apply_learning", "user_patterns": True}],
    )


def decide_tool_routing(request: str, session_context: Mapping[str, Any]) -> Decision:
    tools_needed = rc.is_tool_required_request(request)
    return Decision(
        decision_type=DecisionType.TOOL_ROUTING,
        trigger_context={"user_request": request, "session_context": dict(session_context)},
        reasoning=(
            "Request requires MCP tool integration" if tools_needed else "No external tools needed"
        ),
        confidence_score=0.8 if tools_needed else 0.4,
        selected_models=[INTEGRATION_MODEL],
        execution_plan=[{"action": "tool_routing", "tools_needed": tools_needed}],
    )


def fallback_decision(decision_type: DecisionType, request: str, user_id: str) -> Decision:
    """Safe-mode decision used when a decision maker fails."""
    return Decision(
        decision_type=decision_type,
        trigger_context={"user_request": request, "user_id": user_id},
        reasoning="Fallback decision due to analysis failure",
        confidence_score=0.5,
        selected_models=[ORCHESTRATOR_MODEL],
        execution_plan=[{"action": "fallback", "safe_mode": True}],
    )


# Enhanced context


@dataclass
class EnhancedContext:
    """Context gathered by executing a request's decisions."""

    memories: list[dict[str, Any]] = field(default_factory=list)
    expanded_context: dict[str, Any] = field(default_factory=dict)
    learned_patterns: dict[str, Any] = field(default_factory=dict)
    tool_preparations: dict[str, Any] = field(default_factory=dict)

    def source_count(self) -> int:
        """Number of context buckets, used as a coarse richness signal."""
        return len(self.to_dict())

    def is_empty(self) -> bool:
        return not (
            self.memories or self.expanded_context or self.learned_patterns or self.tool_preparations
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "memories": self.memories,
            "expanded_context": self.expanded_context,
            "learned_patterns": self.learned_patterns,
            "tool_preparations": self.tool_preparations,
        }


# Executors


class DecisionExecutor(ABC):
    """Runs one kind of decision and folds its result into the context."""

    decision_type: DecisionType

    @abstractmethod
    async def execute(self, decision: Decision, user_id: str) -> Any:
        """Produce the decision's result; may raise."""
        ...

    @abstractmethod
    def apply(self, result: Any, context: EnhancedContext) -> None:
        """Merge a result into the enhanced context."""
        ...


class MemorySearchExecutor(DecisionExecutor):
    decision_type = DecisionType.MEMORY_SEARCH

    def __init__(self, memory_system: AgenticMemorySystem):
        self.memory_system = memory_system

    async def execute(self, decision: Decision, user_id: str) -> list[dict[str, Any]]:
        strategy = decision.plan.get("strategy")
        if strategy is None:
            return []
        request = decision.trigger_context.get("user_request", "")
        result = await self.memory_system.search_with_strategy(strategy, request, user_id)
        return result.memories

    def apply(self, result: list[dict[str, Any]], context: EnhancedContext) -> None:
        context.memories.extend(result)


class ContextExpansionExecutor(DecisionExecutor):
    decision_type = DecisionType.CONTEXT_EXPANSION

    async def execute(self, decision: Decision, user_id: str) -> dict[str, Any]:
        if not decision.plan.get("expand"):
            return {}
        return {
            "related_concepts": list(EXPANDED_CONCEPTS),
            "expanded_details": "Enhanced context for complex request processing",
        }

    def apply(self, result: dict[str, Any], context: EnhancedContext) -> None:
        context.expanded_context.update(result)


class CrossSessionLearningExecutor(DecisionExecutor):
    """
    Feeds the successful part of the decision history to the learner.

    Args:
        learner: Learner that stores the derived patterns
        history: Callable returning the current decision history
    """

    decision_type = DecisionType.CROSS_SESSION_LEARNING

    def __init__(
        self,
        learner: CrossSessionLearner,
        history: Callable[[], Sequence[Decision]],
    ):
        self.learner = learner
        self.history = history

    async def execute(self, decision: Decision, user_id: str) -> dict[str, Any]:
        history = self.history()
        session = SessionData(
            user_id=user_id,
            successful_interactions=[d.to_dict() for d in history if d.success],
            success_rate=calculate_success_rate(history),
        )
        return self.learner.learn(session).to_dict()

    def apply(self, result: dict[str, Any], context: EnhancedContext) -> None:
        context.learned_patterns.update(result)


class ToolRoutingExecutor(DecisionExecutor):
    decision_type = DecisionType.TOOL_ROUTING

    async def execute(self, decision: Decision, user_id: str) -> dict[str, Any]:
        if not decision.plan.get("tools_needed"):
            return {}
        return {
            "mcp_tools_ready": True,
            "available_tools": list(AVAILABLE_TOOLS),
            "preparation_time": int(time.time() * 1000),
        }

    def apply(self, result: dict[str, Any], context: EnhancedContext) -> None:
        context.tool_preparations.update(result)


class ExecutorRegistry:
    """
    One executor per decision type.

    Raises:
        ValueError: If a decision type has no executor, or two executors
            claim the same type
    """

    def __init__(self, executors: Iterable[DecisionExecutor]):
        self._executors: dict[DecisionType, DecisionExecutor] = {}
        for executor in executors:
            if executor.decision_type in self._executors:
                raise ValueError(f"Duplicate executor for {executor.decision_type.value}")
            self._executors[executor.decision_type] = executor

        missing = [t.value for t in DecisionType if t not in self._executors]
        if missing:
            raise ValueError(f"No executor registered for: {', '.join(missing)}")

    def __getitem__(self, decision_type: DecisionType) -> DecisionExecutor:
        return self._executors[decision_type]

    def replace(self, executor: DecisionExecutor) -> None:
        """Swap in a different executor for its decision type."""
        self._executors[executor.decision_type] = executor

    @classmethod
    def default(
        cls,
        memory_system: AgenticMemorySystem,
        learner: CrossSessionLearner,
        history: Callable[[], Sequence[Decision]],
    ) -> ExecutorRegistry:
        return cls(
            [
                MemorySearchExecutor(memory_system),
                ContextExpansionExecutor(),
                CrossSessionLearningExecutor(learner, history),
                ToolRoutingExecutor(),
            ]
        )


__all__ = [
    "ContextExpansionExecutor",
    "CrossSessionLearningExecutor",
    "Decision",
    "DecisionExecutor",
    "EnhancedContext",
    "ExecutorRegistry",
    "MemorySearchExecutor",
    "ToolRoutingExecutor",
    "decide_context_expansion",
    "decide_cross_session_learning",
    "decide_memory_search",
    "decide_tool_routing",
    "fallback_decision",
    "needs_context_expansion",
    "new_decision_id",
    "new_request_id",
]
