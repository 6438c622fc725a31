"""
Integration tests for the full agentic request pipeline.

Drives AgenticRAGOrchestrator end to end over the in-memory backend,
including deliberately faulty executors and backends.
"""

import json

import pytest

from agentic_rag.config import AgenticRAGConfig
from agentic_rag.decision_log import DecisionLogConfig, DecisionLogger
from agentic_rag.decisions import ExecutorRegistry
from agentic_rag.model_registry import (
    CONTEXT_MODEL,
    DEEP_THINKER_MODEL,
    ORCHESTRATOR_MODEL,
    SPEED_MODEL,
)
from agentic_rag.model_router import IntelligentModelRouter
from agentic_rag.orchestrator import FALLBACK_MESSAGE, AgenticRAGOrchestrator
from agentic_rag.request_classifier import extract_request_signals
from agentic_rag.types import DecisionType, IntelligenceLevel


class TestScenarios:
    """Request scenarios from classification through delegation."""

    @pytest.mark.asyncio
    async def test_complex_explanation(self, orchestrator, backend):
        request = "explain this complex algorithm in detail"
        signals = extract_request_signals(request)
        assert signals.explanation_intent
        assert signals.complex_intent

        result = await orchestrator.process_request(request, "alice")

        expansion = [
            d
            for d in orchestrator.decision_history
            if d.decision_type is DecisionType.CONTEXT_EXPANSION
        ][0]
        assert expansion.reasoning == "Complex request requires context expansion"
        assert expansion.plan["expand"] is True
        assert DEEP_THINKER_MODEL in result.models_optimized

        delegated = backend.sent[-1]
        assert delegated["enhanced_context"]["expanded_context"]["related_concepts"]
        assert len(delegated["enhanced_context"]["memories"]) == 2

    def test_quick_fix_prefers_fastest_model(self):
        request = "quickly fix this"
        signals = extract_request_signals(request)
        assert signals.needs_speed
        assert not signals.complex_intent

        models = IntelligentModelRouter().select_models(request)
        assert models == [ORCHESTRATOR_MODEL, SPEED_MODEL]

    @pytest.mark.asyncio
    async def test_below_autonomous_makes_three_decisions(self, orchestrator):
        orchestrator.set_intelligence_level(IntelligenceLevel.PREDICTIVE)

        result = await orchestrator.process_request("hello there", "alice")
        await orchestrator.drain_background()

        assert result.rag_decisions_made == 3
        types = [d.decision_type for d in orchestrator.decision_history]
        assert DecisionType.CROSS_SESSION_LEARNING not in types

    @pytest.mark.asyncio
    async def test_busy_session_forces_expansion(self, orchestrator):
        session = {"a": 1, "b": 2, "c": 3, "d": 4}

        await orchestrator.process_request("hi", "alice", session_context=session)

        expansion = orchestrator.decision_history[1]
        assert expansion.decision_type is DecisionType.CONTEXT_EXPANSION
        assert expansion.plan["expand"] is True

    @pytest.mark.asyncio
    async def test_tool_request_prepares_tools(self, orchestrator, backend):
        await orchestrator.process_request("search the docs and deploy", "alice")

        tools = backend.sent[-1]["enhanced_context"]["tool_preparations"]
        assert tools["mcp_tools_ready"] is True
        assert "web_search" in tools["available_tools"]


class TestHistoryBound:
    """Decision history stays bounded under load."""

    @pytest.mark.asyncio
    @pytest.mark.slow
    async def test_history_never_exceeds_limit(self, orchestrator):
        for i in range(160):
            await orchestrator.process_request(f"request number {i}", "alice")
            assert len(orchestrator.decision_history) <= 100
        await orchestrator.drain_background()

        assert len(orchestrator.decision_history) == 100
        assert orchestrator.get_metrics()["requests_processed"] == 160
        assert orchestrator.get_metrics()["total_decisions"] == 640


class TestNeverRaises:
    """process_request returns an envelope under every faulty collaborator."""

    @pytest.mark.asyncio
    async def test_all_executors_failing(self, backend, failing_executor_factory):
        executors = ExecutorRegistry([failing_executor_factory(t) for t in DecisionType])
        orchestrator = AgenticRAGOrchestrator(backend, executors=executors)

        result = await orchestrator.process_request("explain the api", "alice")
        envelope = result.to_dict()

        assert envelope["agentic_enhancements"]["error"] is False
        assert envelope["agentic_enhancements"]["rag_decisions_made"] >= 1
        assert all(d.success is False for d in orchestrator.decision_history)
        assert all(d.execution_time_ms is not None for d in orchestrator.decision_history)
        assert orchestrator.decision_history[0].error == "memory_search exploded"
        assert envelope["response"]["message"] == "Echo: explain the api"

    @pytest.mark.asyncio
    async def test_one_executor_failing(self, backend, failing_executor_factory):
        orchestrator = AgenticRAGOrchestrator(backend)
        orchestrator.executors.replace(failing_executor_factory(DecisionType.TOOL_ROUTING))

        await orchestrator.process_request("hello", "alice")

        outcomes = {d.decision_type: d.success for d in orchestrator.decision_history}
        assert outcomes[DecisionType.TOOL_ROUTING] is False
        assert outcomes[DecisionType.MEMORY_SEARCH] is True
        assert outcomes[DecisionType.CONTEXT_EXPANSION] is True

    @pytest.mark.asyncio
    async def test_backend_raising(self, failing_backend, failing_executor_factory):
        executors = ExecutorRegistry([failing_executor_factory(t) for t in DecisionType])
        orchestrator = AgenticRAGOrchestrator(failing_backend, executors=executors)

        result = await orchestrator.process_request("hello", "alice")
        envelope = result.to_dict()

        assert envelope["agentic_enhancements"]["error"] is False
        assert envelope["response"]["message"] == FALLBACK_MESSAGE
        assert envelope["response"]["context_applied"] is False
        assert envelope["response"]["models_used"][0] == ORCHESTRATOR_MODEL

    @pytest.mark.asyncio
    async def test_memory_store_down(self, failing_memory_backend):
        orchestrator = AgenticRAGOrchestrator(failing_memory_backend)

        result = await orchestrator.process_request("what did I say", "alice")

        assert result.error is False
        assert failing_memory_backend.sent[-1]["enhanced_context"]["memories"] == []
        assert CONTEXT_MODEL in result.models_optimized

    @pytest.mark.asyncio
    async def test_unsuccessful_backend(self, unsuccessful_backend):
        orchestrator = AgenticRAGOrchestrator(unsuccessful_backend)

        result = await orchestrator.process_request("hello", "alice")

        assert result.response["message"] == FALLBACK_MESSAGE
        assert result.response["enhanced_with"] == "agentic_rag"


class TestLearningAcrossRequests:
    """Cross-session learning sees earlier successful decisions."""

    @pytest.mark.asyncio
    async def test_learner_accumulates_patterns(self, orchestrator, backend):
        await orchestrator.process_request("first request", "alice")
        await orchestrator.process_request("second request", "alice")
        await orchestrator.drain_background()

        learned = backend.sent[-1]["enhanced_context"]["learned_patterns"]
        assert learned["improved_accuracy"] is True
        assert orchestrator.learner.get_statistics()["entries"] == 2
        assert orchestrator.success_rate() == 1.0


class TestDecisionLogIntegration:
    """Decisions reach the JSONL log."""

    @pytest.mark.asyncio
    async def test_injected_logger(self, backend, tmp_path):
        path = tmp_path / "decisions.jsonl"
        decision_logger = DecisionLogger(DecisionLogConfig(log_path=str(path)))
        orchestrator = AgenticRAGOrchestrator(backend, decision_logger=decision_logger)

        result = await orchestrator.process_request("hello", "alice")

        records = decision_logger.read_records()
        assert len(records) == 4
        assert {r.request_id for r in records} == {result.request_id}
        assert records[0].models_optimized == result.models_optimized

    @pytest.mark.asyncio
    async def test_logger_from_config(self, backend, tmp_path):
        path = tmp_path / "from_config.jsonl"
        config = AgenticRAGConfig()
        config.logging.decision_log_enabled = True
        config.logging.decision_log_path = str(path)
        orchestrator = AgenticRAGOrchestrator(backend, config=config)

        await orchestrator.process_request("hello", "alice")

        lines = path.read_text().splitlines()
        assert len(lines) == 4
        assert json.loads(lines[-1])["decision_type"] == "tool_routing"
