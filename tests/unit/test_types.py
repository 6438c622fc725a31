"""
Unit tests for types module.
"""

import pytest
from pydantic import ValidationError

from agentic_rag.types import (
    AgenticRAGError,
    CostTier,
    DecisionExecutionError,
    DecisionType,
    DelegationError,
    IntelligenceLevel,
    LatencyTier,
    RequestSignals,
    UnknownModelError,
)


class TestDecisionType:
    """Tests for DecisionType enum."""

    def test_closed_set(self):
        assert [t.value for t in DecisionType] == [
            "memory_search",
            "context_expansion",
            "cross_session_learning",
            "tool_routing",
        ]


class TestIntelligenceLevel:
    """Tests for IntelligenceLevel."""

    def test_ordering(self):
        assert IntelligenceLevel.REACTIVE < IntelligenceLevel.PROACTIVE
        assert IntelligenceLevel.PREDICTIVE < IntelligenceLevel.AUTONOMOUS
        assert IntelligenceLevel.AUTONOMOUS < IntelligenceLevel.ORCHESTRATIVE

    def test_parse_forms(self):
        assert IntelligenceLevel.parse(4) is IntelligenceLevel.AUTONOMOUS
        assert IntelligenceLevel.parse(" proactive ") is IntelligenceLevel.PROACTIVE
        assert IntelligenceLevel.parse(IntelligenceLevel.REACTIVE) is IntelligenceLevel.REACTIVE

    def test_parse_rejects_unknown(self):
        with pytest.raises(ValueError):
            IntelligenceLevel.parse("sentient")


class TestTiers:
    """Tests for latency and cost tiers."""

    def test_latency_order(self):
        assert LatencyTier.ULTRA_FAST < LatencyTier.FAST < LatencyTier.MEDIUM < LatencyTier.SLOW

    def test_cost_order(self):
        assert CostTier.FREE < CostTier.LOW < CostTier.MEDIUM < CostTier.HIGH


class TestRequestSignals:
    """Tests for RequestSignals."""

    def test_defaults(self):
        signals = RequestSignals()
        assert signals.active() == []

    def test_score_bounds(self):
        with pytest.raises(ValidationError):
            RequestSignals(complexity_score=1.2)


class TestErrors:
    """Tests for the error hierarchy."""

    def test_all_derive_from_base(self):
        errors = [
            UnknownModelError("x"),
            DecisionExecutionError("dec_1", DecisionType.TOOL_ROUTING, "boom"),
            DelegationError("down"),
        ]
        for error in errors:
            assert isinstance(error, AgenticRAGError)

    def test_execution_error_message(self):
        error = DecisionExecutionError("dec_1", DecisionType.TOOL_ROUTING, "boom")
        assert "dec_1" in str(error)
        assert "tool_routing" in str(error)
        assert error.cause == "boom"

    def test_delegation_error_reason(self):
        assert DelegationError("down").reason == "down"
