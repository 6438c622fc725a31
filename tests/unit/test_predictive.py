"""
Unit tests for predictive module.
"""

import time

import pytest

from agentic_rag.config import PredictionConfig
from agentic_rag.predictive import (
    Prediction,
    PredictiveContextEngine,
    cache_key,
    hash_request,
)


class TestHashRequest:
    """Tests for hash_request."""

    def test_empty(self):
        assert hash_request("") == "0"

    def test_known_values(self):
        assert hash_request("a") == "97"
        assert hash_request("ab") == str(97 * 31 + 98)

    def test_astral_characters_hash_as_surrogate_pairs(self):
        # U+1F600 is the UTF-16 pair D83D DE00
        assert hash_request("\U0001F600") == str(0xD83D * 31 + 0xDE00)
        assert hash_request("a\U0001F600") == str(97 * 31 * 31 + 0xD83D * 31 + 0xDE00)

    def test_wraps_to_signed_32_bit(self):
        value = int(hash_request("x" * 200))
        assert -(2**31) <= value < 2**31

    def test_stable(self):
        assert hash_request("same text") == hash_request("same text")

    def test_cache_key_format(self):
        assert cache_key("a", "alice") == "predicted_alice_97"


class TestPredict:
    """Tests for predictions."""

    def test_explanation_prediction(self):
        predictions = PredictiveContextEngine().predict("explain the flow")
        assert predictions == [Prediction("detailed_explanation", 0.8, "expanded_details")]

    def test_code_predictions(self):
        predictions = PredictiveContextEngine().predict("implement a parser")
        assert [p.type for p in predictions] == ["example", "modify"]
        assert [p.probability for p in predictions] == [0.7, 0.6]

    def test_no_predictions(self):
        assert PredictiveContextEngine().predict("hello") == []

    def test_to_dict(self):
        prediction = Prediction("example", 0.7, "code_examples")
        assert prediction.to_dict() == {
            "type": "example",
            "probability": 0.7,
            "context_type": "code_examples",
        }


class TestPredictionCache:
    """Tests for the prediction cache."""

    @pytest.mark.asyncio
    async def test_predictions_are_cached(self):
        engine = PredictiveContextEngine()
        predictions = await engine.predict_next_context_needs("how does it work", "alice")
        entry = engine.get_cached("how does it work", "alice")
        assert entry is not None
        assert entry.predictions == predictions
        assert entry.ttl_seconds == 3600
        assert engine.cache_hits == 1

    def test_miss_counts(self):
        engine = PredictiveContextEngine()
        assert engine.get_cached("nothing", "alice") is None
        stats = engine.get_statistics()
        assert stats["cache_misses"] == 1
        assert stats["hit_rate"] == 0.0

    @pytest.mark.asyncio
    async def test_keys_are_per_user(self):
        engine = PredictiveContextEngine()
        await engine.predict_next_context_needs("how", "alice")
        assert engine.get_cached("how", "bob") is None

    @pytest.mark.asyncio
    async def test_lookup_ignores_ttl(self):
        engine = PredictiveContextEngine(PredictionConfig(ttl_seconds=0))
        await engine.predict_next_context_needs("how", "alice")
        assert engine.get_cached("how", "alice") is not None

    @pytest.mark.asyncio
    async def test_sweep_expired(self):
        engine = PredictiveContextEngine(PredictionConfig(ttl_seconds=10))
        await engine.predict_next_context_needs("how", "alice")
        await engine.predict_next_context_needs("why", "alice")
        assert engine.sweep_expired(now=time.time()) == 0
        assert engine.sweep_expired(now=time.time() + 11) == 2
        assert len(engine) == 0
        assert engine.get_statistics()["entries_expired"] == 2

    @pytest.mark.asyncio
    async def test_bounded_cache_evicts_oldest(self):
        engine = PredictiveContextEngine(PredictionConfig(max_entries=3))
        for i in range(5):
            await engine.predict_next_context_needs(f"request {i}", "alice")
        assert len(engine) == 3
        assert engine.get_cached("request 0", "alice") is None
        assert engine.get_cached("request 4", "alice") is not None
        assert engine.get_statistics()["entries_evicted"] == 2

    @pytest.mark.asyncio
    async def test_repeat_request_refreshes_entry(self):
        engine = PredictiveContextEngine(PredictionConfig(max_entries=2))
        await engine.predict_next_context_needs("a", "alice")
        await engine.predict_next_context_needs("b", "alice")
        await engine.predict_next_context_needs("a", "alice")
        await engine.predict_next_context_needs("c", "alice")
        assert engine.get_cached("a", "alice") is not None
        assert engine.get_cached("b", "alice") is None

    @pytest.mark.asyncio
    async def test_clear(self):
        engine = PredictiveContextEngine()
        await engine.predict_next_context_needs("a", "alice")
        engine.clear()
        assert len(engine) == 0
