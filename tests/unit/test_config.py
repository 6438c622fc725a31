"""
Unit tests for config module.
"""

import json

from agentic_rag.config import (
    AgenticRAGConfig,
    BackendConfig,
    LearningConfig,
    OrchestratorSettings,
    PredictionConfig,
    RoutingConfig,
    default_config,
)


class TestDefaults:
    """Tests for default configuration values."""

    def test_routing_defaults(self):
        config = RoutingConfig()
        assert config.max_models == 3
        assert config.agentic_max_models == 4
        assert config.complexity_threshold == 0.7
        assert config.session_context_expansion_keys == 3

    def test_orchestrator_defaults(self):
        config = OrchestratorSettings()
        assert config.intelligence_level == "AUTONOMOUS"
        assert config.history_limit == 100
        assert config.enable_predictions is True

    def test_learning_and_prediction_defaults(self):
        assert LearningConfig().max_entries == 500
        assert LearningConfig().default_success_rate == 0.85
        assert PredictionConfig().ttl_seconds == 3600
        assert PredictionConfig().max_entries == 1000

    def test_backend_defaults(self):
        assert BackendConfig().provider == "anthropic"

    def test_default_instance(self):
        assert isinstance(default_config, AgenticRAGConfig)


class TestPersistence:
    """Tests for load and save."""

    def test_missing_file_gives_defaults(self, tmp_path):
        config = AgenticRAGConfig.load(tmp_path / "missing.json")
        assert config.routing.max_models == 3

    def test_round_trip(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        config = AgenticRAGConfig()
        config.routing.max_models = 5
        config.orchestrator.intelligence_level = "PREDICTIVE"
        config.logging.decision_log_enabled = True
        config.save(path)

        loaded = AgenticRAGConfig.load(path)
        assert loaded.routing.max_models == 5
        assert loaded.orchestrator.intelligence_level == "PREDICTIVE"
        assert loaded.logging.decision_log_enabled is True

    def test_partial_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"learning": {"max_entries": 10}}))
        config = AgenticRAGConfig.load(path)
        assert config.learning.max_entries == 10
        assert config.prediction.ttl_seconds == 3600

    def test_integer_level_migrated(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"orchestrator": {"intelligence_level": 3}}))
        config = AgenticRAGConfig.load(path)
        assert config.orchestrator.intelligence_level == "PREDICTIVE"
