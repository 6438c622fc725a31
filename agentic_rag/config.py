"""
Configuration management for the agentic RAG router.

Settings live in a single JSON file (default
``~/.config/agentic-rag/config.json``); missing sections fall back to the
dataclass defaults.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "agentic-rag" / "config.json"


@dataclass
class RoutingConfig:
    """Configuration for model selection."""

    # Cap for IntelligentModelRouter.select_models
    max_models: int = 3
    # Cap for the orchestrator's final model list
    agentic_max_models: int = 4
    # Complexity score above which the deep thinker joins
    complexity_threshold: float = 0.7
    # Session context keys above which context expansion is forced
    session_context_expansion_keys: int = 3
    # Routing entries kept for inspection
    routing_history_limit: int = 1000


@dataclass
class OrchestratorSettings:
    """Configuration for the decision orchestrator."""

    intelligence_level: str = "AUTONOMOUS"
    history_limit: int = 100
    enable_predictions: bool = True


@dataclass
class LearningConfig:
    """Configuration for the cross-session learner."""

    max_entries: int = 500
    default_success_rate: float = 0.85


@dataclass
class PredictionConfig:
    """Configuration for the predictive context engine."""

    ttl_seconds: int = 3600
    max_entries: int = 1000


@dataclass
class BackendConfig:
    """Configuration for the LLM-backed message backend."""

    provider: Literal["anthropic", "openai"] = "anthropic"
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 4096
    temperature: float = 0.0


@dataclass
class LoggingConfig:
    """Configuration for decision logging."""

    level: str = "INFO"
    decision_log_enabled: bool = False
    decision_log_path: str = "~/.agentic-rag/decisions.jsonl"


@dataclass
class AgenticRAGConfig:
    """Complete configuration."""

    routing: RoutingConfig = field(default_factory=RoutingConfig)
    orchestrator: OrchestratorSettings = field(default_factory=OrchestratorSettings)
    learning: LearningConfig = field(default_factory=LearningConfig)
    prediction: PredictionConfig = field(default_factory=PredictionConfig)
    backend: BackendConfig = field(default_factory=BackendConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: Path | None = None) -> "AgenticRAGConfig":
        """Load configuration from file."""
        if path is None:
            path = DEFAULT_CONFIG_PATH

        if not path.exists():
            return cls()

        with open(path) as f:
            data = json.load(f)

        # Older files stored the level as an integer
        orchestrator_data = dict(data.get("orchestrator", {}))
        level = orchestrator_data.get("intelligence_level")
        if isinstance(level, int):
            from .types import IntelligenceLevel

            orchestrator_data["intelligence_level"] = IntelligenceLevel(level).name

        return cls(
            routing=RoutingConfig(**data.get("routing", {})),
            orchestrator=OrchestratorSettings(**orchestrator_data),
            learning=LearningConfig(**data.get("learning", {})),
            prediction=PredictionConfig(**data.get("prediction", {})),
            backend=BackendConfig(**data.get("backend", {})),
            logging=LoggingConfig(**data.get("logging", {})),
        )

    def save(self, path: Path | None = None) -> None:
        """Save configuration to file."""
        if path is None:
            path = DEFAULT_CONFIG_PATH

        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(
                {
                    "routing": self.routing.__dict__,
                    "orchestrator": self.orchestrator.__dict__,
                    "learning": self.learning.__dict__,
                    "prediction": self.prediction.__dict__,
                    "backend": self.backend.__dict__,
                    "logging": self.logging.__dict__,
                },
                f,
                indent=2,
            )


# Default configuration instance
default_config = AgenticRAGConfig()
