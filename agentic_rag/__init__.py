"""
Agentic RAG: decision-driven retrieval and model routing.

Decides per request what context to retrieve, gathers it, routes the
request to specialist models and delegates the final answer.

Implements:
- Heuristic request classification
- Signal-driven model routing over a static model registry
- Autonomous retrieval decisions with per-decision failure isolation
- Cross-session learning and predictive context preparation
"""

__version__ = "0.1.0"

# Message backends
from .backend import BackendResponse, InMemoryBackend, LLMBackend, MessageBackend

# Configuration
from .config import AgenticRAGConfig, default_config

# Decision logging
from .decision_log import DecisionLogConfig, DecisionLogger, DecisionLogRecord

# Decisions and executors
from .decisions import (
    Decision,
    DecisionExecutor,
    EnhancedContext,
    ExecutorRegistry,
)

# Learning and prediction
from .learning import CrossSessionLearner, LearningSummary, SessionData
from .predictive import Prediction, PredictiveContextEngine

# Memory
from .memory import AgenticMemorySystem, MemorySearchResult, decide_strategy

# Models and routing
from .model_registry import MODEL_REGISTRY, ModelProfile, get_model
from .model_router import IntelligentModelRouter, OrchestraManager

# Orchestration
from .orchestrator import (
    AgenticRAGOrchestrator,
    AgenticResponse,
    OrchestrationState,
    RAGMetrics,
)

# Classification
from .request_classifier import extract_request_signals

# Types
from .types import (
    AgenticRAGError,
    DecisionAlreadyExecutedError,
    DecisionExecutionError,
    DecisionType,
    DelegationError,
    IntelligenceLevel,
    MemorySearchStrategy,
    ModelCapability,
    RequestSignals,
    UnknownModelError,
)

__all__ = [
    # Backends
    "BackendResponse",
    "InMemoryBackend",
    "LLMBackend",
    "MessageBackend",
    # Config
    "AgenticRAGConfig",
    "default_config",
    # Decision logging
    "DecisionLogConfig",
    "DecisionLogRecord",
    "DecisionLogger",
    # Decisions
    "Decision",
    "DecisionExecutor",
    "EnhancedContext",
    "ExecutorRegistry",
    # Learning and prediction
    "CrossSessionLearner",
    "LearningSummary",
    "Prediction",
    "PredictiveContextEngine",
    "SessionData",
    # Memory
    "AgenticMemorySystem",
    "MemorySearchResult",
    "decide_strategy",
    # Models and routing
    "IntelligentModelRouter",
    "MODEL_REGISTRY",
    "ModelProfile",
    "OrchestraManager",
    "get_model",
    # Orchestration
    "AgenticRAGOrchestrator",
    "AgenticResponse",
    "OrchestrationState",
    "RAGMetrics",
    # Classification
    "extract_request_signals",
    # Types
    "AgenticRAGError",
    "DecisionAlreadyExecutedError",
    "DecisionExecutionError",
    "DecisionType",
    "DelegationError",
    "IntelligenceLevel",
    "MemorySearchStrategy",
    "ModelCapability",
    "RequestSignals",
    "UnknownModelError",
]
