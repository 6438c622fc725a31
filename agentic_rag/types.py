"""
Shared type definitions for the agentic RAG router.

Enums for decision types, intelligence levels and model metadata, the
pydantic signal models produced by the request classifier, and the
error hierarchy used across the package.
"""

from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, Field


class DecisionType(str, Enum):
    """Kinds of decision the orchestrator can make for a request."""

    MEMORY_SEARCH = "memory_search"
    CONTEXT_EXPANSION = "context_expansion"
    CROSS_SESSION_LEARNING = "cross_session_learning"
    TOOL_ROUTING = "tool_routing"


class IntelligenceLevel(IntEnum):
    """
    Ordered autonomy levels.

    Higher levels unlock more decision types: cross-session learning fires
    at AUTONOMOUS and above, predictive preparation at PREDICTIVE and above.
    """

    REACTIVE = 1  # Only responds to direct requests
    PROACTIVE = 2  # Anticipates needs
    PREDICTIVE = 3  # Predicts future context needs
    AUTONOMOUS = 4  # Makes independent decisions
    ORCHESTRATIVE = 5  # Coordinates across every model

    @classmethod
    def parse(cls, value: "IntelligenceLevel | int | str") -> "IntelligenceLevel":
        """Coerce an enum member, integer or (case-insensitive) name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError as e:
                raise ValueError(f"Unknown intelligence level: {value!r}") from e
        return cls(value)


class ModelCapability(str, Enum):
    """Capability tags attached to model profiles."""

    SPEED = "speed"
    REASONING = "reasoning"
    THINKING = "thinking"
    CREATIVE = "creative"
    CODE_GENERATION = "code_generation"
    DOCUMENT_ANALYSIS = "document_analysis"
    MULTIMODAL = "multimodal"
    LONG_OUTPUT = "long_output"
    BATCH_PROCESSING = "batch_processing"
    CACHED_CONTENT = "cached_content"
    REAL_TIME = "real_time"
    LIVE_COLLABORATION = "live_collaboration"
    BIDIRECTIONAL = "bidirectional"


class LatencyTier(IntEnum):
    """Latency tiers, ordered fastest first."""

    ULTRA_FAST = 0
    FAST = 1
    MEDIUM = 2
    SLOW = 3


class CostTier(IntEnum):
    """Cost tiers, ordered cheapest first."""

    FREE = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3


class RequestSignals(BaseModel):
    """
    Intent signals extracted from a single request.

    Every field is computed independently from the request text, so two
    extractions of the same text are always equal.
    """

    # Agentic decision signals
    explanation_intent: bool = False
    code_intent: bool = False
    creative_intent: bool = False
    tool_required_intent: bool = False
    system_knowledge_intent: bool = False
    conceptual_intent: bool = False
    high_precision_intent: bool = False
    complex_intent: bool = False

    # Model router signals
    needs_complex_reasoning: bool = False
    needs_speed: bool = False
    needs_creativity: bool = False
    needs_large_context: bool = False
    needs_code_specialist: bool = False
    needs_integration: bool = False

    # Numeric signals
    word_count: int = 0
    complexity_score: float = Field(default=0.0, ge=0.0, le=1.0)

    def active(self) -> list[str]:
        """Names of the boolean signals that fired."""
        return [name for name, value in self.model_dump().items() if value is True]


class MemorySearchStrategy(BaseModel):
    """How memory should be searched for one request."""

    model_config = ConfigDict(frozen=True)

    personal_search: bool = True
    system_search: bool = False
    expanded_search: bool = False
    confidence_threshold: float = Field(default=0.5, ge=0.0, le=1.0)


# Error classes


class AgenticRAGError(Exception):
    """Base class for agentic RAG errors."""

    pass


class UnknownModelError(AgenticRAGError, KeyError):
    """Requested model key is not in the registry."""

    def __init__(self, model_key: str):
        self.model_key = model_key
        super().__init__(f"Unknown model: {model_key}")


class DecisionExecutionError(AgenticRAGError):
    """A decision executor failed."""

    def __init__(self, decision_id: str, decision_type: DecisionType, cause: str):
        self.decision_id = decision_id
        self.decision_type = decision_type
        self.cause = cause
        super().__init__(f"Decision {decision_id} ({decision_type.value}) failed: {cause}")


class DecisionAlreadyExecutedError(AgenticRAGError):
    """A decision was executed more than once."""

    def __init__(self, decision_id: str):
        self.decision_id = decision_id
        super().__init__(f"Decision {decision_id} has already been executed")


class DelegationError(AgenticRAGError):
    """The message backend could not produce a response."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Delegation failed: {reason}")


__all__ = [
    "AgenticRAGError",
    "CostTier",
    "DecisionAlreadyExecutedError",
    "DecisionExecutionError",
    "DecisionType",
    "DelegationError",
    "IntelligenceLevel",
    "LatencyTier",
    "MemorySearchStrategy",
    "ModelCapability",
    "RequestSignals",
    "UnknownModelError",
]
